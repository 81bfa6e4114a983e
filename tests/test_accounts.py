"""Unit tests for auth/accounts.py and auth/store.py.

Covers:
- register_account validates, hashes and persists (never the raw password)
- duplicate email -> AccountExistsError
- authenticate returns the credential only for the right password
- unknown email still runs bcrypt (verify_dummy)
- fetch/delete on the store
"""

from unittest.mock import patch

import pytest

from auth.accounts import authenticate, register_account
from auth.errors import AccountExistsError, AccountNotFoundError, PasswordMissingSpecial
from auth.passwords import PasswordHasher
from auth.store import AccountStore

EMAIL = "user@example.com"
PASSWORD = "Abc123!@"


class TestRegisterAccount:
    def test_persists_hash_not_password(self, account_store: AccountStore, hasher: PasswordHasher) -> None:
        credential = register_account(account_store, hasher, EMAIL, PASSWORD)
        stored = account_store.fetch_credential(EMAIL)
        assert stored.account_id == credential.account_id
        assert stored.password_hash != PASSWORD
        assert hasher.verify(PASSWORD, stored.password_hash)
        assert stored.created_at

    def test_rejects_policy_violation_before_touching_store(
        self, account_store: AccountStore, hasher: PasswordHasher
    ) -> None:
        with pytest.raises(PasswordMissingSpecial):
            register_account(account_store, hasher, EMAIL, "Abcdefg1")
        with pytest.raises(AccountNotFoundError):
            account_store.fetch_credential(EMAIL)

    def test_duplicate_email(self, account_store: AccountStore, hasher: PasswordHasher) -> None:
        register_account(account_store, hasher, EMAIL, PASSWORD)
        with pytest.raises(AccountExistsError):
            register_account(account_store, hasher, EMAIL, "Other123!")

    def test_account_ids_are_unique(self, account_store: AccountStore, hasher: PasswordHasher) -> None:
        first = register_account(account_store, hasher, "one@example.com", PASSWORD)
        second = register_account(account_store, hasher, "two@example.com", PASSWORD)
        assert first.account_id != second.account_id


class TestAuthenticate:
    def test_right_password(self, account_store: AccountStore, hasher: PasswordHasher) -> None:
        created = register_account(account_store, hasher, EMAIL, PASSWORD)
        credential = authenticate(account_store, hasher, EMAIL, PASSWORD)
        assert credential is not None
        assert credential.account_id == created.account_id

    def test_wrong_password(self, account_store: AccountStore, hasher: PasswordHasher) -> None:
        register_account(account_store, hasher, EMAIL, PASSWORD)
        assert authenticate(account_store, hasher, EMAIL, "Abc123!#") is None

    def test_unknown_email_runs_bcrypt(self, account_store: AccountStore, hasher: PasswordHasher) -> None:
        with patch.object(hasher, "verify_dummy", wraps=hasher.verify_dummy) as dummy:
            assert authenticate(account_store, hasher, "ghost@example.com", PASSWORD) is None
        dummy.assert_called_once_with(PASSWORD)

    def test_malformed_email(self, account_store: AccountStore, hasher: PasswordHasher) -> None:
        assert authenticate(account_store, hasher, "ab", PASSWORD) is None

    def test_email_match_is_exact(self, account_store: AccountStore, hasher: PasswordHasher) -> None:
        register_account(account_store, hasher, EMAIL, PASSWORD)
        assert authenticate(account_store, hasher, EMAIL.upper(), PASSWORD) is None


class TestAccountStore:
    def test_fetch_unknown(self, account_store: AccountStore) -> None:
        with pytest.raises(AccountNotFoundError):
            account_store.fetch_credential("nobody@example.com")

    def test_delete(self, account_store: AccountStore) -> None:
        account_store.create_account(EMAIL, "$2b$04$hash")
        assert account_store.delete_account(EMAIL) is True
        assert account_store.delete_account(EMAIL) is False
        with pytest.raises(AccountNotFoundError):
            account_store.fetch_credential(EMAIL)

    def test_ping(self, account_store: AccountStore) -> None:
        assert account_store.ping() is True
