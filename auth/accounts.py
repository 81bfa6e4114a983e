"""
auth/accounts.py -- Registration and login flows.

Glues the validator, the hasher and the account store together. Token issue
stays with the caller so the HTTP layer decides how the token is delivered.

authenticate() always runs bcrypt, even when the email is unknown, so an
attacker cannot enumerate registered emails by timing the login endpoint.

Layer rule: no imports from api/, core/ or catalog/.
"""

from __future__ import annotations

import logging

from auth.errors import AccountNotFoundError, ValidationError
from auth.models import Credential
from auth.passwords import PasswordHasher
from auth.store import AccountStore
from auth.validation import validate_login, validate_registration

logger = logging.getLogger("storefront.auth")


def register_account(store: AccountStore, hasher: PasswordHasher, email: str, password: str) -> Credential:
    """Validate, hash and persist a new account.

    Raises ValidationError (first policy violation), HashingError or
    AccountExistsError.
    """
    validate_registration(email, password)
    password_hash = hasher.hash(password)
    account_id = store.create_account(email, password_hash)
    logger.info("Registered account %s", account_id)
    return Credential(account_id=account_id, email=email, password_hash=password_hash)


def authenticate(store: AccountStore, hasher: PasswordHasher, email: str, password: str) -> Credential | None:
    """Return the Credential if email/password are valid, otherwise None.

    Malformed input, unknown email and wrong password all return None; the
    caller answers every one of them with the same 401.
    """
    try:
        validate_login(email, password)
    except ValidationError as exc:
        logger.info("Login rejected by validation: %s", type(exc).__name__)
        return None

    try:
        credential = store.fetch_credential(email)
    except AccountNotFoundError:
        hasher.verify_dummy(password)
        logger.info("Login failed: unknown account")
        return None

    if not hasher.verify(password, credential.password_hash):
        logger.info("Login failed: wrong password for %s", credential.account_id)
        return None
    return credential
