"""
auth/store.py -- SQLAlchemy Core persistence layer for accounts.

Pattern: Repository + Data Mapper. AccountStore is the repository;
_row_to_credential is the mapper. Route code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.
  Only the bcrypt hash is stored; the raw password never reaches this module.

Duplicate emails are rejected by the UNIQUE constraint, not by a read-before-
write check, so two concurrent signups for the same email cannot both win.
The loser surfaces as AccountExistsError.

Layer rule: no imports from api/, core/ or catalog/.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import Column, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.errors import AccountExistsError, AccountNotFoundError
from auth.models import Credential

logger = logging.getLogger("storefront.auth")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'storefront.db'}"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_accounts = Table(
    "account",
    _metadata,
    Column("id", String(36), primary_key=True),  # UUID4 text
    Column("email", String(255), nullable=False, unique=True),
    Column("hash", Text, nullable=False),  # bcrypt
    Column("created_at", String(32), nullable=False),
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block during writes."""
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AccountStore:
    """Repository for Credential records.

    Usage:
        store = AccountStore()
        account_id = store.create_account("user@example.com", hasher.hash(password))
        credential = store.fetch_credential("user@example.com")
        store.close()
    """

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    def create_account(self, email: str, password_hash: str) -> str:
        """Insert a new account and return its generated id.

        Raises AccountExistsError if the email is already registered. Other
        database errors propagate unchanged.
        """
        account_id = str(uuid.uuid4())
        try:
            with self.engine.connect() as conn:
                conn.execute(
                    _accounts.insert().values(
                        id=account_id,
                        email=email,
                        hash=password_hash,
                        created_at=_now_iso(),
                    )
                )
                conn.commit()
        except IntegrityError as exc:
            logger.info("create_account: email already registered")
            raise AccountExistsError() from exc
        logger.debug("create_account: created %s", account_id)
        return account_id

    def fetch_credential(self, email: str) -> Credential:
        """Return the stored credential for email (exact match).

        Raises AccountNotFoundError if no account exists.
        """
        with self.engine.connect() as conn:
            row = conn.execute(_accounts.select().where(_accounts.c.email == email)).fetchone()
        if row is None:
            raise AccountNotFoundError()
        return _row_to_credential(row)

    def delete_account(self, email: str) -> bool:
        """Delete the account for email. Returns False if none existed."""
        with self.engine.connect() as conn:
            result = conn.execute(_accounts.delete().where(_accounts.c.email == email))
            conn.commit()
        if result.rowcount == 0:
            logger.warning("delete_account: no account for the given email")
        return result.rowcount > 0

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Account database ping failed")
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_credential(row) -> Credential:
    return Credential(
        account_id=row.id,
        email=row.email,
        password_hash=row.hash,
        created_at=row.created_at,
    )
