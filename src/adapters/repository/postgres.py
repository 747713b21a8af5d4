"""
PostgreSQL repository adapters - Implement the domain store protocols.

This module provides the PostgreSQL implementations of the domain's
repository ports using psycopg3 with raw SQL.

Atomicity notes:
- users.email is UNIQUE; create() uses INSERT ... ON CONFLICT DO NOTHING
  so concurrent registrations for one email yield exactly one account.
- users.tokens is a TEXT[] column replaced wholesale by update_tokens(),
  a single-row UPDATE (per-record atomic, last writer wins).
- verification_tokens.owner is UNIQUE; create() upserts on owner so the
  at-most-one-token invariant also holds under concurrent re-issues.
"""

import logging
import uuid
from pathlib import Path

from psycopg_pool import ConnectionPool

from src.domain.models import User, VerificationToken

logger = logging.getLogger(__name__)

_USER_COLUMNS = "id::text, email, name, password_hash, verified, tokens"
_TOKEN_COLUMNS = "id::text, owner::text, token_hash, created_at"


def _is_uuid(value: str) -> bool:
    """Ids are UUIDs; anything else cannot match a row."""
    try:
        uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


def _row_to_user(row: tuple) -> User:
    return User(
        id=row[0],
        email=row[1],
        name=row[2],
        password_hash=row[3],
        verified=row[4],
        tokens=tuple(row[5] or ()),
    )


def _row_to_token(row: tuple) -> VerificationToken:
    return VerificationToken(id=row[0], owner=row[1], token_hash=row[2], created_at=row[3])


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_by_email(self, email: str) -> User | None:
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s"
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()
        return _row_to_user(row) if row is not None else None

    def find_by_id(self, user_id: str) -> User | None:
        if not _is_uuid(user_id):
            return None
        sql = f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s"
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (user_id,))
            row = cursor.fetchone()
        return _row_to_user(row) if row is not None else None

    def create(self, name: str, email: str, password_hash: str) -> User | None:
        """
        Atomically create an unverified user.

        Returns:
            The created User, or None if the email is already taken
        """
        sql = f"""
            INSERT INTO users (email, name, password_hash)
            VALUES (%s, %s, %s)
            ON CONFLICT (email) DO NOTHING
            RETURNING {_USER_COLUMNS}
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email, name, password_hash))
            row = cursor.fetchone()
            conn.commit()
        return _row_to_user(row) if row is not None else None

    def update_verified(self, user_id: str, verified: bool) -> None:
        if not _is_uuid(user_id):
            return
        with self._pool.connection() as conn:
            conn.execute("UPDATE users SET verified = %s WHERE id = %s", (verified, user_id))
            conn.commit()

    def update_tokens(self, user_id: str, tokens: tuple[str, ...]) -> None:
        if not _is_uuid(user_id):
            return
        with self._pool.connection() as conn:
            conn.execute(
                "UPDATE users SET tokens = %s::text[] WHERE id = %s",
                (list(tokens), user_id),
            )
            conn.commit()


class PostgresVerificationTokenRepository:
    """Implements VerificationTokenRepository protocol via psycopg3."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def find_by_owner(self, owner: str) -> VerificationToken | None:
        if not _is_uuid(owner):
            return None
        sql = f"SELECT {_TOKEN_COLUMNS} FROM verification_tokens WHERE owner = %s"
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (owner,))
            row = cursor.fetchone()
        return _row_to_token(row) if row is not None else None

    def create(self, owner: str, token_hash: str) -> VerificationToken:
        """
        Store a hashed token for ``owner``.

        Upserts on owner: a racing re-issue replaces the live token instead
        of failing on the UNIQUE constraint.
        """
        sql = f"""
            INSERT INTO verification_tokens (owner, token_hash, created_at)
            VALUES (%s, %s, NOW())
            ON CONFLICT (owner) DO UPDATE
            SET id = gen_random_uuid(),
                token_hash = EXCLUDED.token_hash,
                created_at = NOW()
            RETURNING {_TOKEN_COLUMNS}
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (owner, token_hash))
            row = cursor.fetchone()
            conn.commit()
        return _row_to_token(row)

    def delete_by_owner(self, owner: str) -> None:
        if not _is_uuid(owner):
            return
        with self._pool.connection() as conn:
            conn.execute("DELETE FROM verification_tokens WHERE owner = %s", (owner,))
            conn.commit()

    def delete_by_id(self, token_id: str) -> None:
        if not _is_uuid(token_id):
            return
        with self._pool.connection() as conn:
            conn.execute("DELETE FROM verification_tokens WHERE id = %s", (token_id,))
            conn.commit()


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
