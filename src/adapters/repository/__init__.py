"""Repository adapters - Database and in-memory implementations."""

from .memory import InMemoryUserRepository, InMemoryVerificationTokenRepository
from .postgres import PostgresUserRepository, PostgresVerificationTokenRepository, run_migrations

__all__ = [
    "InMemoryUserRepository",
    "InMemoryVerificationTokenRepository",
    "PostgresUserRepository",
    "PostgresVerificationTokenRepository",
    "run_migrations",
]
