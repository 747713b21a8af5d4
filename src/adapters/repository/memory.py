"""
In-memory repository adapters - Dict-backed store protocol implementations.

Used by the test suite and by local runs with STORAGE_BACKEND=memory.
Each call holds the store lock, which gives the same per-record atomic
update guarantee the PostgreSQL adapter relies on. Nothing is durable.
"""

import threading
import uuid
from dataclasses import replace
from datetime import UTC, datetime

from src.domain.models import User, VerificationToken


class InMemoryUserRepository:
    """Implements UserRepository protocol with a dict keyed by user id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: dict[str, User] = {}

    def find_by_email(self, email: str) -> User | None:
        with self._lock:
            return next((u for u in self._users.values() if u.email == email), None)

    def find_by_id(self, user_id: str) -> User | None:
        with self._lock:
            return self._users.get(user_id)

    def create(self, name: str, email: str, password_hash: str) -> User | None:
        with self._lock:
            if any(u.email == email for u in self._users.values()):
                return None
            user = User(id=str(uuid.uuid4()), email=email, name=name, password_hash=password_hash)
            self._users[user.id] = user
            return user

    def update_verified(self, user_id: str, verified: bool) -> None:
        with self._lock:
            if user_id in self._users:
                self._users[user_id] = replace(self._users[user_id], verified=verified)

    def update_tokens(self, user_id: str, tokens: tuple[str, ...]) -> None:
        with self._lock:
            if user_id in self._users:
                self._users[user_id] = replace(self._users[user_id], tokens=tuple(tokens))


class InMemoryVerificationTokenRepository:
    """Implements VerificationTokenRepository protocol, one slot per owner."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tokens: dict[str, VerificationToken] = {}

    def find_by_owner(self, owner: str) -> VerificationToken | None:
        with self._lock:
            return self._tokens.get(owner)

    def create(self, owner: str, token_hash: str) -> VerificationToken:
        token = VerificationToken(
            id=str(uuid.uuid4()),
            owner=owner,
            token_hash=token_hash,
            created_at=datetime.now(UTC),
        )
        with self._lock:
            self._tokens[owner] = token
        return token

    def delete_by_owner(self, owner: str) -> None:
        with self._lock:
            self._tokens.pop(owner, None)

    def delete_by_id(self, token_id: str) -> None:
        with self._lock:
            for owner, token in list(self._tokens.items()):
                if token.id == token_id:
                    del self._tokens[owner]
