from __future__ import annotations

from typing import Iterable, Protocol

from chat_engine.domain.entities.user import User


class UserReader(Protocol):
    def get_by_id(self, user_id: str) -> User | None: ...

    def exists(self, user_id: str) -> bool: ...


class UserWriter(Protocol):
    def put(self, user: User) -> None: ...

    def put_many(self, users: Iterable[User]) -> None: ...
