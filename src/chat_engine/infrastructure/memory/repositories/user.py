from __future__ import annotations

from typing import Iterable

from chat_engine.domain.entities.user import User
from chat_engine.infrastructure.memory.session import MemorySession


class UserReaderRepo:
    def __init__(self, session: MemorySession) -> None:
        self._session = session

    def get_by_id(self, user_id: str) -> User | None:
        return self._session.users.get(user_id)

    def exists(self, user_id: str) -> bool:
        return user_id in self._session.users


class UserWriterRepo:
    def __init__(self, session: MemorySession) -> None:
        self._session = session

    def put(self, user: User) -> None:
        self._session.users[user.id] = user

    def put_many(self, users: Iterable[User]) -> None:
        for user in users:
            self.put(user)
