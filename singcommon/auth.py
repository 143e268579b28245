"""Username and password verification against an in-memory user list."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True)
class User:
    username: str
    password: str


class Authenticator:
    """Checks credentials against the users given; a later entry for a name wins."""

    def __init__(self, users: Iterable[User]) -> None:
        self._storage: dict[str, str] = {}
        self._usernames: list[str] = []
        for user in users:
            self._storage[user.username] = user.password
            self._usernames.append(user.username)

    def verify(self, username: str, password: str) -> bool:
        stored = self._storage.get(username)
        return stored is not None and stored == password

    def users(self) -> list[str]:
        """Every username in the order given, repeats included."""
        return list(self._usernames)


def new_authenticator(users: Iterable[User]) -> Optional[Authenticator]:
    """An Authenticator for users, or None when there are none."""
    user_list = list(users)
    if not user_list:
        return None
    return Authenticator(user_list)