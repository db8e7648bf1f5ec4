"""User use cases."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class UserOutput:
    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-serialisable representation of the user."""
        return {"id": self.id, "name": self.name}


class UserUseCase:
    """Looks users up through a user repository."""

    def __init__(self, user_repository: Any) -> None:
        self.user_repository = user_repository

    def find_user_by_id(self, user_id: str) -> UserOutput:
        """Return the user with the given id."""
        user = self.user_repository.find_user_by_id(user_id)
        return UserOutput(id=user.id, name=user.name)