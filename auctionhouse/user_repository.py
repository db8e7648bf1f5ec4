"""MongoDB storage for users."""

from __future__ import annotations

from typing import Any

from pymongo.errors import PyMongoError

from auctionhouse import applog
from auctionhouse.entities import User
from auctionhouse.errors import internal_server_error, not_found_error


class UserRepository:
    """Reads users from the "users" collection."""

    def __init__(self, database: Any) -> None:
        self.collection = database["users"]

    def find_user_by_id(self, user_id: str) -> User:
        """Return the user with the given id, or raise a not-found error."""
        try:
            document = self.collection.find_one({"_id": user_id})
        except PyMongoError as err:
            applog.error("Error trying to find user by userId", err)
            raise internal_server_error("Error trying to find user by userId") from err

        if document is None:
            message = f"User not found with this id = {user_id}"
            applog.error(message, LookupError("no documents in result"))
            raise not_found_error(message)

        return User(id=document.get("_id", ""), name=document.get("name", ""))