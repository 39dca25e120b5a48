"""User accounts: login, staff provisioning and the protected administrator."""

from __future__ import annotations

import logging

from bitewave.config import ADMIN_USERNAME
from bitewave.errors import DuplicateUsername, InvalidCredentials, NotFound, ProtectedAccount, ValidationError
from bitewave.models import RecordKind, Role, User
from bitewave.record_store import RecordStore

logger = logging.getLogger(__name__)


class Directory:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def _find(self, username: str) -> User | None:
        for user in self.store.records(RecordKind.USERS):
            if user.username == username:
                return user
        return None

    def authenticate(self, username: str, password: str) -> User:
        """Return the account whose username and password match exactly."""
        # Credentials are stored and compared in plain form.
        user = self._find(username) if username and password else None
        if user is None or user.password != password:
            logger.info("Rejected login for %r", username)
            raise InvalidCredentials("Invalid username or password.")
        logger.info("User %r logged in as %s", user.username, user.role.label)
        return user

    def get_user(self, username: str) -> User:
        user = self._find(username)
        if user is None:
            raise NotFound(f"User {username!r} not found", details={"username": username})
        return user

    def list_users(self) -> list[User]:
        """All accounts sorted by username."""
        return sorted(self.store.records(RecordKind.USERS), key=lambda user: user.username)

    def staff_usernames(self) -> list[str]:
        """Usernames that may place orders."""
        return [user.username for user in self.list_users() if user.role is Role.STAFF]

    def count_staff(self) -> int:
        return len(self.staff_usernames())

    def create_staff(self, username: str, password: str, display_name: str) -> User:
        username = username.strip()
        password = password.strip()
        display_name = display_name.strip()
        if not (username and password and display_name):
            raise ValidationError("All fields required.")

        with self.store.lock:
            if self._find(username) is not None:
                raise DuplicateUsername(f"Username {username!r} exists.", details={"username": username})
            user = User(
                id=self.store.allocate(RecordKind.USERS),
                username=username,
                password=password,
                display_name=display_name,
                role=Role.STAFF,
            )
            self.store.put(RecordKind.USERS, user)
            self.store.persist(RecordKind.USERS)

        logger.info("Created staff user %r (id %d)", user.username, user.id)
        return user

    def edit_user(self, username: str, new_display_name: str, new_password: str) -> User:
        with self.store.lock:
            user = self.get_user(username)
            display_name, password = new_display_name.strip(), new_password.strip()
            if not display_name or not password:
                raise ValidationError("All fields required.", details={"username": username})
            user.display_name = display_name
            user.password = password
            self.store.persist(RecordKind.USERS)
        logger.info("Edited user %r", username)
        return user

    def delete_user(self, username: str) -> None:
        """Remove an account. The sentinel administrator cannot be removed."""
        if username == ADMIN_USERNAME:
            raise ProtectedAccount("Cannot delete admin.", details={"username": username})

        with self.store.lock:
            user = self.get_user(username)
            self.store.remove(RecordKind.USERS, user.id)
            self.store.persist(RecordKind.USERS)
        logger.info("Deleted user %r", username)
