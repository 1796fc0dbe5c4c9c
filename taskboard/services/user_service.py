"""User service: registration, login, profile and activation."""

import logging
from typing import List, Optional

from taskboard.core.exceptions import (
    AuthenticationError, ConflictError, ForbiddenError, NotFoundError,
)
from taskboard.core.security import hash_password, verify_password
from taskboard.domain.entities import (
    User, utcnow, validate_email, validate_full_name, validate_password, validate_username,
)
from taskboard.repositories.base import UserRepository

logger = logging.getLogger("taskboard")


class UserService:
    """Handles registration, authentication and user management."""

    def __init__(self, users: UserRepository):
        self.users = users

    def register(self, username: str, email: str, password: str, full_name: str) -> User:
        """Create a new active user.

        Raises:
            ValidationError: If a field is malformed.
            ConflictError: If the username or email is already taken.
        """
        username = validate_username(username)
        email = validate_email(email)
        full_name = validate_full_name(full_name)
        validate_password(password)

        if self.users.username_exists(username):
            raise ConflictError(f"Username '{username}' is already taken", code="user.username_taken")
        if self.users.email_exists(email):
            raise ConflictError(f"Email '{email}' is already registered", code="user.email_taken")

        user = self.users.create(User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
        ))
        logger.info("Registered user %s (%s)", user.username, user.id)
        return user

    def authenticate(self, username_or_email: str, password: str) -> User:
        """Check credentials and refresh ``last_login_at``.

        Raises:
            AuthenticationError: If the credentials are wrong or the account is deactivated.
        """
        login = (username_or_email or "").strip()
        user = self.users.get_by_email(login) if "@" in login else self.users.get_by_username(login)
        if user is None or not verify_password(password or "", user.password_hash):
            raise AuthenticationError("Invalid username/email or password", code="auth.invalid_credentials")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated", code="auth.account_inactive")

        user.record_login(utcnow())
        self.users.update_last_login(user.id, user.last_login_at)
        logger.info("User %s logged in", user.id)
        return user

    def get(self, user_id: str) -> User:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found", code="user.not_found")
        return user

    def list_users(self, active: Optional[bool] = None) -> List[User]:
        if active is None:
            return self.users.get_all()
        return self.users.list_by_active(active)

    def search(self, term: str) -> List[User]:
        term = (term or "").strip()
        if not term:
            return []
        return self.users.search(term)

    def _own_account(self, user_id: str, acting_user_id: str) -> User:
        user = self.get(user_id)
        if user_id != acting_user_id:
            raise ForbiddenError("Users can only manage their own account", code="user.self_only")
        return user

    def update_profile(self, user_id: str, acting_user_id: str,
                       full_name: Optional[str] = None, email: Optional[str] = None) -> User:
        user = self._own_account(user_id, acting_user_id)
        if email is not None:
            existing = self.users.get_by_email(validate_email(email))
            if existing is not None and existing.id != user.id:
                raise ConflictError(f"Email '{email}' is already registered", code="user.email_taken")
        user.update_profile(full_name=full_name, email=email)
        return self.users.update(user)

    def change_password(self, user_id: str, acting_user_id: str,
                        old_password: str, new_password: str) -> User:
        user = self._own_account(user_id, acting_user_id)
        if not verify_password(old_password or "", user.password_hash):
            raise AuthenticationError("Current password is incorrect", code="auth.invalid_credentials")
        user.password_hash = hash_password(validate_password(new_password))
        logger.info("User %s changed password", user.id)
        return self.users.update(user)

    def deactivate(self, user_id: str, acting_user_id: str) -> User:
        """Soft delete. The user keeps its board memberships and task history."""
        user = self._own_account(user_id, acting_user_id)
        user.deactivate()
        logger.info("User %s deactivated", user.id)
        return self.users.update(user)

    def activate(self, user_id: str, acting_user_id: str) -> User:
        user = self._own_account(user_id, acting_user_id)
        user.activate()
        logger.info("User %s reactivated", user.id)
        return self.users.update(user)
