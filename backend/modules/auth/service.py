"""
User account service.

Registers users, checks passwords and issues web session tokens.
"""

import logging
from typing import Optional

from .exceptions import InvalidCredentialsError, UserNotFoundError
from .interfaces import IUserRepository
from .models import LoginResult, User
from .passwords import hash_password, verify_password
from .tokens import TokenAuthenticator

logger = logging.getLogger(__name__)

# Compared against when the email is unknown, so both failure paths cost a bcrypt check.
_DUMMY_HASH = hash_password("ledgerly-timing-equalizer")


class UserService:
    """Account registration and password login."""

    def __init__(self, repository: IUserRepository, tokens: TokenAuthenticator):
        self._repository = repository
        self._tokens = tokens

    async def register(self, email: str, password: str) -> User:
        """
        Create a user with a bcrypt password hash.

        Raises:
            EmailAlreadyRegisteredError: Email already has an account
        """
        user = self._repository.create_user(email, hash_password(password))
        logger.info(f"Registered user {user.id}")
        return user

    async def login(self, email: str, password: str) -> LoginResult:
        """
        Verify credentials and issue a web token.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
        """
        user = self._repository.get_user_by_email(email)
        if user is None:
            verify_password(password, _DUMMY_HASH)
            raise InvalidCredentialsError()
        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        issued = self._tokens.issue(user.id)
        logger.info(f"User {user.id} logged in")
        return LoginResult(user=user, access_token=issued.token, expires_at=issued.expires_at)

    async def get_user(self, user_id: str) -> User:
        """
        Raises:
            UserNotFoundError: No such user
        """
        user: Optional[User] = self._repository.get_user_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user
