from __future__ import annotations

import re
import uuid

from presence_chat.application.dto.auth import SignupDTO
from presence_chat.application.dto.principal import Principal
from presence_chat.application.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from presence_chat.application.ports.auth import PasswordHasher
from presence_chat.application.ports.clock import Clock, SystemClock
from presence_chat.application.uow import UnitOfWork
from presence_chat.domain.entities.user import User

USERNAME_RE = re.compile(r"^[A-Za-z0-9_.-]{3,32}$")
PASSWORD_MIN_LENGTH = 6
DISPLAY_NAME_MAX_LENGTH = 64


def _normalize_username(username: str) -> str:
    return username.strip().lower()


def _validate_signup(data: SignupDTO) -> str:
    """Check signup input and return the display name to store."""
    username = data.username.strip()
    if not USERNAME_RE.match(username):
        raise ValidationError(
            "Username must be 3-32 characters of letters, digits, '_', '.' or '-'"
        )
    if len(data.password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    display_name = (data.display_name or "").strip() or username
    if len(display_name) > DISPLAY_NAME_MAX_LENGTH:
        raise ValidationError(
            f"Display name must be at most {DISPLAY_NAME_MAX_LENGTH} characters"
        )
    return display_name


async def create_user(
    data: SignupDTO,
    hasher: PasswordHasher,
    uow: UnitOfWork,
    clock: Clock | None = None,
) -> User:
    """Register a new user.

    Raises ValidationError for bad input and ConflictError when the
    username is already taken. Nothing is written in either case.
    """
    display_name = _validate_signup(data)
    username = _normalize_username(data.username)

    if await uow.users.get_by_username(username) is not None:
        raise ConflictError("Username already exists")

    user = User(
        id=str(uuid.uuid4()),
        username=username,
        display_name=display_name,
        password_hash=hasher.hash(data.password),
        created_at=(clock or SystemClock()).now(),
    )
    user = await uow.users_w.create(user)
    await uow.commit()
    return user


async def authenticate(
    username: str,
    password: str,
    hasher: PasswordHasher,
    uow: UnitOfWork,
) -> User:
    """Return the user for valid credentials, else raise UnauthorizedError."""
    user = await uow.users.get_by_username(_normalize_username(username))
    if user is None or not hasher.verify(password, user.password_hash):
        raise UnauthorizedError("Invalid username or password")
    return user


async def get_user(principal: Principal, uow: UnitOfWork) -> User:
    user = await uow.users.get_by_id(principal.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def principal_for(user: User) -> Principal:
    return Principal(user_id=user.id, display_name=user.display_name)
