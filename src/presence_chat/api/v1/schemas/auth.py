from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SignupRequest(BaseModel):
    username: str
    password: str
    display_name: str | None = Field(default=None)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(BaseModel):
    username: str
    password: str


class UserResponse(BaseModel):
    id: str
    username: str
    display_name: str

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class AuthResponse(BaseModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
