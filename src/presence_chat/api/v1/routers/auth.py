from __future__ import annotations

from fastapi import APIRouter

from presence_chat.api.deps import CurrentPrincipal, HasherDep, IssuerDep, UoWDep
from presence_chat.api.v1.schemas.auth import (
    AuthResponse,
    LoginRequest,
    SignupRequest,
    UserResponse,
)
from presence_chat.application.dto.auth import SignupDTO
from presence_chat.services import auth_service

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(
    body: SignupRequest,
    uow: UoWDep,
    hasher: HasherDep,
    issuer: IssuerDep,
) -> AuthResponse:
    user = await auth_service.create_user(
        SignupDTO(
            username=body.username,
            password=body.password,
            display_name=body.display_name,
        ),
        hasher,
        uow,
    )
    token = issuer.issue(auth_service.principal_for(user))
    return AuthResponse(
        user=UserResponse.model_validate(user, from_attributes=True),
        access_token=token,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    uow: UoWDep,
    hasher: HasherDep,
    issuer: IssuerDep,
) -> AuthResponse:
    user = await auth_service.authenticate(body.username, body.password, hasher, uow)
    token = issuer.issue(auth_service.principal_for(user))
    return AuthResponse(
        user=UserResponse.model_validate(user, from_attributes=True),
        access_token=token,
    )


@router.get("/me", response_model=UserResponse)
async def me(principal: CurrentPrincipal, uow: UoWDep) -> UserResponse:
    user = await auth_service.get_user(principal, uow)
    return UserResponse.model_validate(user, from_attributes=True)
