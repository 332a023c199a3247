"""Auth endpoints: register, login and the current profile."""

from fastapi import APIRouter, Depends, HTTPException, status

from factory import ServiceFactory
from domain.exceptions import AuthenticationError, DuplicateAccountError
from application.dto import RegisterRequest, LoginRequest
from adapters.rest.dependencies import CurrentUser, get_current_user, get_factory
from adapters.rest.schemas import RegisterBody, LoginBody, ProfileOut, TokenResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    body: RegisterBody,
    factory: ServiceFactory = Depends(get_factory),
):
    auth_service = factory.create_authentication_service()
    try:
        token = await auth_service.register(RegisterRequest(
            email=body.email,
            password=body.password,
            username=body.username,
        ))
    except DuplicateAccountError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        )
    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        user_id=token.user_id,
        email=token.email,
        role=token.role,
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginBody,
    factory: ServiceFactory = Depends(get_factory),
):
    auth_service = factory.create_authentication_service()
    try:
        token = await auth_service.login(LoginRequest(
            email=body.email,
            password=body.password,
        ))
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        )
    return TokenResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        user_id=token.user_id,
        email=token.email,
        role=token.role,
    )


@router.get("/me", response_model=ProfileOut)
async def me(user: CurrentUser = Depends(get_current_user)):
    """The authenticated caller, as read from the bearer token."""
    return ProfileOut(user_id=user.user_id, email=user.email, role=user.role)
