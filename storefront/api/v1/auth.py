"""Account endpoints and auth dependencies (get_current_user, require_admin)."""

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from storefront.core.config import get_settings
from storefront.core.database import get_db
from storefront.core.security import (
    PasswordHasher,
    ResetTokenGenerator,
    TokenError,
    TokenExpired,
    TokenIssuer,
)
from storefront.models import Role, User
from storefront.schemas.auth import (
    ChangePasswordRequest,
    CurrentUser,
    ForgotPasswordRequest,
    LangCode,
    RefreshResponse,
    ResetPasswordRequest,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    StatusMessage,
    UserProfile,
)
from storefront.services.auth import AuthError, AuthService, FailureKind
from storefront.services.mailer import Mailer, build_mailer
from storefront.services.store import AuthStore

router = APIRouter()
security = HTTPBearer(auto_error=False)

REFRESH_COOKIE = "refresh_token"

FAILURE_STATUS = {
    FailureKind.CONFLICT: status.HTTP_409_CONFLICT,
    FailureKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    FailureKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    FailureKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    FailureKind.BAD_GATEWAY: status.HTTP_502_BAD_GATEWAY,
}


def _http_error(e: AuthError) -> HTTPException:
    return HTTPException(status_code=FAILURE_STATUS[e.kind], detail=e.message)


def _refresh_cookie_path() -> str:
    return f"{get_settings().API_V1_PREFIX}/auth"


def get_token_issuer() -> TokenIssuer:
    settings = get_settings()
    return TokenIssuer(
        access_secret=settings.ACCESS_TOKEN_SECRET.get_secret_value(),
        refresh_secret=settings.REFRESH_TOKEN_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
        access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def get_mailer() -> Mailer:
    return build_mailer(get_settings())


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
    tokens: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> AuthService:
    """Dependency: build the auth service for this request's session."""
    settings = get_settings()
    return AuthService(
        store=AuthStore(db),
        mailer=mailer,
        tokens=tokens,
        hasher=PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
        reset_tokens=ResetTokenGenerator(
            window=timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
        ),
        admin_base_url=settings.ADMIN_BASE_URL,
        client_base_url=settings.CLIENT_BASE_URL,
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> CurrentUser:
    """Dependency: require valid Bearer access token and return the current user. Raises 401 if missing or invalid."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        claims = tokens.verify_access_token(credentials.credentials)
    except TokenExpired:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except TokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = db.get(User, claims.id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return CurrentUser(id=user.id, email=user.email, role=user.role)


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require authenticated user with role ADMIN. Raises 403 otherwise."""
    if current_user.role != Role.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


@router.post("/signup", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
def sign_up(
    body: SignUpRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserProfile:
    """Register a customer account."""
    try:
        return service.sign_up(body.email, body.password, body.phone, body.full_name)
    except AuthError as e:
        raise _http_error(e) from e


@router.post("/signin", response_model=SignInResponse)
def sign_in(
    body: SignInRequest,
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
    admin: bool = False,
) -> SignInResponse:
    """
    Authenticate with email and password; returns an access token and the profile.
    Pass admin=true from the admin console: customer accounts are refused there.
    The refresh token is set as an httpOnly cookie scoped to the auth routes.
    """
    try:
        result = service.sign_in(body.email, body.password, admin=admin)
    except AuthError as e:
        raise _http_error(e) from e
    settings = get_settings()
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=result.refresh_token or "",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 3600,
        path=_refresh_cookie_path(),
        httponly=True,
        secure=settings.APP_ENV == "prod",
        samesite="lax",
    )
    return result


@router.post("/refresh", response_model=RefreshResponse)
def refresh(
    service: Annotated[AuthService, Depends(get_auth_service)],
    tokens: Annotated[TokenIssuer, Depends(get_token_issuer)],
    refresh_token: Annotated[str | None, Cookie(alias=REFRESH_COOKIE)] = None,
) -> RefreshResponse:
    """
    Mint a new access token. The caller proves the session with the refresh
    cookie set at sign-in; the user id comes from its verified claims.
    """
    if not refresh_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token missing",
        )
    try:
        claims = tokens.verify_refresh_token(refresh_token)
    except TokenError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message) from e
    try:
        return service.refresh_access_token(claims.id, presented_token=refresh_token)
    except AuthError as e:
        raise _http_error(e) from e


@router.post("/change-password", response_model=StatusMessage)
def change_password(
    body: ChangePasswordRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> StatusMessage:
    try:
        return service.change_password(current_user.id, body.old_password, body.new_password)
    except AuthError as e:
        raise _http_error(e) from e


@router.post("/forgot-password", response_model=StatusMessage)
def forgot_password(
    body: ForgotPasswordRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
    lang_code: LangCode = LangCode.EN,
    admin: bool = False,
) -> StatusMessage:
    """Email a password reset link pointing at the admin console or the storefront."""
    try:
        return service.forgot_password(body.email, lang_code=lang_code, admin=admin)
    except AuthError as e:
        raise _http_error(e) from e


@router.post("/reset-password", response_model=StatusMessage)
def reset_password(
    body: ResetPasswordRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> StatusMessage:
    try:
        return service.reset_password(body.token, body.reset_password)
    except AuthError as e:
        raise _http_error(e) from e


@router.post("/logout", response_model=StatusMessage)
def logout(
    response: Response,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> StatusMessage:
    response.delete_cookie(key=REFRESH_COOKIE, path=_refresh_cookie_path())
    return service.logout(current_user.id)
