"""Authentication flows: sign up/in, token refresh, password change/reset, logout."""

import enum
import logging
import secrets

from storefront.core.security import (
    Clock,
    PasswordHasher,
    ResetTokenGenerator,
    TokenExpired,
    TokenInvalid,
    TokenIssuer,
    utc_now,
)
from storefront.models import Role, User
from storefront.schemas.auth import (
    LangCode,
    RefreshResponse,
    SignInResponse,
    StatusMessage,
    TokenPayload,
    UserProfile,
)
from storefront.services.email_templates import reset_password_email
from storefront.services.mailer import MailDeliveryError, Mailer
from storefront.services.store import AuthStore, EmailTaken

logger = logging.getLogger(__name__)


class FailureKind(str, enum.Enum):
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    UNAUTHORIZED = "unauthorized"
    BAD_REQUEST = "bad_request"
    BAD_GATEWAY = "bad_gateway"


class AuthError(Exception):
    """A terminal auth failure; kind is stable, message is human-readable."""

    def __init__(self, kind: FailureKind, message: str) -> None:
        self.kind = kind
        self.message = message
        super().__init__(message)


class AuthService:
    """
    Compose the store, hasher, token issuer, reset-token generator and mailer
    into the account flows. Successes are returned; failures raise AuthError.
    """

    def __init__(
        self,
        store: AuthStore,
        mailer: Mailer,
        tokens: TokenIssuer,
        hasher: PasswordHasher,
        reset_tokens: ResetTokenGenerator,
        admin_base_url: str,
        client_base_url: str,
        clock: Clock = utc_now,
    ) -> None:
        self.store = store
        self.mailer = mailer
        self.tokens = tokens
        self.hasher = hasher
        self.reset_tokens = reset_tokens
        self.admin_base_url = admin_base_url.rstrip("/")
        self.client_base_url = client_base_url.rstrip("/")
        self._clock = clock

    def sign_up(
        self,
        email: str,
        password: str,
        phone: str | None = None,
        full_name: str | None = None,
    ) -> UserProfile:
        if self.store.find_user_by_email(email) is not None:
            raise AuthError(FailureKind.CONFLICT, "Email is already exist")
        try:
            user = self.store.create_user(
                email=email,
                password_hash=self.hasher.hash(password),
                phone=phone,
                full_name=full_name,
                role=Role.CUSTOMER,
            )
        except EmailTaken as e:
            raise AuthError(FailureKind.CONFLICT, "Email is already exist") from e
        self.store.create_permission_record(user)
        self.store.commit()
        logger.info("Account created", extra={"user_id": user.id})
        return UserProfile.model_validate(user)

    def sign_in(self, email: str, password: str, admin: bool = False) -> SignInResponse:
        user = self.store.find_user_by_email(email)
        if user is None:
            raise AuthError(FailureKind.NOT_FOUND, "Email is not correct")
        if not self.hasher.verify(password, user.password_hash):
            raise AuthError(FailureKind.FORBIDDEN, "Password is not correct")
        if admin and user.role == Role.CUSTOMER.value:
            raise AuthError(FailureKind.UNAUTHORIZED, "You're not authorize to proccess")

        claims = _claims_for(user)
        access = self.tokens.issue_access_token(claims)
        refresh_token = self.tokens.issue_refresh_token(claims)
        self.store.upsert_refresh_session(user.id, refresh_token)
        self.store.commit()
        logger.info("Signed in", extra={"user_id": user.id, "admin_context": admin})
        return SignInResponse(
            access_token=access.token,
            expires_in=access.expires_in_seconds,
            info=UserProfile.model_validate(user),
            refresh_token=refresh_token,
        )

    def refresh_access_token(
        self, user_id: int, presented_token: str | None = None
    ) -> RefreshResponse:
        """
        Mint an access token from the user's stored refresh session.

        When presented_token is given it must be the session's current token,
        so a token replaced by a later sign-in or removed by logout is refused.
        """
        auth_session = self.store.find_refresh_session_by_user_id(user_id)
        if auth_session is None:
            raise AuthError(FailureKind.FORBIDDEN, "Token not found")
        if presented_token is not None and not secrets.compare_digest(
            presented_token.encode("utf-8"), auth_session.token.encode("utf-8")
        ):
            raise AuthError(FailureKind.FORBIDDEN, "Token is invalid")
        try:
            claims = self.tokens.verify_refresh_token(auth_session.token)
        except TokenExpired as e:
            raise AuthError(FailureKind.FORBIDDEN, "Token is expired") from e
        except TokenInvalid as e:
            raise AuthError(FailureKind.FORBIDDEN, "Token is invalid") from e
        access = self.tokens.issue_access_token(claims)
        return RefreshResponse(access_token=access.token, expires_in=access.expires_in_seconds)

    def change_password(
        self, user_id: int, old_password: str, new_password: str
    ) -> StatusMessage:
        user = self.store.find_user_by_id(user_id)
        if user is None:
            raise AuthError(FailureKind.NOT_FOUND, "Customer not found")
        if not self.hasher.verify(old_password, user.password_hash):
            raise AuthError(FailureKind.FORBIDDEN, "Old password is not correct")
        self.store.update_user(user, password_hash=self.hasher.hash(new_password))
        self.store.commit()
        logger.info("Password changed", extra={"user_id": user.id})
        return StatusMessage(message="Password has successfully changed")

    def build_reset_url(self, token: str, lang_code: LangCode, admin: bool) -> str:
        base_url = self.admin_base_url if admin else self.client_base_url
        return f"{base_url}/auth/resetPassword/{token}?langCode={lang_code.value}"

    def forgot_password(
        self, email: str, lang_code: LangCode = LangCode.EN, admin: bool = False
    ) -> StatusMessage:
        user = self.store.find_user_by_email(email)
        if user is None:
            raise AuthError(FailureKind.FORBIDDEN, "Email is not correct")

        ticket = self.reset_tokens.generate()
        self.store.update_user(
            user, reset_token=ticket.token_hash, reset_token_expires=ticket.expires_at
        )
        self.store.commit()

        subject, html = reset_password_email(
            lang_code, user.full_name, self.build_reset_url(ticket.token, lang_code, admin)
        )
        try:
            self.mailer.send(to=user.email, subject=subject, html=html)
        except MailDeliveryError as e:
            # A ticket whose email never arrived must not stay redeemable.
            self.store.update_user(user, reset_token=None, reset_token_expires=None)
            self.store.commit()
            logger.error(
                "Reset email delivery failed",
                extra={"user_id": user.id, "mail_status_code": e.status_code},
            )
            raise AuthError(FailureKind.BAD_GATEWAY, "Email could not be sent") from e
        return StatusMessage(message="Email has been sent")

    def reset_password(self, token: str, new_password: str) -> StatusMessage:
        user = self.store.find_user_by_reset_token(
            self.reset_tokens.digest(token), self._clock()
        )
        if user is None:
            raise AuthError(FailureKind.BAD_REQUEST, "Reset token has been expires or invalid")
        self.store.update_user(
            user,
            password_hash=self.hasher.hash(new_password),
            reset_token=None,
            reset_token_expires=None,
        )
        self.store.commit()
        logger.info("Password reset", extra={"user_id": user.id})
        return StatusMessage(message="Password has been reset")

    def logout(self, user_id: int) -> StatusMessage:
        auth_session = self.store.find_refresh_session_by_user_id(user_id)
        if auth_session is not None:
            self.store.delete_refresh_session(auth_session)
            self.store.commit()
        return StatusMessage(message="Logout success")


def _claims_for(user: User) -> TokenPayload:
    return TokenPayload(id=user.id, email=user.email, role=user.role)
