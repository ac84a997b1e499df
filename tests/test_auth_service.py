"""Tests for storefront.services.auth: sign up/in, refresh, password change/reset, logout."""

import re
import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.core.security import PasswordHasher, ResetTokenGenerator, TokenIssuer
from storefront.models import AuthSession, Base, Role, User, UserPermission
from storefront.schemas.auth import LangCode
from storefront.services.auth import AuthError, AuthService, FailureKind
from storefront.services.mailer import MailDeliveryError
from storefront.services.store import AuthStore

ADMIN_URL = "http://admin.test"
CLIENT_URL = "http://shop.test"
RESET_LINK = re.compile(r"/auth/resetPassword/([0-9a-f]+)\?langCode=(\w+)")


class FakeMailer:
    """Records sent messages instead of delivering them."""

    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []

    def send(self, to: str, subject: str, html: str) -> None:
        self.sent.append({"to": to, "subject": subject, "html": html})


class FailingMailer:
    def __init__(self, status_code: int = 500) -> None:
        self.status_code = status_code

    def send(self, to: str, subject: str, html: str) -> None:
        raise MailDeliveryError("Mail provider returned an error", self.status_code)


class MovableClock:
    def __init__(self) -> None:
        self.now = datetime.now(UTC)

    def __call__(self) -> datetime:
        return self.now


def _session() -> Session:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False)()


class AuthServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = _session()
        self.mailer = FakeMailer()
        self.clock = MovableClock()
        self.tokens = TokenIssuer(
            access_secret="access-secret",
            refresh_secret="refresh-secret",
            access_ttl=timedelta(minutes=15),
            refresh_ttl=timedelta(days=7),
        )
        self.service = self._service()

    def tearDown(self) -> None:
        self.db.close()

    def _service(self, mailer=None, tokens=None) -> AuthService:
        return AuthService(
            store=AuthStore(self.db),
            mailer=mailer or self.mailer,
            tokens=tokens or self.tokens,
            hasher=PasswordHasher(rounds=4),
            reset_tokens=ResetTokenGenerator(window=timedelta(minutes=10), clock=self.clock),
            admin_base_url=ADMIN_URL,
            client_base_url=CLIENT_URL,
            clock=self.clock,
        )

    def _user(self, email: str = "a@x.com") -> User:
        return self.db.query(User).filter(User.email == email).one()

    def assertFails(self, kind: FailureKind, fn, *args, **kwargs) -> AuthError:
        with self.assertRaises(AuthError) as ctx:
            fn(*args, **kwargs)
        self.assertEqual(ctx.exception.kind, kind)
        return ctx.exception


class TestSignUp(AuthServiceTestCase):
    def test_creates_customer_with_hashed_password_and_empty_permissions(self) -> None:
        profile = self.service.sign_up("a@x.com", "p1", phone="0900000000")
        user = self._user()
        self.assertEqual(profile.email, "a@x.com")
        self.assertEqual(profile.role, Role.CUSTOMER.value)
        self.assertNotEqual(user.password_hash, "p1")
        self.assertTrue(user.password_hash.startswith("$2"))
        permission = self.db.query(UserPermission).filter_by(user_id=user.id).one()
        self.assertFalse(permission.create or permission.update or permission.remove)

    def test_duplicate_email_conflicts(self) -> None:
        self.service.sign_up("a@x.com", "p1")
        err = self.assertFails(
            FailureKind.CONFLICT, self.service.sign_up, "a@x.com", "other", phone="1"
        )
        self.assertEqual(err.message, "Email is already exist")
        self.assertEqual(self.db.query(User).count(), 1)

    def test_email_taken_between_check_and_insert_conflicts(self) -> None:
        self.service.sign_up("a@x.com", "p1")
        with patch.object(self.service.store, "find_user_by_email", return_value=None):
            err = self.assertFails(FailureKind.CONFLICT, self.service.sign_up, "a@x.com", "p2")
        self.assertEqual(err.message, "Email is already exist")
        self.assertEqual(self.db.query(User).count(), 1)


class TestSignIn(AuthServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.service.sign_up("a@x.com", "p1")

    def test_example_scenario(self) -> None:
        result = self.service.sign_in("a@x.com", "p1")
        self.assertTrue(result.access_token)
        self.assertGreater(result.expires_in, 0)
        self.assertEqual(result.info.email, "a@x.com")
        self.assertFails(FailureKind.FORBIDDEN, self.service.sign_in, "a@x.com", "wrong")

    def test_profile_has_no_password_or_timestamps(self) -> None:
        info = self.service.sign_in("a@x.com", "p1").info.model_dump()
        self.assertNotIn("password_hash", info)
        self.assertNotIn("password", info)
        self.assertNotIn("created_at", info)
        self.assertNotIn("updated_at", info)
        self.assertIsNotNone(info["permission"])

    def test_access_token_carries_minimal_claims(self) -> None:
        result = self.service.sign_in("a@x.com", "p1")
        claims = self.tokens.verify_access_token(result.access_token)
        self.assertEqual(claims.email, "a@x.com")
        self.assertEqual(claims.role, Role.CUSTOMER.value)
        self.assertEqual(claims.id, self._user().id)

    def test_unknown_email_is_not_found(self) -> None:
        self.assertFails(FailureKind.NOT_FOUND, self.service.sign_in, "b@x.com", "p1")

    def test_customer_in_admin_context_is_unauthorized(self) -> None:
        self.assertFails(
            FailureKind.UNAUTHORIZED, self.service.sign_in, "a@x.com", "p1", admin=True
        )
        self.assertEqual(self.db.query(AuthSession).count(), 0)

    def test_admin_in_admin_context_succeeds(self) -> None:
        store = AuthStore(self.db)
        store.create_user("boss@x.com", PasswordHasher(rounds=4).hash("secret"), role=Role.ADMIN)
        store.commit()
        result = self.service.sign_in("boss@x.com", "secret", admin=True)
        self.assertEqual(result.info.role, Role.ADMIN.value)

    def test_repeated_sign_in_keeps_single_session(self) -> None:
        user_id = self._user().id
        self.service.sign_in("a@x.com", "p1")
        first = self.db.query(AuthSession).filter_by(user_id=user_id).one().token
        self.clock.now += timedelta(seconds=5)
        tokens = TokenIssuer("access-secret", "refresh-secret", clock=self.clock)
        self._service(tokens=tokens).sign_in("a@x.com", "p1")
        self._service(tokens=tokens).sign_in("a@x.com", "p1")
        sessions = self.db.query(AuthSession).filter_by(user_id=user_id).all()
        self.assertEqual(len(sessions), 1)
        self.assertNotEqual(sessions[0].token, first)


class TestRefreshAccessToken(AuthServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.service.sign_up("a@x.com", "p1").id

    def test_without_session_is_forbidden(self) -> None:
        err = self.assertFails(
            FailureKind.FORBIDDEN, self.service.refresh_access_token, self.user_id
        )
        self.assertEqual(err.message, "Token not found")

    def test_issues_access_token_from_refresh_claims(self) -> None:
        self.service.sign_in("a@x.com", "p1")
        stored = self.db.query(AuthSession).one().token
        result = self.service.refresh_access_token(self.user_id)
        claims = self.tokens.verify_access_token(result.access_token)
        self.assertEqual(claims.id, self.user_id)
        self.assertGreater(result.expires_in, 0)
        self.assertEqual(self.db.query(AuthSession).one().token, stored)

    def test_expired_refresh_token_is_forbidden_as_expired(self) -> None:
        past = lambda: datetime.now(UTC) - timedelta(days=30)  # noqa: E731
        old_tokens = TokenIssuer("access-secret", "refresh-secret", clock=past)
        self._service(tokens=old_tokens).sign_in("a@x.com", "p1")
        err = self.assertFails(
            FailureKind.FORBIDDEN, self.service.refresh_access_token, self.user_id
        )
        self.assertEqual(err.message, "Token is expired")

    def test_tampered_refresh_token_is_forbidden_as_invalid(self) -> None:
        self.service.sign_in("a@x.com", "p1")
        auth_session = self.db.query(AuthSession).one()
        auth_session.token = auth_session.token + "x"
        self.db.commit()
        err = self.assertFails(
            FailureKind.FORBIDDEN, self.service.refresh_access_token, self.user_id
        )
        self.assertEqual(err.message, "Token is invalid")

    def test_presented_token_must_match_stored_session(self) -> None:
        self.service.sign_in("a@x.com", "p1")
        stored = self.db.query(AuthSession).one().token
        err = self.assertFails(
            FailureKind.FORBIDDEN,
            self.service.refresh_access_token,
            self.user_id,
            presented_token=stored + "x",
        )
        self.assertEqual(err.message, "Token is invalid")
        result = self.service.refresh_access_token(self.user_id, presented_token=stored)
        self.assertTrue(result.access_token)


class TestChangePassword(AuthServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.service.sign_up("a@x.com", "p1").id

    def test_new_password_replaces_old(self) -> None:
        result = self.service.change_password(self.user_id, "p1", "p2")
        self.assertEqual(result.message, "Password has successfully changed")
        self.assertFails(FailureKind.FORBIDDEN, self.service.sign_in, "a@x.com", "p1")
        self.assertEqual(self.service.sign_in("a@x.com", "p2").info.id, self.user_id)

    def test_wrong_old_password_is_forbidden(self) -> None:
        self.assertFails(
            FailureKind.FORBIDDEN, self.service.change_password, self.user_id, "nope", "p2"
        )

    def test_unknown_user_is_not_found(self) -> None:
        self.assertFails(FailureKind.NOT_FOUND, self.service.change_password, 999, "p1", "p2")


class TestForgotAndResetPassword(AuthServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.service.sign_up("a@x.com", "p1", full_name="An Nguyen")

    def _emailed_token(self) -> str:
        match = RESET_LINK.search(self.mailer.sent[-1]["html"])
        self.assertIsNotNone(match)
        return match.group(1)

    def test_unknown_email_is_forbidden(self) -> None:
        self.assertFails(FailureKind.FORBIDDEN, self.service.forgot_password, "b@x.com")
        self.assertEqual(self.mailer.sent, [])

    def test_stores_only_digest_and_sends_link(self) -> None:
        result = self.service.forgot_password("a@x.com", LangCode.EN)
        self.assertEqual(result.message, "Email has been sent")
        token = self._emailed_token()
        user = self._user()
        self.assertEqual(user.reset_token, ResetTokenGenerator.digest(token))
        self.assertNotEqual(user.reset_token, token)
        self.assertIsNotNone(user.reset_token_expires)
        self.assertEqual(self.mailer.sent[-1]["to"], "a@x.com")
        self.assertEqual(self.mailer.sent[-1]["subject"], "Reset password")
        self.assertIn(f"{CLIENT_URL}/auth/resetPassword/{token}?langCode=en", self.mailer.sent[-1]["html"])

    def test_admin_context_uses_admin_origin_and_language(self) -> None:
        self.service.forgot_password("a@x.com", LangCode.VN, admin=True)
        sent = self.mailer.sent[-1]
        self.assertEqual(sent["subject"], "Đặt lại mật khẩu")
        self.assertIn(f"{ADMIN_URL}/auth/resetPassword/", sent["html"])
        self.assertIn("langCode=vn", sent["html"])

    def test_delivery_failure_clears_ticket(self) -> None:
        service = self._service(mailer=FailingMailer(status_code=500))
        self.assertFails(FailureKind.BAD_GATEWAY, service.forgot_password, "a@x.com")
        user = self._user()
        self.assertIsNone(user.reset_token)
        self.assertIsNone(user.reset_token_expires)

    def test_reset_with_valid_ticket(self) -> None:
        self.service.forgot_password("a@x.com")
        token = self._emailed_token()
        result = self.service.reset_password(token, "fresh")
        self.assertEqual(result.message, "Password has been reset")
        user = self._user()
        self.assertIsNone(user.reset_token)
        self.assertIsNone(user.reset_token_expires)
        self.assertTrue(self.service.sign_in("a@x.com", "fresh").access_token)
        self.assertFails(FailureKind.FORBIDDEN, self.service.sign_in, "a@x.com", "p1")

    def test_ticket_is_single_use(self) -> None:
        self.service.forgot_password("a@x.com")
        token = self._emailed_token()
        self.service.reset_password(token, "fresh")
        self.assertFails(FailureKind.BAD_REQUEST, self.service.reset_password, token, "again")

    def test_unknown_token_is_bad_request(self) -> None:
        self.service.forgot_password("a@x.com")
        self.assertFails(FailureKind.BAD_REQUEST, self.service.reset_password, "deadbeef", "x1")

    def test_expired_ticket_is_bad_request(self) -> None:
        self.service.forgot_password("a@x.com")
        token = self._emailed_token()
        self.clock.now += timedelta(minutes=11)
        err = self.assertFails(FailureKind.BAD_REQUEST, self.service.reset_password, token, "x1")
        self.assertEqual(err.message, "Reset token has been expires or invalid")
        self.assertTrue(self.service.sign_in("a@x.com", "p1").access_token)


class TestLogout(AuthServiceTestCase):
    def test_logout_deletes_session_and_is_idempotent(self) -> None:
        user_id = self.service.sign_up("a@x.com", "p1").id
        self.service.sign_in("a@x.com", "p1")
        self.assertEqual(self.service.logout(user_id).message, "Logout success")
        self.assertEqual(self.db.query(AuthSession).count(), 0)
        self.assertEqual(self.service.logout(user_id).message, "Logout success")
        self.assertFails(FailureKind.FORBIDDEN, self.service.refresh_access_token, user_id)


if __name__ == "__main__":
    unittest.main()
