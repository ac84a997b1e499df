"""Persistence for the auth flows: user accounts, permissions and refresh sessions."""

from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.models import AuthSession, Role, User, UserPermission


class EmailTaken(Exception):
    """Raised when inserting a user whose email another transaction already committed."""


class AuthStore:
    """
    Thin repository over a request-scoped SQLAlchemy session.

    Write methods only flush; the caller decides when to commit so a flow's
    writes land in one transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_user_by_email(self, email: str) -> User | None:
        return self._session.query(User).filter(User.email == email).first()

    def find_user_by_id(self, user_id: int) -> User | None:
        return self._session.get(User, user_id)

    def find_user_by_reset_token(self, token_hash: str, now: datetime) -> User | None:
        """Return the user holding this reset digest if the ticket has not expired."""
        return (
            self._session.query(User)
            .filter(User.reset_token == token_hash, User.reset_token_expires > now)
            .first()
        )

    def create_user(
        self,
        email: str,
        password_hash: str,
        phone: str | None = None,
        full_name: str | None = None,
        role: Role = Role.CUSTOMER,
    ) -> User:
        user = User(
            email=email,
            password_hash=password_hash,
            phone=phone,
            full_name=full_name,
            role=role.value,
            is_delete=False,
        )
        self._session.add(user)
        try:
            self._session.flush()
        except IntegrityError as e:
            self._session.rollback()
            raise EmailTaken(email) from e
        return user

    def update_user(self, user: User, **fields: object) -> User:
        for name, value in fields.items():
            setattr(user, name, value)
        self._session.flush()
        return user

    def create_permission_record(self, user: User) -> UserPermission:
        permission = UserPermission(
            user_id=user.id,
            create=False,
            update=False,
            remove=False,
            is_delete=False,
        )
        self._session.add(permission)
        self._session.flush()
        return permission

    def find_refresh_session_by_user_id(self, user_id: int) -> AuthSession | None:
        return (
            self._session.query(AuthSession)
            .filter(AuthSession.user_id == user_id)
            .first()
        )

    def upsert_refresh_session(self, user_id: int, token: str) -> AuthSession:
        """
        Create the user's session or overwrite its token; never a second row.

        If a concurrent sign-in inserts the row between our read and our insert,
        the unique user_id rejects ours; roll back and overwrite theirs, so the
        last writer wins. The rollback discards other unflushed work in this
        session, so call this before any other write of the flow.
        """
        auth_session = self.find_refresh_session_by_user_id(user_id)
        if auth_session is not None:
            auth_session.token = token
            self._session.flush()
            return auth_session
        auth_session = AuthSession(user_id=user_id, token=token)
        self._session.add(auth_session)
        try:
            self._session.flush()
        except IntegrityError:
            self._session.rollback()
            auth_session = self.find_refresh_session_by_user_id(user_id)
            if auth_session is None:
                raise
            auth_session.token = token
            self._session.flush()
        return auth_session

    def delete_refresh_session(self, auth_session: AuthSession) -> None:
        self._session.delete(auth_session)
        self._session.flush()

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()
