"""Account operations: registration, login, profile and password management."""

import logging
from dataclasses import dataclass

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.dependencies import CurrentUser
from app.errors import ConflictError, InvalidInputError, NotFoundError, UnauthenticatedError, UnauthorizedError
from app.models.user import User
from app.services.jwt import JWTService, get_jwt_service
from app.services.notifier import ResetNotifier, get_reset_notifier
from app.services.password import PasswordHasher, get_password_hasher
from app.services.reset_token import ResetTokenPolicy

logger = logging.getLogger("account_service")

MAX_PAGE_SIZE = 100
# Largest id a 64-bit integer column holds
MAX_USER_ID = 2**63 - 1
PROFILE_FIELDS = ("name", "email", "username")


@dataclass
class AuthResult:
    """Session token and the user it was issued for."""

    token: str
    user: User


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _normalize_optional(value: str | None) -> str | None:
    """Strip optional text fields; blank values are stored as NULL."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class AccountService:
    """Orchestrates account operations against a single user record."""

    def __init__(
        self,
        hasher: PasswordHasher,
        jwt_service: JWTService,
        notifier: ResetNotifier,
    ) -> None:
        self.hasher = hasher
        self.jwt_service = jwt_service
        self.notifier = notifier
        self.reset_tokens = ResetTokenPolicy(jwt_service)

    # --- lookups ---

    def find_by_email(self, db: Session, email: str) -> User | None:
        return db.query(User).filter(User.email == normalize_email(email)).first()

    def find_by_id(self, db: Session, user_id: int) -> User | None:
        if user_id < 1 or user_id > MAX_USER_ID:
            return None
        return db.get(User, user_id)

    def _issue_session(self, user: User) -> AuthResult:
        token = self.jwt_service.create_session_token(user.id, user.email, user.username)
        return AuthResult(token=token, user=user)

    def _require_user(self, db: Session, identity: CurrentUser | None) -> User:
        if identity is None:
            raise UnauthenticatedError()
        user = self.find_by_id(db, identity.user_id)
        if not user:
            raise NotFoundError()
        return user

    def _commit_unique(self, db: Session) -> None:
        """Commit, translating a unique constraint violation into ConflictError."""
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError() from None

    # --- operations ---

    def register(
        self,
        db: Session,
        email: str,
        password: str,
        name: str | None = None,
        username: str | None = None,
    ) -> AuthResult:
        """Create an account and return a session for it. Raises ConflictError if the email is taken."""
        email = normalize_email(email)
        if self.find_by_email(db, email):
            raise ConflictError()

        user = User(
            name=_normalize_optional(name),
            email=email,
            username=_normalize_optional(username),
            password_hash=self.hasher.hash(password),
        )
        db.add(user)
        # The unique indexes catch a duplicate registered after the check above
        self._commit_unique(db)
        db.refresh(user)

        logger.info("Registered user %s", user.id)
        return self._issue_session(user)

    def login(self, db: Session, email: str, password: str) -> AuthResult:
        """Authenticate by email and password."""
        user = self.find_by_email(db, email)
        if not user:
            raise NotFoundError()

        if not self.hasher.verify(password, user.password_hash):
            logger.info("Failed login for user %s", user.id)
            raise UnauthorizedError()

        return self._issue_session(user)

    def me(self, db: Session, identity: CurrentUser | None) -> User:
        """Return the authenticated user's record."""
        return self._require_user(db, identity)

    def update_profile(self, db: Session, identity: CurrentUser | None, changes: dict) -> User:
        """Apply the provided profile fields, leaving absent ones unchanged."""
        user = self._require_user(db, identity)

        updates = {}
        for field, value in changes.items():
            if field not in PROFILE_FIELDS:
                raise InvalidInputError(f"Unknown profile field '{field}'")
            if field == "email":
                if not value:
                    raise InvalidInputError("Email cannot be removed")
                value = normalize_email(value)
            else:
                value = _normalize_optional(value)
            updates[field] = value

        for field, value in updates.items():
            setattr(user, field, value)

        self._commit_unique(db)
        db.refresh(user)
        return user

    def change_password(
        self,
        db: Session,
        identity: CurrentUser | None,
        old_password: str,
        new_password: str,
    ) -> bool:
        """Replace the password after verifying the current one."""
        user = self._require_user(db, identity)

        if not self.hasher.verify(old_password, user.password_hash):
            raise UnauthorizedError("Invalid old password")

        user.password_hash = self.hasher.hash(new_password)
        db.commit()

        logger.info("Password changed for user %s", user.id)
        return True

    def forgot_password(self, db: Session, email: str) -> bool:
        """Issue a reset token and hand it to the delivery channel."""
        user = self.find_by_email(db, email)
        if not user:
            raise NotFoundError()

        token = self.reset_tokens.issue(db, user)
        try:
            self.notifier.send_reset_token(user.email, token)
        except Exception:
            logger.exception("Failed to deliver reset token for user %s", user.id)

        return True

    def reset_password(self, db: Session, token: str, new_password: str) -> bool:
        """Set a new password using an outstanding reset token. The token is single-use."""
        user = self.reset_tokens.consume(db, token)

        user.password_hash = self.hasher.hash(new_password)
        self.reset_tokens.clear(user)
        db.commit()

        logger.info("Password reset completed for user %s", user.id)
        return True

    def logout(self) -> bool:
        """Sessions are stateless; the client discards its token."""
        return True

    def list_users(self, db: Session, page: int = 1, limit: int = 10) -> list[User]:
        """Page through users, newest first."""
        if page < 1:
            raise InvalidInputError("Page must be at least 1")
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise InvalidInputError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")

        return (
            db.query(User)
            .order_by(User.created_at.desc(), User.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

    def get_user(self, db: Session, user_id: int) -> User:
        user = self.find_by_id(db, user_id)
        if not user:
            raise NotFoundError()
        return user

    def search_users(self, db: Session, search: str) -> list[User]:
        """Case-insensitive substring match on name, username or email."""
        pattern = f"%{_escape_like(search.strip())}%"
        return (
            db.query(User)
            .filter(
                or_(
                    User.name.ilike(pattern, escape="\\"),
                    User.username.ilike(pattern, escape="\\"),
                    User.email.ilike(pattern, escape="\\"),
                )
            )
            .order_by(User.id)
            .all()
        )

    def update_profile_picture(self, db: Session, identity: CurrentUser | None, picture_url: str) -> User:
        user = self._require_user(db, identity)
        user.profile_picture = picture_url
        db.commit()
        db.refresh(user)
        return user


_account_service: AccountService | None = None


def get_account_service() -> AccountService:
    """Get singleton account service instance."""
    global _account_service
    if _account_service is None:
        _account_service = AccountService(
            hasher=get_password_hasher(),
            jwt_service=get_jwt_service(),
            notifier=get_reset_notifier(),
        )
    return _account_service
