"""Authentication service.

Sign-in, sign-up and sign-out for one workspace. Session state lives in
the workspace's client storage under three keys:

- ``jwt``: signed session token
- ``user``: JSON user record (id, username, accessLevel)
- ``expirationDate``: ISO-8601 expiry, ten days after sign-in

Credentials are checked against a CredentialDirectory holding bcrypt
hashes. Failures never raise; they come back as AuthResult(success=False)
with a message suitable for display.
"""

import json
import re
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

import bcrypt
import structlog

from smartapply.core.auth import DUMMY_HASH, create_jwt
from smartapply.core.scheduler import Scheduler, default_scheduler
from smartapply.core.storage import (
    EXPIRATION_KEY,
    JWT_KEY,
    PROFILE_SNAPSHOT_KEY,
    REDIRECT_AFTER_LOGIN_KEY,
    SESSION_KEYS,
    USER_KEY,
    ClientStorage,
)
from smartapply.services.profile_store import ProfileStore

logger = structlog.get_logger()

ADMIN_ACCESS_LEVEL = "Admin"
USER_ACCESS_LEVEL = "User"
DEFAULT_REDIRECT_PATH = "/dashboard"
LOGOUT_PROMPT = "Do you want to log out?"
DEFAULT_SESSION_DURATION = timedelta(days=10)

_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
# Lower and upper case letters, or at least one digit
_PASSWORD_STRENGTH_PATTERN = re.compile(r"(?=.*[a-z])(?=.*[A-Z])|(?=.*\d)")

# Keys that must be gone after logout
_LOGOUT_VERIFY_KEYS = (JWT_KEY, USER_KEY, PROFILE_SNAPSHOT_KEY, EXPIRATION_KEY)


# =============================================================================
# Types
# =============================================================================


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str
    confirm: str | None = None


@dataclass(frozen=True)
class User:
    id: str
    username: str
    access_level: str = USER_ACCESS_LEVEL

    @property
    def is_admin(self) -> bool:
        return self.access_level == ADMIN_ACCESS_LEVEL

    @property
    def role(self) -> str:
        return "admin" if self.is_admin else "user"

    def to_storage_dict(self) -> dict[str, str]:
        return {"id": self.id, "username": self.username, "accessLevel": self.access_level}

    @classmethod
    def from_storage(cls, raw: str | None) -> "User | None":
        """Parse the stored user record; None when absent or malformed."""
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None
        user_id = data.get("id")
        username = data.get("username")
        if not isinstance(user_id, str) or not isinstance(username, str):
            return None
        access_level = data.get("accessLevel")
        if not isinstance(access_level, str):
            access_level = USER_ACCESS_LEVEL
        return cls(id=user_id, username=username, access_level=access_level)


@dataclass
class AuthResult:
    success: bool
    user: User | None = None
    token: str | None = None
    message: str | None = None
    errors: list[str] = field(default_factory=list)


# =============================================================================
# Credential Directory
# =============================================================================


@dataclass
class DirectoryEntry:
    user: User
    password_hash: bytes


class CredentialDirectory:
    """In-memory username -> bcrypt hash directory.

    Usernames are unique case-insensitively.

    Args:
        bcrypt_rounds: Work factor for new hashes.
    """

    def __init__(self, bcrypt_rounds: int = 12) -> None:
        self._entries: dict[str, DirectoryEntry] = {}
        self._rounds = bcrypt_rounds

    def __contains__(self, username: object) -> bool:
        return isinstance(username, str) and username.lower() in self._entries

    def register(
        self,
        username: str,
        password: str,
        access_level: str = USER_ACCESS_LEVEL,
        user_id: str | None = None,
    ) -> User:
        """Add an account.

        Raises:
            ValueError: If the username is already taken.
        """
        key = username.lower()
        if key in self._entries:
            raise ValueError(f"Username already exists: {username}")
        password_hash = bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self._rounds))
        user = User(id=user_id or str(uuid.uuid4()), username=username, access_level=access_level)
        self._entries[key] = DirectoryEntry(user=user, password_hash=password_hash)
        return user

    def verify(self, username: str, password: str) -> User | None:
        """Return the user for valid credentials, else None.

        Unknown usernames still run a bcrypt comparison so response time
        does not reveal which usernames exist.
        """
        entry = self._entries.get(username.lower())
        if entry is None:
            bcrypt.checkpw(password.encode(), DUMMY_HASH)
            return None
        if not bcrypt.checkpw(password.encode(), entry.password_hash):
            return None
        return entry.user

    def find_by_username(self, username: str) -> User | None:
        entry = self._entries.get(username.lower())
        return entry.user if entry else None

    def get_by_id(self, user_id: str) -> User | None:
        for entry in self._entries.values():
            if entry.user.id == user_id:
                return entry.user
        return None


# =============================================================================
# Validation
# =============================================================================


def validate_login(credentials: Credentials) -> list[str]:
    errors: list[str] = []
    if not credentials.username.strip():
        errors.append("Username is required")
    elif len(credentials.username) < 2:
        errors.append("Username must be at least 2 characters")
    if not credentials.password:
        errors.append("Password is required")
    elif len(credentials.password) < 3:
        errors.append("Password must be at least 3 characters")
    return errors


def validate_sign_up(credentials: Credentials) -> list[str]:
    errors: list[str] = []
    username = credentials.username
    if not username.strip():
        errors.append("Username is required")
    elif len(username) < 3:
        errors.append("Username must be at least 3 characters")
    elif len(username) > 20:
        errors.append("Username must be at most 20 characters")
    elif not _USERNAME_PATTERN.match(username):
        errors.append("Username can only contain letters, numbers, and underscores")

    password = credentials.password
    if not password:
        errors.append("Password is required")
    elif len(password) < 6:
        errors.append("Password must be at least 6 characters")
    elif not _PASSWORD_STRENGTH_PATTERN.search(password):
        errors.append("Password should contain at least one uppercase letter or number")

    if credentials.confirm is not None and credentials.confirm != password:
        errors.append("Passwords do not match")
    return errors


# =============================================================================
# Service
# =============================================================================


class AuthService:
    """Session management for one workspace.

    Args:
        storage: Workspace client storage (session keys and snapshot).
        store: Workspace profile store.
        directory: Credential directory shared by all workspaces.
        secret: Session token signing secret.
        scheduler: Clock used for expiry checks.
        session_duration: Lifetime of a new session.
    """

    def __init__(
        self,
        storage: ClientStorage,
        store: ProfileStore,
        directory: CredentialDirectory,
        *,
        secret: str,
        scheduler: Scheduler | None = None,
        session_duration: timedelta = DEFAULT_SESSION_DURATION,
    ) -> None:
        self._storage = storage
        self._store = store
        self._directory = directory
        self._secret = secret
        self._scheduler = scheduler or default_scheduler
        self._session_duration = session_duration

    # -------------------------------------------------------------------------
    # Session state
    # -------------------------------------------------------------------------

    def is_authenticated(self) -> bool:
        """True when a token and user are stored and the session has not expired.

        A missing, unreadable or past expiry clears the session keys.
        """
        token = self._storage.get_item(JWT_KEY)
        user = User.from_storage(self._storage.get_item(USER_KEY))
        if not token or user is None:
            return False

        expires_at = self.get_expiration()
        if expires_at is None:
            logger.warning("session_expiry_unreadable", user_id=user.id)
            self.clear_auth_data()
            return False
        if self._scheduler.now() > expires_at:
            logger.info("session_expired", user_id=user.id, expired_at=expires_at.isoformat())
            self.clear_auth_data()
            return False
        return True

    def get_current_user(self) -> User | None:
        return User.from_storage(self._storage.get_item(USER_KEY))

    def get_stored_token(self) -> str | None:
        return self._storage.get_item(JWT_KEY)

    def get_expiration(self) -> datetime | None:
        raw = self._storage.get_item(EXPIRATION_KEY)
        if not raw:
            return None
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return None
        return parsed

    def is_admin(self) -> bool:
        user = self.get_current_user()
        return user is not None and user.is_admin

    def set_auth_data(self, user: User, token: str) -> None:
        expires_at = self._scheduler.now() + self._session_duration
        self._storage.set_item(JWT_KEY, token)
        self._storage.set_item(USER_KEY, json.dumps(user.to_storage_dict()))
        self._storage.set_item(EXPIRATION_KEY, expires_at.isoformat())

    def clear_auth_data(self) -> None:
        for key in SESSION_KEYS:
            self._storage.remove_item(key)

    # -------------------------------------------------------------------------
    # Redirect after login
    # -------------------------------------------------------------------------

    def set_redirect_path(self, path: str) -> None:
        self._storage.set_item(REDIRECT_AFTER_LOGIN_KEY, path)

    def get_redirect_path(self) -> str:
        return self._storage.get_item(REDIRECT_AFTER_LOGIN_KEY) or DEFAULT_REDIRECT_PATH

    def pop_redirect_path(self) -> str:
        """Return the redirect path and forget it."""
        path = self.get_redirect_path()
        self._storage.remove_item(REDIRECT_AFTER_LOGIN_KEY)
        return path

    # -------------------------------------------------------------------------
    # Flows
    # -------------------------------------------------------------------------

    def _issue_session(self, user: User) -> str:
        token = create_jwt(
            user_id=user.id,
            role=user.role,
            secret=self._secret,
            expires_delta=self._session_duration,
            now=self._scheduler.now(),
        )
        self.set_auth_data(user, token)
        return token

    def login(self, credentials: Credentials) -> AuthResult:
        """Verify credentials and start a session.

        On success the profile store is rehydrated from the persisted
        snapshot, so a returning user lands on their previous dashboard.
        """
        errors = validate_login(credentials)
        if errors:
            return AuthResult(success=False, message="Validation failed", errors=errors)

        user = self._directory.verify(credentials.username, credentials.password)
        if user is None:
            logger.info("login_failed", reason="invalid_credentials")
            return AuthResult(success=False, message="Invalid username or password")

        token = self._issue_session(user)
        rehydrated = self._store.rehydrate_from_snapshot()
        logger.info("login_succeeded", user_id=user.id, profile_rehydrated=rehydrated)
        return AuthResult(success=True, user=user, token=token, message="Login successful")

    def sign_up(self, credentials: Credentials) -> AuthResult:
        """Create an account and start a session with an empty profile."""
        errors = validate_sign_up(credentials)
        if errors:
            return AuthResult(success=False, message="Validation failed", errors=errors)

        if credentials.username in self._directory:
            return AuthResult(
                success=False,
                message="Username already exists - please choose a different one",
            )

        user = self._directory.register(credentials.username, credentials.password)
        token = self._issue_session(user)
        logger.info("signup_succeeded", user_id=user.id)
        return AuthResult(
            success=True, user=user, token=token, message="Account created successfully"
        )

    def logout(self, confirm: Callable[[str], bool]) -> bool:
        """Ask for confirmation, then clear all workspace state.

        Args:
            confirm: Called with the prompt text; returns the user's answer.

        Returns:
            False if declined (nothing is cleared), True once cleared.
        """
        if not confirm(LOGOUT_PROMPT):
            logger.info("logout_cancelled")
            return False

        user = self.get_current_user()
        self._store.clear()
        self._storage.clear()

        remaining = [key for key in _LOGOUT_VERIFY_KEYS if self._storage.get_item(key)]
        if remaining:
            logger.warning("logout_incomplete", remaining_keys=remaining)
            for key in remaining:
                self._storage.remove_item(key)

        logger.info("logout_completed", user_id=user.id if user else None)
        return True

    def session_info(self) -> dict[str, Any]:
        user = self.get_current_user() if self.is_authenticated() else None
        return {
            "authenticated": user is not None,
            "user": user,
            "is_admin": bool(user and user.is_admin),
            "expires_at": self.get_expiration() if user else None,
        }


# =============================================================================
# Demo accounts
# =============================================================================

DEMO_ACCOUNTS = (
    ("demo-user", "demo", "Demo123", USER_ACCESS_LEVEL),
    ("demo-admin", "admin", "Admin123", ADMIN_ACCESS_LEVEL),
)


def seed_demo_accounts(directory: CredentialDirectory) -> list[User]:
    """Register the demo user and demo admin, skipping names already taken."""
    seeded = []
    for user_id, username, password, access_level in DEMO_ACCOUNTS:
        if username in directory:
            continue
        seeded.append(directory.register(username, password, access_level, user_id=user_id))
    logger.info("demo_accounts_seeded", count=len(seeded))
    return seeded
