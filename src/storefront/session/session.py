"""Session model: the signed-in user and API token, persisted across reloads."""

from collections.abc import Callable, Mapping
from enum import Enum

from storefront.shared.result import Err, Ok, Result
from storefront.storage.port import StoragePort
from storefront.store.persistent import PersistentStore
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

EMPTY_SESSION = {"user": None, "token": None}


class UserRole(Enum):
    CUSTOMER = "customer"
    ARTISAN = "artisan"
    ADMIN = "admin"


def is_valid_session(data) -> bool:
    return (
        isinstance(data, dict)
        and (data.get("user") is None or isinstance(data.get("user"), dict))
        and (data.get("token") is None or isinstance(data.get("token"), str))
    )


def session_store(storage: StoragePort, key: str, on_error=None) -> PersistentStore:
    """Build the PersistentStore that backs the session."""
    return PersistentStore(storage, key, default=EMPTY_SESSION, validate=is_valid_session, on_error=on_error)


class SessionModel:
    def __init__(self, store: PersistentStore) -> None:
        self.store = store

    @property
    def user(self) -> dict | None:
        return self.store.get().get("user")

    @property
    def token(self) -> str | None:
        return self.store.get().get("token")

    @property
    def is_authenticated(self) -> bool:
        session = self.store.get()
        return session.get("user") is not None and bool(session.get("token"))

    def has_role(self, role: UserRole | str) -> bool:
        role = role.value if isinstance(role, UserRole) else role
        return self.is_authenticated and (self.user or {}).get("role") == role

    def login(self, user: Mapping, token: str) -> Result:
        if not isinstance(user, Mapping) or not isinstance(token, str) or not token:
            return Err("Invalid session data")
        if not self.store.set({"user": dict(user), "token": token}):
            return Err("Failed to save session")
        logger.info("session.login", user_id=user.get("_id"), role=user.get("role"))
        return Ok(dict(user))

    def logout(self) -> Result:
        self.store.clear()
        logger.info("session.logout")
        return Ok()

    def subscribe(self, listener: Callable[[dict], None]) -> Callable[[], None]:
        return self.store.subscribe(listener)
