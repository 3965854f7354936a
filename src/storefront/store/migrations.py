"""One-time migration of legacy storage keys.

Older clients stored the cart under ``cart`` and the session as separate
``token``/``user`` keys. ``initialize_migrations`` moves them under the
namespaced keys and wraps the token into the ``{user, token}`` shape. It is
called explicitly by the composition root and is safe to run repeatedly:
once the legacy keys are gone it does nothing.
"""

import json
from collections.abc import Callable
from typing import Any

from storefront.config import DEFAULT_NAMESPACE
from storefront.storage.port import StoragePort
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

LEGACY_KEYS = ("user", "cart", "token")


def _load(raw: str) -> Any:
    return json.loads(raw)


def migrate_key(
    storage: StoragePort,
    old_key: str,
    new_key: str,
    transformer: Callable[[Any], Any] | None = None,
    loader: Callable[[str], Any] = _load,
) -> bool:
    """Move the value under ``old_key`` to ``new_key``.

    Returns True when a value was moved. An existing value under
    ``new_key`` is newer than the legacy one and is kept; the legacy key is
    dropped either way. Unreadable legacy data is logged and left for the
    caller's cleanup.
    """
    raw = storage.get_item(old_key)
    if raw is None:
        return False

    if storage.get_item(new_key) is not None:
        logger.info("migration.target_exists", old_key=old_key, new_key=new_key)
        storage.remove_item(old_key)
        return False

    try:
        parsed = loader(raw)
        transformed = transformer(parsed) if transformer else parsed
        storage.set_item(new_key, json.dumps(transformed))
    except (ValueError, TypeError, KeyError, AttributeError) as exc:
        logger.error("migration.failed", old_key=old_key, new_key=new_key, error=str(exc))
        return False

    storage.remove_item(old_key)
    logger.info("migration.moved", old_key=old_key, new_key=new_key)
    return True


def _legacy_cart(lines: list) -> list:
    migrated = []
    for line in lines:
        record = dict(line)
        if "unitPrice" not in record and "price" in record:
            record["unitPrice"] = record.pop("price")
        if not record.get("variant") and record.get("cartVariant"):
            record["variant"] = record["cartVariant"]
        record.pop("cartVariant", None)
        migrated.append(record)
    return migrated


def _legacy_token(raw: str) -> Any:
    # Tokens were written both raw and JSON-encoded
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def initialize_migrations(storage: StoragePort, namespace: str = DEFAULT_NAMESPACE) -> list[str]:
    """Run every legacy-key migration and return the keys that were written."""
    migrated = []

    if migrate_key(storage, "cart", f"{namespace}_cart", transformer=_legacy_cart):
        migrated.append(f"{namespace}_cart")

    def wrap_token(token: Any) -> dict:
        raw_user = storage.get_item("user")
        try:
            user = json.loads(raw_user) if raw_user else None
        except json.JSONDecodeError:
            logger.warning("migration.unreadable_user")
            user = None
        return {
            "user": user if isinstance(user, dict) else None,
            "token": token if isinstance(token, str) else None,
        }

    if migrate_key(storage, "token", f"{namespace}_auth", transformer=wrap_token, loader=_legacy_token):
        migrated.append(f"{namespace}_auth")

    for key in LEGACY_KEYS:
        storage.remove_item(key)

    return migrated
