"""
Model-level audit trail and masking helpers.

Models decorated with ``audit_changes`` log every committed column change to
the ``security.audit`` logger, with personal data masked.
"""

import json
import logging
from typing import Any

from sqlalchemy import event, inspect

audit_logger = logging.getLogger("security.audit")

# Columns whose values never reach the audit log in clear text
MASKED_COLUMNS = {
    "email",
    "candidate_email",
    "phone",
    "mobile_number",
    "address",
    "dob",
    "password_hash",
}


# =======================================
# Data Masking Utilities
# =======================================


def mask_sensitive_data(value: str, visible_chars: int = 4) -> str:
    """
    Masks sensitive data by showing only the last `visible_chars` characters.

    Args:
        value (str): The sensitive data to mask.
        visible_chars (int): Number of characters to leave visible at the end.

    Returns:
        str: The masked data.
    """
    if not value or len(value) <= visible_chars:
        return "*" * len(value or "")
    return "*" * (len(value) - visible_chars) + value[-visible_chars:]


def mask_email(email: str) -> str:
    """
    Masks an email address by keeping the first character of the local part
    and the domain.
    """
    if "@" not in email:
        return mask_sensitive_data(email)
    local_part, domain = email.split("@", 1)
    if len(local_part) <= 1:
        masked_local = "*"
    else:
        masked_local = local_part[0] + "*" * (len(local_part) - 1)
    return f"{masked_local}@{domain}"


def _audit_value(column: str, value: Any) -> Any:
    if value is None:
        return None
    if column == "password_hash":
        return "[REDACTED]"
    if column in MASKED_COLUMNS:
        text = str(value)
        return mask_email(text) if "@" in text else mask_sensitive_data(text)
    if hasattr(value, "value"):
        return value.value
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def collect_changes(target: Any) -> dict[str, dict[str, Any]]:
    """Return ``{column: {"old": ..., "new": ...}}`` for modified attributes."""
    state = inspect(target)
    changes: dict[str, dict[str, Any]] = {}
    for attr in state.mapper.column_attrs:
        history = state.attrs[attr.key].history
        if not history.has_changes():
            continue
        old = history.deleted[0] if history.deleted else None
        new = history.added[0] if history.added else None
        changes[attr.key] = {
            "old": _audit_value(attr.key, old),
            "new": _audit_value(attr.key, new),
        }
    return changes


# =======================================
# Audit Trail Decorator
# =======================================


def audit_changes(model_class):
    """
    Decorator to automatically log changes for SOC2 Compliance.
    """

    @event.listens_for(model_class, "after_update")
    def _after_update(mapper, connection, target):
        changes = collect_changes(target)
        changes.pop("updated_at", None)
        if not changes:
            return
        audit_logger.info(
            json.dumps(
                {
                    "event_type": "MODEL_CHANGE",
                    "table": model_class.__tablename__,
                    "primary_key": [str(v) for v in mapper.primary_key_from_instance(target)],
                    "changes": changes,
                },
                default=str,
            )
        )

    @event.listens_for(model_class, "after_delete")
    def _after_delete(mapper, connection, target):
        audit_logger.info(
            json.dumps(
                {
                    "event_type": "MODEL_DELETE",
                    "table": model_class.__tablename__,
                    "primary_key": [str(v) for v in mapper.primary_key_from_instance(target)],
                }
            )
        )

    return model_class
