"""Audit payload sanitization."""
from __future__ import annotations

from typing import Any, Mapping

SENSITIVE_KEYS = {
    "password",
    "password_hash",
    "token",
    "email",
}


def _mask_value(key: str, value: Any) -> Any:
    if value is None:
        return None

    if key in {"password", "password_hash", "token"}:
        return "***"

    if key == "email":
        text = str(value)
        if "@" in text:
            _, domain = text.split("@", 1)
            return f"***@{domain}"
        return "***"

    return value


def sanitize_payload_for_audit(data: Any) -> Any:
    """Return a copy of ``data`` with credentials and contact fields masked."""

    if isinstance(data, Mapping):
        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            masked_value = _mask_value(key, value) if key in SENSITIVE_KEYS else value
            sanitized[key] = sanitize_payload_for_audit(masked_value)
        return sanitized

    if isinstance(data, list):
        return [sanitize_payload_for_audit(item) for item in data]

    return data


__all__ = ["SENSITIVE_KEYS", "sanitize_payload_for_audit"]
