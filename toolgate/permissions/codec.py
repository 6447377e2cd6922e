"""Decode and encode the untagged wire forms of permission entries.

The wire uses bare strings for the simple policies (``"alwaysAllow"``,
``"deny"``) and an object for the detailed form. Disambiguation happens
here, once, so the rest of the package only sees the closed model.
"""

from __future__ import annotations

from typing import Any

from toolgate.errors import PermissionDecodeError
from toolgate.permissions.models import (
    AlwaysAllow,
    Deny,
    DetailedList,
    PermissionSubject,
    PermissionTable,
    ToolPermission,
    ToolPermissions,
)

ALWAYS_ALLOW_KEY = "alwaysAllow"
DENY_KEY = "deny"
BUILT_IN_KEY = "builtIn"

_SIMPLE_VARIANTS: dict[str, type[ToolPermission]] = {
    ALWAYS_ALLOW_KEY: AlwaysAllow,
    DENY_KEY: Deny,
}


def decode_subject(value: Any) -> PermissionSubject:
    if not isinstance(value, str):
        raise PermissionDecodeError(f"permission subject must be a string, got {value!r}")
    return PermissionSubject(value)


def decode_tool_permission(value: Any) -> ToolPermission:
    if isinstance(value, str):
        variant = _SIMPLE_VARIANTS.get(value)
        if variant is None:
            raise PermissionDecodeError(
                f"unknown variant `{value}`, expected `{ALWAYS_ALLOW_KEY}` or `{DENY_KEY}`"
            )
        return variant()

    if isinstance(value, dict):
        unknown = sorted(key for key in value if key not in _SIMPLE_VARIANTS)
        if unknown:
            raise PermissionDecodeError(
                f"unknown field `{unknown[0]}`, expected `{ALWAYS_ALLOW_KEY}` or `{DENY_KEY}`"
            )
        return DetailedList(
            always_allow=_string_list(value.get(ALWAYS_ALLOW_KEY, []), ALWAYS_ALLOW_KEY),
            deny=_string_list(value.get(DENY_KEY, []), DENY_KEY),
        )

    raise PermissionDecodeError(f"expected string or map, got {type(value).__name__}")


def decode_permission_table(value: Any, label: str) -> PermissionTable:
    if not isinstance(value, dict):
        raise PermissionDecodeError(f"`{label}` must be an object")
    return {
        decode_subject(name): decode_tool_permission(entry)
        for name, entry in value.items()
    }


def decode_tool_permissions(value: Any) -> ToolPermissions:
    """Decode a ``toolPerms`` object.

    ``builtIn`` holds first-party tools; every other key is an MCP server
    name (or ``"*"``) mapping tool names to policies.
    """
    if not isinstance(value, dict):
        raise PermissionDecodeError("tool permissions must be an object")

    built_in: PermissionTable = {}
    custom: dict[PermissionSubject, PermissionTable] = {}
    for key, entry in value.items():
        if key == BUILT_IN_KEY:
            built_in = decode_permission_table(entry, BUILT_IN_KEY)
            continue
        custom[decode_subject(key)] = decode_permission_table(entry, key)
    return ToolPermissions(built_in=built_in, custom=custom)


def encode_tool_permission(permission: ToolPermission) -> Any:
    if isinstance(permission, AlwaysAllow):
        return ALWAYS_ALLOW_KEY
    if isinstance(permission, Deny):
        return DENY_KEY
    if isinstance(permission, DetailedList):
        payload: dict[str, list[str]] = {}
        if permission.always_allow:
            payload[ALWAYS_ALLOW_KEY] = list(permission.always_allow)
        if permission.deny:
            payload[DENY_KEY] = list(permission.deny)
        return payload
    raise TypeError(f"unsupported tool permission: {permission!r}")


def encode_permission_table(table: PermissionTable) -> dict[str, Any]:
    return {subject.name: encode_tool_permission(entry) for subject, entry in table.items()}


def encode_tool_permissions(permissions: ToolPermissions) -> dict[str, Any]:
    payload: dict[str, Any] = {BUILT_IN_KEY: encode_permission_table(permissions.built_in)}
    for server, table in permissions.custom.items():
        payload[server.name] = encode_permission_table(table)
    return payload


def describe_tool_permission(permission: ToolPermission) -> str:
    if isinstance(permission, AlwaysAllow):
        return ALWAYS_ALLOW_KEY
    if isinstance(permission, Deny):
        return DENY_KEY
    if isinstance(permission, DetailedList):
        return "detailed"
    return type(permission).__name__


def _string_list(value: Any, label: str) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise PermissionDecodeError(f"`{label}` must be a list of strings")
    return tuple(value)
