"""
Connection Strings

Connection strings are configured in ADO.NET form (``Data Source=...;Initial Catalog=...``).
This module canonicalizes alias keys, edits the catalog, and converts to the ODBC form
pyodbc expects.
"""

import re
from collections import OrderedDict
from typing import Dict
from typing import Iterator
from typing import List
from typing import Optional
from typing import Tuple

from tenantdb_api.monitoring.logger import mask_connection_string
from tenantdb_api.workflow.exceptions import ProvisioningError

_ALIAS_REWRITES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"(^|;)\s*username\s*=", re.IGNORECASE), r"\1User ID="),
    (re.compile(r"(^|;)\s*user\s*=", re.IGNORECASE), r"\1User ID="),
    (re.compile(r"(^|;)\s*pwd\s*=", re.IGNORECASE), r"\1Password="),
]

_TRUE_VALUES = {"true", "yes", "sspi", "1"}

# ADO.NET key -> ODBC key
_ODBC_KEYS: Dict[str, str] = {
    "data source": "SERVER",
    "server": "SERVER",
    "address": "SERVER",
    "addr": "SERVER",
    "network address": "SERVER",
    "initial catalog": "DATABASE",
    "database": "DATABASE",
    "user id": "UID",
    "uid": "UID",
    "password": "PWD",
    "application name": "APP",
    "app": "APP",
}
_ODBC_BOOLEAN_KEYS: Dict[str, str] = {
    "encrypt": "Encrypt",
    "trustservercertificate": "TrustServerCertificate",
    "trust server certificate": "TrustServerCertificate",
    "multipleactiveresultsets": "MARS_Connection",
    "multiple active result sets": "MARS_Connection",
}
_INTEGRATED_KEYS = {"integrated security", "trusted_connection"}
# Client-side pooling and timeouts have no ODBC connection string equivalent
_ADO_ONLY_KEYS = {
    "pooling",
    "max pool size",
    "min pool size",
    "persist security info",
    "connect timeout",
    "connection timeout",
    "timeout",
    "connection lifetime",
    "load balance timeout",
}


class InvalidConnectionStringError(ProvisioningError):
    """The connection string could not be parsed."""


def normalize_connection_string(raw: str) -> str:
    """
    Rewrite alias credential keys to their canonical spelling.

    ``username=`` and ``user=`` become ``User ID=``, ``pwd=`` becomes ``Password=``.
    Matching is case-insensitive and anchored at field boundaries. Everything else is
    left untouched, and normalizing twice gives the same result.
    """
    if not raw:
        return raw
    normalized = raw
    for pattern, replacement in _ALIAS_REWRITES:
        normalized = pattern.sub(replacement, normalized)
    return normalized


def _split_fields(raw: str) -> Iterator[str]:
    field: List[str] = []
    closing: Optional[str] = None
    in_value = False
    for char in raw:
        if closing:
            field.append(char)
            if char == closing:
                closing = None
            continue
        if char == ";":
            yield "".join(field)
            field = []
            in_value = False
            continue
        if char == "=":
            in_value = True
        elif in_value and char in "'\"{" and not "".join(field).split("=", 1)[1].strip():
            closing = "}" if char == "{" else char
        field.append(char)
    if closing:
        raise InvalidConnectionStringError("Unterminated quoted value in connection string")
    yield "".join(field)


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        return value[1:-1]
    if len(value) >= 2 and value[0] == "{" and value[-1] == "}":
        return value[1:-1]
    return value


def _quote(value: str) -> str:
    if ";" in value or value != value.strip():
        if '"' not in value:
            return f'"{value}"'
        return "'" + value + "'"
    return value


class SqlConnectionString:
    """Parsed ADO.NET connection string. Keys compare case-insensitively and keep their order."""

    def __init__(self, raw: str):
        self._fields: "OrderedDict[str, Tuple[str, str]]" = OrderedDict()
        for field in _split_fields(normalize_connection_string(raw or "")):
            if not field.strip():
                continue
            if "=" not in field:
                raise InvalidConnectionStringError(f"Connection string field without a value: '{field.strip()}'")
            key, value = field.split("=", 1)
            key = key.strip()
            self._fields[key.lower()] = (key, _unquote(value))

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        entry = self._fields.get(key.lower())
        return entry[1] if entry else default

    def set(self, key: str, value: str) -> None:
        existing = self._fields.get(key.lower())
        self._fields[key.lower()] = (existing[0] if existing else key, value)

    def remove(self, key: str) -> None:
        self._fields.pop(key.lower(), None)

    def __contains__(self, key: str) -> bool:
        return key.lower() in self._fields

    @property
    def server(self) -> Optional[str]:
        for key in ("data source", "server", "address", "addr", "network address"):
            if key in self._fields:
                return self._fields[key][1]
        return None

    @property
    def database(self) -> Optional[str]:
        return self.get("initial catalog") or self.get("database")

    @property
    def integrated_security(self) -> bool:
        value = self.get("integrated security") or self.get("trusted_connection") or ""
        return value.strip().lower() in _TRUE_VALUES

    @property
    def user_id(self) -> Optional[str]:
        return self.get("user id") or self.get("uid")

    @property
    def password(self) -> Optional[str]:
        return self.get("password")

    def with_database(self, database_name: str) -> "SqlConnectionString":
        """Copy of this connection string scoped to another catalog."""
        copy = SqlConnectionString("")
        copy._fields = OrderedDict(self._fields)
        if "database" in copy._fields and "initial catalog" not in copy._fields:
            copy.set("Database", database_name)
        else:
            copy.set("Initial Catalog", database_name)
        return copy

    def to_odbc(self, driver: str) -> str:
        """Render as an ODBC connection string for pyodbc."""
        parts = [f"DRIVER={{{driver}}}"]
        for lowered, (key, value) in self._fields.items():
            if lowered in _ADO_ONLY_KEYS:
                continue
            if lowered in _INTEGRATED_KEYS:
                if value.strip().lower() in _TRUE_VALUES:
                    parts.append("Trusted_Connection=yes")
                continue
            if lowered in _ODBC_BOOLEAN_KEYS:
                flag = "yes" if value.strip().lower() in _TRUE_VALUES else "no"
                parts.append(f"{_ODBC_BOOLEAN_KEYS[lowered]}={flag}")
                continue
            odbc_key = _ODBC_KEYS.get(lowered, key)
            if ";" in value or "{" in value or "}" in value:
                value = "{" + value.replace("}", "}}") + "}"
            parts.append(f"{odbc_key}={value}")
        return ";".join(parts)

    def __str__(self) -> str:
        return ";".join(f"{key}={_quote(value)}" for key, value in self._fields.values())

    def __repr__(self) -> str:
        return f"SqlConnectionString({mask_connection_string(str(self))!r})"
