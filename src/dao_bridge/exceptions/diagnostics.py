"""
Read driver diagnostics off native (DB-API) failures.

Every PEP 249 driver defines its own exception classes and exposes error
details differently:

| Driver            | SQLSTATE                     | Vendor code                  |
| ----------------- | ---------------------------- | ---------------------------- |
| psycopg2          | `pgcode`                     | -                            |
| psycopg 3         | `sqlstate`, `diag.sqlstate`  | -                            |
| asyncpg           | `sqlstate`                   | -                            |
| sqlite3 (3.11+)   | -                            | `sqlite_errorcode`           |
| pymysql / MySQLdb | -                            | `args[0]` (int)              |
| mysql-connector   | `sqlstate`                   | `errno`                      |
| oracledb          | -                            | `args[0].code`               |
| pyodbc            | `args[0]` ("23000")          | -                            |

The helpers below hide those differences. They never raise: a value that
cannot be read is simply `None`.
"""

import re
import sys
import logging

logger = logging.getLogger(__name__)

# DB-API driver modules whose `Error` base class marks a native failure once the module is loaded.
KNOWN_DRIVER_MODULES = (
    "sqlite3",
    "psycopg2",
    "psycopg",
    "pymysql",
    "MySQLdb",
    "mysql.connector",
    "oracledb",
    "cx_Oracle",
    "pyodbc",
    "pymssql",
)

_SQLSTATE_PATTERN = re.compile(r"^[0-9A-Z]{5}$")

# Driver exception types registered explicitly (dialect DB-API modules, drivers not listed above).
_registered_native_types: list[type[BaseException]] = []


def register_native_failure_type(exc_type: type[BaseException]) -> None:
    """Teach `is_native_failure` about a driver exception base class."""
    if exc_type not in _registered_native_types:
        _registered_native_types.append(exc_type)


def register_dialect_failure_types(data_source) -> None:
    """Register the `Error` base class of the DB-API module behind an Engine or Connection, if it is loaded."""
    dialect = getattr(data_source, "dialect", None)
    dbapi = getattr(dialect, "dbapi", None) if dialect is not None else None
    error_cls = getattr(dbapi, "Error", None) if dbapi is not None else None
    if isinstance(error_cls, type) and issubclass(error_cls, BaseException):
        register_native_failure_type(error_cls)


def _loaded_driver_error_types() -> list[type[BaseException]]:
    types = []
    for module_name in KNOWN_DRIVER_MODULES:
        # only drivers the process already imported; never import one here
        module = sys.modules.get(module_name)
        error_cls = getattr(module, "Error", None) if module is not None else None
        if isinstance(error_cls, type) and issubclass(error_cls, BaseException):
            types.append(error_cls)
    return types


def is_native_failure(exc: BaseException | None) -> bool:
    """
    True when `exc` is a driver (DB-API) exception rather than a SQLAlchemy or application error.

    A failure counts as native when it derives from a registered driver type or from
    the `Error` class of a loaded driver module. Classes that only share a PEP 249
    name (`binascii.Error`, an application `IntegrityError`) are not native.
    """
    if exc is None:
        return False
    native_types = tuple(_registered_native_types) + tuple(_loaded_driver_error_types())
    return bool(native_types) and isinstance(exc, native_types)


# =================================================================================================================
# SQLSTATE / vendor codes
# =================================================================================================================

def extract_sql_state(native: BaseException) -> str | None:
    """Return the five-character SQLSTATE of a native failure, or None."""
    for attr in ("pgcode", "sqlstate"):
        value = getattr(native, attr, None)
        if isinstance(value, str) and value:
            return value

    diag = getattr(native, "diag", None)
    value = getattr(diag, "sqlstate", None) if diag is not None else None
    if isinstance(value, str) and value:
        return value

    # pyodbc puts the SQLSTATE first in args
    args = getattr(native, "args", ())
    if args and isinstance(args[0], str) and _SQLSTATE_PATTERN.match(args[0]):
        return args[0]

    return None


def extract_vendor_code(native: BaseException) -> int | None:
    """Return the vendor-specific numeric error code of a native failure, or None."""
    code = getattr(native, "sqlite_errorcode", None)
    if isinstance(code, int):
        return code

    code = getattr(native, "errno", None)
    if isinstance(code, int):
        return code

    args = getattr(native, "args", ())
    if args:
        first = args[0]
        # bool is an int subclass; it is never an error code
        if isinstance(first, int) and not isinstance(first, bool):
            return first
        # oracledb / cx_Oracle wrap an _Error object carrying .code
        code = getattr(first, "code", None)
        if isinstance(code, int):
            return code

    return None


def extract_constraint_name(native: BaseException) -> str | None:
    """Constraint name when the driver reports it (psycopg diagnostics)."""
    diag = getattr(native, "diag", None)
    name = getattr(diag, "constraint_name", None) if diag is not None else None
    if name:
        return name
    # asyncpg exposes it directly on the exception
    name = getattr(native, "constraint_name", None)
    return name if isinstance(name, str) and name else None


# =================================================================================================================
# Column extraction helpers
# =================================================================================================================

def _extract_columns_postgres(msg: str) -> list[str] | None:
    """
    Try to extract involved column names from common Postgres messages:
      - 'null value in column "username" violates not-null constraint'
      - 'DETAIL:  Key (email, username)=(a@b.com, u) already exists.'
    """
    m = re.search(r'null value in column "(?P<col>[^"]+)"', msg, flags=re.IGNORECASE)
    if m:
        return [m.group("col")]

    m = re.search(r'key \((?P<cols>[^)]+)\)=', msg, flags=re.IGNORECASE)
    if m:
        return [c.strip().strip('"') for c in m.group("cols").split(",")]

    return None


def _extract_columns_sqlite(msg: str) -> list[str] | None:
    # 'UNIQUE constraint failed: users.email' / 'NOT NULL constraint failed: users.email'
    m = re.search(r'(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>[^\n]+)', msg, flags=re.IGNORECASE)
    if m:
        return [c.split('.')[-1].strip() for c in re.split(r',\s*', m.group("cols").strip())]
    return None


def _extract_columns_mysql(msg: str) -> list[str] | None:
    # "Duplicate entry 'foo' for key 'users.idx_users_email'"
    m = re.search(r"Duplicate entry .* for key '(?P<key>[^']+)'", msg, flags=re.IGNORECASE)
    if m:
        return [m.group("key").split('.')[-1]]
    # "Column 'email' cannot be null"
    m = re.search(r"Column '(?P<col>[^']+)' cannot be null", msg, flags=re.IGNORECASE)
    if m:
        return [m.group("col")]
    return None


def extract_columns(message: str | None) -> list[str] | None:
    """
    Best-effort extraction of column names from a driver message (Postgres, SQLite, MySQL).
    """
    if not message:
        return None

    for extractor in (_extract_columns_postgres, _extract_columns_sqlite, _extract_columns_mysql):
        cols = extractor(message)
        if cols:
            return cols

    logger.debug("diagnostics.no_columns_found", extra={"message_snippet": message[:200]})
    return None


__all__ = [
    "KNOWN_DRIVER_MODULES",
    "register_native_failure_type",
    "register_dialect_failure_types",
    "is_native_failure",
    "extract_sql_state",
    "extract_vendor_code",
    "extract_constraint_name",
    "extract_columns",
]
