"""
Low-level SQL translators: native (DB-API) failure -> DataAccessError.

Three strategies, from most to least specific:

1. `ErrorCodeTranslator`: per-vendor error-code tables, picked from the
   dialect of a data source (Engine, Connection or database URL).
2. `ExceptionClassTranslator`: the PEP 249 class of the native failure
   (IntegrityError, ProgrammingError, ...).
3. `SQLStateTranslator`: the SQLSTATE class (first two characters).

Each translator returns None when it cannot classify the failure; the first
two fall back to the next strategy before giving up. The caller decides what
"unclassified" means (ExceptionTranslator wraps it in UncategorizedSQLError).
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol, Type

from sqlalchemy.engine import make_url

from .base import (
    SQLTranslatedError,
    DataIntegrityViolationError,
    DuplicateKeyError,
    BadSqlGrammarError,
    PermissionDeniedDataAccessError,
    DataAccessResourceFailureError,
    TransientDataAccessResourceError,
    QueryTimeoutError,
    ConcurrencyFailureError,
    CannotAcquireLockError,
    DeadlockLoserDataAccessError,
    CannotSerializeTransactionError,
)
from .diagnostics import (
    extract_sql_state,
    extract_vendor_code,
    extract_constraint_name,
    extract_columns,
)

logger = logging.getLogger(__name__)


class SQLExceptionTranslator(Protocol):
    """Anything that can turn a native failure into a DataAccessError (or give up with None)."""

    def translate(self, task: str, sql: str | None, native: BaseException) -> SQLTranslatedError | None:
        ...


# =================================================================================================================
# Shared construction
# =================================================================================================================

def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def _refine_integrity(native: BaseException, sql_state: str | None) -> Type[DataIntegrityViolationError]:
    """
    Integrity violations are reported with one generic code by several vendors
    (SQLite 19, SQLSTATE 23000). Tell duplicates apart from the rest.
    """
    if sql_state == "23505":
        return DuplicateKeyError
    normalized = str(native).lower()
    if _match_any(normalized, ["unique constraint", "unique failed", "unique violation", "duplicate key", "duplicate entry"]):
        return DuplicateKeyError
    return DataIntegrityViolationError


def _build(error_cls: Type[SQLTranslatedError], task: str, sql: str | None,
           native: BaseException, translator: str) -> SQLTranslatedError:
    sql_state = extract_sql_state(native)
    vendor_code = extract_vendor_code(native)

    if error_cls is DataIntegrityViolationError:
        error_cls = _refine_integrity(native, sql_state)

    fields = None
    constraint = None
    if issubclass(error_cls, DataIntegrityViolationError):
        fields = extract_columns(str(native))
        constraint = extract_constraint_name(native)

    logger.debug(
        "translator.native_classified",
        extra={
            "translator": translator,
            "error_class": error_cls.__name__,
            "sql_state": sql_state,
            "vendor_code": vendor_code,
            "constraint_name": constraint,
        },
    )
    return error_cls(task, sql, native, sql_state=sql_state, vendor_code=vendor_code,
                     fields=fields, constraint=constraint)


# =================================================================================================================
# SQLSTATE translator
# =================================================================================================================

# Exact codes checked before the class tables.
SQL_STATE_EXACT: dict[str, Type[SQLTranslatedError]] = {
    "23505": DuplicateKeyError,
    "40001": CannotSerializeTransactionError,
    "40P01": DeadlockLoserDataAccessError,
    "55P03": CannotAcquireLockError,
    "57014": QueryTimeoutError,
    "42501": PermissionDeniedDataAccessError,
}

# Two-character SQLSTATE classes.
BAD_SQL_GRAMMAR_CLASSES = frozenset({"07", "21", "2A", "37", "42", "65"})
DATA_INTEGRITY_CLASSES = frozenset({"01", "02", "22", "23", "27", "44"})
RESOURCE_FAILURE_CLASSES = frozenset({"08", "53", "54", "57", "58"})
TRANSIENT_RESOURCE_CLASSES = frozenset({"JW", "JZ", "S1"})
CONCURRENCY_FAILURE_CLASSES = frozenset({"40", "61"})


class SQLStateTranslator:
    """Classify by SQLSTATE. Works for any driver that reports one."""

    def translate(self, task: str, sql: str | None, native: BaseException) -> SQLTranslatedError | None:
        sql_state = extract_sql_state(native)
        if not sql_state:
            return None

        error_cls = SQL_STATE_EXACT.get(sql_state)
        if error_cls is None:
            error_cls = self._classify_class(sql_state[:2])
        if error_cls is None:
            logger.debug("translator.sql_state_unknown", extra={"sql_state": sql_state})
            return None

        return _build(error_cls, task, sql, native, "sql_state")

    @staticmethod
    def _classify_class(class_code: str) -> Type[SQLTranslatedError] | None:
        if class_code in BAD_SQL_GRAMMAR_CLASSES:
            return BadSqlGrammarError
        if class_code in DATA_INTEGRITY_CLASSES:
            return DataIntegrityViolationError
        if class_code in RESOURCE_FAILURE_CLASSES:
            return DataAccessResourceFailureError
        if class_code in TRANSIENT_RESOURCE_CLASSES:
            return TransientDataAccessResourceError
        if class_code in CONCURRENCY_FAILURE_CLASSES:
            return ConcurrencyFailureError
        return None


# =================================================================================================================
# PEP 249 class translator
# =================================================================================================================

# OperationalError, InternalError and NotSupportedError cover too many unrelated
# situations to be classified by name alone; they go to the SQLSTATE fallback.
DBAPI_CLASS_MAP: dict[str, Type[SQLTranslatedError]] = {
    "IntegrityError": DataIntegrityViolationError,
    "DataError": DataIntegrityViolationError,
    "ProgrammingError": BadSqlGrammarError,
    "InterfaceError": DataAccessResourceFailureError,
}


class ExceptionClassTranslator:
    """Classify by the PEP 249 class of the native failure, then fall back to SQLSTATE."""

    def __init__(self, fallback: SQLExceptionTranslator | None = None):
        self.fallback = fallback if fallback is not None else SQLStateTranslator()

    def translate(self, task: str, sql: str | None, native: BaseException) -> SQLTranslatedError | None:
        for cls in type(native).__mro__:
            error_cls = DBAPI_CLASS_MAP.get(cls.__name__)
            if error_cls is not None:
                return _build(error_cls, task, sql, native, "exception_class")
        return self.fallback.translate(task, sql, native)


# =================================================================================================================
# Vendor error codes
# =================================================================================================================

@dataclass(frozen=True)
class ErrorCodes:
    """
    Error codes of one database vendor, grouped by the error they translate to.

    `use_sql_state` means the vendor's own codes are SQLSTATEs (PostgreSQL),
    so the SQLSTATE is matched against the tables instead of a numeric code.
    `primary_code_mask` strips extended result codes down to their primary
    code (SQLite: 2067 SQLITE_CONSTRAINT_UNIQUE -> 19 SQLITE_CONSTRAINT).
    """

    database: str
    duplicate_key: frozenset = field(default_factory=frozenset)
    data_integrity_violation: frozenset = field(default_factory=frozenset)
    bad_sql_grammar: frozenset = field(default_factory=frozenset)
    permission_denied: frozenset = field(default_factory=frozenset)
    resource_failure: frozenset = field(default_factory=frozenset)
    transient_resource: frozenset = field(default_factory=frozenset)
    cannot_acquire_lock: frozenset = field(default_factory=frozenset)
    deadlock_loser: frozenset = field(default_factory=frozenset)
    cannot_serialize: frozenset = field(default_factory=frozenset)
    query_timeout: frozenset = field(default_factory=frozenset)
    use_sql_state: bool = False
    primary_code_mask: int | None = None

    def categories(self) -> list[tuple[frozenset, Type[SQLTranslatedError]]]:
        # Order matters: duplicate keys before generic integrity violations.
        return [
            (self.duplicate_key, DuplicateKeyError),
            (self.data_integrity_violation, DataIntegrityViolationError),
            (self.bad_sql_grammar, BadSqlGrammarError),
            (self.permission_denied, PermissionDeniedDataAccessError),
            (self.resource_failure, DataAccessResourceFailureError),
            (self.transient_resource, TransientDataAccessResourceError),
            (self.cannot_acquire_lock, CannotAcquireLockError),
            (self.deadlock_loser, DeadlockLoserDataAccessError),
            (self.cannot_serialize, CannotSerializeTransactionError),
            (self.query_timeout, QueryTimeoutError),
        ]

    def classify(self, code: Any) -> Type[SQLTranslatedError] | None:
        if code is None:
            return None
        primary = code & self.primary_code_mask if (self.primary_code_mask and isinstance(code, int)) else None
        for codes, error_cls in self.categories():
            if code in codes:
                return error_cls
        if primary is not None:
            for codes, error_cls in self.categories():
                if primary in codes:
                    return error_cls
        return None


# https://www.sqlite.org/rescode.html
SQLITE_ERROR_CODES = ErrorCodes(
    database="sqlite",
    duplicate_key=frozenset({2067, 1555}),                  # CONSTRAINT_UNIQUE, CONSTRAINT_PRIMARYKEY
    data_integrity_violation=frozenset({19, 20, 25}),       # CONSTRAINT, MISMATCH, RANGE
    bad_sql_grammar=frozenset({1}),                         # ERROR (syntax, no such table/column)
    permission_denied=frozenset({3, 8, 23}),                # PERM, READONLY, AUTH
    resource_failure=frozenset({10, 11, 13, 14, 26}),       # IOERR, CORRUPT, FULL, CANTOPEN, NOTADB
    cannot_acquire_lock=frozenset({5, 6}),                  # BUSY, LOCKED
    query_timeout=frozenset({9}),                           # INTERRUPT
    primary_code_mask=0xFF,
)

MYSQL_ERROR_CODES = ErrorCodes(
    database="mysql",
    duplicate_key=frozenset({1062}),
    data_integrity_violation=frozenset({630, 839, 840, 893, 1048, 1169, 1215, 1216, 1217,
                                        1364, 1451, 1452, 1557, 3819}),
    bad_sql_grammar=frozenset({1054, 1064, 1146}),
    permission_denied=frozenset({1044, 1045, 1142, 1143}),
    resource_failure=frozenset({1}),
    transient_resource=frozenset({2002, 2003, 2006, 2013}),
    cannot_acquire_lock=frozenset({1205, 3572}),
    deadlock_loser=frozenset({1213}),
    query_timeout=frozenset({3024}),
)

POSTGRES_ERROR_CODES = ErrorCodes(
    database="postgresql",
    duplicate_key=frozenset({"23505"}),
    data_integrity_violation=frozenset({"23000", "23502", "23503", "23514"}),
    bad_sql_grammar=frozenset({"03000", "42000", "42601", "42602", "42622", "42703", "42804", "42P01"}),
    permission_denied=frozenset({"42501"}),
    resource_failure=frozenset({"53000", "53100", "53200", "53300"}),
    cannot_acquire_lock=frozenset({"55P03"}),
    deadlock_loser=frozenset({"40P01"}),
    cannot_serialize=frozenset({"40001"}),
    query_timeout=frozenset({"57014"}),
    use_sql_state=True,
)

# pymssql reports the server error number as args[0]; pyodbc does not, and
# falls through to the PEP 249 class / SQLSTATE translators.
MSSQL_ERROR_CODES = ErrorCodes(
    database="mssql",
    duplicate_key=frozenset({2601, 2627}),
    data_integrity_violation=frozenset({515, 544, 547, 8114, 8115}),
    bad_sql_grammar=frozenset({156, 170, 207, 208, 209}),
    permission_denied=frozenset({229}),
    resource_failure=frozenset({4060}),
    cannot_acquire_lock=frozenset({1222}),
    deadlock_loser=frozenset({1205}),
)

ORACLE_ERROR_CODES = ErrorCodes(
    database="oracle",
    duplicate_key=frozenset({1}),
    data_integrity_violation=frozenset({1400, 1722, 2291, 2292}),
    bad_sql_grammar=frozenset({900, 903, 904, 917, 936, 942, 6550, 17006}),
    permission_denied=frozenset({1031}),
    resource_failure=frozenset({17002, 17447}),
    cannot_acquire_lock=frozenset({54, 30006}),
    deadlock_loser=frozenset({60}),
    cannot_serialize=frozenset({8177}),
    query_timeout=frozenset({1013}),
)

ERROR_CODES_BY_DIALECT: dict[str, ErrorCodes] = {
    "sqlite": SQLITE_ERROR_CODES,
    "mysql": MYSQL_ERROR_CODES,
    "mariadb": MYSQL_ERROR_CODES,
    "postgresql": POSTGRES_ERROR_CODES,
    "mssql": MSSQL_ERROR_CODES,
    "oracle": ORACLE_ERROR_CODES,
}


def resolve_dialect_name(data_source: Any) -> str:
    """
    Return the SQLAlchemy dialect name of a data source.

    Accepts an Engine / Connection (anything with `.dialect`), a session
    factory or Session bound to one (`.kw["bind"]` / `.bind`), a `URL`, or a
    database URL string.
    """
    dialect = getattr(data_source, "dialect", None)
    if dialect is not None:
        return dialect.name

    bind = getattr(data_source, "bind", None)
    if bind is None:
        bind = getattr(data_source, "kw", {}).get("bind")
    if bind is not None:
        return resolve_dialect_name(bind)

    return make_url(data_source).get_backend_name()


class ErrorCodeTranslator:
    """
    Default low-level translator, bound to a data source.

    The vendor table is chosen once, from the data source's dialect, when the
    translator is constructed. Codes not found in the table go to `fallback`
    (ExceptionClassTranslator, then SQLStateTranslator).
    """

    def __init__(self, data_source: Any, fallback: SQLExceptionTranslator | None = None):
        self.database = resolve_dialect_name(data_source)
        self.error_codes = ERROR_CODES_BY_DIALECT.get(self.database)
        self.fallback = fallback if fallback is not None else ExceptionClassTranslator()

        if self.error_codes is None:
            logger.warning("translator.unknown_dialect", extra={"dialect": self.database})
        else:
            logger.debug("translator.error_codes_loaded", extra={"dialect": self.database})

    def translate(self, task: str, sql: str | None, native: BaseException) -> SQLTranslatedError | None:
        if self.error_codes is not None:
            if self.error_codes.use_sql_state:
                code = extract_sql_state(native)
            else:
                code = extract_vendor_code(native)

            error_cls = self.error_codes.classify(code)
            if error_cls is not None:
                return _build(error_cls, task, sql, native, f"error_code:{self.database}")

            if code is not None:
                # Unknown code: surface it, keep raw driver text at DEBUG only
                logger.warning(
                    "translator.unknown_error_code",
                    extra={"dialect": self.database, "code": code},
                )
                logger.debug("translator.unknown_error_code_raw", extra={"raw": repr(native)})

        return self.fallback.translate(task, sql, native)


__all__ = [
    "SQLExceptionTranslator",
    "SQLStateTranslator",
    "ExceptionClassTranslator",
    "ErrorCodes",
    "ErrorCodeTranslator",
    "ERROR_CODES_BY_DIALECT",
    "resolve_dialect_name",
]
