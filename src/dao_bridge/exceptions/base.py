"""
Host-side exception taxonomy.

Everything that leaves the translation layer is one of these classes. Callers
catch them instead of SQLAlchemy or driver exceptions, so application code
does not depend on which database (or which DB-API driver) sits underneath.

    DataAccessError
    ├── NonTransientDataAccessError
    │   ├── DataIntegrityViolationError
    │   │   └── DuplicateKeyError
    │   ├── BadSqlGrammarError
    │   ├── InvalidDataAccessApiUsageError
    │   │   └── UnsupportedOperationError
    │   ├── PermissionDeniedDataAccessError
    │   └── DataAccessResourceFailureError
    ├── TransientDataAccessError
    │   ├── TransientDataAccessResourceError
    │   ├── QueryTimeoutError
    │   └── ConcurrencyFailureError
    │       ├── CannotAcquireLockError
    │       ├── DeadlockLoserDataAccessError
    │       └── CannotSerializeTransactionError
    ├── UncategorizedSQLError
    └── PersistenceSystemError

TransactionError and ConfigurationError sit outside the tree: catching
DataAccessError never catches them.
"""

from typing import Iterable

# =================================================================================================================
# Data access errors
# =================================================================================================================


class DataAccessError(Exception):
    """
    Base exception for everything the translation layer hands back to callers.

    - message: human-friendly message
    - fields: optional list of column names involved in the failure (e.g. ['email'])
    - constraint: optional DB constraint name (for logs only, never in payloads)
    - error_code: canonical short code used by clients (class-level default)
    """

    error_code: str = "data_access"

    # Map canonical error_code -> default HTTP status for hosts that expose these over HTTP.
    ERROR_CODE_TO_STATUS = {
        "duplicate": 409,
        "integrity_violation": 422,
        "bad_sql_grammar": 500,
        "invalid_usage": 500,
        "permission_denied": 403,
        "resource_failure": 503,
        "transient_resource": 503,
        "query_timeout": 504,
        "concurrency_failure": 409,
        "lock_failure": 409,
        "deadlock": 409,
        "serialization_failure": 409,
    }

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else None
        self.constraint = constraint

    def __str__(self) -> str:
        base = self.message
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if parts:
            return f"{base} ({'; '.join(parts)})"
        return base

    def public_message(self) -> str:
        return self.message

    def to_payload(self) -> dict:
        """
        Return a JSON-serializable dict suitable for HTTP responses.
        Standard shape:
            {
                "detail": "A human-friendly message",
                "code": "duplicate",
                "fields": ["username"],        # optional
            }
        The constraint name is never included.
        """
        payload = {"detail": self.public_message(), "code": self.error_code}
        if self.fields:
            payload["fields"] = list(self.fields)
        return payload

    def http_status(self) -> int:
        """HTTP status for this error; unknown codes map to 500."""
        return self.ERROR_CODE_TO_STATUS.get(self.error_code, 500)


class NonTransientDataAccessError(DataAccessError):
    """Retrying the same operation will fail again unless the cause is fixed."""


class TransientDataAccessError(DataAccessError):
    """The same operation may succeed if retried (by the caller, never by this layer)."""


# -----------------------
# SQL-translated errors
# -----------------------

class SQLTranslatedError(DataAccessError):
    """
    Mixin-style base for errors produced by a low-level SQL translator.

    Carries the diagnostic task label, the SQL (when known), the SQLSTATE and
    vendor code read off the native failure. The native failure itself is
    attached as ``__cause__``.

    `message` holds driver text and SQL; client payloads use `public_detail`.
    """

    public_detail: str = "Data access failure"

    def __init__(self, task: str, sql: str | None, native: BaseException, *,
                 sql_state: str | None = None, vendor_code: int | str | None = None,
                 fields: Iterable[str] | None = None, constraint: str | None = None):
        super().__init__(build_message(task, sql, native), fields=fields, constraint=constraint)
        self.task = task
        self.sql = sql
        self.sql_state = sql_state
        self.vendor_code = vendor_code
        self.native = native
        self.__cause__ = native

    def public_message(self) -> str:
        return self.public_detail


class DataIntegrityViolationError(SQLTranslatedError, NonTransientDataAccessError):
    """Insert/update violated an integrity constraint (not null, foreign key, check, bad data)."""
    error_code = "integrity_violation"
    public_detail = "Value violates a data integrity constraint"


class DuplicateKeyError(DataIntegrityViolationError):
    """Unique constraint / primary key violation."""
    error_code = "duplicate"
    public_detail = "Duplicate value violates a unique constraint"


class BadSqlGrammarError(SQLTranslatedError, NonTransientDataAccessError):
    """Invalid SQL: syntax errors, unknown tables or columns."""
    error_code = "bad_sql_grammar"


class PermissionDeniedDataAccessError(SQLTranslatedError, NonTransientDataAccessError):
    error_code = "permission_denied"


class DataAccessResourceFailureError(SQLTranslatedError, NonTransientDataAccessError):
    """The database could not be reached, or a resource (disk, file) failed for good."""
    error_code = "resource_failure"


class TransientDataAccessResourceError(SQLTranslatedError, TransientDataAccessError):
    """Resource temporarily unavailable (busy database, dropped connection)."""
    error_code = "transient_resource"


class QueryTimeoutError(SQLTranslatedError, TransientDataAccessError):
    error_code = "query_timeout"


class ConcurrencyFailureError(SQLTranslatedError, TransientDataAccessError):
    error_code = "concurrency_failure"


class CannotAcquireLockError(ConcurrencyFailureError):
    error_code = "lock_failure"


class DeadlockLoserDataAccessError(ConcurrencyFailureError):
    error_code = "deadlock"


class CannotSerializeTransactionError(ConcurrencyFailureError):
    error_code = "serialization_failure"


class UncategorizedSQLError(SQLTranslatedError):
    """
    A native failure was present but no translator could classify it.
    Task label and native failure are kept for diagnostics.
    """
    error_code = "uncategorized_sql"


# -----------------------
# Non-SQL errors
# -----------------------

class InvalidDataAccessApiUsageError(NonTransientDataAccessError):
    """The data access API was used incorrectly (a programming error on the caller side)."""
    error_code = "invalid_usage"


class UnsupportedOperationError(InvalidDataAccessApiUsageError):
    """Raised when a caller tries to drive the lifecycle of a managed session handle."""


class PersistenceSystemError(DataAccessError):
    """
    Generic wrapper for SQLAlchemy failures that carry neither a driver error nor a
    transaction failure (mapper misconfiguration, detached instances, ...).
    """
    error_code = "persistence_system"

    def __init__(self, cause: BaseException):
        super().__init__(str(cause))
        self.__cause__ = cause


# =================================================================================================================
# Outside the data access tree
# =================================================================================================================


class TransactionError(Exception):
    """
    Failure raised by the host's transaction management.
    The translator re-raises it untouched, it is never wrapped into a DataAccessError.
    """


class ConfigurationError(Exception):
    """A component was put into service without the configuration it requires."""


def build_message(task: str, sql: str | None, native: BaseException) -> str:
    """Compose "<task>; SQL [<sql>]; <native message>" (the SQL part only when known)."""
    sql_part = f"SQL [{sql}]; " if sql else ""
    return f"{task}; {sql_part}{native}"


__all__ = [
    "DataAccessError",
    "NonTransientDataAccessError",
    "TransientDataAccessError",
    "SQLTranslatedError",
    "DataIntegrityViolationError",
    "DuplicateKeyError",
    "BadSqlGrammarError",
    "PermissionDeniedDataAccessError",
    "DataAccessResourceFailureError",
    "TransientDataAccessResourceError",
    "QueryTimeoutError",
    "ConcurrencyFailureError",
    "CannotAcquireLockError",
    "DeadlockLoserDataAccessError",
    "CannotSerializeTransactionError",
    "UncategorizedSQLError",
    "InvalidDataAccessApiUsageError",
    "UnsupportedOperationError",
    "PersistenceSystemError",
    "TransactionError",
    "ConfigurationError",
    "build_message",
]
