import pytest

from dao_bridge.exceptions.base import (
    CannotAcquireLockError,
    ConcurrencyFailureError,
    ConfigurationError,
    DataAccessError,
    DataIntegrityViolationError,
    DuplicateKeyError,
    NonTransientDataAccessError,
    PersistenceSystemError,
    QueryTimeoutError,
    TransactionError,
    TransientDataAccessError,
    UncategorizedSQLError,
    UnsupportedOperationError,
    build_message,
)
from dao_bridge.tests.test_fixtures import natives


def test_build_message_with_and_without_sql():
    native = natives.IntegrityError("UNIQUE constraint failed: authors.name")
    assert build_message("insert", None, native) == "insert; UNIQUE constraint failed: authors.name"
    assert build_message("insert", "INSERT INTO authors", native) == (
        "insert; SQL [INSERT INTO authors]; UNIQUE constraint failed: authors.name"
    )


def test_translated_error_keeps_native_as_cause():
    native = natives.IntegrityError("dup")
    err = DuplicateKeyError("insert", None, native, sql_state="23505", fields=["email"], constraint="uq_email")

    assert err.__cause__ is native
    assert err.native is native
    assert err.sql_state == "23505"
    assert str(err) == "insert; dup (fields: email; constraint: uq_email)"


@pytest.mark.parametrize("error_cls, family", [
    (DuplicateKeyError, DataIntegrityViolationError),
    (DataIntegrityViolationError, NonTransientDataAccessError),
    (QueryTimeoutError, TransientDataAccessError),
    (CannotAcquireLockError, ConcurrencyFailureError),
    (ConcurrencyFailureError, TransientDataAccessError),
    (UncategorizedSQLError, DataAccessError),
    (UnsupportedOperationError, NonTransientDataAccessError),
])
def test_taxonomy(error_cls, family):
    assert issubclass(error_cls, family)


def test_transaction_and_configuration_errors_are_not_data_access_errors():
    # callers catching DataAccessError must never swallow these
    assert not issubclass(TransactionError, DataAccessError)
    assert not issubclass(ConfigurationError, DataAccessError)


def test_persistence_system_error_wraps_cause():
    cause = RuntimeError("mapper misconfigured")
    err = PersistenceSystemError(cause)
    assert err.__cause__ is cause
    assert err.message == "mapper misconfigured"


def test_payload_and_http_status():
    err = DuplicateKeyError("insert", None, natives.IntegrityError("dup"), fields=["username"], constraint="uq")
    assert err.to_payload() == {
        "detail": "Duplicate value violates a unique constraint",
        "code": "duplicate",
        "fields": ["username"],
    }
    assert err.http_status() == 409

    assert PersistenceSystemError(RuntimeError("x")).http_status() == 500
    assert QueryTimeoutError("q", None, natives.OperationalError("t")).http_status() == 504
