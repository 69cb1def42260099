"""
Translate SQLAlchemy failures into the host's data access taxonomy.

`ExceptionTranslator.translate(exc)` looks at the shape of the failure once
and follows a fixed policy:

| Failure                                   | Result                                           |
| ----------------------------------------- | ------------------------------------------------ |
| not a SQLAlchemyError                     | None ("not mine", try the next translator)       |
| SQLAlchemyError caused by a driver error  | low-level translation, else UncategorizedSQLError |
| SQLAlchemyError caused by TransactionError| the TransactionError is raised, not returned     |
| any other SQLAlchemyError                 | PersistenceSystemError wrapping the failure      |

A SQLAlchemyError caused by another SQLAlchemyError (batched flushes,
re-raised statement errors) is unwrapped exactly one level before the cause
is inspected. Deeper nesting is left as-is.

Usage:
    translator = ExceptionTranslator.for_data_source(engine)
    try:
        session.execute(...)
    except Exception as exc:
        translated = translator.translate(exc)
        if translated is None:
            raise
        raise translated
"""

import logging
from enum import Enum
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError, StatementError, DBAPIError

from dao_bridge.core.lazy import LazyInitializer
from .base import DataAccessError, UncategorizedSQLError, PersistenceSystemError, TransactionError
from .diagnostics import is_native_failure, register_dialect_failure_types
from .sql_translators import SQLExceptionTranslator, ErrorCodeTranslator

logger = logging.getLogger(__name__)


# =================================================================================================================
# Cause classification
# =================================================================================================================

class CauseKind(str, Enum):
    NATIVE = "native"
    TRANSACTION = "transaction"
    OTHER = "other"


def cause_of(exc: BaseException) -> BaseException | None:
    """
    The failure `exc` wraps: the driver error SQLAlchemy stored on `.orig`, or the chained `__cause__`.
    """
    if isinstance(exc, StatementError) and exc.orig is not None:
        return exc.orig
    return exc.__cause__


def classify_cause(exc: BaseException) -> tuple[CauseKind, BaseException | None]:
    """Classify the cause of `exc` once, so the translation policy is a single branch on the result."""
    cause = cause_of(exc)
    if isinstance(exc, DBAPIError) and cause is not None:
        # DBAPIError.orig is always the driver's exception
        return CauseKind.NATIVE, cause
    if isinstance(cause, TransactionError):
        return CauseKind.TRANSACTION, cause
    if isinstance(exc, StatementError):
        # SQLAlchemy only builds a DBAPIError around driver errors; any other orig is application code
        return CauseKind.OTHER, cause
    if is_native_failure(cause):
        return CauseKind.NATIVE, cause
    return CauseKind.OTHER, cause


# =================================================================================================================
# Translators
# =================================================================================================================

class ExceptionTranslator:
    """
    Entry point of the translation layer.

    Args:
        translator_factory: zero-argument callable building the low-level SQL translator.
        lazy_init: when True the low-level translator is built the first time a driver
            error needs translating; when False it is built here, right away.
    """

    def __init__(self, translator_factory: Callable[[], SQLExceptionTranslator], lazy_init: bool = True):
        self._sql_translator = LazyInitializer(translator_factory, lazy=lazy_init)

    @classmethod
    def for_data_source(cls, data_source: Any, lazy_init: bool = True) -> "ExceptionTranslator":
        """Translator backed by the default ErrorCodeTranslator bound to `data_source` (Engine, Connection, URL)."""
        register_dialect_failure_types(data_source)
        return cls(lambda: ErrorCodeTranslator(data_source), lazy_init=lazy_init)

    @property
    def sql_translator_initialized(self) -> bool:
        return self._sql_translator.initialized

    def translate(self, exc: BaseException) -> DataAccessError | None:
        """
        Translate `exc` if it is a SQLAlchemy failure, else return None.

        The task label handed to the low-level translator is `str(exc)` as-is, with
        no trailing newline; it becomes the first part of the translated message.

        Raises:
            TransactionError: when the failure was caused by one; the cause instance itself is raised.
        """
        if not isinstance(exc, SQLAlchemyError):
            return None

        # Batch failures arrive wrapped in one more SQLAlchemyError; unwrap one level only
        inner = cause_of(exc)
        if isinstance(inner, SQLAlchemyError):
            exc = inner

        kind, cause = classify_cause(exc)

        if kind is CauseKind.NATIVE:
            sql_translator = self._sql_translator.get()
            task = str(exc)
            translated = sql_translator.translate(task, None, cause)
            if translated is not None:
                logger.info(
                    "translator.native_translated",
                    extra={"error_class": type(translated).__name__, "native_class": type(cause).__name__},
                )
                return translated
            logger.warning("translator.native_uncategorized", extra={"native_class": type(cause).__name__})
            return UncategorizedSQLError(task, None, cause)

        elif kind is CauseKind.TRANSACTION:
            logger.info("translator.transaction_failure_reraised", extra={"native_class": type(cause).__name__})
            raise cause

        else:
            logger.debug("translator.system_failure", extra={"error_class": type(exc).__name__})
            return PersistenceSystemError(exc)


class ChainedExceptionTranslator:
    """
    Ask several translators in order; the first non-None answer wins.

    Mirrors how callers are expected to treat None from any single translator:
    "not mine", not "no error".
    """

    def __init__(self, *translators):
        self.translators = list(translators)

    def add(self, translator) -> None:
        self.translators.append(translator)

    def translate(self, exc: BaseException) -> DataAccessError | None:
        for translator in self.translators:
            translated = translator.translate(exc)
            if translated is not None:
                return translated
        return None


__all__ = [
    "CauseKind",
    "cause_of",
    "classify_cause",
    "ExceptionTranslator",
    "ChainedExceptionTranslator",
]
