"""
dao_bridge: SQLAlchemy sessions and failures, adapted to a host's data access contract.

    from dao_bridge import ExceptionTranslator, SessionAccessor, initialize

Two pieces:
  - ExceptionTranslator turns SQLAlchemy/driver failures into DataAccessError subclasses.
  - SessionAccessor hands out one managed, thread-safe SessionTemplate per component.
"""

from .exceptions.base import (
    DataAccessError,
    DataIntegrityViolationError,
    DuplicateKeyError,
    BadSqlGrammarError,
    UncategorizedSQLError,
    PersistenceSystemError,
    TransactionError,
    ConfigurationError,
    UnsupportedOperationError,
)
from .exceptions.translator import ExceptionTranslator, ChainedExceptionTranslator
from .support import SessionAccessor, SessionTemplate, Lifecycle, initialize

__all__ = [
    "DataAccessError",
    "DataIntegrityViolationError",
    "DuplicateKeyError",
    "BadSqlGrammarError",
    "UncategorizedSQLError",
    "PersistenceSystemError",
    "TransactionError",
    "ConfigurationError",
    "UnsupportedOperationError",
    "ExceptionTranslator",
    "ChainedExceptionTranslator",
    "SessionAccessor",
    "SessionTemplate",
    "Lifecycle",
    "initialize",
]
