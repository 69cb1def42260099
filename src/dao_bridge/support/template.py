"""
SessionTemplate: the shared, thread-safe session handle.

A template wraps a session factory (`sessionmaker`) in a `scoped_session`
registry, so every thread transparently works with its own `Session` while
all callers share one template object. Attribute access is forwarded to the
current thread's session:

    template = SessionTemplate(SessionFactory)
    template.execute(text("select 1"))
    template.add(user)
    template.flush()

Failures raised by forwarded calls go through an ExceptionTranslator, so
callers see DataAccessError subclasses instead of SQLAlchemy/driver errors.

The session lifecycle is not the caller's business: `commit`, `rollback`,
`close`, `begin`, `begin_nested` and `connection` raise
UnsupportedOperationError. Queries built with `query()` run their SQL through
the same translator. The host's transaction management drives the session,
and calls `remove()` when a unit of work ends.
"""

import functools
import logging
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, scoped_session

from dao_bridge.exceptions.base import UnsupportedOperationError
from dao_bridge.exceptions.diagnostics import register_dialect_failure_types
from dao_bridge.exceptions.translator import ExceptionTranslator
from dao_bridge.exceptions.sql_translators import ErrorCodeTranslator, ExceptionClassTranslator

logger = logging.getLogger(__name__)


class SessionTemplate:
    """
    Args:
        session_factory: zero-argument callable returning a Session, normally a `sessionmaker`.
        exception_translator: translator applied to failures of forwarded calls. Defaults to
            a lazily initialized ExceptionTranslator bound to the factory's engine.
    """

    def __init__(self, session_factory: Callable[[], Session],
                 exception_translator: ExceptionTranslator | None = None):
        self._session_factory = session_factory
        self._registry = scoped_session(session_factory)
        if exception_translator is None:
            register_dialect_failure_types(getattr(session_factory, "kw", {}).get("bind"))
            exception_translator = ExceptionTranslator(self._default_sql_translator, lazy_init=True)
        self.exception_translator = exception_translator

    @property
    def session_factory(self) -> Callable[[], Session]:
        """The factory this template was built from (same object, identity preserved)."""
        return self._session_factory

    def _default_sql_translator(self):
        bind = getattr(self._session_factory, "kw", {}).get("bind")
        if bind is None:
            # Unbound factory: no dialect to pick vendor codes from
            logger.debug("template.unbound_factory")
            return ExceptionClassTranslator()
        return ErrorCodeTranslator(bind)

    # -----------------------
    # Forwarding
    # -----------------------

    def __getattr__(self, name: str) -> Any:
        # Only called for attributes not found on the template itself
        if name.startswith("_"):
            raise AttributeError(name)
        attr = getattr(self._registry(), name)
        if callable(attr):
            return self._translating(attr)
        return attr

    def _call_translated(self, method: Callable, *args, **kwargs) -> Any:
        try:
            return method(*args, **kwargs)
        except SQLAlchemyError as exc:
            translated = self.exception_translator.translate(exc)
            if translated is None:
                raise
            raise translated

    def _translating(self, method: Callable) -> Callable:
        @functools.wraps(method)
        def invoke(*args, **kwargs):
            return self._call_translated(method, *args, **kwargs)
        return invoke

    def query(self, *entities, **kwargs) -> "TranslatingQuery":
        """Legacy `Session.query()`; the returned query runs its SQL through the translator."""
        query = self._call_translated(self._registry().query, *entities, **kwargs)
        return TranslatingQuery(query, self)

    # -----------------------
    # Lifecycle (owned by the host)
    # -----------------------

    def commit(self) -> None:
        raise UnsupportedOperationError("Manual commit is not allowed over a managed session handle")

    def rollback(self) -> None:
        raise UnsupportedOperationError("Manual rollback is not allowed over a managed session handle")

    def close(self) -> None:
        raise UnsupportedOperationError("Manual close is not allowed over a managed session handle")

    def begin(self, *args, **kwargs) -> None:
        raise UnsupportedOperationError("Manual transactions are not allowed over a managed session handle")

    def begin_nested(self, *args, **kwargs) -> None:
        raise UnsupportedOperationError("Manual savepoints are not allowed over a managed session handle")

    def connection(self, *args, **kwargs) -> None:
        raise UnsupportedOperationError(
            "Raw connections are not handed out by a managed session handle; use execute()"
        )

    def remove(self) -> None:
        """Close and discard the current thread's session. Called by the host at the end of a unit of work."""
        self._registry.remove()

    def __repr__(self) -> str:
        return f"<SessionTemplate factory={self._session_factory!r}>"


class TranslatingQuery:
    """
    Wraps a `Query` returned by a SessionTemplate.

    Generative calls (`filter`, `order_by`, ...) return another TranslatingQuery;
    calls that run SQL (`all`, `one`, `first`, `count`, iteration, slicing) go
    through the template's translator.
    """

    def __init__(self, query: Query, template: SessionTemplate):
        self._query = query
        self._template = template

    def __getattr__(self, name: str) -> Any:
        if name in ("_query", "_template"):
            raise AttributeError(name)
        attr = getattr(self._query, name)
        if not callable(attr):
            return attr

        @functools.wraps(attr)
        def invoke(*args, **kwargs):
            result = self._template._call_translated(attr, *args, **kwargs)
            if isinstance(result, Query):
                return TranslatingQuery(result, self._template)
            return result
        return invoke

    def __iter__(self):
        return iter(self._template._call_translated(self._query.all))

    def __getitem__(self, item):
        return self._template._call_translated(self._query.__getitem__, item)

    def __str__(self) -> str:
        return str(self._query)

    def __repr__(self) -> str:
        return f"<TranslatingQuery {self._query!r}>"


__all__ = ["SessionTemplate", "TranslatingQuery"]
