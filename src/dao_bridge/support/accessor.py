"""
SessionAccessor: one managed session handle per data access component.

A DAO gets its session from an accessor configured with either a session
factory or a ready-made SessionTemplate:

    accessor = SessionAccessor()
    accessor.set_factory(SessionFactory)   # builds a SessionTemplate
    initialize(accessor)                   # host lifecycle hook -> validate()

    handle = accessor.get_session_handle()
    handle.execute(...)

Precedence between the two sources:
  - set_factory() builds a new template only when there is none yet, or when
    the current template was built from a different factory (by identity).
    Supplying the same factory again keeps the existing template and its
    internal state.
  - set_template() always replaces the template.
So the last source that actually changed something wins.

Configuration is expected to happen once, on a single thread, before the
accessor is read concurrently; the accessor's own fields are not locked.
"""

import logging
from typing import Callable

from sqlalchemy.orm import Session

from dao_bridge.exceptions.base import ConfigurationError
from .template import SessionTemplate

logger = logging.getLogger(__name__)


class SessionAccessor:
    """Holds the SessionTemplate a data access component works with. Implements Lifecycle."""

    def __init__(self):
        self._template: SessionTemplate | None = None

    def set_factory(self, factory: Callable[[], Session]) -> None:
        """Use `factory`; a new template is built only if the factory actually changed."""
        if self._template is None or factory is not self._template.session_factory:
            self._template = self.create_template(factory)
            logger.debug("accessor.template_created", extra={"component": type(self).__name__})

    def create_template(self, factory: Callable[[], Session]) -> SessionTemplate:
        """
        Build the template for `factory`. Only used when the accessor is configured
        through set_factory(). Override to return a differently configured template.
        """
        return SessionTemplate(factory)

    def get_factory(self) -> Callable[[], Session] | None:
        return self._template.session_factory if self._template is not None else None

    def set_template(self, template: SessionTemplate) -> None:
        """Use `template` explicitly, as an alternative to set_factory()."""
        self._template = template

    def get_session_handle(self) -> SessionTemplate:
        """
        The managed, thread-safe session handle for executing statements.

        Do not commit, roll back or close it: the host's transaction management
        owns its lifecycle (the template refuses those calls).
        """
        return self._template

    def get_template(self) -> SessionTemplate | None:
        """
        The shared template, for inspection.

        It is shared by every caller of this accessor: read its configuration,
        but only change it during the host's initialization phase. To customize,
        build a separate template from get_factory() instead.
        """
        return self._template

    def validate(self) -> None:
        if self._template is None:
            raise ConfigurationError("Property 'session_factory' or 'session_template' are required")


__all__ = ["SessionAccessor"]
