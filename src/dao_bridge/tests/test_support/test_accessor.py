import logging

import pytest
from sqlalchemy import text
from sqlalchemy.orm import sessionmaker

from dao_bridge.exceptions.base import ConfigurationError
from dao_bridge.support.accessor import SessionAccessor
from dao_bridge.support.lifecycle import Lifecycle, initialize
from dao_bridge.support.template import SessionTemplate


class TestSessionAccessorConfiguration:
    """
    Tests covering how an accessor picks its template.

    Fixtures used:
      - session_factory: sessionmaker bound to a throwaway SQLite database.

    Rationale:
      - set_factory() builds a template only when the factory actually changes
        (compared by identity), so re-supplying the same factory keeps state.
      - set_template() always wins over whatever was there.
    """

    def test_unconfigured_accessor(self):
        accessor = SessionAccessor()

        assert accessor.get_factory() is None
        assert accessor.get_template() is None
        assert accessor.get_session_handle() is None

    def test_set_factory_builds_template(self, session_factory):
        accessor = SessionAccessor()
        accessor.set_factory(session_factory)

        template = accessor.get_template()
        assert isinstance(template, SessionTemplate)
        assert template.session_factory is session_factory
        assert accessor.get_factory() is session_factory
        assert accessor.get_session_handle() is template

    def test_same_factory_keeps_template(self, session_factory):
        """
        Behavior:
          - Supplying the identical factory twice must not rebuild the template.
        Importance:
          - A rebuilt template would drop its thread-local sessions and translator.
        """
        accessor = SessionAccessor()
        accessor.set_factory(session_factory)
        first = accessor.get_template()

        accessor.set_factory(session_factory)

        assert accessor.get_template() is first

    def test_different_factory_replaces_template(self, session_factory, engine):
        accessor = SessionAccessor()
        accessor.set_factory(session_factory)
        first = accessor.get_template()

        other_factory = sessionmaker(bind=engine)
        accessor.set_factory(other_factory)

        assert accessor.get_template() is not first
        assert accessor.get_factory() is other_factory

    def test_set_template_overrides_factory(self, session_factory):
        accessor = SessionAccessor()
        accessor.set_factory(session_factory)

        explicit = SessionTemplate(session_factory)
        accessor.set_template(explicit)

        assert accessor.get_template() is explicit
        assert accessor.get_session_handle() is explicit
        assert accessor.get_factory() is session_factory

    def test_set_factory_after_set_template(self, session_factory, engine):
        accessor = SessionAccessor()
        explicit = SessionTemplate(session_factory)
        accessor.set_template(explicit)

        # same factory as the explicit template: nothing to change
        accessor.set_factory(session_factory)
        assert accessor.get_template() is explicit

        # different factory: last change wins
        other_factory = sessionmaker(bind=engine)
        accessor.set_factory(other_factory)
        assert accessor.get_template() is not explicit

    def test_create_template_can_be_overridden(self, session_factory):
        created = []

        class CustomAccessor(SessionAccessor):
            def create_template(self, factory):
                template = super().create_template(factory)
                created.append(template)
                return template

        accessor = CustomAccessor()
        accessor.set_factory(session_factory)
        accessor.set_factory(session_factory)

        assert created == [accessor.get_template()]


class TestSessionAccessorValidation:

    def test_validate_without_source_fails(self):
        with pytest.raises(ConfigurationError) as exc_info:
            SessionAccessor().validate()

        assert str(exc_info.value) == "Property 'session_factory' or 'session_template' are required"

    def test_validate_with_factory(self, session_factory):
        accessor = SessionAccessor()
        accessor.set_factory(session_factory)
        accessor.validate()

    def test_validate_with_template(self, session_factory):
        accessor = SessionAccessor()
        accessor.set_template(SessionTemplate(session_factory))
        accessor.validate()

    def test_accessor_is_a_lifecycle_component(self):
        assert isinstance(SessionAccessor(), Lifecycle)


class TestInitialize:

    def test_initialize_logs_success(self, session_factory, caplog):
        ready = SessionAccessor()
        ready.set_factory(session_factory)

        with caplog.at_level(logging.INFO, logger="dao_bridge.support.lifecycle"):
            initialize(ready)

        assert any(r.getMessage() == "lifecycle.validate.ok" for r in caplog.records)

    def test_initialize_stops_at_first_failure(self, session_factory):
        validated = []

        class Recording:
            def __init__(self, name):
                self.name = name

            def validate(self):
                validated.append(self.name)

        with pytest.raises(ConfigurationError):
            initialize(Recording("first"), SessionAccessor(), Recording("never"))

        assert validated == ["first"]


def test_dao_workflow(session_factory, author):
    """
    A DAO subclassing the accessor: configured from a factory, validated, then used.
    """

    class AuthorDao(SessionAccessor):
        def names(self):
            return self.get_session_handle().execute(text("SELECT name FROM authors")).scalars().all()

    dao = AuthorDao()
    dao.set_factory(session_factory)
    initialize(dao)

    try:
        assert dao.names() == ["Ursula"]
    finally:
        dao.get_session_handle().remove()
