"""
Host-side assembly: settings -> engine -> session factory -> accessor.

The translation layer itself never reads settings; this module is the
"dependency assembly phase" that hands it plain objects:

    settings = get_settings()
    engine = create_db_engine(settings)
    accessor = build_session_accessor(settings, engine=engine)
    initialize(accessor)
"""

import logging

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from dao_bridge.config.settings import Settings
from dao_bridge.exceptions.translator import ExceptionTranslator
from dao_bridge.support.accessor import SessionAccessor
from dao_bridge.support.template import SessionTemplate

logger = logging.getLogger(__name__)


def create_db_engine(settings: Settings) -> Engine:
    engine = create_engine(
        settings.DATABASE_URL,
        echo=settings.SQLALCHEMY_ECHO,       # keep off in production
        pool_pre_ping=settings.POOL_PRE_PING,
    )
    # render_as_string hides the password
    logger.info("db.engine_created", extra={"url": engine.url.render_as_string(hide_password=True)})
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False)


def build_exception_translator(engine: Engine, settings: Settings) -> ExceptionTranslator:
    return ExceptionTranslator.for_data_source(engine, lazy_init=settings.EXCEPTION_TRANSLATOR_LAZY_INIT)


def build_session_accessor(settings: Settings, engine: Engine | None = None) -> SessionAccessor:
    """
    Accessor whose template shares one exception translator configured from settings.
    The accessor is returned unvalidated; run it through support.lifecycle.initialize().
    """
    if engine is None:
        engine = create_db_engine(settings)

    factory = create_session_factory(engine)
    translator = build_exception_translator(engine, settings)

    accessor = SessionAccessor()
    accessor.set_template(SessionTemplate(factory, exception_translator=translator))
    return accessor
