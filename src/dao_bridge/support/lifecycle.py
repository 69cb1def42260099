"""
Lifecycle capability for components the host must check before use.

Components implement `validate()`; the host calls `initialize(...)` once
its setup phase is done and before anything is put into service.
"""

import logging
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Lifecycle(Protocol):
    def validate(self) -> None:
        """Raise ConfigurationError when the component is not ready for service."""
        ...


def initialize(*components: Lifecycle) -> None:
    """
    Validate every component, in order. The first ConfigurationError aborts startup.
    """
    for component in components:
        name = type(component).__name__
        logger.debug("lifecycle.validate.start", extra={"component": name})
        try:
            component.validate()
        except Exception:
            logger.error("lifecycle.validate.failed", extra={"component": name})
            raise
        logger.info("lifecycle.validate.ok", extra={"component": name})


__all__ = ["Lifecycle", "initialize"]
