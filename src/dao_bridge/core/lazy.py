"""
Construct-once holder for expensive collaborators.

`LazyInitializer` wraps a zero-argument factory and runs it at most once per
holder, no matter how many threads ask for the value at the same time:

    translator = LazyInitializer(lambda: ErrorCodeTranslator(engine))
    translator.get()   # first call builds it (under the lock)
    translator.get()   # later calls read the slot, no lock taken

With `lazy=False` the factory runs in the constructor and `get()` never
touches the lock.
"""

import logging
import threading
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

# Sentinel for "not built yet"; None is a legal factory result.
_UNSET = object()


class LazyInitializer(Generic[T]):
    """
    Double-checked, lock-guarded single slot.

    The check-empty / construct / store sequence runs under `self._lock`, so the
    factory is invoked exactly once even with concurrent callers. The slot is
    only assigned after the factory returns, so a thread that sees a filled slot
    sees a fully constructed object. If the factory raises, the slot stays
    empty and the error propagates; the next `get()` tries again.
    """

    def __init__(self, factory: Callable[[], T], lazy: bool = True):
        self._factory = factory
        self._lock = threading.Lock()
        self._value = _UNSET
        if not lazy:
            self._value = self._create()

    @property
    def initialized(self) -> bool:
        return self._value is not _UNSET

    def get(self) -> T:
        value = self._value
        if value is _UNSET:
            with self._lock:
                if self._value is _UNSET:
                    self._value = self._create()
                value = self._value
        return value

    def _create(self) -> T:
        logger.debug("lazy.initializing", extra={"factory": getattr(self._factory, "__qualname__", repr(self._factory))})
        return self._factory()


__all__ = ["LazyInitializer"]
