from .accessor import SessionAccessor
from .lifecycle import Lifecycle, initialize
from .template import SessionTemplate

__all__ = ["SessionAccessor", "SessionTemplate", "Lifecycle", "initialize"]
