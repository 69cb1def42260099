import logging

import pytest


@pytest.fixture
def restore_logging():
    """
    setup_logging() reconfigures the root logger; put the previous state back afterwards
    so later tests (and caplog) see an untouched logging tree.
    """
    root = logging.getLogger()
    names = ("dao_bridge", "sqlalchemy.engine")
    saved_root = (root.level, list(root.handlers), list(root.filters))
    saved = {name: (logging.getLogger(name).level, logging.getLogger(name).propagate) for name in names}

    yield

    for handler in root.handlers:
        if handler not in saved_root[1]:
            handler.close()
    root.setLevel(saved_root[0])
    root.handlers[:] = saved_root[1]
    root.filters[:] = saved_root[2]
    for name, (level, propagate) in saved.items():
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.setLevel(level)
        logger.propagate = propagate
