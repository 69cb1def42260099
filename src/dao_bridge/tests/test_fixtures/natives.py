"""
Stand-ins for driver (DB-API) exceptions of databases the test suite cannot run.

Class names follow PEP 249; the `Error` base is registered as a driver type so
the translation layer treats these as native. Each class exposes diagnostics
the way the real driver does.
"""

import pytest
from sqlalchemy import exc as sa_exc

from dao_bridge.exceptions.diagnostics import register_native_failure_type


class Error(Exception):
    pass


register_native_failure_type(Error)


class DatabaseError(Error):
    pass


class IntegrityError(DatabaseError):
    pass


class ProgrammingError(DatabaseError):
    pass


class OperationalError(DatabaseError):
    pass


class InternalError(DatabaseError):
    pass


class PgDiag:
    def __init__(self, sqlstate=None, constraint_name=None):
        self.sqlstate = sqlstate
        self.constraint_name = constraint_name


def pg_error(cls, pgcode: str, message: str, constraint_name: str | None = None):
    """psycopg2 style: SQLSTATE on .pgcode, constraint on .diag."""
    err = cls(message)
    err.pgcode = pgcode
    err.diag = PgDiag(sqlstate=pgcode, constraint_name=constraint_name)
    return err


def mysql_error(cls, errno: int, message: str):
    """pymysql style: (errno, message) args."""
    return cls(errno, message)


def wrap(native: BaseException, statement: str = "INSERT INTO t VALUES (?)") -> sa_exc.DBAPIError:
    """Wrap a native failure the way SQLAlchemy does when a statement fails."""
    return sa_exc.DBAPIError.instance(statement, {}, native, Error)


class StubSQLTranslator:
    """Low-level translator double: records calls, returns a preset answer."""

    def __init__(self, result=None):
        self.result = result
        self.calls = []

    def translate(self, task, sql, native):
        self.calls.append((task, sql, native))
        return self.result


@pytest.fixture
def stub_sql_translator() -> StubSQLTranslator:
    return StubSQLTranslator()
