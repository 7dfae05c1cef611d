import threading
import time

from snowflake.connector.errors import ProgrammingError


class FakeCursor:
    def __init__(self, conn):
        self.conn = conn
        self._rows = []

    def execute(self, sql, params=None):
        self.conn.statements.append(sql)
        for prefix, result in self.conn.responses.items():
            if sql.startswith(prefix):
                if isinstance(result, Exception):
                    raise result
                self._rows = result
                return self
        self._rows = []
        return self

    def fetchall(self):
        return list(self._rows)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.statements = []
        self.closed = False

    def cursor(self, cursor_class=None):
        return FakeCursor(self)

    def is_closed(self):
        return self.closed

    def close(self):
        self.closed = True


class FakeConnector:
    """Stands in for snowflake.connector.connect; counts login attempts."""

    def __init__(self, responses=None, delay=0.0, error=None):
        self.responses = responses or {}
        self.delay = delay
        self.error = error
        self.calls = 0
        self.params = None
        self.connections = []
        self._lock = threading.Lock()

    def __call__(self, **params):
        with self._lock:
            self.calls += 1
        self.params = params
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        conn = FakeConnection(self.responses)
        self.connections.append(conn)
        return conn


def programming_error(msg="boom"):
    return ProgrammingError(msg=msg)
