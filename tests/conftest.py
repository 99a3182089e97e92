import os
import sys
import pytest

# Ensure the project root (containing app.py and friends) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from connection import Connection
from dispatcher import CommandRouter


class RecordingConnection(Connection):
    """Connection that keeps every message it is sent."""

    def __init__(self, name: str = None):
        super().__init__(connection_id=name)
        self.messages = []

    def send(self, message: str):
        self.messages.append(message)

    def take(self):
        taken, self.messages = self.messages, []
        return taken


class BrokenConnection(Connection):
    def send(self, message: str):
        raise ConnectionError("peer went away")


@pytest.fixture()
def router():
    return CommandRouter()


@pytest.fixture()
def connect(router):
    """Register a new recording connection with the router."""
    def _connect(name=None):
        conn = RecordingConnection(name)
        router.connect(conn)
        return conn
    return _connect


@pytest.fixture()
def client():
    from fastapi.testclient import TestClient
    from app import app
    with TestClient(app) as test_client:
        yield test_client
