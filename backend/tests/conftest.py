import json
import os
import sys
import time
import pytest

# Ensure the backend root (containing the `cricket_relay` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from cricket_relay import create_app, socketio

NAMESPACE = '/ws'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    GRACE_PERIOD_SEC = 0.3
    SOCKETIO_NAMESPACE = NAMESPACE
    CORS_ALLOWED_ORIGINS = '*'
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    """Factory for connected Socket.IO test clients on the relay namespace."""
    created = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace=NAMESPACE,
        )
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected(NAMESPACE):
                test_client.disconnect(namespace=NAMESPACE)
        except Exception:
            pass


def decode(packet):
    args = packet['args']
    if isinstance(args, list) and len(args) == 1:
        args = args[0]
    if isinstance(args, str):
        return json.loads(args)
    return args


def received_messages(test_client):
    """Drain the client's queue and return the decoded envelopes."""
    return [decode(p) for p in test_client.get_received(NAMESPACE) if p['name'] in ('message', 'json')]


def wait_for(test_client, predicate, timeout=3.0):
    """Poll the client until an envelope matches ``predicate``; returns all drained."""
    deadline = time.time() + timeout
    seen = []
    while time.time() < deadline:
        seen.extend(received_messages(test_client))
        if any(predicate(m) for m in seen):
            return seen
        time.sleep(0.05)
    return seen
