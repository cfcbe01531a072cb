"""Shared fakes for the HTTP session, SMTP server and attachment reader."""

import json

import pytest


class FakeResponse:
    def __init__(self, status=200, json_data=None, text=""):
        self.status = status
        self._json = json_data
        self._text = text if text or json_data is None else json.dumps(json_data)

    async def json(self, content_type="application/json"):
        if self._json is None:
            if self._text:
                raise ValueError("not json")
            return None
        return self._json

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Records POSTs; ``responder(request)`` returns (status, json, text)."""

    def __init__(self):
        self.requests = []
        self.closed = False
        self.responder = lambda request: (200, {"id": "msg-1"}, "")

    def post(self, url, data=None, headers=None, timeout=None):
        request = {
            "url": url,
            "data": data,
            "headers": dict(headers or {}),
            "json": json.loads(data) if data else None,
        }
        self.requests.append(request)
        status, json_data, text = self.responder(request)
        return FakeResponse(status, json_data, text)

    async def close(self):
        self.closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
        return False


class FakeReader:
    def __init__(self, files=None):
        self.files = dict(files or {})
        self.calls = []

    async def read(self, path):
        self.calls.append(path)
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]


class DummySMTP:
    def __init__(self, server, hostname, port, start_tls=False, use_tls=False,
                 validate_certs=True, timeout=None):
        self.server = server
        self.hostname = hostname
        self.port = port
        self.start_tls = start_tls
        self.use_tls = use_tls
        self.validate_certs = validate_certs
        self.timeout = timeout
        self.login_credentials = None
        self.connected = False
        self.closed = False
        self.sent = []

    async def connect(self):
        if self.server.connect_error is not None:
            raise self.server.connect_error
        self.connected = True

    async def login(self, user, password):
        if self.server.login_error is not None:
            raise self.server.login_error
        self.login_credentials = (user, password)

    async def send_message(self, message):
        if self.server.reject is not None and self.server.reject(message):
            raise self.server.send_error
        self.sent.append(message)
        self.server.delivered.append(message)
        return {}, "OK"

    async def quit(self):
        if not self.connected:
            raise ConnectionError("not connected")
        self.closed = True


class DummySMTPServer:
    def __init__(self):
        self.created = []
        self.delivered = []
        self.connect_error = None
        self.login_error = None
        self.send_error = None
        self.reject = None

    def factory(self, **kwargs):
        smtp = DummySMTP(self, **kwargs)
        self.created.append(smtp)
        return smtp


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def fake_reader():
    return FakeReader()


@pytest.fixture
def smtp_server(monkeypatch):
    server = DummySMTPServer()
    monkeypatch.setattr("shoutbox.smtp.aiosmtplib.SMTP", server.factory)
    return server
