from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator

import pytest
from fastapi import FastAPI, Request, Response
from fastapi.testclient import TestClient

from blackd_client.transport import DaemonClient

Responder = Callable[[bytes, dict[str, str]], tuple[int, bytes]]

FORMATTED: dict[bytes, bytes] = {
    b"x=1": b"x = 1\n",
    b"y=2": b"y = 2\n",
    b"print( 'hi' )\n": b'print("hi")\n',
}


def blackd_responder(body: bytes, headers: dict[str, str]) -> tuple[int, bytes]:
    if body.startswith(b"boom"):
        return 500, b"Traceback (most recent call last): ..."
    if body.startswith(b"def ("):
        return 400, b"Cannot parse: 1:4: def ("
    if body in FORMATTED:
        return 200, FORMATTED[body]
    return 204, b""


@dataclass
class RecordedRequest:
    headers: dict[str, str]
    body: bytes


@dataclass
class FakeDaemon:
    app: FastAPI
    http: TestClient
    requests: list[RecordedRequest] = field(default_factory=list)

    def client(self, host: str = "localhost", port: int = 45484) -> DaemonClient:
        return DaemonClient(host, port, client=self.http)


def create_fake_daemon(responder: Responder = blackd_responder) -> FakeDaemon:
    app = FastAPI()
    recorded: list[RecordedRequest] = []

    @app.post("/")
    async def format_source(request: Request) -> Response:
        body = await request.body()
        headers = dict(request.headers)
        recorded.append(RecordedRequest(headers=headers, body=body))
        status, content = responder(body, headers)
        return Response(content=content, status_code=status)

    return FakeDaemon(app=app, http=TestClient(app), requests=recorded)


@pytest.fixture
def daemon() -> Iterator[FakeDaemon]:
    fake = create_fake_daemon()
    try:
        yield fake
    finally:
        fake.http.close()
