import json
from pathlib import Path
from threading import Event

import httpx
import pytest

from conftest import FakeDaemon
from blackd_client.core import FormatService
from blackd_client.errors import (
    ErrorKind,
    PersistError,
    ProtocolRejection,
    ServerFault,
    UnrecognizedResponse,
)
from blackd_client.logging import RunLogger
from blackd_client.models import FormatConfiguration, FormatOutcome, OutcomeStatus
from blackd_client.transport import DaemonClient, DaemonResponse


class RecordingWriter:
    def __init__(self) -> None:
        self.calls: list[tuple[Path, bytes]] = []

    def __call__(self, path: Path, data: bytes) -> None:
        self.calls.append((path, data))


def build_service(
    client: DaemonClient, writer: RecordingWriter | None = None, **changes: object
) -> FormatService:
    config = FormatConfiguration(**changes)  # type: ignore[arg-type]
    if writer is None:
        return FormatService(config, client)
    return FormatService(config, client, writer=writer)


def test_ok_response_writes_body(daemon: FakeDaemon, tmp_path: Path) -> None:
    writer = RecordingWriter()
    service = build_service(daemon.client(), writer)
    target = tmp_path / "a.py"
    outcome = service.interpret_response(target, DaemonResponse(200, b"x = 1\n"))
    assert outcome.status is OutcomeStatus.REWRITTEN
    assert writer.calls == [(target, b"x = 1\n")]


def test_no_content_does_not_write(daemon: FakeDaemon, tmp_path: Path) -> None:
    writer = RecordingWriter()
    service = build_service(daemon.client(), writer)
    outcome = service.interpret_response(tmp_path / "a.py", DaemonResponse(204, b""))
    assert outcome.status is OutcomeStatus.UNCHANGED
    assert writer.calls == []


def test_bad_request_passes_reason_through(daemon: FakeDaemon, tmp_path: Path) -> None:
    writer = RecordingWriter()
    service = build_service(daemon.client(), writer)
    with pytest.raises(ProtocolRejection) as exc:
        service.interpret_response(tmp_path / "a.py", DaemonResponse(400, b"Cannot parse: 1:4: def ("))
    assert str(exc.value) == "Cannot parse: 1:4: def ("
    assert writer.calls == []


def test_internal_error_names_path(daemon: FakeDaemon, tmp_path: Path) -> None:
    writer = RecordingWriter()
    service = build_service(daemon.client(), writer)
    target = tmp_path / "a.py"
    with pytest.raises(ServerFault) as exc:
        service.interpret_response(target, DaemonResponse(500, b"ignored"))
    assert str(exc.value) == f"{target} caused an internal error in `blackd`"
    assert writer.calls == []


def test_unrecognized_status(daemon: FakeDaemon, tmp_path: Path) -> None:
    writer = RecordingWriter()
    service = build_service(daemon.client(), writer)
    with pytest.raises(UnrecognizedResponse) as exc:
        service.interpret_response(tmp_path / "a.py", DaemonResponse(418, b""))
    assert exc.value.status_code == 418
    assert str(exc.value) == "`blackd` returned an unrecognized status code: 418 I'm a teapot"
    assert writer.calls == []


def test_writer_failure_propagates(daemon: FakeDaemon, tmp_path: Path) -> None:
    def failing_writer(path: Path, data: bytes) -> None:
        raise PersistError("Could not persist reformatted code to disk!")

    service = FormatService(FormatConfiguration(), daemon.client(), writer=failing_writer)
    with pytest.raises(PersistError):
        service.interpret_response(tmp_path / "a.py", DaemonResponse(200, b"x = 1\n"))


def test_diff_mode_reports_without_writing(daemon: FakeDaemon, tmp_path: Path) -> None:
    writer = RecordingWriter()
    service = build_service(daemon.client(), writer, diff=True)
    diff = "--- a.py\n+++ a.py\n@@ -1 +1 @@\n-x=1\n+x = 1\n"
    outcome = service.interpret_response(tmp_path / "a.py", DaemonResponse(200, diff.encode()))
    assert outcome.status is OutcomeStatus.REWRITTEN
    assert outcome.diff == diff
    assert writer.calls == []


def test_missing_file_is_skipped_without_request(daemon: FakeDaemon, tmp_path: Path) -> None:
    service = build_service(daemon.client())
    outcome = service.format_file(tmp_path / "missing.py")
    assert outcome.status is OutcomeStatus.SKIPPED
    assert daemon.requests == []


def test_end_to_end_rewrite_then_unchanged(daemon: FakeDaemon, tmp_path: Path) -> None:
    target = tmp_path / "a.py"
    target.write_bytes(b"x=1")
    service = build_service(daemon.client())

    first = service.format_files([target])
    assert target.read_bytes() == b"x = 1\n"
    assert first.reformatted == 1
    assert first.left_unchanged == 0

    second = service.format_files([target])
    assert target.read_bytes() == b"x = 1\n"
    assert second.reformatted == 0
    assert second.left_unchanged == 1
    assert second.outcomes[0].status is OutcomeStatus.UNCHANGED


def test_request_carries_metadata(daemon: FakeDaemon, tmp_path: Path) -> None:
    target = tmp_path / "a.py"
    target.write_bytes(b"x=1")
    service = build_service(daemon.client(), line_length=100, skip_string_normalization=True)
    service.format_file(target)
    request = daemon.requests[0]
    assert request.body == b"x=1"
    assert request.headers["x-protocol-version"] == "1"
    assert request.headers["x-line-length"] == "100"
    assert request.headers["x-skip-string-normalization"] == "true"
    assert request.headers["x-fast-or-safe"] == "safe"
    assert "x-diff" not in request.headers


def test_batch_continues_after_transport_error(tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.content == b"second":
            raise httpx.ConnectError("Connection refused", request=request)
        return httpx.Response(200, content=request.content.upper())

    paths = []
    for name in ("first", "second", "third"):
        path = tmp_path / f"{name}.py"
        path.write_bytes(name.encode())
        paths.append(path)

    with httpx.Client(transport=httpx.MockTransport(handler)) as http:
        service = FormatService(FormatConfiguration(), DaemonClient(client=http))
        result = service.format_files(paths)

    statuses = [outcome.status for outcome in result.outcomes]
    assert statuses == [OutcomeStatus.REWRITTEN, OutcomeStatus.FAILED, OutcomeStatus.REWRITTEN]
    assert result.outcomes[1].error_kind is ErrorKind.TRANSPORT
    assert paths[0].read_bytes() == b"FIRST"
    assert paths[1].read_bytes() == b"second"
    assert paths[2].read_bytes() == b"THIRD"
    assert result.reformatted == 2
    assert result.left_unchanged == 1
    assert result.failures == 1


def test_batch_records_each_outcome_kind(daemon: FakeDaemon, tmp_path: Path) -> None:
    sources = {"ok.py": b"x=1", "clean.py": b"x = 1\n", "bad.py": b"def (", "crash.py": b"boom"}
    paths = []
    for name, content in sources.items():
        path = tmp_path / name
        path.write_bytes(content)
        paths.append(path)
    paths.append(tmp_path / "missing.py")

    seen: list[FormatOutcome] = []
    result = build_service(daemon.client()).format_files(paths, on_outcome=seen.append)

    assert [outcome.status for outcome in seen] == [
        OutcomeStatus.REWRITTEN,
        OutcomeStatus.UNCHANGED,
        OutcomeStatus.FAILED,
        OutcomeStatus.FAILED,
        OutcomeStatus.SKIPPED,
    ]
    assert seen[2].error_kind is ErrorKind.PROTOCOL_REJECTION
    assert seen[2].reason == "Cannot parse: 1:4: def ("
    assert seen[3].error_kind is ErrorKind.SERVER_FAULT
    assert len(daemon.requests) == 4
    assert result.reformatted == 1
    assert result.left_unchanged == 4


def test_cancellation_stops_between_files(daemon: FakeDaemon, tmp_path: Path) -> None:
    first = tmp_path / "a.py"
    first.write_bytes(b"x=1")
    second = tmp_path / "b.py"
    second.write_bytes(b"y=2")
    cancel = Event()

    result = build_service(daemon.client()).format_files(
        [first, second], on_outcome=lambda _: cancel.set(), cancellation=cancel
    )

    assert result.cancelled is True
    assert len(result.outcomes) == 1
    assert second.read_bytes() == b"y=2"


def test_run_log_records_every_file(daemon: FakeDaemon, tmp_path: Path) -> None:
    target = tmp_path / "a.py"
    target.write_bytes(b"x=1")
    log_file = tmp_path / "logs" / "run.jsonl"
    service = FormatService(FormatConfiguration(), daemon.client(), run_logger=RunLogger(log_file))

    service.format_files([target, tmp_path / "missing.py"])

    entries = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert [entry["status"] for entry in entries] == ["rewritten", "skipped"]
    assert entries[0]["size_bytes"] == len(b"x = 1\n")
    assert entries[0]["error_code"] is None


def test_batch_continues_after_undecodable_response(tmp_path: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.content == b"second":
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all")
        return httpx.Response(204)

    paths = []
    for name in ("first", "second", "third"):
        path = tmp_path / f"{name}.py"
        path.write_bytes(name.encode())
        paths.append(path)

    with httpx.Client(transport=httpx.MockTransport(handler)) as http:
        service = FormatService(FormatConfiguration(), DaemonClient(client=http))
        result = service.format_files(paths)

    assert [outcome.status for outcome in result.outcomes] == [
        OutcomeStatus.UNCHANGED,
        OutcomeStatus.FAILED,
        OutcomeStatus.UNCHANGED,
    ]
    assert result.outcomes[1].error_kind is ErrorKind.TRANSPORT
    assert paths[1].read_bytes() == b"second"


def test_unwritable_run_log_does_not_abort_batch(daemon: FakeDaemon, tmp_path: Path) -> None:
    log_file = tmp_path / "run.jsonl"
    log_file.mkdir()
    paths = []
    for name in ("a", "b", "c"):
        path = tmp_path / f"{name}.py"
        path.write_bytes(b"x = 1\n")
        paths.append(path)
    service = FormatService(FormatConfiguration(), daemon.client(), run_logger=RunLogger(log_file))

    result = service.format_files(paths)

    assert [outcome.status for outcome in result.outcomes] == [OutcomeStatus.UNCHANGED] * 3
    assert len(daemon.requests) == 3
