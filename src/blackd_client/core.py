from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from threading import Event
from typing import Callable, Sequence

import httpx

from .errors import FormatError, ProtocolRejection, ServerFault, UnrecognizedResponse
from .logging import RunLogEntry, RunLogger
from .models import BatchFormatResult, FormatConfiguration, FormatOutcome, OutcomeStatus
from .protocol import ProtocolMetadata, translate
from .transport import DaemonClient, DaemonResponse
from .utils import atomic_write_bytes, read_source, resolve_target

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[FormatOutcome], None]
Writer = Callable[[Path, bytes], None]


@dataclass(slots=True)
class _FileContext:
    path: Path
    size_bytes: int = 0
    start: float = 0.0


class FormatService:
    def __init__(
        self,
        config: FormatConfiguration,
        client: DaemonClient,
        *,
        run_logger: RunLogger | None = None,
        writer: Writer = atomic_write_bytes,
    ) -> None:
        self._config = config
        self._client = client
        self._metadata = translate(config)
        self._run_logger = run_logger
        self._writer = writer

    @property
    def metadata(self) -> ProtocolMetadata:
        return self._metadata

    def format_file(self, source: str | Path) -> FormatOutcome:
        """Send one file to the daemon and apply its answer.

        Raises a ``FormatError`` subclass on any per-file failure.
        """
        path = resolve_target(source)
        if not path.exists():
            logger.debug("Skipping %s: file does not exist", path)
            return FormatOutcome(path=path, status=OutcomeStatus.SKIPPED)
        body = read_source(path)
        response = self._client.execute(self._metadata, body)
        return self.interpret_response(path, response)

    def interpret_response(self, path: Path, response: DaemonResponse) -> FormatOutcome:
        status = response.status_code
        if status == httpx.codes.OK:
            # Diff mode: the body is a diff for display, the source is never overwritten.
            if self._config.diff:
                diff = response.content.decode("utf-8", errors="replace")
                return FormatOutcome(path=path, status=OutcomeStatus.REWRITTEN, diff=diff)
            self._writer(path, response.content)
            logger.debug("Wrote %d bytes to %s", len(response.content), path)
            return FormatOutcome(path=path, status=OutcomeStatus.REWRITTEN)
        if status == httpx.codes.NO_CONTENT:
            return FormatOutcome(path=path, status=OutcomeStatus.UNCHANGED)
        if status == httpx.codes.BAD_REQUEST:
            raise ProtocolRejection(response.content.decode("utf-8", errors="replace"))
        if status == httpx.codes.INTERNAL_SERVER_ERROR:
            raise ServerFault(f"{path} caused an internal error in `blackd`")
        reason = httpx.codes.get_reason_phrase(status)
        label = f"{status} {reason}" if reason else str(status)
        raise UnrecognizedResponse(f"`blackd` returned an unrecognized status code: {label}", status)

    def format_files(
        self,
        sources: Sequence[str | Path],
        *,
        on_outcome: OutcomeCallback | None = None,
        cancellation: Event | None = None,
    ) -> BatchFormatResult:
        callback = on_outcome or (lambda _: None)
        result = BatchFormatResult()
        for source in sources:
            if cancellation is not None and cancellation.is_set():
                result.cancelled = True
                break
            context = _FileContext(path=Path(source), start=time.perf_counter())
            try:
                outcome = self.format_file(source)
            except FormatError as exc:
                logger.warning("%s: %s", exc.code, exc)
                outcome = FormatOutcome(
                    path=resolve_target(source),
                    status=OutcomeStatus.FAILED,
                    reason=str(exc),
                    error_kind=exc.kind,
                )
            context.path = outcome.path
            self._log_outcome(context, outcome)
            result.outcomes.append(outcome)
            callback(outcome)
        return result

    def _log_outcome(self, context: _FileContext, outcome: FormatOutcome) -> None:
        if self._run_logger is None:
            return
        try:
            context.size_bytes = context.path.stat().st_size if context.path.is_file() else 0
            self._run_logger.append(
                RunLogEntry(
                    source=str(context.path),
                    status=outcome.status.value,
                    error_code=outcome.error_kind.value if outcome.error_kind else None,
                    message=outcome.reason,
                    size_bytes=context.size_bytes,
                    elapsed_ms=(time.perf_counter() - context.start) * 1000,
                )
            )
        except OSError as exc:
            logger.warning("Could not append to run log %s: %s", self._run_logger.log_file, exc)


__all__ = ["FormatService", "OutcomeCallback"]
