from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "blackd_client"


def configure_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        show_time=verbose,
        markup=False,
    )
    logger.addHandler(handler)
    logger.propagate = False
    return logger


@dataclass(slots=True)
class RunLogEntry:
    source: str
    status: str
    error_code: str | None
    message: str | None
    size_bytes: int
    elapsed_ms: float
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["timestamp"] = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(self.timestamp))
        return payload


class RunLogger:
    def __init__(self, log_file: Path) -> None:
        self._log_file = log_file

    @property
    def log_file(self) -> Path:
        return self._log_file

    def append(self, entry: RunLogEntry) -> None:
        self._log_file.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(entry.to_dict(), ensure_ascii=False)
        with self._log_file.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")


@dataclass(slots=True)
class BatchSummary:
    reformatted: int = 0
    left_unchanged: int = 0

    def lines(self) -> list[str]:
        lines = ["All done! ✨ 🍰 ✨"]
        if self.reformatted == 1:
            lines.append("• 1 file reformatted")
        elif self.reformatted > 1:
            lines.append(f"• {self.reformatted} files reformatted")
        if self.left_unchanged == 1:
            lines.append("• 1 file left unchanged.")
        elif self.left_unchanged > 1:
            lines.append(f"• {self.left_unchanged} files left unchanged.")
        return lines

    def render(self) -> str:
        return "\n" + "\n".join(self.lines()) + "\n"


__all__ = [
    "configure_logging",
    "RunLogEntry",
    "RunLogger",
    "BatchSummary",
]
