from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from .models import FormatConfiguration

PROTOCOL_VERSION = "1"

PROTOCOL_VERSION_HEADER = "X-Protocol-Version"
LINE_LENGTH_HEADER = "X-Line-Length"
SKIP_STRING_NORMALIZATION_HEADER = "X-Skip-String-Normalization"
SKIP_MAGIC_TRAILING_COMMA_HEADER = "X-Skip-Magic-Trailing-Comma"
FAST_OR_SAFE_HEADER = "X-Fast-Or-Safe"
PYTHON_VARIANT_HEADER = "X-Python-Variant"
DIFF_HEADER = "X-Diff"

ProtocolMetadata = Mapping[str, str]


def translate(config: FormatConfiguration) -> ProtocolMetadata:
    """Map formatting options onto the request headers understood by the daemon.

    The protocol version, line length and fast/safe mode are always present.
    Every other header is only sent when its option differs from the default.
    The returned mapping is read-only so a single instance can be shared by
    every request of a run.
    """

    headers: dict[str, str] = {
        PROTOCOL_VERSION_HEADER: PROTOCOL_VERSION,
        LINE_LENGTH_HEADER: str(config.line_length),
    }
    if config.skip_string_normalization:
        headers[SKIP_STRING_NORMALIZATION_HEADER] = "true"
    if config.skip_magic_trailing_comma:
        headers[SKIP_MAGIC_TRAILING_COMMA_HEADER] = "true"
    headers[FAST_OR_SAFE_HEADER] = "fast" if config.fast_mode else "safe"
    if config.target_versions:
        headers[PYTHON_VARIANT_HEADER] = ",".join(version.value for version in config.target_versions)
    if config.diff:
        headers[DIFF_HEADER] = "true"
    return MappingProxyType(headers)


__all__ = [
    "PROTOCOL_VERSION",
    "PROTOCOL_VERSION_HEADER",
    "LINE_LENGTH_HEADER",
    "SKIP_STRING_NORMALIZATION_HEADER",
    "SKIP_MAGIC_TRAILING_COMMA_HEADER",
    "FAST_OR_SAFE_HEADER",
    "PYTHON_VARIANT_HEADER",
    "DIFF_HEADER",
    "ProtocolMetadata",
    "translate",
]
