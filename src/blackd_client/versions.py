from __future__ import annotations

from enum import Enum
from typing import Iterable


class TargetVersion(str, Enum):
    PY27 = "py27"
    PY33 = "py33"
    PY34 = "py34"
    PY35 = "py35"
    PY36 = "py36"
    PY37 = "py37"
    PY38 = "py38"
    PY39 = "py39"
    PYI = "pyi"

    @property
    def tag(self) -> str:
        if self is TargetVersion.PYI:
            return "PYI"
        return self.value[2:]


TAG_MAP: dict[str, TargetVersion] = {version.tag: version for version in TargetVersion}


def normalize_tag(token: str) -> TargetVersion | None:
    cleaned = token.strip().upper()
    if cleaned.startswith("PY") and cleaned != "PYI":
        cleaned = cleaned[2:]
    return TAG_MAP.get(cleaned)


def parse_target_versions(value: str | Iterable[str] | None) -> tuple[TargetVersion, ...]:
    """Parse a comma list of version tags, silently dropping unknown tokens."""

    if not value:
        return ()
    tokens = value.split(",") if isinstance(value, str) else [str(item) for item in value]
    versions: list[TargetVersion] = []
    for token in tokens:
        if not token.strip():
            continue
        version = normalize_tag(token)
        if version is None or version in versions:
            continue
        versions.append(version)
    return tuple(versions)


__all__ = ["TargetVersion", "normalize_tag", "parse_target_versions"]
