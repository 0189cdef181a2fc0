from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

import httpx

from .errors import TransportError

logger = logging.getLogger(__name__)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 45484
DEFAULT_CONNECT_TIMEOUT_S = 5.0
DEFAULT_READ_TIMEOUT_S = 60.0


@dataclass(frozen=True, slots=True)
class DaemonResponse:
    status_code: int
    content: bytes


class DaemonClient:
    """Synchronous HTTP client for a formatting daemon.

    One POST per call, no retries. Pass ``client`` to reuse an existing
    ``httpx.Client`` (the caller then owns its lifetime).
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        *,
        connect_timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S,
        read_timeout_s: float = DEFAULT_READ_TIMEOUT_S,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = f"http://{host}:{port}/"
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(read_timeout_s, connect=connect_timeout_s)
        )

    @property
    def url(self) -> str:
        return self._url

    def execute(self, metadata: Mapping[str, str], body: bytes) -> DaemonResponse:
        logger.debug("POST %s (%d bytes)", self._url, len(body))
        try:
            response = self._client.post(self._url, content=body, headers=dict(metadata))
        except httpx.TimeoutException as exc:
            raise TransportError(f"Request to {self._url} timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise TransportError(f"Could not reach the daemon at {self._url}: {exc}") from exc
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise TransportError(f"Bad exchange with the daemon at {self._url}: {exc}") from exc
        logger.debug("%s answered %d (%d bytes)", self._url, response.status_code, len(response.content))
        return DaemonResponse(status_code=response.status_code, content=response.content)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> DaemonClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_CONNECT_TIMEOUT_S",
    "DEFAULT_READ_TIMEOUT_S",
    "DaemonClient",
    "DaemonResponse",
]
