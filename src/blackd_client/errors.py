from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    FILE_ACCESS = "FILE_ACCESS"
    TRANSPORT = "TRANSPORT"
    PROTOCOL_REJECTION = "PROTOCOL_REJECTION"
    SERVER_FAULT = "SERVER_FAULT"
    UNRECOGNIZED_RESPONSE = "UNRECOGNIZED_RESPONSE"
    PERSIST = "PERSIST"


class FormatError(RuntimeError):
    """Per-file failure; the batch records it and moves on."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def code(self) -> str:
        return self.kind.value


class FileAccessError(FormatError):
    kind = ErrorKind.FILE_ACCESS


class TransportError(FormatError):
    kind = ErrorKind.TRANSPORT


class ProtocolRejection(FormatError):
    kind = ErrorKind.PROTOCOL_REJECTION


class ServerFault(FormatError):
    kind = ErrorKind.SERVER_FAULT


class UnrecognizedResponse(FormatError):
    kind = ErrorKind.UNRECOGNIZED_RESPONSE

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class PersistError(FormatError):
    kind = ErrorKind.PERSIST


__all__ = [
    "ErrorKind",
    "FormatError",
    "FileAccessError",
    "TransportError",
    "ProtocolRejection",
    "ServerFault",
    "UnrecognizedResponse",
    "PersistError",
]
