"""Wire protocol errors and checks for unsupported document fields."""

from __future__ import annotations

import json
import logging
from enum import IntEnum
from typing import Any, Mapping


class ErrorCode(IntEnum):
    """Wire protocol error codes."""

    INTERNAL_ERROR = 1
    BAD_VALUE = 2
    NAMESPACE_NOT_FOUND = 26
    NAMESPACE_EXISTS = 48
    COMMAND_NOT_FOUND = 59
    NOT_IMPLEMENTED = 238
    SORT_BAD_VALUE = 15974
    PROJECTION_IN_EX = 31253
    PROJECTION_EX_IN = 31254
    REGEX_OPTIONS = 51075

    @property
    def code_name(self) -> str:
        """The name the wire protocol uses for this code."""
        return _CODE_NAMES[self]


_CODE_NAMES = {
    ErrorCode.INTERNAL_ERROR: "InternalError",
    ErrorCode.BAD_VALUE: "BadValue",
    ErrorCode.NAMESPACE_NOT_FOUND: "NamespaceNotFound",
    ErrorCode.NAMESPACE_EXISTS: "NamespaceExists",
    ErrorCode.COMMAND_NOT_FOUND: "CommandNotFound",
    ErrorCode.NOT_IMPLEMENTED: "NotImplemented",
    ErrorCode.SORT_BAD_VALUE: "SortBadValue",
    ErrorCode.PROJECTION_IN_EX: "Location31253",
    ErrorCode.PROJECTION_EX_IN: "Location31254",
    ErrorCode.REGEX_OPTIONS: "Location51075",
}


class CommandError(Exception):
    """An error that is reported to the client with a wire protocol code."""

    def __init__(self, code: ErrorCode | int, message: str | BaseException) -> None:
        code = ErrorCode(code)
        if isinstance(message, BaseException):
            self.__cause__ = message
            text = str(message)
        else:
            if not message:
                raise ValueError("message is empty")
            text = message
        super().__init__(text)
        self.code = code
        self.message = text

    def __str__(self) -> str:
        return f"{self.code.code_name} ({int(self.code)}): {self.message}"

    def document(self) -> dict[str, Any]:
        """Return the error document sent back to the client."""
        return {
            "ok": 0.0,
            "errmsg": self.message,
            "code": int(self.code),
            "codeName": self.code.code_name,
        }


def _causes(err: BaseException):
    seen: set[int] = set()
    current: BaseException | None = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def protocol_error(err: BaseException) -> tuple[CommandError, bool]:
    """Convert any exception to a CommandError.

    A CommandError found in the exception or its causes is returned with True;
    anything else is wrapped as an internal error and returned with False.
    """
    if err is None:
        raise ValueError("err is None")
    for candidate in _causes(err):
        if isinstance(candidate, CommandError):
            return candidate, True
    return CommandError(ErrorCode.INTERNAL_ERROR, err), False


def document_command(doc: Mapping[str, Any]) -> str:
    """Return the command name of a document: its first key in lower case."""
    return next(iter(doc), "").lower()


def unimplemented(doc: Mapping[str, Any], *fields: str) -> None:
    """Raise a NOT_IMPLEMENTED CommandError if doc has any of the given fields."""
    for name in fields:
        if name in doc:
            quoted = json.dumps(name, ensure_ascii=False)
            raise CommandError(
                ErrorCode.NOT_IMPLEMENTED,
                f"{document_command(doc)}: support for field {quoted} is not implemented yet",
            )


def ignored(doc: Mapping[str, Any], logger: logging.Logger, *fields: str) -> None:
    """Log a debug message for every given field that doc has."""
    command = document_command(doc)
    for name in fields:
        if name in doc:
            logger.debug("ignoring field", extra={"command": command, "field": name})