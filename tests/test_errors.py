import logging

import pytest

from hanadocstore.errors import (
    CommandError,
    ErrorCode,
    document_command,
    ignored,
    protocol_error,
    unimplemented,
)


def test_str_format():
    err = CommandError(ErrorCode.BAD_VALUE, "value *types.Array not supported in filter")
    assert str(err) == "BadValue (2): value *types.Array not supported in filter"


def test_code_names():
    assert ErrorCode.NOT_IMPLEMENTED.code_name == "NotImplemented"
    assert ErrorCode.PROJECTION_IN_EX.code_name == "Location31253"
    assert ErrorCode(238) is ErrorCode.NOT_IMPLEMENTED


def test_document():
    err = CommandError(ErrorCode.BAD_VALUE, "$or must be an array")
    assert err.document() == {
        "ok": 0.0,
        "errmsg": "$or must be an array",
        "code": 2,
        "codeName": "BadValue",
    }


def test_wrapping_exception_keeps_cause():
    cause = ValueError("debug_error")
    err = CommandError(ErrorCode.BAD_VALUE, cause)
    assert err.__cause__ is cause
    assert err.message == str(cause)


def test_zero_code_rejected():
    with pytest.raises(ValueError):
        CommandError(0, "message")


def test_empty_message_rejected():
    with pytest.raises(ValueError):
        CommandError(ErrorCode.BAD_VALUE, "")


def test_protocol_error_passes_command_error():
    err = CommandError(ErrorCode.NAMESPACE_EXISTS, "exists")
    result, ok = protocol_error(err)
    assert result is err
    assert ok is True


def test_protocol_error_finds_wrapped_command_error():
    inner = CommandError(ErrorCode.NAMESPACE_NOT_FOUND, "missing")
    try:
        try:
            raise inner
        except CommandError as exc:
            raise RuntimeError("outer") from exc
    except RuntimeError as outer:
        result, ok = protocol_error(outer)
    assert result is inner
    assert ok is True


def test_protocol_error_wraps_other_errors():
    cause = ValueError("debug_error")
    result, ok = protocol_error(cause)
    assert ok is False
    assert result.code is ErrorCode.INTERNAL_ERROR
    assert result.document()["codeName"] == "InternalError"
    assert result.message == str(cause)


def test_protocol_error_none():
    with pytest.raises(ValueError):
        protocol_error(None)


def test_document_command_lowercases_first_key():
    assert document_command({"$elemMatch": True, "other": 1}) == "$elemmatch"
    assert document_command({}) == ""


def test_unimplemented_raises_for_present_field():
    assert unimplemented({"field": True}, "$elemMatch", "$meta") is None
    with pytest.raises(CommandError) as info:
        unimplemented({"$elemMatch": True}, "$", "$elemMatch")
    assert info.value.code is ErrorCode.NOT_IMPLEMENTED
    assert str(info.value) == (
        'NotImplemented (238): $elemmatch: support for field "$elemMatch" is not implemented yet'
    )


def test_ignored_logs_present_fields(caplog):
    logger = logging.getLogger("hanadocstore.tests.ignored")
    with caplog.at_level(logging.DEBUG, logger=logger.name):
        ignored({"find": "coll", "comment": "x"}, logger, "comment", "hint")
    records = [r for r in caplog.records if r.name == logger.name]
    assert len(records) == 1
    assert records[0].field == "comment"
    assert records[0].command == "find"