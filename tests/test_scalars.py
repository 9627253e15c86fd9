import math
import sys
from datetime import datetime, timezone

import pytest

from hanadocstore.scalars import (
    ScalarDecodeError,
    decode_bool,
    decode_datetime,
    decode_double,
    decode_int32,
    decode_int64,
    decode_string,
    encode_bool,
    encode_datetime,
    encode_double,
    encode_int32,
    encode_int64,
    encode_string,
)

UTC = timezone.utc


@pytest.mark.parametrize("value, text", [(False, "false"), (True, "true")])
def test_bool_cases(value, text):
    assert encode_bool(value) == text
    assert decode_bool(text) is value


def test_bool_allows_trailing_whitespace_only():
    assert decode_bool("true ") is True
    with pytest.raises(ScalarDecodeError):
        decode_bool("true x")


def test_bool_rejects_other_types():
    with pytest.raises(ScalarDecodeError, match="cannot unmarshal"):
        decode_bool("1")


@pytest.mark.parametrize(
    "value, text",
    [
        (42.13, "42.13"),
        (sys.float_info.max, "1.7976931348623157e+308"),
        (5e-324, "5e-324"),
    ],
)
def test_double_cases(value, text):
    assert encode_double(value) == text
    assert decode_double(text) == value


@pytest.mark.parametrize(
    "value, text",
    [
        (1.0, "1"),
        (0.0, "0"),
        (1e21, "1e+21"),
        (1e20, "100000000000000000000"),
        (1e-7, "1e-7"),
        (0.000001, "0.000001"),
        (-2.5, "-2.5"),
    ],
)
def test_double_format(value, text):
    assert encode_double(value) == text


def test_double_eof():
    with pytest.raises(ScalarDecodeError, match="^unexpected EOF$"):
        decode_double("{")


def test_double_rejects_nan_and_inf():
    with pytest.raises(ValueError, match="NaN"):
        encode_double(math.nan)
    with pytest.raises(ValueError, match=r"\+Inf"):
        encode_double(math.inf)
    with pytest.raises(ScalarDecodeError):
        decode_double("NaN")


def test_double_rejects_trailing_data():
    with pytest.raises(ScalarDecodeError, match="remains"):
        decode_double("42 ")


def test_double_reads_integers():
    assert decode_double("7") == 7.0


@pytest.mark.parametrize(
    "value, text",
    [
        (42, "42"),
        (0, "0"),
        (9223372036854775807, "9223372036854775807"),
        (-9223372036854775808, "-9223372036854775808"),
    ],
)
def test_int64_cases(value, text):
    assert encode_int64(value) == text
    assert decode_int64(text) == value


def test_int64_eof():
    with pytest.raises(ScalarDecodeError, match="^unexpected EOF$"):
        decode_int64("{")


def test_int64_out_of_range():
    with pytest.raises(ScalarDecodeError):
        decode_int64("9223372036854775808")
    with pytest.raises(ValueError):
        encode_int64(2**63)


def test_int64_rejects_fraction():
    with pytest.raises(ScalarDecodeError, match="int64"):
        decode_int64("1.5")


@pytest.mark.parametrize(
    "value, text",
    [(42, "42"), (0, "0"), (2147483647, "2147483647"), (-2147483648, "-2147483648")],
)
def test_int32_cases(value, text):
    assert encode_int32(value) == text
    assert decode_int32(text) == value


def test_int32_out_of_range():
    with pytest.raises(ScalarDecodeError, match="int32"):
        decode_int32("2147483648")
    with pytest.raises(ValueError):
        encode_int32(2**31)


@pytest.mark.parametrize(
    "value, text",
    [("foo", '"foo"'), ("", '""'), ("\x00", '"\\u0000"')],
)
def test_string_cases(value, text):
    assert encode_string(value) == text
    assert decode_string(text) == value


def test_string_rejects_number():
    with pytest.raises(ScalarDecodeError):
        decode_string("42")


@pytest.mark.parametrize(
    "value, text",
    [
        (datetime(2021, 11, 1, 10, 18, 42, 123000, tzinfo=UTC), '{"$da":1635761922123}'),
        (datetime(1970, 1, 1, tzinfo=UTC), '{"$da":0}'),
        (datetime(9999, 12, 31, 23, 59, 59, 999000, tzinfo=UTC), '{"$da":253402300799999}'),
    ],
)
def test_datetime_cases(value, text):
    assert encode_datetime(value) == text
    assert decode_datetime(text) == value


def test_datetime_year_zero_is_out_of_range():
    with pytest.raises(ScalarDecodeError, match="out of the supported range"):
        decode_datetime('{"$da":-62167219200000}')


def test_datetime_eof():
    with pytest.raises(ScalarDecodeError, match="^unexpected EOF$"):
        decode_datetime("{")


def test_datetime_unknown_field():
    with pytest.raises(ScalarDecodeError, match='unknown field "x"'):
        decode_datetime('{"$da":0,"x":1}')


def test_datetime_naive_is_utc():
    assert encode_datetime(datetime(1970, 1, 1, 0, 0, 1)) == '{"$da":1000}'


def test_datetime_truncates_to_milliseconds_downwards():
    value = datetime(1969, 12, 31, 23, 59, 59, 999500, tzinfo=UTC)
    assert encode_datetime(value) == '{"$da":-1}'


def test_null_data_is_rejected():
    with pytest.raises(ScalarDecodeError, match="null data"):
        decode_int64("null")