import pytest

from hanadocstore.values import Binary, ObjectID, Regex

SAMPLE_ID = ObjectID(bytes([98, 226, 189, 84, 81, 6, 131, 249, 192, 187, 13, 107]))


def test_object_id_normal_to_json():
    oid = ObjectID(bytes([0x01] * 12))
    assert oid.to_json() == '{"oid":"010101010101010101010101"}'


def test_object_id_normal_from_json():
    oid = ObjectID.from_json('{"oid":"010101010101010101010101"}')
    assert oid == ObjectID(bytes([0x01] * 12))


def test_object_id_from_json_accepts_bytes():
    oid = ObjectID.from_json(b'{"oid":"62e2bd54510683f9c0bb0d6b"}')
    assert oid == SAMPLE_ID


def test_object_id_hex():
    assert SAMPLE_ID.hex() == "62e2bd54510683f9c0bb0d6b"


def test_object_id_hex_round_trip():
    assert ObjectID.from_hex(SAMPLE_ID.hex()) == SAMPLE_ID


def test_object_id_json_round_trip():
    assert ObjectID.from_json(SAMPLE_ID.to_json()) == SAMPLE_ID


def test_object_id_default_is_zero():
    assert ObjectID().to_json() == '{"oid":"000000000000000000000000"}'


def test_object_id_eof():
    with pytest.raises(ValueError, match="unexpected EOF"):
        ObjectID.from_json("{")


def test_object_id_unknown_field():
    with pytest.raises(ValueError, match="unknown field"):
        ObjectID.from_json('{"oid":"010101010101010101010101","foo":"bar"}')


def test_object_id_wrong_length():
    with pytest.raises(ValueError, match="12 bytes"):
        ObjectID.from_json('{"oid":"0101"}')


def test_object_id_missing_field():
    with pytest.raises(ValueError):
        ObjectID.from_json("{}")


def test_object_id_bad_hex():
    with pytest.raises(ValueError):
        ObjectID.from_hex("zz0101010101010101010101")


def test_object_id_trailing_data():
    with pytest.raises(ValueError):
        ObjectID.from_json('{"oid":"010101010101010101010101"} {}')


def test_object_id_null_data():
    with pytest.raises(ValueError, match="null data"):
        ObjectID.from_json("null")


def test_object_id_constructor_length():
    with pytest.raises(ValueError):
        ObjectID(b"\x01\x02")


def test_regex_normal_to_json():
    assert Regex(pattern="hoffman", options="i").to_json() == '{"$r":"hoffman","o":"i"}'


def test_regex_normal_from_json():
    assert Regex.from_json('{"$r":"hoffman","o":"i"}') == Regex(pattern="hoffman", options="i")


def test_regex_empty():
    assert Regex().to_json() == '{"$r":"","o":""}'
    assert Regex.from_json('{"$r":"","o":""}') == Regex(pattern="", options="")


def test_regex_eof():
    with pytest.raises(ValueError, match="unexpected EOF"):
        Regex.from_json("{")


def test_regex_unknown_field():
    with pytest.raises(ValueError, match="unknown field"):
        Regex.from_json('{"$r":"a","o":"","x":1}')


def test_regex_round_trip_with_escapes():
    regex = Regex(pattern='a"b\\c<d>\n', options="im")
    assert Regex.from_json(regex.to_json()) == regex


def test_regex_non_string_field():
    with pytest.raises(ValueError):
        Regex.from_json('{"$r":1,"o":""}')


def test_binary_holds_bytes():
    binary = Binary(subtype=12, data=bytearray(b"hello"))
    assert binary.data == b"hello"
    assert binary == Binary(subtype=12, data=b"hello")


def test_binary_subtype_range():
    with pytest.raises(ValueError):
        Binary(subtype=256, data=b"")