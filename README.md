# hanadocstore

Building blocks for serving a MongoDB-style API on top of a SAP HANA
JSON Document Store. The package has no third-party run-time
dependencies.

## What is in it

- `hanadocstore.values` – the value types `ObjectID` (12 bytes, with
  `hex()`, `to_json()`, `from_hex()` and `from_json()`), `Regex`
  (`pattern`, `options`, `to_json()`, `from_json()`) and `Binary`
  (`subtype`, `data`).
- `hanadocstore.scalars` – encoders and decoders for the stored form of
  single values: `encode_bool`/`decode_bool`, `encode_double`/`decode_double`,
  `encode_int32`/`decode_int32`, `encode_int64`/`decode_int64`,
  `encode_string`/`decode_string` and `encode_datetime`/`decode_datetime`
  (`{"$da": milliseconds since the epoch}`). Bad input raises
  `ScalarDecodeError`.
- `hanadocstore.fjson` – whole documents: `unmarshal` turns stored JSON
  into dicts, lists and scalars (objects holding `"oid"`, `"$da"` or `"$r"`
  become `ObjectID`, `datetime` and `Regex`; integers that fit in 64 bits
  become `int`, other numbers `float`). `marshal` encodes values for the
  wire protocol, `marshal_hana` for database operations, where datetimes
  and regular expressions are rejected with `UnsupportedTypeError`. In both,
  an `ObjectID` `_id` is written first. `document_keys` returns the
  top-level keys of a JSON object in order. Errors are `FJSONError`.
- `hanadocstore.where` – translation of filter documents into SQL
  `WHERE` clauses: `create_where_clause`, plus the pieces it is built from
  (`where_key`, `where_value`, `where_document`, `prepare_array_for_sql`,
  `logic_expression`, `field_expression`, `filter_array`). Supported are
  plain equality, `$and`, `$or`, `$nor`, `$gt`, `$gte`, `$lt`, `$lte`,
  `$eq`, `$ne`, `$exists`, `$size`, `$all`, `$elemMatch`, `$not` and
  `$regex`. Dotted paths are quoted and numeric parts become 1-based array
  indexes.
- `hanadocstore.likepattern` – `regex_to_like` turns a simple regular
  expression into a quoted SQL `LIKE` pattern (`^`/`$` anchor, `.` becomes
  `_`, `.*` becomes `%`, literal `%` and `_` are escaped with `^`).
  Regex options and `(?i)` are refused.
- `hanadocstore.projection` – `projection` returns the SQL select list and
  whether the projection is an exclusion; `is_projection_inclusion`,
  `inclusion_projection`, and `project_documents`/`project_document`,
  which remove excluded fields (dotted paths and array indexes too) from
  fetched documents in place.
- `hanadocstore.errors` – `CommandError` with an `ErrorCode`; `str()`
  gives `"NotImplemented (238): ..."` and `document()` the reply document
  with `ok`, `errmsg`, `code` and `codeName`. `protocol_error` turns any
  exception into a `CommandError`; `unimplemented` raises for unsupported
  fields and `ignored` logs them at debug level.
- `hanadocstore.hanapool` – `HanaPool` wraps a DB-API connection:
  `tables`, `schemas`, `create_schema`, `create_collection`, `drop_table`,
  `drop_schema`, `json_document_store_available`, `fetch_one` and `close`;
  it is also a context manager. Failures to create are reported as
  `AlreadyExistError`, failures to drop a collection as `NotExistError`.
  `create_pool(connect_string, connect)` opens the connection with the
  factory you pass in. Parameterised queries use the `?` placeholder style.
- `hanadocstore.unique` – `is_id_unique(id_value, db, collection, pool)`
  returns `(True, None)` when the `_id` is free, otherwise `False` with the
  `E11000 duplicate key error ...` message.

## Examples

Encoding and decoding FJSON:

```python
from hanadocstore.fjson import marshal, unmarshal
from hanadocstore.values import ObjectID

doc = unmarshal(b'{"_id":{"oid":"62e2bd54510683f9c0bb0d6b"},"n":42}')
assert doc["_id"] == ObjectID.from_hex("62e2bd54510683f9c0bb0d6b")
print(marshal(doc))
# {"_id":{"oid":"62e2bd54510683f9c0bb0d6b"},"n":42}
```

Building a `WHERE` clause from a filter document:

```python
from hanadocstore.where import create_where_clause

print(create_where_clause({"age": {"$gt": 30}, "name": "foo"}))
#  WHERE "age" > 30 AND "name" = 'foo'
```

Working out a projection:

```python
from hanadocstore.projection import projection

sql, exclusion = projection({"field": True})
# sql == '{"_id": "_id", "field": "field"}', exclusion is False
```

Using a connection:

```python
from hanadocstore.hanapool import create_pool

with create_pool(connect_string, my_connect) as pool:
    print(pool.schemas())
```

## What it does not do

This is a library of parts, not a server. It does not listen for or
decode wire protocol messages, does not dispatch commands such as `find`
or `insert`, and has no list of supported commands. It ships no database
driver: connections come from the factory given to `create_pool`.

## Running the tests

```
pip install "hanadocstore[test]"
pytest
```