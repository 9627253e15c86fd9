"""Check that a document identifier is not yet used in a collection."""

from __future__ import annotations

from typing import Any

from hanadocstore.fjson import marshal_hana
from hanadocstore.hanapool import HanaPool
from hanadocstore.where import create_where_clause

_OID_PREFIX = '{"oid":'


def _duplicate_message(id_value: Any, db: str, collection: str) -> str:
    rendered = marshal_hana(id_value)
    message = (
        f"E11000 duplicate key error collection: {db}.{collection} "
        f"index: _id_ dup key: {{ _id: {rendered} }}"
    )
    if _OID_PREFIX in message:
        message = message.replace(_OID_PREFIX, "", 1).replace("}", "", 1)
    return message


def is_id_unique(id_value: Any, db: str, collection: str, pool: HanaPool) -> tuple[bool, str | None]:
    """Tell whether no document of db.collection has the given _id.

    Returns (True, None) when the identifier is free, otherwise False with
    the duplicate key message that is reported to the client.
    """
    sql = (
        f"SELECT _id FROM {db}.{collection} "
        + create_where_clause({"_id": id_value})
        + " LIMIT 1"
    )
    if pool.fetch_one(sql) is None:
        return True, None
    return False, _duplicate_message(id_value, db, collection)