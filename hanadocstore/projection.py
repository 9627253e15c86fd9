"""Projections: choosing which fields of stored documents are returned."""

from __future__ import annotations

import logging
import re
from typing import Any

from hanadocstore.errors import CommandError, ErrorCode, unimplemented

_log = logging.getLogger(__name__)

_UNIMPLEMENTED_FIELDS = ("$", "$elemMatch", "$meta", "$slice", "$comment", "$rand")
_INDEX_RE = re.compile(r"[+-]?[0-9]+")
_NESTED_MESSAGE = "Projection on nested documents is not implemented, yet."


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_flag(value: Any) -> bool:
    return isinstance(value, bool) or _is_number(value)


def _includes(value: Any) -> bool:
    """Return True when a flag value asks for inclusion (true or non-zero)."""
    if isinstance(value, bool):
        return value
    return value != 0


def projection(doc: dict[str, Any]) -> tuple[str, bool]:
    """Return the SQL select list for a projection and whether it is an exclusion.

    Inclusions are done by the database with a JSON projection; exclusions
    select everything ("*") and are applied afterwards with project_documents.
    """
    unimplemented(doc, *_UNIMPLEMENTED_FIELDS)

    if not doc:
        return "*", False

    if is_projection_inclusion(doc):
        return inclusion_projection(doc), False
    return "*", True


def is_projection_inclusion(doc: dict[str, Any]) -> bool:
    """Tell whether a projection includes fields; raise if it mixes both kinds.

    "_id" may be excluded in an inclusion projection and included in an
    exclusion one; it only decides the kind when it is the only field.
    """
    inclusion = False
    exclusion = False

    for key, value in doc.items():
        if key == "_id":
            if not _is_flag(value):
                raise ValueError(
                    f"unsupported operation {key} {value!r} ({type(value).__name__})"
                )
            if len(doc) != 1:
                continue

        if not _is_flag(value):
            raise ValueError(
                f"unsupported projection value for field {key}: {type(value).__name__}"
            )

        if _includes(value):
            if exclusion:
                raise CommandError(
                    ErrorCode.PROJECTION_IN_EX,
                    f"Cannot do inclusion on field {key} in exclusion projection",
                )
            if "." in key:
                raise ValueError(_NESTED_MESSAGE)
            inclusion = True
        else:
            if inclusion:
                raise CommandError(
                    ErrorCode.PROJECTION_EX_IN,
                    f"Cannot do exclusion on field {key} in inclusion projection",
                )
            exclusion = True

    return inclusion


def inclusion_projection(doc: dict[str, Any]) -> str:
    """Build the JSON projection that selects the included fields.

    "_id" is selected unless the projection excludes it explicitly.
    """
    sql = "{"
    if "_id" in doc:
        id_value = doc["_id"]
        if _is_flag(id_value) and _includes(id_value):
            if len(doc) == 1:
                return '{"_id": "_id"}'
            sql += '"_id": "_id", '
    else:
        sql += '"_id": "_id", '

    sql += ", ".join(f'"{key}": "{key}"' for key in doc if key != "_id")
    sql += "}"
    _log.debug("inclusion projection: %s", sql)
    return sql


def project_documents(docs: list[Any], projection_doc: dict[str, Any]) -> None:
    """Apply an exclusion projection to every document of docs, in place."""
    for doc in docs:
        if not isinstance(doc, dict):
            raise ValueError(
                "Array of retrieved documents contains a value that is not a document"
            )
        project_document(doc, projection_doc)


def _parse_index(part: str) -> int | None:
    return int(part) if _INDEX_RE.fullmatch(part) else None


def _remove_path(doc: dict[str, Any], parts: list[str]) -> None:
    """Remove the value at a dotted path; missing paths are left alone."""
    container: Any = doc
    last = len(parts) - 1
    for position, part in enumerate(parts):
        if isinstance(container, dict):
            if container.get(part) is None:
                return
            if position == last:
                del container[part]
                return
            container = container[part]
        elif isinstance(container, list):
            index = _parse_index(part)
            if index is None or not 0 <= index < len(container):
                return
            if position == last:
                del container[index]
                return
            container = container[index]
        else:
            return


def project_document(doc: dict[str, Any], projection_doc: dict[str, Any]) -> None:
    """Remove the fields an exclusion projection names from doc, in place."""
    for field, value in projection_doc.items():
        if "." in field:
            _remove_path(doc, field.split("."))
            continue

        if field == "_id" and _is_flag(value):
            if not _includes(value):
                doc.pop(field, None)
            continue

        doc.pop(field, None)