"""Translation of query filter documents into SQL WHERE clauses."""

from __future__ import annotations

import math
import re
from typing import Any

from hanadocstore.errors import CommandError, ErrorCode
from hanadocstore.likepattern import regex_to_like
from hanadocstore.values import ObjectID, Regex

_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1
_INDEX_RE = re.compile(r"[+-]?[0-9]+")

_LOGIC_EXPRESSIONS = {
    "$and": " AND ",
    "$or": " OR ",
    "$nor": " AND NOT (",
}

_FIELD_EXPRESSIONS = {
    "$gt": " > ",
    "$gte": " >= ",
    "$lt": " < ",
    "$lte": " <= ",
    "$eq": " = ",
    "$ne": " <> ",
    "$exists": " IS ",
    "$size": "CARDINALITY",
    "$all": "all",
    "$elemmatch": "elemMatch",
    "$not": " NOT ",
    "$regex": " LIKE ",
}


def _type_name(value: Any) -> str:
    return type(value).__name__


def _is_int64(value: Any) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and _INT64_MIN <= value <= _INT64_MAX
    )


def _format_float(value: float) -> str:
    """Format a float with six decimals, spelling out infinities and NaN."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return f"{value:f}"


def _bool_sql(value: bool) -> str:
    return f"to_json_boolean({'true' if value else 'false'})"


def _object_id_sql(value: ObjectID) -> str:
    """Return {"oid":'<hex>'}: the key stays double quoted, the value single quoted."""
    return "{\"oid\":'" + value.hex() + "'}"


def _parse_index(part: str) -> int | None:
    if not _INDEX_RE.fullmatch(part):
        return None
    number = int(part)
    if not _INT64_MIN <= number <= _INT64_MAX:
        return None
    return number


def create_where_clause(filter_doc: dict[str, Any]) -> str:
    """Build the WHERE clause for a filter document; empty filters give ""."""
    parts = [_where_pair(key, value, False) for key, value in filter_doc.items()]
    if not parts:
        return ""
    return " WHERE " + " AND ".join(parts)


def _where_pair(key: str, value: Any, nor: bool) -> str:
    """Convert one {field: value} pair into SQL."""
    if key.startswith("$"):
        return _logic_expression(key, value, nor)

    if isinstance(value, dict) and value and next(iter(value)).startswith("$"):
        return _field_expression(key, value, nor)

    v_sql, sign = where_value(value)
    k_sql = where_key(key)
    kv_sql = k_sql + sign + v_sql
    if nor:
        kv_sql = "(" + kv_sql + " AND " + k_sql + " IS SET)"
    return kv_sql


def where_key(key: str) -> str:
    """Quote a field path; numeric parts become 1-based array indexes."""
    if "." not in key:
        return '"' + key + '"'

    k_sql = ""
    previous_was_index = False
    for i, part in enumerate(key.split(".")):
        index = _parse_index(part)
        if index is not None:
            if previous_was_index:
                raise CommandError(
                    ErrorCode.NOT_IMPLEMENTED,
                    "not yet supporting indexing on an array inside of an array",
                )
            if index < 0:
                raise ValueError("negative array index is not allowed")
            k_sql += f"[{index + 1}]"
            previous_was_index = True
            continue

        if i != 0:
            k_sql += "."
        k_sql += '"' + part + '"'
        previous_was_index = False

    return k_sql


def where_value(value: Any) -> tuple[str, str]:
    """Return the SQL for a filter value and the comparison sign to use with it."""
    if isinstance(value, bool):
        return _bool_sql(value), " = "
    if _is_int64(value):
        return str(value), " = "
    if isinstance(value, float):
        return _format_float(value), " = "
    if isinstance(value, str):
        return "'" + value + "'", " = "
    if value is None:
        return "NULL", " IS "
    if isinstance(value, Regex):
        return regex_to_like(value), " LIKE "
    if isinstance(value, ObjectID):
        return _object_id_sql(value), " = "
    if isinstance(value, dict):
        return where_document(value), " = "
    raise CommandError(
        ErrorCode.BAD_VALUE, f"value {_type_name(value)} not supported in filter"
    )


def where_document(doc: dict[str, Any]) -> str:
    """Render a document used as a filter value, e.g. {"a": 1, "b": 'x'}."""
    parts = []
    for key, value in doc.items():
        prefix = '"' + key + '": '
        if isinstance(value, bool):
            rendered = _bool_sql(value)
        elif _is_int64(value):
            rendered = str(value)
        elif isinstance(value, float):
            rendered = _format_float(value)
        elif isinstance(value, str):
            rendered = "'" + value + "'"
        elif value is None:
            rendered = " NULL "
        elif isinstance(value, ObjectID):
            rendered = _object_id_sql(value)
        elif isinstance(value, (list, tuple)):
            rendered = prepare_array_for_sql(value)
        elif isinstance(value, dict):
            rendered = where_document(value)
        else:
            raise CommandError(
                ErrorCode.BAD_VALUE,
                "the document used in filter contains a datatype not yet supported: "
                + _type_name(value),
            )
        parts.append(prefix + rendered)
    return "{" + ", ".join(parts) + "}"


def prepare_array_for_sql(array: list[Any] | tuple[Any, ...]) -> str:
    """Render an array used inside a filter value, e.g. [1, 'x']."""
    parts = []
    for value in array:
        if value is None or isinstance(value, (bool, float, str, ObjectID)) or _is_int64(value):
            parts.append(where_value(value)[0])
        elif isinstance(value, (list, tuple)):
            parts.append(prepare_array_for_sql(value))
        elif isinstance(value, dict):
            parts.append(where_document(value))
        else:
            raise CommandError(
                ErrorCode.BAD_VALUE,
                "The array used in filter contains a datatype not yet supported: "
                + _type_name(value),
            )
    return "[" + ", ".join(parts) + "]"


def logic_expression(key: str, value: Any) -> str:
    """Convert $and, $or and $nor into SQL."""
    return _logic_expression(key, value, False)


def _logic_expression(key: str, value: Any, nor: bool) -> str:
    lower_key = key.lower()
    logic_expr = _LOGIC_EXPRESSIONS.get(lower_key)
    if logic_expr is None:
        if lower_key == "$not":
            raise ValueError(
                f"unknown top level: {key}. "
                "If you are trying to negate an entire expression, use $nor"
            )
        raise CommandError(
            ErrorCode.NOT_IMPLEMENTED, f"support for {key} is not implemented yet"
        )

    local_nor = lower_key == "$nor"
    nor = nor or local_nor

    if not isinstance(value, (list, tuple)):
        raise CommandError(ErrorCode.BAD_VALUE, f"{lower_key} must be an array")
    if len(value) < 2 and not nor:
        raise ValueError("need minimum two expressions")

    kv_sql = "("
    for i, expr in enumerate(value):
        if not isinstance(expr, dict):
            raise ValueError(
                "Found in array of logicExpression no document but instead the datatype: "
                + _type_name(expr)
            )
        if i == 0 and local_nor:
            kv_sql += " NOT ("
        if i != 0:
            kv_sql += logic_expr
        kv_sql += " AND ".join(_where_pair(k, v, nor) for k, v in expr.items())
        if local_nor:
            kv_sql += ")"
    return kv_sql + ")"


def field_expression(key: str, value: Any) -> str:
    """Convert {field: {$op: value, ...}} into SQL."""
    return _field_expression(key, value, False)


def _field_expression(key: str, value: Any, nor: bool) -> str:
    k_sql = where_key(key)

    if not isinstance(value, dict):
        raise CommandError(
            ErrorCode.BAD_VALUE,
            "In use of field expression a document was expected. Got instead: "
            + _type_name(value),
        )

    kv_sql = ""
    for i, op in enumerate(value):
        if i != 0:
            kv_sql += " AND "
        kv_sql += k_sql

        lower_op = op.lower()
        field_expr = _FIELD_EXPRESSIONS.get(lower_op)
        if field_expr is None:
            raise CommandError(
                ErrorCode.NOT_IMPLEMENTED, f"support for {op} is not implemented yet"
            )

        expr_value = value[op]

        if lower_op == "$exists":
            if not isinstance(expr_value, bool):
                raise ValueError("$exists only works with boolean")
            v_sql = "SET" if expr_value else "UNSET"
        elif lower_op == "$size":
            kv_sql = field_expr + "(" + kv_sql + ")"
            v_sql, field_expr = where_value(expr_value)
        elif lower_op in ("$all", "$elemmatch"):
            kv_sql = _filter_array(kv_sql, field_expr, expr_value, nor)
            continue
        elif lower_op == "$not":
            try:
                inner = _field_expression(key, expr_value, nor)
            except (CommandError, ValueError) as exc:
                raise CommandError(ErrorCode.BAD_VALUE, "wrong use of $not") from exc
            return "(" + field_expr + inner + " OR " + k_sql + " IS UNSET) "
        elif lower_op == "$ne":
            kv_sql = "(" + kv_sql
            v_sql, sign = where_value(expr_value)
            if sign.upper() == " IS ":
                field_expr = " IS NOT "
            v_sql += " OR " + k_sql + " IS UNSET)"
        elif lower_op == "$regex":
            v_sql = regex_to_like(expr_value)
        else:
            v_sql, sign = where_value(expr_value)
            if sign.upper() == " IS ":
                field_expr = sign

        kv_sql += field_expr + v_sql
        if nor:
            kv_sql = "(" + kv_sql + " AND " + k_sql + " IS SET)"

    return kv_sql


def filter_array(field: str, array_operator: str, filters: Any) -> str:
    """Implement $all and $elemMatch with FOR ANY ... SATISFIES ... END."""
    return _filter_array(field, array_operator, filters, False)


def _strip_is_set(sql: str) -> str:
    if " IS SET" in sql:
        sql = sql.split(" AND ")[0].replace("(", "", 1)
    return sql


def _filter_array(field: str, array_operator: str, filters: Any, nor: bool) -> str:
    operator = array_operator.lower()

    if isinstance(filters, dict):
        if operator == "all":
            raise CommandError(ErrorCode.BAD_VALUE, "$all needs an array")
        kv_sql = ""
        for i, (name, item) in enumerate(filters.items()):
            if i != 0:
                kv_sql += " AND "
            if "$" in name:
                sql = _where_pair("element", {name: item}, nor)
                if name.lower() == "$not":
                    sql = sql.split("OR")[0].replace("(", "", 1)
                sql = _strip_is_set(sql)
            else:
                sql = _where_pair("element." + name, item, nor)
                if isinstance(item, dict) and "$not" in item:
                    index = sql.rfind("UNSET")
                    if index >= 0:
                        sql = sql[:index] + "NULL" + sql[index + len("UNSET"):]
                sql = _strip_is_set(sql)
            if i == 0:
                kv_sql += 'FOR ANY "element" IN ' + field + " SATISFIES "
            kv_sql += sql
        return kv_sql + " END "

    if isinstance(filters, (list, tuple)):
        if operator == "elemmatch":
            raise CommandError(ErrorCode.BAD_VALUE, "$elemMatch needs an object")
        return " AND ".join(
            'FOR ANY "element" IN ' + field + ' SATISFIES "element" = '
            + where_value(item)[0] + " END "
            for item in filters
        )

    raise CommandError(
        ErrorCode.BAD_VALUE,
        "If $all: Expected array. If $elemMatch: Expected document. Got instead: "
        + _type_name(filters),
    )