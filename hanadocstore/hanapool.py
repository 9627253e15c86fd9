"""Access to the schemas and collections of a SAP HANA JSON Document Store."""

from __future__ import annotations

from contextlib import closing, suppress
from typing import Any, Callable

_TABLES_SQL = (
    'SELECT TABLE_NAME FROM "PUBLIC"."M_TABLES" '
    "WHERE SCHEMA_NAME = ? AND TABLE_TYPE = 'COLLECTION';"
)
_SCHEMAS_SQL = (
    "SELECT SCHEMA_NAME FROM SCHEMAS "
    "WHERE SCHEMA_NAME NOT LIKE '%SYS%' AND SCHEMA_OWNER NOT LIKE '%SYS%'"
)
_DOCSTORE_SQL = (
    "SELECT object_count FROM m_feature_usage "
    "WHERE component_name = 'DOCSTORE' AND feature_name = 'COLLECTIONS'"
)


class NotExistError(Exception):
    """The schema or table does not exist."""

    def __init__(self, message: str = "schema or table does not exist") -> None:
        super().__init__(message)


class AlreadyExistError(Exception):
    """The schema or table already exists."""

    def __init__(self, message: str = "schema or table already exist") -> None:
        super().__init__(message)


def _column_name(cursor: Any, index: int) -> str:
    description = getattr(cursor, "description", None)
    if description and len(description) > index:
        return str(description[index][0])
    return ""


class HanaPool:
    """A DB-API connection to a SAP HANA instance with document store helpers."""

    def __init__(self, connection: Any) -> None:
        self.connection = connection

    def __enter__(self) -> HanaPool:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @staticmethod
    def _run(cursor: Any, sql: str, args: tuple[Any, ...]) -> None:
        if args:
            cursor.execute(sql, args)
        else:
            cursor.execute(sql)

    def _execute(self, sql: str, *args: Any) -> None:
        with closing(self.connection.cursor()) as cursor:
            self._run(cursor, sql, args)

    def _query_strings(self, sql: str, *args: Any) -> list[str]:
        with closing(self.connection.cursor()) as cursor:
            self._run(cursor, sql, args)
            rows = cursor.fetchall()
            column = _column_name(cursor, 0)

        names = []
        for row in rows:
            value = row[0]
            if value is None:
                raise ValueError(
                    f'Scan error on column index 0, name "{column}": '
                    "converting NULL to string is unsupported"
                )
            names.append(value.decode("utf-8") if isinstance(value, bytes) else str(value))
        return names

    def fetch_one(self, sql: str, *args: Any) -> tuple[Any, ...] | None:
        """Run a query and return its first row, or None when there is none."""
        with closing(self.connection.cursor()) as cursor:
            self._run(cursor, sql, args)
            row = cursor.fetchone()
        return None if row is None else tuple(row)

    def tables(self, db: str) -> list[str]:
        """Return the collection names of a schema, creating the schema if needed."""
        with suppress(AlreadyExistError):
            self.create_schema(db)
        return self._query_strings(_TABLES_SQL, db.upper())

    def create_schema(self, db: str) -> None:
        """Create a schema; any failure is reported as AlreadyExistError."""
        try:
            self._execute("CREATE SCHEMA " + db)
        except Exception as exc:
            raise AlreadyExistError() from exc

    def create_collection(self, db: str, collection: str) -> None:
        """Create a collection; any failure is reported as AlreadyExistError."""
        try:
            self._execute("CREATE COLLECTION " + db + "." + collection)
        except Exception as exc:
            raise AlreadyExistError() from exc

    def schemas(self) -> list[str]:
        """Return the names of the non-system schemas."""
        return self._query_strings(_SCHEMAS_SQL)

    def drop_table(self, db: str, collection: str) -> None:
        """Drop a collection; any failure is reported as NotExistError."""
        try:
            self._execute("DROP COLLECTION " + db + "." + collection)
        except Exception as exc:
            raise NotExistError() from exc

    def drop_schema(self, db: str) -> None:
        """Drop a schema together with everything in it."""
        self._execute("DROP SCHEMA " + db + " cascade")

    def json_document_store_available(self) -> bool:
        """Tell whether the JSON Document Store is enabled in the instance."""
        row = self.fetch_one(_DOCSTORE_SQL)
        if row is None:
            raise LookupError("no rows in result set")

        object_count = row[0]
        if object_count is None:
            return False
        if isinstance(object_count, int) and not isinstance(object_count, bool):
            if object_count >= 0:
                return True
        raise ValueError("No clear answer on whether DocStore is activated or not")

    def close(self) -> None:
        """Close the underlying connection."""
        self.connection.close()


def create_pool(connect_string: str, connect: Callable[[str], Any]) -> HanaPool:
    """Open a connection with connect(connect_string) and wrap it in a HanaPool."""
    if not connect_string:
        raise ValueError("No connect string for SAP HANA Cloud instance given")
    return HanaPool(connect(connect_string))