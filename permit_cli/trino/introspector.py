"""Trino metadata introspector."""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..config import settings
from ..errors import IntrospectionError
from .models import (
    TrinoCatalog,
    TrinoColumn,
    TrinoFunction,
    TrinoProcedure,
    TrinoSchema,
    TrinoSchemaData,
    TrinoTable,
    TrinoView,
)

logger = logging.getLogger(__name__)


def quote_identifier(name: str) -> str:
    """Quote a Trino identifier."""
    return '"' + name.replace('"', '""') + '"'


def split_type_list(value: str) -> List[str]:
    """Split a comma separated type list, keeping ``decimal(10, 2)`` whole."""
    parts = []
    depth = 0
    current = []
    for char in value or "":
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return [p for p in parts if p]


class TrinoIntrospector:
    """Client for reading catalogs, schemas, tables and routines from Trino.

    Works with any PEP 249 connection; by default one is opened with the
    ``trino`` client package using the configured host, port and user.
    """

    EXCLUDED_CATALOGS = {"system"}
    EXCLUDED_SCHEMAS = {"information_schema"}

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        http_scheme: Optional[str] = None,
        connection: Any = None,
    ):
        self.host = host or settings.trino_host
        self.port = port or settings.trino_port
        self.user = user or settings.trino_user
        self.http_scheme = http_scheme or settings.trino_http_scheme
        self._connection = connection

    def connect(self):
        """Connect to Trino."""
        if self._connection is not None:
            return self._connection

        try:
            import trino.dbapi
        except ImportError:
            raise ImportError(
                "trino is required. "
                "Install it with: pip install 'permit-cli[trino]'"
            )

        if not self.host:
            raise IntrospectionError("Trino host is not configured (use --host or TRINO_HOST)")

        self._connection = trino.dbapi.connect(
            host=self.host,
            port=self.port,
            user=self.user,
            http_scheme=self.http_scheme,
        )
        return self._connection

    def close(self):
        """Close the connection."""
        if self._connection:
            self._connection.close()
            self._connection = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _query(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Tuple]:
        conn = self.connect()
        cursor = conn.cursor()
        try:
            if params:
                cursor.execute(sql, params)
            else:
                cursor.execute(sql)
            return [tuple(row) for row in cursor.fetchall()]
        except Exception as e:
            raise IntrospectionError(f"Trino query failed: {e}", details={"sql": sql}) from e
        finally:
            cursor.close()

    def get_catalogs(self) -> List[str]:
        """Get all catalogs (excludes the system catalog)."""
        rows = self._query("SHOW CATALOGS")
        return [row[0] for row in rows if row[0] not in self.EXCLUDED_CATALOGS]

    def get_schemas(self, catalog: str) -> List[str]:
        """Get all schemas in a catalog (excludes information_schema)."""
        rows = self._query(
            f"SELECT schema_name FROM {quote_identifier(catalog)}.information_schema.schemata "
            "ORDER BY schema_name"
        )
        return [row[0] for row in rows if row[0] not in self.EXCLUDED_SCHEMAS]

    def get_tables(self, catalog: str) -> List[Tuple[str, str, str]]:
        """Get (schema, name, type) for every table and view in a catalog."""
        rows = self._query(
            f"SELECT table_schema, table_name, table_type "
            f"FROM {quote_identifier(catalog)}.information_schema.tables "
            "ORDER BY table_schema, table_name"
        )
        return [row for row in rows if row[0] not in self.EXCLUDED_SCHEMAS]

    def get_columns(self, catalog: str) -> Dict[Tuple[str, str], List[TrinoColumn]]:
        """Get columns for every table in a catalog, keyed by (schema, table)."""
        rows = self._query(
            f"SELECT table_schema, table_name, column_name, data_type, is_nullable "
            f"FROM {quote_identifier(catalog)}.information_schema.columns "
            "ORDER BY table_schema, table_name, ordinal_position"
        )
        columns: Dict[Tuple[str, str], List[TrinoColumn]] = {}
        for schema, table, name, data_type, is_nullable in rows:
            columns.setdefault((schema, table), []).append(TrinoColumn(
                name=name,
                type=data_type,
                nullable=str(is_nullable).upper() == "YES",
            ))
        return columns

    def get_materialized_views(self, catalog: str) -> List[Tuple[str, str]]:
        """Get (schema, name) for every materialized view in a catalog."""
        rows = self._query(
            "SELECT schema_name, name FROM system.metadata.materialized_views "
            "WHERE catalog_name = ? ORDER BY schema_name, name",
            [catalog],
        )
        return [(row[0], row[1]) for row in rows]

    def get_functions(self, catalog: str, schema: str) -> List[TrinoFunction]:
        """Get functions defined in a schema.

        Connectors without function support raise on ``SHOW FUNCTIONS``; such
        schemas are logged and treated as having no functions.
        """
        try:
            rows = self._query(
                f"SHOW FUNCTIONS FROM {quote_identifier(catalog)}.{quote_identifier(schema)}"
            )
        except IntrospectionError as e:
            logger.warning("Skipping functions of %s.%s: %s", catalog, schema, e.message)
            return []

        return [
            TrinoFunction(
                catalog=catalog,
                schema_name=schema,
                name=row[0],
                return_type=row[1],
                argument_types=split_type_list(row[2]),
            )
            for row in rows
        ]

    def get_procedures(self, catalog: str) -> List[TrinoProcedure]:
        """Get procedures registered for a catalog."""
        rows = self._query(
            "SELECT procedure_schem, procedure_name FROM system.jdbc.procedures "
            "WHERE procedure_cat = ? ORDER BY procedure_schem, procedure_name",
            [catalog],
        )
        return [
            TrinoProcedure(catalog=catalog, schema_name=row[0], name=row[1])
            for row in rows
            if row[0] not in self.EXCLUDED_SCHEMAS
        ]

    def introspect(
        self,
        catalog_filter: Optional[List[str]] = None,
        include_functions: bool = True,
    ) -> TrinoSchemaData:
        """Introspect the cluster and return its metadata tree.

        Args:
            catalog_filter: Optional catalog names to restrict introspection to
            include_functions: Whether to list functions per schema

        Returns:
            TrinoSchemaData ready for the resource mapper
        """
        data = TrinoSchemaData()
        catalogs = self.get_catalogs()

        if catalog_filter:
            catalogs = [c for c in catalogs if c in catalog_filter]

        for catalog in catalogs:
            data.catalogs.append(TrinoCatalog(name=catalog))

            schemas = self.get_schemas(catalog)
            for schema in schemas:
                data.schemas.append(TrinoSchema(catalog=catalog, name=schema))

            materialized = set(self.get_materialized_views(catalog))
            columns = self.get_columns(catalog)

            for schema, name, table_type in self.get_tables(catalog):
                table_columns = columns.get((schema, name), [])
                if (schema, name) in materialized:
                    data.materialized_views.append(TrinoView(
                        catalog=catalog, schema_name=schema, name=name, columns=table_columns,
                    ))
                elif table_type == "VIEW":
                    data.views.append(TrinoView(
                        catalog=catalog, schema_name=schema, name=name, columns=table_columns,
                    ))
                else:
                    data.tables.append(TrinoTable(
                        catalog=catalog,
                        schema_name=schema,
                        name=name,
                        type=table_type,
                        columns=table_columns,
                    ))

            if include_functions:
                for schema in schemas:
                    data.functions.extend(self.get_functions(catalog, schema))

            data.procedures.extend(self.get_procedures(catalog))

        logger.debug(
            "Introspected %d catalogs, %d schemas, %d tables, %d views",
            len(data.catalogs), len(data.schemas), len(data.tables), len(data.views),
        )
        return data
