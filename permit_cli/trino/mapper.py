"""Maps Trino metadata onto Permit resource definitions.

Every catalog, schema, table, column, function, view, materialized view and
procedure becomes one ``ResourceDefinition``. Keys are built from the
category and the hierarchical path so that distinct objects never share a
key, and the output order only depends on the input order.
"""

from collections import Counter
from typing import Dict, List, Optional, Sequence

from ..models import AttributeSpec, CanonicalType, ResourceDefinition
from .models import TrinoColumn, TrinoSchemaData
from .type_mappers import TrinoTypeMapper, TypeMapper

RESOURCE_KEY_PREFIX = "trino"

NULLABLE_DESCRIPTION = "nullable"

# Authorization actions exposed by each Trino object category
TRINO_ACTIONS: Dict[str, List[str]] = {
    "catalog": [
        "AccessCatalog",
        "CreateCatalog",
        "DropCatalog",
        "FilterCatalogs",
        "ShowSchemas",
    ],
    "schema": [
        "CreateSchema",
        "DropSchema",
        "RenameSchema",
        "ShowSchemas",
        "FilterSchemas",
        "ShowTables",
        "SetSchemaAuthorization",
    ],
    "table": [
        "CreateTable",
        "DropTable",
        "RenameTable",
        "ShowTables",
        "FilterTables",
        "ShowColumns",
        "FilterColumns",
        "AddColumn",
        "DropColumn",
        "RenameColumn",
        "SelectFromColumns",
        "InsertIntoTable",
        "DeleteFromTable",
        "TruncateTable",
        "UpdateTableColumns",
        "SetTableComment",
        "SetTableProperties",
        "SetTableAuthorization",
    ],
    "column": [
        "SelectFromColumns",
        "UpdateTableColumns",
        "ShowColumns",
        "FilterColumns",
        "SetColumnComment",
    ],
    "function": [
        "ExecuteFunction",
        "ShowFunctions",
        "FilterFunctions",
        "CreateFunction",
        "DropFunction",
        "CreateViewWithExecuteFunction",
    ],
    "view": [
        "CreateView",
        "DropView",
        "RenameView",
        "SelectFromColumns",
        "SetViewComment",
        "SetViewAuthorization",
    ],
    "materialized_view": [
        "CreateMaterializedView",
        "DropMaterializedView",
        "RefreshMaterializedView",
        "RenameMaterializedView",
        "SetMaterializedViewProperties",
        "SelectFromColumns",
    ],
    "procedure": [
        "ExecuteProcedure",
        "ExecuteTableProcedure",
    ],
}


def resource_key(category: str, *path: str) -> str:
    """Build the Permit key for a Trino object, e.g. ``trino-table-cat-public-users``."""
    return "-".join([RESOURCE_KEY_PREFIX, category, *path]).lower()


def resource_name(*path: str) -> str:
    """Build the dotted display name for a Trino object."""
    return ".".join(path)


class TrinoResourceMapper:
    """Converts a ``TrinoSchemaData`` tree into Permit resource definitions."""

    def __init__(self, type_mapper: Optional[TypeMapper] = None):
        self.type_mapper = type_mapper or TrinoTypeMapper()

    def _resource(self, category: str, path: Sequence[str], attributes=None) -> ResourceDefinition:
        return ResourceDefinition(
            key=resource_key(category, *path),
            name=resource_name(*path),
            actions=list(TRINO_ACTIONS[category]),
            attributes=attributes or {},
        )

    def _column_attributes(self, columns: List[TrinoColumn]) -> Dict[str, AttributeSpec]:
        attributes = {}
        for column in columns:
            attributes[column.name] = AttributeSpec(
                type=self.type_mapper.to_permit_type(column.type),
                description=NULLABLE_DESCRIPTION if column.nullable else None,
            )
        return attributes

    def map_catalogs(self, schema: TrinoSchemaData) -> List[ResourceDefinition]:
        return [self._resource("catalog", [catalog.name]) for catalog in schema.catalogs]

    def map_schemas(self, schema: TrinoSchemaData) -> List[ResourceDefinition]:
        return [self._resource("schema", [s.catalog, s.name]) for s in schema.schemas]

    def map_tables(self, schema: TrinoSchemaData) -> List[ResourceDefinition]:
        return [
            self._resource(
                "table",
                [table.catalog, table.schema_name, table.name],
                self._column_attributes(table.columns),
            )
            for table in schema.tables
        ]

    def map_columns(self, schema: TrinoSchemaData) -> List[ResourceDefinition]:
        resources = []
        for table in schema.tables:
            for column in table.columns:
                resources.append(self._resource(
                    "column",
                    [table.catalog, table.schema_name, table.name, column.name],
                ))
        return resources

    def map_functions(self, schema: TrinoSchemaData) -> List[ResourceDefinition]:
        """One resource per function.

        Overloads of a function share its catalog, schema and name, so they
        map to the same key and are synced as a single Permit resource.
        """
        resources = []
        for function in schema.functions:
            attributes = {
                "returnType": AttributeSpec(type=self.type_mapper.to_permit_type(function.return_type)),
                # The argument list as a whole is exposed, whatever its length
                "argumentTypes": AttributeSpec(type=CanonicalType.ARRAY),
            }
            resources.append(self._resource(
                "function",
                [function.catalog, function.schema_name, function.name],
                attributes,
            ))
        return resources

    def map_views(self, schema: TrinoSchemaData) -> List[ResourceDefinition]:
        return [
            self._resource(
                "view",
                [view.catalog, view.schema_name, view.name],
                self._column_attributes(view.columns),
            )
            for view in schema.views
        ]

    def map_materialized_views(self, schema: TrinoSchemaData) -> List[ResourceDefinition]:
        return [
            self._resource(
                "materialized_view",
                [view.catalog, view.schema_name, view.name],
                self._column_attributes(view.columns),
            )
            for view in schema.materialized_views
        ]

    def map_procedures(self, schema: TrinoSchemaData) -> List[ResourceDefinition]:
        return [
            self._resource(
                "procedure",
                [procedure.catalog, procedure.schema_name, procedure.name],
                {"argumentTypes": AttributeSpec(type=CanonicalType.ARRAY)},
            )
            for procedure in schema.procedures
        ]

    def map_all(self, schema: TrinoSchemaData) -> List[ResourceDefinition]:
        """Map every category, in a fixed order, into one list."""
        resources: List[ResourceDefinition] = []
        resources.extend(self.map_catalogs(schema))
        resources.extend(self.map_schemas(schema))
        resources.extend(self.map_tables(schema))
        resources.extend(self.map_columns(schema))
        resources.extend(self.map_functions(schema))
        resources.extend(self.map_views(schema))
        resources.extend(self.map_materialized_views(schema))
        resources.extend(self.map_procedures(schema))
        return resources


def map_trino_schema_to_permit_resources(schema: TrinoSchemaData) -> List[ResourceDefinition]:
    """Map a Trino metadata tree to Permit resource definitions."""
    return TrinoResourceMapper().map_all(schema)


def duplicate_keys(resources: Sequence[ResourceDefinition]) -> List[str]:
    """Keys that more than one resource maps to, such as function overloads."""
    counts = Counter(resource.key for resource in resources)
    return sorted(key for key, count in counts.items() if count > 1)
