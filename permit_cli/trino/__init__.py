"""Trino schema import for permit-cli.

Reads catalog/schema/table metadata from Trino and maps it onto Permit
resource definitions.
"""

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
from .type_mappers import TypeMapper, TrinoTypeMapper, trino_type_to_permit_type
from .mapper import TRINO_ACTIONS, TrinoResourceMapper, duplicate_keys, map_trino_schema_to_permit_resources
from .introspector import TrinoIntrospector

__all__ = [
    # Data models
    "TrinoCatalog",
    "TrinoColumn",
    "TrinoFunction",
    "TrinoProcedure",
    "TrinoSchema",
    "TrinoSchemaData",
    "TrinoTable",
    "TrinoView",
    # Type mapping
    "TypeMapper",
    "TrinoTypeMapper",
    "trino_type_to_permit_type",
    # Mapping
    "TRINO_ACTIONS",
    "TrinoResourceMapper",
    "duplicate_keys",
    "map_trino_schema_to_permit_resources",
    # Introspection
    "TrinoIntrospector",
]
