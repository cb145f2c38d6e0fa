"""Tests for mapping Trino metadata to Permit resources."""

from permit_cli.models import AttributeSpec, CanonicalType
from permit_cli.trino.mapper import (
    TRINO_ACTIONS,
    TrinoResourceMapper,
    duplicate_keys,
    map_trino_schema_to_permit_resources,
    resource_key,
    resource_name,
)
from permit_cli.trino.models import TrinoCatalog, TrinoColumn, TrinoFunction, TrinoSchemaData, TrinoTable
from permit_cli.trino.type_mappers import TrinoTypeMapper, TypeMapper


def by_key(resources):
    return {r.key: r for r in resources}


class TestResourceNaming:
    """Test key and name construction."""

    def test_resource_key(self):
        """Test keys join category and path with hyphens."""
        assert resource_key("table", "cat", "public", "users") == "trino-table-cat-public-users"

    def test_resource_key_lowercases(self):
        """Test keys are lower-cased."""
        assert resource_key("catalog", "Hive") == "trino-catalog-hive"

    def test_resource_name(self):
        """Test names join the path with dots."""
        assert resource_name("cat", "public", "users") == "cat.public.users"


class TestSimpleSchema:
    """Test mapping catalogs, schemas, tables and columns."""

    def test_catalog(self, simple_trino_schema):
        """Test the catalog resource."""
        resources = by_key(map_trino_schema_to_permit_resources(simple_trino_schema))

        catalog = resources["trino-catalog-testcat"]
        assert catalog.name == "testcat"
        assert "AccessCatalog" in catalog.actions
        assert catalog.attributes == {}

    def test_schema(self, simple_trino_schema):
        """Test the schema resource."""
        resources = by_key(map_trino_schema_to_permit_resources(simple_trino_schema))

        schema = resources["trino-schema-testcat-public"]
        assert schema.name == "testcat.public"
        assert "CreateSchema" in schema.actions

    def test_table(self, simple_trino_schema):
        """Test the table resource carries one attribute per column."""
        resources = by_key(map_trino_schema_to_permit_resources(simple_trino_schema))

        table = resources["trino-table-testcat-public-users"]
        assert table.name == "testcat.public.users"
        assert "CreateTable" in table.actions
        assert table.attributes["id"] == AttributeSpec(type=CanonicalType.NUMBER)
        assert table.attributes["email"] == AttributeSpec(type=CanonicalType.STRING)
        assert table.attributes["is_active"] == AttributeSpec(
            type=CanonicalType.BOOL, description="nullable"
        )

    def test_columns(self, simple_trino_schema):
        """Test every column becomes its own resource."""
        resources = by_key(map_trino_schema_to_permit_resources(simple_trino_schema))

        column = resources["trino-column-testcat-public-users-id"]
        assert column.name == "testcat.public.users.id"
        assert "SelectFromColumns" in column.actions
        assert column.attributes == {}
        assert "trino-column-testcat-public-users-email" in resources
        assert "trino-column-testcat-public-users-is_active" in resources

    def test_resource_count(self, simple_trino_schema):
        """Test one resource per catalog, schema, table and column."""
        resources = map_trino_schema_to_permit_resources(simple_trino_schema)

        assert len(resources) == 1 + 1 + 1 + 3

    def test_category_order(self, simple_trino_schema):
        """Test catalogs, schemas, tables then columns."""
        keys = [r.key for r in map_trino_schema_to_permit_resources(simple_trino_schema)]

        assert keys == [
            "trino-catalog-testcat",
            "trino-schema-testcat-public",
            "trino-table-testcat-public-users",
            "trino-column-testcat-public-users-id",
            "trino-column-testcat-public-users-email",
            "trino-column-testcat-public-users-is_active",
        ]

    def test_deterministic(self, simple_trino_schema):
        """Test mapping the same input twice gives equal output."""
        first = map_trino_schema_to_permit_resources(simple_trino_schema)
        second = map_trino_schema_to_permit_resources(simple_trino_schema)

        assert first == second


class TestRoutinesAndViews:
    """Test mapping functions, views, materialized views and procedures."""

    def test_function(self, routines_trino_schema):
        """Test the function resource exposes return and argument types."""
        resources = by_key(map_trino_schema_to_permit_resources(routines_trino_schema))

        func = resources["trino-function-testcat-public-my_func"]
        assert func.name == "testcat.public.my_func"
        assert "ExecuteFunction" in func.actions
        assert "ShowFunctions" in func.actions
        assert func.attributes["returnType"] == AttributeSpec(type=CanonicalType.NUMBER)
        assert func.attributes["argumentTypes"] == AttributeSpec(type=CanonicalType.ARRAY)

    def test_view(self, routines_trino_schema):
        """Test nullable view columns are described as such."""
        resources = by_key(map_trino_schema_to_permit_resources(routines_trino_schema))

        view = resources["trino-view-testcat-public-my_view"]
        assert view.name == "testcat.public.my_view"
        assert "CreateView" in view.actions
        assert "DropView" in view.actions
        assert view.attributes["col1"].model_dump(exclude_none=True) == {"type": CanonicalType.STRING}
        assert view.attributes["col2"].model_dump(mode="json") == {
            "type": "number",
            "description": "nullable",
        }

    def test_materialized_view(self, routines_trino_schema):
        """Test the materialized view resource."""
        resources = by_key(map_trino_schema_to_permit_resources(routines_trino_schema))

        mview = resources["trino-materialized_view-testcat-public-my_mview"]
        assert mview.name == "testcat.public.my_mview"
        assert "CreateMaterializedView" in mview.actions
        assert "RefreshMaterializedView" in mview.actions
        assert mview.attributes["total"] == AttributeSpec(type=CanonicalType.NUMBER)

    def test_procedure(self, routines_trino_schema):
        """Test the procedure resource only exposes its argument types."""
        resources = by_key(map_trino_schema_to_permit_resources(routines_trino_schema))

        proc = resources["trino-procedure-testcat-public-my_proc"]
        assert proc.name == "testcat.public.my_proc"
        assert "ExecuteProcedure" in proc.actions
        assert proc.attributes == {"argumentTypes": AttributeSpec(type=CanonicalType.ARRAY)}

    def test_views_do_not_produce_column_resources(self, routines_trino_schema):
        """Test only table columns become column resources."""
        resources = map_trino_schema_to_permit_resources(routines_trino_schema)

        assert not [r for r in resources if r.key.startswith("trino-column-")]


class TestTrinoResourceMapper:
    """Test the mapper class."""

    def test_empty_schema(self):
        """Test an empty tree maps to no resources."""
        assert map_trino_schema_to_permit_resources(TrinoSchemaData()) == []

    def test_every_category_has_actions(self):
        """Test every category resource is created with a non-empty action list."""
        for category, actions in TRINO_ACTIONS.items():
            assert actions, category

    def test_actions_are_copied(self, simple_trino_schema):
        """Test resources do not share the action table lists."""
        resources = map_trino_schema_to_permit_resources(simple_trino_schema)

        assert resources[0].actions == TRINO_ACTIONS["catalog"]
        assert resources[0].actions is not TRINO_ACTIONS["catalog"]

    def test_custom_type_mapper(self):
        """Test a custom type mapper is used for column attributes."""
        class JsonEverything(TypeMapper):
            def to_permit_type(self, foreign_type):
                return CanonicalType.JSON

        schema = TrinoSchemaData(
            catalogs=[TrinoCatalog(name="c")],
            tables=[TrinoTable(
                catalog="c", schema="s", name="t",
                columns=[TrinoColumn(name="id", type="bigint", nullable=False)],
            )],
        )
        mapper = TrinoResourceMapper(type_mapper=JsonEverything())

        tables = mapper.map_tables(schema)
        assert tables[0].attributes["id"].type == CanonicalType.JSON

    def test_unknown_column_type(self):
        """Test unknown column types fall back to string."""
        schema = TrinoSchemaData(tables=[TrinoTable(
            catalog="c", schema="s", name="t",
            columns=[TrinoColumn(name="geo", type="geometry", nullable=False)],
        )])

        table = TrinoResourceMapper().map_tables(schema)[0]
        assert table.attributes["geo"].type == CanonicalType.STRING

    def test_schema_file_aliases(self, trino_schema_json):
        """Test camelCase schema files are accepted."""
        schema = TrinoSchemaData.model_validate(trino_schema_json)

        resources = by_key(map_trino_schema_to_permit_resources(schema))
        assert resources["trino-table-hive-sales-orders"].attributes["total"].type == CanonicalType.NUMBER

    def test_default_type_mapper(self):
        """Test the Trino type mapper is used when none is given."""
        assert isinstance(TrinoResourceMapper().type_mapper, TrinoTypeMapper)
        assert isinstance(TrinoResourceMapper(None).type_mapper, TrinoTypeMapper)


class TestDuplicateKeys:
    """Test detection of objects sharing a resource key."""

    def test_overloaded_functions(self):
        """Test overloads of one function map to the same key."""
        schema = TrinoSchemaData(functions=[
            TrinoFunction(catalog="c", schema="s", name="lower", returnType="varchar", argumentTypes=["varchar"]),
            TrinoFunction(catalog="c", schema="s", name="lower", returnType="varchar", argumentTypes=["char"]),
            TrinoFunction(catalog="c", schema="s", name="upper", returnType="varchar"),
        ])

        resources = map_trino_schema_to_permit_resources(schema)

        assert [r.key for r in resources] == [
            "trino-function-c-s-lower",
            "trino-function-c-s-lower",
            "trino-function-c-s-upper",
        ]
        assert duplicate_keys(resources) == ["trino-function-c-s-lower"]

    def test_no_duplicates(self, simple_trino_schema):
        """Test distinct objects report no duplicates."""
        assert duplicate_keys(map_trino_schema_to_permit_resources(simple_trino_schema)) == []
