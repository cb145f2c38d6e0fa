"""Shared pytest fixtures for permit-cli tests."""

import pytest
from typing import Any, Dict

from fixtures import MockPermitClient
from permit_cli.export.warnings import WarningCollector
from permit_cli.models import ExportScope
from permit_cli.trino.models import (
    TrinoCatalog,
    TrinoColumn,
    TrinoFunction,
    TrinoProcedure,
    TrinoSchema,
    TrinoSchemaData,
    TrinoTable,
    TrinoView,
)

VALID_API_KEY = "permit_key_test123"


@pytest.fixture
def api_key():
    return VALID_API_KEY


@pytest.fixture
def export_scope():
    return ExportScope(environment_id="env-1", project_id="proj-1", organization_id="org-1")


@pytest.fixture
def warning_collector():
    """Create a fresh WarningCollector for each test."""
    return WarningCollector()


@pytest.fixture
def permit_environment() -> Dict[str, Any]:
    """API objects of a small environment with every exportable category."""
    return {
        "resources": [
            {
                "id": "res-folder",
                "key": "folder",
                "name": "Folder",
                "actions": {"read": {"name": "Read"}},
                "attributes": {},
            },
            {
                "id": "res-document",
                "key": "document",
                "name": "Document",
                "description": "A document",
                "actions": {
                    "write": {"name": "Write", "description": "Edit it"},
                    "read": {"name": "Read"},
                },
                "attributes": {
                    "pages": {"type": "number", "description": "Page count"},
                    "owner": {"type": "string"},
                },
            },
        ],
        "roles": [
            {"key": "viewer", "name": "Viewer", "permissions": ["document:read"]},
            {
                "key": "admin",
                "name": "Admin",
                "permissions": ["document:write", "document:read"],
                "extends": ["viewer"],
            },
        ],
        "resource_roles": {
            "folder": [
                {"key": "editor", "name": "Editor", "permissions": ["read"]},
            ],
            "document": [
                {
                    "key": "editor",
                    "name": "Editor",
                    "permissions": ["read", "write"],
                    "granted_to": {
                        "users_with_role": [
                            {"role": "editor", "on_resource": "folder", "linked_by_relation": "parent"},
                        ],
                    },
                },
            ],
        },
        "relations": {
            "document": [
                {"key": "parent", "name": "Parent", "subject_resource": "folder"},
            ],
        },
        "user_attributes": [
            {"key": "email", "type": "string", "built_in": True},
            {"key": "department", "type": "string", "description": "Org unit"},
            {"key": "age", "type": "number"},
        ],
        "condition_sets": [
            {
                "key": "us_employees",
                "name": "US Employees",
                "type": "userset",
                "conditions": {"allOf": [{"user.location": {"equals": "US"}}]},
            },
            {
                "key": "public_docs",
                "name": "Public Documents",
                "type": "resourceset",
                "resource": {"key": "document"},
                "conditions": {"allOf": [{"resource.public": {"equals": True}}]},
            },
            {
                "key": "__autogen_editor",
                "type": "userset",
                "autogenerated": True,
                "conditions": {},
            },
        ],
        "set_rules": [
            {"user_set": "us_employees", "permission": "document:read", "resource_set": "public_docs"},
        ],
    }


@pytest.fixture
def mock_client(permit_environment):
    """Mock Permit client serving the sample environment."""
    return MockPermitClient(permit_environment)


@pytest.fixture
def empty_client():
    """Mock Permit client for an environment with nothing in it."""
    return MockPermitClient()


@pytest.fixture
def simple_trino_schema():
    """One catalog, one schema and one table with three columns."""
    return TrinoSchemaData(
        catalogs=[TrinoCatalog(name="testcat")],
        schemas=[TrinoSchema(catalog="testcat", name="public")],
        tables=[
            TrinoTable(
                catalog="testcat",
                schema="public",
                name="users",
                type="BASE TABLE",
                columns=[
                    TrinoColumn(name="id", type="integer", nullable=False),
                    TrinoColumn(name="email", type="varchar", nullable=False),
                    TrinoColumn(name="is_active", type="boolean", nullable=True),
                ],
            ),
        ],
    )


@pytest.fixture
def routines_trino_schema():
    """A schema holding a function, a view, a materialized view and a procedure."""
    return TrinoSchemaData(
        catalogs=[TrinoCatalog(name="testcat")],
        schemas=[TrinoSchema(catalog="testcat", name="public")],
        functions=[
            TrinoFunction(
                catalog="testcat",
                schema="public",
                name="my_func",
                returnType="integer",
                argumentTypes=["varchar", "integer"],
            ),
        ],
        views=[
            TrinoView(
                catalog="testcat",
                schema="public",
                name="my_view",
                columns=[
                    TrinoColumn(name="col1", type="varchar", nullable=False),
                    TrinoColumn(name="col2", type="integer", nullable=True),
                ],
            ),
        ],
        materializedViews=[
            TrinoView(
                catalog="testcat",
                schema="public",
                name="my_mview",
                columns=[TrinoColumn(name="total", type="decimal", nullable=False)],
            ),
        ],
        procedures=[
            TrinoProcedure(catalog="testcat", schema="public", name="my_proc", argumentTypes=["varchar"]),
        ],
    )


@pytest.fixture
def trino_schema_json() -> Dict[str, Any]:
    """A schema file as exported from Trino (camelCase keys)."""
    return {
        "catalogs": [{"name": "hive"}],
        "schemas": [{"catalog": "hive", "name": "sales"}],
        "tables": [
            {
                "catalog": "hive",
                "schema": "sales",
                "name": "orders",
                "type": "BASE TABLE",
                "columns": [
                    {"name": "id", "type": "bigint", "nullable": False},
                    {"name": "total", "type": "decimal(10, 2)", "nullable": True},
                ],
            },
        ],
        "functions": [],
        "views": [],
        "materializedViews": [],
        "procedures": [],
    }
