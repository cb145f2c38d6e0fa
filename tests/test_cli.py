"""Tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from permit_cli.config import settings
from permit_cli.errors import AuthenticationError
from permit_cli.main import app
from permit_cli.models import ExportResult

runner = CliRunner()


@pytest.fixture
def schema_file(tmp_path, trino_schema_json):
    path = tmp_path / "trino.json"
    path.write_text(json.dumps(trino_schema_json))
    return path


@pytest.fixture
def no_api_key(monkeypatch):
    monkeypatch.setattr(settings, "permit_api_key", None)


class TestConfigCommand:
    """Test the config command."""

    def test_shows_settings(self, no_api_key):
        """Test configuration is printed without the key itself."""
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "API key configured: No" in result.output


class TestEnvExport:
    """Test `env export`."""

    def test_missing_key(self, no_api_key):
        """Test the command fails without an API key."""
        result = runner.invoke(app, ["env", "export"])

        assert result.exit_code == 1
        assert "API key is required" in result.output

    def test_invalid_key(self):
        """Test keys without the Permit prefix are rejected."""
        result = runner.invoke(app, ["env", "export", "--api-key", "sk_live_123"])

        assert result.exit_code == 1
        assert "Invalid API key" in result.output

    def test_export_to_file(self, tmp_path, monkeypatch):
        """Test the document is written to the requested file."""
        calls = []

        async def fake_run_export(api_key, on_progress=None):
            calls.append(api_key)
            on_progress("Exporting resources...")
            return ExportResult(document="# Generated by Permit CLI\n", warnings=["Role 'x' was dropped"])

        monkeypatch.setattr("permit_cli.commands.env.run_export", fake_run_export)
        target = tmp_path / "permit.tf"

        result = runner.invoke(app, ["env", "export", "--api-key", "permit_key_abc", "--file", str(target)])

        assert result.exit_code == 0
        assert calls == ["permit_key_abc"]
        assert target.read_text() == "# Generated by Permit CLI\n"
        assert "Role 'x' was dropped" in result.output

    def test_export_failure(self, monkeypatch):
        """Test export errors exit with status 1."""
        async def fake_run_export(api_key, on_progress=None):
            raise AuthenticationError("Permit API rejected the API key (401)", status_code=401)

        monkeypatch.setattr("permit_cli.commands.env.run_export", fake_run_export)

        result = runner.invoke(app, ["env", "export", "--api-key", "permit_key_abc"])

        assert result.exit_code == 1
        assert "rejected the API key" in result.output


class TestTrinoMap:
    """Test `trino map`."""

    def test_json_output(self, schema_file):
        """Test resources are printed as JSON."""
        result = runner.invoke(app, ["trino", "map", "--schema-file", str(schema_file)])

        assert result.exit_code == 0
        resources = json.loads(result.stdout)
        keys = [r["key"] for r in resources]
        assert keys == [
            "trino-catalog-hive",
            "trino-schema-hive-sales",
            "trino-table-hive-sales-orders",
            "trino-column-hive-sales-orders-id",
            "trino-column-hive-sales-orders-total",
        ]
        assert resources[2]["attributes"]["total"] == {"type": "number", "description": "nullable"}

    def test_hcl_output(self, schema_file, tmp_path):
        """Test resources rendered as permitio_resource blocks."""
        target = tmp_path / "trino.tf"

        result = runner.invoke(app, [
            "trino", "map", "--schema-file", str(schema_file), "--format", "hcl", "--output", str(target),
        ])

        assert result.exit_code == 0
        text = target.read_text()
        assert text.startswith("\n# Trino Resources\n")
        assert 'resource "permitio_resource" "trino-catalog-hive" {' in text
        assert '"AccessCatalog" = {' in text

    def test_unknown_format(self, schema_file):
        """Test unsupported formats are rejected."""
        result = runner.invoke(app, ["trino", "map", "--schema-file", str(schema_file), "--format", "yaml"])

        assert result.exit_code != 0

    def test_overloaded_functions(self, tmp_path, trino_schema_json):
        """Test objects sharing a key are reported."""
        overload = {"catalog": "hive", "schema": "sales", "name": "lower", "returnType": "varchar"}
        trino_schema_json["functions"] = [
            dict(overload, argumentTypes=["varchar"]),
            dict(overload, argumentTypes=["char"]),
        ]
        path = tmp_path / "trino.json"
        path.write_text(json.dumps(trino_schema_json))
        target = tmp_path / "trino.json.out"

        result = runner.invoke(app, ["trino", "map", "--schema-file", str(path), "--output", str(target)])

        assert result.exit_code == 0
        output = " ".join(result.output.split())
        assert "several Trino objects map to 'trino-function-hive-sales-lower'" in output
        keys = [r["key"] for r in json.loads(target.read_text())]
        assert keys.count("trino-function-hive-sales-lower") == 2

    def test_invalid_schema_file(self, tmp_path):
        """Test schema files that do not match the metadata model are rejected."""
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"tables": [{"name": "no_catalog"}]}))

        result = runner.invoke(app, ["trino", "map", "--schema-file", str(path)])

        assert result.exit_code == 1


class TestTrinoApply:
    """Test `trino apply`."""

    def test_dry_run(self, schema_file, monkeypatch):
        """Test a dry run does not contact Permit."""
        async def fail_push(*args, **kwargs):
            raise AssertionError("dry run must not push")

        monkeypatch.setattr("permit_cli.commands.trino.push_resources", fail_push)

        result = runner.invoke(app, ["trino", "apply", "--schema-file", str(schema_file), "--dry-run"])

        assert result.exit_code == 0
        assert "Dry run" in result.output

    def test_apply(self, schema_file, monkeypatch):
        """Test every mapped resource is pushed."""
        pushed = []

        async def fake_push(api_key, resources, on_progress=None):
            pushed.extend(r.key for r in resources)
            return len(resources)

        monkeypatch.setattr("permit_cli.commands.trino.push_resources", fake_push)

        result = runner.invoke(app, [
            "trino", "apply", "--schema-file", str(schema_file), "--api-key", "permit_key_abc",
        ])

        assert result.exit_code == 0
        assert len(pushed) == 5
        assert "Synced 5 resources" in result.output

    def test_apply_requires_key(self, schema_file, no_api_key):
        """Test pushing needs an API key."""
        result = runner.invoke(app, ["trino", "apply", "--schema-file", str(schema_file)])

        assert result.exit_code == 1
