"""Tests for the warning collector."""

from permit_cli.export.warnings import WarningCollector


class TestWarningCollector:
    """Test warning accumulation."""

    def test_starts_empty(self):
        """Test a new collector has no warnings."""
        collector = WarningCollector()

        assert collector.get_warnings() == []
        assert len(collector) == 0

    def test_keeps_order_and_duplicates(self):
        """Test warnings keep insertion order and are not deduplicated."""
        collector = WarningCollector()
        collector.add_warning("first")
        collector.add_warning("second")
        collector.add_warning("first")

        assert collector.get_warnings() == ["first", "second", "first"]
        assert len(collector) == 3

    def test_returns_copy(self):
        """Test callers cannot modify the collected warnings."""
        collector = WarningCollector()
        collector.add_warning("only")

        collector.get_warnings().append("extra")

        assert collector.get_warnings() == ["only"]

    def test_logs_warnings(self, caplog):
        """Test warnings are also logged."""
        collector = WarningCollector()

        with caplog.at_level("WARNING"):
            collector.add_warning("Role 'x' was dropped")

        assert "Role 'x' was dropped" in caplog.text
