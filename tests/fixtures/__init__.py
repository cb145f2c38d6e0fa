"""Test fixtures for permit-cli tests."""

from .mock_permit import MockPermitClient

__all__ = ["MockPermitClient"]
