"""Permit CLI - export Permit environments as Terraform and import Trino schemas."""

__version__ = "0.1.0"
