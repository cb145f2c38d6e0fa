"""Trino to Permit attribute type mapping."""

from abc import ABC, abstractmethod
import re

from ..models import CanonicalType

# Used for every type name the table below does not know about
DEFAULT_PERMIT_TYPE = CanonicalType.STRING

TRINO_TYPE_TABLE = {
    # Character and binary data
    "varchar": CanonicalType.STRING,
    "char": CanonicalType.STRING,
    "varbinary": CanonicalType.STRING,
    "uuid": CanonicalType.STRING,
    "ipaddress": CanonicalType.STRING,
    "interval": CanonicalType.STRING,
    # Numeric
    "tinyint": CanonicalType.NUMBER,
    "smallint": CanonicalType.NUMBER,
    "integer": CanonicalType.NUMBER,
    "int": CanonicalType.NUMBER,
    "bigint": CanonicalType.NUMBER,
    "real": CanonicalType.NUMBER,
    "double": CanonicalType.NUMBER,
    "decimal": CanonicalType.NUMBER,
    "numeric": CanonicalType.NUMBER,
    # Boolean
    "boolean": CanonicalType.BOOL,
    # Structured
    "json": CanonicalType.JSON,
    "array": CanonicalType.ARRAY,
    "row": CanonicalType.OBJECT,
    "map": CanonicalType.OBJECT,
    # Date/Time
    "date": CanonicalType.TIME,
    "time": CanonicalType.TIME,
    "timestamp": CanonicalType.TIME,
}

_BASE_TYPE_PATTERN = re.compile(r"^[a-z_]+")


class TypeMapper(ABC):
    """Abstract base class for foreign type mapping."""

    @abstractmethod
    def to_permit_type(self, foreign_type: str) -> CanonicalType:
        """Convert a foreign type name to a Permit attribute type."""
        pass


class TrinoTypeMapper(TypeMapper):
    """Type mapper for Trino types.

    Parameters and modifiers are ignored, so ``varchar(255)``,
    ``decimal(10, 2)``, ``timestamp(3) with time zone`` and
    ``array(row(a integer))`` map by their base name.
    """

    def base_type(self, foreign_type: str) -> str:
        match = _BASE_TYPE_PATTERN.match((foreign_type or "").strip().lower())
        return match.group(0) if match else ""

    def to_permit_type(self, foreign_type: str) -> CanonicalType:
        """Convert a Trino type to a Permit attribute type."""
        return TRINO_TYPE_TABLE.get(self.base_type(foreign_type), DEFAULT_PERMIT_TYPE)


_default_mapper = TrinoTypeMapper()


def trino_type_to_permit_type(trino_type: str) -> CanonicalType:
    """Map a Trino type name to a Permit attribute type (never fails)."""
    return _default_mapper.to_permit_type(trino_type)
