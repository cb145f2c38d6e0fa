"""Trino metadata models consumed by the schema mapper."""

from typing import List

from pydantic import BaseModel, Field


class TrinoColumn(BaseModel):
    """A column of a table, view or materialized view."""
    name: str
    type: str
    nullable: bool = True


class TrinoCatalog(BaseModel):
    name: str


class TrinoSchema(BaseModel):
    catalog: str
    name: str


class TrinoTable(BaseModel):
    """A base table and its columns."""
    catalog: str
    schema_name: str = Field(alias="schema")
    name: str
    type: str = "BASE TABLE"
    columns: List[TrinoColumn] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class TrinoFunction(BaseModel):
    catalog: str
    schema_name: str = Field(alias="schema")
    name: str
    return_type: str = Field(alias="returnType")
    argument_types: List[str] = Field(default_factory=list, alias="argumentTypes")

    class Config:
        populate_by_name = True


class TrinoView(BaseModel):
    """A view or materialized view and its columns."""
    catalog: str
    schema_name: str = Field(alias="schema")
    name: str
    columns: List[TrinoColumn] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class TrinoProcedure(BaseModel):
    catalog: str
    schema_name: str = Field(alias="schema")
    name: str
    argument_types: List[str] = Field(default_factory=list, alias="argumentTypes")

    class Config:
        populate_by_name = True


class TrinoSchemaData(BaseModel):
    """Full metadata tree of a Trino cluster (or a filtered part of it).

    Accepts the camelCase field names used in exported schema files
    (``materializedViews``, ``returnType``, ``argumentTypes``) as well as
    the snake_case attribute names.
    """
    catalogs: List[TrinoCatalog] = Field(default_factory=list)
    schemas: List[TrinoSchema] = Field(default_factory=list)
    tables: List[TrinoTable] = Field(default_factory=list)
    functions: List[TrinoFunction] = Field(default_factory=list)
    views: List[TrinoView] = Field(default_factory=list)
    materialized_views: List[TrinoView] = Field(default_factory=list, alias="materializedViews")
    procedures: List[TrinoProcedure] = Field(default_factory=list)

    class Config:
        populate_by_name = True
