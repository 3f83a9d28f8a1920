"""Pydantic models for MCP tool I/O.

Minimal, task-focused models used by the MCP server tools. Query results live
in ``execute.models`` and join detection results in ``relations.models``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from trino_graphql_mcp.schema_tools.models import GeneratedSchema, GeneratedTableType


class ColumnField(BaseModel):
    """A column exposed as a field of a generated object type."""

    name: str
    graphql_type: str = Field(description="Output type, e.g. String, [Int], [KeyValue]")
    native_type: str = Field(description="Trino type as reported by DESCRIBE")


class TableField(BaseModel):
    """A root field exposing one table."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(description="Root field and object type name (catalog_schema_table)")
    catalog: str
    schema_name: str = Field(alias="schema")
    table: str
    description: str
    fields: list[ColumnField] = Field(default_factory=list)

    @classmethod
    def from_table_type(cls, table_type: GeneratedTableType, description: str) -> TableField:
        return cls(
            name=table_type.type_name,
            catalog=table_type.catalog,
            schema_name=table_type.schema,
            table=table_type.table,
            description=description,
            fields=[
                ColumnField(
                    name=field.name,
                    graphql_type=field.type.describe(),
                    native_type=field.native_type,
                )
                for field in table_type.fields
            ],
        )


class SchemaSummary(BaseModel):
    """Result of a schema build or rebuild."""

    table_count: int = Field(description="Number of tables exposed as root fields")
    root_fields: list[str] = Field(default_factory=list, description="Root field names, sorted")
    elapsed_ms: float = 0.0
    built_at: float | None = Field(default=None, description="Epoch seconds of completion")

    @classmethod
    def from_generated(
        cls, generated: GeneratedSchema, *, elapsed_ms: float = 0.0, built_at: float | None = None
    ) -> SchemaSummary:
        return cls(
            table_count=len(generated.root_fields),
            root_fields=generated.root_field_names,
            elapsed_ms=elapsed_ms,
            built_at=built_at,
        )


class InitStatus(BaseModel):
    """Initialization status for schema service readiness."""

    phase: Literal["IDLE", "STARTING", "RUNNING", "READY", "FAILED", "STOPPED"]
    attempts: int = 0
    started_at: float | None = None
    completed_at: float | None = None
    error_message: str | None = None
    # Minimal descriptive text to help LLMs reason about progression
    description: str | None = Field(default=None, description="Short status description")
