"""Schema assembly from discovered metadata.

The assembler walks the discovery tree, builds one object type per table
through the type mapper and registers a query/subscription root field for
every table that ends up with at least one field. Registration goes through
a SchemaBuilder owned by a single build, which refuses duplicate names
instead of overwriting earlier registrations.

Classes:
- SchemaBuilder: Per-build registry of object types and root fields
- SchemaAssembler: Turns discovery output into a GeneratedSchema

Functions:
- is_exposable_name(): Check a name against the grammar and GraphQL reserved names
- generated_type_name(): Object type and root field name of a table
"""

from __future__ import annotations

from collections.abc import Sequence

from fastmcp.utilities.logging import get_logger

from .constants import Constants
from .exceptions import TypeNameCollisionError
from .identifiers import is_valid_name, sanitize
from .models import (
    ColumnMetadata,
    FieldDefinition,
    GeneratedSchema,
    GeneratedTableType,
    RootField,
    SchemaGenerationConfig,
)
from .reflection import MetadataWalker
from .type_mapping import map_type

_logger = get_logger("schema_tools.assembler")


def is_exposable_name(name: str) -> bool:
    """Return True when ``name`` can name a GraphQL field or type.

    The name must satisfy the identifier grammar and must not start with the
    double underscore GraphQL reserves for introspection (Druid's ``__time``).
    """
    return is_valid_name(name) and not name.startswith(Constants.RESERVED_NAME_PREFIX)


def generated_type_name(catalog: str, schema: str, table: str) -> str:
    """Return the object type (and root field) name for a table.

    Each part is sanitized, so the result satisfies the identifier grammar
    even when discovery passed raw names through.
    """
    return Constants.TYPE_NAME_SEPARATOR.join(sanitize(part) for part in (catalog, schema, table))


class SchemaBuilder:
    """Registry of generated types and root fields for one build.

    Object types and root fields are keyed by name. Registering a second
    table under an existing name raises TypeNameCollisionError.
    """

    def __init__(self) -> None:
        self._types: dict[str, GeneratedTableType] = {}
        self._root_fields: dict[str, RootField] = {}

    def register(self, table_type: GeneratedTableType) -> RootField:
        """Register a table type and its root field.

        Args:
            table_type: Object type generated for one table

        Returns:
            The root field exposing the table

        Raises:
            TypeNameCollisionError: If the type or root field name is already taken
        """
        origin = (table_type.catalog, table_type.schema, table_type.table)
        existing = self._types.get(table_type.type_name)
        if existing is not None:
            raise TypeNameCollisionError(
                table_type.type_name, (existing.catalog, existing.schema, existing.table), origin
            )

        root = RootField(
            name=table_type.type_name,
            type_name=table_type.type_name,
            catalog=table_type.catalog,
            schema=table_type.schema,
            table=table_type.table,
        )
        existing_root = self._root_fields.get(root.name)
        if existing_root is not None:
            first = (existing_root.catalog, existing_root.schema, existing_root.table)
            raise TypeNameCollisionError(root.name, first, origin)

        self._types[table_type.type_name] = table_type
        self._root_fields[root.name] = root
        return root

    def __len__(self) -> int:
        return len(self._types)

    def build(self) -> GeneratedSchema:
        """Return the registered types and root fields ordered by name."""
        return GeneratedSchema(
            root_fields=tuple(self._root_fields[name] for name in sorted(self._root_fields)),
            object_types=tuple(self._types[name] for name in sorted(self._types)),
        )


class SchemaAssembler:
    """Build a GeneratedSchema from the metadata walker's discovery tree.

    Attributes:
        walker: Metadata walker providing the discovery tree
        config: Generation configuration (shared with the walker by default)
    """

    def __init__(self, walker: MetadataWalker, config: SchemaGenerationConfig | None = None):
        self.walker = walker
        self.config = config or walker.config

    def create_table_type(
        self, catalog: str, schema: str, table: str, columns: Sequence[ColumnMetadata]
    ) -> GeneratedTableType:
        """Create the object type for one table.

        Columns whose names violate the identifier grammar are omitted. They are
        logged at debug level when ``ignore_invalid_names`` is active and as a
        warning otherwise, as are reserved ``__`` names. The result may have no
        fields.
        """
        fields: list[FieldDefinition] = []
        seen: set[str] = set()
        for column in columns:
            name = column.column
            if self.config.ignore_invalid_names and not is_valid_name(name):
                _logger.debug("Skipping column %s: invalid name", column.full_name)
                continue
            if not is_exposable_name(name):
                _logger.warning("Skipping column %s: not a GraphQL name", column.full_name)
                continue
            if name in seen:
                _logger.warning("Skipping duplicate column %s", column.full_name)
                continue
            seen.add(name)
            fields.append(
                FieldDefinition(
                    name=name, type=map_type(column.native_type), native_type=column.native_type
                )
            )

        return GeneratedTableType(
            type_name=generated_type_name(catalog, schema, table),
            catalog=catalog,
            schema=schema,
            table=table,
            fields=tuple(fields),
        )

    def build_schema(self) -> GeneratedSchema:
        """Run one full generation pass.

        Returns:
            Root fields and object types ordered by name

        Raises:
            TypeNameCollisionError: If two tables produce the same generated name
        """
        builder = SchemaBuilder()
        skipped = 0
        for catalog_node in self.walker.discover():
            for schema_node in catalog_node.schemas:
                for table_node in schema_node.tables:
                    table_type = self.create_table_type(
                        catalog_node.name, schema_node.name, table_node.name, table_node.columns
                    )
                    if not table_type.fields:
                        _logger.info(
                            "Skipping %s.%s.%s: no exposable columns",
                            catalog_node.name,
                            schema_node.name,
                            table_node.name,
                        )
                        skipped += 1
                        continue
                    if not is_exposable_name(table_type.type_name):
                        _logger.warning(
                            "Skipping %s.%s.%s: reserved type name %s",
                            catalog_node.name,
                            schema_node.name,
                            table_node.name,
                            table_type.type_name,
                        )
                        skipped += 1
                        continue
                    builder.register(table_type)

        _logger.info("Schema built: %d tables exposed, %d skipped", len(builder), skipped)
        return builder.build()
