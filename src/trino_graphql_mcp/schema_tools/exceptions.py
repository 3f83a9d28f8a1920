"""Custom exception hierarchy for schema generation and table queries.

This module defines the exceptions raised throughout discovery, schema
assembly and filter translation. The hierarchy separates failures that are
recovered locally (discovery) from failures that abort a schema build
(name collisions) and failures scoped to a single request (filters).

Exception Categories:
- Base exception for schema generation errors
- Discovery errors for metadata source failures
- Collision errors for duplicate generated names
- Filter errors for invalid client-supplied predicates
"""

from __future__ import annotations


class SchemaGenerationError(Exception):
    """Base exception for schema generation operations.

    This is the root exception class for all errors raised by this package.
    """


class DiscoveryError(SchemaGenerationError):
    """Raised when the metadata source cannot answer a discovery query.

    This exception is raised when the engine is unreachable or rejects a
    catalog, schema, table or column listing, such as when:
    - The connection to the engine fails
    - The catalog's connector is misconfigured or offline
    - Access to the schema or table is denied

    The metadata walker recovers from it by caching an empty result.
    """


class TypeNameCollisionError(SchemaGenerationError):
    """Raised when two distinct tables produce the same generated name.

    Two (catalog, schema, table) triples that sanitize to the same object
    type or root field name would corrupt the produced schema, so the
    build fails instead of overwriting the first registration.
    """

    def __init__(self, name: str, first: tuple[str, str, str], second: tuple[str, str, str]):
        self.name = name
        self.first = first
        self.second = second
        super().__init__(
            f"Generated name '{name}' is produced by both {'.'.join(first)} and {'.'.join(second)}"
        )


class FilterError(SchemaGenerationError, ValueError):
    """Base exception for client-supplied filter problems.

    Filter errors are scoped to one request and never affect other requests.
    """


class InvalidFilterError(FilterError):
    """Raised when a filter predicate does not carry exactly one value."""


class UnsupportedOperatorError(FilterError):
    """Raised when a filter predicate uses an operator with no translation."""
