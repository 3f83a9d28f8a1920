"""Lifecycle state for the schema service manager.

Internal module; the manager publishes immutable SchemaInitState snapshots
that tools and the health route read without locking.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Final


class SchemaInitPhase(Enum):
    """Phase of the first schema generation."""

    IDLE = auto()  # Manager created, nothing started
    STARTING = auto()  # Background thread scheduled
    RUNNING = auto()  # Discovering metadata and assembling the schema
    READY = auto()  # Schema generated; tools are served
    FAILED = auto()  # Startup error, see error_message
    STOPPED = auto()  # Shut down with the server lifespan


PHASE_DESCRIPTIONS: Final[dict[SchemaInitPhase, str]] = {
    SchemaInitPhase.IDLE: "Starting: creating engine and launching schema generation.",
    SchemaInitPhase.STARTING: "Starting: creating engine and launching schema generation.",
    SchemaInitPhase.RUNNING: "Initializing: discovering catalogs, schemas, tables and columns.",
    SchemaInitPhase.READY: "Ready for queries.",
    SchemaInitPhase.FAILED: "Initialization failed; see error_message.",
    SchemaInitPhase.STOPPED: "Stopped.",
}


@dataclass(frozen=True)
class SchemaInitState:
    """Snapshot of the manager state with timestamps and error details."""

    phase: SchemaInitPhase
    started_at: float | None = None
    completed_at: float | None = None
    error_message: str | None = None
    attempts: int = 0

    @property
    def description(self) -> str:
        return PHASE_DESCRIPTIONS[self.phase]


INIT_NOT_READY_PHASES: Final[frozenset[SchemaInitPhase]] = frozenset(
    {
        SchemaInitPhase.IDLE,
        SchemaInitPhase.STARTING,
        SchemaInitPhase.RUNNING,
    }
)
