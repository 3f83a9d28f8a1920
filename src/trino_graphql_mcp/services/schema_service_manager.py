"""Schema service manager for trino-graphql-mcp.

Provides a singleton `SchemaService` with background schema generation during
FastMCP lifespan. Ensures exactly-once startup per process and fast-fails
while the first schema is being generated.
"""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import replace
import hashlib
import threading
import time
from typing import ClassVar

from fastmcp.utilities.logging import get_logger
import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from trino_graphql_mcp.schema_tools.exceptions import SchemaGenerationError
from trino_graphql_mcp.schema_tools.sources import SqlAlchemyMetadataSource
from trino_graphql_mcp.services.config_service import ConfigService
from trino_graphql_mcp.services.schema_service import SchemaService
from trino_graphql_mcp.services.state import (
    INIT_NOT_READY_PHASES,
    SchemaInitPhase,
    SchemaInitState,
)


class SchemaServiceManager:
    """Singleton manager for SchemaService instances.

    This manager ensures that SchemaService is created and the first schema
    generated once during FastMCP lifespan startup, and provides thread-safe
    access throughout the session lifecycle.
    """

    _instance: ClassVar[SchemaServiceManager | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self) -> None:
        """Initialize the schema service manager."""
        self._schema_service: SchemaService | None = None
        self._initialization_lock = asyncio.Lock()
        self._logger = get_logger(__name__)

        # Background thread and state
        self._thread_lock = threading.Lock()
        self._init_thread: threading.Thread | None = None
        self._thread_ready = threading.Event()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._state = SchemaInitState(phase=SchemaInitPhase.IDLE)

    @classmethod
    def get_instance(cls) -> SchemaServiceManager:
        """Get the singleton instance of SchemaServiceManager.

        Returns:
            SchemaServiceManager: The singleton instance
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (primarily for testing)."""
        with cls._lock:
            cls._instance = None

    def start_background_initialization(self) -> None:
        """Start background initialization exactly once without blocking."""
        with self._thread_lock:
            if self._state.phase in {
                SchemaInitPhase.STARTING,
                SchemaInitPhase.RUNNING,
                SchemaInitPhase.READY,
            }:
                self._logger.debug("Initialization already %s; skipping start", self._state.phase)
                return
            if self._state.phase in {SchemaInitPhase.FAILED, SchemaInitPhase.STOPPED}:
                # Do not auto-restart after failure or stop
                self._logger.warning(
                    "Initialization in phase %s; not restarting", self._state.phase
                )
                return

            self._state = replace(
                self._state, phase=SchemaInitPhase.STARTING, started_at=time.time()
            )
            self._thread_ready.clear()
            self._loop = asyncio.get_running_loop()

            def _runner() -> None:
                self._state = replace(self._state, phase=SchemaInitPhase.RUNNING)
                try:
                    self._initialize_sync()
                except (
                    ValueError,
                    RuntimeError,
                    OSError,
                    SQLAlchemyError,
                    SchemaGenerationError,
                ) as exc:
                    self._state = replace(
                        self._state,
                        phase=SchemaInitPhase.FAILED,
                        error_message=str(exc),
                        completed_at=time.time(),
                        attempts=self._state.attempts + 1,
                    )
                    self._logger.exception("SchemaService initialization failed")
                else:
                    self._state = replace(
                        self._state,
                        phase=SchemaInitPhase.READY,
                        completed_at=time.time(),
                        attempts=self._state.attempts + 1,
                    )
                finally:
                    self._thread_ready.set()
                    if self._loop is not None:
                        with contextlib.suppress(RuntimeError):
                            self._loop.call_soon_threadsafe(lambda: None)

            self._init_thread = threading.Thread(target=_runner, name="schema-init", daemon=True)
            self._init_thread.start()

    async def initialize(self) -> None:
        """Await until initialization completes (READY or FAILED)."""
        self.start_background_initialization()
        await self.ensure_ready(wait_timeout=None)

    async def ensure_ready(self, wait_timeout: float | None = None) -> bool:
        """Wait for initialization completion.

        Returns True when READY. Returns False on timeout or FAILED.
        """
        phase = self._state.phase
        if phase is SchemaInitPhase.READY:
            return True
        if phase is SchemaInitPhase.FAILED:
            return False
        await asyncio.to_thread(self._thread_ready.wait, wait_timeout)
        return self._state.phase is SchemaInitPhase.READY

    async def get_schema_service(self) -> SchemaService:
        """Get the initialized SchemaService instance.

        Returns:
            SchemaService: The initialized schema service instance

        Raises:
            RuntimeError: If the service is not initialized or initialization failed
        """
        phase = self._state.phase
        if phase in INIT_NOT_READY_PHASES:
            self._logger.info("SchemaService requested while initializing (phase=%s)", phase)
            msg = "SchemaService initialization in progress"
            raise RuntimeError(msg)
        if phase is SchemaInitPhase.FAILED:
            self._logger.error(
                "SchemaService initialization previously failed: %s", self._state.error_message
            )
            msg = "SchemaService is not available due to initialization failure"
            raise RuntimeError(msg)
        if phase is SchemaInitPhase.STOPPED:
            self._logger.error("SchemaService requested after STOPPED phase")
            msg = "SchemaService has been stopped"
            raise RuntimeError(msg)

        if self._schema_service is None:
            self._logger.error("SchemaService instance is None despite successful initialization")
            error_msg = "SchemaService instance is unexpectedly None"
            raise RuntimeError(error_msg)

        self._logger.debug("Retrieved SchemaService singleton instance")
        return self._schema_service

    def set_schema_service(self, service: SchemaService) -> None:
        """Install a prebuilt service and mark the manager READY (tests, embedding)."""
        with self._thread_lock:
            self._schema_service = service
            now = time.time()
            self._state = replace(
                self._state,
                phase=SchemaInitPhase.READY,
                started_at=self._state.started_at or now,
                completed_at=now,
                attempts=self._state.attempts + 1,
            )
            self._thread_ready.set()

    async def shutdown(self) -> None:
        """Shutdown the SchemaService and clean up resources."""
        async with self._initialization_lock:
            if self._schema_service is not None:
                try:
                    self._logger.info("Shutting down SchemaService…")

                    # Dispose of the database engine
                    if self._schema_service.engine is not None:
                        self._schema_service.engine.dispose()
                        self._logger.debug("Database engine disposed")

                    self._schema_service = None
                    self._logger.info("SchemaService shutdown completed")

                except (AttributeError, OSError, RuntimeError) as exc:
                    self._logger.warning("Error during SchemaService shutdown: %s", exc)
                finally:
                    self._state = replace(self._state, phase=SchemaInitPhase.STOPPED)

    @property
    def is_initialized(self) -> bool:
        """Check if the SchemaService is initialized.

        Returns:
            bool: True if initialized, False otherwise
        """
        return self._state.phase is SchemaInitPhase.READY

    @property
    def has_initialization_error(self) -> bool:
        """Check if there was an initialization error.

        Returns:
            bool: True if there was an error, False otherwise
        """
        return self._state.phase is SchemaInitPhase.FAILED

    def status(self) -> SchemaInitState:
        """Return a snapshot of the initialization state."""
        return self._state

    # ---- internal ------------------------------------------------------------

    def _initialize_sync(self) -> None:
        """Perform synchronous initialization work. Runs in background thread."""
        self._logger.info("Starting SchemaService initialization…")

        # Get database URL and generation settings from environment
        database_url = ConfigService.get_database_url()
        fp = hashlib.sha256(database_url.encode("utf-8")).hexdigest()[:10]
        self._logger.debug("Using database fingerprint: %s", fp)
        config = ConfigService.get_generation_config()

        # Create database engine
        engine = ConfigService.create_database_engine(database_url)

        # Test database connectivity
        self._logger.debug("Testing database connectivity…")
        with engine.connect() as conn:
            conn.execute(sa.text("SELECT 1"))

        service = SchemaService(
            SqlAlchemyMetadataSource(engine),
            ConfigService.create_metadata_cache(config),
            config,
            engine=engine,
        )

        # Generate the first schema before declaring the service ready
        summary = service.rebuild_schema()
        self._schema_service = service
        self._logger.info(
            "SchemaService instance created successfully (%d tables)", summary.table_count
        )
