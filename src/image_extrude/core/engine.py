"""One-time engine initialization shared across threads.

Tracing and rasterization engines load native modules on first use. The
EngineInitializer runs the loader once per process: callers that arrive
while loading is in progress wait for the same attempt and see the same
outcome, and a failed attempt resets the state so the next call retries.
"""

import threading
from collections.abc import Callable
from enum import Enum, auto
from typing import Generic, TypeVar

import structlog

from image_extrude.exceptions import EngineInitError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class EngineState(Enum):
    """Lifecycle of a lazily initialized engine."""

    UNINITIALIZED = auto()
    INITIALIZING = auto()
    READY = auto()


class _Attempt:
    """Outcome of one initialization attempt, shared by its waiters."""

    __slots__ = ("done", "error")

    def __init__(self) -> None:
        self.done = False
        self.error: BaseException | None = None


class EngineInitializer(Generic[T]):
    """Process-wide initialization guard for an engine.

    Example:
        cv2_engine = EngineInitializer("opencv", lambda: importlib.import_module("cv2"))
        cv2 = cv2_engine.get()
    """

    def __init__(self, name: str, loader: Callable[[], T]) -> None:
        """Initialize the guard.

        Args:
            name: Engine name used in logs and errors
            loader: Callable returning the ready engine; runs at most once
                per successful initialization
        """
        self.name = name
        self._loader = loader
        self._condition = threading.Condition()
        self._state = EngineState.UNINITIALIZED
        self._attempt: _Attempt | None = None
        self._engine: T | None = None

    @property
    def state(self) -> EngineState:
        with self._condition:
            return self._state

    def get(self) -> T:
        """Return the engine, initializing it if needed.

        Raises:
            EngineInitError: If the loader fails (for this caller and every
                caller that waited on the same attempt)
        """
        with self._condition:
            if self._state is EngineState.READY:
                return self._engine  # type: ignore[return-value]

            if self._state is EngineState.INITIALIZING:
                attempt = self._attempt
                assert attempt is not None
                while not attempt.done:
                    self._condition.wait()
                if attempt.error is not None:
                    raise self._wrap(attempt.error)
                return self._engine  # type: ignore[return-value]

            attempt = _Attempt()
            self._attempt = attempt
            self._state = EngineState.INITIALIZING

        logger.debug("Initializing engine", engine=self.name)
        try:
            engine = self._loader()
        except BaseException as e:
            with self._condition:
                attempt.error = e
                attempt.done = True
                self._state = EngineState.UNINITIALIZED
                self._attempt = None
                self._condition.notify_all()
            logger.warning("Engine initialization failed", engine=self.name, error=str(e))
            if isinstance(e, Exception):
                raise self._wrap(e) from e
            raise

        with self._condition:
            self._engine = engine
            attempt.done = True
            self._state = EngineState.READY
            self._condition.notify_all()
        logger.debug("Engine ready", engine=self.name)
        return engine

    def reset(self) -> None:
        """Forget a ready engine so the next call loads it again."""
        with self._condition:
            if self._state is EngineState.READY:
                self._state = EngineState.UNINITIALIZED
                self._engine = None

    def _wrap(self, error: BaseException) -> EngineInitError:
        if isinstance(error, EngineInitError):
            return error
        return EngineInitError(self.name, str(error) or type(error).__name__)
