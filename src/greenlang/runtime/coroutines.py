"""
Cooperative coroutine instances and their executor.

A coroutine body runs as a chain of generators, one per open block, if
branch and while iteration; each generator holds the scope it pushed. A
``yield`` statement suspends the whole chain, leaving the instance's scope
chain exactly as it was. The next resume continues the chain from the
statement after that yield.

Scheduling is explicit: an instance only runs inside a ``resume`` call, and
that call does not return until the instance yields or finishes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Generator, Optional

from .context import Environment, Scope
from .signals import ControlSignal, SignalKind
from ..ast import CoroutineDecl
from ..errors import error_control_flow, error_illegal_state, warning_resume_completed
from ..log import get_logger
from ..source import SourceSpan

if TYPE_CHECKING:
    from .interpreter import Interpreter


logger = get_logger(__name__)

Continuation = Generator[ControlSignal, None, ControlSignal]


class CoroutineState(Enum):
    """Lifecycle of an instance. COMPLETED is terminal."""
    FRESH = "fresh"
    RUNNING = "running"
    SUSPENDED = "suspended"
    COMPLETED = "completed"


@dataclass(eq=False)
class CoroutineInstance:
    """One independently-progressing execution of a coroutine body."""
    name: str
    declaration: CoroutineDecl
    environment: Environment
    state: CoroutineState = CoroutineState.FRESH
    resume_count: int = 0
    continuation: Optional[Continuation] = field(default=None, repr=False)

    @property
    def is_completed(self) -> bool:
        return self.state is CoroutineState.COMPLETED

    @property
    def is_suspended(self) -> bool:
        return self.state is CoroutineState.SUSPENDED


class CoroutineExecutor:
    """Creates and resumes coroutine instances for one interpreter."""

    def __init__(self, interpreter: "Interpreter"):
        self.interpreter = interpreter

    def create(self, declaration: CoroutineDecl, name: Optional[str] = None) -> CoroutineInstance:
        """A FRESH instance with its own scope chain; no body statement runs."""
        environment = Environment(
            declarations=self.interpreter.declarations,
            current_scope=Scope(name=f"coroutine {declaration.name}"),
            owner=declaration.name,
        )
        instance = CoroutineInstance(name or declaration.name, declaration, environment)
        logger.debug("created coroutine instance %s of %s", instance.name, declaration.name)
        return instance

    def resume(self, instance: CoroutineInstance,
               span: Optional[SourceSpan] = None) -> CoroutineState:
        """
        Run an instance until its next yield or until its body finishes.

        Returns the state after the call: SUSPENDED or COMPLETED. Any error
        raised by the body leaves the instance COMPLETED and propagates.
        """
        if instance.state is CoroutineState.COMPLETED:
            if self.interpreter.config.strict_resume:
                raise error_illegal_state(instance.name, "completed", span)
            logger.info("resume of completed instance %s ignored", instance.name)
            self.interpreter.diagnostics.add(warning_resume_completed(instance.name, span))
            return instance.state
        if instance.state is CoroutineState.RUNNING:
            raise error_illegal_state(instance.name, "already running", span)

        if instance.state is CoroutineState.FRESH:
            instance.continuation = self.interpreter.execute_body(
                instance.declaration.body, instance.environment, "coroutine-body")

        previous = instance.state
        instance.state = CoroutineState.RUNNING
        instance.resume_count += 1
        logger.debug("resume %s (%s -> running)", instance.name, previous.value)

        try:
            signal = next(instance.continuation)
        except StopIteration as stop:
            self._complete(instance)
            self._check_final_signal(instance, stop.value)
            return instance.state
        except BaseException:
            self._complete(instance)
            logger.debug("instance %s aborted by error", instance.name)
            raise

        if signal.kind is not SignalKind.YIELD:
            self._abandon(instance)
            raise RuntimeError(f"coroutine body produced unexpected signal {signal!r}")

        instance.state = CoroutineState.SUSPENDED
        logger.debug("instance %s suspended after %d resume(s)",
                     instance.name, instance.resume_count)
        return instance.state

    def _complete(self, instance: CoroutineInstance) -> None:
        instance.state = CoroutineState.COMPLETED
        instance.continuation = None
        logger.debug("instance %s completed", instance.name)

    def _abandon(self, instance: CoroutineInstance) -> None:
        continuation = instance.continuation
        self._complete(instance)
        if continuation is not None:
            continuation.close()

    def _check_final_signal(self, instance: CoroutineInstance, signal: ControlSignal) -> None:
        """Return and falling off the end complete the instance; loop signals may not escape."""
        if signal.kind is SignalKind.BREAK:
            raise error_control_flow("break", "a while loop", instance.declaration.span)
        if signal.kind is SignalKind.CONTINUE:
            raise error_control_flow("continue", "a while loop", instance.declaration.span)
