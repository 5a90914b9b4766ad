"""Linear, abort-on-first-failure execution of named run stages."""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Sequence

from hellochain.domain.requests import RunOutcome
from hellochain.errors import MissingStageInputError

log = logging.getLogger(__name__)


@dataclass(slots=True)
class RunContext:
    """Values handed from earlier stages to later ones."""

    values: dict[str, Any] = field(default_factory=dict)

    def require(self, key: str, stage_name: str) -> Any:
        """Return ``values[key]`` or fail the stage that asked for it."""
        try:
            return self.values[key]
        except KeyError:
            raise MissingStageInputError(
                f"Stage '{stage_name}' needs '{key}', but no enabled stage provided it"
            ) from None


StageAction = Callable[[RunContext], Any]
StageReport = Callable[[Any], str | None]


@dataclass(frozen=True, slots=True)
class Stage:
    """
    One named step of a run.

    ``message`` is announced before the action runs; ``report`` turns the action's
    result into a message announced after it. The action may return a plain value
    or an awaitable.
    """

    name: str
    action: StageAction
    message: str | None = None
    report: StageReport | None = None
    enabled: bool = True


@dataclass(frozen=True, slots=True)
class StageListener:
    """Callbacks notified as the sequencer progresses."""

    on_message: Callable[[str], None] = lambda message: None


async def run_stages(
    stages: Sequence[Stage],
    *,
    context: RunContext | None = None,
    listener: StageListener | None = None,
) -> RunOutcome:
    """
    Run enabled ``stages`` one after another, stopping at the first failure.

    Every exception raised by a stage is caught here once and recorded in the
    outcome together with the stage name. Later stages never run after a failure,
    and disabled stages never run at all.
    """
    context = context or RunContext()
    listener = listener or StageListener()
    completed: list[str] = []
    skipped: list[str] = []

    for stage in stages:
        if not stage.enabled:
            skipped.append(stage.name)
            log.debug("Stage %s disabled", stage.name)
            continue

        if stage.message:
            listener.on_message(stage.message)
        log.debug("Stage %s started", stage.name)
        try:
            result = stage.action(context)
            if inspect.isawaitable(result):
                result = await result
            context.values[stage.name] = result
            report = stage.report(result) if stage.report else None
        except Exception as exc:
            log.debug("Stage %s failed", stage.name, exc_info=True)
            return RunOutcome(
                completed=tuple(completed),
                skipped=tuple(skipped),
                failed_stage=stage.name,
                error=exc,
            )

        completed.append(stage.name)
        if report:
            listener.on_message(report)

    return RunOutcome(completed=tuple(completed), skipped=tuple(skipped))


def run_sequence(
    stages: Sequence[Stage],
    *,
    context: RunContext | None = None,
    listener: StageListener | None = None,
) -> RunOutcome:
    """Run ``stages`` on a fresh event loop and return the outcome."""
    return asyncio.run(run_stages(stages, context=context, listener=listener))


def in_thread(func: Callable[..., Any], *args: Any) -> Callable[[RunContext], Awaitable[Any]]:
    """Wrap a blocking call as a stage action awaited on a worker thread."""

    def _action(context: RunContext) -> Awaitable[Any]:
        del context
        return asyncio.to_thread(func, *args)

    return _action
