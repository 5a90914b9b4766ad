"""Application-layer run workflows decoupled from CLI parsing details."""

from __future__ import annotations

from dataclasses import replace
from typing import Awaitable, Callable, Union

from hellochain.application.sequencer import RunContext, Stage, in_thread
from hellochain.domain.requests import RunRequest, Variant
from hellochain.types import ProgramClientLike
from hellochain.utils import Number

NumberProvider = Callable[[str], Union[Number, Awaitable[Number]]]

INTRO = "Let's say hello to a Solana account..."
NUMBER_QUESTION = "What is your number?"
OPERATION_QUESTION = "What to do? 0 = add, 1 = sub"

CONNECT = "connect"
PAYER = "payer"
PROGRAM = "program"
PROMPT_OPERATION = "prompt_operation"
PROMPT_NUMBER = "prompt_number"
STORE_NUMBER = "store_number"
CHANGE_NUMBER = "change_number"
CREATE_CARD = "create_card"
EXECUTE_IMPACT = "execute_impact"
REPORT_GREETINGS = "report_greetings"

# Stage order per variant with the default enabled flag of each stage.
VARIANT_STAGES: dict[Variant, tuple[tuple[str, bool], ...]] = {
    "hello": (
        (CONNECT, True),
        (PAYER, True),
        (PROGRAM, True),
        (PROMPT_NUMBER, True),
        (STORE_NUMBER, True),
        (REPORT_GREETINGS, False),
    ),
    "mech": (
        (CONNECT, True),
        (PAYER, True),
        (PROGRAM, True),
        (PROMPT_OPERATION, False),
        (PROMPT_NUMBER, False),
        (CHANGE_NUMBER, False),
        (CREATE_CARD, False),
        (EXECUTE_IMPACT, True),
        (REPORT_GREETINGS, False),
    ),
}

ALL_STAGE_NAMES = tuple(
    dict.fromkeys(name for stages in VARIANT_STAGES.values() for name, _ in stages)
)


def stage_names(variant: Variant) -> tuple[str, ...]:
    """Return the ordered stage names of ``variant``."""
    return tuple(name for name, _ in VARIANT_STAGES[variant])


def verify_stage_toggles(request: RunRequest) -> str | None:
    """Return a validation error when toggles name stages the variant does not have."""
    known = set(stage_names(request.variant))
    unknown = sorted((request.enable | request.disable) - known)
    if unknown:
        return (
            f"Unknown stage(s) for {request.variant}: {', '.join(unknown)}. "
            f"Available: {', '.join(stage_names(request.variant))}."
        )
    return None


def _stage_definitions(
    request: RunRequest,
    client: ProgramClientLike,
    ask_number: NumberProvider,
) -> dict[str, Stage]:
    """Build every known stage for ``client``; enablement is applied by the caller."""

    def _store(context: RunContext):
        return in_thread(client.store_number, context.require(PROMPT_NUMBER, STORE_NUMBER))(context)

    def _change(context: RunContext):
        operation = context.require(PROMPT_OPERATION, CHANGE_NUMBER)
        number = context.require(PROMPT_NUMBER, CHANGE_NUMBER)
        return in_thread(client.change_number, operation, number)(context)

    return {
        CONNECT: Stage(
            CONNECT,
            in_thread(client.establish_connection),
            message="Establishing connection to the cluster",
        ),
        PAYER: Stage(
            PAYER,
            in_thread(client.establish_payer),
            message="Determining who pays for the fees",
        ),
        PROGRAM: Stage(
            PROGRAM,
            in_thread(client.check_program),
            message="Checking if the program has been deployed",
        ),
        PROMPT_OPERATION: Stage(
            PROMPT_OPERATION,
            lambda context: ask_number(OPERATION_QUESTION),
            report=lambda operation: f"Hey, your operation is {operation}",
        ),
        PROMPT_NUMBER: Stage(
            PROMPT_NUMBER,
            lambda context: ask_number(NUMBER_QUESTION),
            report=lambda number: f"Hey, your number is {number}",
        ),
        STORE_NUMBER: Stage(
            STORE_NUMBER,
            _store,
            message="Storing your number in the counter account",
            report=lambda signature: f"Number stored (transaction {signature})",
        ),
        CHANGE_NUMBER: Stage(
            CHANGE_NUMBER,
            _change,
            message="Changing the stored number",
            report=lambda signature: f"Number changed (transaction {signature})",
        ),
        CREATE_CARD: Stage(
            CREATE_CARD,
            in_thread(client.create_card, request.card_data),
            message="Creating a card",
            report=lambda signature: f"Card created (transaction {signature})",
        ),
        EXECUTE_IMPACT: Stage(
            EXECUTE_IMPACT,
            in_thread(client.execute_impact),
            message="Executing impact",
            report=lambda signature: f"Impact executed (transaction {signature})",
        ),
        REPORT_GREETINGS: Stage(
            REPORT_GREETINGS,
            in_thread(client.report_greetings),
            message="Finding out how many times the account has been greeted",
            report=lambda number: f"Stored number is {number}",
        ),
    }


def build_stages(
    request: RunRequest,
    *,
    client: ProgramClientLike,
    ask_number: NumberProvider,
) -> list[Stage]:
    """
    Return the ordered stage list for ``request.variant`` with toggles applied.

    Parameters:
        request: Variant selection and stage toggles.
        client: Program client whose operations the stages invoke.
        ask_number: Input provider called with a question; returns a number or an awaitable.
    """
    definitions = _stage_definitions(request, client, ask_number)
    stages = []
    for name, default_enabled in VARIANT_STAGES[request.variant]:
        stage = definitions[name]
        enabled = request.is_enabled(name, default_enabled)
        stages.append(replace(stage, enabled=enabled))
    return stages


def summarize_outcome_stages(completed: tuple[str, ...]) -> str:
    """Return a human-readable list of completed stages."""
    return ", ".join(completed) if completed else "none"
