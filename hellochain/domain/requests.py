"""Immutable request and outcome models shared between CLI and application layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Variant = Literal["hello", "mech"]

SUCCESS_EXIT_CODE = 0
FAILURE_EXIT_CODE = -1


@dataclass(frozen=True, slots=True)
class RunRequest:
    """Inputs selecting which variant runs and which of its stages are toggled."""

    variant: Variant
    enable: frozenset[str] = frozenset()
    disable: frozenset[str] = frozenset()
    card_data: bytes = b""

    def is_enabled(self, stage_name: str, default: bool) -> bool:
        """Return whether ``stage_name`` runs, letting ``disable`` win over ``enable``."""
        if stage_name in self.disable:
            return False
        if stage_name in self.enable:
            return True
        return default


@dataclass(frozen=True, slots=True)
class RunOutcome:
    """Tagged result of one run: completed stages, or the stage that failed and why."""

    completed: tuple[str, ...]
    skipped: tuple[str, ...] = ()
    failed_stage: str | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        """Return whether every enabled stage completed."""
        return self.failed_stage is None

    @property
    def exit_code(self) -> int:
        """Return the process exit code for this outcome."""
        return SUCCESS_EXIT_CODE if self.ok else FAILURE_EXIT_CODE
