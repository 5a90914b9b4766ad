"""CLI presentation helpers for human and JSON output modes."""

from __future__ import annotations

import json
from typing import Any, Mapping

import click

from hellochain.application import workflows
from hellochain.domain.requests import RunOutcome


class CliPresenter:
    """Render command outputs for human and machine-readable modes."""

    def __init__(self, *, json_output: bool, quiet: bool) -> None:
        """Store output-mode flags for rendering decisions."""
        self.json_output = json_output
        self.quiet = quiet

    @property
    def emits_human_output(self) -> bool:
        """Return whether human-readable output should be emitted."""
        return not self.json_output and not self.quiet

    def emit_intro(self, intro: str) -> None:
        """Emit a styled intro banner when human output is enabled."""
        if self.emits_human_output:
            click.echo(click.style(intro, fg="blue"))

    def emit_notice(self, message: str) -> None:
        """Emit one human-readable progress message."""
        if self.emits_human_output:
            click.echo(message)

    def emit_outcome(self, outcome: RunOutcome, *, variant: str) -> None:
        """
        Emit the run result in the current render mode.

        Failures always reach stderr, even in quiet or json mode; success is only
        echoed in human mode.
        """
        if not outcome.ok:
            click.echo(
                click.style(f"{outcome.failed_stage} failed: {outcome.error}", fg="red"),
                err=True,
            )

        if self.json_output:
            self.emit_json(
                {
                    "status": "ok" if outcome.ok else "error",
                    "variant": variant,
                    "exit_code": outcome.exit_code,
                    "completed_stages": list(outcome.completed),
                    "skipped_stages": list(outcome.skipped),
                    "failed_stage": outcome.failed_stage,
                    "error": None if outcome.error is None else str(outcome.error),
                }
            )
            return

        if outcome.ok:
            self.emit_notice(
                f"Success. Completed stages: {workflows.summarize_outcome_stages(outcome.completed)}"
            )

    def emit_json(self, payload: Mapping[str, Any]) -> None:
        """Emit one machine-readable JSON object to stdout."""
        click.echo(json.dumps(payload, sort_keys=True))
