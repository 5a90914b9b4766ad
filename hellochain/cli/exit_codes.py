"""Deterministic process exit-code mapping for the CLI."""

SUCCESS = 0
USAGE_ERROR = 2
STEP_FAILURE = -1
