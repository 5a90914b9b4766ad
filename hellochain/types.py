"""Typed protocol contracts shared across runtime components."""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Protocol


class ResponseLike(Protocol):
    """Minimal HTTP response contract used by the RPC transport."""

    def raise_for_status(self) -> None:
        """Raise for non-successful HTTP responses."""

    def json(self) -> Any:
        """Return the decoded JSON body."""


class SessionLike(Protocol):
    """Minimal HTTP session contract used by the RPC transport."""

    headers: MutableMapping[str, str]

    def post(
        self,
        url: str,
        json: Mapping[str, object] | None = None,
        timeout: float | None = None,
    ) -> ResponseLike:
        """Perform an HTTP POST request and return a response object."""


class ProgramClientLike(Protocol):
    """Operations the run workflows invoke on a program client."""

    def establish_connection(self) -> Mapping[str, Any]:
        """Verify the cluster is reachable and return its version payload."""

    def establish_payer(self) -> object:
        """Load or create a funded fee payer and return its public key."""

    def check_program(self) -> object:
        """Verify the program is deployed and return its id."""

    def store_number(self, number: int | float) -> str:
        """Submit ``number`` to the program and return the transaction signature."""

    def change_number(self, operation: int | float, number: int | float) -> str:
        """Submit an add/subtract instruction and return the transaction signature."""

    def execute_impact(self) -> str:
        """Submit the parameterless execute instruction and return the signature."""

    def create_card(self, data: bytes) -> str:
        """Submit a create-card instruction carrying ``data``."""

    def report_greetings(self) -> int:
        """Read and return the number stored in the counter account."""
