"""Domain-specific exceptions raised by hellochain runtime components."""

from __future__ import annotations


class HelloChainError(Exception):
    """Base exception for hellochain-specific runtime failures."""


class RpcError(HelloChainError):
    """Raised when the cluster answers a JSON-RPC call with an error object."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message


class KeypairError(HelloChainError):
    """Raised when a keypair file cannot be read or has an invalid shape."""


class ProgramNotDeployedError(HelloChainError):
    """Raised when the target program account does not exist on the cluster."""


class ProgramNotExecutableError(HelloChainError):
    """Raised when the target program account exists but is not executable."""


class InstructionEncodingError(HelloChainError, ValueError):
    """Raised when an action argument cannot be encoded into instruction data."""


class TransactionFailedError(HelloChainError):
    """Raised when the cluster reports an error status for a submitted transaction."""


class ConfirmationTimeoutError(HelloChainError):
    """Raised when a transaction does not reach the requested commitment in time."""


class MissingStageInputError(HelloChainError):
    """Raised when a stage needs a value that no earlier stage produced."""
