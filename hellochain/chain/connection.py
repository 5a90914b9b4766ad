import logging

from hellochain.constants import Commitment
from hellochain.errors import ConfirmationTimeoutError, TransactionFailedError

log = logging.getLogger(__name__)

_COMMITMENT_RANK = {commitment.value: rank for rank, commitment in enumerate(Commitment)}


def _reached(status: dict, required: Commitment) -> bool:
    """Return whether a signature status satisfies the ``required`` commitment."""
    level = status.get("confirmationStatus")
    if level is None:
        # Nodes without confirmationStatus report finalized signatures with no confirmation count.
        finalized = status.get("confirmations") is None
        level = Commitment.FINALIZED.value if finalized else Commitment.PROCESSED.value
    return _COMMITMENT_RANK.get(level, -1) >= _COMMITMENT_RANK[required.value]


class ConnectionMixin:
    def establish_connection(self) -> dict:
        """
        Verify the cluster answers and remember its version.
        """
        version = self.rpc.get_version()
        self.version = version
        log.info("Connection to cluster established: %s %s", self.settings.rpc_url, version)
        return version

    def _confirm_signature(self, signature: str) -> str:
        """
        Poll the signature status until the configured commitment is reached.

        Raises:
            TransactionFailedError: If the cluster reports an error for the transaction.
            ConfirmationTimeoutError: If the commitment is not reached in time.
        """
        required = self.settings.commitment_level
        for attempt in range(1, self.settings.confirm_attempts + 1):
            status = self.rpc.get_signature_status(signature)
            if status is not None:
                if status.get("err") is not None:
                    raise TransactionFailedError(f"Transaction {signature} failed: {status['err']}")
                if _reached(status, required):
                    log.debug("Signature %s reached %s after %d poll(s)", signature, required.value, attempt)
                    return signature
            if attempt < self.settings.confirm_attempts:
                self.sleep(self.settings.confirm_interval)
        raise ConfirmationTimeoutError(
            f"Transaction {signature} not {required.value} after {self.settings.confirm_attempts} attempt(s)"
        )
