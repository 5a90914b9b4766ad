import logging
from typing import Sequence

from hellochain.chain.instructions import (
    decode_counter,
    encode_change_number,
    encode_create_card,
    encode_execute_impact,
    encode_store_number,
    program_instruction,
)
from hellochain.chain.transaction import Instruction, Message, Transaction
from hellochain.errors import HelloChainError
from hellochain.utils import Number

log = logging.getLogger(__name__)


class ActionsMixin:
    def store_number(self, number: Number) -> str:
        """Store ``number`` in the counter account and return the confirmed signature."""
        data = encode_store_number(number)
        self._require_counter()
        log.info("Storing number %s in %s", number, self.counter_pubkey)
        return self._send_and_confirm([program_instruction(self.program_id, self.counter_pubkey, data)])

    def change_number(self, operation: Number, number: Number) -> str:
        """Add to or subtract from the stored number (operation 0 = add, 1 = sub)."""
        data = encode_change_number(operation, number)
        self._require_counter()
        log.info("Changing number in %s (operation=%s, number=%s)", self.counter_pubkey, operation, number)
        return self._send_and_confirm([program_instruction(self.program_id, self.counter_pubkey, data)])

    def execute_impact(self) -> str:
        """Ask the mech program to execute the stored fight."""
        self._require_counter()
        log.info("Executing impact on %s", self.counter_pubkey)
        return self._send_and_confirm(
            [program_instruction(self.program_id, self.counter_pubkey, encode_execute_impact())]
        )

    def create_card(self, data: bytes) -> str:
        self._require_counter()
        log.info("Creating card (%d byte(s)) on %s", len(data), self.counter_pubkey)
        return self._send_and_confirm(
            [program_instruction(self.program_id, self.counter_pubkey, encode_create_card(data))]
        )

    def report_greetings(self) -> int:
        """Read the counter account and return the number it holds."""
        self._require_counter()
        account = self.rpc.get_account_info(self.counter_pubkey)
        if account is None:
            raise HelloChainError(f"Counter account {self.counter_pubkey} does not exist")
        number = decode_counter(account["data"])
        log.info("%s has been greeted %d time(s)", self.counter_pubkey, number)
        return number

    def _require_counter(self) -> None:
        if self.payer is None or self.program_id is None or self.counter_pubkey is None:
            raise HelloChainError("Payer and program must be established before sending actions")

    def _send_and_confirm(self, instructions: Sequence[Instruction]) -> str:
        """Sign ``instructions`` with the payer, submit them and wait for confirmation."""
        blockhash = self.rpc.get_latest_blockhash()
        message = Message.compile(self.payer.public_key, instructions, blockhash)
        transaction = Transaction.sign(message, [self.payer])
        signature = self.rpc.send_transaction(transaction.serialize())
        log.debug("Submitted transaction %s", signature)
        return self._confirm_signature(signature)
