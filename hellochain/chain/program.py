import logging

from hellochain.chain.keypair import PublicKey, load_keypair_file
from hellochain.chain.transaction import create_account_with_seed
from hellochain.errors import HelloChainError, ProgramNotDeployedError, ProgramNotExecutableError

log = logging.getLogger(__name__)


class ProgramMixin:
    def check_program(self) -> PublicKey:
        """
        Verify the program is deployed and prepare the counter account it writes to.

        Raises:
            ProgramNotDeployedError: If no account exists at the program id.
            ProgramNotExecutableError: If the account is not an executable program.
            HelloChainError: If no payer has been established yet.
        """
        program_id = self._resolve_program_id()
        program_info = self.rpc.get_account_info(program_id)
        if program_info is None:
            raise ProgramNotDeployedError(
                f"Program {program_id} is not deployed on {self.settings.rpc_url}. "
                "Deploy it with `solana program deploy` and try again."
            )
        if not program_info.get("executable"):
            raise ProgramNotExecutableError(f"Program {program_id} is not executable")

        self.program_id = program_id
        log.info("Using program %s", program_id)

        if self.payer is None:
            raise HelloChainError("A payer must be established before checking the program")

        self.counter_pubkey = PublicKey.create_with_seed(
            self.payer.public_key, self.settings.seed, program_id
        )
        if self.rpc.get_account_info(self.counter_pubkey) is None:
            self._create_counter_account()
        return program_id

    def _resolve_program_id(self) -> PublicKey:
        """Use the configured program id, otherwise the public key of the program keypair file."""
        if self.settings.program_id:
            return PublicKey(self.settings.program_id)
        try:
            return load_keypair_file(self.settings.program_keypair).public_key
        except FileNotFoundError as exc:
            raise ProgramNotDeployedError(
                f"Program keypair {self.settings.program_keypair} not found. "
                "Build and deploy the program, or pass --program-id."
            ) from exc

    def _create_counter_account(self) -> str:
        log.info("Creating account %s to say hello to", self.counter_pubkey)
        lamports = self.rpc.get_minimum_balance_for_rent_exemption(self.settings.account_space)
        instruction = create_account_with_seed(
            from_pubkey=self.payer.public_key,
            new_account_pubkey=self.counter_pubkey,
            base_pubkey=self.payer.public_key,
            seed=self.settings.seed,
            lamports=lamports,
            space=self.settings.account_space,
            program_id=self.program_id,
        )
        return self._send_and_confirm([instruction])
