import logging

from hellochain.chain.keypair import Keypair, PublicKey, load_keypair_file
from hellochain.constants import FEE_SIGNATURE_BUDGET, LAMPORTS_PER_SIGNATURE
from hellochain.utils import lamports_to_sol

log = logging.getLogger(__name__)


class PayerMixin:
    def establish_payer(self) -> PublicKey:
        """
        Load the fee payer and make sure it can cover the run.

        The payer keypair is read from ``settings.payer_keypair``; a missing file falls
        back to a freshly generated keypair. When the balance is below the expected fees
        and airdrops are enabled, the difference is requested and confirmed.
        """
        fees = self._estimate_fees()

        if self.payer is None:
            self.payer = self._load_payer()

        lamports = self.rpc.get_balance(self.payer.public_key)
        if lamports < fees and self.settings.airdrop:
            shortfall = fees - lamports
            log.info("Requesting airdrop of %s SOL", lamports_to_sol(shortfall))
            signature = self.rpc.request_airdrop(self.payer.public_key, shortfall)
            self._confirm_signature(signature)
            lamports = self.rpc.get_balance(self.payer.public_key)

        log.info(
            "Using account %s containing %s SOL to pay for fees",
            self.payer.public_key,
            lamports_to_sol(lamports),
        )
        return self.payer.public_key

    def _estimate_fees(self) -> int:
        """Rent for the counter account plus headroom for transaction signatures."""
        rent = self.rpc.get_minimum_balance_for_rent_exemption(self.settings.account_space)
        return rent + LAMPORTS_PER_SIGNATURE * FEE_SIGNATURE_BUDGET

    def _load_payer(self) -> Keypair:
        try:
            return load_keypair_file(self.settings.payer_keypair)
        except FileNotFoundError:
            log.warning(
                "Payer keypair %s not found, using a generated keypair for this run",
                self.settings.payer_keypair,
            )
            return Keypair()
