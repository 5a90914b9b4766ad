from enum import Enum


class Commitment(Enum):
    """Represents supported commitment levels, weakest first."""
    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"


class ChangeOperation(Enum):
    """Represents operations accepted by the change-number instruction."""
    ADD = 0
    SUB = 1


class MechInstruction(Enum):
    """Represents instruction tags understood by the mech program."""
    EXECUTE = 0
    CREATE_CARD = 1


CLUSTER_URLS = {
    "localhost": "http://127.0.0.1:8899",
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
}

LAMPORTS_PER_SOL = 1_000_000_000
LAMPORTS_PER_SIGNATURE = 5000
# Fee headroom: enough signatures for account creation plus a handful of actions.
FEE_SIGNATURE_BUDGET = 100

PUBLIC_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64
MAX_SEED_LENGTH = 32
U32_MAX = 0xFFFFFFFF

# Size of the borsh-encoded u32 counter stored by the hello program.
COUNTER_ACCOUNT_SPACE = 4
DEFAULT_SEED = "hello"
