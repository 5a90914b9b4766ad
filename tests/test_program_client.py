"""Tests for the program client: connection, payer, program check and actions."""

from __future__ import annotations

import json
import math
import struct
from pathlib import Path
from typing import Any

import pytest

from hellochain.chain.init import ProgramClient
from hellochain.chain.keypair import Keypair, PublicKey
from hellochain.config import ClusterSettings
from hellochain.errors import (
    ConfirmationTimeoutError,
    HelloChainError,
    InstructionEncodingError,
    ProgramNotDeployedError,
    ProgramNotExecutableError,
    TransactionFailedError,
)

BLOCKHASH = str(PublicKey(bytes(range(32))))
CONFIRMED = {"err": None, "confirmationStatus": "confirmed"}


class FakeRpc:
    """RPC test double keeping balances, accounts and submitted transactions in memory."""

    def __init__(
        self,
        *,
        balance: int = 10**10,
        accounts: dict[PublicKey, dict[str, Any]] | None = None,
        statuses: list[dict[str, Any] | None] | None = None,
    ) -> None:
        self.balance = balance
        self.accounts = dict(accounts or {})
        self.statuses = list(statuses or [])
        self.sent: list[bytes] = []
        self.airdrops: list[tuple[PublicKey, int]] = []

    def get_version(self) -> dict[str, Any]:
        return {"solana-core": "1.18.0", "feature-set": 1}

    def get_balance(self, pubkey: PublicKey) -> int:
        del pubkey
        return self.balance

    def get_account_info(self, pubkey: PublicKey) -> dict[str, Any] | None:
        return self.accounts.get(pubkey)

    def get_minimum_balance_for_rent_exemption(self, space: int) -> int:
        return 1000 * space

    def get_latest_blockhash(self) -> str:
        return BLOCKHASH

    def request_airdrop(self, pubkey: PublicKey, lamports: int) -> str:
        self.airdrops.append((pubkey, lamports))
        self.balance += lamports
        return "airdrop-sig"

    def send_transaction(self, wire: bytes) -> str:
        self.sent.append(wire)
        return f"sig-{len(self.sent)}"

    def get_signature_status(self, signature: str) -> dict[str, Any] | None:
        del signature
        if self.statuses:
            return self.statuses.pop(0)
        return CONFIRMED


@pytest.fixture
def payer(tmp_path: Path) -> tuple[Keypair, Path]:
    """Write a payer keypair file and return the keypair with its path."""
    keypair = Keypair()
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(keypair.secret_key)), encoding="utf-8")
    return keypair, path


@pytest.fixture
def program_id() -> PublicKey:
    return Keypair().public_key


def _client(rpc: FakeRpc, payer_path: Path, program_id: PublicKey | None, **settings: Any):
    sleeps: list[float] = []
    client = ProgramClient(
        ClusterSettings(
            payer_keypair=str(payer_path),
            program_id=str(program_id) if program_id else None,
            **settings,
        ),
        rpc=rpc,
        sleep=sleeps.append,
    )
    return client, sleeps


def _deployed(program_id: PublicKey) -> dict[PublicKey, dict[str, Any]]:
    return {program_id: {"executable": True, "data": b""}}


def test_establish_connection_returns_version(payer, program_id) -> None:
    """Verify the cluster version is returned and remembered."""
    client, _ = _client(FakeRpc(), payer[1], program_id)

    version = client.establish_connection()

    assert version["solana-core"] == "1.18.0"
    assert client.version is version


def test_establish_payer_loads_keypair_without_airdrop(payer, program_id) -> None:
    """Verify a funded payer is loaded from file and no airdrop is requested."""
    rpc = FakeRpc(balance=10**10)
    client, _ = _client(rpc, payer[1], program_id)

    assert client.establish_payer() == payer[0].public_key
    assert rpc.airdrops == []


def test_establish_payer_airdrops_shortfall(payer, program_id) -> None:
    """Verify an underfunded payer receives exactly the missing lamports."""
    rpc = FakeRpc(balance=4000)
    client, _ = _client(rpc, payer[1], program_id)

    client.establish_payer()

    # rent for 4 bytes (4000) plus 100 signatures at 5000 lamports
    assert rpc.airdrops == [(payer[0].public_key, 500_000)]


def test_establish_payer_skips_airdrop_when_disabled(payer, program_id) -> None:
    """Verify the airdrop toggle leaves low balances untouched."""
    rpc = FakeRpc(balance=0)
    client, _ = _client(rpc, payer[1], program_id, airdrop=False)

    client.establish_payer()

    assert rpc.airdrops == []


def test_establish_payer_generates_keypair_when_file_missing(tmp_path: Path, program_id) -> None:
    """Verify a missing payer file falls back to a generated keypair."""
    client, _ = _client(FakeRpc(), tmp_path / "missing.json", program_id)

    public_key = client.establish_payer()

    assert isinstance(public_key, PublicKey)
    assert client.payer is not None


def test_check_program_requires_deployment(payer, program_id) -> None:
    """Verify a missing program account raises ``ProgramNotDeployedError``."""
    client, _ = _client(FakeRpc(), payer[1], program_id)
    client.establish_payer()

    with pytest.raises(ProgramNotDeployedError, match="is not deployed"):
        client.check_program()


def test_check_program_requires_executable(payer, program_id) -> None:
    """Verify a non-executable program account is rejected."""
    rpc = FakeRpc(accounts={program_id: {"executable": False, "data": b""}})
    client, _ = _client(rpc, payer[1], program_id)
    client.establish_payer()

    with pytest.raises(ProgramNotExecutableError):
        client.check_program()


def test_check_program_requires_payer(payer, program_id) -> None:
    """Verify the counter account cannot be derived before a payer exists."""
    client, _ = _client(FakeRpc(accounts=_deployed(program_id)), payer[1], program_id)

    with pytest.raises(HelloChainError, match="payer must be established"):
        client.check_program()


def test_check_program_creates_missing_counter_account(payer, program_id) -> None:
    """Verify the seeded counter account is derived and created once."""
    rpc = FakeRpc(accounts=_deployed(program_id))
    client, _ = _client(rpc, payer[1], program_id)
    client.establish_payer()

    assert client.check_program() == program_id

    expected = PublicKey.create_with_seed(payer[0].public_key, "hello", program_id)
    assert client.counter_pubkey == expected
    assert len(rpc.sent) == 1
    assert bytes(expected) in rpc.sent[0]


def test_check_program_reuses_existing_counter_account(payer, program_id) -> None:
    """Verify no transaction is sent when the counter account already exists."""
    counter = PublicKey.create_with_seed(payer[0].public_key, "hello", program_id)
    accounts = _deployed(program_id)
    accounts[counter] = {"executable": False, "data": bytes(4)}
    rpc = FakeRpc(accounts=accounts)
    client, _ = _client(rpc, payer[1], program_id)
    client.establish_payer()

    client.check_program()

    assert rpc.sent == []


def test_check_program_reads_program_keypair_file(payer, tmp_path: Path) -> None:
    """Verify the program id falls back to the program keypair file."""
    program = Keypair()
    program_path = tmp_path / "program.json"
    program_path.write_text(json.dumps(list(program.secret_key)), encoding="utf-8")
    rpc = FakeRpc(accounts=_deployed(program.public_key))
    client, _ = _client(rpc, payer[1], None, program_keypair=str(program_path))
    client.establish_payer()

    assert client.check_program() == program.public_key


def test_check_program_missing_program_keypair(payer, tmp_path: Path) -> None:
    """Verify a missing program keypair is reported as not deployed."""
    client, _ = _client(FakeRpc(), payer[1], None, program_keypair=str(tmp_path / "none.json"))
    client.establish_payer()

    with pytest.raises(ProgramNotDeployedError, match="Program keypair"):
        client.check_program()


def _ready_client(payer, program_id, **rpc_kwargs):
    counter = PublicKey.create_with_seed(payer[0].public_key, "hello", program_id)
    accounts = _deployed(program_id)
    accounts[counter] = {"executable": False, "data": struct.pack("<I", 7)}
    rpc = FakeRpc(accounts=accounts, **rpc_kwargs)
    client, sleeps = _client(rpc, payer[1], program_id)
    client.establish_payer()
    client.check_program()
    return client, rpc, sleeps


def test_store_number_sends_u32_instruction(payer, program_id) -> None:
    """Verify the stored number is the trailing instruction data of the transaction."""
    client, rpc, _ = _ready_client(payer, program_id)

    assert client.store_number(42) == "sig-1"
    assert rpc.sent[0].endswith(bytes([4]) + struct.pack("<I", 42))


def test_store_number_rejects_nan_without_network(payer, program_id) -> None:
    """Verify unencodable numbers fail before any transaction is sent."""
    client, rpc, _ = _ready_client(payer, program_id)

    with pytest.raises(InstructionEncodingError):
        client.store_number(math.nan)

    assert rpc.sent == []


def test_actions_require_setup(payer, program_id) -> None:
    """Verify actions refuse to run before payer and program are established."""
    client, _ = _client(FakeRpc(), payer[1], program_id)

    with pytest.raises(HelloChainError, match="must be established"):
        client.execute_impact()


def test_change_number_and_mech_actions(payer, program_id) -> None:
    """Verify change-number, execute and create-card instruction data."""
    client, rpc, _ = _ready_client(payer, program_id)

    client.change_number(0, 3)
    client.execute_impact()
    client.create_card(b"\xca\xfe")

    assert rpc.sent[0].endswith(bytes([5, 0]) + struct.pack("<I", 3))
    assert rpc.sent[1].endswith(bytes([1, 0]))
    assert rpc.sent[2].endswith(bytes([3, 1, 0xCA, 0xFE]))


def test_report_greetings_decodes_counter(payer, program_id) -> None:
    """Verify the stored number is read back from the counter account."""
    client, _, _ = _ready_client(payer, program_id)

    assert client.report_greetings() == 7


def test_confirmation_waits_for_commitment(payer, program_id) -> None:
    """Verify processed statuses are polled until the confirmed level is reached."""
    client, rpc, sleeps = _ready_client(payer, program_id)
    rpc.statuses = [None, {"err": None, "confirmationStatus": "processed"}, CONFIRMED]

    client.execute_impact()

    assert sleeps == [1.0, 1.0]


def test_confirmation_accepts_legacy_finalized_status(payer, program_id) -> None:
    """Verify statuses without confirmationStatus count as finalized when unconfirmed count is null."""
    client, rpc, sleeps = _ready_client(payer, program_id)
    rpc.statuses = [{"err": None, "confirmations": None}]

    client.execute_impact()

    assert sleeps == []


def test_confirmation_reports_transaction_error(payer, program_id) -> None:
    """Verify error statuses raise ``TransactionFailedError``."""
    client, rpc, _ = _ready_client(payer, program_id)
    rpc.statuses = [{"err": {"InstructionError": [0, "InvalidAccountData"]}}]

    with pytest.raises(TransactionFailedError, match="InvalidAccountData"):
        client.execute_impact()


def test_confirmation_times_out(payer, program_id) -> None:
    """Verify exhausting poll attempts raises ``ConfirmationTimeoutError``."""
    client, rpc, sleeps = _ready_client(payer, program_id)
    client.settings = ClusterSettings(
        payer_keypair=client.settings.payer_keypair,
        program_id=client.settings.program_id,
        confirm_attempts=3,
        confirm_interval=0.5,
    )
    rpc.statuses = [None, None, None]

    with pytest.raises(ConfirmationTimeoutError, match="after 3 attempt"):
        client.execute_impact()

    assert sleeps == [0.5, 0.5]
