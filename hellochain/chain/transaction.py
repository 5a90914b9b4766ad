"""Legacy transaction messages: account ordering, compact encoding and signing."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Sequence

from hellochain.chain.keypair import SYSTEM_PROGRAM_ID, Keypair, PublicKey
from hellochain.constants import SIGNATURE_LENGTH

# Index of CreateAccountWithSeed in the system program's instruction enum.
SYSTEM_CREATE_ACCOUNT_WITH_SEED = 3


@dataclass(frozen=True, slots=True)
class AccountMeta:
    """One account referenced by an instruction."""

    pubkey: PublicKey
    is_signer: bool
    is_writable: bool


@dataclass(frozen=True, slots=True)
class Instruction:
    """A program invocation: target program, accounts and opaque data."""

    program_id: PublicKey
    accounts: tuple[AccountMeta, ...]
    data: bytes


def encode_length(length: int) -> bytes:
    """Encode ``length`` as a compact-u16 (7 bits per byte, high bit continues)."""
    if not 0 <= length <= 0xFFFF:
        raise ValueError(f"Length out of compact-u16 range: {length}")
    out = bytearray()
    remaining = length
    while True:
        byte = remaining & 0x7F
        remaining >>= 7
        if remaining:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _order_accounts(fee_payer: PublicKey, instructions: Sequence[Instruction]) -> list[AccountMeta]:
    """Merge account metas across instructions and sort them into message order."""
    merged: dict[PublicKey, AccountMeta] = {
        fee_payer: AccountMeta(fee_payer, is_signer=True, is_writable=True)
    }
    order: list[PublicKey] = [fee_payer]

    def _add(meta: AccountMeta) -> None:
        existing = merged.get(meta.pubkey)
        if existing is None:
            merged[meta.pubkey] = meta
            order.append(meta.pubkey)
            return
        merged[meta.pubkey] = AccountMeta(
            meta.pubkey,
            is_signer=existing.is_signer or meta.is_signer,
            is_writable=existing.is_writable or meta.is_writable,
        )

    for instruction in instructions:
        for meta in instruction.accounts:
            _add(meta)
        _add(AccountMeta(instruction.program_id, is_signer=False, is_writable=False))

    metas = [merged[key] for key in order]
    # sorted() is stable, so the fee payer stays first among writable signers.
    return sorted(metas, key=lambda meta: (not meta.is_signer, not meta.is_writable))


@dataclass(frozen=True, slots=True)
class Message:
    """A compiled message ready to be signed."""

    num_required_signatures: int
    num_readonly_signed: int
    num_readonly_unsigned: int
    account_keys: tuple[PublicKey, ...]
    recent_blockhash: PublicKey
    instructions: tuple[tuple[int, tuple[int, ...], bytes], ...]

    @classmethod
    def compile(
        cls,
        fee_payer: PublicKey,
        instructions: Sequence[Instruction],
        recent_blockhash: str,
    ) -> Message:
        """Compile ``instructions`` into a message paid for by ``fee_payer``."""
        metas = _order_accounts(fee_payer, instructions)
        keys = tuple(meta.pubkey for meta in metas)
        index = {key: position for position, key in enumerate(keys)}

        compiled = tuple(
            (
                index[instruction.program_id],
                tuple(index[meta.pubkey] for meta in instruction.accounts),
                instruction.data,
            )
            for instruction in instructions
        )
        return cls(
            num_required_signatures=sum(1 for meta in metas if meta.is_signer),
            num_readonly_signed=sum(1 for meta in metas if meta.is_signer and not meta.is_writable),
            num_readonly_unsigned=sum(
                1 for meta in metas if not meta.is_signer and not meta.is_writable
            ),
            account_keys=keys,
            recent_blockhash=PublicKey(recent_blockhash),
            instructions=compiled,
        )

    @property
    def signers(self) -> tuple[PublicKey, ...]:
        """Return the keys that must sign, in signature order."""
        return self.account_keys[: self.num_required_signatures]

    def serialize(self) -> bytes:
        """Return the wire bytes that signatures cover."""
        out = bytearray(
            [self.num_required_signatures, self.num_readonly_signed, self.num_readonly_unsigned]
        )
        out += encode_length(len(self.account_keys))
        for key in self.account_keys:
            out += bytes(key)
        out += bytes(self.recent_blockhash)
        out += encode_length(len(self.instructions))
        for program_index, account_indices, data in self.instructions:
            out.append(program_index)
            out += encode_length(len(account_indices))
            out += bytes(account_indices)
            out += encode_length(len(data))
            out += data
        return bytes(out)


@dataclass(frozen=True, slots=True)
class Transaction:
    """A message together with one signature per required signer."""

    message: Message
    signatures: tuple[bytes, ...]

    @classmethod
    def sign(cls, message: Message, signers: Sequence[Keypair]) -> Transaction:
        """
        Sign ``message`` with every required signer.

        Raises:
            ValueError: If a required signer is missing from ``signers``.
        """
        by_key = {signer.public_key: signer for signer in signers}
        payload = message.serialize()
        signatures = []
        for key in message.signers:
            signer = by_key.get(key)
            if signer is None:
                raise ValueError(f"Missing signer for {key}")
            signatures.append(signer.sign(payload))
        return cls(message=message, signatures=tuple(signatures))

    def serialize(self) -> bytes:
        """Return the wire bytes submitted with ``sendTransaction``."""
        out = bytearray(encode_length(len(self.signatures)))
        for signature in self.signatures:
            if len(signature) != SIGNATURE_LENGTH:
                raise ValueError("Signature must be 64 bytes")
            out += signature
        return bytes(out) + self.message.serialize()


def create_account_with_seed(
    *,
    from_pubkey: PublicKey,
    new_account_pubkey: PublicKey,
    base_pubkey: PublicKey,
    seed: str,
    lamports: int,
    space: int,
    program_id: PublicKey,
) -> Instruction:
    """Build the system-program instruction that funds and allocates a seeded account."""
    seed_bytes = seed.encode("utf-8")
    data = (
        struct.pack("<I", SYSTEM_CREATE_ACCOUNT_WITH_SEED)
        + bytes(base_pubkey)
        + struct.pack("<Q", len(seed_bytes))
        + seed_bytes
        + struct.pack("<QQ", lamports, space)
        + bytes(program_id)
    )
    accounts = [
        AccountMeta(from_pubkey, is_signer=True, is_writable=True),
        AccountMeta(new_account_pubkey, is_signer=False, is_writable=True),
    ]
    if base_pubkey != from_pubkey:
        accounts.append(AccountMeta(base_pubkey, is_signer=True, is_writable=False))
    return Instruction(program_id=SYSTEM_PROGRAM_ID, accounts=tuple(accounts), data=data)
