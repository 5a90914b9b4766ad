"""Instruction data encoders for the hello and mech programs."""

from __future__ import annotations

import math
import struct

from hellochain.chain.keypair import PublicKey
from hellochain.chain.transaction import AccountMeta, Instruction
from hellochain.constants import U32_MAX, ChangeOperation, MechInstruction
from hellochain.errors import InstructionEncodingError
from hellochain.utils import Number


def _as_u32(value: Number, label: str) -> int:
    """Validate that ``value`` fits an unsigned 32-bit integer and return it as ``int``."""
    if isinstance(value, bool):
        raise InstructionEncodingError(f"{label} must be a number, got {value!r}")
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise InstructionEncodingError(f"{label} must be a whole number, got {value}")
        value = int(value)
    if not 0 <= value <= U32_MAX:
        raise InstructionEncodingError(f"{label} must be between 0 and {U32_MAX}, got {value}")
    return value


def encode_store_number(number: Number) -> bytes:
    """Encode the hello program's store instruction: one little-endian ``u32``."""
    return struct.pack("<I", _as_u32(number, "Number"))


def encode_change_number(operation: Number, number: Number) -> bytes:
    """Encode ``[operation: u8][number: u32 LE]`` for the change-number instruction."""
    op_value = _as_u32(operation, "Operation")
    try:
        op = ChangeOperation(op_value)
    except ValueError:
        choices = ", ".join(f"{o.value} = {o.name.lower()}" for o in ChangeOperation)
        raise InstructionEncodingError(f"Unknown operation {op_value} ({choices})") from None
    return bytes([op.value]) + struct.pack("<I", _as_u32(number, "Number"))


def encode_execute_impact() -> bytes:
    return bytes([MechInstruction.EXECUTE.value])


def encode_create_card(data: bytes) -> bytes:
    return bytes([MechInstruction.CREATE_CARD.value]) + bytes(data)


def decode_counter(data: bytes) -> int:
    """
    Decode the borsh ``u32`` held at the start of a counter account.

    Raises:
        InstructionEncodingError: If the account holds fewer than four bytes.
    """
    if len(data) < 4:
        raise InstructionEncodingError(f"Counter account data too short: {len(data)} byte(s)")
    return struct.unpack_from("<I", data)[0]


def program_instruction(program_id: PublicKey, target: PublicKey, data: bytes) -> Instruction:
    """Wrap ``data`` in an instruction whose only account is the writable ``target``."""
    return Instruction(
        program_id=program_id,
        accounts=(AccountMeta(target, is_signer=False, is_writable=True),),
        data=data,
    )
