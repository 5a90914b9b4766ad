"""Tests for keypairs, public keys and keypair files."""

from __future__ import annotations

import json
from pathlib import Path

import nacl.signing
import pytest

from hellochain.chain.keypair import SYSTEM_PROGRAM_ID, Keypair, PublicKey, load_keypair_file
from hellochain.errors import KeypairError


def test_system_program_id_text_form() -> None:
    """Verify the all-zero key renders as thirty-two ``1`` characters."""
    assert str(SYSTEM_PROGRAM_ID) == "11111111111111111111111111111111"


def test_public_key_accepts_text_bytes_and_instances() -> None:
    """Verify equivalent inputs produce equal, hashable keys."""
    raw = bytes(range(32))
    from_bytes = PublicKey(raw)
    from_text = PublicKey(str(from_bytes))

    assert from_text == from_bytes
    assert PublicKey(from_text) == from_bytes
    assert len({from_bytes, from_text}) == 1
    assert bytes(from_text) == raw


@pytest.mark.parametrize("value", [b"short", "0OIl", "1" * 33])
def test_public_key_rejects_invalid_values(value: object) -> None:
    """Verify wrong lengths and bad text fail with ``ValueError``."""
    with pytest.raises(ValueError):
        PublicKey(value)


def test_create_with_seed_is_deterministic_and_program_scoped() -> None:
    """Verify seeded derivation depends on base, seed and program id."""
    base = Keypair().public_key
    program_a = Keypair().public_key
    program_b = Keypair().public_key

    first = PublicKey.create_with_seed(base, "hello", program_a)

    assert first == PublicKey.create_with_seed(base, "hello", program_a)
    assert first != PublicKey.create_with_seed(base, "hello", program_b)
    assert first != PublicKey.create_with_seed(base, "other", program_a)


def test_create_with_seed_rejects_long_seed() -> None:
    """Verify seeds longer than 32 bytes are rejected."""
    key = Keypair().public_key

    with pytest.raises(ValueError, match="Seed must be at most 32 bytes"):
        PublicKey.create_with_seed(key, "x" * 33, key)


def test_keypair_signatures_verify_with_public_key() -> None:
    """Verify detached signatures verify against the keypair's public key."""
    keypair = Keypair()
    signature = keypair.sign(b"message")

    assert len(signature) == 64
    nacl.signing.VerifyKey(bytes(keypair.public_key)).verify(b"message", signature)


def test_keypair_secret_key_round_trips() -> None:
    """Verify the 64-byte secret layout rebuilds the same keypair."""
    keypair = Keypair()

    assert Keypair.from_secret_key(keypair.secret_key).public_key == keypair.public_key


def test_keypair_rejects_mismatched_public_half() -> None:
    """Verify a secret whose embedded public key does not match is rejected."""
    secret = Keypair().secret_key[:32] + Keypair().public_key.__bytes__()

    with pytest.raises(KeypairError, match="does not match"):
        Keypair.from_secret_key(secret)


def test_keypair_rejects_wrong_secret_length() -> None:
    """Verify only 32- and 64-byte secrets are accepted."""
    with pytest.raises(KeypairError, match="32 or 64 bytes"):
        Keypair.from_secret_key(b"\x01" * 10)


def test_load_keypair_file_reads_json_byte_array(tmp_path: Path) -> None:
    """Verify CLI-format keypair files load into the same keypair."""
    keypair = Keypair()
    path = tmp_path / "id.json"
    path.write_text(json.dumps(list(keypair.secret_key)), encoding="utf-8")

    assert load_keypair_file(path).public_key == keypair.public_key


def test_load_keypair_file_missing_raises_file_not_found(tmp_path: Path) -> None:
    """Verify missing files surface as ``FileNotFoundError``."""
    with pytest.raises(FileNotFoundError):
        load_keypair_file(tmp_path / "missing.json")


@pytest.mark.parametrize("content", ["not json", '{"a": 1}', "[1, 2, 300]"])
def test_load_keypair_file_rejects_invalid_content(tmp_path: Path, content: str) -> None:
    """Verify malformed keypair files raise ``KeypairError``."""
    path = tmp_path / "bad.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(KeypairError):
        load_keypair_file(path)
