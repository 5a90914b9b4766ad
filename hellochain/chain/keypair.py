"""Ed25519 keypairs and public keys in the cluster's base58 text form."""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
from typing import Union

import nacl.signing

from hellochain.constants import MAX_SEED_LENGTH, PUBLIC_KEY_LENGTH
from hellochain.errors import KeypairError
from hellochain.utils import base58_decode, base58_encode

PublicKeyInput = Union["PublicKey", str, bytes]


class PublicKey:
    """A 32-byte account address."""

    __slots__ = ("_key",)

    def __init__(self, value: PublicKeyInput) -> None:
        if isinstance(value, PublicKey):
            key = value._key
        elif isinstance(value, str):
            try:
                key = base58_decode(value)
            except ValueError as exc:
                raise ValueError(f"Invalid public key: {value}") from exc
        else:
            key = bytes(value)

        if len(key) != PUBLIC_KEY_LENGTH:
            raise ValueError(f"Public key must be {PUBLIC_KEY_LENGTH} bytes, got {len(key)}")
        self._key = key

    def __bytes__(self) -> bytes:
        return self._key

    def __str__(self) -> str:
        return base58_encode(self._key)

    def __repr__(self) -> str:
        return f"PublicKey({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PublicKey) and other._key == self._key

    def __hash__(self) -> int:
        return hash(self._key)

    @classmethod
    def create_with_seed(cls, base: PublicKey, seed: str, program_id: PublicKey) -> PublicKey:
        """
        Derive an address from a base key, a seed and an owning program.

        The address is ``sha256(base || seed || program_id)``, which is what the
        system program checks for create-account-with-seed.

        Raises:
            ValueError: If the seed is longer than 32 bytes.
        """
        seed_bytes = seed.encode("utf-8")
        if len(seed_bytes) > MAX_SEED_LENGTH:
            raise ValueError(f"Seed must be at most {MAX_SEED_LENGTH} bytes")
        digest = hashlib.sha256(bytes(base) + seed_bytes + bytes(program_id)).digest()
        return cls(digest)


SYSTEM_PROGRAM_ID = PublicKey(bytes(PUBLIC_KEY_LENGTH))


class Keypair:
    """An ed25519 signing key with its public key."""

    def __init__(self, signing_key: nacl.signing.SigningKey | None = None) -> None:
        self._signing_key = signing_key or nacl.signing.SigningKey.generate()
        self.public_key = PublicKey(self._signing_key.verify_key.encode())

    @classmethod
    def from_secret_key(cls, secret_key: bytes) -> Keypair:
        """
        Build a keypair from a 64-byte secret (seed followed by public key) or a 32-byte seed.

        Raises:
            KeypairError: If the secret has the wrong length or does not match its public half.
        """
        if len(secret_key) not in (32, 64):
            raise KeypairError(f"Secret key must be 32 or 64 bytes, got {len(secret_key)}")
        keypair = cls(nacl.signing.SigningKey(bytes(secret_key[:32])))
        if len(secret_key) == 64 and bytes(secret_key[32:]) != bytes(keypair.public_key):
            raise KeypairError("Secret key does not match its embedded public key")
        return keypair

    @property
    def secret_key(self) -> bytes:
        """Return the 64-byte secret in the CLI keypair file layout."""
        return bytes(self._signing_key) + bytes(self.public_key)

    def sign(self, message: bytes) -> bytes:
        """Return the detached 64-byte signature of ``message``."""
        return self._signing_key.sign(message).signature


def load_keypair_file(path: str | os.PathLike[str]) -> Keypair:
    """
    Read a keypair stored as a JSON array of 64 byte values.

    Raises:
        FileNotFoundError: If the file does not exist.
        KeypairError: If the content is not a valid keypair.
    """
    keypair_path = Path(path).expanduser()
    raw = keypair_path.read_text(encoding="utf-8")
    try:
        values = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise KeypairError(f"Keypair file {keypair_path} is not valid JSON") from exc

    if not isinstance(values, list) or not all(isinstance(v, int) and 0 <= v <= 255 for v in values):
        raise KeypairError(f"Keypair file {keypair_path} must contain a list of byte values")
    return Keypair.from_secret_key(bytes(values))

