"""Encrypt and decrypt the service account credentials used by system tests.

The plaintext JSON never gets committed. ``encrypt_credentials`` writes an
AES-256-GCM ciphertext next to it (``<name>.enc``) and hands back the key and
nonce so an operator can store them in the CI secret manager. CI later calls
``decrypt_credentials`` with the same pair to restore the plaintext.
"""

from __future__ import annotations

import binascii
import os
from dataclasses import dataclass, field
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

KEY_BYTES = 32
IV_BYTES = 12
CIPHERTEXT_SUFFIX = ".enc"


class CryptoError(RuntimeError):
    """Raised when credential material is malformed or a file cannot be processed."""


@dataclass(frozen=True)
class CredentialMaterial:
    """Hex-encoded key and IV. Both halves are required to decrypt."""

    key: str = field(repr=False)
    iv: str = field(repr=False)

    @classmethod
    def generate(cls) -> "CredentialMaterial":
        return cls(key=os.urandom(KEY_BYTES).hex(), iv=os.urandom(IV_BYTES).hex())

    def key_bytes(self) -> bytes:
        return _decode_hex(self.key, KEY_BYTES, "key")

    def iv_bytes(self) -> bytes:
        return _decode_hex(self.iv, IV_BYTES, "iv")


def _decode_hex(value: str, expected: int, label: str) -> bytes:
    try:
        raw = bytes.fromhex(value.strip())
    except (ValueError, binascii.Error) as exc:
        raise CryptoError(f"Credential {label} is not valid hex.") from exc
    if len(raw) != expected:
        raise CryptoError(f"Credential {label} must be {expected} bytes (got {len(raw)}).")
    return raw


def ciphertext_path(plaintext_path: str | Path) -> Path:
    path = Path(plaintext_path)
    return path.with_name(path.name + CIPHERTEXT_SUFFIX)


def _read(path: Path, label: str) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise CryptoError(f"{label} not found: {path}") from exc
    except OSError as exc:
        raise CryptoError(f"Failed to read {label.lower()} {path}: {exc}") from exc


def _write(path: Path, payload: bytes) -> None:
    try:
        path.write_bytes(payload)
    except OSError as exc:
        raise CryptoError(f"Failed to write {path}: {exc}") from exc


def encrypt_credentials(plaintext_path: str | Path) -> CredentialMaterial:
    """Encrypt ``plaintext_path`` to its ``.enc`` sibling and return fresh key material."""
    source = Path(plaintext_path)
    plaintext = _read(source, "Credentials file")

    material = CredentialMaterial.generate()
    ciphertext = AESGCM(material.key_bytes()).encrypt(material.iv_bytes(), plaintext, None)
    _write(ciphertext_path(source), ciphertext)
    return material


def decrypt_credentials(material: CredentialMaterial, plaintext_path: str | Path) -> Path:
    """Restore ``plaintext_path`` from its ``.enc`` sibling, overwriting any existing file."""
    key = material.key_bytes()
    iv = material.iv_bytes()
    target = Path(plaintext_path)
    encrypted = ciphertext_path(target)
    ciphertext = _read(encrypted, "Encrypted credentials file")

    try:
        plaintext = AESGCM(key).decrypt(iv, ciphertext, None)
    except InvalidTag as exc:
        raise CryptoError(f"Failed to authenticate {encrypted}; key or iv does not match.") from exc

    _write(target, plaintext)
    return target


__all__ = [
    "CIPHERTEXT_SUFFIX",
    "CredentialMaterial",
    "CryptoError",
    "IV_BYTES",
    "KEY_BYTES",
    "ciphertext_path",
    "decrypt_credentials",
    "encrypt_credentials",
]
