from __future__ import annotations

import hashlib
import json
import re
from typing import Any, NamedTuple

# Multihash function codes accepted for VerifiableResource.hash
# code -> (name, digest length in bytes)
MULTIHASH_CODES = {
    0x12: ("sha2-256", 32),
    0x13: ("sha2-512", 64),
    0x16: ("sha3-256", 32),
    0x14: ("sha3-512", 64),
    0x1B: ("keccak-256", 32),
    0x1E: ("blake3", 32),
    0xB220: ("blake2b-256", 32),
}

B58_ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
B58_MAP = {c: i for i, c in enumerate(B58_ALPHABET)}

_HEX = re.compile(r"^[0-9a-fA-F]+$")


class DigestInfo(NamedTuple):
    algorithm: str
    digest_hex: str
    multihash: bool


def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()

def canonical(obj: Any) -> bytes:
    """Canonical JSON serialization for deterministic hashing."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

# Domain-separated hashing (prevents structural collisions)
def h_credential(credential: dict) -> str:
    """Hash a credential envelope without its proof (signing input digest)."""
    unsigned = {k: v for k, v in credential.items() if k != "proof"}
    return sha256(b"SYNETVC\x00" + canonical(unsigned))

def b58decode(s: str) -> bytes:
    s_bytes = s.encode("ascii")
    num = 0
    for c in s_bytes:
        if c not in B58_MAP:
            raise ValueError("Invalid base58 character")
        num = num * 58 + B58_MAP[c]
    # Count leading zeros
    n_pad = 0
    for c in s_bytes:
        if c == B58_ALPHABET[0]:
            n_pad += 1
        else:
            break
    full = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
    return b"\x00" * n_pad + full

def _read_varint(data: bytes) -> tuple[int, int]:
    """Decode an unsigned varint; returns (value, bytes consumed)."""
    value = 0
    for i, byte in enumerate(data[:9]):
        value |= (byte & 0x7F) << (7 * i)
        if not byte & 0x80:
            return value, i + 1
    raise ValueError("Truncated varint")

def _parse_multihash(raw: bytes) -> DigestInfo:
    code, used = _read_varint(raw)
    length, used_len = _read_varint(raw[used:])
    body = raw[used + used_len:]
    if code not in MULTIHASH_CODES:
        raise ValueError(f"Unknown multihash function code 0x{code:x}")
    name, expected = MULTIHASH_CODES[code]
    if length != expected or len(body) != length:
        raise ValueError(f"Multihash length mismatch for {name}")
    return DigestInfo(name, body.hex(), True)

def parse_digest(value: str) -> DigestInfo:
    """
    Recognize a content digest.

    Accepted forms:
    - 64 hex chars (bare SHA-256), optionally prefixed "sha256:"
    - hex-encoded multihash with a known function code and matching length
    - base58btc multihash (CIDv0 style, e.g. "Qm...")

    Raises ValueError when the string is none of these. Format only; the
    digest is never recomputed here.
    """
    text = value.strip()
    if text.lower().startswith("sha256:"):
        text = text[len("sha256:"):]
        if len(text) == 64 and _HEX.match(text):
            return DigestInfo("sha2-256", text.lower(), False)
        raise ValueError("sha256: prefix requires 64 hex characters")

    if _HEX.match(text):
        if len(text) == 64:
            return DigestInfo("sha2-256", text.lower(), False)
        if len(text) % 2 == 0:
            return _parse_multihash(bytes.fromhex(text))
        raise ValueError("Odd-length hex digest")

    if text.startswith("Qm") and len(text) == 46:
        return _parse_multihash(b58decode(text))

    raise ValueError("Not a SHA-256 or multihash digest")
