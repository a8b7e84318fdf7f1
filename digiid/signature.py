"""
MIT License
Copyright (c) 2025 DarekDGB

Signature verification capability for DigiID.

The verifier pipeline only needs one method:

    verify(message, address, signature_b64) -> bool (or awaitable bool)

DigiByteMessageVerifier implements it for the standard wallet
message-signing scheme:

- magic hash: sha256d(varint(len(magic)) || magic || varint(len(msg)) || msg)
- signature: base64 of a 65-byte compact recoverable signature,
  header byte || r || s
- header 27-30 / 31-34: legacy (uncompressed / compressed key)
  header 35-38: P2SH-wrapped P2WPKH, header 39-42: native P2WPKH
- legacy headers are also accepted for segwit addresses (Electrum style)

Contract:
- malformed signature or address -> ValueError
- well-formed signature that does not match the address -> False
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
from dataclasses import dataclass
from typing import Awaitable, Protocol, Tuple, Union

from . import backends as _backends


P2PKH = "p2pkh"
P2SH_P2WPKH = "p2sh-p2wpkh"
P2WPKH = "p2wpkh"

_SIGNATURE_LEN = 65
_HEADER_BASE = 27


@dataclass(frozen=True)
class NetworkParams:
    """Address and message-signing constants for one network."""

    name: str
    message_magic: str
    pubkey_hash_version: int
    script_hash_versions: Tuple[int, ...]
    bech32_hrp: str


DIGIBYTE_MAINNET = NetworkParams(
    name="digibyte",
    message_magic="DigiByte Signed Message:\n",
    pubkey_hash_version=0x1E,
    script_hash_versions=(0x3F, 0x05),
    bech32_hrp="dgb",
)


class SignatureVerifier(Protocol):
    def verify(self, message: str, address: str, signature: str) -> Union[bool, Awaitable[bool]]:
        ...


# ---------------------------------------------------------------------------
# Hash helpers
# ---------------------------------------------------------------------------


def _varint(n: int) -> bytes:
    if n < 0xFD:
        return bytes([n])
    if n <= 0xFFFF:
        return b"\xfd" + n.to_bytes(2, "little")
    if n <= 0xFFFFFFFF:
        return b"\xfe" + n.to_bytes(4, "little")
    return b"\xff" + n.to_bytes(8, "little")


def _sha256d(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def hash160(data: bytes) -> bytes:
    try:
        h = hashlib.new("ripemd160")
    except ValueError:
        raise _backends.SignatureBackendError("ripemd160 is not available in this Python build") from None
    h.update(hashlib.sha256(data).digest())
    return h.digest()


def magic_hash(message: str, network: NetworkParams = DIGIBYTE_MAINNET) -> bytes:
    magic = network.message_magic.encode("utf-8")
    msg = message.encode("utf-8")
    return _sha256d(_varint(len(magic)) + magic + _varint(len(msg)) + msg)


# ---------------------------------------------------------------------------
# Decoding (fail-closed: ValueError on anything malformed)
# ---------------------------------------------------------------------------


def decode_signature(signature: str) -> Tuple[int, bool, str | None, bytes]:
    """
    Split a base64 compact signature.

    Returns (recovery_id, compressed, segwit_type, r||s).
    """
    try:
        raw = base64.b64decode(signature, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Invalid signature encoding (expected base64)") from exc

    if len(raw) != _SIGNATURE_LEN:
        raise ValueError("Invalid signature length")

    flag = raw[0] - _HEADER_BASE
    if flag < 0 or flag > 15:
        raise ValueError("Invalid signature parameter")

    compressed = bool(flag & 12)
    if not flag & 8:
        segwit_type: str | None = None
    elif flag & 4:
        segwit_type = P2WPKH
    else:
        segwit_type = P2SH_P2WPKH
    return flag & 3, compressed, segwit_type, raw[1:]


def decode_address(address: str, network: NetworkParams = DIGIBYTE_MAINNET) -> Tuple[str, bytes]:
    """
    Decode an address into (kind, 20-byte hash).

    Supports legacy P2PKH, P2SH (assumed P2WPKH-wrapped) and native P2WPKH.
    """
    if address.lower().startswith(network.bech32_hrp + "1"):
        bech32 = _backends.import_bech32()
        witver, program = bech32.decode(network.bech32_hrp, address)
        if witver is None or program is None:
            raise ValueError(f"Invalid bech32 address: {address!r}")
        if witver != 0 or len(program) != 20:
            raise ValueError(f"Unsupported witness program in address: {address!r}")
        return P2WPKH, bytes(program)

    base58 = _backends.import_base58()
    try:
        raw = base58.b58decode_check(address)
    except ValueError as exc:
        raise ValueError(f"Invalid base58 address: {address!r}") from exc

    if len(raw) != 21:
        raise ValueError(f"Invalid address payload length: {address!r}")

    version, digest = raw[0], bytes(raw[1:])
    if version == network.pubkey_hash_version:
        return P2PKH, digest
    if version in network.script_hash_versions:
        return P2SH_P2WPKH, digest
    raise ValueError(f"Address version {version:#04x} is not a {network.name} address")


# ---------------------------------------------------------------------------
# Verifier
# ---------------------------------------------------------------------------


class DigiByteMessageVerifier:
    """
    Verify wallet message signatures by public key recovery (coincurve).
    """

    def __init__(self, network: NetworkParams = DIGIBYTE_MAINNET) -> None:
        self.network = network

    def verify(self, message: str, address: str, signature: str) -> bool:
        recovery_id, compressed, segwit_type, rs = decode_signature(signature)
        kind, expected = decode_address(address, self.network)

        if segwit_type is not None and segwit_type != kind:
            return False
        # segwit outputs only commit to compressed keys
        if kind != P2PKH and not compressed:
            return False

        coincurve = _backends.import_coincurve()
        digest = magic_hash(message, self.network)
        try:
            pub = coincurve.PublicKey.from_signature_and_message(
                rs + bytes([recovery_id]), digest, hasher=None
            )
        except Exception as exc:  # noqa: BLE001
            raise ValueError(f"Public key recovery failed: {exc}") from exc

        actual = hash160(pub.format(compressed=compressed))
        if kind == P2SH_P2WPKH:
            actual = hash160(b"\x00\x14" + actual)
        return hmac.compare_digest(actual, expected)


def get_default_verifier(network: NetworkParams = DIGIBYTE_MAINNET) -> DigiByteMessageVerifier:
    """
    Return the verifier for the configured backend.

    Raises SignatureBackendError when the backend is unknown or its
    libraries are missing.
    """
    _backends.require_backend_modules()
    return DigiByteMessageVerifier(network)
