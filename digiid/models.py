"""
MIT License
Copyright (c) 2025 DarekDGB

Value objects exchanged with DigiID callers.

- CallbackPayload: what a wallet POSTs back to the callback endpoint.
- ParsedChallenge: the pieces of a digiid:// URI the verifier cross-checks.
- VerificationResult: returned only when every check passed.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Literal, Mapping

from .errors import DigiIDError, ErrorKind


@dataclass(frozen=True)
class CallbackPayload:
    """
    Wallet callback body.

    - address: DigiByte address that signed the challenge
    - uri: the digiid:// challenge exactly as it was signed
    - signature: base64 compact signature over `uri`
    """

    address: str
    uri: str
    signature: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CallbackPayload":
        """
        Build a payload from a decoded JSON body.

        Missing keys become empty strings; presence is enforced by the
        verifier so the error kind stays the same for every entry point.
        """
        if not isinstance(data, Mapping):
            raise DigiIDError(ErrorKind.INVALID_INPUT, "Callback data must be a JSON object.")

        def _field(name: str) -> str:
            value = data.get(name)
            if value is None:
                return ""
            if not isinstance(value, str):
                raise DigiIDError(
                    ErrorKind.INVALID_INPUT,
                    f"Callback field {name!r} must be a string.",
                    {"field": name},
                )
            return value

        return cls(address=_field("address"), uri=_field("uri"), signature=_field("signature"))

    @classmethod
    def from_json(cls, raw: str | bytes) -> "CallbackPayload":
        try:
            obj = json.loads(raw)
        except ValueError as exc:
            raise DigiIDError(ErrorKind.INVALID_INPUT, f"Callback body is not valid JSON: {exc}") from exc
        return cls.from_mapping(obj)


@dataclass(frozen=True)
class ParsedChallenge:
    authority_and_path: str
    nonce: str
    unsecure_flag: str


@dataclass(frozen=True)
class VerificationResult:
    """
    Successful verification.

    `nonce` comes from the signed URI, not from the caller's expectation,
    so callers can compare it against their own nonce store.
    """

    address: str
    nonce: str
    is_valid: Literal[True] = True

    def to_dict(self) -> Dict[str, Any]:
        return {"isValid": self.is_valid, "address": self.address, "nonce": self.nonce}
