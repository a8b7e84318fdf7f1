"""
MIT License
Copyright (c) 2025 DarekDGB

Error taxonomy for DigiID.

A single exception type is raised for every protocol-level failure. The
`kind` attribute tells callers which check failed; `context` carries the
offending values for diagnostics (never secrets).
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional


class ErrorKind(str, Enum):
    MISSING_INPUT = "missing_input"
    INVALID_INPUT = "invalid_input"
    SCHEME_MISMATCH = "scheme_mismatch"
    MALFORMED_CHALLENGE = "malformed_challenge"
    ENDPOINT_MISMATCH = "endpoint_mismatch"
    NONCE_MISMATCH = "nonce_mismatch"
    INVALID_SIGNATURE = "invalid_signature"
    VERIFICATION_FAILURE = "verification_failure"


class DigiIDError(ValueError):
    """
    Raised when building a DigiID URI or verifying a callback fails.

    Subclasses ValueError so callers that only care about "bad input" can
    keep catching ValueError.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})

    def __repr__(self) -> str:
        return f"DigiIDError(kind={self.kind.value!r}, message={self.message!r})"
