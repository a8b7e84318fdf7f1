"""
MIT License
Copyright (c) 2025 DarekDGB
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..models import VerificationResult
from ..protocol import CallbackData, verify_callback
from ..signature import SignatureVerifier
from ..uri_scheme import build_uri


@dataclass(frozen=True)
class DigiIDServiceConfig:
    """
    Configuration for a DigiID relying party (service / website).

    - callback_url: endpoint that receives wallet callbacks
    - unsecure: allow a plain http callback (local development only)
    """

    callback_url: str
    unsecure: bool = False


def build_login_uri(service: DigiIDServiceConfig, nonce: Optional[str] = None) -> str:
    """
    Build the digiid:// URI a service shows as a QR code or deep link.

    Pass the nonce you stored for this attempt; without one a random nonce
    is generated and the caller must read it back from the URI.
    """
    return build_uri(service.callback_url, nonce=nonce, unsecure=service.unsecure)


async def verify_login_callback(
    service: DigiIDServiceConfig,
    callback: CallbackData,
    expected_nonce: Optional[str] = None,
    *,
    verifier: Optional[SignatureVerifier] = None,
) -> VerificationResult:
    """
    Verify a wallet callback against the service's own callback URL.
    """
    return await verify_callback(
        callback,
        service.callback_url,
        expected_nonce,
        verifier=verifier,
    )
