"""
MIT License
Copyright (c) 2025 DarekDGB

DigiID authentication for Python.

- build_uri(...) creates the digiid:// challenge shown to the user
- verify_callback(...) checks the wallet's signed callback
"""

from .backends import SignatureBackendError
from .errors import DigiIDError, ErrorKind
from .models import CallbackPayload, ParsedChallenge, VerificationResult
from .protocol import verify_callback, verify_callback_sync
from .signature import (
    DIGIBYTE_MAINNET,
    DigiByteMessageVerifier,
    NetworkParams,
    SignatureVerifier,
    get_default_verifier,
)
from .uri_scheme import authority_and_path, build_uri, generate_nonce, parse_challenge_uri

__version__ = "1.1.0"

__all__ = [
    "CallbackPayload",
    "DIGIBYTE_MAINNET",
    "DigiByteMessageVerifier",
    "DigiIDError",
    "ErrorKind",
    "NetworkParams",
    "ParsedChallenge",
    "SignatureBackendError",
    "SignatureVerifier",
    "VerificationResult",
    "authority_and_path",
    "build_uri",
    "generate_nonce",
    "get_default_verifier",
    "parse_challenge_uri",
    "verify_callback",
    "verify_callback_sync",
]
