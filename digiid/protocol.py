"""
MIT License
Copyright (c) 2025 DarekDGB

Server-side verification of DigiID wallet callbacks.

verify_callback() runs an ordered pipeline; the first failing check raises
DigiIDError and nothing after it runs:

1. presence of address / uri / signature      -> MISSING_INPUT
2. digiid:// URI parse + x/u parameters        -> INVALID_INPUT / MALFORMED_CHALLENGE
3. expected callback URL parse                 -> INVALID_INPUT
4. host+path of URI == expected host+path      -> ENDPOINT_MISMATCH
5. u flag agrees with expected scheme          -> SCHEME_MISMATCH
6. nonce == expected_nonce (when given)        -> NONCE_MISMATCH
7. signature check via the injected verifier   -> INVALID_SIGNATURE / VERIFICATION_FAILURE

Only step 7 may suspend. Replay protection beyond step 6 (expiring and
consuming nonces) is the caller's job.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Mapping, Optional, Union

from .errors import DigiIDError, ErrorKind
from .models import CallbackPayload, VerificationResult
from .signature import SignatureVerifier, get_default_verifier
from .uri_scheme import INSECURE_SCHEME, SECURE_SCHEME, URLLike, parse_callback_url, parse_challenge_uri


CallbackData = Union[CallbackPayload, Mapping[str, Any]]


def _as_payload(callback: CallbackData) -> CallbackPayload:
    if isinstance(callback, CallbackPayload):
        return callback
    return CallbackPayload.from_mapping(callback)


def _check_transport(flag: str, expected_scheme: str) -> None:
    if flag == "1":
        if expected_scheme != INSECURE_SCHEME:
            raise DigiIDError(
                ErrorKind.SCHEME_MISMATCH,
                "URI indicates unsecure (u=1), but expectedCallbackUrl is not http.",
                {"u": flag, "expected_scheme": expected_scheme},
            )
        return
    if flag == "0":
        if expected_scheme != SECURE_SCHEME:
            raise DigiIDError(
                ErrorKind.SCHEME_MISMATCH,
                "URI indicates secure (u=0), but expectedCallbackUrl is not https.",
                {"u": flag, "expected_scheme": expected_scheme},
            )
        return
    raise DigiIDError(
        ErrorKind.SCHEME_MISMATCH,
        f"URI contains unsupported unsecure flag u={flag!r}; expected '0' or '1'.",
        {"u": flag, "expected_scheme": expected_scheme},
    )


async def _check_signature(verifier: Optional[SignatureVerifier], uri: str, address: str, signature: str) -> None:
    try:
        if verifier is None:
            verifier = get_default_verifier()
        ok = verifier.verify(uri, address, signature)
        if inspect.isawaitable(ok):
            ok = await ok
    except DigiIDError:
        raise
    except Exception as exc:
        raise DigiIDError(
            ErrorKind.VERIFICATION_FAILURE,
            f"Signature verification failed: {exc}",
            {"address": address},
        ) from exc

    if not ok:
        raise DigiIDError(ErrorKind.INVALID_SIGNATURE, "Invalid signature.", {"address": address})


async def verify_callback(
    callback: CallbackData,
    expected_callback_url: URLLike,
    expected_nonce: Optional[str] = None,
    *,
    verifier: Optional[SignatureVerifier] = None,
) -> VerificationResult:
    """
    Verify a wallet callback against what the relying party issued.

    Parameters
    ----------
    callback:
        CallbackPayload or the decoded JSON body ({address, uri, signature}).
    expected_callback_url:
        The callback URL used when the URI was built (string or urlsplit result).
    expected_nonce:
        The nonce issued for this attempt. When omitted no nonce check is
        done and replay protection is entirely up to the caller.
    verifier:
        Signature capability. Defaults to the configured backend
        (see digiid.backends).

    Returns a VerificationResult whose nonce is taken from the signed URI.
    """
    payload = _as_payload(callback)
    if not payload.address or not payload.uri or not payload.signature:
        raise DigiIDError(
            ErrorKind.MISSING_INPUT,
            "Missing required callback data: address, uri, or signature.",
        )

    challenge = parse_challenge_uri(payload.uri)

    try:
        expected = parse_callback_url(expected_callback_url)
    except ValueError as exc:
        raise DigiIDError(
            ErrorKind.INVALID_INPUT,
            f"Invalid expectedCallbackUrl provided: {exc}",
        ) from exc

    if challenge.authority_and_path != expected.authority_and_path:
        raise DigiIDError(
            ErrorKind.ENDPOINT_MISMATCH,
            f'Callback URL mismatch: URI contained "{challenge.authority_and_path}", '
            f'expected "{expected.authority_and_path}"',
            {"received": challenge.authority_and_path, "expected": expected.authority_and_path},
        )

    _check_transport(challenge.unsecure_flag, expected.scheme)

    if expected_nonce is not None and challenge.nonce != expected_nonce:
        raise DigiIDError(
            ErrorKind.NONCE_MISMATCH,
            f'Nonce mismatch: URI contained "{challenge.nonce}", expected "{expected_nonce}". '
            "Possible replay attack.",
            {"received": challenge.nonce, "expected": expected_nonce},
        )

    await _check_signature(verifier, payload.uri, payload.address, payload.signature)

    return VerificationResult(address=payload.address, nonce=challenge.nonce)


def verify_callback_sync(
    callback: CallbackData,
    expected_callback_url: URLLike,
    expected_nonce: Optional[str] = None,
    *,
    verifier: Optional[SignatureVerifier] = None,
) -> VerificationResult:
    """Blocking wrapper around verify_callback() for code without an event loop."""
    return asyncio.run(
        verify_callback(callback, expected_callback_url, expected_nonce, verifier=verifier)
    )
