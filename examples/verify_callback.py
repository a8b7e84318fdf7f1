"""
Verifying a DigiID wallet callback.

This simulates a relying party:

1. issue a nonce, remember it (with a timestamp) and build the URI
2. receive the wallet's JSON callback body
3. check the nonce is known and fresh, verify, then consume the nonce

Nonce storage here is an in-memory dict; use a shared store with expiry
(Redis, a database table, ...) in production.
"""

from __future__ import annotations

import logging
import time
from typing import Dict

from digiid import CallbackPayload, DigiIDError, generate_nonce, parse_challenge_uri, verify_callback_sync
from digiid.integration import DigiIDServiceConfig, build_login_uri

logger = logging.getLogger("digiid.example")

NONCE_EXPIRY_SECONDS = 300

_nonce_store: Dict[str, float] = {}


def issue_login_uri(service: DigiIDServiceConfig) -> str:
    nonce = generate_nonce()
    _nonce_store[nonce] = time.time()
    logger.info("Issued DigiID nonce %s", nonce)
    return build_login_uri(service, nonce)


def handle_callback(service: DigiIDServiceConfig, body: bytes) -> Dict[str, object]:
    """Return the JSON response a callback endpoint would send."""
    try:
        payload = CallbackPayload.from_json(body)
        nonce = parse_challenge_uri(payload.uri).nonce
    except DigiIDError as exc:
        logger.warning("DigiID callback rejected (%s): %s", exc.kind.value, exc)
        return {"status": "error", "reason": str(exc)}

    issued_at = _nonce_store.get(nonce)
    if issued_at is None or time.time() - issued_at > NONCE_EXPIRY_SECONDS:
        _nonce_store.pop(nonce, None)
        logger.warning("DigiID nonce unknown or expired: %s", nonce)
        return {"status": "error", "reason": "Invalid or expired nonce."}

    try:
        result = verify_callback_sync(payload, service.callback_url, expected_nonce=nonce)
    except DigiIDError as exc:
        logger.warning("DigiID callback rejected (%s): %s", exc.kind.value, exc)
        return {"status": "error", "reason": str(exc)}

    # consume: a nonce authenticates at most once
    del _nonce_store[nonce]
    logger.info("DigiID login verified for %s", result.address)
    return {"status": "ok", **result.to_dict()}


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    service = DigiIDServiceConfig(callback_url="https://example.com/digiid/callback")
    uri = issue_login_uri(service)
    print("DigiID URI:", uri)

    # A real wallet would sign `uri`; this body carries a dummy signature,
    # so verification is expected to fail.
    body = (
        '{"address": "DBc7CR4m4jDMjHkGXUoZ5SsxXSPGuW3Frm", '
        f'"uri": "{uri}", '
        '"signature": "H3Jm1qCgfNWl5CB3YR5Ws5Xy4cOLb8pGWLW1CUIKLKGnUGiGhb/dCSkHF/4gvG8QEp8MWBTvMlYx5s6qv5Wwx0Q="}'
    )
    print("Response:", handle_callback(service, body.encode("utf-8")))


if __name__ == "__main__":
    main()
