"""
MIT License
Copyright (c) 2025 DarekDGB

DigiID URI scheme (wire format).

This module is the single source of truth for digiid:// URIs:

    digiid://{host}{path}?x={nonce}&u={0|1}

Rules:
- {host}{path} mirrors the callback URL with scheme, query and fragment
  stripped. The host is lowercased and the scheme's default port dropped;
  the path is percent-encoded like a browser URL (spaces, non-ASCII) and
  otherwise kept verbatim, including a trailing slash.
- u=0 means the callback uses https, u=1 means plain http was explicitly
  allowed.
- The URI is built by literal concatenation; nonces must already be safe
  for a URI query.
- Parsing is strict on the digiid:// prefix and fails closed (DigiIDError).
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Callable, Union
from urllib.parse import ParseResult, SplitResult, parse_qsl, quote, urlsplit

from .errors import DigiIDError, ErrorKind
from .models import ParsedChallenge


DIGIID_SCHEME = "digiid"
SECURE_SCHEME = "https"
INSECURE_SCHEME = "http"

_DIGIID_PREFIX = f"{DIGIID_SCHEME}://"
_DEFAULT_PORTS = {INSECURE_SCHEME: 80, SECURE_SCHEME: 443}

NONCE_BYTES = 16

# characters WHATWG URL parsing leaves unescaped in a path
_PATH_SAFE = "/%:@!$&'()*+,;=[]^|"

RandomBytes = Callable[[int], bytes]
URLLike = Union[str, SplitResult, ParseResult]


@dataclass(frozen=True)
class CallbackURL:
    """Structured view of a callback URL (only what DigiID needs)."""

    scheme: str
    host: str
    path: str

    @property
    def authority_and_path(self) -> str:
        return self.host + self.path


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------


def _format_host(hostname: str, port: int | None, scheme: str | None) -> str:
    host = f"[{hostname}]" if ":" in hostname else hostname
    if port is not None and port != _DEFAULT_PORTS.get(scheme or ""):
        host = f"{host}:{port}"
    return host


def parse_callback_url(url: URLLike) -> CallbackURL:
    """
    Parse an http(s)-style URL into scheme, host and path.

    Raises ValueError with a diagnostic when the value is not an absolute
    URL with a host. Callers wrap it into the DigiID error taxonomy.
    """
    if isinstance(url, (SplitResult, ParseResult)):
        url = url.geturl()
    if not isinstance(url, str):
        raise ValueError(f"expected a URL string, got {type(url).__name__}")

    raw = url.strip()
    parts = urlsplit(raw)
    scheme = parts.scheme.lower()
    if not scheme or not raw[len(scheme) + 1 :].startswith("//"):
        raise ValueError(f"Invalid URL: {url!r}")

    hostname = parts.hostname
    if not hostname or any(c.isspace() for c in hostname):
        raise ValueError(f"Invalid URL: {url!r}")

    # .port raises ValueError for non-numeric or out-of-range ports
    port = parts.port

    path = quote(parts.path, safe=_PATH_SAFE)
    if not path and scheme in _DEFAULT_PORTS:
        path = "/"

    return CallbackURL(scheme=scheme, host=_format_host(hostname, port, scheme), path=path)


def authority_and_path(url: URLLike) -> str:
    """Return `host + path` of a callback URL, the part a DigiID URI embeds."""
    return parse_callback_url(url).authority_and_path


def _extract_query_param(query: str, key: str) -> str | None:
    for k, v in parse_qsl(query, keep_blank_values=True):
        if k == key:
            return v
    return None


# ---------------------------------------------------------------------------
# Nonce
# ---------------------------------------------------------------------------


def generate_nonce(length: int = NONCE_BYTES, random_bytes: RandomBytes = secrets.token_bytes) -> str:
    """
    Generate a lowercase hex nonce from `length` random bytes.

    `random_bytes` is injectable so tests can supply deterministic bytes.
    """
    if length < NONCE_BYTES:
        raise ValueError(f"nonce needs at least {NONCE_BYTES} bytes of entropy")
    raw = random_bytes(length)
    if len(raw) != length:
        raise ValueError("random source returned the wrong number of bytes")
    return raw.hex()


# ---------------------------------------------------------------------------
# Build / parse
# ---------------------------------------------------------------------------


def build_uri(
    callback_url: str,
    *,
    nonce: str | None = None,
    unsecure: bool = False,
    random_bytes: RandomBytes = secrets.token_bytes,
) -> str:
    """
    Build a digiid:// challenge URI for `callback_url`.

    - nonce: used verbatim when given, else a fresh 16-byte hex nonce
    - unsecure: allow a plain http callback (u=1); https otherwise (u=0)

    Raises DigiIDError (MISSING_INPUT, INVALID_INPUT, SCHEME_MISMATCH).
    """
    if not callback_url:
        raise DigiIDError(ErrorKind.MISSING_INPUT, "Callback URL is required.")

    try:
        parsed = parse_callback_url(callback_url)
    except ValueError as exc:
        raise DigiIDError(
            ErrorKind.INVALID_INPUT,
            f"Invalid callback URL: {exc}",
            {"callback_url": callback_url},
        ) from exc

    if not nonce:
        nonce = generate_nonce(random_bytes=random_bytes)

    if unsecure and parsed.scheme != INSECURE_SCHEME:
        raise DigiIDError(
            ErrorKind.SCHEME_MISMATCH,
            "Unsecure flag is true, but callback URL does not use http protocol.",
            {"scheme": parsed.scheme},
        )
    if not unsecure and parsed.scheme != SECURE_SCHEME:
        raise DigiIDError(
            ErrorKind.SCHEME_MISMATCH,
            "Callback URL must use https protocol unless unsecure flag is set to true.",
            {"scheme": parsed.scheme},
        )

    flag = "1" if unsecure else "0"
    return f"{_DIGIID_PREFIX}{parsed.authority_and_path}?x={nonce}&u={flag}"


def _invalid_challenge(uri: str, reason: str) -> DigiIDError:
    return DigiIDError(ErrorKind.INVALID_INPUT, f"Invalid URI received in callback: {reason}", {"uri": uri})


def parse_challenge_uri(uri: str) -> ParsedChallenge:
    """
    Parse a digiid:// URI returned by a wallet.

    Grammar is checked before any URL parsing so lenient parsers never
    accept a malformed prefix (e.g. `digiid:/host` or `digiid:host`).
    """
    if not isinstance(uri, str) or not uri.startswith(_DIGIID_PREFIX):
        raise _invalid_challenge(str(uri), f"missing {_DIGIID_PREFIX!r} prefix.")
    if any(c.isspace() for c in uri):
        raise _invalid_challenge(uri, "URI must not contain whitespace.")

    rest = uri[len(_DIGIID_PREFIX) :]
    if "?" not in rest:
        raise _invalid_challenge(uri, "missing query part.")

    netloc = rest.split("?", 1)[0].split("/", 1)[0].split("#", 1)[0]
    if not netloc:
        raise _invalid_challenge(uri, "missing host.")
    if "@" in netloc:
        raise _invalid_challenge(uri, "user info is not allowed.")

    try:
        parts = urlsplit(uri)
        hostname = parts.hostname
        port = parts.port
    except ValueError as exc:
        raise _invalid_challenge(uri, str(exc)) from exc
    if not hostname:
        raise _invalid_challenge(uri, "missing host.")

    nonce = _extract_query_param(parts.query, "x")
    flag = _extract_query_param(parts.query, "u")
    if not nonce or not flag:
        raise DigiIDError(
            ErrorKind.MALFORMED_CHALLENGE,
            "URI missing nonce (x) or unsecure (u) parameter.",
            {"uri": uri},
        )

    # digiid has no default port: keep whatever the URI carries.
    return ParsedChallenge(
        authority_and_path=_format_host(hostname, port, None) + (parts.path or "/"),
        nonce=nonce,
        unsecure_flag=flag,
    )
