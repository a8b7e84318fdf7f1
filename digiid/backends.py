"""
MIT License
Copyright (c) 2025 DarekDGB

Signature backend selection + wiring for DigiID.

Design goals:
- No hard dependency at import time: crypto libraries are imported lazily,
  the first time a real verification is requested.
- No silent fallback: an unknown backend name or a missing library raises
  SignatureBackendError instead of degrading to a weaker check.
- Deterministic for tests: module caches below can be monkeypatched to a
  fake module, or to None to simulate "not installed".
"""

from __future__ import annotations

import importlib
import os
from typing import Any, Callable


SIGNATURE_BACKEND_ENV = "DIGIID_SIGNATURE_BACKEND"
COINCURVE_BACKEND = "coincurve"
SUPPORTED_BACKENDS = (COINCURVE_BACKEND,)

_INSTALL_HINT = 'Install optional deps: pip install -e ".[signature]"'


class SignatureBackendError(RuntimeError):
    pass


# Three states per cached module:
# - _UNSET: import not attempted yet (normal runtime)
# - None: explicitly disabled (tests)
# - module: cached imported (or fake) module
class _Unset:
    pass


_UNSET = _Unset()
coincurve: Any = _UNSET
base58: Any = _UNSET
bech32: Any = _UNSET


def selected_backend() -> str:
    """
    Return the normalized backend name from DIGIID_SIGNATURE_BACKEND.

    Unset or blank means the default (coincurve).
    """
    raw = os.getenv(SIGNATURE_BACKEND_ENV)
    if raw is None:
        return COINCURVE_BACKEND
    s = raw.strip().lower()
    return s or COINCURVE_BACKEND


def enforce_selected_backend() -> str:
    backend = selected_backend()
    if backend not in SUPPORTED_BACKENDS:
        raise SignatureBackendError(f"Unknown {SIGNATURE_BACKEND_ENV}: {backend!r}")
    return backend


def _validate_coincurve(mod: Any) -> None:
    pub = getattr(mod, "PublicKey", None)
    if pub is None or not callable(getattr(pub, "from_signature_and_message", None)):
        raise SignatureBackendError(
            "Invalid coincurve backend object: missing PublicKey.from_signature_and_message"
        )


def _validate_base58(mod: Any) -> None:
    if not callable(getattr(mod, "b58decode_check", None)):
        raise SignatureBackendError("Invalid base58 backend object: missing b58decode_check")


def _validate_bech32(mod: Any) -> None:
    if not callable(getattr(mod, "decode", None)):
        raise SignatureBackendError("Invalid bech32 backend object: missing decode")


def _import_cached(name: str, validate: Callable[[Any], None]) -> Any:
    cached = globals()[name]

    if cached is None:
        raise SignatureBackendError(
            f"{SIGNATURE_BACKEND_ENV}={COINCURVE_BACKEND} selected but {name!r} module is not available."
        )

    if cached is not _UNSET:
        validate(cached)
        return cached

    try:
        mod = importlib.import_module(name)
    except ImportError:
        raise SignatureBackendError(
            f"{SIGNATURE_BACKEND_ENV}={COINCURVE_BACKEND} selected but {name!r} module is not available. "
            f"{_INSTALL_HINT}"
        ) from None

    validate(mod)
    globals()[name] = mod
    return mod


def import_coincurve() -> Any:
    return _import_cached("coincurve", _validate_coincurve)


def import_base58() -> Any:
    return _import_cached("base58", _validate_base58)


def import_bech32() -> Any:
    return _import_cached("bech32", _validate_bech32)


def require_backend_modules() -> None:
    """Import every library the selected backend needs, or raise."""
    enforce_selected_backend()
    import_coincurve()
    import_base58()
    import_bech32()
