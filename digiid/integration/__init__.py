"""
MIT License
Copyright (c) 2025 DarekDGB

Integration helpers for DigiID.

Thin wrappers that bind a relying party's configuration to the core
URI builder and callback verifier.
"""

from .relying_party import DigiIDServiceConfig, build_login_uri, verify_login_callback

__all__ = ["DigiIDServiceConfig", "build_login_uri", "verify_login_callback"]
