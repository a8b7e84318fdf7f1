"""
Tests for digiid:// URI building.
"""

from __future__ import annotations

import pytest

from digiid import DigiIDError, ErrorKind, authority_and_path, build_uri, generate_nonce


FIXED_NONCE = "61616161616161616161616161616161"


def _fixed_bytes(n: int) -> bytes:
    return b"a" * n


def test_build_uri_default_nonce_and_secure_flag() -> None:
    uri = build_uri("https://example.com/callback", random_bytes=_fixed_bytes)
    assert uri == f"digiid://example.com/callback?x={FIXED_NONCE}&u=0"


def test_build_uri_uses_provided_nonce_verbatim() -> None:
    uri = build_uri("https://example.com/callback", nonce="my-custom-nonce-123")
    assert uri == "digiid://example.com/callback?x=my-custom-nonce-123&u=0"


def test_build_uri_keeps_deep_path() -> None:
    uri = build_uri("https://sub.domain.org/deep/path/auth", random_bytes=_fixed_bytes)
    assert uri == f"digiid://sub.domain.org/deep/path/auth?x={FIXED_NONCE}&u=0"


def test_build_uri_unsecure_http_sets_flag_1() -> None:
    uri = build_uri("http://localhost:3000/login", unsecure=True, random_bytes=_fixed_bytes)
    assert uri == f"digiid://localhost:3000/login?x={FIXED_NONCE}&u=1"


def test_build_uri_drops_query_and_fragment() -> None:
    uri = build_uri("https://example.com/cb?session=1#frag", nonce="n1")
    assert uri == "digiid://example.com/cb?x=n1&u=0"


def test_build_uri_preserves_trailing_slash() -> None:
    assert build_uri("https://example.com/cb/", nonce="n") == "digiid://example.com/cb/?x=n&u=0"
    assert build_uri("https://example.com/cb", nonce="n") == "digiid://example.com/cb?x=n&u=0"


def test_build_uri_bare_host_gets_root_path() -> None:
    assert build_uri("https://example.com", nonce="n") == "digiid://example.com/?x=n&u=0"


def test_build_uri_host_normalization() -> None:
    assert build_uri("https://EXAMPLE.com:443/cb", nonce="n") == "digiid://example.com/cb?x=n&u=0"
    assert build_uri("https://example.com:8443/cb", nonce="n") == "digiid://example.com:8443/cb?x=n&u=0"


def test_build_uri_is_deterministic_with_explicit_nonce() -> None:
    a = build_uri("https://example.com/callback", nonce="fixed")
    b = build_uri("https://example.com/callback", nonce="fixed")
    assert a == b


def test_build_uri_random_nonce_differs_between_calls() -> None:
    a = build_uri("https://example.com/callback")
    b = build_uri("https://example.com/callback")
    assert a != b


def test_build_uri_missing_callback_url() -> None:
    with pytest.raises(DigiIDError) as ei:
        build_uri("")
    assert ei.value.kind is ErrorKind.MISSING_INPUT
    assert str(ei.value) == "Callback URL is required."


@pytest.mark.parametrize("bad", ["invalid-url", "myapi.com/auth", "https://", "https://exa mple.com/x", "https://example.com:99999/"])
def test_build_uri_invalid_callback_url(bad: str) -> None:
    with pytest.raises(DigiIDError) as ei:
        build_uri(bad)
    assert ei.value.kind is ErrorKind.INVALID_INPUT
    assert str(ei.value).startswith("Invalid callback URL:")
    assert isinstance(ei.value.__cause__, ValueError)


def test_build_uri_unsecure_requires_http() -> None:
    with pytest.raises(DigiIDError) as ei:
        build_uri("https://example.com", unsecure=True)
    assert ei.value.kind is ErrorKind.SCHEME_MISMATCH
    assert str(ei.value) == "Unsecure flag is true, but callback URL does not use http protocol."


def test_build_uri_secure_requires_https() -> None:
    with pytest.raises(DigiIDError) as ei:
        build_uri("http://example.com")
    assert ei.value.kind is ErrorKind.SCHEME_MISMATCH
    assert str(ei.value) == "Callback URL must use https protocol unless unsecure flag is set to true."


@pytest.mark.parametrize("unsecure", [True, False])
def test_build_uri_rejects_other_schemes(unsecure: bool) -> None:
    with pytest.raises(DigiIDError) as ei:
        build_uri("ftp://example.com/cb", unsecure=unsecure)
    assert ei.value.kind is ErrorKind.SCHEME_MISMATCH


def test_generate_nonce_is_lowercase_hex_of_16_bytes() -> None:
    nonce = generate_nonce()
    assert len(nonce) == 32
    assert nonce == nonce.lower()
    int(nonce, 16)


def test_generate_nonce_uses_injected_source() -> None:
    calls = []

    def source(n: int) -> bytes:
        calls.append(n)
        return bytes(range(n))

    assert generate_nonce(random_bytes=source) == bytes(range(16)).hex()
    assert calls == [16]


def test_generate_nonce_rejects_short_entropy() -> None:
    with pytest.raises(ValueError):
        generate_nonce(8)
    with pytest.raises(ValueError):
        generate_nonce(random_bytes=lambda n: b"short")


@pytest.mark.parametrize(
    "url",
    [
        "https://example.com/callback",
        "https://example.com/a/b/c/",
        "http://localhost:8080/dev/callback",
    ],
)
def test_authority_and_path_roundtrips_through_built_uri(url: str) -> None:
    unsecure = url.startswith("http://")
    uri = build_uri(url, nonce="n", unsecure=unsecure)
    embedded = uri[len("digiid://") : uri.index("?")]
    assert embedded == authority_and_path(url)


def test_build_uri_percent_encodes_space_in_path() -> None:
    uri = build_uri("https://example.com/my callback", nonce="n1")
    assert uri == "digiid://example.com/my%20callback?x=n1&u=0"


def test_build_uri_percent_encodes_non_ascii_path() -> None:
    uri = build_uri("https://example.com/café", nonce="n1")
    assert uri == "digiid://example.com/caf%C3%A9?x=n1&u=0"


def test_build_uri_keeps_existing_escapes_and_sub_delims() -> None:
    uri = build_uri("https://example.com/a%20b/c;v=1/@user", nonce="n1")
    assert uri == "digiid://example.com/a%20b/c;v=1/@user?x=n1&u=0"
