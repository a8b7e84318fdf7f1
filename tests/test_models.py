from __future__ import annotations

import dataclasses

import pytest

from digiid import CallbackPayload, DigiIDError, ErrorKind, VerificationResult


def test_callback_payload_from_mapping() -> None:
    p = CallbackPayload.from_mapping({"address": "A", "uri": "U", "signature": "S", "extra": 1})
    assert p == CallbackPayload(address="A", uri="U", signature="S")


def test_callback_payload_missing_keys_become_empty() -> None:
    p = CallbackPayload.from_mapping({"address": "A"})
    assert p.uri == ""
    assert p.signature == ""


def test_callback_payload_rejects_non_mapping() -> None:
    with pytest.raises(DigiIDError) as ei:
        CallbackPayload.from_mapping(["not", "a", "dict"])  # type: ignore[arg-type]
    assert ei.value.kind is ErrorKind.INVALID_INPUT


def test_callback_payload_from_json() -> None:
    p = CallbackPayload.from_json(b'{"address": "A", "uri": "U", "signature": "S"}')
    assert p.address == "A"


@pytest.mark.parametrize("raw", ["{not json", b"\xff\xfe", "[1, 2]"])
def test_callback_payload_from_json_rejects_bad_bodies(raw) -> None:
    with pytest.raises(DigiIDError) as ei:
        CallbackPayload.from_json(raw)
    assert ei.value.kind is ErrorKind.INVALID_INPUT


def test_value_objects_are_frozen() -> None:
    p = CallbackPayload(address="A", uri="U", signature="S")
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.address = "B"  # type: ignore[misc]

    r = VerificationResult(address="A", nonce="N")
    assert r.is_valid is True
    with pytest.raises(dataclasses.FrozenInstanceError):
        r.nonce = "M"  # type: ignore[misc]


def test_digiid_error_carries_kind_and_context() -> None:
    err = DigiIDError(ErrorKind.ENDPOINT_MISMATCH, "boom", {"received": "a"})
    assert isinstance(err, ValueError)
    assert err.kind is ErrorKind.ENDPOINT_MISMATCH
    assert err.message == "boom"
    assert err.context == {"received": "a"}
    assert str(err) == "boom"
    assert ErrorKind("nonce_mismatch") is ErrorKind.NONCE_MISMATCH
