from __future__ import annotations

import pytest

from stubs import StubVerifier


@pytest.fixture
def stub_verifier() -> StubVerifier:
    return StubVerifier(True)


@pytest.fixture(autouse=True)
def _clean_backend_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DIGIID_SIGNATURE_BACKEND", raising=False)
