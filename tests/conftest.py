from __future__ import annotations

import io
import sys
import types

import pytest


@pytest.fixture(autouse=True)
def _no_real_stdin(monkeypatch):
    monkeypatch.setattr(sys, "stdin", types.SimpleNamespace(buffer=io.BytesIO()))
