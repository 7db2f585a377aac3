import importlib
import sys

import pytest


def _cleanup_main_module():
    sys.modules.pop("pongrank.main", None)


@pytest.fixture(autouse=True)
def main_import_isolation():
    _cleanup_main_module()
    try:
        yield
    finally:
        _cleanup_main_module()


def test_rejects_wildcard_origin(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", "*")
    monkeypatch.setenv("ALLOW_CREDENTIALS", "true")
    with pytest.raises(ValueError):
        importlib.import_module("pongrank.main")


def test_requires_allowed_origins(monkeypatch):
    monkeypatch.delenv("ALLOWED_ORIGINS", raising=False)
    monkeypatch.delenv("ALLOW_CREDENTIALS", raising=False)
    with pytest.raises(ValueError):
        importlib.import_module("pongrank.main")


def test_blank_origin_list_is_rejected(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", " , ")
    with pytest.raises(ValueError):
        importlib.import_module("pongrank.main")
