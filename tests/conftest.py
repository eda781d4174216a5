# tests/conftest.py
import os
import sys
from pathlib import Path

import pytest

# ---------- Env defaults, must be set before the app is imported ----------
os.environ.setdefault("CONTROL_WORKER_SHARED_SECRET", "test-secret")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

# ---------- Ensure project root on sys.path ----------
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from normalizer import build_key_builder  # noqa: E402
from schemas import NormalizerConfig  # noqa: E402


FULL_CONFIG_YAML = """\
normalizer:
  getParamWithEventIdentifier: op
  replaceRules:
    - regexp: "^/v2/orders/"
      replacement: /legacy
  sanitizeHashes: true
  sanitizeNumbers: true
  sanitizeUuids: true
  sanitizeIps: true
  sanitizeImages: true
  sanitizeFonts: true
"""


@pytest.fixture
def full_config() -> NormalizerConfig:
    """Every heuristic on, one rewrite rule, keyed by the `op` parameter."""
    return NormalizerConfig(
        get_param_with_event_identifier="op",
        replace_rules=[{"regexp": "^/v2/orders/", "replacement": "/legacy"}],
        sanitize_hashes=True,
        sanitize_numbers=True,
        sanitize_uuids=True,
        sanitize_ips=True,
        sanitize_images=True,
        sanitize_fonts=True,
    )


@pytest.fixture
def builder(full_config):
    return build_key_builder(full_config)


@pytest.fixture
def config_file(tmp_path):
    def _write(content: str = FULL_CONFIG_YAML, name: str = "normalizer.yaml") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def client(config_file, monkeypatch):
    from fastapi.testclient import TestClient

    from config import settings
    from main import app

    monkeypatch.setattr(settings, "NORMALIZER_CONFIG_PATH", str(config_file()))
    with TestClient(app) as c:
        yield c
