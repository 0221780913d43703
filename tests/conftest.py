import os
import pathlib
import sys

import pytest


# Ensure repo root is on PYTHONPATH for direct package imports (e.g. `import cryptomoji`).
_REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch, tmp_path):
    """Every test starts from default configuration, outside any checkout."""
    from cryptomoji.config import reset_config

    for name in list(os.environ):
        if name.startswith('CRYPTOMOJI_'):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def store():
    from cryptomoji.state import InMemoryStateStore

    return InMemoryStateStore()


@pytest.fixture
def private_key():
    from cryptomoji.signing import create_private_key

    return create_private_key()
