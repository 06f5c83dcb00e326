import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
if SRC.exists():
    sys.path.insert(0, str(SRC))

# Register shared Hypothesis profiles for deterministic CI runs and fast local loops.
from tests.util import hypothesis_profiles  # noqa: E402,F401  pylint: disable=unused-import

_ENV_OVERRIDES = (
    "PROBEMAP_CONFIG",
    "PROBEMAP_INITIAL_CAPACITY",
    "PROBEMAP_PRIME",
    "PROBEMAP_MAX_LOAD_FACTOR",
    "PROBEMAP_SEED",
    "PROBEMAP_SPELLCHECK_CAPACITY",
    "PROBEMAP_SPELLCHECK_ENCODING",
)


@pytest.fixture(autouse=True)
def _clean_probemap_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer shell overrides out of config-sensitive tests."""

    for name in _ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
