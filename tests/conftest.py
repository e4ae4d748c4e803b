# tests/conftest.py
# Ensure src/ is on sys.path so `import cart_promotions` works without installing.
import sys
from datetime import datetime
from pathlib import Path

import pytest

SRC = Path(__file__).resolve().parents[1] / "src"
src_str = str(SRC)
if src_str not in sys.path:
    sys.path.insert(0, src_str)

from cart_promotions.engine import PromotionEngine  # noqa: E402

NOW = datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def engine():
    return PromotionEngine(clock=lambda: NOW)
