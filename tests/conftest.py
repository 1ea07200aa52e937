import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path to allow `import analytics`, `import models`, etc.
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tests.sample_data import mixed_batch  # noqa: E402


@pytest.fixture
def batch():
    """A small batch of eight customers across three categories."""
    return mixed_batch()
