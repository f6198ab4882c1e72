import sys
from pathlib import Path

import pytest

# Allows running the tests from a checkout, without installing the package
sys.path.insert(0, str(Path(__file__).parent.parent / "src" / "py"))

from stitch.host import Capabilities  # NOQA: E402


@pytest.fixture
def noReplay() -> Capabilities:
	"""Capabilities of a host that can't duplicate streams."""
	return Capabilities(replay=False)


# EOF
