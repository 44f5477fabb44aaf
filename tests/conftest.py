import sys
from pathlib import Path

import pytest


def _add_repo_root_to_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_add_repo_root_to_path()

from drum_calculator import DrumSpec, PersonSpec  # noqa: E402


@pytest.fixture
def drum() -> DrumSpec:
    # 60 cm diameter, 100 cm tall: π·30²·100 ≈ 282,743 cm³
    return DrumSpec(height=100.0, diameter=60.0)


@pytest.fixture
def person() -> PersonSpec:
    # 30 cm wide, 90 cm tall: π·15²·90 ≈ 63,617 cm³
    return PersonSpec(height=90.0, width=30.0, count=1)
