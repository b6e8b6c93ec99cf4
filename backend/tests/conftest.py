import sys
from pathlib import Path

import pytest

# Add the backend directory to sys.path
sys.path.append(str(Path(__file__).resolve().parent.parent))


@pytest.fixture
def json_path(tmp_path):
    return tmp_path / "urls.json"


@pytest.fixture
def sqlite_path(tmp_path):
    return tmp_path / "urls.sqlite"
