import json
import sys
from pathlib import Path

import pytest

# Ensure src package is importable without installation
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))


@pytest.fixture
def write_package():
    """Write a ``package.json`` manifest into a new directory and return the directory."""

    def _write(directory: Path, manifest: dict) -> Path:
        directory.mkdir(parents=True)
        (directory / "package.json").write_text(json.dumps(manifest))
        return directory

    return _write
