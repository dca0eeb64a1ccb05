from pathlib import Path
from typing import Dict, Union

import pytest


def write_files(root: Path, files: Dict[str, Union[str, bytes]]) -> Path:
    """Create ``files`` (relative path -> content) under ``root``."""
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_tree(tmp_path):
    def _make(files):
        return write_files(tmp_path / "notes", files)

    return _make
