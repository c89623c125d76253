from pathlib import Path

import pytest

from siarni.core.config import AppPaths


@pytest.fixture()
def app_paths(tmp_path: Path) -> AppPaths:
    project_root = tmp_path / "proj"
    project_root.mkdir(parents=True, exist_ok=True)
    return AppPaths(
        project_root=project_root,
        data_dir=project_root / ".siarni",
        db_path=project_root / ".siarni" / "siarni.db",
        archive_dir=project_root / ".siarni" / "archive",
    )
