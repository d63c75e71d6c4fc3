"""Tests for coursetree.config module."""

from __future__ import annotations

import os
from pathlib import Path
from unittest import mock

from coursetree.config import (
    ensure_data_dirs,
    get_data_dir,
    get_exports_dir,
    get_program_schema_path,
    get_programs_json_path,
    get_progress_json_path,
    get_progress_schema_path,
)


class TestPaths:
    """Tests for path helpers."""

    def test_env_var_overrides_data_dir(self, tmp_path: Path) -> None:
        with mock.patch.dict(os.environ, {"COURSETREE_DATA_DIR": str(tmp_path / "x")}):
            assert get_data_dir() == tmp_path / "x"
            assert get_programs_json_path() == tmp_path / "x" / "programs.json"
            assert get_progress_json_path() == tmp_path / "x" / "curriculum_progress.json"

    def test_defaults_to_cwd(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.delenv("COURSETREE_DATA_DIR", raising=False)
        monkeypatch.chdir(tmp_path)

        assert get_data_dir() == tmp_path / ".coursetree"

    def test_bundled_schemas_exist(self) -> None:
        assert get_program_schema_path().is_file()
        assert get_progress_schema_path().is_file()

    def test_ensure_data_dirs(self, data_dir: Path) -> None:
        ensure_data_dirs()

        assert data_dir.is_dir()
        assert get_exports_dir().is_dir()
