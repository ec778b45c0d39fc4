"""
Tests for staging directories and tool configuration.
"""
import json
import pytest
from pathlib import Path


class TestStaging:

    def test_prepare_clears_stale(self, tmp_path):
        from clothtool.staging import staging_area

        area = staging_area("import", tmp_path)
        area.path.mkdir()
        (area.path / "stale.txt").write_text("old", encoding="utf-8")

        path = area.prepare()

        assert path == tmp_path / "clothtool_import"
        assert path.is_dir()
        assert list(path.iterdir()) == []

    def test_cleanup(self, tmp_path):
        from clothtool.staging import staging_area

        area = staging_area("export", tmp_path)
        area.prepare()
        area.cleanup()
        assert not area.path.exists()
        # second cleanup is a no-op
        area.cleanup()

    def test_cleanup_all(self, tmp_path):
        from clothtool.staging import STAGING_DIR_NAMES, cleanup_all, staging_area

        for kind in STAGING_DIR_NAMES:
            staging_area(kind, tmp_path).prepare()
        (tmp_path / "keep.txt").write_text("x", encoding="utf-8")

        cleanup_all(tmp_path)

        assert [p.name for p in tmp_path.iterdir()] == ["keep.txt"]

    def test_ensure_keeps_contents(self, tmp_path):
        from clothtool.staging import staging_area

        area = staging_area("import", tmp_path)
        build = area.ensure() / "shirts_1"
        build.mkdir()

        assert area.ensure() == tmp_path / "clothtool_import"
        assert build.is_dir()

    def test_discard_removes_only_one_build(self, tmp_path):
        from clothtool.errors import StagingError
        from clothtool.staging import staging_area

        area = staging_area("import", tmp_path)
        keep = area.ensure() / "alpha_1"
        drop = area.path / "beta_2"
        keep.mkdir()
        drop.mkdir()

        area.discard(drop)
        area.discard(drop)

        assert keep.is_dir()
        assert not drop.exists()
        with pytest.raises(StagingError):
            area.discard(tmp_path / "elsewhere")

    def test_unknown_kind(self, tmp_path):
        from clothtool.errors import StagingError
        from clothtool.staging import staging_area

        with pytest.raises(StagingError):
            staging_area("dragdrop", tmp_path)

    def test_default_root_is_system_temp(self):
        import tempfile
        from clothtool.staging import staging_area

        assert staging_area("import").temp_root == Path(tempfile.gettempdir())


class TestConfig:

    def test_defaults_when_missing(self, tmp_path):
        from clothtool.config import DEFAULTS, load_config

        assert load_config(tmp_path / "none.json") == DEFAULTS

    def test_save_and_load(self, tmp_path):
        from clothtool.config import load_config, save_config, projects_folder, temp_root

        path = tmp_path / "cfg" / "config.json"
        assert save_config({"projects_folder": str(tmp_path / "projects"), "bogus": 1}, path) is True

        cfg = load_config(path)
        assert cfg["projects_folder"] == str(tmp_path / "projects")
        assert cfg["log_level"] == "INFO"
        assert "bogus" not in cfg
        assert projects_folder(cfg) == tmp_path / "projects"
        assert temp_root(cfg) is None

    def test_unreadable_config_falls_back(self, tmp_path):
        from clothtool.config import DEFAULTS, load_config

        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_config(path) == DEFAULTS

    def test_env_override(self, tmp_path, monkeypatch):
        from clothtool.config import CONFIG_ENV, config_path, load_config

        path = tmp_path / "env.json"
        path.write_text(json.dumps({"log_level": "DEBUG"}), encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV, str(path))

        assert config_path() == path
        assert load_config()["log_level"] == "DEBUG"
