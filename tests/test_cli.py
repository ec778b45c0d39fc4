"""
Tests for the command line entry point.
"""
import json
import pytest
from pathlib import Path


META_TEXT = '<?xml version="1.0" encoding="UTF-8"?>\n<CPedVariationInfo type="ShopPedApparel">\n'


@pytest.fixture
def addon_dir(tmp_path):
    folder = tmp_path / "addon"
    folder.mkdir()
    for gender in ("m", "f"):
        (folder / f"mp_{gender}_freemode_01_tshirt.meta").write_text(META_TEXT, encoding="utf-8")
        (folder / f"mp_{gender}_freemode_01_tshirt^jbib_000_u.ydd").write_bytes(b"ydd")
    return folder


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"temp_root": str(tmp_path / "tmp")}), encoding="utf-8")
    return path


class TestCli:

    def test_no_command_prints_help(self, capsys):
        from clothtool.cli import main

        assert main([]) == 2
        assert "usage" in capsys.readouterr().out.lower()

    def test_scan(self, addon_dir, config_file, capsys):
        from clothtool.cli import main

        metas = sorted(str(p) for p in addon_dir.glob("*.meta"))
        assert main(["--config", str(config_file), "scan", *metas]) == 0

        out = capsys.readouterr().out
        assert "Suggested name: tshirt" in out
        assert "Drawables: 2 in 2 .meta file(s)" in out

    def test_scan_nothing_valid(self, tmp_path, config_file):
        from clothtool.cli import main

        bogus = tmp_path / "bogus.meta"
        bogus.write_text("nope", encoding="utf-8")
        assert main(["--config", str(config_file), "scan", str(bogus)]) == 1

    def test_open_with_yes(self, addon_dir, config_file, capsys):
        from clothtool.cli import main

        metas = sorted(str(p) for p in addon_dir.glob("*.meta"))
        assert main(["--config", str(config_file), "open", "-y", *metas]) == 0

        out = capsys.readouterr().out
        assert "Project: tshirt (external)" in out
        assert "mp_m_freemode_01_tshirt: 1 drawable(s)" in out

    def test_open_with_name_and_answers(self, addon_dir, config_file, capsys, monkeypatch):
        from clothtool.cli import main

        answers = iter(["y", ""])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
        meta = str(addon_dir / "mp_m_freemode_01_tshirt.meta")

        assert main(["--config", str(config_file), "open", "--name", "shirts", meta]) == 0
        assert "Project: shirts (self-contained)" in capsys.readouterr().out

    def test_open_declined(self, addon_dir, config_file, monkeypatch):
        from clothtool.cli import main

        answers = iter(["", "", "n"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
        meta = str(addon_dir / "mp_m_freemode_01_tshirt.meta")

        assert main(["--config", str(config_file), "open", meta]) == 1

    def test_export_and_import(self, addon_dir, config_file, tmp_path, capsys):
        from clothtool.cli import main

        out_file = tmp_path / "shirts"
        assert main(["--config", str(config_file), "export", str(addon_dir), str(out_file)]) == 0
        assert (tmp_path / "shirts.gctproject").is_file()

        assert main(["--config", str(config_file), "import", str(tmp_path / "shirts.gctproject")]) == 0
        out = capsys.readouterr().out
        assert "Extracted to:" in out
        assert "Project: shirts" in out

    def test_import_corrupt(self, tmp_path, config_file):
        from clothtool.cli import main

        bad = tmp_path / "bad.gctproject"
        bad.write_bytes(b"\x00" * 64)
        assert main(["--config", str(config_file), "import", str(bad)]) == 1

    def test_clean(self, tmp_path, config_file):
        from clothtool.cli import main

        leftover = tmp_path / "tmp" / "clothtool_import" / "old"
        leftover.mkdir(parents=True)

        assert main(["--config", str(config_file), "clean"]) == 0
        assert not (tmp_path / "tmp" / "clothtool_import").exists()

    def test_config_saves_changes(self, tmp_path, capsys):
        from clothtool.cli import main
        from clothtool.config import load_config

        path = tmp_path / "settings" / "config.json"
        projects = tmp_path / "projects"
        assert main(["--config", str(path), "config", "--projects-folder", str(projects), "--log-level", "debug"]) == 0

        saved = load_config(path)
        assert saved["projects_folder"] == str(projects)
        assert saved["log_level"] == "DEBUG"
        assert f"projects_folder = {projects}" in capsys.readouterr().out

    def test_config_without_changes_only_prints(self, tmp_path, capsys):
        from clothtool.cli import main

        path = tmp_path / "config.json"
        assert main(["--config", str(path), "config"]) == 0
        assert not path.exists()
        assert "log_level = INFO" in capsys.readouterr().out

    @pytest.mark.parametrize("cmd", [["scan", "a.meta"], ["export", "build", "out"]])
    def test_confirm_flags_only_where_used(self, cmd):
        from clothtool.cli import main

        with pytest.raises(SystemExit):
            main([*cmd, "--yes"])
