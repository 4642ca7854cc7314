# FILE PATH: tests/integration/test_cli_entrypoint.py
# LOCATION: tests/integration/test_cli_entrypoint.py
# DESCRIPTION: Command line tests running main() against a project folder on disk

import json

import pyperclip
import pytest

from codepacker.cli import main, parse_priority_args


def run_cli(*argv):
    with pytest.raises(SystemExit) as exc_info:
        main([str(arg) for arg in argv])
    return exc_info.value.code


@pytest.fixture
def settings_file(tmp_path):
    return tmp_path / "settings.json"


@pytest.mark.integration
class TestCliPacking:
    def test_writes_default_named_output(self, sample_project_dir, settings_file, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        assert run_cli(sample_project_dir, "--settings-file", settings_file) == 0

        outputs = list(tmp_path.glob("webapp_*.txt"))
        assert len(outputs) == 1
        content = outputs[0].read_text(encoding="utf-8")
        assert content.startswith("Folder Structure:\n")
        assert "webapp/src/main.py" in content
        assert "node_modules" not in content

        stdout = capsys.readouterr().out
        assert "Packing complete!" in stdout
        assert "Files included: 6 of 10" in stdout

    def test_format_and_priority(self, sample_project_dir, settings_file, tmp_path):
        output = tmp_path / "ctx.json"
        code = run_cli(
            sample_project_dir,
            "--format", "json",
            "--priority", "src/main.py=5",
            "--output", output,
            "--settings-file", settings_file,
        )
        assert code == 0
        entries = json.loads(output.read_text(encoding="utf-8"))
        assert entries[0] == {
            "path": "webapp/src/main.py",
            "type": "text",
            "content": "def main():\n    return 1\n",
            "priority": 5,
        }

        saved = json.loads(settings_file.read_text(encoding="utf-8"))
        assert saved["outputFormat"] == "json"
        assert saved["filePriorities"] == {"webapp/src/main.py": 5}
        assert saved["recentProjects"][0]["name"] == "webapp"

    def test_saved_format_is_reused(self, sample_project_dir, settings_file, tmp_path):
        run_cli(sample_project_dir, "--format", "xml", "--output", tmp_path / "a.txt", "--settings-file", settings_file)
        run_cli(sample_project_dir, "--output", tmp_path / "b.txt", "--settings-file", settings_file)
        assert (tmp_path / "b.txt").read_text(encoding="utf-8").startswith("<?xml")

    def test_exclusion_options(self, sample_project_dir, settings_file, tmp_path):
        output = tmp_path / "out.txt"
        code = run_cli(
            sample_project_dir,
            "--exclude", "tests,*.md",
            "--exclude-path", "src/utils.py",
            "--include-path", "notes.tmp",
            "--output", output,
            "--settings-file", settings_file,
        )
        assert code == 0
        content = output.read_text(encoding="utf-8")
        assert "webapp/src/main.py" in content
        assert "webapp/notes.tmp" in content
        for hidden in ("test_main.py", "README.md", "utils.py"):
            assert hidden not in content

    def test_include_path_under_excluded_folder(self, sample_project_dir, settings_file, tmp_path):
        output = tmp_path / "out.txt"
        code = run_cli(
            sample_project_dir,
            "--exclude-path", "src",
            "--include-path", "src/main.py",
            "--output", output,
            "--settings-file", settings_file,
        )
        assert code == 0
        content = output.read_text(encoding="utf-8")
        assert "def main():" in content
        assert "def helper():" not in content

    def test_preset(self, sample_project_dir, settings_file, tmp_path, capsys):
        output = tmp_path / "out.txt"
        assert run_cli(sample_project_dir, "--preset", "docs-only", "--output", output, "--settings-file", settings_file) == 0
        content = output.read_text(encoding="utf-8")
        assert "webapp/README.md" in content
        assert "main.py" not in content
        assert 'Applied "docs-only" preset.' in capsys.readouterr().out

    def test_show_tree(self, sample_project_dir, settings_file, tmp_path, capsys):
        run_cli(sample_project_dir, "--show-tree", "--output", tmp_path / "o.txt", "--settings-file", settings_file)
        stdout = capsys.readouterr().out
        assert "[x] 📁 webapp" in stdout
        assert "[ ]     📁 node_modules" in stdout

    def test_full_tree_of_large_project(self, sample_project_dir, settings_file, tmp_path, capsys):
        run_cli(
            sample_project_dir,
            "--full-tree",
            "--lazy-threshold", "3",
            "--output", tmp_path / "o.txt",
            "--settings-file", settings_file,
        )
        stdout = capsys.readouterr().out
        assert "Large project detected" not in stdout
        assert "[x] 📁 webapp" in stdout
        assert "[ ]     📁 node_modules" in stdout
        assert "[x]     📄 README.md" in stdout

    def test_copy_to_clipboard(self, sample_project_dir, settings_file, tmp_path, monkeypatch):
        copied = []
        monkeypatch.setattr(pyperclip, "copy", copied.append)
        output = tmp_path / "o.txt"
        assert run_cli(sample_project_dir, "--copy", "--output", output, "--settings-file", settings_file) == 0
        assert copied == [output.read_text(encoding="utf-8")]

    def test_clipboard_failure_is_not_fatal(self, sample_project_dir, settings_file, tmp_path, monkeypatch, capsys):
        def broken_copy(text):
            raise pyperclip.PyperclipException("no clipboard")

        monkeypatch.setattr(pyperclip, "copy", broken_copy)
        assert run_cli(sample_project_dir, "--copy", "--output", tmp_path / "o.txt", "--settings-file", settings_file) == 0
        assert "Failed to copy to clipboard." in capsys.readouterr().err


@pytest.mark.integration
class TestCliPresets:
    def test_export_then_import(self, sample_project_dir, settings_file, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        run_cli(sample_project_dir, "--exclude", "tests", "--export-preset", "Team Rules", "--output", "a.txt", "--settings-file", settings_file)
        preset_path = tmp_path / "code-packer-preset-team-rules.json"
        preset = json.loads(preset_path.read_text(encoding="utf-8"))
        assert preset["customPatterns"] == "tests"

        assert run_cli(sample_project_dir, "--import-preset", preset_path, "--output", "b.txt", "--settings-file", settings_file) == 0
        assert "test_main.py" not in (tmp_path / "b.txt").read_text(encoding="utf-8")

    def test_import_preset_keeps_exclude_patterns(self, sample_project_dir, settings_file, tmp_path):
        preset_path = tmp_path / "preset.json"
        preset_path.write_text(
            json.dumps({"name": "team", "customPatterns": "tests", "version": "1.0"}),
            encoding="utf-8",
        )
        output = tmp_path / "out.txt"
        code = run_cli(
            sample_project_dir,
            "--import-preset", preset_path,
            "--exclude", "*.md",
            "--output", output,
            "--settings-file", settings_file,
        )
        assert code == 0
        content = output.read_text(encoding="utf-8")
        assert "webapp/src/main.py" in content
        assert "test_main.py" not in content
        assert "README.md" not in content

    def test_invalid_preset_file(self, sample_project_dir, settings_file, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text('{"customPatterns": "x"}', encoding="utf-8")
        assert run_cli(sample_project_dir, "--import-preset", bad, "--settings-file", settings_file) == 1
        assert "Error importing preset" in capsys.readouterr().out


@pytest.mark.integration
class TestCliErrors:
    def test_invalid_directory(self, tmp_path, capsys):
        assert run_cli(tmp_path / "missing") == 1
        assert "Invalid directory" in capsys.readouterr().out

    def test_empty_directory(self, tmp_path, settings_file):
        empty = tmp_path / "empty"
        empty.mkdir()
        assert run_cli(empty, "--settings-file", settings_file) == 1

    def test_malformed_priority(self, sample_project_dir, settings_file):
        assert run_cli(sample_project_dir, "--priority", "main.py", "--settings-file", settings_file) == 2

    def test_out_of_range_priority(self, sample_project_dir, settings_file):
        assert run_cli(sample_project_dir, "--priority", "src/main.py=9", "--settings-file", settings_file) == 2


class TestParsePriorityArgs:
    def test_parses_path_and_value(self):
        assert parse_priority_args(["src\\a.py=3", "b=c.py=1"]) == [("src/a.py", 3), ("b=c.py", 1)]

    @pytest.mark.parametrize("value", ["noequals", "=3", "a.py=x", "a.py=6", "a.py=-1"])
    def test_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            parse_priority_args([value])
