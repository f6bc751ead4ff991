"""Command-line interface tests."""

import json
from pathlib import Path

import pytest

from podita import __version__
from podita.cli import main


@pytest.fixture
def chapters(tmp_path: Path) -> list[Path]:
    one = tmp_path / "ch01.pod"
    one.write_text("=head1 One Z<one>\n\nSee L<two>.\n", encoding="utf-8")
    two = tmp_path / "ch02.pod"
    two.write_text("=head1 Two Z<two>\n\nB<Bold> text.\n", encoding="utf-8")
    return [one, two]


class TestRender:
    def test_to_stdout(self, chapters: list[Path], capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["render", str(chapters[1])]) == 0
        out = capsys.readouterr().out
        assert out == (
            '<section id="two">\n<h1>Two</h1>\n<p><strong>Bold</strong> text.</p>\n</section>\n'
        )

    def test_warnings_go_to_stderr(
        self, chapters: list[Path], capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main(["render", str(chapters[0])]) == 0
        err = capsys.readouterr().err
        assert f"warning: {chapters[0]}:3:5 unresolved reference L<two>" in err

    def test_shared_anchors(self, chapters: list[Path], capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["render", "--shared-anchors", *map(str, chapters)]) == 0
        captured = capsys.readouterr()
        assert captured.err == ""
        assert '<a class="xref" href="ch02.html#two">Two</a>' in captured.out

    def test_output_dir(self, chapters: list[Path], tmp_path: Path) -> None:
        out_dir = tmp_path / "out"
        assert main(["render", "-o", str(out_dir), "-j", "2", *map(str, chapters)]) == 0
        assert sorted(p.name for p in out_dir.iterdir()) == ["ch01.html", "ch02.html"]
        assert "<h1>Two</h1>" in (out_dir / "ch02.html").read_text(encoding="utf-8")

    def test_plain_with_offset(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        source = tmp_path / "old.pod"
        source.write_text("=head0 Old\n\nText.\n", encoding="utf-8")
        assert main(["render", "--format", "plain", "--heading-offset", "1", str(source)]) == 0
        captured = capsys.readouterr()
        assert captured.out == "=head2 Old\n\nText.\n"
        assert "deprecated" in captured.err

    def test_fatal_error_sets_exit_status(
        self, chapters: list[Path], tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        broken = tmp_path / "broken.pod"
        broken.write_text("=begin sidebar\n\ntext\n", encoding="utf-8")
        assert main(["render", str(broken), str(chapters[1])]) == 1
        captured = capsys.readouterr()
        assert f"error: {broken}:1:1 =begin sidebar opened at line 1 is never closed" in captured.err
        assert "<h1>Two</h1>" in captured.out

    def test_strict(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        source = tmp_path / "x.pod"
        source.write_text("=frobnicate\n", encoding="utf-8")
        assert main(["render", str(source)]) == 0
        assert main(["render", "--strict", str(source)]) == 1
        assert "unknown directive =frobnicate" in capsys.readouterr().err

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["render", str(tmp_path / "nope.pod")]) == 1
        assert "nope.pod" in capsys.readouterr().err


class TestCheck:
    def test_reports_status(self, chapters: list[Path], capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["check", *map(str, chapters)]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out == [f"{chapters[0]}: 1 warning(s)", f"{chapters[1]}: ok"]

    def test_fatal(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        source = tmp_path / "bad.pod"
        source.write_text("=back\n", encoding="utf-8")
        assert main(["check", str(source)]) == 1
        assert "=back without matching =over" in capsys.readouterr().err


class TestDump:
    def test_json(self, chapters: list[Path], capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["dump", str(chapters[1])]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["_type"] == "Document"
        assert data["resolved"] is False
        assert data["children"][0]["title"] == "Two Z<two>"

    def test_resolved(self, chapters: list[Path], capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["dump", "--resolve", str(chapters[0])]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["resolved"] is True
        assert data["diagnostics"][0]["_type"] == "UnresolvedReferenceError"


class TestArguments:
    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_unknown_format(self, chapters: list[Path]) -> None:
        with pytest.raises(SystemExit):
            main(["render", "--format", "pdf", str(chapters[0])])
