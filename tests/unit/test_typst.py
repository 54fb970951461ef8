"""Unit tests for the Typst compiler adapter."""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from fontcompare.exceptions import CompileError, CompilerNotFoundError
from fontcompare.io.typst import TypstCompiler
from tests.conftest import make_png


def _output_dir(cmd: list[str]) -> Path:
    return Path(cmd[-1]).parent


class TestVersion:
    """Tests for TypstCompiler.version."""

    @patch("fontcompare.io.typst.subprocess.run")
    def test_version(self, mock_run):
        """Test the version string is returned."""
        mock_run.return_value = Mock(returncode=0, stdout="typst 0.12.0\n")
        assert TypstCompiler().version() == "typst 0.12.0"
        assert mock_run.call_args.args[0] == ["typst", "--version"]

    @patch("fontcompare.io.typst.subprocess.run", side_effect=FileNotFoundError)
    def test_missing_binary(self, _mock_run):
        """Test a missing binary raises CompilerNotFoundError."""
        with pytest.raises(CompilerNotFoundError, match="not found"):
            TypstCompiler("no-such-typst").version()

    @patch("fontcompare.io.typst.subprocess.run")
    def test_broken_binary(self, mock_run):
        """Test a failing binary raises CompilerNotFoundError."""
        mock_run.return_value = Mock(returncode=2, stdout="")
        with pytest.raises(CompilerNotFoundError, match="error code 2"):
            TypstCompiler().version()


class TestBuildCommand:
    """Tests for the compile command line."""

    def test_minimal(self):
        """Test the command for a plain compilation."""
        cmd = TypstCompiler().build_command(Path("/tmp/x/page-{0p}.png"), Path("/proj"))
        assert cmd == [
            "typst", "compile", "--root", "/proj",
            "--format", "png", "--ppi", "300",
            "-", "/tmp/x/page-{0p}.png",
        ]

    def test_font_options(self):
        """Test font paths and the system font switch."""
        cmd = TypstCompiler("/opt/typst").build_command(
            Path("out.png"),
            Path("/proj"),
            font_paths=(Path("/fonts/a"), Path("/fonts/b")),
            ignore_system_fonts=True,
            ppi=144.5,
        )
        assert cmd[0] == "/opt/typst"
        assert cmd.count("--font-path") == 2
        assert "/fonts/b" in cmd
        assert "--ignore-system-fonts" in cmd
        assert cmd[cmd.index("--ppi") + 1] == "144.5"


class TestCompilePng:
    """Tests for TypstCompiler.compile_png."""

    @patch("fontcompare.io.typst.subprocess.run")
    def test_pages_in_order(self, mock_run):
        """Test every page is collected in page order."""

        def fake_run(cmd, **kwargs):
            out = _output_dir(cmd)
            for number, width in [(2, 20), (1, 10), (10, 100)]:
                (out / f"page-{number:02d}.png").write_bytes(make_png(width, 5))
            return Mock(returncode=0, stderr=b"")

        mock_run.side_effect = fake_run
        pages = TypstCompiler().compile_png('#include "/doc.typ"', root=Path("/proj"))

        assert pages == [make_png(10, 5), make_png(20, 5), make_png(100, 5)]
        assert mock_run.call_args.kwargs["input"] == b'#include "/doc.typ"'

    @patch("fontcompare.io.typst.subprocess.run")
    def test_compile_failure(self, mock_run):
        """Test diagnostics are carried by CompileError."""
        mock_run.return_value = Mock(returncode=1, stderr=b"error: unknown font family: zzz")
        with pytest.raises(CompileError) as exc_info:
            TypstCompiler().compile_png("", root=Path("."), label="Zzz")
        assert exc_info.value.label == "Zzz"
        assert "unknown font family" in exc_info.value.diagnostics

    @patch("fontcompare.io.typst.subprocess.run")
    def test_no_pages(self, mock_run):
        """Test a compilation without output raises CompileError."""
        mock_run.return_value = Mock(returncode=0, stderr=b"")
        with pytest.raises(CompileError, match="no pages"):
            TypstCompiler().compile_png("", root=Path("."))

    @patch(
        "fontcompare.io.typst.subprocess.run",
        side_effect=subprocess.TimeoutExpired(cmd="typst", timeout=1),
    )
    def test_timeout(self, _mock_run):
        """Test a hung compilation becomes a CompileError."""
        with pytest.raises(CompileError, match="timed out"):
            TypstCompiler(timeout=1).compile_png("", root=Path("."))

    @patch("fontcompare.io.typst.subprocess.run", side_effect=FileNotFoundError)
    def test_binary_disappeared(self, _mock_run):
        """Test a missing binary during compilation."""
        with pytest.raises(CompilerNotFoundError):
            TypstCompiler().compile_png("", root=Path("."))
