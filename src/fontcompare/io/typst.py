"""Typst compiler adapter.

This module drives the ``typst`` command-line compiler. Sources are passed
on stdin, pages come back as one PNG per page.
"""

import subprocess
import tempfile
from pathlib import Path

import structlog

from fontcompare.exceptions import CompileError, CompilerNotFoundError

logger = structlog.get_logger("fontcompare.typst")

PAGE_TEMPLATE = "page-{0p}.png"


class TypstCompiler:
    """Runs ``typst compile`` and collects the rasterized pages.

    Instances hold no state besides the binary name, so they can be sent to
    worker processes.

    Example:
        compiler = TypstCompiler("typst")
        pages = compiler.compile_png(
            '#include "/main.typ"', root=Path("."), ppi=144.0
        )
    """

    def __init__(self, binary: str = "typst", timeout: float | None = None) -> None:
        """Initialize the compiler adapter.

        Args:
            binary: Typst executable name or path
            timeout: Seconds before a single compilation is aborted
        """
        self.binary = binary
        self.timeout = timeout

    def version(self) -> str:
        """Return the compiler version string.

        Raises:
            CompilerNotFoundError: If the binary is missing or broken
        """
        try:
            result = subprocess.run(
                [self.binary, "--version"], capture_output=True, text=True, timeout=10
            )
        except FileNotFoundError as e:
            raise CompilerNotFoundError(self.binary, "not found in PATH") from e
        except subprocess.TimeoutExpired as e:
            raise CompilerNotFoundError(self.binary, "timed out") from e
        except OSError as e:
            raise CompilerNotFoundError(self.binary, str(e)) from e

        if result.returncode != 0:
            raise CompilerNotFoundError(
                self.binary, f"returned error code {result.returncode}"
            )
        return result.stdout.strip()

    def build_command(
        self,
        output_template: Path,
        root: Path,
        font_paths: list[Path] | tuple[Path, ...] = (),
        ignore_system_fonts: bool = False,
        ppi: float = 300.0,
    ) -> list[str]:
        """Build the command line for compiling stdin to PNG pages."""
        cmd = [self.binary, "compile", "--root", str(root)]
        for font_path in font_paths:
            cmd.extend(["--font-path", str(font_path)])
        if ignore_system_fonts:
            cmd.append("--ignore-system-fonts")
        cmd.extend(["--format", "png", "--ppi", f"{ppi:g}", "-", str(output_template)])
        return cmd

    def compile_png(
        self,
        source: str,
        root: Path,
        font_paths: list[Path] | tuple[Path, ...] = (),
        ignore_system_fonts: bool = False,
        ppi: float = 300.0,
        label: str = "<stdin>",
    ) -> list[bytes]:
        """Compile a Typst source to one PNG per page.

        Args:
            source: Main Typst source, read by the compiler from stdin
            root: Project root for resolving absolute paths
            font_paths: Additional font directories
            ignore_system_fonts: Do not search system fonts
            ppi: Rasterization resolution
            label: Name used in error messages

        Returns:
            PNG data of every page, in page order

        Raises:
            CompilerNotFoundError: If the binary cannot be started
            CompileError: If compilation fails or produces no page
        """
        with tempfile.TemporaryDirectory(prefix="fontcompare-") as tmp:
            tmp_dir = Path(tmp)
            cmd = self.build_command(
                tmp_dir / PAGE_TEMPLATE,
                root=root,
                font_paths=font_paths,
                ignore_system_fonts=ignore_system_fonts,
                ppi=ppi,
            )
            logger.debug("Running typst", command=cmd, variant=label)

            try:
                result = subprocess.run(
                    cmd,
                    input=source.encode("utf-8"),
                    capture_output=True,
                    timeout=self.timeout,
                )
            except FileNotFoundError as e:
                raise CompilerNotFoundError(self.binary, "not found in PATH") from e
            except subprocess.TimeoutExpired as e:
                raise CompileError(label, f"timed out after {self.timeout}s") from e

            if result.returncode != 0:
                diagnostics = result.stderr.decode("utf-8", errors="replace").strip()
                raise CompileError(
                    label, diagnostics or f"typst exited with code {result.returncode}"
                )

            pages = [path.read_bytes() for path in sorted(tmp_dir.glob("page-*.png"))]

        if not pages:
            raise CompileError(label, "compiler produced no pages")
        return pages
