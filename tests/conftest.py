"""Shared fixtures: generated font files and a fake Typst compiler."""

import re
from io import BytesIO
from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen
from PIL import Image

from fontcompare.config import RunConfig
from fontcompare.exceptions import CompileError

FONT_RE = re.compile(r'font: "((?:[^"\\]|\\.)*)"')


def _square_glyph():
    pen = TTGlyphPen(None)
    pen.moveTo((50, 0))
    pen.lineTo((50, 700))
    pen.lineTo((550, 700))
    pen.lineTo((550, 0))
    pen.closePath()
    return pen.glyph()


def make_font(
    path: Path,
    family: str,
    style_name: str = "Regular",
    weight: int = 400,
    width: int = 5,
    italic: bool = False,
    oblique: bool = False,
    typographic_family: str | None = None,
    wws_family: str | None = None,
) -> Path:
    """Build a minimal TrueType font with the given naming and OS/2 values."""
    fb = FontBuilder(1000, isTTF=True)
    fb.setupGlyphOrder([".notdef", "A"])
    fb.setupCharacterMap({0x41: "A"})
    fb.setupGlyf({".notdef": _square_glyph(), "A": _square_glyph()})
    fb.setupHorizontalMetrics({".notdef": (600, 50), "A": (600, 50)})
    fb.setupHorizontalHeader(ascent=800, descent=-200)

    names = {"familyName": family, "styleName": style_name}
    if typographic_family:
        names["typographicFamily"] = typographic_family
        names["typographicSubfamily"] = style_name
    if wws_family:
        names["wwsFamilyName"] = wws_family
        names["wwsSubfamilyName"] = style_name
    fb.setupNameTable(names)

    fs_selection = 0
    if italic:
        fs_selection |= 1 << 0
    if oblique:
        fs_selection |= 1 << 9
    if not (italic or oblique):
        fs_selection |= 1 << 6
    fb.setupOS2(usWeightClass=weight, usWidthClass=width, fsSelection=fs_selection)
    fb.setupPost()

    path.parent.mkdir(parents=True, exist_ok=True)
    fb.save(str(path))
    return path


def make_png(width: int, height: int, mode: str = "RGB") -> bytes:
    """Encode a blank image as PNG."""
    color = (255, 255, 255, 0) if mode == "RGBA" else "white"
    buffer = BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeCompiler:
    """Stand-in for TypstCompiler producing blank pages.

    Page width depends on the pinned family so pages of different variants
    have different sizes. Families listed in ``fail_families`` fail to
    compile.
    """

    def __init__(
        self,
        pages: int = 1,
        fail_families: tuple[str, ...] = (),
        base_size: tuple[int, int] = (100, 150),
    ) -> None:
        self.pages = pages
        self.fail_families = fail_families
        self.base_size = base_size
        self.calls: list[dict] = []

    def version(self) -> str:
        return "typst 0.0.0 (fake)"

    @staticmethod
    def family_of(source: str) -> str | None:
        match = FONT_RE.search(source)
        return match.group(1) if match else None

    def page_size(self, family: str | None) -> tuple[int, int]:
        width, height = self.base_size
        return (width + 10 * len(family or ""), height)

    def compile_png(
        self,
        source,
        root,
        font_paths=(),
        ignore_system_fonts=False,
        ppi=300.0,
        label="<stdin>",
    ):
        self.calls.append(
            {
                "source": source,
                "root": root,
                "font_paths": tuple(font_paths),
                "ignore_system_fonts": ignore_system_fonts,
                "ppi": ppi,
                "label": label,
            }
        )
        family = self.family_of(source)
        if family in self.fail_families:
            raise CompileError(label, f"unknown font family: {family}")
        width, height = self.page_size(family)
        return [make_png(width, height) for _ in range(self.pages)]


@pytest.fixture
def font_dir(tmp_path: Path) -> Path:
    """Directory with Inter and Roboto regular faces."""
    fonts = tmp_path / "fonts"
    make_font(fonts / "Roboto-Regular.ttf", "Roboto")
    make_font(fonts / "Inter-Regular.ttf", "Inter")
    return fonts


@pytest.fixture
def document(tmp_path: Path) -> Path:
    """A one-page Typst document."""
    path = tmp_path / "project" / "doc.typ"
    path.parent.mkdir(parents=True)
    path.write_text("= Hello\n\nThe quick brown fox.\n", encoding="utf-8")
    return path


@pytest.fixture
def run_config(document: Path, font_dir: Path) -> RunConfig:
    """Run configuration restricted to the generated fonts."""
    return RunConfig.model_validate(
        {
            "input": document,
            "compile": {"font_paths": (font_dir,), "use_system_fonts": False},
            "render": {"ppi": 72.0},
        }
    )
