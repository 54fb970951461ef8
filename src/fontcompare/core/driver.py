"""Compilation driver binding one font variant to the document.

The document is never modified. For each variant a short main source is
generated that only sets the font resolution context and then includes the
document by its path inside the project root. Every variant therefore
renders the identical content.
"""

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any, Protocol

from PIL import Image, UnidentifiedImageError

from fontcompare.config.settings import RunConfig
from fontcompare.domain.page import CompiledPage
from fontcompare.domain.variant import BASELINE_LABEL, FontVariant
from fontcompare.exceptions import CompileError, InputNotFoundError, InputOutsideRootError


class Compiler(Protocol):
    """Interface the driver needs from a Typst compiler."""

    def version(self) -> str: ...

    def compile_png(
        self,
        source: str,
        root: Path,
        font_paths: list[Path] | tuple[Path, ...] = (),
        ignore_system_fonts: bool = False,
        ppi: float = 300.0,
        label: str = "<stdin>",
    ) -> list[bytes]: ...


@dataclass(frozen=True)
class SourceDocument:
    """The input document located inside its project root.

    Attributes:
        path: Absolute path of the document
        root: Absolute project root
        vpath: Root-relative Typst path, e.g. "/chapters/main.typ"
    """

    path: Path
    root: Path
    vpath: str

    @classmethod
    def resolve(cls, input_path: Path, root: Path | None = None) -> "SourceDocument":
        """Locate the document inside the project root.

        Args:
            input_path: Document path as given by the user
            root: Project root (defaults to the document's directory)

        Raises:
            InputNotFoundError: If the document does not exist
            InputOutsideRootError: If the document is not below the root
        """
        if not input_path.is_file():
            raise InputNotFoundError(str(input_path))

        path = input_path.resolve()
        root_dir = (root or path.parent).resolve()
        try:
            relative = path.relative_to(root_dir)
        except ValueError as e:
            raise InputOutsideRootError(str(path), str(root_dir)) from e

        return cls(path=path, root=root_dir, vpath="/" + relative.as_posix())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC."""
        return {"path": str(self.path), "root": str(self.root), "vpath": self.vpath}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SourceDocument":
        """Deserialize from dictionary."""
        return cls(path=Path(data["path"]), root=Path(data["root"]), vpath=data["vpath"])


def typst_string(value: str) -> str:
    """Quote a value as a Typst string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def build_main_source(
    variant: FontVariant | None,
    vpath: str,
    with_variant: bool = False,
    fallback: bool = False,
) -> str:
    """Generate the main source compiled for one variant.

    Args:
        variant: Font to pin, or None for the compiler's default resolution
        vpath: Root-relative path of the document
        with_variant: Also pin style, weight and stretch
        fallback: Allow font fallback for glyphs missing from the font

    Returns:
        Typst source that sets the font and includes the document
    """
    args = []
    if variant is not None:
        args.append(f"font: {typst_string(variant.family)}")
        if with_variant:
            args.append(f"style: {typst_string(variant.style.value)}")
            args.append(f"weight: {variant.weight}")
            args.append(f"stretch: {variant.stretch.ratio:g}%")
    args.append(f"fallback: {'true' if fallback else 'false'}")

    return f"#set text({', '.join(args)})\n#include {typst_string(vpath)}\n"


def label_for(variant: FontVariant | None, with_variant: bool = False) -> str:
    """Output label of a variant, or of the baseline pass."""
    if variant is None:
        return BASELINE_LABEL
    return variant.label(with_variant=with_variant)


def compile_for(
    variant: FontVariant | None,
    source: SourceDocument,
    config: RunConfig,
    compiler: Compiler,
) -> list[CompiledPage]:
    """Compile the document with the font resolution bound to one variant.

    Args:
        variant: Variant to pin, or None for the baseline pass
        source: Input document
        config: Run configuration
        compiler: Compiler used to produce the pages

    Returns:
        Compiled pages in page order

    Raises:
        CompileError: If compilation fails or a page cannot be read
    """
    with_variant = config.selection.variants
    label = label_for(variant, with_variant)
    main = build_main_source(
        variant,
        source.vpath,
        with_variant=with_variant,
        fallback=config.compile.fallback,
    )

    ppi = config.render.ppi
    pngs = compiler.compile_png(
        main,
        root=source.root,
        font_paths=config.compile.font_paths,
        ignore_system_fonts=not config.compile.use_system_fonts,
        ppi=ppi,
        label=label,
    )

    pages = []
    for index, png in enumerate(pngs):
        try:
            with Image.open(BytesIO(png)) as image:
                width, height = image.size
        except (UnidentifiedImageError, OSError) as e:
            raise CompileError(label, f"page {index + 1} is not a valid image: {e}") from e
        pages.append(
            CompiledPage(
                index=index,
                png=png,
                pixel_width=width,
                pixel_height=height,
                ppi=ppi,
            )
        )
    return pages
