"""Document assembler for the comparison PDF.

This module provides the DocumentAssembler class, which appends rendered
pages to a PDF where every page keeps its own size, and adds an outline
entry for each variant.
"""

import os
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

import structlog
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from fontcompare import __version__
from fontcompare.domain.page import RenderedPage
from fontcompare.exceptions import AssemblyError, OutputNotWritableError

logger = structlog.get_logger("fontcompare.assembler")

STAMP_FONT = "Helvetica"
STAMP_FONT_SIZE = 8.0


@dataclass(frozen=True)
class PageRecord:
    """Geometry and label of a page written to the output."""

    label: str
    width: float
    height: float


def ensure_writable(path: Path) -> None:
    """Check that an output file can be created at the given path.

    Raises:
        OutputNotWritableError: If the path is a directory or its parent is
            missing or read-only
    """
    if path.is_dir():
        raise OutputNotWritableError(str(path), "is a directory")
    parent = path.parent if str(path.parent) else Path(".")
    if not parent.is_dir():
        raise OutputNotWritableError(str(path), f"directory '{parent}' does not exist")
    if not os.access(parent, os.W_OK):
        raise OutputNotWritableError(str(path), f"directory '{parent}' is not writable")
    if path.exists() and not os.access(path, os.W_OK):
        raise OutputNotWritableError(str(path), "file is read-only")


class DocumentAssembler:
    """Builds a PDF from labelled pages of heterogeneous sizes.

    Pages are written in the order they are appended and are sized exactly
    to their own width and height. Nothing is written to the destination
    until finalize() is called.

    Example:
        assembler = DocumentAssembler(Path("out.variants.pdf"))
        assembler.append(rendered_pages)
        assembler.finalize()
    """

    def __init__(
        self,
        output_path: Path,
        title: str | None = None,
        nest_by_family: bool = False,
        stamp_labels: bool = False,
    ) -> None:
        """Initialize the assembler.

        Args:
            output_path: Destination PDF
            title: Document title stored in the PDF metadata
            nest_by_family: Group outline entries under one entry per family
            stamp_labels: Print the label and page number in the top-left corner
        """
        self._output_path = output_path
        self._part_path = output_path.with_name(f".{output_path.name}.part")
        self._nest_by_family = nest_by_family
        self._stamp_labels = stamp_labels
        self._canvas = canvas.Canvas(str(self._part_path), pageCompression=1)
        self._canvas.setTitle(title or output_path.stem)
        self._canvas.setAuthor("fontcompare")
        self._canvas.setCreator(f"fontcompare v{__version__}")
        self._records: list[PageRecord] = []
        self._last_family: str | None = None
        self._finalized = False

    @property
    def pages(self) -> list[PageRecord]:
        """Pages appended so far."""
        return list(self._records)

    @property
    def page_count(self) -> int:
        """Number of pages appended so far."""
        return len(self._records)

    def append(self, pages: list[RenderedPage]) -> None:
        """Append the pages of one variant.

        The first page receives the outline entry for the variant label.

        Args:
            pages: Rendered pages of a single variant, in page order

        Raises:
            AssemblyError: If the document was already finalized or a page
                has no area
        """
        if self._finalized:
            raise AssemblyError("document already finalized")

        for position, page in enumerate(pages):
            if page.width <= 0 or page.height <= 0:
                raise AssemblyError(
                    f"page {page.page_index + 1} of '{page.label}' has no area"
                )

            c = self._canvas
            c.setPageSize((page.width, page.height))
            c.drawImage(
                ImageReader(BytesIO(page.image)),
                0,
                0,
                width=page.width,
                height=page.height,
            )
            if self._stamp_labels:
                self._stamp(page)
            if position == 0:
                self._add_outline(page)
            c.showPage()

            self._records.append(PageRecord(page.label, page.width, page.height))

        logger.debug(
            "Pages appended",
            variant=pages[0].label if pages else None,
            pages=len(pages),
            total=len(self._records),
        )

    def _stamp(self, page: RenderedPage) -> None:
        c = self._canvas
        text = f"{page.label}, page {page.page_index + 1}"
        size = max(4.0, min(STAMP_FONT_SIZE, page.height / 12))
        padding = size / 3
        width = min(c.stringWidth(text, STAMP_FONT, size) + 2 * padding, page.width)
        top = page.height - padding

        c.saveState()
        c.setFillColorRGB(1, 1, 1)
        c.rect(0, top - size - padding, width, size + padding, stroke=0, fill=1)
        c.setFillColorRGB(0, 0, 0)
        c.setFont(STAMP_FONT, size)
        c.drawString(padding, top - size, text)
        c.restoreState()

    def _add_outline(self, page: RenderedPage) -> None:
        c = self._canvas
        key = f"page-{len(self._records)}"
        c.bookmarkPage(key)

        if not self._nest_by_family or page.family is None:
            c.addOutlineEntry(page.label, key, level=0)
            self._last_family = None
            return

        if page.family != self._last_family:
            family_key = f"family-{len(self._records)}"
            c.bookmarkPage(family_key)
            c.addOutlineEntry(page.family, family_key, level=0, closed=True)
            self._last_family = page.family
        c.addOutlineEntry(page.label, key, level=1)

    def finalize(self) -> Path:
        """Write the document to the output path.

        Returns:
            The written output path

        Raises:
            AssemblyError: If no page was appended
            OutputNotWritableError: If the file cannot be written
        """
        if self._finalized:
            raise AssemblyError("document already finalized")
        if not self._records:
            raise AssemblyError("no pages to write")

        self._finalized = True
        self._canvas.showOutline()
        try:
            self._canvas.save()
            os.replace(self._part_path, self._output_path)
        except OSError as e:
            self._part_path.unlink(missing_ok=True)
            raise OutputNotWritableError(str(self._output_path), str(e)) from e

        logger.info(
            "Comparison document saved",
            output=str(self._output_path),
            pages=len(self._records),
        )
        return self._output_path
