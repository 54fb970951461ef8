"""Font catalog for discovering installed font variants.

This module provides the FontCatalog class, which walks font directories
and reads family, style, weight and stretch of every face with fontTools.
"""

import os
import platform
from collections.abc import Iterator
from pathlib import Path

import structlog
from fontTools.ttLib import TTCollection, TTFont, TTLibError

from fontcompare.domain.variant import FontSource, FontStretch, FontStyle, FontVariant
from fontcompare.exceptions import FontBackendError, NoFontsFoundError

FONT_EXTENSIONS = {".ttf", ".otf"}
COLLECTION_EXTENSIONS = {".ttc", ".otc"}

# Name table IDs we read
NAME_ID_FAMILY = 1
NAME_ID_SUBFAMILY = 2
NAME_ID_TYPOGRAPHIC_FAMILY = 16
NAME_ID_TYPOGRAPHIC_SUBFAMILY = 17

# OS/2 fsSelection and head macStyle bits
FS_SELECTION_ITALIC = 1 << 0
FS_SELECTION_OBLIQUE = 1 << 9
MAC_STYLE_ITALIC = 1 << 1

logger = structlog.get_logger("fontcompare.catalog")


def system_font_directories(system: str | None = None) -> list[Path]:
    """Get the standard font directories of the operating system.

    Args:
        system: platform.system() value, detected when None

    Returns:
        Candidate directories (they may not exist)
    """
    system = (system or platform.system()).lower()

    if system == "windows":
        return [
            Path(os.environ.get("WINDIR", "C:\\Windows")) / "Fonts",
            Path(os.environ.get("LOCALAPPDATA", "")) / "Microsoft" / "Windows" / "Fonts",
        ]
    if system == "darwin":
        return [
            Path("/System/Library/Fonts"),
            Path("/Library/Fonts"),
            Path.home() / "Library" / "Fonts",
        ]
    return [
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        Path.home() / ".fonts",
        Path.home() / ".local" / "share" / "fonts",
    ]


def read_variant(font: TTFont, source: FontSource) -> FontVariant | None:
    """Read the variant identity of a loaded face.

    Args:
        font: fontTools font object
        source: Where the face was loaded from

    Returns:
        FontVariant, or None if the face has no usable family name
    """
    if "name" not in font:
        return None
    name_table = font["name"]

    family = name_table.getFirstDebugName((NAME_ID_TYPOGRAPHIC_FAMILY, NAME_ID_FAMILY))
    if not family:
        return None

    subfamily = (
        name_table.getDebugName(NAME_ID_TYPOGRAPHIC_SUBFAMILY)
        or name_table.getDebugName(NAME_ID_SUBFAMILY)
        or ""
    ).lower()

    weight = 400
    stretch = FontStretch.NORMAL
    fs_selection = 0
    if "OS/2" in font:
        os2 = font["OS/2"]
        weight = min(max(int(os2.usWeightClass), 1), 1000)
        stretch = FontStretch.from_width_class(int(os2.usWidthClass))
        fs_selection = int(os2.fsSelection)

    mac_style = int(font["head"].macStyle) if "head" in font else 0

    if fs_selection & FS_SELECTION_OBLIQUE or "oblique" in subfamily:
        style = FontStyle.OBLIQUE
    elif (
        fs_selection & FS_SELECTION_ITALIC
        or mac_style & MAC_STYLE_ITALIC
        or "italic" in subfamily
    ):
        style = FontStyle.ITALIC
    else:
        style = FontStyle.NORMAL

    return FontVariant(
        family=family.strip(),
        style=style,
        weight=weight,
        stretch=stretch,
        source=source,
    )


class FontCatalog:
    """Discovers every font face available to the compiler.

    Extra directories are searched first, in the order given, followed by
    the system font directories. Every face is listed, so a family with
    twelve files contributes twelve variants.

    Example:
        catalog = FontCatalog([Path("fonts")], use_system=False)
        for variant in catalog.discover():
            print(variant.label())
    """

    def __init__(
        self,
        extra_paths: list[Path] | tuple[Path, ...] = (),
        use_system: bool = True,
        system_paths: list[Path] | None = None,
    ) -> None:
        """Initialize the catalog.

        Args:
            extra_paths: Additional font directories
            use_system: Whether to search the system font directories
            system_paths: Override for the system directories (mainly for tests)
        """
        self._extra_paths = list(extra_paths)
        self._use_system = use_system
        self._system_paths = system_paths

    @property
    def search_paths(self) -> list[Path]:
        """Directories searched, in order."""
        paths = list(self._extra_paths)
        if self._use_system:
            system = (
                self._system_paths
                if self._system_paths is not None
                else system_font_directories()
            )
            paths.extend(d for d in system if d.is_dir())
        return paths

    def discover(self) -> list[FontVariant]:
        """List every face in the searched directories.

        Returns:
            Variants in discovery order

        Raises:
            NoFontsFoundError: If no face was found anywhere
        """
        variants: list[FontVariant] = []
        searched: list[str] = []

        for directory in self.search_paths:
            searched.append(str(directory))
            try:
                found = list(self.scan_directory(directory))
            except FontBackendError as e:
                logger.warning("Skipping font directory", path=e.path, reason=e.reason)
                continue
            logger.debug("Scanned font directory", path=str(directory), faces=len(found))
            variants.extend(found)

        if not variants:
            raise NoFontsFoundError(searched)

        logger.info(
            "Font catalog built",
            faces=len(variants),
            families=len({v.family for v in variants}),
            directories=len(searched),
        )
        return variants

    def scan_directory(self, directory: Path) -> Iterator[FontVariant]:
        """Yield the faces of every font file below a directory.

        Raises:
            FontBackendError: If the directory is missing or unreadable
        """
        if not directory.is_dir():
            raise FontBackendError(str(directory), "not a directory")
        if not os.access(directory, os.R_OK | os.X_OK):
            raise FontBackendError(str(directory), "permission denied")

        for path in sorted(self._walk(directory)):
            yield from self.read_file(path)

    def _walk(self, directory: Path) -> Iterator[Path]:
        def on_error(error: OSError) -> None:
            logger.debug("Skipping unreadable directory", path=error.filename, error=str(error))

        for dirpath, _dirnames, filenames in os.walk(directory, onerror=on_error):
            for filename in filenames:
                suffix = Path(filename).suffix.lower()
                if suffix in FONT_EXTENSIONS or suffix in COLLECTION_EXTENSIONS:
                    yield Path(dirpath) / filename

    def read_file(self, path: Path) -> list[FontVariant]:
        """Read all faces of one font file.

        Files that fontTools cannot parse are skipped.

        Args:
            path: Font or font collection file

        Returns:
            Variants of the file, in face order
        """
        try:
            if path.suffix.lower() in COLLECTION_EXTENSIONS:
                return self._read_collection(path)
            with TTFont(str(path), lazy=True) as font:
                variant = read_variant(font, FontSource(str(path)))
            return [variant] if variant is not None else []
        except (TTLibError, OSError, KeyError, AssertionError, ValueError) as e:
            logger.debug("Skipping unreadable font", path=str(path), error=str(e))
            return []

    def _read_collection(self, path: Path) -> list[FontVariant]:
        variants = []
        collection = TTCollection(str(path), lazy=True)
        try:
            for index, font in enumerate(collection.fonts):
                variant = read_variant(font, FontSource(str(path), index))
                if variant is not None:
                    variants.append(variant)
        finally:
            collection.close()
        return variants


def discover(
    extra_paths: list[Path] | tuple[Path, ...] = (),
    use_system: bool = True,
) -> list[FontVariant]:
    """Discover all font variants available to the run.

    Args:
        extra_paths: Additional font directories
        use_system: Whether to search the system font directories

    Returns:
        Every discovered variant

    Raises:
        NoFontsFoundError: If no font was found
    """
    return FontCatalog(extra_paths, use_system).discover()
