"""Exception hierarchy for Fontcompare."""


class FontCompareError(Exception):
    """Base exception for all Fontcompare errors."""

    pass


class InputError(FontCompareError):
    """Errors related to the input document."""

    pass


class InputNotFoundError(InputError):
    """Input document does not exist or is not a file."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Input file not found: {path}")


class InputOutsideRootError(InputError):
    """Input document is not located below the project root."""

    def __init__(self, path: str, root: str) -> None:
        self.path = path
        self.root = root
        super().__init__(f"Input file '{path}' is outside root directory '{root}'")


class FontBackendError(FontCompareError):
    """Errors raised while discovering fonts."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read fonts from '{path}': {reason}")


class NoFontsFoundError(FontBackendError):
    """No font was found in any searched directory."""

    def __init__(self, searched: list[str]) -> None:
        self.searched = searched
        super().__init__(", ".join(searched) or "any font directory", "no fonts found")


class SelectionError(FontCompareError):
    """Errors related to choosing the variants to compare."""

    pass


class PatternError(SelectionError):
    """Invalid include or exclude regular expression."""

    def __init__(self, option: str, pattern: str, reason: str) -> None:
        self.option = option
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid {option} pattern '{pattern}': {reason}")


class EmptySelectionError(SelectionError):
    """Filtering left no font variant to compile."""

    def __init__(self, catalog_size: int) -> None:
        self.catalog_size = catalog_size
        super().__init__(
            f"No font variant left after filtering {catalog_size} discovered fonts"
        )


class CompilerError(FontCompareError):
    """Errors related to the Typst compiler."""

    pass


class CompilerNotFoundError(CompilerError):
    """Typst binary is missing or not working."""

    def __init__(self, binary: str, reason: str) -> None:
        self.binary = binary
        self.reason = reason
        super().__init__(f"Typst binary '{binary}' is not usable: {reason}")


class CompileError(CompilerError):
    """Compilation failed for a single variant."""

    def __init__(self, label: str, diagnostics: str) -> None:
        self.label = label
        self.diagnostics = diagnostics
        super().__init__(f"Failed to compile for font '{label}': {diagnostics}")


class RenderError(FontCompareError):
    """Rendering compiled pages failed for a single variant."""

    def __init__(self, label: str, reason: str) -> None:
        self.label = label
        self.reason = reason
        super().__init__(f"Failed to render pages for font '{label}': {reason}")


class OutputError(FontCompareError):
    """Errors related to the output document."""

    pass


class OutputNotWritableError(OutputError):
    """Output path cannot be written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write output '{path}': {reason}")


class AssemblyError(OutputError):
    """Error building the comparison document."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to assemble comparison document: {reason}")


class AllVariantsFailedError(FontCompareError):
    """Every selected variant failed to compile or render."""

    def __init__(self, failures: list[tuple[str, str]]) -> None:
        self.failures = failures
        super().__init__(
            f"All {len(failures)} variants failed: "
            + ", ".join(label for label, _ in failures)
        )
