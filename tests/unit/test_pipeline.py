"""Unit tests for the comparison pipeline."""

import json
from pathlib import Path
from unittest.mock import Mock

import fitz
import pytest

from fontcompare.config import RunConfig
from fontcompare.core.driver import SourceDocument
from fontcompare.core.pipeline import ComparisonPipeline, process_variant
from fontcompare.domain import FontVariant
from fontcompare.exceptions import (
    AllVariantsFailedError,
    EmptySelectionError,
    InputNotFoundError,
)
from tests.conftest import FakeCompiler, make_font


def configure(run_config: RunConfig, **sections) -> RunConfig:
    """Copy a run configuration with some sections replaced."""
    data = run_config.model_dump()
    for section, values in sections.items():
        if isinstance(values, dict):
            data[section] = {**data[section], **values}
        else:
            data[section] = values
    return RunConfig.model_validate(data)


@pytest.fixture
def five_families(tmp_path: Path, document: Path) -> RunConfig:
    """Run configuration with families Alpha to Echo."""
    fonts = tmp_path / "five"
    for family in ["Alpha", "Bravo", "Charlie", "Delta", "Echo"]:
        make_font(fonts / f"{family}.ttf", family)
    return RunConfig.model_validate(
        {
            "input": document,
            "compile": {"font_paths": (fonts,), "use_system_fonts": False},
            "render": {"ppi": 72.0},
        }
    )


def outline(path: Path) -> list[str]:
    with fitz.open(path) as doc:
        return [title for _, title, _ in doc.get_toc()]


class TestComparisonPipeline:
    """Tests for ComparisonPipeline class."""

    def test_one_page_per_family(self, run_config):
        """Test each family contributes its pages in sorted order."""
        stats = ComparisonPipeline(run_config, compiler=FakeCompiler()).run()

        assert stats.succeeded_count == 2
        assert stats.failed_count == 0
        assert stats.output_path == run_config.output_path
        assert outline(run_config.output_path) == ["Inter", "Roboto"]

    def test_default_output_next_to_input(self, run_config, document):
        """Test the output defaults to <stem>.variants.pdf."""
        stats = ComparisonPipeline(run_config, compiler=FakeCompiler()).run()
        assert stats.output_path == document.with_name("doc.variants.pdf")
        assert stats.output_path.exists()

    def test_page_sizes_follow_compiled_pages(self, run_config):
        """Test every output page has the size of its compiled page."""
        compiler = FakeCompiler(pages=2)
        ComparisonPipeline(run_config, compiler=compiler).run()

        with fitz.open(run_config.output_path) as doc:
            widths = [round(page.rect.width) for page in doc]
        assert widths == [
            compiler.page_size("Inter")[0],
            compiler.page_size("Inter")[0],
            compiler.page_size("Roboto")[0],
            compiler.page_size("Roboto")[0],
        ]

    def test_failed_variant_skipped(self, five_families):
        """Test a failing variant is skipped and reported."""
        compiler = FakeCompiler(fail_families=("Charlie",))
        stats = ComparisonPipeline(five_families, compiler=compiler).run()

        assert stats.succeeded_count == 4
        assert stats.failed_labels == ["Charlie"]
        assert stats.failure_summary() == "1 of 5 variants failed: Charlie"
        assert outline(five_families.output_path) == ["Alpha", "Bravo", "Delta", "Echo"]

    def test_all_variants_failed(self, run_config):
        """Test no output is written when every variant fails."""
        compiler = FakeCompiler(fail_families=("Inter", "Roboto"))
        with pytest.raises(AllVariantsFailedError) as exc_info:
            ComparisonPipeline(run_config, compiler=compiler).run()

        assert [label for label, _ in exc_info.value.failures] == ["Inter", "Roboto"]
        assert not run_config.output_path.exists()

    def test_empty_selection(self, run_config):
        """Test an empty selection stops before compiling anything."""
        config = configure(run_config, selection={"include": "Zzz_NoSuchFamily"})
        compiler = FakeCompiler()
        with pytest.raises(EmptySelectionError):
            ComparisonPipeline(config, compiler=compiler).run()

        assert compiler.calls == []
        assert not config.output_path.exists()

    def test_missing_input(self, run_config, tmp_path):
        """Test a missing input stops the run."""
        config = configure(run_config, input=tmp_path / "missing.typ")
        with pytest.raises(InputNotFoundError):
            ComparisonPipeline(config, compiler=FakeCompiler()).run()

    def test_baseline_first(self, run_config):
        """Test the baseline pass comes before every family."""
        config = configure(run_config, compile={"baseline": True})
        compiler = FakeCompiler()
        stats = ComparisonPipeline(config, compiler=compiler).run()

        assert stats.selected_count == 3
        assert outline(config.output_path) == ["System fonts", "Inter", "Roboto"]
        assert "font:" not in compiler.calls[0]["source"]

    def test_variants_mode_outline(self, run_config, font_dir):
        """Test variants mode labels pages with every axis."""
        make_font(font_dir / "Inter-Bold.ttf", "Inter", "Bold", weight=700)
        config = configure(run_config, selection={"variants": True})
        ComparisonPipeline(config, compiler=FakeCompiler()).run()

        assert outline(config.output_path) == [
            "Inter",
            "Inter Normal 400 Normal",
            "Inter Normal 700 Normal",
            "Roboto",
            "Roboto Normal 400 Normal",
        ]

    def test_compile_timeout_passed_to_compiler(self, run_config):
        """Test the configured timeout reaches the Typst compiler."""
        config = configure(run_config, compile={"timeout": 30.0, "typst_bin": "/opt/typst"})
        compiler = ComparisonPipeline(config).compiler
        assert compiler.binary == "/opt/typst"
        assert compiler.timeout == 30.0

    def test_stamp_labels(self, run_config):
        """Test stamped labels are printed on the output pages."""
        config = configure(run_config, output={"stamp_labels": True})
        ComparisonPipeline(config, compiler=FakeCompiler(base_size=(300, 200))).run()

        with fitz.open(config.output_path) as doc:
            assert "Inter, page 1" in doc[0].get_text()
            assert "Roboto, page 1" in doc[1].get_text()

    def test_merge_pages(self, run_config):
        """Test merged pages give one output page per family."""
        config = configure(run_config, render={"merge_pages": True})
        stats = ComparisonPipeline(config, compiler=FakeCompiler(pages=3)).run()

        assert stats.page_count == 2
        with fitz.open(config.output_path) as doc:
            assert doc.page_count == 2

    def test_page_count_mismatch_warning(self, run_config):
        """Test differing page counts are reported but not fatal."""

        class UnevenCompiler(FakeCompiler):
            def compile_png(self, source, root, **kwargs):
                pages = super().compile_png(source, root, **kwargs)
                return pages * 2 if self.family_of(source) == "Roboto" else pages

        logger = Mock()
        stats = ComparisonPipeline(run_config, compiler=UnevenCompiler(), logger=logger).run()

        assert stats.page_count == 3
        messages = [c.args[0] for c in logger.warning.call_args_list]
        assert "Page count differs between variants" in messages

    def test_report(self, run_config, tmp_path):
        """Test the JSON report lists every variant."""
        report = tmp_path / "report.json"
        config = configure(run_config, output={"report": report})
        ComparisonPipeline(config, compiler=FakeCompiler(fail_families=("Roboto",))).run()

        data = json.loads(report.read_text())
        assert data["succeeded"] == 1
        assert data["failed"] == 1
        assert [v["label"] for v in data["variants"]] == ["Inter", "Roboto"]
        assert data["variants"][0]["pages"] == 1
        assert "unknown font family" in data["variants"][1]["error"]

    def test_progress_callback(self, run_config):
        """Test progress is reported once per variant in order."""
        events = []
        ComparisonPipeline(run_config, compiler=FakeCompiler()).run(
            progress_callback=lambda done, total, label, ok: events.append(
                (done, total, label, ok)
            )
        )
        assert events == [(1, 2, "Inter", True), (2, 2, "Roboto", True)]

    def test_parallel_keeps_order(self, five_families):
        """Test the process pool does not change the output order."""
        config = configure(five_families, processing={"jobs": 2})
        compiler = FakeCompiler(fail_families=("Bravo",))
        stats = ComparisonPipeline(config, compiler=compiler).run()

        assert stats.failed_labels == ["Bravo"]
        assert outline(config.output_path) == ["Alpha", "Charlie", "Delta", "Echo"]


def test_process_variant_error_dict(run_config, document):
    """Test a failing variant returns an error dictionary."""
    source = SourceDocument.resolve(document)
    result = process_variant(
        FontVariant("Inter").to_dict(),
        source.to_dict(),
        run_config.model_dump(),
        FakeCompiler(fail_families=("Inter",)),
    )
    assert result["label"] == "Inter"
    assert result["error_type"] == "CompileError"
    assert "pages" not in result
