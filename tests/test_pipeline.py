"""Tests for the conversion pipeline and batch processing."""
import logging

import numpy as np
import pytest

from svgrefine.batch import batch_process, get_image_files
from svgrefine.markup import SVGDocument
from svgrefine.pipeline import Pipeline, process_image
from svgrefine.types import (
    EdgeDetectOptions,
    PipelineOptions,
    SubjectExtractOptions,
    SvgRefineError,
    TracingError,
)

TRACED = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100">'
    '<path fill="#ff0000" d="M0 0 L10 0"/>'
    '<path fill="#ff0000" d="M10 0 L20 0"/>'
    '<path fill="#0000ff" d="M50 50 L51 50 L51 51 L50 51 Z"/>'
    '</svg>'
)


def paths(markup):
    return SVGDocument.from_string(markup).paths()


class FailingTracer:
    def __init__(self, error):
        self.error = error

    def __call__(self, image, options):
        raise self.error


class TestPostprocess:
    """Test the vector stages."""

    def test_defaults_change_nothing(self, fake_tracer):
        result = Pipeline(tracer=fake_tracer(TRACED)).postprocess(TRACED)
        assert [p.d for p in paths(result)] == [p.d for p in paths(TRACED)]

    def test_merge_then_outline(self, fake_tracer):
        options = PipelineOptions(path_merge=True, outline_width=2)
        result = Pipeline(options, fake_tracer(TRACED)).postprocess(TRACED)

        elements = paths(result)
        assert len(elements) == 2
        assert elements[0].get("fill") == "none"
        assert elements[0].get("stroke") == "#ff0000"
        assert elements[0].get("stroke-width") == "2"

    def test_remove_small_regions(self, fake_tracer):
        options = PipelineOptions(remove_small_threshold=5, remove_small_mode="length")
        result = Pipeline(options, fake_tracer(TRACED)).postprocess(TRACED)
        assert [p.get("fill") for p in paths(result)] == ["#ff0000", "#ff0000"]

    def test_grouping(self, fake_tracer):
        options = PipelineOptions(path_group=True)
        result = Pipeline(options, fake_tracer(TRACED)).postprocess(TRACED)
        doc = SVGDocument.from_string(result)
        assert doc.root[0].get("id") == "group--ff0000"

    def test_channel_quantization(self, fake_tracer):
        options = PipelineOptions(color_quantization_levels=2, color_quantization_mode="channels")
        result = Pipeline(options, fake_tracer(TRACED)).postprocess(TRACED)
        assert paths(result)[0].get("fill") == "rgb(255, 0, 0)"

    def test_color_reduction(self, fake_tracer, svg):
        options = PipelineOptions(color_quantization_levels=2)
        markup = svg(
            '<path fill="#000000" d="M0 0 L1 1"/>'
            '<path fill="#ffffff" d="M0 0 L1 1"/>'
            '<path fill="#808080" d="M0 0 L1 1"/>'
        )
        result = Pipeline(options, fake_tracer(markup)).postprocess(markup)
        assert [p.get("fill") for p in paths(result)] == [
            "rgb(64, 64, 64)", "rgb(255, 255, 255)", "rgb(64, 64, 64)"
        ]

    @pytest.mark.parametrize("changes", [
        {"color_quantization_levels": 1},
        {"color_quantization_levels": 257},
        {"smoothness": 150},
        {"simplify_tolerance": -1},
        {"outline_width": -2},
    ])
    def test_out_of_domain_options_skip_stage(self, fake_tracer, caplog, changes):
        options = PipelineOptions().replace(**changes)
        with caplog.at_level(logging.WARNING):
            result = Pipeline(options, fake_tracer(TRACED)).postprocess(TRACED)
        assert [p.d for p in paths(result)] == [p.d for p in paths(TRACED)]
        assert [p.get("fill") for p in paths(result)] == [p.get("fill") for p in paths(TRACED)]
        assert caplog.records

    def test_unparsable_markup_returned(self, fake_tracer):
        pipeline = Pipeline(PipelineOptions(path_merge=True), fake_tracer(""))
        assert pipeline.postprocess("<svg><path") == "<svg><path"


class TestProcessBuffer:
    """Test buffer conversion."""

    def test_result(self, fake_tracer, square_image):
        tracer = fake_tracer(TRACED)
        options = PipelineOptions(preview_mode="wireframe")
        result = Pipeline(options, tracer).process_buffer(square_image)

        assert paths(result.svg)[0].get("fill") == "#ff0000"
        assert paths(result.preview_svg)[0].get("stroke") == "#000"
        assert result.stats.path_count == 3
        assert result.stats.node_count == 9
        assert result.stats.color_count == 2
        assert tracer.calls[0][1] is options

    def test_subject_extraction_before_tracing(self, fake_tracer, square_image):
        tracer = fake_tracer(TRACED)
        options = PipelineOptions(subject_extract=SubjectExtractOptions(detect_edges=False))
        Pipeline(options, tracer).process_buffer(square_image)

        traced_image = tracer.calls[0][0]
        assert traced_image.pixels[0, 0, 3] == 0
        assert traced_image.pixels[20, 20, 3] == 255

    def test_edge_detection_before_tracing(self, fake_tracer, square_image):
        tracer = fake_tracer(TRACED)
        options = PipelineOptions(edge_detect=EdgeDetectOptions(mode="sobel"))
        Pipeline(options, tracer).process_buffer(square_image)

        traced_image = tracer.calls[0][0]
        assert set(np.unique(traced_image.pixels[..., 0])) == {0, 255}
        assert (traced_image.pixels[..., 3] == 255).all()

    def test_no_preprocessing_by_default(self, fake_tracer, square_image):
        tracer = fake_tracer(TRACED)
        Pipeline(tracer=tracer).process_buffer(square_image)
        assert tracer.calls[0][0] is square_image


class TestProcess:
    """Test file conversion."""

    def test_writes_output(self, fake_tracer, image_file, tmp_path):
        output = tmp_path / "out" / "result.svg"
        result = Pipeline(tracer=fake_tracer(TRACED)).process(image_file, output)
        assert output.read_text(encoding="utf-8") == result.svg

    def test_missing_file(self, fake_tracer, tmp_path):
        with pytest.raises(FileNotFoundError):
            Pipeline(tracer=fake_tracer(TRACED)).process(tmp_path / "missing.png")

    def test_tracer_errors_propagate(self, image_file):
        with pytest.raises(TracingError):
            Pipeline(tracer=FailingTracer(TracingError("boom"))).process(image_file)

    def test_unexpected_errors_wrapped(self, image_file):
        with pytest.raises(SvgRefineError, match="Pipeline processing failed"):
            Pipeline(tracer=FailingTracer(RuntimeError("boom"))).process(image_file)

    def test_process_image(self, fake_tracer, image_file):
        result = process_image(image_file, tracer=fake_tracer(TRACED))
        assert result.stats.path_count == 3


class TestBatch:
    """Test batch conversion."""

    def test_failures_are_isolated(self, fake_tracer, image_file, tmp_path):
        missing = tmp_path / "missing.png"
        pipeline = Pipeline(tracer=fake_tracer(TRACED))
        results = batch_process([missing, image_file], pipeline, tmp_path / "svgs")

        assert [r.file_name for r in results] == ["missing.png", "input.png"]
        assert not results[0].ok
        assert "missing.png" in results[0].error
        assert results[1].ok
        assert (tmp_path / "svgs" / "input.svg").exists()

    def test_get_image_files(self, tmp_path):
        for name in ("a.png", "b.JPG", "notes.txt"):
            (tmp_path / name).write_bytes(b"")
        assert [p.name for p in get_image_files(tmp_path)] == ["a.png", "b.JPG"]

    def test_missing_folder(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_image_files(tmp_path / "nope")
