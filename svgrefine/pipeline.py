"""Main pipeline orchestrator for svgrefine."""
import logging
from pathlib import Path
from typing import Optional, Union

from svgrefine.edge_detection import detect_edges, edge_map_to_image
from svgrefine.export import save_svg
from svgrefine.grouping import group_paths
from svgrefine.markup import SVGDocument
from svgrefine.outline import extract_outline
from svgrefine.path_merge import merge_paths
from svgrefine.preview import apply_preview_mode
from svgrefine.quantize import (
    MAX_LEVELS,
    MIN_LEVELS,
    optimize_color_quantization,
    reduce_color_count,
)
from svgrefine.raster_ingest import load_image
from svgrefine.region_filter import remove_small_regions
from svgrefine.simplify import simplify_paths
from svgrefine.smooth import smooth_paths
from svgrefine.stats import get_stats
from svgrefine.subject_extract import extract_subject
from svgrefine.tracing import Tracer, VTracerEngine
from svgrefine.types import (
    ImageBuffer,
    MarkupError,
    PipelineOptions,
    PipelineResult,
    SvgRefineError,
)

logger = logging.getLogger(__name__)


class Pipeline:
    """
    Raster to vector conversion with pre- and post-processing.

    Enabled raster stages run on the pixel buffer, the tracer turns it into
    markup, then the enabled vector stages run in a fixed order: simplify,
    smooth, merge, remove small regions, outline, group, color quantization.
    """

    def __init__(self, options: Optional[PipelineOptions] = None, tracer: Optional[Tracer] = None):
        """Initialize pipeline.

        Args:
            options: Conversion options. Uses defaults if None.
            tracer: Tracing engine. Uses vtracer if None.
        """
        self.options = options or PipelineOptions()
        self.tracer = tracer or VTracerEngine()

    def preprocess(self, image: ImageBuffer) -> ImageBuffer:
        """Run subject extraction and edge detection, when configured."""
        opts = self.options

        if opts.subject_extract is not None:
            logger.debug("Extracting subject")
            image = extract_subject(image, opts.subject_extract)

        if opts.edge_detect is not None:
            image = edge_map_to_image(detect_edges(image, opts.edge_detect))

        return image

    def postprocess(self, markup: str) -> str:
        """
        Run the enabled vector stages over traced markup.

        Markup that does not parse or has no paths is returned unchanged.
        """
        try:
            doc = SVGDocument.from_string(markup)
        except MarkupError as e:
            logger.warning(f"Skipping post-processing: {e}")
            return markup

        if not doc.paths():
            logger.debug("No paths to post-process")
            return markup

        opts = self.options
        precision = opts.precision

        if opts.simplify_tolerance < 0:
            logger.warning(f"Invalid simplify tolerance {opts.simplify_tolerance}, skipping")
        elif opts.simplify_tolerance > 0:
            simplify_paths(doc, opts.simplify_tolerance, precision)

        if not 0 <= opts.smoothness <= 100:
            logger.warning(f"Smoothness {opts.smoothness} outside [0, 100], skipping")
        elif opts.smoothness > 0:
            smooth_paths(doc, opts.smoothness / 100, precision)

        if opts.path_merge:
            merge_paths(doc, opts.canonical_colors, precision)

        if opts.remove_small_threshold < 0:
            logger.warning(f"Invalid region threshold {opts.remove_small_threshold}, skipping")
        elif opts.remove_small_threshold > 0:
            remove_small_regions(doc, opts.remove_small_threshold, opts.remove_small_mode)

        if opts.outline_width < 0:
            logger.warning(f"Invalid outline width {opts.outline_width}, skipping")
        elif opts.outline_width > 0:
            extract_outline(doc, opts.outline_width)

        if opts.path_group:
            group_paths(
                doc,
                by_color=opts.group_by_color,
                by_proximity=opts.group_by_proximity,
                proximity_threshold=opts.proximity_threshold,
                transitive=opts.transitive_proximity,
                canonical=opts.canonical_colors,
            )

        levels = opts.color_quantization_levels
        if levels is not None:
            if not MIN_LEVELS <= levels <= MAX_LEVELS:
                logger.warning(f"Color quantization levels {levels} outside [{MIN_LEVELS}, {MAX_LEVELS}], skipping")
            elif opts.color_quantization_mode == "channels":
                optimize_color_quantization(doc, levels)
            else:
                reduce_color_count(doc, levels, opts.canonical_colors)

        return doc.to_string()

    def process_buffer(self, image: ImageBuffer) -> PipelineResult:
        """Convert a pixel buffer.

        Args:
            image: Input buffer

        Returns:
            PipelineResult with the refined markup, its preview rendition and
            stats of the refined markup
        """
        prepared = self.preprocess(image)
        traced = self.tracer(prepared, self.options)
        svg = self.postprocess(traced)

        preview_svg = apply_preview_mode(
            svg, self.options.preview_mode, self.options.preview_outline_width
        )
        stats = get_stats(svg, self.options.canonical_colors)

        logger.debug(
            f"Converted {image.width}x{image.height} image: {stats.path_count} paths, "
            f"{stats.node_count} nodes, {stats.color_count} colors"
        )
        return PipelineResult(svg=svg, preview_svg=preview_svg, stats=stats)

    def process(
        self,
        image_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None,
    ) -> PipelineResult:
        """Process an image file through the pipeline.

        Args:
            image_path: Path to input image
            output_path: Optional path to save SVG output

        Returns:
            PipelineResult

        Raises:
            FileNotFoundError: If input file doesn't exist
            SvgRefineError: If processing fails
        """
        try:
            image = load_image(image_path)
            result = self.process_buffer(image)

            # Save if output path provided
            if output_path:
                save_svg(result.svg, output_path)

            return result

        except (FileNotFoundError, SvgRefineError):
            raise
        except Exception as e:
            raise SvgRefineError(f"Pipeline processing failed: {e}") from e


def process_image(
    image_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    options: Optional[PipelineOptions] = None,
    tracer: Optional[Tracer] = None,
) -> PipelineResult:
    """Convenience function to process an image.

    Args:
        image_path: Path to input image
        output_path: Optional path to save SVG
        options: Conversion options
        tracer: Tracing engine

    Returns:
        PipelineResult
    """
    return Pipeline(options, tracer).process(image_path, output_path)
