"""Command line interface for svgrefine."""
import argparse
import logging
import sys
from pathlib import Path

from svgrefine.batch import batch_process, get_image_files
from svgrefine.export import export
from svgrefine.pipeline import Pipeline
from svgrefine.stats import format_stats
from svgrefine.types import (
    EdgeDetectOptions,
    PipelineOptions,
    SubjectExtractOptions,
    SvgRefineError,
)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='svgrefine',
        description='Convert raster images to SVG and refine the traced paths'
    )

    parser.add_argument(
        'input',
        type=str,
        help='Input image path (or folder with --batch)'
    )

    parser.add_argument(
        '-o', '--output',
        type=str,
        help='Output SVG path, or output folder with --batch (default: next to input)'
    )

    parser.add_argument(
        '--batch',
        action='store_true',
        help='Process every image in the input folder'
    )

    parser.add_argument(
        '--simplify',
        type=float,
        default=0.0,
        help='Douglas-Peucker tolerance in pixels (default: 0, off)'
    )

    parser.add_argument(
        '--smooth',
        type=float,
        default=0.0,
        help='Smoothness in percent, 0-100 (default: 0, off)'
    )

    parser.add_argument(
        '--merge',
        action='store_true',
        help='Merge same-color paths whose ends touch'
    )

    parser.add_argument(
        '--remove-small',
        type=float,
        default=0.0,
        help='Remove regions smaller than this (default: 0, off)'
    )

    parser.add_argument(
        '--remove-small-mode',
        type=str,
        choices=['area', 'length', 'dimension'],
        default='dimension',
        help='How region size is measured (default: dimension)'
    )

    parser.add_argument(
        '--outline',
        type=float,
        default=0.0,
        help='Convert fills to outlines of this stroke width (default: 0, off)'
    )

    parser.add_argument(
        '--group',
        action='store_true',
        help='Group paths by color'
    )

    parser.add_argument(
        '--group-proximity',
        type=float,
        default=None,
        metavar='DISTANCE',
        help='Also group shapes whose centroids are closer than DISTANCE'
    )

    parser.add_argument(
        '--seed-grouping',
        action='store_true',
        help='Cluster proximity groups around the earliest shape instead of transitively'
    )

    parser.add_argument(
        '--colors',
        type=int,
        default=None,
        help='Reduce the palette toward this many colors (2-256)'
    )

    parser.add_argument(
        '--quantize-channels',
        action='store_true',
        help='With --colors, snap channels to a grid instead of clustering colors'
    )

    parser.add_argument(
        '--raw-colors',
        action='store_true',
        help='Compare colors by their exact text instead of their value'
    )

    parser.add_argument(
        '--preview',
        type=str,
        choices=['normal', 'fill-only', 'outline-only', 'wireframe'],
        default='normal',
        help='Preview mode for the --preview-output file (default: normal)'
    )

    parser.add_argument(
        '--preview-output',
        type=str,
        default=None,
        help='Write the preview rendition to this SVG path'
    )

    parser.add_argument(
        '--subject',
        type=float,
        default=None,
        metavar='THRESHOLD',
        help='Remove the background before tracing, using this color threshold'
    )

    parser.add_argument(
        '--no-subject-edges',
        action='store_true',
        help='Do not protect edges during background removal'
    )

    parser.add_argument(
        '--edges',
        type=str,
        choices=['sobel', 'canny'],
        default=None,
        help='Trace an edge map instead of the image'
    )

    parser.add_argument(
        '--edge-threshold',
        type=float,
        default=50.0,
        help='Sobel threshold (default: 50)'
    )

    parser.add_argument(
        '--canny-low',
        type=float,
        default=50.0,
        help='Canny low threshold (default: 50)'
    )

    parser.add_argument(
        '--canny-high',
        type=float,
        default=100.0,
        help='Canny high threshold (default: 100)'
    )

    parser.add_argument(
        '--stats',
        action='store_true',
        help='Print path, node and color counts'
    )

    parser.add_argument(
        '--export',
        type=str,
        choices=['png', 'pdf'],
        default=None,
        help='Also export the result as PNG or PDF'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    return parser


def build_options(parsed_args) -> PipelineOptions:
    """Translate parsed arguments into pipeline options."""
    subject = None
    if parsed_args.subject is not None:
        subject = SubjectExtractOptions(
            threshold=parsed_args.subject,
            detect_edges=not parsed_args.no_subject_edges,
        )

    edges = None
    if parsed_args.edges:
        edges = EdgeDetectOptions(
            mode=parsed_args.edges,
            threshold=parsed_args.edge_threshold,
            low_threshold=parsed_args.canny_low,
            high_threshold=parsed_args.canny_high,
        )

    by_proximity = parsed_args.group_proximity is not None

    return PipelineOptions(
        simplify_tolerance=parsed_args.simplify,
        smoothness=parsed_args.smooth,
        path_merge=parsed_args.merge,
        remove_small_threshold=parsed_args.remove_small,
        remove_small_mode=parsed_args.remove_small_mode,
        outline_width=parsed_args.outline,
        path_group=parsed_args.group or by_proximity,
        group_by_color=parsed_args.group,
        group_by_proximity=by_proximity,
        proximity_threshold=parsed_args.group_proximity if by_proximity else 50.0,
        transitive_proximity=not parsed_args.seed_grouping,
        color_quantization_levels=parsed_args.colors,
        color_quantization_mode='channels' if parsed_args.quantize_channels else 'reduce',
        canonical_colors=not parsed_args.raw_colors,
        preview_mode=parsed_args.preview,
        subject_extract=subject,
        edge_detect=edges,
    )


def _run_batch(parsed_args, pipeline: Pipeline) -> int:
    input_dir = Path(parsed_args.input)
    output_dir = Path(parsed_args.output) if parsed_args.output else input_dir

    try:
        images = get_image_files(input_dir)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not images:
        print(f"Error: No images found in {input_dir}", file=sys.stderr)
        return 1

    results = batch_process(images, pipeline, output_dir)

    failed = [r for r in results if not r.ok]
    print(f"Processed {len(results) - len(failed)}/{len(results)} images into {output_dir}")
    for result in failed:
        print(f"  {result.file_name}: {result.error}", file=sys.stderr)

    return 1 if failed else 0


def main(args=None):
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    pipeline = Pipeline(build_options(parsed_args))

    if parsed_args.batch:
        return _run_batch(parsed_args, pipeline)

    # Resolve input path
    input_path = Path(parsed_args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    # Determine output path
    if parsed_args.output:
        output_path = Path(parsed_args.output)
    else:
        output_path = input_path.with_suffix('.svg')

    try:
        result = pipeline.process(input_path, output_path)
        print(f"Saved: {output_path}")

        if parsed_args.preview_output:
            preview_path = export(result.preview_svg, parsed_args.preview_output, 'svg')
            print(f"Preview: {preview_path}")

        if parsed_args.export:
            exported = export(result.svg, output_path.with_suffix(f'.{parsed_args.export}'), parsed_args.export)
            print(f"Exported: {exported}")

        if parsed_args.stats:
            print(format_stats(result.stats))

        return 0

    except (SvgRefineError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
