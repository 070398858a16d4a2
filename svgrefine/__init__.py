"""Raster to vector conversion with path post-processing."""
from svgrefine.types import (
    ImageBuffer,
    PipelineOptions,
    SubjectExtractOptions,
    EdgeDetectOptions,
    PipelineResult,
    Stats,
    BatchResult,
    SvgRefineError,
    MarkupError,
    ImageBufferError,
    TracingError,
    ExportError,
)
from svgrefine.pipeline import Pipeline, process_image
from svgrefine.path_editor import (
    NodeDragSession,
    add_point,
    delete_node,
    points_to_path_data,
    remove_point,
    update_point,
)

__all__ = [
    "ImageBuffer",
    "PipelineOptions",
    "SubjectExtractOptions",
    "EdgeDetectOptions",
    "PipelineResult",
    "Stats",
    "BatchResult",
    "SvgRefineError",
    "MarkupError",
    "ImageBufferError",
    "TracingError",
    "ExportError",
    "Pipeline",
    "process_image",
    "NodeDragSession",
    "add_point",
    "delete_node",
    "points_to_path_data",
    "remove_point",
    "update_point",
]
