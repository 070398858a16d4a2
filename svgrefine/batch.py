"""Sequential batch conversion."""
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

from svgrefine.pipeline import Pipeline
from svgrefine.types import BatchResult

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.gif', '.tiff', '.webp'}


def get_image_files(folder: Union[str, Path], extensions: Optional[Set[str]] = None) -> List[Path]:
    """Get all image files from a folder."""
    if extensions is None:
        extensions = IMAGE_EXTENSIONS

    folder = Path(folder)
    if not folder.exists():
        raise FileNotFoundError(f"Input folder not found: {folder}")

    images = []
    for ext in extensions:
        images.extend(folder.glob(f"*{ext}"))
        images.extend(folder.glob(f"*{ext.upper()}"))

    return sorted(set(images))


def batch_process(
    paths: Iterable[Union[str, Path]],
    pipeline: Pipeline,
    output_dir: Optional[Union[str, Path]] = None,
) -> List[BatchResult]:
    """
    Convert images one after another.

    A failing image is logged and recorded with its error message; the
    remaining images are still processed.

    Args:
        paths: Input images
        pipeline: Configured pipeline
        output_dir: Folder to write ``<name>.svg`` files to, if given

    Returns:
        One BatchResult per input, in input order
    """
    paths = [Path(p) for p in paths]
    output_dir = Path(output_dir) if output_dir else None
    results = []

    for i, path in enumerate(paths, 1):
        logger.info(f"Processing {i}/{len(paths)}: {path.name}")
        output_path = output_dir / f"{path.stem}.svg" if output_dir else None
        try:
            result = pipeline.process(path, output_path)
        except Exception as e:
            logger.error(f"Failed to process {path.name}: {e}")
            results.append(BatchResult(file_name=path.name, error=str(e)))
            continue

        results.append(BatchResult(file_name=path.name, svg=result.svg))

    failed = sum(1 for r in results if not r.ok)
    logger.info(f"Completed: {len(results) - failed}/{len(results)} files processed")
    return results
