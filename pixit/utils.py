import logging
from pathlib import Path
from typing import List, Optional, Union

import coloredlogs
import cv2
import numpy as np
from PIL import Image, ImageOps

from pixit.config import (
    LOGGING_MODE,
    OUTPUT_DIRECTORY_PREFIX,
    OUTPUT_FORMAT,
    VALID_FORMATS,
)

logger = logging.getLogger(__name__)
coloredlogs.install(level=LOGGING_MODE, logger=logger)


def iterate_all_image_paths(directory: Union[Path, str]) -> List[Path]:
    """Returns the sorted paths of all images in a directory as pathlib `Path` instances."""
    if isinstance(directory, str):
        directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"The directory '{directory}' does not exist")

    image_paths = sorted(
        path
        for path in directory.iterdir()
        if path.is_file() and path.suffix.lower() in VALID_FORMATS
    )

    logger.info(f"Found {len(image_paths)} images in '{directory.absolute()}'")
    return image_paths


def load_image(path: Path) -> np.ndarray:
    """Decodes an image into an RGBA numpy array of shape (height, width, 4)."""
    with Image.open(path) as image:
        image = ImageOps.exif_transpose(image)
        rgba = np.array(image.convert("RGBA"), dtype=np.uint8)
    logger.debug(f"Loaded image: {path} with shape {rgba.shape}")
    return rgba


def save_image(image: np.ndarray, path: Path) -> Path:
    """Encodes an RGBA numpy array as a PNG. Returns the written path."""
    if path.suffix.lower() != OUTPUT_FORMAT:
        path = path.with_suffix(OUTPUT_FORMAT)
    if image.size == 0:
        raise ValueError(f"Refusing to write an empty image to '{path}'")
    bgra = cv2.cvtColor(image, cv2.COLOR_RGBA2BGRA)
    if not cv2.imwrite(str(path), bgra):
        raise OSError(f"Unable to write image '{path}'")
    logger.debug(f"Saved '{path.name}' with shape {image.shape}")
    return path


def output_image_path(image_path: Path, output_directory: Path) -> Path:
    """The output keeps the input's name but is always a PNG."""
    return output_directory / f"{image_path.stem}{OUTPUT_FORMAT}"


def default_output_directory_name(palette_name: Optional[str], timestamp: int) -> str:
    palette = (palette_name or "default").split(".")[0]
    return f"{OUTPUT_DIRECTORY_PREFIX}-{palette}-{timestamp}"


def create_necessary_directory(directory: Path) -> bool:
    """Creates the directory if needed. Returns whether it was created."""
    if directory.exists():
        return False
    directory.mkdir(parents=True)
    logger.info(f"Created directory '{directory.absolute()}'")
    return True


def remove_directory_if_empty(directory: Path) -> bool:
    """Removes the directory when nothing was written to it."""
    if directory.is_dir() and not any(directory.iterdir()):
        directory.rmdir()
        logger.info(f"Removed empty output directory '{directory}'")
        return True
    return False
