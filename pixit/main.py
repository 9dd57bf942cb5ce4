import logging
import time
from pathlib import Path
from typing import Iterable, Optional

import click
import coloredlogs
import cv2

from pixit import config
from pixit.palette import load_palette
from pixit.pixelate import PixelateConfig, pixelate
from pixit.utils import (
    create_necessary_directory,
    default_output_directory_name,
    iterate_all_image_paths,
    load_image,
    output_image_path,
    remove_directory_if_empty,
    save_image,
)

logger = logging.getLogger(__name__)
coloredlogs.install(level=config.LOGGING_MODE, logger=logger)

IMAGE_ERRORS = (OSError, ValueError, cv2.error)


def pixelate_file(input_path: Path, output_path: Path, settings: PixelateConfig) -> Path:
    """Decodes, pixelates and encodes a single image."""
    image = load_image(input_path)
    pixelated = pixelate(image, settings)
    return save_image(pixelated, output_path)


def pixelate_and_write_images(
    paths: Iterable[Path], output_directory: Path, settings: PixelateConfig
) -> int:
    """Pixelates every image into the output directory.

    An image that fails is logged and skipped. Returns the number of images written.
    """
    written = 0
    for image_path in paths:
        output_path = output_image_path(image_path, output_directory)
        if output_path.exists():
            logger.warning(
                f"'{output_path}' already exists and will be overwritten "
                f"by '{image_path.name}'"
            )
        t1 = time.perf_counter()
        try:
            output_path = pixelate_file(image_path, output_path, settings)
        except IMAGE_ERRORS as e:
            logger.error(f"Failed to pixelate '{image_path}': {e}")
            output_path.unlink(missing_ok=True)
            continue
        delta_time = time.perf_counter() - t1
        written += 1
        logger.info(
            f"Image {image_path.name} pixelated and saved to {output_path} "
            f"after {delta_time:.2f} secs"
        )
    return written


@click.command()
@click.option("--image", "-i", type=click.Path(exists=True, dir_okay=False), help="Image to pixelate.")
@click.option("--directory", "-d", type=click.Path(exists=True, file_okay=False), help="Directory of images to pixelate.")
@click.option("--palette", "-p", default=None, help="Name of a Lospec palette, the built-in palette if omitted.")
@click.option(
    "--size",
    "-s",
    type=click.IntRange(min=1),
    default=config.DEFAULT_BLOCK_SIZE,
    show_default=True,
    help="Number of source pixels making up each output pixel.",
)
@click.option("--name", "-n", default="", help="Directory the output images are written to.")
@click.option("--large", "-l", is_flag=True, help="Export the image at its input size.")
@click.option("--workers", "-w", type=click.IntRange(min=1), default=1, show_default=True, help="Threads used per image.")
@click.option(
    "--palettes",
    type=click.Path(file_okay=False),
    default=str(config.DEFAULT_PALETTE_DIRECTORY),
    help="Directory downloaded palettes are cached in.",
)
def main(
    image: Optional[str],
    directory: Optional[str],
    palette: Optional[str],
    size: int,
    name: str,
    large: bool,
    workers: int,
    palettes: str,
):
    """Turn an image, or a directory of images, into pixel art."""
    if image and directory:
        raise click.UsageError("You can't specify both an image and a directory.")
    if not image and not directory:
        raise click.UsageError("You must specify either an image or a directory.")

    settings = PixelateConfig(
        size=size,
        palette=load_palette(palette, Path(palettes)),
        large=large,
        workers=workers,
    )

    output_directory = Path(name or default_output_directory_name(palette, int(time.time())))
    created = create_necessary_directory(output_directory)

    paths = [Path(image)] if image else iterate_all_image_paths(directory)
    written = pixelate_and_write_images(paths, output_directory, settings)
    if created:
        remove_directory_if_empty(output_directory)

    logger.info(f"Pixelated {written} of {len(paths)} images")
    if written < len(paths):
        raise SystemExit(1)


if __name__ == "__main__":
    main()
