""" Contains the core pixelation pipeline. The image is cut into square blocks,
each block is averaged and snapped to the closest palette color, and the result
is either kept at the original resolution or shrunk to one pixel per block. """

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from math import inf
from typing import Iterator, List, Sequence, Tuple

import coloredlogs
import numpy as np

from pixit.config import DEFAULT_BLOCK_SIZE, DEFAULT_PALETTE, LOGGING_MODE

logger = logging.getLogger(__name__)
coloredlogs.install(level=LOGGING_MODE, logger=logger)

RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, int]
Palette = Sequence[RGB]
BlockSlice = Tuple[slice, slice]

OPAQUE = 255


@dataclass(frozen=True)
class PixelateConfig:
    """Settings for a single pixelation run.

    `size` is the edge length of a block in source pixels, `large` keeps the
    output at the source resolution and `workers` is the number of threads
    the block rows are spread over.
    """

    size: int = DEFAULT_BLOCK_SIZE
    palette: Palette = tuple(DEFAULT_PALETTE)
    large: bool = False
    workers: int = 1


def validate(image: np.ndarray, config: PixelateConfig) -> None:
    """Rejects configurations and images that cannot be split into blocks."""
    if config.size < 1:
        raise ValueError(f"Block size must be a positive integer, got {config.size}")
    if len(config.palette) == 0:
        raise ValueError("The palette must contain at least one color")
    if config.workers < 1:
        raise ValueError(f"Worker count must be at least 1, got {config.workers}")
    if image.ndim != 3 or image.shape[2] != 4:
        raise ValueError(
            f"Expected an RGBA image of shape (height, width, 4), got {image.shape}"
        )
    height, width = image.shape[:2]
    if width == 0 or height == 0:
        raise ValueError(f"Cannot pixelate an empty image of size {width}x{height}")


def iterate_block_rows(width: int, height: int, size: int) -> Iterator[List[BlockSlice]]:
    """Yields each row of blocks as a list of numpy slices.

    Blocks on the right and bottom edges are smaller when the dimensions are not
    a multiple of `size`; numpy clips the slices to the image.
    """
    for y in range(0, height, size):
        yield [np.s_[y : y + size, x : x + size] for x in range(0, width, size)]


def iterate_blocks(width: int, height: int, size: int) -> Iterator[BlockSlice]:
    """Yields the slice of every block in row-major order."""
    for row in iterate_block_rows(width, height, size):
        yield from row


def average_color(block: np.ndarray) -> RGBA:
    """Averages every channel over the pixels actually present in the block.

    Sums are accumulated as 64 bit integers and divided with floor division.
    """
    pixels = block.reshape(-1, block.shape[-1]).astype(np.uint64)
    count = pixels.shape[0]
    totals = pixels.sum(axis=0)
    return tuple(int(total) // count for total in totals)


def squared_distance(a: Sequence[int], b: Sequence[int]) -> int:
    """Squared euclidean distance between two colors over red, green and blue."""
    return sum((int(x) - int(y)) ** 2 for x, y in zip(a[:3], b[:3]))


def nearest_palette_color(color: Sequence[int], palette: Palette) -> RGB:
    """Given a color, find the closest color in the palette.

    Only a strictly smaller distance replaces the current best, so on a tie the
    entry that comes first in the palette wins.
    """
    if len(palette) == 0:
        raise ValueError("The palette must contain at least one color")
    min_distance = inf
    closest_color = palette[0]
    for candidate in palette:
        distance = squared_distance(color, candidate)
        if distance < min_distance:
            min_distance = distance
            closest_color = candidate
    r, g, b = closest_color[:3]
    return int(r), int(g), int(b)


def quantize_block(block: np.ndarray, palette: Palette) -> RGBA:
    """Returns the opaque palette color a block is replaced with."""
    # the averaged alpha is dropped
    r, g, b, _ = average_color(block)
    return (*nearest_palette_color((r, g, b), palette), OPAQUE)


def fill_blocks(
    image: np.ndarray, output: np.ndarray, blocks: List[BlockSlice], palette: Palette
) -> None:
    """Writes the quantized color of each block into the same region of `output`."""
    for sliced in blocks:
        output[sliced] = quantize_block(image[sliced], palette)


def shrink(image: np.ndarray, size: int) -> np.ndarray:
    """Nearest neighbour downsample to one pixel per complete block.

    Trailing partial blocks are dropped from the dimensions.
    """
    height, width = image.shape[:2]
    new_width, new_height = width // size, height // size
    if new_width == 0 or new_height == 0:
        logger.warning(
            f"Block size {size} is larger than the {width}x{height} image, "
            "the shrunk output is empty."
        )
    # Each output pixel samples the top left pixel of its block
    sampled = image[0 : new_height * size : size, 0 : new_width * size : size]
    return np.ascontiguousarray(sampled)


def pixelate(image: np.ndarray, config: PixelateConfig) -> np.ndarray:
    """Turns an RGBA image into pixel art restricted to the configured palette.

    The input is not modified. A new RGBA array is returned, either the same
    size as the input (`config.large`) or `(height // size, width // size)`.
    """
    validate(image, config)
    height, width = image.shape[:2]
    output = np.zeros((height, width, 4), dtype=np.uint8)
    rows = list(iterate_block_rows(width, height, config.size))

    t1 = time.perf_counter()
    if config.workers > 1:
        # Blocks write to disjoint regions of the output
        with ThreadPoolExecutor(max_workers=config.workers) as executor:
            futures = [
                executor.submit(fill_blocks, image, output, row, config.palette)
                for row in rows
            ]
            for future in futures:
                future.result()
    else:
        for row in rows:
            fill_blocks(image, output, row, config.palette)
    delta_time = time.perf_counter() - t1

    logger.debug(
        f"Quantized {sum(len(row) for row in rows)} blocks of {config.size}px "
        f"against {len(config.palette)} colors in {delta_time:.3f} secs."
    )

    if config.large:
        return output
    return shrink(output, config.size)
