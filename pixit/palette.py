""" Resolves a palette name to an ordered list of RGB colors. Palettes are read
from a local directory of `.hex` files and fetched from the Lospec palette list
when missing, falling back to the built-in palette on any failure. """

import http.client
import json
import logging
import urllib.request
from pathlib import Path
from typing import Iterable, List, Optional, Union

import coloredlogs

from pixit.config import (
    DEFAULT_PALETTE,
    DEFAULT_PALETTE_DIRECTORY,
    LOGGING_MODE,
    PALETTE_SUFFIX,
    PALETTE_URL,
    REQUEST_TIMEOUT,
)
from pixit.pixelate import RGB

logger = logging.getLogger(__name__)
coloredlogs.install(level=LOGGING_MODE, logger=logger)


class PaletteError(Exception):
    """Raised when a palette cannot be retrieved from the palette list."""


def hex_to_rgb(hex_str: str) -> RGB:
    """Parse '#rrggbb', 'rrggbb', '#rgb' or '#rrggbbaa' (case-insensitive) into an RGB tuple.

    An alpha component is dropped.
    """
    s = hex_str.strip().lower().lstrip("#")
    if len(s) == 3:
        s = "".join(c * 2 for c in s)
    if len(s) == 8:
        s = s[:6]
    if len(s) != 6:
        raise ValueError(f"'{hex_str}' is not a '#rrggbb' or '#rgb' color")
    return int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16)


def palette_stem(name: str) -> str:
    """Strips a trailing `.hex` so 'endesga-32.hex' and 'endesga-32' are the same."""
    if name.lower().endswith(PALETTE_SUFFIX):
        return name[: -len(PALETTE_SUFFIX)]
    return name


def load_palette_from_file(path: Path) -> List[RGB]:
    """Reads one hex color per line, skipping blank lines."""
    lines = path.read_text().splitlines()
    palette = [hex_to_rgb(line) for line in lines if line.strip()]
    if not palette:
        raise ValueError(f"Palette file '{path}' contains no colors")
    logger.debug(f"Loaded {len(palette)} colors from '{path}'")
    return palette


def save_palette(path: Path, hex_colors: Iterable[str]) -> None:
    """Writes the colors as `#rrggbb` lines."""
    content = "".join(f"#{color.lstrip('#')}\n" for color in hex_colors)
    path.write_text(content)
    logger.debug(f"Saved palette to '{path}'")


def fetch_palette(name: str) -> List[str]:
    """Downloads a palette from the Lospec palette list.

    Returns the hex strings of its colors, in order.
    """
    url = PALETTE_URL.format(name=name)
    try:
        with urllib.request.urlopen(url, timeout=REQUEST_TIMEOUT) as response:
            body = response.read()
    except (OSError, http.client.HTTPException) as e:
        raise PaletteError(f"Unable to connect to {url}: {e}") from e

    try:
        data = json.loads(body)
    except ValueError as e:
        raise PaletteError(f"Palette '{name}' is not in the correct format") from e

    if not isinstance(data, dict):
        raise PaletteError(f"Palette '{name}' is not in the correct format")
    if "error" in data:
        raise PaletteError(f"Error loading palette '{name}' from server: {data['error']}")

    colors = data.get("colors")
    if not isinstance(colors, list) or not colors:
        raise PaletteError(f"Palette '{name}' has no colors")
    if not all(isinstance(color, str) for color in colors):
        raise PaletteError(f"Palette '{name}' is not in the correct format")
    return colors


def load_palette(
    name: Optional[str],
    directory: Union[Path, str] = DEFAULT_PALETTE_DIRECTORY,
) -> List[RGB]:
    """Returns the palette with the given name.

    A cached `<directory>/<name>.hex` is used when present and readable. Otherwise
    the palette is downloaded and cached, if the cache can be written. Without a name, or when the download fails, the
    built-in palette is returned.
    """
    if name is None:
        return list(DEFAULT_PALETTE)

    stem = palette_stem(name)
    directory = Path(directory)
    path = directory / f"{stem}{PALETTE_SUFFIX}"
    if path.exists():
        try:
            return load_palette_from_file(path)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable palette cache: {e}")

    try:
        hex_colors = fetch_palette(stem)
        palette = [hex_to_rgb(color) for color in hex_colors]
    except (PaletteError, ValueError) as e:
        logger.warning(f"{e}. Resorting to the default palette.")
        return list(DEFAULT_PALETTE)

    try:
        directory.mkdir(parents=True, exist_ok=True)
        save_palette(path, hex_colors)
    except OSError as e:
        logger.warning(f"Unable to cache palette '{stem}': {e}")
    logger.info(f"Downloaded palette '{stem}' with {len(palette)} colors")
    return palette
