from pathlib import Path

# Default edge length of a block, in source pixels
DEFAULT_BLOCK_SIZE = 12

# Used whenever no palette is given or a palette cannot be loaded
DEFAULT_PALETTE = [
    (140, 143, 174),
    (88, 69, 99),
    (62, 33, 55),
    (154, 99, 72),
    (215, 155, 125),
    (245, 237, 186),
    (192, 199, 65),
    (100, 125, 52),
    (228, 148, 58),
    (157, 48, 59),
    (210, 100, 113),
    (112, 55, 127),
    (126, 196, 193),
    (52, 133, 157),
    (23, 67, 75),
    (31, 14, 28),
]

# Valid image formats to include in directory processing
VALID_FORMATS = [
    ".png",
    ".jpg",
    ".jpeg",
]

# Output images are always written losslessly
OUTPUT_FORMAT = ".png"
OUTPUT_DIRECTORY_PREFIX = "pixit"

PALETTE_URL = "https://lospec.com/palette-list/{name}.json"
PALETTE_SUFFIX = ".hex"
DEFAULT_PALETTE_DIRECTORY = Path.home() / ".cache" / "pixit" / "palettes"
REQUEST_TIMEOUT = 10  # seconds

LOGGING_MODE = "INFO"
