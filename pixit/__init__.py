"""Turn images into palette-restricted pixel art."""

__version__ = "0.1.0"
