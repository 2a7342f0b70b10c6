"""
rtpng: export the visible layers of a layered document as PNG files.

Every visible raster layer of a PSD/PSB document is saved as a separate,
canvas-sized PNG, and the saved layers are flattened into one preview.
Layers hidden behind a fully opaque layer are dropped.

Basic usage::

    from rtpng import Config, process_file

    # Writes banner_01.png, banner_02.png, ..., banner_MERGED.png
    process_file('banner.psd', Config(quantize=False))

Architecture:

- :py:mod:`rtpng.layers`: Layer tree
- :py:mod:`rtpng.visibility`: Effective visibility
- :py:mod:`rtpng.color`: Color metadata
- :py:mod:`rtpng.occlusion`: Occlusion pruning
- :py:mod:`rtpng.composite`: Layer rendering and preview merging
- :py:mod:`rtpng.document`: psd-tools adapter
- :py:mod:`rtpng.pipeline`: Per-document pipeline and batches
- :py:mod:`rtpng.export`: PNG files and pngquant
"""

from rtpng.color import extract_color, find_color
from rtpng.composite import merge_preview, render_layer
from rtpng.config import Config
from rtpng.document import PSDDocument
from rtpng.layers import KeptLayer, Layer
from rtpng.occlusion import prune
from rtpng.pipeline import DocumentResult, process_document, process_file, run_batch
from rtpng.version import __version__
from rtpng.visibility import is_visible

__all__ = [
    "Config",
    "DocumentResult",
    "KeptLayer",
    "Layer",
    "PSDDocument",
    "__version__",
    "extract_color",
    "find_color",
    "is_visible",
    "merge_preview",
    "process_document",
    "process_file",
    "prune",
    "render_layer",
    "run_batch",
]
