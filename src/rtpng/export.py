"""
PNG export.

Output files are named after the input document::

    banner.psd  ->  banner_01.png, banner_02.png, banner_MERGED.png

A sole surviving layer is written unnumbered as ``banner.png`` and gets no
preview. When the document carries a color, it is appended to the stem,
e.g. ``banner_0cc9ff80_01.png``.
"""

import logging
import os
import subprocess
from typing import Optional

import numpy as np
from PIL import Image

from rtpng.config import Config
from rtpng.constants import MERGED_SUFFIX, PNGQUANT_SKIPPED
from rtpng.errors import QuantizeError

logger = logging.getLogger(__name__)


def output_stem(
    path: str, color: Optional[str] = None, output_dir: Optional[str] = None
) -> str:
    """Return the common path prefix of the outputs of a document."""
    stem = os.path.splitext(os.fspath(path))[0]
    if output_dir is not None:
        stem = os.path.join(output_dir, os.path.basename(stem))
    if color:
        stem += "_" + color.lstrip("#")
    return stem


def layer_filename(stem: str, index: int) -> str:
    """Index 0 means a sole unnumbered layer."""
    if index == 0:
        return stem + ".png"
    return "%s_%02d.png" % (stem, index)


def preview_filename(stem: str) -> str:
    return "%s_%s.png" % (stem, MERGED_SUFFIX)


def save_png(buffer: np.ndarray, filename: str) -> str:
    """Write an RGBA buffer as PNG."""
    Image.fromarray(buffer).save(filename, format="PNG")
    logger.debug("Saved %s" % filename)
    return filename


def quantize(filename: str, config: Optional[Config] = None) -> bool:
    """
    Reduce the file size of a PNG file with lossy compression by pngquant.

    :param filename: PNG file, replaced in place.
    :param config: :py:class:`~rtpng.config.Config`
    :return: True if the file was replaced, False if pngquant kept the
        original, e.g., because the result would be larger.
    :raises QuantizeError: If pngquant cannot run or fails.
    """
    config = config or Config()
    tmp_file = os.path.splitext(filename)[0] + "####.png"
    args = [
        config.pngquant,
        "--force",
        "--skip-if-larger",
        "--output",
        tmp_file,
        "--quality=%s" % config.quality,
        "--speed",
        str(config.speed),
        "--strip",
        "--",
        filename,
    ]
    logger.debug("Running %s" % " ".join(args))
    try:
        process = subprocess.run(
            args, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=False
        )
    except OSError as e:
        raise QuantizeError("Failed to run %s: %s" % (config.pngquant, e)) from e

    output = process.stdout.decode("utf-8", "replace").strip()
    if process.returncode != 0 and os.path.exists(tmp_file):
        os.remove(tmp_file)
    if process.returncode in PNGQUANT_SKIPPED:
        logger.debug("pngquant kept %s (%d)" % (filename, process.returncode))
        return False
    if process.returncode != 0:
        raise QuantizeError(
            "pngquant failed on %s (%d): %s" % (filename, process.returncode, output)
        )
    if output:
        logger.warning("pngquant: %s" % output)

    os.replace(tmp_file, filename)
    return True


def export_result(
    result, path: str, config: Optional[Config] = None, output_dir: Optional[str] = None
) -> list[str]:
    """
    Write the layers and the preview of a processed document.

    :param result: :py:class:`~rtpng.pipeline.DocumentResult`
    :param path: Path of the input document; outputs are named after it.
    :param config: :py:class:`~rtpng.config.Config`
    :param output_dir: Directory of the outputs. Default is next to `path`.
    :return: list of written filenames, the preview last.
    """
    config = config or Config()
    stem = output_stem(path, result.color, output_dir)

    targets = [
        (buffer, layer_filename(stem, kept.index))
        for kept, buffer in zip(result.kept, result.buffers)
    ]
    if result.preview is not None:
        targets.append((result.preview, preview_filename(stem)))

    written = []
    for buffer, filename in targets:
        save_png(buffer, filename)
        if config.quantize:
            quantize(filename, config)
        written.append(filename)
    return written
