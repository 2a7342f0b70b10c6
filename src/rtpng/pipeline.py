"""
Per-document pipeline.

Each document goes through the same steps, strictly in order:

1. read the color of the metadata layer, if any;
2. prune hidden and occluded layers;
3. render each kept layer on its own canvas;
4. merge the rendered layers into a preview.

Nothing is shared between documents: the color is part of the returned
:py:class:`DocumentResult`. A batch reports a broken document and goes on
with the next one::

    failures = run_batch(['a.psd', 'b.psd'], Config(quantize=False))
"""

import logging
from typing import Iterable, Optional

import numpy as np
from attrs import define, field

from rtpng.color import find_color
from rtpng.composite import merge_preview, render_layer
from rtpng.config import Config
from rtpng.document import DocumentProtocol, PSDDocument
from rtpng.errors import DocumentSizeError, RtpngError
from rtpng.export import export_result
from rtpng.layers import KeptLayer
from rtpng.occlusion import prune

logger = logging.getLogger(__name__)


@define
class DocumentResult:
    """
    Rendered outputs of one document.

    .. py:attribute:: kept

        list of :py:class:`~rtpng.layers.KeptLayer`.

    .. py:attribute:: buffers

        Rendered RGBA buffers, parallel to `kept`.

    .. py:attribute:: preview

        Merged buffer, or `None` unless at least two layers are kept.
    """

    name: str
    width: int
    height: int
    color: Optional[str] = None
    kept: list[KeptLayer] = field(factory=list)
    buffers: list[np.ndarray] = field(factory=list, repr=False)
    preview: Optional[np.ndarray] = field(default=None, repr=False)


def process_document(
    document: DocumentProtocol, config: Optional[Config] = None
) -> DocumentResult:
    """
    Run the pipeline on a parsed document.

    :param document: :py:class:`~rtpng.document.DocumentProtocol`
    :param config: :py:class:`~rtpng.config.Config`
    :return: :py:class:`DocumentResult`
    :raises RtpngError: If the document cannot be processed.
    """
    config = config or Config()
    width, height = document.width, document.height
    if not config.allows(width, height):
        raise DocumentSizeError(
            "%s: resolution must be %s (%dx%d)"
            % (
                document.name,
                " or ".join("%dx%d" % size for size in config.sizes),
                width,
                height,
            )
        )

    color_mode = getattr(document.color_mode, "name", document.color_mode)
    if color_mode != "RGB":
        logger.warning("%s: unsupported color mode %s" % (document.name, color_mode))

    color = find_color(document.layers, config.metadata_name)
    layers = [x for x in document.layers if x.name != config.metadata_name]
    contents: dict[int, np.ndarray] = {}

    def fetch(layer):
        if id(layer) not in contents:
            contents[id(layer)] = document.get_raster_content(layer)
        return contents[id(layer)]

    kept = prune(layers, width, height, fetch)
    logger.debug("%s: kept %d layers" % (document.name, len(kept)))

    buffers = [render_layer(item.layer, width, height, fetch) for item in kept]
    contents.clear()
    preview = merge_preview(buffers, (width, height)) if len(buffers) > 1 else None
    return DocumentResult(
        name=document.name,
        width=width,
        height=height,
        color=color,
        kept=kept,
        buffers=buffers,
        preview=preview,
    )


def process_file(
    path: str, config: Optional[Config] = None, output_dir: Optional[str] = None
) -> list[str]:
    """
    Open, process and export a single document.

    :return: list of written filenames.
    """
    config = config or Config()
    result = process_document(PSDDocument.open(path), config)
    return export_result(result, path, config, output_dir)


def run_batch(
    paths: Iterable[str],
    config: Optional[Config] = None,
    output_dir: Optional[str] = None,
) -> int:
    """
    Process documents one after another.

    Errors of a document are logged and do not stop the batch.

    :return: number of documents that failed.
    """
    failures = 0
    for number, path in enumerate(paths, 1):
        logger.info("%03d %s" % (number, path))
        try:
            written = process_file(path, config, output_dir)
        except (RtpngError, OSError) as e:
            logger.error("%s [%s]: %s" % (path, e.__class__.__name__, e))
            failures += 1
            continue
        for filename in written:
            logger.debug("%s -> %s" % (path, filename))
    return failures
