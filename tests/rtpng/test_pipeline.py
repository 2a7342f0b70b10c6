import logging

import pytest

from rtpng import pipeline
from rtpng.config import Config
from rtpng.errors import (
    DocumentSizeError,
    MalformedColorError,
    RasterizationError,
    UnsupportedContentError,
)
from rtpng.constants import Kind
from rtpng.layers import Layer
from rtpng.pipeline import process_document, run_batch

from .utils import FakeDocument, fill_layer, raster, save_psd

logger = logging.getLogger(__name__)

WIDTH, HEIGHT = 8, 6
FULL = (0, 0, WIDTH, HEIGHT)


@pytest.fixture
def document():
    background = raster("Background", FULL, (255, 255, 255, 255))
    logo = raster("Logo", (1, 1, 4, 4), (255, 0, 0, 128))
    metadata = fill_layer(opacity=50)
    return FakeDocument(
        WIDTH,
        HEIGHT,
        [background[0], metadata, logo[0]],
        dict([background, logo]),
    )


def test_process_document(document):
    result = process_document(document, Config(quantize=False))
    assert result.name == "fake.psd"
    assert (result.width, result.height) == (WIDTH, HEIGHT)
    assert result.color == "#0cc9ff80"
    assert [(x.name, x.index) for x in result.kept] == [("Background", 1), ("Logo", 2)]
    assert len(result.buffers) == 2
    assert all(x.shape == (HEIGHT, WIDTH, 4) for x in result.buffers)
    assert result.preview is not None
    assert tuple(result.preview[0, 0]) == (255, 255, 255, 255)
    assert tuple(result.preview[2, 2]) == (255, 127, 127, 255)


def test_process_document_skips_metadata_layer(document):
    process_document(document)
    assert "color" not in document.fetched


def test_process_document_single_layer():
    background = raster("Background", FULL)
    document = FakeDocument(WIDTH, HEIGHT, [background[0]], dict([background]))
    result = process_document(document)
    assert [(x.name, x.index) for x in result.kept] == [("Background", 0)]
    assert result.color is None
    assert result.preview is None


def test_process_document_nothing_visible():
    hidden = raster("Hidden", FULL, visible=False)
    document = FakeDocument(WIDTH, HEIGHT, [hidden[0]], dict([hidden]))
    result = process_document(document)
    assert result.kept == []
    assert result.buffers == []
    assert result.preview is None


def test_process_document_colors_do_not_leak():
    first = FakeDocument(WIDTH, HEIGHT, [fill_layer()], name="first.psd")
    second = FakeDocument(WIDTH, HEIGHT, [Layer.group("Empty")], name="second.psd")
    assert process_document(first).color == "#0cc9ffff"
    assert process_document(second).color is None


def test_process_document_size():
    document = FakeDocument(WIDTH, HEIGHT)
    config = Config(sizes=[(1170, 363), (570, 363)])
    with pytest.raises(DocumentSizeError) as excinfo:
        process_document(document, config)
    assert "1170x363 or 570x363" in str(excinfo.value)
    assert process_document(document, Config(sizes=[(WIDTH, HEIGHT)])).kept == []


def test_process_document_color_mode(caplog):
    document = FakeDocument(WIDTH, HEIGHT, color_mode="CMYK")
    with caplog.at_level(logging.WARNING, logger="rtpng.pipeline"):
        process_document(document)
    assert "CMYK" in caplog.text


@pytest.mark.parametrize(
    "roots, error",
    [
        ([Layer("Title", kind=Kind.TEXT, bbox=(0, 0, 2, 2))], UnsupportedContentError),
        ([Layer("Box", kind=Kind.SHAPE, bbox=(0, 0, 2, 2))], UnsupportedContentError),
        ([fill_layer(rgb={"Rd": 1, "Grn": 2})], MalformedColorError),
        ([Layer("Missing", bbox=(0, 0, 2, 2))], RasterizationError),
    ],
)
def test_process_document_errors(roots, error):
    document = FakeDocument(WIDTH, HEIGHT, roots)
    with pytest.raises(error):
        process_document(document)


def test_run_batch_continues_after_failure(monkeypatch, caplog):
    processed = []

    def process_file(path, config=None, output_dir=None):
        processed.append(path)
        if path == "broken.psd":
            raise RasterizationError("truncated")
        return [path.replace(".psd", ".png")]

    monkeypatch.setattr(pipeline, "process_file", process_file)
    with caplog.at_level(logging.ERROR, logger="rtpng.pipeline"):
        failures = run_batch(["a.psd", "broken.psd", "b.psd"])
    assert failures == 1
    assert processed == ["a.psd", "broken.psd", "b.psd"]
    assert "broken.psd" in caplog.text


def test_run_batch_missing_file(tmp_path):
    assert run_batch([str(tmp_path / "missing.psd")], Config(quantize=False)) == 1


def test_process_document_fetches_once(document):
    process_document(document)
    assert document.fetched == ["Background", "Logo"]


def test_run_batch_malformed_document(tmp_path, caplog):
    broken = save_psd(str(tmp_path / "broken.psd"), inverted=True)
    good = save_psd(str(tmp_path / "good.psd"))
    with caplog.at_level(logging.ERROR, logger="rtpng.pipeline"):
        failures = run_batch([broken, good], Config(quantize=False))
    assert failures == 1
    assert "ParseError" in caplog.text
    assert not (tmp_path / "broken_01.png").exists()
    for name in ("good_01.png", "good_02.png", "good_MERGED.png"):
        assert (tmp_path / name).exists()
