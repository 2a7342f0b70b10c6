import argparse
import logging
from typing import Optional

from rtpng.config import Config, parse_size
from rtpng.constants import METADATA_LAYER_NAME
from rtpng.pipeline import run_batch
from rtpng.version import __version__

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="rtpng",
        description=(
            "Save each visible rasterized layer of PSD files as a separate PNG "
            "file and combine them into one preview PNG file."
        ),
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Be more verbose.")
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("input_files", nargs="+", metavar="file", help="Input PSD files")
    parser.add_argument(
        "-o", "--output-dir", default=None, help="Output directory. Default is next to the input."
    )
    parser.add_argument(
        "--size",
        dest="sizes",
        action="append",
        type=parse_size,
        default=[],
        metavar="WxH",
        help="Allowed canvas size, e.g. 1170x363. Repeatable. Default allows any size.",
    )
    parser.add_argument(
        "--metadata-name",
        default=METADATA_LAYER_NAME,
        help="Name of the solid color fill layer holding the color.",
    )
    parser.add_argument(
        "--no-quantize", action="store_true", help="Do not recompress outputs with pngquant."
    )
    parser.add_argument("--pngquant", default="pngquant", help="pngquant executable.")
    parser.add_argument("--quality", default="0-100", help="pngquant quality range.")
    parser.add_argument("--speed", type=int, default=1, help="pngquant speed, 1-11.")

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
    package_logger = logging.getLogger("rtpng")
    if args.verbose:
        package_logger.setLevel(logging.DEBUG)
    else:
        package_logger.setLevel(logging.INFO)

    try:
        config = Config(
            metadata_name=args.metadata_name,
            sizes=args.sizes,
            quantize=not args.no_quantize,
            pngquant=args.pngquant,
            quality=args.quality,
            speed=args.speed,
        )
    except ValueError as e:
        logger.error(str(e))
        return 2

    failures = run_batch(args.input_files, config, args.output_dir)
    if failures:
        logger.error("%d of %d files failed" % (failures, len(args.input_files)))
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
