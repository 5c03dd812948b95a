import logging
import os
import sys
import warnings
from argparse import ArgumentParser
from dataclasses import dataclass
from pathlib import Path

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

from fractal_flame import FlameConfig, FlameError, StageError, run_pipeline
from fractal_flame import transformations
from fractal_flame.config import (
    DEFAULT_GAMMA,
    DEFAULT_TRANSFORMATIONS,
    MAX_HEIGHT,
    MAX_SAMPLES,
    MAX_THREADS,
    MAX_TIMEOUT,
    MAX_WIDTH,
    PICTURE_NAME,
    WARMUP_ITERATIONS,
)
from fractal_flame.device import select_device
from fractal_flame.io import ImageFormat, save_image
from fractal_flame.logging_config import setup_logging

logger = logging.getLogger("fractal_flame.cli")


@dataclass
class OutputConfig:
    path: Path
    image_format: ImageFormat


def build_parser():
    parser = ArgumentParser(description="Render a fractal flame with the chaos game.")

    parser.add_argument('--width', type=int,
                        dest='width', help=f'image width in pixels (1-{MAX_WIDTH})',
                        metavar='WIDTH', default=800)

    parser.add_argument('--height', type=int,
                        dest='height', help=f'image height in pixels (1-{MAX_HEIGHT})',
                        metavar='HEIGHT', default=600)

    parser.add_argument('--samples', type=int,
                        dest='samples', help=f'number of plotted chaos-game steps (1-{MAX_SAMPLES})',
                        metavar='SAMPLES', default=1_000_000)

    parser.add_argument('--threads', type=int,
                        dest='threads', help=f'number of worker threads (1-{MAX_THREADS})',
                        metavar='THREADS', default=1)

    parser.add_argument('--transformation', dest='transformations', action='append', metavar='NAME',
                        help='Transformation to include in the flame. May be repeated. '
                             f'Default: {", ".join(DEFAULT_TRANSFORMATIONS)}.')

    parser.add_argument('--warmup', type=int,
                        dest='warmup', help='steps discarded at the start of every walk',
                        metavar='WARMUP', default=WARMUP_ITERATIONS)

    parser.add_argument('--gamma', type=float, default=DEFAULT_GAMMA, help='Gamma correction for tone mapping.')

    parser.add_argument('--format', type=str,
                        dest='format', help='output image format: png, jpeg or bmp. Default: "png".',
                        metavar='FORMAT', default='png')

    parser.add_argument('--output', dest='output', type=str,
                        help=f'Destination image file. Default: {PICTURE_NAME}.<format> in the working directory.')

    parser.add_argument('--timeout', type=float, default=MAX_TIMEOUT,
                        help='Seconds to wait for the worker pool before giving up.')

    parser.add_argument('--seed', type=int, default=None,
                        help='Root seed for the walks; omit for a different flame every run.')

    parser.add_argument('--list-transformations', dest='list_transformations', action='store_true',
                        help='Print the available transformations and exit.')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def resolve_output_config(opt, parser: ArgumentParser) -> OutputConfig:
    try:
        image_format = ImageFormat.from_name(opt.format or "png")
    except ValueError as exc:
        parser.error(str(exc))

    output_arg = getattr(opt, "output", None)
    if not output_arg:
        return OutputConfig(
            path=Path(f"{PICTURE_NAME}.{image_format.extension}").expanduser().resolve(),
            image_format=image_format,
        )

    if str(output_arg).endswith(tuple(filter(None, {os.sep, os.altsep}))):
        parser.error("--output must be a file path.")
    output_path = Path(output_arg).expanduser()
    if output_path.exists() and output_path.is_dir():
        parser.error("--output must point to a file, not a directory.")

    suffix = output_path.suffix
    if suffix:
        try:
            suffix_format = ImageFormat.from_name(suffix)
        except ValueError:
            parser.error(f"--output extension {suffix} is not a supported image format.")
        if suffix_format is not image_format:
            parser.error(f"--output extension {suffix} does not match --format {opt.format}.")
    else:
        output_path = output_path.with_suffix(f".{image_format.extension}")

    return OutputConfig(path=output_path.resolve(), image_format=image_format)


def _check_range(parser: ArgumentParser, name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        parser.error(f"--{name} must be between {low} and {high}, got {value}.")


def resolve_flame_config(opt, parser: ArgumentParser, output: OutputConfig, device: str) -> FlameConfig:
    _check_range(parser, "width", opt.width, 1, MAX_WIDTH)
    _check_range(parser, "height", opt.height, 1, MAX_HEIGHT)
    _check_range(parser, "samples", opt.samples, 1, MAX_SAMPLES)
    _check_range(parser, "threads", opt.threads, 1, MAX_THREADS)
    if opt.warmup < 0:
        parser.error("--warmup must not be negative.")
    if opt.gamma <= 0:
        parser.error("--gamma must be positive.")
    if opt.timeout is not None and opt.timeout <= 0:
        parser.error("--timeout must be positive.")

    try:
        selected = transformations.resolve(opt.transformations or DEFAULT_TRANSFORMATIONS)
    except KeyError as exc:
        parser.error(exc.args[0])

    return FlameConfig(
        width=opt.width,
        height=opt.height,
        samples=opt.samples,
        transformations=selected,
        threads=opt.threads,
        warmup_iterations=opt.warmup,
        gamma=opt.gamma,
        timeout=opt.timeout,
        seed=opt.seed,
        device=device,
        output=output.path,
    )


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    setup_logging(logging.DEBUG if opt.verbose else logging.INFO)

    if opt.list_transformations:
        for name in transformations.available():
            print(name)
        return 0

    output_config = resolve_output_config(opt, parser)
    config = resolve_flame_config(opt, parser, output_config, select_device())

    print("Image is generating...")
    try:
        result = run_pipeline(config)
    except StageError as exc:
        logger.error("%s stage failed: %s", exc.stage, exc.reason)
        return 1
    except FlameError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    print("Elapsed time: %d ms" % round(result.elapsed * 1000))
    path = save_image(result.canvas, output_config.path, output_config.image_format)
    print("Image generated successfully: %s" % path)
    return 0


if __name__ == '__main__':
    sys.exit(main())
