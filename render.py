import os
import sys
import warnings
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

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import time
from argparse import ArgumentParser

import PIL.Image

from mandelgrid import (
    ENGINES,
    Grid,
    GridParameters,
    GradientStop,
    ImageRenderer,
    IterationLimits,
    LinearPalette,
    MultiColorGradient,
    colormap_gradient,
    parse_color,
)
from mandelgrid.color import to_hex

PALETTES = ("linear", "gradient", "colormap")

# Default gradient: green at 10% between red and blue.
DEFAULT_STOPS = ("0.1:#00ff00",)


def select_device():
    """Return the first GPU TensorFlow can see, falling back to the CPU."""

    import tensorflow as tf

    if _suppress_messages:
        try:
            tf.get_logger().setLevel("ERROR")
            for handler in tf.get_logger().handlers:
                handler.setLevel("ERROR")
        except Exception:
            pass

    log("TensorFlow version: %s" % tf.__version__)

    gpus = tf.config.list_physical_devices('GPU')
    if gpus:
        try:
            for gpu in gpus:
                tf.config.experimental.set_memory_growth(gpu, True)
            log("GPU found, using %s" % gpus[0].name)
            return '/GPU:0'
        except RuntimeError as e:
            if VERBOSE:
                print(e)
            return '/CPU:0'
    log("No GPU found, using CPU")
    return '/CPU:0'


def parse_stop(text):
    """Parse ``PERCENT:COLOR`` into a gradient stop."""

    percent, sep, color = text.partition(':')
    if not sep:
        raise ValueError(f"gradient stop {text!r} must look like PERCENT:COLOR")
    return GradientStop(float(percent), parse_color(color))


def build_parser():
    parser = ArgumentParser(description='Render the Mandelbrot set over a grid of samples.')

    parser.add_argument('--center-real', type=float,
                        dest='center_real', help='real coordinate of the center of the grid',
                        metavar='CENTER_REAL', default=-0.75)

    parser.add_argument('--center-imag', type=float,
                        dest='center_imag', help='imaginary coordinate of the center of the grid',
                        metavar='CENTER_IMAG', default=0.0)

    parser.add_argument('--width', type=int,
                        dest='width', help='number of samples along the real axis',
                        metavar='WIDTH', default=800)

    parser.add_argument('--height', type=int,
                        dest='height', help='number of samples along the imaginary axis',
                        metavar='HEIGHT', default=600)

    parser.add_argument('--pixel-pitch', type=float,
                        dest='pixel_pitch', help='distance in the complex plane between neighbouring samples',
                        metavar='PIXEL_PITCH', default=0.004)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='maximum number of iterations per point',
                        metavar='MAX_ITERATIONS', default=10000)

    parser.add_argument('--bailout', type=float,
                        dest='bailout_squared', help='squared modulus at which a point counts as escaped',
                        metavar='BAILOUT_SQUARED', default=4.0)

    parser.add_argument('--palette', choices=PALETTES, default='gradient',
                        help='Palette used to color escaped points.')

    parser.add_argument('--low-color', type=parse_color, default='#00ff00',
                        help='Linear palette color reached by the slowest escaping points.')
    parser.add_argument('--high-color', type=parse_color, default='#ff0000',
                        help='Linear palette color reached by the fastest escaping points.')

    parser.add_argument('--stop', dest='stops', action='append', type=parse_stop, metavar='PERCENT:COLOR',
                        help='Gradient stop, may be repeated. Defaults to a single green stop at 0.1.')
    parser.add_argument('--min-color', type=parse_color, default='#ff0000',
                        help='Gradient color below the first stop.')
    parser.add_argument('--max-color', type=parse_color, default='#0000ff',
                        help='Gradient color above the last stop.')

    parser.add_argument('--colormap', type=str,
                        dest='colormap', help='matplotlib colormap sampled by the colormap palette (e.g. "viridis")',
                        metavar='COLORMAP', default='twilight_shifted')
    parser.add_argument('--colormap-stops', type=int, default=16,
                        help='Number of stops sampled from the colormap.')
    parser.add_argument('--invert', action='store_true', help='Invert the selected colormap.')

    parser.add_argument('--in-set-color', type=parse_color, default='#000000',
                        help='Color for points inside the Mandelbrot set.')

    parser.add_argument('--engine', choices=ENGINES, default='tensorflow',
                        help='Iteration engine: vectorized TensorFlow or per-point Python.')
    parser.add_argument('--workers', type=int, default=None,
                        help='Worker threads for the iteration pass. Default: CPU count.')

    parser.add_argument('--output', dest='output', type=str, default='output.png',
                        help='Destination image file.')
    parser.add_argument('--format', type=str,
                        dest='format', help='image format. Can be any extension supported by Pillow. Default: taken from --output.',
                        metavar='FORMAT', default=None)

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and hardware diagnostics.')

    return parser


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def resolve_output(opt, parser: ArgumentParser) -> tuple[Path, str]:
    output_path = Path(opt.output).expanduser()
    image_format = (opt.format or output_path.suffix or "png").lower().lstrip(".")
    if not image_format:
        image_format = "png"

    suffix = output_path.suffix
    if suffix:
        if opt.format and suffix.lower() != f".{image_format}":
            parser.error(f"--output extension {suffix} does not match --format {image_format}.")
    else:
        output_path = output_path.with_suffix(f".{image_format}")
    if output_path.exists() and output_path.is_dir():
        parser.error("--output must point to a file, not a directory.")
    return output_path.resolve(), image_format


def write_single_image(image: PIL.Image.Image, output_path: Path, image_format: str) -> None:
    """Write a single image to ``output_path`` using the provided format."""

    pil_format = _pil_format_name(image_format)
    if pil_format == "JPEG" and image.mode == "RGBA":
        image = image.convert("RGB")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=pil_format)


def build_palette(opt, grid: Grid):
    if opt.palette == 'linear':
        return LinearPalette(grid, opt.low_color, opt.high_color, opt.in_set_color)
    if opt.palette == 'colormap':
        return colormap_gradient(grid, opt.colormap, opt.colormap_stops, opt.in_set_color, invert=opt.invert)
    stops = opt.stops if opt.stops is not None else [parse_stop(text) for text in DEFAULT_STOPS]
    return MultiColorGradient(grid, stops, opt.min_color, opt.max_color, opt.in_set_color)


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    output_path, image_format = resolve_output(opt, parser)

    params = GridParameters(
        center_real=opt.center_real,
        center_imag=opt.center_imag,
        width=opt.width,
        height=opt.height,
        pixel_pitch=opt.pixel_pitch,
    )
    try:
        limits = IterationLimits(opt.max_iterations, opt.bailout_squared)
        grid = Grid.from_parameters(params, limits=limits)
    except ValueError as exc:
        parser.error(str(exc))

    if opt.workers is not None and opt.workers <= 0:
        parser.error("--workers must be positive.")

    device = select_device() if opt.engine == 'tensorflow' else None

    log("Grid %dx%d centered at %r, pitch %g" % (grid.width, grid.height, grid.center, grid.pixel_pitch))
    started = time.perf_counter()
    grid.iterate_all(workers=opt.workers, engine=opt.engine, device=device)
    log("Iterated %d points in %.2fs" % (len(grid), time.perf_counter() - started))

    try:
        palette = build_palette(opt, grid)
    except ValueError as exc:
        parser.error(str(exc))

    if palette.is_degenerate:
        log("No point escaped; every escaped ratio is treated as 0.")
    else:
        log("Calibrated palette to %d iterations" % palette.max_iterations)
    log("In-set color %s" % to_hex(palette.in_set_color))

    buffer = ImageRenderer().render(grid, palette)
    image = PIL.Image.fromarray(buffer.to_array())
    write_single_image(image, output_path, image_format)

    print(f"Generated image to {output_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
