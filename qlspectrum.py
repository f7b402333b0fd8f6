import os
import sys
import argparse
import time

try:
    from rich.console import Console
    from rich.table import Table
    from rich import box
except ImportError:
    print("Error: The 'rich' library is required for the CLI but not installed.", file=sys.stderr)
    print("Please install it with: pip install qlspectrum[cli]", file=sys.stderr)
    sys.exit(1)

from qlspectrumlib import __version__
from qlspectrumlib.audio import format_frequency_label, format_time_label
from qlspectrumlib.config import ConfigError, default_config, load_preset, merge_configs
from qlspectrumlib.engine import SpectrogramEngine
from qlspectrumlib.errors import SpectrogramError
from qlspectrumlib.models import FrequencyRange, TimeRange

console = Console()


def positive_int(value):
    ivalue = int(value)
    if ivalue <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return ivalue


def non_negative_float(value):
    fvalue = float(value)
    if fvalue < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return fvalue


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description="Render a spectrogram of an audio file",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--version", action="version",
                        version=f"qlspectrum {__version__}")

    parser.add_argument("file", type=str,
                        help="Audio file to analyze (first channel only)")

    # Ranges
    parser.add_argument("--start", type=non_negative_float, default=None,
                        help="Start of the time window (s); default: file start")
    parser.add_argument("--end", type=non_negative_float, default=None,
                        help="End of the time window (s); default: file end")
    parser.add_argument("--fmin", type=non_negative_float, default=None,
                        help="Lower frequency bound (Hz); default: 0")
    parser.add_argument("--fmax", type=non_negative_float, default=None,
                        help="Upper frequency bound (Hz); default: Nyquist")

    # Output
    parser.add_argument("--width", type=positive_int, default=None,
                        help="Image width in pixels; default from config")
    parser.add_argument("--height", type=positive_int, default=None,
                        help="Image height in pixels; default from config")
    parser.add_argument("--preset", type=str, default=None,
                        help="JSON preset with configuration overrides")

    args = parser.parse_args(argv)

    if args.start is not None and args.end is not None and args.end < args.start:
        parser.error("--end must not be before --start")
    if args.fmin is not None and args.fmax is not None and args.fmax < args.fmin:
        parser.error("--fmax must not be below --fmin")

    return args


def build_ranges(args, source):
    """Turn optional CLI bounds into ranges; None when neither bound is set."""
    time_range = None
    if args.start is not None or args.end is not None:
        start = args.start if args.start is not None else 0.0
        end = args.end if args.end is not None else source.duration
        time_range = TimeRange(start, max(start, end))
    freq_range = None
    if args.fmin is not None or args.fmax is not None:
        fmin = args.fmin if args.fmin is not None else 0.0
        fmax = args.fmax if args.fmax is not None else source.nyquist
        freq_range = FrequencyRange(fmin, max(fmin, fmax))
    return time_range, freq_range


def print_summary(source, result, elapsed_ms):
    table = Table(title=source.file_name, box=box.SIMPLE_HEAVY, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Sample rate", f"{source.sample_rate} Hz")
    table.add_row("Channels", f"{source.channels} (analyzing channel 1)")
    table.add_row("Duration", format_time_label(source.duration))
    table.add_row("Time range", f"{format_time_label(result.time_range.lo)} - "
                                f"{format_time_label(result.time_range.hi)}")
    table.add_row("Frequency range",
                  f"{format_frequency_label(result.frequency_range.lo)} - "
                  f"{format_frequency_label(result.frequency_range.hi)}")
    table.add_row("Frames x bins", f"{result.num_frames} x {result.num_bins}")
    table.add_row("dB window", f"{result.db_window[0]:.1f} .. {result.db_window[1]:.1f} dB")
    table.add_row("Image", f"{result.width} x {result.height}")
    table.add_row("Elapsed", f"{elapsed_ms:.1f} ms")
    console.print(table)


def main(argv=None):
    args = parse_arguments(argv)

    if not os.path.isfile(args.file):
        console.print(f"[bold red]Error:[/] File '{args.file}' not found.")
        return 1

    config = default_config()
    try:
        if args.preset:
            config = merge_configs(config, load_preset(args.preset))
        engine = SpectrogramEngine(config)
    except ConfigError as e:
        console.print(f"[bold red]Config error:[/] {e}")
        return 1

    try:
        source = engine.open(args.file)
        time_range, freq_range = build_ranges(args, source)
        t0 = time.perf_counter()
        with console.status("Generating spectrogram…", spinner="dots"):
            result = engine.generate(source, time_range, freq_range,
                                     args.width, args.height)
        elapsed_ms = (time.perf_counter() - t0) * 1000
    except SpectrogramError as e:
        console.print(f"[bold red]Could not generate spectrogram:[/] {e}")
        return 1

    print_summary(source, result, elapsed_ms)
    return 0


if __name__ == "__main__":
    sys.exit(main())
