# Configurations.py

import argparse
import enum
import os
import shlex
import sys
import tempfile
from dataclasses import dataclass


# ---------------------------------------------------------------------- #
# Values fixed once at startup and threaded through the pipeline
# ---------------------------------------------------------------------- #

class TransformMode(enum.Enum):
    IDENTITY = "identity"
    SQRT_LOSS = "sqrt"
    LOG_SQUARED_PERCENT = "percent"

    @property
    def is_percent(self):
        return self is TransformMode.LOG_SQUARED_PERCENT

    @property
    def metric_name(self):
        return "%loss" if self.is_percent else "loss"


@dataclass(frozen=True)
class StyleConfig:
    """
    Immutable chart styling, built once from the command line.

    ylabel / title left as None fall back to values derived from the
    transform mode (see resolved_* properties).
    """

    mode: TransformMode = TransformMode.IDENTITY
    xlabel: str = "progress iteration"
    ylabel: str = None
    title: str = None
    width: int = 800
    height: int = 600

    @property
    def resolved_ylabel(self):
        if self.ylabel is not None:
            return self.ylabel
        return "mean %s" % self.mode.metric_name

    @property
    def resolved_title(self):
        if self.title is not None:
            return self.title
        return "%s convergence" % self.resolved_ylabel

    @property
    def legend_title(self):
        return self.mode.metric_name


DEFAULT_OUTPUT = os.path.join(tempfile.gettempdir(), "lossplot.png")
ENGINES = ("R", "matplotlib")


def _positive_int(text):
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError("invalid integer value: %r" % text)
    if value <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer: %r" % text)
    return value


def build_arg_parser():
    # -h is the height option, so the automatic help flag is replaced by --help
    parser = argparse.ArgumentParser(
        prog="lossplot",
        description="Overlay loss convergence curves parsed from training progress logs.",
        add_help=False,
    )
    parser.add_argument("files", nargs="*", help="Progress logs (default: standard input)")
    parser.add_argument("-q", dest="sqrt_loss", action="store_true",
                        help="Plot the square root of the loss.")
    parser.add_argument("-Q", dest="percent_loss", action="store_true",
                        help="Plot (exp(sqrt(loss)) - 1) * 100 as %%loss.")
    parser.add_argument("-o", dest="output", default=None,
                        help="Output file; .ps/.eps, .jpg or png (default: %s)." % DEFAULT_OUTPUT)
    parser.add_argument("-x", dest="xlabel", default=None, help="X-axis label.")
    parser.add_argument("-y", dest="ylabel", default=None, help="Y-axis label.")
    parser.add_argument("-t", dest="title", default=None, help="Chart title.")
    parser.add_argument("-w", dest="width", type=_positive_int, default=None,
                        help="Width in pixels (default: 800).")
    parser.add_argument("-h", dest="height", type=_positive_int, default=None,
                        help="Height in pixels (default: 600).")
    parser.add_argument("-d", dest="no_display", action="store_true",
                        help="Do not display the chart, print its path instead.")
    parser.add_argument("-e", dest="engine", choices=ENGINES, default=None,
                        help="Rendering engine (default: R).")
    parser.add_argument("-R", dest="r_command", default=None,
                        help="Command launching the R engine (default: 'R --vanilla --slave').")
    parser.add_argument("-v", dest="viewer", default=None,
                        help="Image viewer command (default: display).")
    parser.add_argument("--help", action="help", help="Show this message and exit.")
    return parser


# ---------------------------------------------------------------------- #
# Top-level configuration
# ---------------------------------------------------------------------- #

class TopConfig:
    def __init__(self):
        # Inputs; empty list reads standard input
        self.files = []

        # Loss transform flags (-Q takes priority over -q)
        self.sqrt_loss = False
        self.percent_loss = False

        # Output
        self.output = DEFAULT_OUTPUT
        self.suppress_display = False

        # Chart styling
        self.xlabel = "progress iteration"
        self.ylabel = None
        self.title = None
        self.width = 800
        self.height = 600

        # External collaborators
        self.engine = "R"
        self.r_command = ["R", "--vanilla", "--slave"]
        self.viewer_command = ["display"]

    def parse_cmd_line(self, argv):
        args = build_arg_parser().parse_args(argv[1:])

        self.files = list(args.files)

        if args.sqrt_loss:
            self.sqrt_loss = True
            print("Square root loss transform is enabled", file=sys.stderr)
        if args.percent_loss:
            self.percent_loss = True
            print("Log-squared to percent loss transform is enabled", file=sys.stderr)
        if self.sqrt_loss and self.percent_loss:
            print("Warning: both -q and -Q given, -Q takes priority", file=sys.stderr)

        if args.output is not None:
            self.output = args.output
            print("Output is set to %s" % self.output, file=sys.stderr)

        if args.xlabel is not None:
            self.xlabel = args.xlabel
        if args.ylabel is not None:
            self.ylabel = args.ylabel
        if args.title is not None:
            self.title = args.title

        if args.width is not None:
            self.width = args.width
            print("Width is set to %d" % self.width, file=sys.stderr)
        if args.height is not None:
            self.height = args.height
            print("Height is set to %d" % self.height, file=sys.stderr)

        if args.no_display:
            self.suppress_display = True

        if args.engine is not None:
            self.engine = args.engine
            print("Engine is set to %s" % self.engine, file=sys.stderr)
        if args.r_command is not None:
            self.r_command = shlex.split(args.r_command)
            print("R command is set to %s" % " ".join(self.r_command), file=sys.stderr)
        if args.viewer is not None:
            self.viewer_command = shlex.split(args.viewer)
            print("Viewer is set to %s" % " ".join(self.viewer_command), file=sys.stderr)

    @property
    def transform_mode(self):
        if self.percent_loss:
            return TransformMode.LOG_SQUARED_PERCENT
        if self.sqrt_loss:
            return TransformMode.SQRT_LOSS
        return TransformMode.IDENTITY

    @property
    def output_is_default(self):
        return os.path.abspath(self.output) == os.path.abspath(DEFAULT_OUTPUT)

    def style_config(self):
        return StyleConfig(
            mode=self.transform_mode,
            xlabel=self.xlabel,
            ylabel=self.ylabel,
            title=self.title,
            width=self.width,
            height=self.height,
        )
