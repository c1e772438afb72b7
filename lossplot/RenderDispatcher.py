# RenderDispatcher.py

import enum
import importlib.util
import os
import subprocess
import sys
from dataclasses import dataclass

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from lossplot.ChartSpec import ChartSpec  # noqa: E402
from lossplot.errors import OutputExistsError, RenderBackendError  # noqa: E402


# ---------------------------------------------------------------------- #
# Output target and device selection
# ---------------------------------------------------------------------- #

class DeviceKind(enum.Enum):
    VECTOR = "postscript"
    JPEG = "jpeg"
    PNG = "png"


def device_for_path(path):
    ext = os.path.splitext(path)[1].lower()
    if ext in (".ps", ".eps"):
        return DeviceKind.VECTOR
    if ext == ".jpg":
        return DeviceKind.JPEG
    return DeviceKind.PNG


@dataclass(frozen=True)
class RenderTarget:
    path: str
    device: DeviceKind
    is_default: bool = False

    @classmethod
    def for_path(cls, path, is_default=False):
        return cls(path=path, device=device_for_path(path), is_default=is_default)


def prepare_target(target: RenderTarget):
    """Clear a stale default output, refuse to overwrite anything else."""
    if target.is_default:
        if os.path.lexists(target.path):
            try:
                os.unlink(target.path)
            except OSError as e:
                raise OutputExistsError(
                    "Cannot remove previous output %s: %s" % (target.path, e.strerror or e)
                ) from e
    elif os.path.lexists(target.path):
        raise OutputExistsError("Output file %s already exists" % target.path)


# ---------------------------------------------------------------------- #
# R program generation
# ---------------------------------------------------------------------- #

R_MARKERS = {"filled-circle": 16}

# Pixels per inch for the postscript device, which is sized in inches
POSTSCRIPT_DPI = 72.0


def r_string(text):
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
    )
    return '"%s"' % escaped


def r_vector(values, fmt=repr):
    return "c(%s)" % ", ".join(fmt(v) for v in values)


def _r_numbers(data):
    return r_vector(data, fmt=lambda v: repr(float(v)))


def r_device_open(spec: ChartSpec, target: RenderTarget, png_enhanced):
    path = r_string(target.path)
    if target.device is DeviceKind.VECTOR:
        return "postscript(%s, width=%.4f, height=%.4f)" % (
            path,
            spec.width / POSTSCRIPT_DPI,
            spec.height / POSTSCRIPT_DPI,
        )
    if target.device is DeviceKind.JPEG:
        return "jpeg(%s, width=%d, height=%d)" % (path, spec.width, spec.height)
    if png_enhanced:
        return "library(Cairo)\nCairoPNG(%s, width=%d, height=%d)" % (
            path, spec.width, spec.height,
        )
    return "png(%s, width=%d, height=%d)" % (path, spec.width, spec.height)


def build_r_program(spec: ChartSpec, target: RenderTarget, png_enhanced=False):
    first, rest = spec.series[0], spec.series[1:]
    x_lo, x_hi = spec.x_range
    y_lo, y_hi = spec.y_range

    lines = [r_device_open(spec, target, png_enhanced)]
    lines.append(
        'plot(%s, type="o", col=%s, pch=%d, xlab=%s, ylab=%s, main=%s, '
        "xlim=c(%d, %d), ylim=c(%r, %r))"
        % (
            _r_numbers(first.data),
            r_string(first.color),
            R_MARKERS[first.marker],
            r_string(spec.xlabel),
            r_string(spec.ylabel),
            r_string(spec.title),
            x_lo,
            x_hi,
            y_lo,
            y_hi,
        )
    )
    lines.append("grid()")
    for s in rest:
        lines.append(
            'lines(%s, type="o", col=%s, pch=%d)'
            % (_r_numbers(s.data), r_string(s.color), R_MARKERS[s.marker])
        )
    lines.append(
        "legend(%s, inset=%r, title=%s, legend=%s, col=%s, pch=%s)"
        % (
            r_string(spec.legend_position),
            spec.legend_inset,
            r_string(spec.legend_title),
            r_vector(spec.legend_entries, fmt=r_string),
            r_vector(spec.legend_colors, fmt=r_string),
            r_vector([R_MARKERS[s.marker] for s in spec.series], fmt=str),
        )
    )
    lines.append("invisible(dev.off())")
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------- #
# Engines
# ---------------------------------------------------------------------- #

_CAIRO_PROBE = 'quit(status = if (requireNamespace("Cairo", quietly = TRUE)) 0 else 1)\n'


class REngine:
    """
    External statistical engine fed a generated R program on stdin.
    """

    name = "R"

    def __init__(self, command=("R", "--vanilla", "--slave")):
        self.command = list(command)

    def png_backend_available(self):
        try:
            result = subprocess.run(
                self.command,
                input=_CAIRO_PROBE,
                universal_newlines=True,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError:
            return False
        return result.returncode == 0

    def submit(self, program, device: DeviceKind):
        # Popen's context exit closes stdin and waits, on success or failure
        try:
            with subprocess.Popen(
                self.command, stdin=subprocess.PIPE, universal_newlines=True
            ) as proc:
                proc.stdin.write(program)
        except OSError as e:
            raise RenderBackendError(
                "Cannot run %s for %s output: %s" % (self.command[0], device.value, e)
            ) from e

        if proc.returncode != 0:
            raise RenderBackendError(
                "%s exited with status %d" % (self.command[0], proc.returncode)
            )

    def render(self, spec: ChartSpec, target: RenderTarget, png_enhanced=False):
        self.submit(build_r_program(spec, target, png_enhanced), target.device)


MPL_MARKERS = {"filled-circle": "o"}


class MatplotlibEngine:
    """
    In-process renderer drawing the chart with matplotlib.
    """

    name = "matplotlib"
    dpi = 100

    def png_backend_available(self):
        return importlib.util.find_spec("cairo") is not None

    @staticmethod
    def save_format(target: RenderTarget):
        if target.device is DeviceKind.VECTOR:
            return "eps" if target.path.lower().endswith(".eps") else "ps"
        if target.device is DeviceKind.JPEG:
            return "jpg"
        return "png"

    def render(self, spec: ChartSpec, target: RenderTarget, png_enhanced=False):
        fig = plt.figure(figsize=(spec.width / self.dpi, spec.height / self.dpi))
        try:
            for idx, s in enumerate(spec.series):
                plt.plot(
                    s.x,
                    s.data,
                    linestyle="-",
                    marker=MPL_MARKERS[s.marker],
                    color=s.color,
                    label=spec.legend_entries[idx],
                )

            x_lo, x_hi = spec.x_range
            y_lo, y_hi = spec.y_range
            plt.xlim(x_lo, max(x_hi, x_lo + 1))
            if y_hi > y_lo:
                plt.ylim(y_lo, y_hi)
            plt.xlabel(spec.xlabel)
            plt.ylabel(spec.ylabel)
            plt.title(spec.title)
            plt.grid(True, linestyle="--", linewidth=0.5)
            plt.legend(
                title=spec.legend_title,
                loc="upper right",
                borderaxespad=spec.legend_inset * 25,
            )
            plt.tight_layout()

            kwargs = {"dpi": self.dpi, "format": self.save_format(target)}
            if target.device is DeviceKind.PNG and png_enhanced:
                kwargs["backend"] = "cairo"
            plt.savefig(target.path, **kwargs)
        except (OSError, ValueError) as e:
            raise RenderBackendError(
                "matplotlib failed to write %s: %s" % (target.path, e)
            ) from e
        finally:
            plt.close(fig)


def make_engine(name, r_command=("R", "--vanilla", "--slave")):
    if name == REngine.name:
        return REngine(r_command)
    if name == MatplotlibEngine.name:
        return MatplotlibEngine()
    raise ValueError("Unknown engine: %s" % name)


# ---------------------------------------------------------------------- #
# Dispatch
# ---------------------------------------------------------------------- #

def dispatch(spec: ChartSpec, target: RenderTarget, engine, png_enhanced=False):
    """
    spec:         chart to draw
    target:       output file and its device
    engine:       REngine / MatplotlibEngine (or any object with render())
    png_enhanced: result of the engine's png_backend_available(), probed once
    """
    prepare_target(target)

    print(
        "Rendering %d series with %s %s device to %s"
        % (len(spec.series), engine.name, target.device.value, target.path),
        file=sys.stderr,
    )
    engine.render(spec, target, png_enhanced)

    if not os.path.exists(target.path):
        raise RenderBackendError(
            "%s produced no output at %s" % (engine.name, target.path)
        )
    print("Saved figure to: %s" % target.path, file=sys.stderr)
