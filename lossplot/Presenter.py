# Presenter.py

import os
import subprocess
import sys

from lossplot.RenderDispatcher import DeviceKind, RenderTarget
from lossplot.errors import MissingOutputError


class ImageViewer:
    """External image viewer, e.g. ImageMagick's display."""

    def __init__(self, command=("display",)):
        self.command = list(command)

    def show(self, path, rotate=False):
        argv = list(self.command)
        if rotate:
            argv += ["-rotate", "90"]
        argv.append(path)
        try:
            subprocess.Popen(argv)
        except OSError as e:
            # The chart is already on disk, so a missing viewer is not fatal
            print("Warning: cannot start viewer %s: %s" % (argv[0], e), file=sys.stderr)
            print(path, file=sys.stderr)


def present(target: RenderTarget, suppress_display, viewer=None):
    if not os.path.exists(target.path):
        raise MissingOutputError("Output file %s is missing" % target.path)

    if suppress_display:
        print(target.path, file=sys.stderr)
        return

    if viewer is None:
        viewer = ImageViewer()
    # Postscript pages come out portrait
    viewer.show(target.path, rotate=target.device is DeviceKind.VECTOR)
