# main.py (driver: logs -> runs -> chart -> output file -> viewer)

import sys

from lossplot import Configurations
from lossplot import ChartSpec
from lossplot import Presenter
from lossplot import ProgressParser
from lossplot import RenderDispatcher as rd
from lossplot.errors import LossPlotError


def main(argv, engine=None, viewer=None):
    top_config = Configurations.TopConfig()
    top_config.parse_cmd_line(argv)

    mode = top_config.transform_mode
    style = top_config.style_config()

    runs = ProgressParser.parse_files(top_config.files, mode)
    print(
        "Parsed %d run(s): %s points"
        % (len(runs), ", ".join(str(len(r)) for r in runs)),
        file=sys.stderr,
    )

    spec = ChartSpec.build(runs, style)

    if engine is None:
        engine = rd.make_engine(top_config.engine, top_config.r_command)
    target = rd.RenderTarget.for_path(
        top_config.output, is_default=top_config.output_is_default
    )

    # Probed once; only the PNG device has an optional backend
    png_enhanced = False
    if target.device is rd.DeviceKind.PNG:
        png_enhanced = engine.png_backend_available()

    rd.dispatch(spec, target, engine, png_enhanced)

    if viewer is None:
        viewer = Presenter.ImageViewer(top_config.viewer_command)
    Presenter.present(target, top_config.suppress_display, viewer)
    return target


def run():
    try:
        main(sys.argv)
    except LossPlotError as e:
        print("Error: %s" % e, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    run()
