# errors.py


class LossPlotError(RuntimeError):
    """Base class for every fatal condition reported by the pipeline."""


class NoProgressDataError(LossPlotError):
    pass


class OutputExistsError(LossPlotError):
    pass


class RenderBackendError(LossPlotError):
    pass


class MissingOutputError(LossPlotError):
    pass


class InvalidLossError(LossPlotError, ValueError):
    pass


class InputFileError(LossPlotError):
    pass
