# LossTransform.py

import numpy as np

from lossplot.Configurations import TransformMode
from lossplot.errors import InvalidLossError


def transform(raw, mode: TransformMode):
    """
    Map one raw loss value to its display value.

    SQRT_LOSS:           sqrt(raw), raw being a squared-error quantity
    LOG_SQUARED_PERCENT: (exp(sqrt(raw)) - 1) * 100
    """
    raw = float(raw)
    if not np.isfinite(raw):
        raise InvalidLossError("Loss value %r is not finite" % raw)
    if mode is TransformMode.IDENTITY:
        return raw

    if raw < 0:
        raise InvalidLossError(
            "Cannot apply %s transform to loss value %r" % (mode.value, raw)
        )

    if mode is TransformMode.SQRT_LOSS:
        return float(np.sqrt(raw))
    if mode is TransformMode.LOG_SQUARED_PERCENT:
        return float((np.exp(np.sqrt(raw)) - 1.0) * 100.0)

    raise ValueError("Unknown transform mode: %r" % (mode,))
