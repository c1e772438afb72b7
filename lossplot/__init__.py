# lossplot: overlay convergence curves parsed from training progress logs.

__version__ = "0.1.0"
