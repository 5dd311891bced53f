"""Cubic equations of state and their alpha functions."""

from .alphas import AlphaModel, KumarAlpha, NoAlpha, PRAlpha, RKAlpha, SoaveAlpha
from .equations import PR, RK, SRK, ABCubicModel, ab_from_critical, vdW
