"""Multiparameter Helmholtz energy fluids."""

from .singlefluid import EmpiricSingleFluid, reduced_a_ideal, reduced_a_res
from .structs import (
    Associating2BTerm,
    EmpiricSingleFluidIdealParam,
    EmpiricSingleFluidProperties,
    EmpiricSingleFluidResidualParam,
    ExponentialTerm,
    GaoBTerm,
    NonAnalyticTerm,
)
