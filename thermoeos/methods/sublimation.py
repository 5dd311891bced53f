"""Module for the sublimation pressure of pure components."""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import jax
import jax.numpy as jnp
import numpy as np
from absl import logging

from ..configs.default import get_config
from ..models.base import single_component_check
from ..models.composite import CompositeModel
from .properties import a_res, pressure, volume
from .saturation import saturation_pressure, scale_sat_pure, zero_pressure_vapour_volume
from .solvers import nlsolve

NAN3 = (math.nan, math.nan, math.nan)


def obj_sublimation_pressure(model: CompositeModel, T, lnvs, lnvv, p_scale, mu_scale):
    """
    Scaled residuals of the solid-vapour equilibrium at `T`, for one mole:
    `[(μs - μv) μ_scale, (ps - pv) p_scale]` with `μ = A - V ∂A/∂V` and
    `p = -∂A/∂V`.
    """
    z = jnp.ones(1)
    vs, vv = jnp.exp(lnvs), jnp.exp(lnvv)
    A_s, dA_s = jax.value_and_grad(model.solid_model.eos)(vs, T, z)  # pylint: disable=invalid-name
    A_v, dA_v = jax.value_and_grad(model.fluid_model.eos)(vv, T, z)  # pylint: disable=invalid-name
    mu_s = A_s - vs * dA_s
    mu_v = A_v - vv * dA_v
    return jnp.stack([(mu_s - mu_v) * mu_scale, (dA_v - dA_s) * p_scale])


@dataclass
class ChemPotSublimationPressure:
    """
    Sublimation by equal chemical potential and pressure of the solid and
    the vapour, solved in `(ln vs, ln vv)`.

    Args:
        v0: Initial `(vs, vv)`, the zero pressure approximation if not given.
        check_triple: Reject solutions above the fluid saturation pressure,
          which means `T` is above the triple point.
        f_limit: Residual accepted even if the solver reports a failure.
        atol: Residual tolerance.
        rtol: Relative step tolerance.
        max_iters: Iteration budget.

    Unset tolerances are taken from the solver configuration.
    """

    v0: Optional[Tuple[float, float]] = None
    check_triple: bool = False
    f_limit: float = 0.0
    atol: Optional[float] = None
    rtol: Optional[float] = None
    max_iters: Optional[int] = None

    def __post_init__(self):
        config = get_config().solver
        self.atol = config.atol if self.atol is None else self.atol
        self.rtol = config.rtol if self.rtol is None else self.rtol
        self.max_iters = config.max_iters if self.max_iters is None else self.max_iters


def x0_sublimation_pressure(model: CompositeModel, T) -> Tuple[float, float]:
    """
    Initial `(vs, vv)`. The solid at low pressure is treated like a liquid
    under the zero pressure approximation:
    `vs = V_solid(p=0)`, `P0 = exp(aʳ_s - 1 + ln(RT/vs))`, `vv = RT/P0`,
    `nan` when `P0` underflows.
    """
    solid = model.solid_model
    vs = volume(solid, 0.0, T, phase="solid")
    if not (math.isfinite(vs) and vs > 0):
        return math.nan, math.nan
    ares = float(a_res(solid, vs, T))
    return float(vs), zero_pressure_vapour_volume(vs, ares)


def sublimation_pressure(
    model: CompositeModel,
    T,
    method: Optional[ChemPotSublimationPressure] = None,
    **kwargs,
):
    """
    Sublimation pressure of a `CompositeModel` with a solid and a fluid model.

    Args:
        model: Single component `CompositeModel`.
        T: Temperature (K).
        method: `ChemPotSublimationPressure`, built from `kwargs` if not given.

    Returns:
        `(psub, vs, vv)` in Pa and m^3/mol, the pressure taken from the fluid
        side. `nan` with a warning if the solver fails.
    """
    single_component_check(sublimation_pressure, model)
    if not isinstance(model, CompositeModel):
        raise ValueError(
            f"sublimation_pressure needs a CompositeModel, got {type(model).__name__}."
        )
    method = ChemPotSublimationPressure(**kwargs) if method is None else method
    T = float(T)  # pylint: disable=invalid-name
    v0 = x0_sublimation_pressure(model, T) if method.v0 is None else method.v0
    if not all(math.isfinite(v) and v > 0 for v in v0):
        logging.warning(f"sublimation_pressure: no initial point for {model!r} at T={T}")
        return NAN3
    fluid = model.fluid_model
    p_scale, mu_scale = scale_sat_pure(fluid)

    def residual(x):
        return obj_sublimation_pressure(model, T, x[0], x[1], p_scale, mu_scale)

    result = nlsolve(
        residual,
        np.log(v0),
        atol=method.atol,
        rtol=method.rtol,
        max_iters=method.max_iters,
        f_limit=method.f_limit,
    )
    if not result.converged:
        logging.warning(f"sublimation_pressure: solver failed for {model!r} at T={T}")
        return NAN3
    vs, vv = (float(v) for v in np.exp(result.x))
    psub = float(pressure(fluid, vv, T))

    if method.check_triple:
        psat = saturation_pressure(fluid, T)[0]
        if math.isfinite(psat) and psub > psat:
            logging.warning(
                f"sublimation_pressure: {psub} Pa is above the saturation pressure "
                f"{psat} Pa, T={T} is above the triple point"
            )
            return NAN3
    return psub, vs, vv
