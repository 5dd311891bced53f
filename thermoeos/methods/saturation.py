"""Module for saturation and critical points of pure components."""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import jax
import jax.numpy as jnp
import numpy as np
from absl import logging

from ..configs.default import get_config
from ..models.base import EoSModel, single_component_check
from .properties import a_res, pressure, volume
from .solvers import find_zero, nlsolve

NAN3 = (math.nan, math.nan, math.nan)
MAX_LOG = math.log(np.finfo(np.float64).max)


@dataclass
class ChemPotVSaturation:
    """
    Saturation by equal chemical potential and pressure, solved in
    `(ln vl, ln vv)`.

    Unset tolerances are taken from the solver configuration.
    """

    v0: Optional[Tuple[float, float]] = None
    f_limit: float = 0.0
    atol: Optional[float] = None
    rtol: Optional[float] = None
    max_iters: Optional[int] = None

    def __post_init__(self):
        config = get_config().solver
        self.atol = config.atol if self.atol is None else self.atol
        self.rtol = config.rtol if self.rtol is None else self.rtol
        self.max_iters = config.max_iters if self.max_iters is None else self.max_iters


def scale_sat_pure(model: EoSModel) -> Tuple[float, float]:
    "Residual scales `(1/p_scale, 1/(R T_scale))`."
    p_scale = float(model.p_scale())
    mu_scale = 1.0 / (model.Rgas() * float(model.T_scale()))
    return 1.0 / p_scale, mu_scale


def _mu_p(model: EoSModel, v, T):
    "Chemical potential and pressure of one mole at volume `v`."
    A, dAdV = jax.value_and_grad(model.eos)(v, T, jnp.ones(1))  # pylint: disable=invalid-name
    return A - v * dAdV, -dAdV


def zero_pressure_x0(model: EoSModel, T, v_condensed=None) -> Tuple[float, float]:
    """
    Condensed and vapour volume guesses from the zero pressure approximation,
    `p0 = exp(aʳ - 1 + ln(RT/v))` at the condensed volume `v` for `p = 0`.
    """
    if v_condensed is None:
        v_condensed = volume(model, 0.0, T, phase="liquid")
        if not math.isfinite(v_condensed):
            v_condensed = 1.25 * float(model.lb_volume())
    if not (math.isfinite(v_condensed) and v_condensed > 0):
        return math.nan, math.nan
    ares = float(a_res(model, v_condensed, T))
    return float(v_condensed), zero_pressure_vapour_volume(v_condensed, ares)


def zero_pressure_vapour_volume(v_condensed, ares) -> float:
    """
    Vapour volume `RT/p0 = v exp(1 - aʳ)` of the zero pressure approximation,
    `nan` when `p0` underflows.
    """
    lnvv = math.log(v_condensed) + 1 - ares
    if not math.isfinite(lnvv) or lnvv >= MAX_LOG:
        return math.nan
    return math.exp(lnvv)


def x0_sat_pure(model: EoSModel, T) -> Tuple[float, float]:
    "Initial `(vl, vv)`: the model guesses if it has them, else zero pressure."
    if hasattr(model, "x0_sat_pure"):
        return model.x0_sat_pure(T)
    return zero_pressure_x0(model, T)


def obj_sat_pure(model: EoSModel, T, lnvl, lnvv, p_scale, mu_scale):
    "Scaled residuals `[(μl - μv) μ_scale, (pl - pv) p_scale]`."
    mu_l, p_l = _mu_p(model, jnp.exp(lnvl), T)
    mu_v, p_v = _mu_p(model, jnp.exp(lnvv), T)
    return jnp.stack([(mu_l - mu_v) * mu_scale, (p_l - p_v) * p_scale])


def saturation_pressure(
    model: EoSModel, T, method: Optional[ChemPotVSaturation] = None, **kwargs
):
    """
    Saturation pressure of a pure component.

    Args:
        model: Single component model.
        T: Temperature (K).
        method: `ChemPotVSaturation`, built from `kwargs` if not given.

    Returns:
        `(psat, vl, vv)` in Pa and m^3/mol, `nan` on failure.
    """
    single_component_check(saturation_pressure, model)
    method = ChemPotVSaturation(**kwargs) if method is None else method
    T = float(T)
    v0 = x0_sat_pure(model, T) if method.v0 is None else method.v0
    if not all(math.isfinite(v) and v > 0 for v in v0):
        logging.warning(f"saturation_pressure: no initial point for {model!r} at T={T}")
        return NAN3
    p_scale, mu_scale = scale_sat_pure(model)

    def residual(x):
        return obj_sat_pure(model, T, x[0], x[1], p_scale, mu_scale)

    result = nlsolve(
        residual,
        np.log(v0),
        atol=method.atol,
        rtol=method.rtol,
        max_iters=method.max_iters,
        f_limit=method.f_limit,
    )
    vl, vv = (float(v) for v in np.exp(result.x))
    vol_rtol = get_config().saturation.vol_rtol
    if not result.converged:
        logging.warning(f"saturation_pressure: solver failed for {model!r} at T={T}")
        return NAN3
    if abs(vv - vl) <= vol_rtol * min(vl, vv):
        logging.warning(f"saturation_pressure: trivial solution for {model!r} at T={T}")
        return NAN3
    vl, vv = min(vl, vv), max(vl, vv)
    return float(pressure(model, vv, T)), vl, vv


def _dpdv_residual(model: EoSModel, T, V, p_scale):
    "`[V ∂p/∂V, V² ∂²p/∂V²] / p_scale`."
    dp = jax.grad(lambda v: pressure(model, v, T))
    d2p = jax.grad(dp)
    return jnp.stack([V * dp(V) * p_scale, V**2 * d2p(V) * p_scale])


def crit_pure(model: EoSModel) -> Tuple[float, float, float]:
    """
    Critical point `(Tc, pc, vc)` of a pure component.

    Uses the model `crit_pure` if there is one, otherwise solves
    `∂p/∂V = ∂²p/∂V² = 0` in `(T/T_scale, ln V)` from `(1, ln 4 lb_volume)`.
    """
    single_component_check(crit_pure, model)
    if hasattr(model, "crit_pure"):
        return model.crit_pure()
    t_scale = float(model.T_scale())
    p_scale = 1.0 / float(model.p_scale())

    def residual(x):
        return _dpdv_residual(model, x[0] * t_scale, jnp.exp(x[1]), p_scale)

    x0 = [1.0, math.log(4 * float(model.lb_volume()))]
    result = nlsolve(residual, x0)
    if not result.converged:
        logging.warning(f"crit_pure: solver failed for {model!r}")
        return NAN3
    tc = float(result.x[0] * t_scale)
    vc = float(np.exp(result.x[1]))
    return tc, float(pressure(model, vc, tc)), vc


def _psat_x0_temperature(model: EoSModel, p) -> float:
    "Temperature guess from `ln psat` linear in `1/T` between `0.7 Tc` and `Tc`."
    tc, pc, _ = crit_pure(model)
    t7 = 0.7 * tc
    p7 = saturation_pressure(model, t7)[0]
    if not math.isfinite(p7):
        return 0.8 * tc
    slope = (math.log(pc) - math.log(p7)) / (1 / tc - 1 / t7)
    return 1.0 / (1 / tc + (math.log(p) - math.log(pc)) / slope)


def saturation_temperature(model: EoSModel, p, T0: Optional[float] = None, **kwargs):
    """
    Saturation temperature of a pure component at pressure `p` (Pa).

    Returns:
        `(Tsat, vl, vv)`, `nan` above the critical pressure or on failure.
    """
    single_component_check(saturation_temperature, model)
    p = float(p)
    tc, pc, _ = crit_pure(model)
    if math.isfinite(pc) and p >= pc:
        logging.warning(f"saturation_temperature: p={p} above the critical pressure {pc}")
        return NAN3
    T0 = _psat_x0_temperature(model, p) if T0 is None else T0  # pylint: disable=invalid-name

    def residual(T):  # pylint: disable=invalid-name
        T = min(float(T), 0.9999 * tc)  # pylint: disable=invalid-name
        psat = saturation_pressure(model, T, **kwargs)[0]
        return math.log(psat) - math.log(p)

    T = find_zero(residual, x0=T0)  # pylint: disable=invalid-name
    if not math.isfinite(T):
        return NAN3
    _, vl, vv = saturation_pressure(model, T, **kwargs)
    return T, vl, vv
