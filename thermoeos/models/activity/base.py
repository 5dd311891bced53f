"""
Activity coefficient models
---------------
Excess Gibbs energy models for liquid mixtures. Each model holds one pure
component equation of state (`puremodel`) used for the pure liquid Gibbs
energies and the saturation pressures of the modified Raoult law.
"""

import math
from typing import Optional, Tuple

import jax.numpy as jnp
import numpy as np
from absl import logging

from ...methods.properties import (
    VT_gibbs_free_energy,
    fugacity_coefficient,
    pressure,
)
from ...methods.saturation import crit_pure, saturation_pressure, saturation_temperature
from ...methods.solvers import find_zero
from ..base import EoSModel, default_z


def _xlogx(x):
    safe = jnp.where(x > 0, x, 1.0)
    return jnp.where(x > 0, x * jnp.log(safe), 0.0)


class ActivityModel(EoSModel):
    """
    Base class of activity coefficient models.

    Subclasses implement `ln_activity_coefficient(T, x)` with `jax.numpy` and
    hold the `puremodel` and `idealmodel` members. `puremodels` is the
    `puremodel` split per component.
    """

    puremodel = None
    puremodels: list = []

    def transform_params(self):
        if self.puremodel is not None:
            self.puremodels = self.puremodel.split_model()

    def ln_activity_coefficient(self, T, x):
        raise NotImplementedError(
            f"{type(self).__name__} does not define ln_activity_coefficient."
        )

    def eos(self, V, T, z=None):
        """
        `A = Gᴱ + RT Σ z_i ln x_i + Σ z_i g_i(v) - p V`, with the pure
        Gibbs energies `g_i` and the mole averaged pure pressure `p` at the
        molar volume `v = V/n`.
        """
        z = default_z(self, z)
        n = jnp.sum(z)
        x = z / n
        v = V / n
        RT = self.Rgas() * T  # pylint: disable=invalid-name
        g_pure = jnp.stack([VT_gibbs_free_energy(pm, v, T) for pm in self.puremodels])
        p_pure = jnp.stack([pressure(pm, v, T) for pm in self.puremodels])
        g_excess = RT * z @ self.ln_activity_coefficient(T, x)
        g_ideal = RT * n * jnp.sum(_xlogx(x))
        return g_excess + g_ideal + z @ g_pure - (x @ p_pure) * V

    def eos_res(self, V, T, z=None):
        z = default_z(self, z)
        return self.eos(V, T, z) - self.idealmodel.eos(V, T, z)

    def mw(self) -> np.ndarray:
        return self.puremodel.mw()

    def lb_volume(self, z=None):
        z = default_z(self, z)
        lbs = jnp.asarray([pm.lb_volume() for pm in self.puremodels])
        return z @ lbs

    def T_scale(self, z=None):  # pylint: disable=invalid-name
        return self.puremodel.T_scale(z)

    def p_scale(self, z=None):
        return self.puremodel.p_scale(z)


def activity_coefficient(model: EoSModel, p, T, z=None):
    """
    Activity coefficients `γ_i` at `p` (Pa), `T` (K) and composition `z`.

    For an equation of state that is not an `ActivityModel`,
    `γ_i = φ_i(x) / φ_i(pure i)` with liquid fugacity coefficients.
    """
    z = default_z(model, z)
    x = z / jnp.sum(z)
    if isinstance(model, ActivityModel):
        return jnp.exp(model.ln_activity_coefficient(T, x))
    phi = fugacity_coefficient(model, p, T, x, phase="liquid")
    phi_pure = jnp.concatenate(
        [
            jnp.atleast_1d(fugacity_coefficient(pure, p, T, phase="liquid"))
            for pure in model.split_model()
        ]
    )
    return phi / phi_pure


def excess_gibbs_free_energy(model: EoSModel, p, T, z=None):
    "`Gᴱ = RT Σ z_i ln γ_i` (J)."
    z = default_z(model, z)
    gamma = activity_coefficient(model, p, T, z)
    return model.Rgas() * T * z @ jnp.log(gamma)


def _check_activity(func, model):
    if not isinstance(model, ActivityModel):
        raise ValueError(
            f"{func.__name__} needs an ActivityModel, got {type(model).__name__}."
        )


def bubble_pressure(model: ActivityModel, T, x) -> Tuple[float, np.ndarray]:
    """
    Bubble pressure by the modified Raoult law,
    `p = Σ x_i γ_i psat_i`, `y_i = x_i γ_i psat_i / p`.

    Returns:
        `(p, y)`, `nan` if a pure saturation pressure is not defined at `T`.
    """
    _check_activity(bubble_pressure, model)
    x = np.asarray(x, dtype=np.float64)
    x = x / x.sum()
    T = float(T)  # pylint: disable=invalid-name
    p_sat = np.asarray([saturation_pressure(pm, T)[0] for pm in model.puremodels])
    if not np.all(np.isfinite(p_sat)):
        logging.warning(f"bubble_pressure: no saturation pressure for {model!r} at T={T}")
        return math.nan, np.full_like(x, math.nan)
    gamma = np.asarray(activity_coefficient(model, 1e-4, T, x), dtype=np.float64)
    partial = x * gamma * p_sat
    p = float(partial.sum())
    return p, partial / p


def _pure_bubble_temperature(pure: EoSModel, p) -> float:
    "Saturation temperature at `p`, or the temperature of `p` at the critical volume."
    tsat = saturation_temperature(pure, p)[0]
    if math.isfinite(tsat):
        return tsat
    tc, _, vc = crit_pure(pure)
    return find_zero(lambda t: p - float(pressure(pure, vc, t)), x0=tc)


def bubble_temperature(
    model: ActivityModel, p, x, T0: Optional[float] = None
) -> Tuple[float, np.ndarray]:
    """
    Bubble temperature at `p` (Pa), from `Σ y_i = 1` with `bubble_pressure`.

    Without `T0`, the root is bracketed between 0.9 and 1.1 times the extreme
    pure bubble temperatures. Returns `(T, y)`, `nan` on failure.
    """
    _check_activity(bubble_temperature, model)
    x = np.asarray(x, dtype=np.float64)
    x = x / x.sum()
    p = float(p)

    def residual(T):  # pylint: disable=invalid-name
        pb = bubble_pressure(model, float(T), x)[0]
        return pb / p - 1.0

    if T0 is None:
        t_pure = [_pure_bubble_temperature(pm, p) for pm in model.puremodels]
        if not all(math.isfinite(t) for t in t_pure):
            logging.warning(f"bubble_temperature: no pure bubble point for {model!r} at p={p}")
            return math.nan, np.full_like(x, math.nan)
        lower = 0.9 * min(t_pure)
        tcs = [crit_pure(pm)[0] for pm in model.puremodels]
        upper = min([1.1 * max(t_pure)] + [0.999 * tc for tc in tcs if math.isfinite(tc)])
        # pure saturation may fail close to the critical point
        for _ in range(10):
            if math.isfinite(residual(upper)):
                break
            upper = lower + 0.9 * (upper - lower)
        T = find_zero(residual, bracket=(lower, upper))  # pylint: disable=invalid-name
    else:
        T = find_zero(residual, x0=float(T0))  # pylint: disable=invalid-name
    if not math.isfinite(T):
        return math.nan, np.full_like(x, math.nan)
    _, y = bubble_pressure(model, T, x)
    return T, y
