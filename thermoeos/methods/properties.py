"""
Thermodynamic properties by automatic differentiation
---------------
Every property is a derivative of the model Helmholtz energy
`model.eos(V, T, z)` (J) computed with jax.
"""

import math
from typing import Optional

import jax
import jax.numpy as jnp
import numpy as np
from absl import logging

from ..configs.default import get_config
from ..models.base import EoSModel, default_z, molecular_weight

PHASES = {
    "liquid": "liquid",
    "l": "liquid",
    "vapour": "vapour",
    "vapor": "vapour",
    "v": "vapour",
    "gas": "vapour",
    "solid": "solid",
    "s": "solid",
    "unknown": "unknown",
}


def normalise_phase(phase: str) -> str:
    "Canonical phase name, `ValueError` for unknown phase strings."
    key = str(phase).lower()
    if key not in PHASES:
        raise ValueError(f"Unknown phase {phase!r}, expected one of {sorted(PHASES)}")
    return PHASES[key]


def _float(x):
    return jnp.asarray(x, dtype=jnp.float64)


def pressure(model: EoSModel, V, T, z=None):
    "`p = -∂A/∂V` (Pa)."
    z = default_z(model, z)
    return -jax.grad(model.eos)(_float(V), T, z)


def a_res(model: EoSModel, V, T, z=None):
    "Reduced residual Helmholtz energy `Aʳ/(nRT)`."
    z = default_z(model, z)
    return model.eos_res(V, T, z) / (jnp.sum(z) * model.Rgas() * T)


def VT_chemical_potential(model: EoSModel, V, T, z=None):  # pylint: disable=invalid-name
    "`μ_i = ∂A/∂n_i` (J/mol)."
    z = default_z(model, z)
    return jax.grad(lambda n: model.eos(V, T, n))(z)


def VT_chemical_potential_res(model: EoSModel, V, T, z=None):  # pylint: disable=invalid-name
    "Residual chemical potentials `∂Aʳ/∂n_i` (J/mol)."
    z = default_z(model, z)
    return jax.grad(lambda n: model.eos_res(V, T, n))(z)


def VT_gibbs_free_energy(model: EoSModel, V, T, z=None):  # pylint: disable=invalid-name
    "`G = A + pV` (J)."
    z = default_z(model, z)
    A, dAdV = jax.value_and_grad(model.eos)(_float(V), T, z)  # pylint: disable=invalid-name
    return A - V * dAdV


def VT_entropy(model: EoSModel, V, T, z=None):  # pylint: disable=invalid-name
    "`S = -∂A/∂T` (J/K)."
    z = default_z(model, z)
    return -jax.grad(model.eos, 1)(V, _float(T), z)


def VT_internal_energy(model: EoSModel, V, T, z=None):  # pylint: disable=invalid-name
    "`U = A + TS` (J)."
    z = default_z(model, z)
    A, dAdT = jax.value_and_grad(model.eos, 1)(V, _float(T), z)  # pylint: disable=invalid-name
    return A - T * dAdT


def VT_enthalpy(model: EoSModel, V, T, z=None):  # pylint: disable=invalid-name
    "`H = U + pV` (J)."
    return VT_internal_energy(model, V, T, z) + pressure(model, V, T, z) * V


def second_virial_coefficient(model: EoSModel, T, z=None):
    """
    `B = ∂(Aʳ/nRT)/∂ρ` at vanishing density (m^3/mol).

    The derivative is taken at `ρ = √eps / lb` (molar `lb`), small enough for
    the truncation error and large enough to avoid cancellation in `Aʳ`.
    """
    z = default_z(model, z)
    n = jnp.sum(z)
    lb = float(model.lb_volume(z)) / float(n)
    rho = math.sqrt(np.finfo(np.float64).eps) / lb if lb > 0 else 1e-10

    def ares_rho(r):
        return a_res(model, n / r, T, z)

    return jax.grad(ares_rho)(_float(rho))


def _volume_newton(model, p, T, z, V0, max_iters, rtol, lb):
    "Newton iterations on `ln V` for `p(V) = p`."
    dpdV = jax.grad(lambda v: pressure(model, v, T, z))  # pylint: disable=invalid-name
    V = float(V0)  # pylint: disable=invalid-name
    for _ in range(max_iters):
        p_v = float(pressure(model, V, T, z))
        dp_v = float(dpdV(_float(V)))
        if not (math.isfinite(p_v) and math.isfinite(dp_v)) or dp_v == 0:
            return math.nan
        step = -(p_v - p) / (V * dp_v)
        step = max(min(step, 1.0), -1.0)
        V_new = V * math.exp(step)  # pylint: disable=invalid-name
        if V_new <= lb:
            V_new = 0.5 * (V + lb)  # pylint: disable=invalid-name
        if abs(V_new - V) <= rtol * V:
            return V_new
        V = V_new  # pylint: disable=invalid-name
    return math.nan


def volume(
    model: EoSModel,
    p,
    T,
    z=None,
    phase: str = "unknown",
    vol0: Optional[float] = None,
):
    """
    Total volume (m^3) at pressure `p` (Pa) and temperature `T` (K).

    Models with `volume_roots` are solved analytically. Otherwise Newton
    iterations on `ln V` start from a liquid-like (`1.25 lb_volume`) and a
    vapour-like (`nRT/p`) guess. For `phase="unknown"` the root with the
    lowest Gibbs energy is returned.

    Args:
        model: Equation of state.
        p: Pressure (Pa).
        T: Temperature (K).
        z: Mole amounts (mol).
        phase: `liquid|l`, `vapour|vapor|v`, `solid|s` or `unknown`.
        vol0: Initial volume, skips the default guesses.
    """
    phase = normalise_phase(phase)
    z = default_z(model, z)
    p, T = float(p), float(T)

    if hasattr(model, "volume_roots"):
        roots = list(model.volume_roots(p, T, z))
        if roots:
            if phase == "liquid":
                return float(roots[0])
            if phase == "vapour":
                return float(roots[-1])
            if phase == "solid" or len(roots) == 1:
                return float(roots[0])
            gibbs = [float(VT_gibbs_free_energy(model, v, T, z)) for v in roots]
            return float(roots[int(np.argmin(gibbs))])

    config = get_config().volume
    n = float(jnp.sum(z))
    lb = float(model.lb_volume(z))
    if vol0 is not None:
        guesses = [vol0]
    else:
        vapour0 = n * model.Rgas() * T / p if p > 0 else math.nan
        liquid0 = 1.25 * lb if lb > 0 else vapour0
        guesses = {
            "liquid": [liquid0],
            "solid": [liquid0],
            "vapour": [vapour0],
            "unknown": [liquid0, vapour0],
        }[phase]
    candidates = [
        _volume_newton(model, p, T, z, v0, config.max_iters, config.rtol, lb)
        for v0 in guesses
        if math.isfinite(v0)
    ]
    candidates = [v for v in candidates if math.isfinite(v)]
    if not candidates:
        logging.warning(f"volume: no solution for {model!r} at p={p}, T={T}, phase={phase}")
        return math.nan
    if len(candidates) == 1:
        return candidates[0]
    gibbs = [float(VT_gibbs_free_energy(model, v, T, z)) for v in candidates]
    return candidates[int(np.argmin(gibbs))]


def compressibility_factor(model: EoSModel, p, T, z=None, phase: str = "unknown"):
    "`Z = pV/(nRT)`."
    z = default_z(model, z)
    V = volume(model, p, T, z, phase)  # pylint: disable=invalid-name
    return p * V / (float(jnp.sum(z)) * model.Rgas() * T)


def fugacity_coefficient(model: EoSModel, p, T, z=None, phase: str = "unknown"):
    "`φ_i = exp(μʳ_i/RT - ln Z)`."
    z = default_z(model, z)
    V = volume(model, p, T, z, phase)  # pylint: disable=invalid-name
    RT = model.Rgas() * T  # pylint: disable=invalid-name
    Z = p * V / (jnp.sum(z) * RT)  # pylint: disable=invalid-name
    return jnp.exp(VT_chemical_potential_res(model, V, T, z) / RT - jnp.log(Z))


def mass_density(model: EoSModel, p, T, z=None, phase: str = "unknown"):
    "Mass density (kg/m^3)."
    z = default_z(model, z)
    return molecular_weight(model, z) / volume(model, p, T, z, phase)
