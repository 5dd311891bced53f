"""
Multiparameter Helmholtz energy equations of state with jax
---------------
`A = n R T (α⁰(δ, τ) + αʳ(δ, τ))`, `δ = ρ/ρc`, `τ = Tc/T`.
"""

import json
from typing import Any, Dict, Sequence, Union

import jax.numpy as jnp
import numpy as np

from ..base import EoSModel, default_z
from .structs import (
    Associating2BTerm,
    EmpiricSingleFluidIdealParam,
    EmpiricSingleFluidProperties,
    EmpiricSingleFluidResidualParam,
    ExponentialTerm,
    GaoBTerm,
    NonAnalyticTerm,
)


def reduced_a_ideal(ideal: EmpiricSingleFluidIdealParam, delta, tau):
    "Reduced ideal Helmholtz energy `α⁰`."
    a0 = jnp.log(delta) + ideal.a1 + ideal.a2 * tau + ideal.c0 * jnp.log(tau)
    if len(ideal.n_gpe):
        a0 += jnp.sum(
            ideal.n_gpe * jnp.log(ideal.c_gpe + ideal.d_gpe * jnp.exp(-ideal.t_gpe * tau))
        )
    if len(ideal.n_p):
        a0 += jnp.sum(ideal.n_p * tau**ideal.t_p)
    return a0


# pylint: disable=R0914
def reduced_a_res(residual: EmpiricSingleFluidResidualParam, delta, tau):
    "Reduced residual Helmholtz energy `αʳ`."
    lnd = jnp.log(delta)
    lnt = jnp.log(tau)
    n, t, d = residual.n, residual.t, residual.d
    k_pol, k_exp, k_gauss = residual.iterators
    ar = jnp.sum(n[k_pol] * jnp.exp(d[k_pol] * lnd + t[k_pol] * lnt))

    if len(residual.l):
        ar += jnp.sum(
            n[k_exp] * jnp.exp(d[k_exp] * lnd + t[k_exp] * lnt - delta**residual.l)
        )

    if len(residual.beta):
        ar += jnp.sum(
            n[k_gauss]
            * jnp.exp(
                d[k_gauss] * lnd
                + t[k_gauss] * lnt
                - residual.eta * (delta - residual.epsilon) ** 2
                - residual.beta * (tau - residual.gamma) ** 2
            )
        )

    gao_b = residual.gao_b
    if gao_b.active:
        ar += jnp.sum(
            gao_b.n
            * jnp.exp(
                gao_b.d * lnd
                + gao_b.t * lnt
                + gao_b.eta * (delta - gao_b.epsilon) ** 2
                + 1 / (gao_b.beta * (tau - gao_b.gamma) ** 2 + gao_b.b)
            )
        )

    na = residual.na
    if na.active:
        delta_sq = (delta - 1) ** 2
        theta = (1 - tau) + na.A * delta_sq ** (1 / (2 * na.beta))
        big_delta = theta**2 + na.B * delta_sq**na.a
        psi = jnp.exp(-na.C * delta_sq - na.D * (tau - 1) ** 2)
        ar += jnp.sum(na.n * big_delta**na.b * delta * psi)

    assoc = residual.assoc
    if assoc.active:
        eta = assoc.vbarn * delta
        g = 0.5 * (2 - eta) / (1 - eta) ** 3
        big_delta = g * (jnp.exp(assoc.epsilonbar * tau) - 1) * assoc.kappabar
        x = 2 / (jnp.sqrt(1 + 4 * big_delta * delta) + 1)
        ar += assoc.m * assoc.a * (jnp.log(x) - x / 2 + 0.5)

    exp_term = residual.exp
    if exp_term.active:
        ar += jnp.sum(
            exp_term.n
            * jnp.exp(
                exp_term.d * lnd
                + exp_term.t * lnt
                - exp_term.gamma * delta**exp_term.l
            )
        )
    return ar


class EmpiricSingleFluid(EoSModel):
    """
    Pure fluid described by a multiparameter Helmholtz energy equation.

    Example:
        >>> model = EmpiricSingleFluid.from_json("water.json")
        >>> model.eos(1e-3, 300.0)
    """

    def __init__(
        self,
        components: Union[str, Sequence[str]],
        properties: EmpiricSingleFluidProperties,
        ideal: EmpiricSingleFluidIdealParam,
        residual: EmpiricSingleFluidResidualParam,
        references: Sequence[str] = (),
    ):
        if isinstance(components, str):
            components = [components]
        if len(components) != 1:
            raise ValueError(
                f"EmpiricSingleFluid describes one fluid, got components {list(components)}"
            )
        self.components = list(components)
        self.properties = properties
        self.ideal = ideal
        self.residual = residual
        self.references = list(references)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmpiricSingleFluid":
        """
        Builds the model from a dict with `components` (or `name`),
        `properties`, `ideal` and `residual` entries. The residual entry may
        hold `gao_b`, `na`, `assoc` and `exp` sub-dicts.
        """
        components = data.get("components", data.get("name"))
        if components is None:
            raise ValueError("Fluid data needs a 'components' or 'name' entry.")
        for key in ("properties", "ideal", "residual"):
            if key not in data:
                raise ValueError(f"Fluid data of {components} has no '{key}' entry.")
        residual = dict(data["residual"])
        terms = {
            "gao_b": GaoBTerm,
            "na": NonAnalyticTerm,
            "assoc": Associating2BTerm,
            "exp": ExponentialTerm,
        }
        for key, term in terms.items():
            if key in residual:
                residual[key] = term(**residual[key])
        return cls(
            components,
            EmpiricSingleFluidProperties(**data["properties"]),
            EmpiricSingleFluidIdealParam(**data["ideal"]),
            EmpiricSingleFluidResidualParam(**residual),
            data.get("references", ()),
        )

    @classmethod
    def from_json(cls, path: str) -> "EmpiricSingleFluid":
        "Builds the model from a json file with the `from_dict` layout."
        with open(path, "r", encoding="utf-8") as file:
            return cls.from_dict(json.load(file))

    def _reduced(self, V, T, z):
        z = default_z(self, z)
        n = jnp.sum(z)
        delta = n / V / self.properties.rhoc
        tau = self.properties.Tc / T
        return n, delta, tau

    def eos(self, V, T, z=None):
        n, delta, tau = self._reduced(V, T, z)
        alpha = reduced_a_ideal(self.ideal, delta, tau) + reduced_a_res(
            self.residual, delta, tau
        )
        return n * self.Rgas() * T * alpha

    def eos_res(self, V, T, z=None):
        n, delta, tau = self._reduced(V, T, z)
        return n * self.Rgas() * T * reduced_a_res(self.residual, delta, tau)

    def Rgas(self) -> float:  # pylint: disable=invalid-name
        return self.properties.Rgas

    def mw(self) -> np.ndarray:
        return np.asarray([self.properties.Mw])

    def lb_volume(self, z=None):
        return self.properties.lb_volume * jnp.sum(default_z(self, z))

    def T_scale(self, z=None):  # pylint: disable=invalid-name
        return self.properties.Tc

    def p_scale(self, z=None):
        return self.properties.Pc

    def crit_pure(self):
        "Critical point `(Tc, pc, vc)` stored with the equation."
        props = self.properties
        return props.Tc, props.Pc, 1 / props.rhoc

    def split_model(self) -> list:
        return [self]
