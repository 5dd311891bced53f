"""
Alpha functions of cubic equations of state
---------------
`alpha(model, V, T, z)` returns `α_i(T)` for every component of the cubic
`model`, with `Tr_i = T / Tc_i`.
"""

import jax.numpy as jnp

from ...params.containers import SingleParam
from ..base import EoSModel
from ..setup import ModelMapping, ModelOptions, ParamField, createmodel


class AlphaModel(EoSModel):
    "Base class of alpha functions."

    def alpha(self, model, V, T, z=None):
        raise NotImplementedError(f"{type(self).__name__} does not define alpha.")


def _evalpoly(x, coeffs):
    "`coeffs[0] + coeffs[1] x + coeffs[2] x^2 + ...` (Horner)."
    out = coeffs[-1]
    for c in reversed(coeffs[:-1]):
        out = out * x + c
    return out


def _reduced_temperature(model, T):
    return T / jnp.asarray(model.params.Tc.values)


class NoAlpha(createmodel(ModelOptions("NoAlpha", supertype=AlphaModel))):
    "`α = 1`, used by the van der Waals equation."

    def alpha(self, model, V, T, z=None):
        return jnp.ones(len(model))


class RKAlpha(
    createmodel(
        ModelOptions(
            "RKAlpha",
            supertype=AlphaModel,
            references=["10.1021/cr60137a013"],
        )
    )
):
    "`α = 1/√Tr`"

    def alpha(self, model, V, T, z=None):
        return 1.0 / jnp.sqrt(_reduced_temperature(model, T))


class SoaveAlpha(
    createmodel(
        ModelOptions(
            "SoaveAlpha",
            supertype=AlphaModel,
            locations=["properties/critical.csv"],
            inputparams=[ParamField("w", SingleParam)],
            params=[ParamField("acentricfactor", SingleParam)],
            mappings=[ModelMapping("w", "acentricfactor")],
            references=["10.1016/0009-2509(72)80096-4"],
        )
    )
):
    """
    `α = (1 + m(1 - √Tr))²`, `m = 0.480 + 1.574ω - 0.176ω²`
    """

    m_coeffs = (0.480, 1.574, -0.176)

    def alpha(self, model, V, T, z=None):
        w = jnp.asarray(self.params.acentricfactor.values)
        m = _evalpoly(w, self.m_coeffs)
        return (1 + m * (1 - jnp.sqrt(_reduced_temperature(model, T)))) ** 2


class PRAlpha(
    createmodel(
        ModelOptions(
            "PRAlpha",
            parent=SoaveAlpha,
            supertype=SoaveAlpha,
            references=["10.1021/i160057a011"],
        )
    )
):
    """
    `α = (1 + m(1 - √Tr))²`, `m = 0.37464 + 1.54226ω - 0.26992ω²`
    """

    m_coeffs = (0.37464, 1.54226, -0.26992)


def taylor_alpha_kumar(Tr, m, n):  # pylint: disable=invalid-name
    "6th order Taylor expansion of the Kumar alpha around `Tr = 1`."
    k1 = m * n
    k2 = k1 * ((m - 1) * n + 2) / 4
    t3 = k1 * (n - 2)
    k3 = t3 * ((3 * m - 1) * n + 4) / 24
    k4 = t3 * _evalpoly(n, (-24, 10 - 22 * m, 7 * m - 1)) / 192
    t5 = t3 * (n - 4)
    k5 = t5 * _evalpoly(n, (-48, 14 - 50 * m, 15 * m - 1)) / 1920
    k6 = t5 * _evalpoly(n, (480, 4 * (137 * m - 47), 24 - 264 * m, 31 * m - 1)) / 23040
    return _evalpoly(Tr - 1, (1.0, k1, k2, k3, k4, k5, k6))


class KumarAlpha(
    createmodel(
        ModelOptions(
            "KumarAlpha",
            parent=SoaveAlpha,
            references=["10.1016/j.ces.2020.116045"],
        )
    )
):
    """
    For `Tr <= 1`, `α = (1 + m(1 - √Tr)^n)²` with
    `m = 0.37790 + 1.51959ω - 0.46904ω² + 0.015679ω³` and
    `n = 0.97016 + 0.05495ω - 0.1293ω² + 0.0172028ω³`.
    For `Tr > 1`, a 6th order Taylor expansion around `Tr = 1`.
    """

    m_coeffs = (0.37790, 1.51959, -0.46904, 0.015679)
    n_coeffs = (0.97016, 0.05495, -0.1293, 0.0172028)

    def alpha(self, model, V, T, z=None):
        w = jnp.asarray(self.params.acentricfactor.values)
        m = _evalpoly(w, self.m_coeffs)
        n = _evalpoly(w, self.n_coeffs)
        tr = _reduced_temperature(model, T)
        # both branches are evaluated, clip so the unused one keeps finite gradients
        base = jnp.maximum(1 - jnp.sqrt(jnp.minimum(tr, 1.0)), 1e-16)
        subcritical = (1 + m * base**n) ** 2
        supercritical = taylor_alpha_kumar(jnp.maximum(tr, 1.0), m, n)
        return jnp.where(tr <= 1, subcritical, supercritical)
