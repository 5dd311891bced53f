"""
Two-parameter cubic equations of state with jax
---------------
`p = RT/(v - b) - a α(T) / ((v + δ1 b)(v + δ2 b))`
"""

from functools import partial

import jax.numpy as jnp
import numpy as np

from ...constants import R_GAS
from ...params.combining import arith_mix, pair_mix
from ...params.containers import PairParam, SingleParam
from ..base import EoSModel, default_z
from ..ideal import BasicIdeal
from ..setup import ModelMapping, ModelMember, ModelOptions, ParamField, createmodel
from .alphas import NoAlpha, PRAlpha, RKAlpha, SoaveAlpha

CUBIC_LOCATIONS = ["properties/critical.csv", "properties/molarmass.csv"]
CUBIC_INPUTPARAMS = [
    ParamField("Tc", SingleParam),
    ParamField("Pc", SingleParam),
    ParamField("Mw", SingleParam),
    ParamField("k", PairParam, optional=True),
]
CUBIC_PARAMS = [
    ParamField("Tc", SingleParam),
    ParamField("Pc", SingleParam),
    ParamField("Mw", SingleParam),
    ParamField("a", PairParam),
    ParamField("b", PairParam),
]


def ab_from_critical(omega_a, omega_b, Tc, Pc, k=None):  # pylint: disable=invalid-name
    """
    Cubic `a` and `b` from critical constants (vdW1f mixing).

    `a_i = Ωa (R Tc_i)² / Pc_i`, `b_i = Ωb R Tc_i / Pc_i`,
    `a_ij = √(a_i a_j)(1 - k_ij)`, `b_ij = (b_i + b_j)/2`.
    """
    tc = np.asarray(Tc.values, dtype=np.float64)
    pc = np.asarray(Pc.values, dtype=np.float64)
    a_single = Tc.with_values(omega_a * (R_GAS * tc) ** 2 / pc)
    b_single = Tc.with_values(omega_b * R_GAS * tc / pc)
    a = pair_mix(a_single, k, name="a")
    b = arith_mix(b_single, name="b")
    return a.values, b.values


def _cubic_mapping(omega_a, omega_b):
    return [
        ModelMapping(["Tc", "Pc", "k"], ["a", "b"], partial(ab_from_critical, omega_a, omega_b))
    ]


class ABCubicModel(EoSModel):
    """
    Generic two-parameter cubic.

    Subclasses set `delta1`, `delta2`, `omega_a`, `omega_b` and the critical
    compressibility `zc`, and hold `alpha` and `idealmodel` members.
    """

    delta1 = 0.0
    delta2 = 0.0
    omega_a = 27 / 64
    omega_b = 1 / 8
    zc = 3 / 8
    alpha = None

    def cubic_ab(self, V, T, z=None):
        """
        Molar mixture `a α` (J m^3 mol^-2) and `b` (m^3 mol^-1).
        """
        z = default_z(self, z)
        x = z / jnp.sum(z)
        sqrt_alpha = jnp.sqrt(self.alpha.alpha(self, V, T, z))
        a = jnp.asarray(self.params.a.values) * jnp.outer(sqrt_alpha, sqrt_alpha)
        b = jnp.asarray(self.params.b.values)
        return x @ a @ x, x @ b @ x

    def eos_res(self, V, T, z=None):
        z = default_z(self, z)
        n = jnp.sum(z)
        v = V / n
        a, b = self.cubic_ab(V, T, z)
        RT = self.Rgas() * T  # pylint: disable=invalid-name
        repulsive = -RT * jnp.log1p(-b / v)
        if self.delta1 == self.delta2:
            attractive = -a / (v + self.delta1 * b)
        else:
            attractive = -a / (b * (self.delta1 - self.delta2)) * jnp.log(
                (v + self.delta1 * b) / (v + self.delta2 * b)
            )
        return n * (repulsive + attractive)

    def lb_volume(self, z=None):
        z = default_z(self, z)
        b = jnp.asarray(self.params.b.values)
        return z @ b @ z / jnp.sum(z)

    def T_scale(self, z=None):  # pylint: disable=invalid-name
        tc = np.asarray(self.params.Tc.values, dtype=np.float64)
        return float(np.prod(tc) ** (1 / len(tc)))

    def p_scale(self, z=None):
        pc = np.asarray(self.params.Pc.values, dtype=np.float64)
        return float(np.prod(pc) ** (1 / len(pc)))

    def volume_roots(self, p, T, z=None) -> np.ndarray:
        """
        Physical total volumes (m^3) at `p`, `T`: real roots of the cubic in
        `Z` with `v > b`, ascending. `p = 0` is solved as a quadratic in `v`.
        """
        z = default_z(self, z)
        n = float(jnp.sum(z))
        a, b = (float(val) for val in self.cubic_ab(0.0, T, z))
        RT = self.Rgas() * T  # pylint: disable=invalid-name
        d1, d2 = self.delta1, self.delta2
        if p == 0:
            coeffs = [RT, RT * b * (d1 + d2) - a, RT * d1 * d2 * b**2 + a * b]
            roots = np.roots(coeffs)
            v = roots[np.abs(roots.imag) < 1e-12 * np.abs(roots).max()].real
            return np.sort(v[v > b]) * n
        A = a * p / RT**2  # pylint: disable=invalid-name
        B = b * p / RT  # pylint: disable=invalid-name
        coeffs = [
            1.0,
            (d1 + d2 - 1) * B - 1,
            A + d1 * d2 * B**2 - (d1 + d2) * B * (B + 1),
            -(A * B + d1 * d2 * B**2 * (B + 1)),
        ]
        roots = np.roots(coeffs)
        zs = roots[np.abs(roots.imag) < 1e-10].real
        zs = zs[zs > B]
        return np.sort(zs * RT / p) * n

    def crit_pure(self):
        "Critical point `(Tc, pc, vc)` of a pure cubic, `α(Tc) = 1`."
        tc = float(self.params.Tc.values[0])
        pc = float(self.params.Pc.values[0])
        return tc, pc, self.zc * self.Rgas() * tc / pc

    def x0_sat_pure(self, T):
        """
        Liquid and vapour volume guesses at `T`: the outer cubic roots at the
        Wilson vapour pressure, or the zero pressure liquid root otherwise.
        """
        tc = float(self.params.Tc.values[0])
        pc = float(self.params.Pc.values[0])
        w = getattr(getattr(self.alpha, "params", None), "acentricfactor", None)
        w = 0.0 if w is None else float(w.values[0])
        p0 = pc * 10 ** (7 / 3 * (1 + w) * (1 - tc / T))
        roots = self.volume_roots(p0, T)
        if len(roots) >= 2 and roots[-1] / roots[0] > 1 + 1e-6:
            return float(roots[0]), float(roots[-1])
        b = float(self.lb_volume())
        liquid = self.volume_roots(0.0, T)
        vl = float(liquid[0]) if len(liquid) else 1.05 * b
        return vl, self.Rgas() * T / p0


class vdW(  # pylint: disable=invalid-name
    createmodel(
        ModelOptions(
            "vdW",
            supertype=ABCubicModel,
            locations=CUBIC_LOCATIONS,
            inputparams=CUBIC_INPUTPARAMS,
            params=CUBIC_PARAMS,
            mappings=_cubic_mapping(27 / 64, 1 / 8),
            members=[
                ModelMember("alpha", NoAlpha),
                ModelMember("idealmodel", BasicIdeal),
            ],
        )
    )
):
    "van der Waals equation of state, `p = RT/(v - b) - a/v²`."

    delta1 = 0.0
    delta2 = 0.0
    omega_a = 27 / 64
    omega_b = 1 / 8
    zc = 3 / 8


class RK(
    createmodel(
        ModelOptions(
            "RK",
            supertype=ABCubicModel,
            locations=CUBIC_LOCATIONS,
            inputparams=CUBIC_INPUTPARAMS,
            params=CUBIC_PARAMS,
            mappings=_cubic_mapping(0.42748, 0.08664),
            members=[
                ModelMember("alpha", RKAlpha),
                ModelMember("idealmodel", BasicIdeal),
            ],
            references=["10.1021/cr60137a013"],
        )
    )
):
    "Redlich-Kwong equation of state, `p = RT/(v - b) - a α/(v(v + b))`."

    delta1 = 1.0
    delta2 = 0.0
    omega_a = 0.42748
    omega_b = 0.08664
    zc = 1 / 3


class SRK(
    createmodel(
        ModelOptions(
            "SRK",
            parent=RK,
            supertype=RK,
            members=[
                ModelMember("alpha", SoaveAlpha),
                ModelMember("idealmodel", BasicIdeal),
            ],
            references=["10.1016/0009-2509(72)80096-4"],
        )
    )
):
    "Soave-Redlich-Kwong: Redlich-Kwong with the Soave alpha function."


class PR(
    createmodel(
        ModelOptions(
            "PR",
            supertype=ABCubicModel,
            locations=CUBIC_LOCATIONS,
            inputparams=CUBIC_INPUTPARAMS,
            params=CUBIC_PARAMS,
            mappings=_cubic_mapping(0.45724, 0.07780),
            members=[
                ModelMember("alpha", PRAlpha),
                ModelMember("idealmodel", BasicIdeal),
            ],
            references=["10.1021/i160057a011"],
        )
    )
):
    "Peng-Robinson equation of state, `p = RT/(v - b) - a α/(v(v + b) + b(v - b))`."

    delta1 = 1 + np.sqrt(2)
    delta2 = 1 - np.sqrt(2)
    omega_a = 0.45724
    omega_b = 0.07780
    zc = 0.307401
