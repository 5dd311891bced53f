"""Solid phase models."""

import jax.numpy as jnp
import numpy as np

from ..params.containers import SingleParam
from .base import EoSModel, default_z
from .ideal import BasicIdeal
from .setup import ModelMember, ModelOptions, ParamField, createmodel


class SolidModel(EoSModel):
    "Base class of solid phase models."


class CompressibleSolid(
    createmodel(
        ModelOptions(
            "CompressibleSolid",
            supertype=SolidModel,
            inputparams=[
                ParamField("v0", SingleParam),
                ParamField("bulk_modulus", SingleParam),
                ParamField("u0", SingleParam),
                ParamField("s0", SingleParam),
            ],
            members=[ModelMember("idealmodel", BasicIdeal)],
        )
    )
):
    """
    Solid with constant bulk modulus `K` around the molar volume `v0`:

    `A = n [u0 - T s0 + K v0 (x - 1 - ln x)]`, `x = V/(n v0)`,
    so that `p = K (n v0/V - 1)`.

    Params: `v0` (m^3/mol), `bulk_modulus` (Pa), `u0` (J/mol), `s0` (J/mol/K).
    Mixtures use mole fraction averages of the params.
    """

    def _mixed(self, z):
        x = z / jnp.sum(z)
        p = self.params
        return (
            x @ jnp.asarray(p.v0.values),
            x @ jnp.asarray(p.bulk_modulus.values),
            x @ jnp.asarray(p.u0.values),
            x @ jnp.asarray(p.s0.values),
        )

    def eos(self, V, T, z=None):
        z = default_z(self, z)
        n = jnp.sum(z)
        v0, k, u0, s0 = self._mixed(z)
        x = V / (n * v0)
        return n * (u0 - T * s0 + k * v0 * (x - 1 - jnp.log(x)))

    def eos_res(self, V, T, z=None):
        z = default_z(self, z)
        return self.eos(V, T, z) - self.idealmodel.eos(V, T, z)

    def volume_roots(self, p, T, z=None) -> np.ndarray:
        "The single volume `n v0 / (1 + p/K)`, empty for `p <= -K`."
        z = default_z(self, z)
        n = float(jnp.sum(z))
        v0, k, _, _ = (float(val) for val in self._mixed(z))
        if 1 + p / k <= 0:
            return np.asarray([])
        return np.asarray([n * v0 / (1 + p / k)])

    def lb_volume(self, z=None):
        return 0.0

    def p_scale(self, z=None):
        z = default_z(self, z)
        return float(self._mixed(z)[1])
