"""Wilson activity model."""

import jax.numpy as jnp

from ...constants import R_GAS
from ...params.containers import PairParam, SingleParam
from ...params.database import ParamOptions
from ..cubic import PR
from ..ideal import BasicIdeal
from ..setup import ModelMember, ModelOptions, ParamField, createmodel
from .base import ActivityModel


def yamada_gunn_volume(T, Tc, Pc, w):  # pylint: disable=invalid-name
    """
    Saturated liquid molar volume (m^3/mol),
    `v = R Tc/Pc Zra^(1 + (1 - Tr)^(2/7))` with `Zra = 0.29056 - 0.08775 ω`.
    Above `Tc` the volume is held at its critical value.
    """
    zra = 0.29056 - 0.08775 * w
    tr = jnp.maximum(1 - T / Tc, 1e-16)
    return R_GAS * Tc / Pc * zra ** (1 + tr ** (2 / 7))


class Wilson(
    createmodel(
        ModelOptions(
            "Wilson",
            supertype=ActivityModel,
            locations=["properties/critical.csv"],
            inputparams=[
                ParamField("g", PairParam),
                ParamField("Tc", SingleParam),
                ParamField("Pc", SingleParam),
                ParamField("w", SingleParam),
            ],
            members=[
                ModelMember("puremodel", PR),
                ModelMember("idealmodel", BasicIdeal),
            ],
            param_options=ParamOptions(asymmetricparams=["g"]),
            references=["10.1021/ja01056a002"],
        )
    )
):
    """
    Wilson with `Λ_ij = v_j/v_i exp(-g_ij/RT)`, the liquid volumes `v_i`
    from the Yamada-Gunn correlation.

    `g` (J/mol) is an asymmetric pair param.
    """

    def liquid_volumes(self, T):
        return yamada_gunn_volume(
            T,
            jnp.asarray(self.params.Tc.values),
            jnp.asarray(self.params.Pc.values),
            jnp.asarray(self.params.w.values),
        )

    def ln_activity_coefficient(self, T, x):
        v = self.liquid_volumes(T)
        g = jnp.asarray(self.params.g.values)
        lam = v[None, :] / v[:, None] * jnp.exp(-g / (self.Rgas() * T))
        s = lam @ x
        return 1 - jnp.log(s) - lam.T @ (x / s)
