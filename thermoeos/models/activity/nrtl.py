"""Non-random two-liquid activity model."""

import jax.numpy as jnp
import numpy as np

from ...params.containers import PairParam
from ...params.database import ParamOptions
from ..cubic import PR
from ..ideal import BasicIdeal
from ..setup import ModelMapping, ModelMember, ModelOptions, ParamField, createmodel
from .base import ActivityModel

DEFAULT_NONRANDOMNESS = 0.3


def nrtl_nonrandomness(c):
    "Non-randomness `c_ij`, missing values take `DEFAULT_NONRANDOMNESS`."
    if c is None:
        return np.full((1, 1), DEFAULT_NONRANDOMNESS)
    return np.where(c.ismissingvalues, DEFAULT_NONRANDOMNESS, c.values)


class NRTL(
    createmodel(
        ModelOptions(
            "NRTL",
            supertype=ActivityModel,
            inputparams=[
                ParamField("a", PairParam),
                ParamField("b", PairParam),
                ParamField("c", PairParam, optional=True),
            ],
            params=[
                ParamField("a", PairParam),
                ParamField("b", PairParam),
                ParamField("c", PairParam),
            ],
            mappings=[ModelMapping("c", "c", nrtl_nonrandomness)],
            members=[
                ModelMember("puremodel", PR),
                ModelMember("idealmodel", BasicIdeal),
            ],
            param_options=ParamOptions(asymmetricparams=["a", "b"]),
            references=["10.1002/aic.690140124"],
        )
    )
):
    """
    NRTL with `τ_ij = a_ij + b_ij/T` and `G_ij = exp(-c_ij τ_ij)`.

    `a` (dimensionless) and `b` (K) are asymmetric pair params; the
    non-randomness `c` is symmetric and optional (0.3).

    Example:
        >>> model = NRTL(
        ...     ["water", "ethanol"],
        ...     userlocations={"a": [[0, 3.458], [-0.801, 0]], "b": [[0, -586.1], [246.2, 0]]},
        ... )
    """

    def ln_activity_coefficient(self, T, x):
        a = jnp.asarray(self.params.a.values)
        b = jnp.asarray(self.params.b.values)
        c = jnp.asarray(self.params.c.values)
        tau = a + b / T
        G = jnp.exp(-c * tau)  # pylint: disable=invalid-name
        S = x @ G  # pylint: disable=invalid-name
        C = x @ (tau * G)  # pylint: disable=invalid-name
        return C / S + (G * (tau - C / S)) @ (x / S)
