"""Ideal gas models."""

import jax.numpy as jnp

from .base import EoSModel, default_z
from .setup import ModelOptions, createmodel


class IdealModel(EoSModel):
    "Base class of ideal gas models, the residual Helmholtz energy is zero."

    def eos_res(self, V, T, z=None):
        return jnp.zeros(())

    def lb_volume(self, z=None):
        return 0.0


class BasicIdeal(createmodel(ModelOptions("BasicIdeal", supertype=IdealModel))):
    """
    Ideal gas without internal degrees of freedom.

    `A = R T sum_i z_i (ln(z_i / V) - 1)`
    """

    def eos(self, V, T, z=None):
        z = default_z(self, z)
        zs = jnp.where(z > 0, z, 1.0)
        terms = jnp.where(z > 0, z * (jnp.log(zs / V) - 1.0), 0.0)
        return self.Rgas() * T * jnp.sum(terms)
