"""
Extended corresponding states (SPUNG)
---------------
A reference Helmholtz model is mapped onto the fluid through the shape
factors `f` (temperature) and `h` (volume) given by a cubic shape model and
its counterpart for the reference fluid:
`A(V, T, z) = n f A_ref(V/(h n), T/f)`.

Reference: Mollerup, J. Unification of the two-parameter equation of state
and the principle of corresponding states.
"""

from typing import Optional, Sequence, Union

import jax
import jax.numpy as jnp

from ..configs.default import get_config
from ..methods.saturation import x0_sat_pure
from .base import EoSModel, default_z
from .cubic.equations import PR, SRK, ABCubicModel


class SPUNG(EoSModel):
    """
    Extended corresponding states model.

    Args:
        components: Component names.
        refmodel: Single component reference model, default `PR(["propane"])`.
        shapemodel: Cubic shape model of the fluid, default `SRK(components)`.
        shaperef: Cubic shape model of the reference fluid, default
          `SRK(refmodel.components)`.
        iters: Newton iterations for the shape factors.
    """

    def __init__(
        self,
        components: Union[str, Sequence[str]],
        refmodel: Optional[EoSModel] = None,
        shapemodel: Optional[ABCubicModel] = None,
        shaperef: Optional[ABCubicModel] = None,
        iters: Optional[int] = None,
    ):
        if isinstance(components, str):
            components = [components]
        self.refmodel = PR(["propane"]) if refmodel is None else refmodel
        self.shapemodel = SRK(list(components)) if shapemodel is None else shapemodel
        self.shaperef = (
            SRK(self.refmodel.components) if shaperef is None else shaperef
        )
        if len(self.refmodel) != 1 or len(self.shaperef) != 1:
            raise ValueError("SPUNG reference and shape reference must be single component.")
        for model in (self.shapemodel, self.shaperef):
            if not isinstance(model, ABCubicModel):
                raise ValueError(
                    f"SPUNG shape models must be cubic, got {type(model).__name__}."
                )
        self.components = list(self.shapemodel.components)
        self.iters = get_config().spung_iters if iters is None else iters

    def shape_factors(self, V, T, z=None):
        """
        Shape factors `(f, h)`.

        `f` solves `f b/b0(T/f) - a/a0(T/f) = 0` with a fixed number of Newton
        steps starting from `f0 = b00 amix/(a00 b)`, and `h = b/b0(T/f)`.
        """
        z = default_z(self, z)
        n = jnp.sum(z)
        a, b = self.shapemodel.cubic_ab(V, T, z)
        amix = z @ jnp.asarray(self.shapemodel.params.a.values) @ z / n**2
        a00 = self.shaperef.params.a.values[0, 0]
        b00 = self.shaperef.params.b.values[0, 0]
        f0 = jnp.asarray(b00 * amix / a00 / b, dtype=jnp.float64)

        def residual(f):
            a0f, b0f = self.shaperef.cubic_ab(V, T / f)
            return f * b / b0f - a / a0f

        dresidual = jax.grad(residual)

        def newton_step(_, f):
            return f - residual(f) / dresidual(f)

        f = jax.lax.fori_loop(0, self.iters, newton_step, f0)
        _, b0 = self.shaperef.cubic_ab(V, T / f)
        return f, b / b0

    def eos(self, V, T, z=None):
        z = default_z(self, z)
        f, h = self.shape_factors(V, T, z)
        n = jnp.sum(z)
        return n * self.refmodel.eos(V / h / n, T / f) * f

    def eos_res(self, V, T, z=None):
        z = default_z(self, z)
        f, h = self.shape_factors(V, T, z)
        n = jnp.sum(z)
        return n * self.refmodel.eos_res(V / h / n, T / f) * f

    def mw(self):
        return self.shapemodel.mw()

    def _reference_scales(self, z):
        lb_v0 = self.refmodel.lb_volume()
        t0 = self.refmodel.T_scale()
        f, h = self.shape_factors(lb_v0, t0, z)
        return lb_v0, t0, f, h

    def lb_volume(self, z=None):
        z = default_z(self, z)
        lb_v0, _, _, h = self._reference_scales(z)
        return lb_v0 * h * jnp.sum(z)

    def T_scale(self, z=None):  # pylint: disable=invalid-name
        _, t0, f, _ = self._reference_scales(default_z(self, z))
        return t0 * f

    def p_scale(self, z=None):
        _, _, f, h = self._reference_scales(default_z(self, z))
        return self.refmodel.p_scale() * f / h

    def x0_sat_pure(self, T):
        "Reference fluid guesses at `T/f`, scaled by `h`."
        f, h = self.shape_factors(0.0, T)
        vl, vv = x0_sat_pure(self.refmodel, float(T / f))
        return float(vl * h), float(vv * h)

    def split_model(self) -> list:
        return [
            SPUNG(
                shape.components,
                refmodel=self.refmodel,
                shapemodel=shape,
                shaperef=self.shaperef,
                iters=self.iters,
            )
            for shape in self.shapemodel.split_model()
        ]

    def __str__(self) -> str:
        return (
            "Extended Corresponding States model\n"
            f" reference model: {self.refmodel!r}\n"
            f" shape model: {self.shapemodel!r}"
        )
