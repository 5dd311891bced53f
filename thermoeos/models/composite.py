"""Models made of one fluid model and one solid model."""

from .base import EoSModel


class CompositeModel(EoSModel):
    """
    Pairs a fluid phase model with a solid phase model of the same
    components, as needed by solid-fluid equilibria.

    Example:
        >>> model = CompositeModel(PR(["water"]), CompressibleSolid(["water"], userlocations=...))
        >>> sublimation_pressure(model, 250.0)
    """

    def __init__(self, fluid: EoSModel, solid: EoSModel):
        if list(fluid.components) != list(solid.components):
            raise ValueError(
                f"Fluid components {fluid.components} and solid components "
                f"{solid.components} differ."
            )
        self.fluid_model = fluid
        self.solid_model = solid
        self.components = list(fluid.components)

    def eos(self, V, T, z=None):
        "Helmholtz energy of the fluid phase."
        return self.fluid_model.eos(V, T, z)

    def eos_res(self, V, T, z=None):
        return self.fluid_model.eos_res(V, T, z)

    def Rgas(self) -> float:  # pylint: disable=invalid-name
        return self.fluid_model.Rgas()

    def mw(self):
        return self.fluid_model.mw()

    def lb_volume(self, z=None):
        return self.fluid_model.lb_volume(z)

    def T_scale(self, z=None):  # pylint: disable=invalid-name
        return self.fluid_model.T_scale(z)

    def p_scale(self, z=None):
        return self.fluid_model.p_scale(z)

    def split_model(self) -> list:
        return [
            CompositeModel(fluid, solid)
            for fluid, solid in zip(
                self.fluid_model.split_model(), self.solid_model.split_model()
            )
        ]

    def __str__(self) -> str:
        return (
            f"Composite Model with {len(self)} "
            + ("component:" if len(self) == 1 else "components:")
            + f"\n fluid: {self.fluid_model!r}\n solid: {self.solid_model!r}"
        )
