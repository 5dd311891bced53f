"""Base classes of equation of state models."""

from typing import Callable, List, Union

import jax.numpy as jnp
import numpy as np

from ..constants import R_GAS


class EoSParam:
    "Base class of the parameter bundles held by models."


class EoSModel:
    """
    Base class of all models.

    A model is a Helmholtz energy function `eos(V, T, z)` in J, of the total
    volume `V` (m^3), temperature `T` (K) and mole amounts `z` (mol).
    Subclasses implement `eos_res`; `eos` adds the ideal part given by the
    `idealmodel` member.
    """

    components: List[str] = []
    references: List[str] = []
    params = None
    idealmodel = None
    has_sites = False
    has_groups = False

    def __len__(self) -> int:
        return len(self.components)

    @property
    def icomponents(self) -> range:
        "Iterator over the component indices."
        return range(len(self))

    def eos(self, V, T, z=None):
        "Total Helmholtz energy (J)."
        z = default_z(self, z)
        return self.idealmodel.eos(V, T, z) + self.eos_res(V, T, z)

    def eos_res(self, V, T, z=None):
        "Residual Helmholtz energy (J)."
        raise NotImplementedError(f"{type(self).__name__} does not define eos_res.")

    def Rgas(self) -> float:  # pylint: disable=invalid-name
        "Gas constant used by the model."
        return R_GAS

    def mw(self) -> np.ndarray:
        "Molar masses in g/mol."
        if self.params is None or getattr(self.params, "Mw", None) is None:
            raise ValueError(f"{type(self).__name__} has no molar mass parameter Mw.")
        return np.asarray(self.params.Mw.values, dtype=np.float64)

    def lb_volume(self, z=None):
        "Lower bound of the total volume (m^3)."
        raise NotImplementedError(f"{type(self).__name__} does not define lb_volume.")

    def T_scale(self, z=None):  # pylint: disable=invalid-name
        "Characteristic temperature (K), used to scale solver variables."
        return 298.15

    def p_scale(self, z=None):
        "Characteristic pressure (Pa), used to scale solver residuals."
        return 101325.0

    def transform_params(self):
        "Hook run at the end of construction, after params and members are set."

    def split_model(self) -> list:
        "One single-component model per component."
        raise NotImplementedError(f"{type(self).__name__} does not support splitting.")

    def __repr__(self) -> str:
        comps = ", ".join(f'"{c}"' for c in self.components)
        return f"{type(self).__name__}({comps})"

    def __str__(self) -> str:
        return eosshow(self)


def default_z(model: EoSModel, z=None):
    "One mole of a pure component when `z` is not given."
    if z is None:
        if len(model) != 1:
            raise ValueError(
                f"Composition is required for {model!r} with {len(model)} components."
            )
        return jnp.ones(1)
    return jnp.asarray(z, dtype=jnp.float64)


def eosshow(model: EoSModel) -> str:
    "Multi-line description of a model, its components and parameters."
    n = len(model)
    name = type(model).__name__
    lines = [f"{name} with {n} " + ("component:" if n == 1 else "components:")]
    if model.has_groups:
        for comp, groups, counts in zip(
            model.groups.components, model.groups.groups, model.groups.n_groups
        ):
            body = ", ".join(f'"{g}" => {k}' for g, k in zip(groups, counts))
            lines.append(f' "{comp}": {body}')
    else:
        lines.extend(f' "{c}"' for c in model.components)
    for member in ("idealmodel", "alpha"):
        sub = getattr(model, member, None)
        if isinstance(sub, EoSModel):
            lines.append(f"{member}: {type(sub).__name__}")
    params = getattr(model, "params", None)
    if params is not None and hasattr(params, "__dataclass_fields__"):
        names = [k for k, v in vars(params).items() if v is not None]
        lines.append("Contains parameters: " + ", ".join(names))
    return "\n".join(lines)


def molecular_weight(model: EoSModel, z=None):
    "Molar mass of the mixture `z` in kg (component or group based)."
    z = default_z(model, z)
    mw = jnp.asarray(model.mw())
    if model.has_groups:
        n_groups = jnp.asarray(model.groups.n_flattenedgroups, dtype=jnp.float64)
        mw = n_groups @ mw
    return jnp.dot(mw, z) * 1e-3


def single_component_check(func: Union[Callable, str], model: EoSModel):
    "Raises `ValueError` if `model` has more than one component."
    if len(model) != 1:
        name = func if isinstance(func, str) else func.__name__
        raise ValueError(
            f"{name} only supports single component models, "
            f"{model!r} has {len(model)} components."
        )
