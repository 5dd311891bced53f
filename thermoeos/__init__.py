"""
thermoeos
---------------
Helmholtz energy equations of state with jax automatic differentiation.
"""

import jax

jax.config.update("jax_enable_x64", True)

# pylint: disable=wrong-import-position
# models must be imported before methods
from .models import (
    NRTL,
    PR,
    RK,
    SPUNG,
    SRK,
    BasicIdeal,
    CompositeModel,
    CompressibleSolid,
    EmpiricSingleFluid,
    KumarAlpha,
    Wilson,
    createmodel,
    vdW,
)
from .models.activity import (
    activity_coefficient,
    bubble_pressure,
    bubble_temperature,
    excess_gibbs_free_energy,
)
from .methods import (  # isort: skip
    ChemPotSublimationPressure,
    ChemPotVSaturation,
    VT_chemical_potential,
    VT_chemical_potential_res,
    VT_enthalpy,
    VT_entropy,
    VT_gibbs_free_energy,
    VT_internal_energy,
    a_res,
    compressibility_factor,
    crit_pure,
    fugacity_coefficient,
    mass_density,
    pressure,
    saturation_pressure,
    saturation_temperature,
    second_virial_coefficient,
    sublimation_pressure,
    volume,
)
from .params import PairParam, ParamOptions, SingleParam, getparams

__version__ = "0.1.0"
