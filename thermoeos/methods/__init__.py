"""Properties and phase equilibria from model Helmholtz energies."""

from .properties import (
    VT_chemical_potential,
    VT_chemical_potential_res,
    VT_enthalpy,
    VT_entropy,
    VT_gibbs_free_energy,
    VT_internal_energy,
    a_res,
    compressibility_factor,
    fugacity_coefficient,
    mass_density,
    pressure,
    second_virial_coefficient,
    volume,
)
from .saturation import (
    ChemPotVSaturation,
    crit_pure,
    saturation_pressure,
    saturation_temperature,
    x0_sat_pure,
)
from .solvers import SolverResult, f_df, f_df_d2f, find_zero, nlsolve
from .sublimation import (
    ChemPotSublimationPressure,
    sublimation_pressure,
    x0_sublimation_pressure,
)
