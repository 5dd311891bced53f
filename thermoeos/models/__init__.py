"""Equation of state models."""

from .activity import NRTL, ActivityModel, Wilson
from .base import EoSModel, EoSParam, default_z, eosshow, molecular_weight
from .composite import CompositeModel
from .cubic import (
    PR,
    RK,
    SRK,
    ABCubicModel,
    AlphaModel,
    KumarAlpha,
    NoAlpha,
    PRAlpha,
    RKAlpha,
    SoaveAlpha,
    vdW,
)
from .empiric import EmpiricSingleFluid
from .ideal import BasicIdeal, IdealModel
from .setup import (
    MODEL_REGISTRY,
    ModelMapping,
    ModelMember,
    ModelOptions,
    ParamField,
    createmodel,
    initmodel,
    initparams,
    updateparams,
)
from .solid import CompressibleSolid, SolidModel
from .spung import SPUNG
