"""Parameter containers, csv database and combining rules."""

from .combining import arith_mix, kij_mix, pair_mix
from .containers import (
    AssocParam,
    GroupParam,
    ModelParam,
    PairParam,
    SingleParam,
    SiteParam,
    arbitraryparam,
    paramvals,
    split_groups,
    split_param,
)
from .database import AssocOptions, ParamOptions, getgroups, getparams
