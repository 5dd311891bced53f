"""Activity coefficient models."""

from .base import (
    ActivityModel,
    activity_coefficient,
    bubble_pressure,
    bubble_temperature,
    excess_gibbs_free_energy,
)
from .nrtl import NRTL
from .wilson import Wilson, yamada_gunn_volume
