"""Tests of the activity coefficient models."""

import math

import numpy as np
import pytest

from thermoeos.constants import R_GAS
from thermoeos.methods import pressure, saturation_pressure
from thermoeos.models import NRTL, PR, Wilson
from thermoeos.models.activity import (
    activity_coefficient,
    bubble_pressure,
    bubble_temperature,
    excess_gibbs_free_energy,
    yamada_gunn_volume,
)

WATER_ETHANOL = {
    "a": [[0.0, 3.458], [-0.801, 0.0]],
    "b": [[0.0, -586.1], [246.2, 0.0]],
}
IDEAL = {"a": [[0.0, 0.0], [0.0, 0.0]], "b": [[0.0, 0.0], [0.0, 0.0]]}


@pytest.fixture(name="ideal_mixture", scope="module")
def fixture_ideal_mixture():
    return NRTL(["propane", "butane"], userlocations=IDEAL)


class TestNRTL:
    """NRTL activity coefficients."""

    @pytest.fixture(name="model", scope="class")
    def fixture_model(self):
        return NRTL(["water", "ethanol"], userlocations=WATER_ETHANOL)

    def test_params(self, model):
        np.testing.assert_allclose(model.params.c.values, 0.3)
        assert model.params.a.values[1, 0] == pytest.approx(-0.801)
        assert isinstance(model.puremodel, PR)
        assert [pm.components for pm in model.puremodels] == [["water"], ["ethanol"]]

    def test_pure_limit(self, model):
        gamma = np.asarray(activity_coefficient(model, 1e5, 350.0, [1.0, 0.0]))
        assert gamma[0] == pytest.approx(1.0, abs=1e-12)

    def test_infinite_dilution(self, model):
        T = 350.0  # pylint: disable=invalid-name
        tau12 = 3.458 - 586.1 / T
        tau21 = -0.801 + 246.2 / T
        expected = tau21 + tau12 * math.exp(-0.3 * tau12)
        gamma = np.asarray(activity_coefficient(model, 1e5, T, [0.0, 1.0]))
        assert math.log(gamma[0]) == pytest.approx(expected, rel=1e-10)

    def test_binary_formula(self, model):
        T, x1 = 340.0, 0.3  # pylint: disable=invalid-name
        x2 = 1 - x1
        tau12 = 3.458 - 586.1 / T
        tau21 = -0.801 + 246.2 / T
        g12, g21 = math.exp(-0.3 * tau12), math.exp(-0.3 * tau21)
        ln_gamma1 = x2**2 * (
            tau21 * (g21 / (x1 + x2 * g21)) ** 2 + tau12 * g12 / (x2 + x1 * g12) ** 2
        )
        ln_gamma2 = x1**2 * (
            tau12 * (g12 / (x2 + x1 * g12)) ** 2 + tau21 * g21 / (x1 + x2 * g21) ** 2
        )
        gamma = np.asarray(activity_coefficient(model, 1e5, T, [x1, x2]))
        np.testing.assert_allclose(np.log(gamma), [ln_gamma1, ln_gamma2], rtol=1e-10)
        ge = float(excess_gibbs_free_energy(model, 1e5, T, [x1, x2]))
        assert ge == pytest.approx(R_GAS * T * (x1 * ln_gamma1 + x2 * ln_gamma2), rel=1e-10)

    def test_split_model(self, model):
        water, ethanol = model.split_model()
        assert ethanol.components == ["ethanol"]
        assert [pm.components for pm in water.puremodels] == [["water"]]


class TestWilson:
    """Wilson activity coefficients."""

    @pytest.fixture(name="model", scope="class")
    def fixture_model(self):
        g = [[0.0, 1500.0], [3000.0, 0.0]]
        return Wilson(["ethanol", "water"], userlocations={"g": g})

    def test_yamada_gunn(self):
        v = float(yamada_gunn_volume(298.15, 647.13, 22055000.0, 0.3449))
        assert 1.5e-5 < v < 2.5e-5

    def test_binary_formula(self, model):
        T, x1 = 340.0, 0.3  # pylint: disable=invalid-name
        x2 = 1 - x1
        v1, v2 = np.asarray(model.liquid_volumes(T))
        lam12 = v2 / v1 * math.exp(-1500.0 / (R_GAS * T))
        lam21 = v1 / v2 * math.exp(-3000.0 / (R_GAS * T))
        s1, s2 = x1 + lam12 * x2, x2 + lam21 * x1
        ln_gamma1 = -math.log(s1) + x2 * (lam12 / s1 - lam21 / s2)
        ln_gamma2 = -math.log(s2) - x1 * (lam12 / s1 - lam21 / s2)
        gamma = np.asarray(activity_coefficient(model, 1e5, T, [x1, x2]))
        np.testing.assert_allclose(np.log(gamma), [ln_gamma1, ln_gamma2], rtol=1e-10)


class TestBubblePoint:
    """Modified Raoult law."""

    def test_raoult(self, ideal_mixture):
        T = 300.0  # pylint: disable=invalid-name
        p_sat = [saturation_pressure(pm, T)[0] for pm in ideal_mixture.puremodels]
        p, y = bubble_pressure(ideal_mixture, T, [0.4, 0.6])
        assert p == pytest.approx(0.4 * p_sat[0] + 0.6 * p_sat[1], rel=1e-10)
        assert y[0] == pytest.approx(0.4 * p_sat[0] / p, rel=1e-10)
        assert sum(y) == pytest.approx(1.0)

    def test_bubble_temperature(self, ideal_mixture):
        p, y = bubble_pressure(ideal_mixture, 300.0, [0.5, 0.5])
        T, y_t = bubble_temperature(ideal_mixture, p, [0.5, 0.5])  # pylint: disable=invalid-name
        assert T == pytest.approx(300.0, rel=1e-6)
        np.testing.assert_allclose(y_t, y, rtol=1e-5)

    def test_bubble_temperature_from_guess(self, ideal_mixture):
        p, _ = bubble_pressure(ideal_mixture, 290.0, [0.5, 0.5])
        T, _ = bubble_temperature(ideal_mixture, p, [0.5, 0.5], T0=295.0)  # pylint: disable=invalid-name
        assert T == pytest.approx(290.0, rel=1e-6)

    def test_needs_activity_model(self):
        with pytest.raises(ValueError, match="ActivityModel"):
            bubble_pressure(PR(["propane", "butane"]), 300.0, [0.5, 0.5])

    def test_mixture_pressure(self, ideal_mixture):
        # a pure composition reduces to the pure equation of state
        p = float(pressure(ideal_mixture, 1e-3, 300.0, [1.0, 0.0]))
        reference = float(pressure(PR(["propane"]), 1e-3, 300.0))
        assert p == pytest.approx(reference, rel=1e-8)
