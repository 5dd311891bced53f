"""Tests of the cubic equations of state."""

import math

import jax
import numpy as np
import pytest

from thermoeos.constants import R_GAS
from thermoeos.methods import (
    compressibility_factor,
    crit_pure,
    fugacity_coefficient,
    mass_density,
    pressure,
    second_virial_coefficient,
    volume,
)
from thermoeos.models import PR, RK, SRK, KumarAlpha, PRAlpha, SoaveAlpha, vdW

# propane, from the bundled critical table
TC, PC, W = 369.89, 4251200.0, 0.1521


def pr_alpha(T):  # pylint: disable=invalid-name
    m = 0.37464 + 1.54226 * W - 0.26992 * W**2
    return (1 + m * (1 - math.sqrt(T / TC))) ** 2


def pr_ab(T):  # pylint: disable=invalid-name
    a = 0.45724 * (R_GAS * TC) ** 2 / PC * pr_alpha(T)
    b = 0.07780 * R_GAS * TC / PC
    return a, b


class TestPengRobinson:
    """Peng-Robinson propane against the closed form."""

    @pytest.fixture(name="model", scope="class")
    def fixture_model(self):
        return PR(["propane"])

    def test_members(self, model):
        assert isinstance(model.alpha, PRAlpha)
        assert model.alpha.params.acentricfactor.values[0] == pytest.approx(W)

    def test_pressure(self, model):
        T, v = 300.0, 1e-3  # pylint: disable=invalid-name
        a, b = pr_ab(T)
        expected = R_GAS * T / (v - b) - a / (v**2 + 2 * b * v - b**2)
        assert float(pressure(model, v, T)) == pytest.approx(expected, rel=1e-10)

    def test_second_virial(self, model):
        T = 350.0  # pylint: disable=invalid-name
        a, b = pr_ab(T)
        expected = b - a / (R_GAS * T)
        assert float(second_virial_coefficient(model, T)) == pytest.approx(expected, rel=1e-6)

    def test_volume_roots(self, model):
        T, p = 300.0, 1e5  # pylint: disable=invalid-name
        vapour = volume(model, p, T, phase="vapour")
        liquid = volume(model, 5e6, T, phase="liquid")
        assert 0.9 * R_GAS * T / p < vapour < R_GAS * T / p
        assert liquid < 2e-4
        assert float(pressure(model, vapour, T)) == pytest.approx(p, rel=1e-8)
        assert float(pressure(model, liquid, T)) == pytest.approx(5e6, rel=1e-6)
        assert volume(model, p, T) == pytest.approx(vapour)

    def test_liquid_density(self, model):
        rho = float(mass_density(model, 1e6, 300.0, phase="liquid"))
        assert 350.0 < rho < 600.0

    def test_ideal_gas_limit(self, model):
        phi = np.asarray(fugacity_coefficient(model, 1.0, 300.0))
        assert phi[0] == pytest.approx(1.0, abs=1e-4)
        assert compressibility_factor(model, 1.0, 300.0) == pytest.approx(1.0, abs=1e-4)

    def test_crit_pure(self, model):
        tc, pc, vc = crit_pure(model)
        assert tc == pytest.approx(TC)
        assert pc == pytest.approx(PC)
        assert vc == pytest.approx(PR.zc * R_GAS * TC / PC)

    def test_unknown_phase(self, model):
        with pytest.raises(ValueError, match="plasma"):
            volume(model, 1e5, 300.0, phase="plasma")


class TestCubicFamily:
    """Other cubics and mixtures."""

    def test_srk_inherits_rk(self):
        model = SRK(["methane"])
        assert isinstance(model, RK)
        assert isinstance(model.alpha, SoaveAlpha)
        assert model.delta1 == 1.0 and model.delta2 == 0.0

    def test_vdw_critical_point(self):
        model = vdW(["methane"])
        assert model.references == []
        T = 190.564  # pylint: disable=invalid-name
        vc = 3 * float(model.params.b.values[0, 0])
        pc = float(pressure(model, vc, T))
        assert pc == pytest.approx(4599200.0, rel=1e-8)

    def test_mixture_needs_composition(self):
        model = PR(["methane", "ethane"])
        with pytest.raises(ValueError, match="Composition"):
            pressure(model, 1e-3, 300.0)
        p = float(pressure(model, 1e-3, 300.0, [0.5, 0.5]))
        assert p > 0

    def test_split_model(self):
        model = PR(["methane", "ethane"])
        methane, ethane = model.split_model()
        assert ethane.components == ["ethane"]
        assert float(pressure(methane, 1e-3, 300.0)) == pytest.approx(
            float(pressure(PR(["methane"]), 1e-3, 300.0))
        )

    def test_binary_interaction(self):
        k = [[0.0, 0.1], [0.1, 0.0]]
        model = PR(["methane", "ethane"], userlocations={"k": k})
        a = model.params.a.values
        assert a[0, 1] == pytest.approx(0.9 * math.sqrt(a[0, 0] * a[1, 1]))


class TestKumarAlpha:
    """Kumar alpha function."""

    @pytest.fixture(name="model", scope="class")
    def fixture_model(self):
        return PR(["propane"], alpha=KumarAlpha)

    def test_member(self, model):
        assert isinstance(model.alpha, KumarAlpha)

    def test_continuous_at_critical(self, model):
        below = float(model.alpha.alpha(model, 0.0, TC * (1 - 1e-7))[0])
        above = float(model.alpha.alpha(model, 0.0, TC * (1 + 1e-7))[0])
        assert below == pytest.approx(1.0, abs=1e-4)
        assert above == pytest.approx(1.0, abs=1e-4)

    def test_finite_gradient(self, model):
        def alpha(T):  # pylint: disable=invalid-name
            return model.alpha.alpha(model, 0.0, T)[0]

        for T in (0.7 * TC, TC, 1.3 * TC):  # pylint: disable=invalid-name
            assert np.isfinite(float(jax.grad(alpha)(T)))
