"""Tests of the solid models and the sublimation pressure."""

import logging
import math

import pytest

from thermoeos.configs.default import get_config
from thermoeos.constants import R_GAS
from thermoeos.methods import (
    ChemPotSublimationPressure,
    VT_gibbs_free_energy,
    pressure,
    saturation_pressure,
    sublimation_pressure,
    volume,
    x0_sublimation_pressure,
)
from thermoeos.methods.saturation import zero_pressure_x0
from thermoeos.models import PR, BasicIdeal, CompositeModel, CompressibleSolid

ICE = {"v0": [2e-5], "bulk_modulus": [1e9], "u0": [-40000.0], "s0": [-180.0]}


@pytest.fixture(name="solid", scope="module")
def fixture_solid():
    return CompressibleSolid(["water"], userlocations=ICE)


@pytest.fixture(name="model", scope="module")
def fixture_model(solid):
    return CompositeModel(BasicIdeal(["water"]), solid)


class TestCompressibleSolid:
    """Constant bulk modulus solid."""

    def test_pressure(self, solid):
        expected = 1e9 * (2e-5 / 1.9e-5 - 1)
        assert float(pressure(solid, 1.9e-5, 200.0)) == pytest.approx(expected, rel=1e-10)

    def test_volume(self, solid):
        assert volume(solid, 1e8, 200.0, phase="solid") == pytest.approx(2e-5 / 1.1)
        assert volume(solid, 0.0, 200.0) == pytest.approx(2e-5)


class TestSublimationPressure:
    """Solid-vapour equilibrium against an ideal gas."""

    def test_ideal_vapour(self, model):
        T = 200.0  # pylint: disable=invalid-name
        RT = R_GAS * T  # pylint: disable=invalid-name
        expected = RT * math.exp((-40000.0 + T * 180.0) / RT)
        psub, vs, vv = sublimation_pressure(model, T)
        assert psub == pytest.approx(expected, rel=1e-3)
        assert vs == pytest.approx(2e-5, rel=1e-4)
        assert vv == pytest.approx(RT / psub, rel=1e-8)

    def test_check_triple_without_saturation(self, model):
        # the ideal gas has no saturation pressure to compare against
        psub, _, _ = sublimation_pressure(model, 200.0, check_triple=True)
        assert math.isfinite(psub)

    def test_needs_composite_model(self):
        with pytest.raises(ValueError, match="CompositeModel"):
            sublimation_pressure(PR(["water"]), 200.0)

    def test_single_component(self):
        solid = CompressibleSolid(
            ["water", "ethanol"],
            userlocations={
                "v0": [2e-5, 5e-5],
                "bulk_modulus": [1e9, 1e9],
                "u0": [-40000.0, -50000.0],
                "s0": [-180.0, -150.0],
            },
        )
        model = CompositeModel(BasicIdeal(["water", "ethanol"]), solid)
        with pytest.raises(ValueError, match="single component"):
            sublimation_pressure(model, 200.0)

    def test_mismatched_components(self, solid):
        with pytest.raises(ValueError, match="differ"):
            CompositeModel(BasicIdeal(["ethanol"]), solid)

    def test_split_model(self, model):
        (part,) = model.split_model()
        assert isinstance(part, CompositeModel)
        assert part.solid_model.components == ["water"]


class TestCubicVapour:
    """Solid-vapour equilibrium with Peng-Robinson water."""

    @pytest.fixture(name="water", scope="class")
    def fixture_water(self, solid):
        return CompositeModel(PR(["water"]), solid)

    def test_equilibrium(self, water):
        T = 250.0  # pylint: disable=invalid-name
        psub, vs, vv = sublimation_pressure(water, T)
        assert math.isfinite(psub) and vs < vv
        mu_s = float(VT_gibbs_free_energy(water.solid_model, vs, T))
        mu_v = float(VT_gibbs_free_energy(water.fluid_model, vv, T))
        assert mu_s == pytest.approx(mu_v, abs=1e-3)
        assert float(pressure(water.solid_model, vs, T)) == pytest.approx(psub, abs=1.0)

    def test_explicit_initial_point(self, water):
        T = 250.0  # pylint: disable=invalid-name
        reference = sublimation_pressure(water, T)
        method = ChemPotSublimationPressure(v0=(2e-5, R_GAS * T / 2e4))
        psub, vs, vv = sublimation_pressure(water, T, method)
        assert psub == pytest.approx(reference[0], rel=1e-6)
        assert vs == pytest.approx(reference[1], rel=1e-6)
        assert vv == pytest.approx(reference[2], rel=1e-6)

    def test_check_triple(self, water):
        # psub ~ 2e4 Pa is far above the liquid saturation pressure at 250 K
        T = 250.0  # pylint: disable=invalid-name
        psat = saturation_pressure(water.fluid_model, T)[0]
        psub = sublimation_pressure(water, T)[0]
        assert math.isfinite(psat) and psub > psat
        result = sublimation_pressure(water, T, check_triple=True)
        assert all(math.isnan(v) for v in result)

    def test_no_convergence(self, water, caplog):
        with caplog.at_level(logging.WARNING):
            result = sublimation_pressure(water, 700.0)
        assert all(math.isnan(v) for v in result)
        assert "sublimation_pressure" in caplog.text

    def test_underflowing_initial_point(self, water, caplog):
        # exp(aʳ - 1) underflows at 5 K
        vs, vv = x0_sublimation_pressure(water, 5.0)
        assert vs == pytest.approx(2e-5)
        assert math.isnan(vv)
        with caplog.at_level(logging.WARNING):
            result = sublimation_pressure(water, 5.0)
        assert all(math.isnan(v) for v in result)
        assert "no initial point" in caplog.text

    def test_zero_pressure_guess_underflow(self, solid):
        vs, vv = zero_pressure_x0(solid, 5.0)
        assert vs == pytest.approx(2e-5)
        assert math.isnan(vv)


class TestMethodDefaults:
    """Tolerances of the sublimation method."""

    def test_defaults_from_config(self):
        method = ChemPotSublimationPressure()
        solver = get_config().solver
        assert method.atol == solver.atol
        assert method.rtol == solver.rtol
        assert method.max_iters == solver.max_iters

    def test_explicit_tolerance(self):
        assert ChemPotSublimationPressure(atol=1e-6).atol == 1e-6
