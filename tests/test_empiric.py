"""Tests of the multiparameter single fluid model."""

import json
import math

import jax
import pytest

from thermoeos.constants import R_GAS
from thermoeos.methods import a_res, crit_pure, pressure
from thermoeos.models.empiric import (
    Associating2BTerm,
    EmpiricSingleFluid,
    EmpiricSingleFluidIdealParam,
    EmpiricSingleFluidProperties,
    EmpiricSingleFluidResidualParam,
    ExponentialTerm,
    GaoBTerm,
    NonAnalyticTerm,
)
from thermoeos.models.empiric.singlefluid import reduced_a_res

TOY_FLUID = {
    "components": "toy",
    "properties": {
        "Mw": 18.0,
        "Tc": 300.0,
        "Pc": 1e6,
        "rhoc": 1000.0,
        "lb_volume": 1e-5,
    },
    "ideal": {"a1": 0.0, "a2": 0.0, "c0": 0.0},
    "residual": {"n": [0.5], "t": [1.0], "d": [1.0]},
}


class TestEmpiricSingleFluid:
    """One-term fluid with a closed form pressure."""

    def test_pressure(self):
        model = EmpiricSingleFluid.from_dict(TOY_FLUID)
        # δ = τ = 1: p = ρRT (1 + δ ∂αʳ/∂δ) = ρRT (1 + 0.5)
        expected = 1000.0 * R_GAS * 300.0 * 1.5
        assert float(pressure(model, 1e-3, 300.0)) == pytest.approx(expected, rel=1e-10)

    def test_reduced_residual(self):
        model = EmpiricSingleFluid.from_dict(TOY_FLUID)
        # αʳ = 0.5 δ τ with δ = 2, τ = 0.5
        assert float(a_res(model, 5e-4, 600.0)) == pytest.approx(0.5)

    def test_exponential_term(self):
        data = json.loads(json.dumps(TOY_FLUID))
        data["residual"]["exp"] = {
            "n": [0.2],
            "t": [0.0],
            "d": [1.0],
            "l": [1.0],
            "gamma": [1.0],
        }
        model = EmpiricSingleFluid.from_dict(data)
        assert isinstance(model.residual.exp, ExponentialTerm)
        # αʳ = 0.5 δ τ + 0.2 δ exp(-δ) at δ = τ = 1
        expected = 0.5 + 0.2 * 0.36787944117144233
        assert float(a_res(model, 1e-3, 300.0)) == pytest.approx(expected, rel=1e-12)

    def test_from_json(self, tmp_path):
        path = tmp_path / "toy.json"
        path.write_text(json.dumps(TOY_FLUID))
        model = EmpiricSingleFluid.from_json(str(path))
        assert model.components == ["toy"]
        assert crit_pure(model) == pytest.approx((300.0, 1e6, 1e-3))
        assert model.split_model() == [model]
        assert float(model.lb_volume()) == pytest.approx(1e-5)

    def test_invalid_data(self):
        with pytest.raises(ValueError, match="residual"):
            EmpiricSingleFluid.from_dict({"components": "toy", "properties": {}, "ideal": {}})
        with pytest.raises(ValueError):
            EmpiricSingleFluidResidualParam(n=[1.0, 2.0], t=[1.0], d=[1.0, 1.0])
        with pytest.raises(ValueError):
            EmpiricSingleFluidIdealParam(a1=0.0, a2=0.0, c0=0.0, n_gpe=[1.0], t_gpe=[])

    def test_single_component_only(self):
        with pytest.raises(ValueError):
            EmpiricSingleFluid(
                ["a", "b"],
                EmpiricSingleFluidProperties(18.0, 300.0, 1e6, 1000.0, 1e-5),
                EmpiricSingleFluidIdealParam(0.0, 0.0, 0.0),
                EmpiricSingleFluidResidualParam(n=[0.5], t=[1.0], d=[1.0]),
            )


def _residual_with(**terms):
    "Residual part with a zero polynomial term plus `terms`."
    return EmpiricSingleFluidResidualParam(n=[0.0], t=[1.0], d=[1.0], **terms)


NA_TERM = {
    "A": [0.32],
    "B": [0.2],
    "C": [28.0],
    "D": [700.0],
    "a": [3.5],
    "b": [0.85],
    "beta": [0.3],
    "n": [-0.14874640856724],
}


class TestResidualTerms:
    """Single extra terms of αʳ against their closed forms."""

    DELTA, TAU = 1.1, 0.99

    def test_non_analytic(self):
        residual = _residual_with(na=NonAnalyticTerm(**NA_TERM))
        delta, tau = self.DELTA, self.TAU
        dsq = (delta - 1) ** 2
        theta = (1 - tau) + 0.32 * dsq ** (1 / 0.6)
        big_delta = theta**2 + 0.2 * dsq**3.5
        psi = math.exp(-28.0 * dsq - 700.0 * (tau - 1) ** 2)
        expected = -0.14874640856724 * big_delta**0.85 * delta * psi
        assert float(reduced_a_res(residual, delta, tau)) == pytest.approx(expected, rel=1e-10)

    def test_gao_b(self):
        term = GaoBTerm(
            n=[0.1],
            t=[1.5],
            d=[2.0],
            eta=[-1.0],
            beta=[-0.5],
            gamma=[1.2],
            epsilon=[0.9],
            b=[1.3],
        )
        residual = _residual_with(gao_b=term)
        delta, tau = self.DELTA, self.TAU
        expected = (
            0.1
            * delta**2.0
            * tau**1.5
            * math.exp(-1.0 * (delta - 0.9) ** 2 + 1 / (-0.5 * (tau - 1.2) ** 2 + 1.3))
        )
        assert float(reduced_a_res(residual, delta, tau)) == pytest.approx(expected, rel=1e-10)

    def test_associating_2b(self):
        term = Associating2BTerm(epsilonbar=5.0, kappabar=0.005, a=1.3, m=1.0, vbarn=0.1)
        residual = _residual_with(assoc=term)
        delta, tau = self.DELTA, self.TAU
        eta = 0.1 * delta
        g = 0.5 * (2 - eta) / (1 - eta) ** 3
        big_delta = g * (math.exp(5.0 * tau) - 1) * 0.005
        x = 2 / (math.sqrt(1 + 4 * big_delta * delta) + 1)
        expected = 1.0 * 1.3 * (math.log(x) - x / 2 + 0.5)
        assert expected < 0
        assert float(reduced_a_res(residual, delta, tau)) == pytest.approx(expected, rel=1e-10)

    def test_inactive_terms(self):
        residual = _residual_with()
        assert not residual.na.active
        assert not residual.gao_b.active
        assert not residual.assoc.active
        assert float(reduced_a_res(residual, self.DELTA, self.TAU)) == 0.0

    def test_finite_pressure_off_critical_density(self):
        data = json.loads(json.dumps(TOY_FLUID))
        data["residual"]["na"] = NA_TERM
        model = EmpiricSingleFluid.from_dict(data)
        assert isinstance(model.residual.na, NonAnalyticTerm)
        for V in (8e-4, 1.2e-3):  # pylint: disable=invalid-name
            p = float(pressure(model, V, 310.0))
            assert math.isfinite(p)
            dpdv = jax.grad(lambda v: pressure(model, v, 310.0))(V)
            assert math.isfinite(float(dpdv))
