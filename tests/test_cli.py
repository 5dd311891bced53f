"""Tests of the command line entry points."""

import ml_collections
import pytest
from absl import logging

from thermoeos.cli import _verbosity, build_model, run_property
from thermoeos.configs.default import get_config
from thermoeos.methods import saturation_pressure, volume
from thermoeos.models import MODEL_REGISTRY, NRTL, PR, SPUNG


class TestBuildModel:
    """Model lookup by name."""

    def test_registry(self):
        assert isinstance(build_model("PR", ["propane"]), PR)
        assert isinstance(build_model("SPUNG", ["propane"]), SPUNG)

    def test_registry_holds_subclasses(self):
        assert MODEL_REGISTRY["NRTL"] is NRTL
        assert MODEL_REGISTRY["PR"] is PR

    def test_unknown_model(self):
        with pytest.raises(ValueError, match="Unknown model"):
            build_model("NotAModel", ["propane"])


class TestRunProperty:
    """Property dispatch."""

    def test_crit_pure(self):
        result = run_property("PR", ["propane"], "crit_pure")
        assert result["Tc"] == pytest.approx(369.89)
        assert result["Pc"] == pytest.approx(4251200.0)

    def test_saturation_pressure(self):
        result = run_property("PR", ["propane"], "saturation_pressure", temperature=300.0)
        expected = saturation_pressure(PR(["propane"]), 300.0)
        assert result["psat"] == pytest.approx(expected[0], rel=1e-8)
        assert result["vl"] < result["vv"]

    def test_solver_config(self):
        config = get_config()
        result = run_property(
            "PR", ["propane"], "saturation_pressure", temperature=300.0, config=config
        )
        assert result["psat"] == pytest.approx(1e6, rel=0.05)

    def test_volume(self):
        result = run_property("PR", ["propane"], "volume", temperature=300.0, pressure=1e5)
        assert result["V"] == pytest.approx(volume(PR(["propane"]), 1e5, 300.0))

    def test_missing_temperature(self):
        with pytest.raises(ValueError, match="--temperature"):
            run_property("PR", ["propane"], "saturation_pressure")

    def test_unknown_property(self):
        with pytest.raises(ValueError, match="Unknown property"):
            run_property("PR", ["propane"], "viscosity")

    def test_bubble_pressure_from_csv(self, tmp_path):
        path = tmp_path / "nrtl.csv"
        path.write_text(
            "species1,species2,a,b\npropane,butane,0.0,0.0\nbutane,propane,0.0,0.0\n"
        )
        result = run_property(
            "NRTL",
            ["propane", "butane"],
            "bubble_pressure",
            temperature=300.0,
            composition=[0.5, 0.5],
            userlocations=[str(path)],
        )
        pures = PR(["propane", "butane"]).split_model()
        p_sat = [saturation_pressure(pm, 300.0)[0] for pm in pures]
        assert result["p"] == pytest.approx(0.5 * (p_sat[0] + p_sat[1]), rel=1e-8)
        assert sum(result["y"]) == pytest.approx(1.0)


class TestConfigFile:
    """Partial configuration files."""

    def test_verbosity_without_verbose_entry(self):
        config = ml_collections.ConfigDict({"solver": {"atol": 1e-8}})
        assert _verbosity(config) == logging.WARNING
        assert _verbosity(None) == logging.WARNING
        assert _verbosity(ml_collections.ConfigDict({"verbose": True})) == logging.INFO

    def test_config_without_solver(self):
        config = ml_collections.ConfigDict({"verbose": False})
        result = run_property(
            "PR", ["propane"], "saturation_pressure", temperature=300.0, config=config
        )
        assert result["psat"] == pytest.approx(1e6, rel=0.05)
