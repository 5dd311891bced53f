"""Tests of the parameter containers and combining rules."""

from dataclasses import dataclass

import numpy as np
import pytest

from thermoeos.params import (
    AssocParam,
    GroupParam,
    PairParam,
    SingleParam,
    SiteParam,
    arbitraryparam,
    arith_mix,
    pair_mix,
    split_param,
)


class TestSingleParam:
    """SingleParam construction, display and copies."""

    def test_repr(self):
        mw = SingleParam.from_values("Mw", ["water", "ammonia"], [18.01, 17.03])
        assert repr(mw) == 'SingleParam[float]("Mw")["water", "ammonia"]'

    def test_missing_values(self):
        tc = SingleParam.from_values("Tc", ["a", "b"], [300.0, None])
        np.testing.assert_array_equal(tc.values, [300.0, 0.0])
        np.testing.assert_array_equal(tc.ismissingvalues, [False, True])
        lines = str(tc).splitlines()
        assert lines[0] == 'SingleParam[float]("Tc") with 2 components:'
        assert lines[1] == ' "a" => 300.0'
        assert lines[2] == ' "b" => -'

    def test_nan_is_missing(self):
        tc = SingleParam.from_values("Tc", ["a", "b"], [float("nan"), 1.0])
        assert tc.ismissingvalues[0]
        assert tc.values[0] == 0.0

    def test_default_types(self):
        names = SingleParam.from_values("label", ["a", "b"], ["x", None])
        assert list(names.values) == ["x", ""]
        assert repr(names).startswith("SingleParam[str]")
        counts = SingleParam.from_values("n_H", ["a", "b"], [1, 2])
        assert counts.values.dtype == np.int64
        flags = SingleParam.from_values("flag", ["a", "b"], [True, None])
        assert flags.values.dtype == bool

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="Mw"):
            SingleParam.from_values("Mw", ["a", "b"], [1.0])

    def test_copy(self):
        mw = SingleParam.from_values("Mw", ["a", "b"], [1.0, 2.0])
        shallow = mw.copy("molar mass", deep=False)
        deep = mw.copy()
        assert shallow.name == "molar mass"
        assert shallow.values is mw.values
        assert deep.values is not mw.values
        mw.values[0] = 5.0
        assert shallow.values[0] == 5.0
        assert deep.values[0] == 1.0

    def test_with_values(self):
        mw = SingleParam.from_values("Mw", ["a", "b"], [1.0, 2.0], sources=["x"])
        other = mw.with_values([3.0, 4.0])
        assert other.sources == ["x"]
        np.testing.assert_array_equal(other.values, [3.0, 4.0])


class TestPairParam:
    """PairParam construction from matrices and single params."""

    def test_from_single(self):
        eps = SingleParam.from_values("epsilon", ["a", "b"], [100.0, 200.0])
        pair = PairParam.from_single(eps)
        np.testing.assert_array_equal(pair.diagvalues, [100.0, 200.0])
        np.testing.assert_array_equal(
            pair.ismissingvalues, [[False, True], [True, False]]
        )

    def test_shape_check(self):
        with pytest.raises(ValueError, match="2x2"):
            PairParam.from_values("k", ["a", "b"], [[0.0, 0.1]])

    def test_repr(self):
        k = PairParam.from_values("k", ["a", "b"], [[0.0, 0.1], [0.1, 0.0]])
        assert repr(k) == 'PairParam[float]("k")["a", "b"]'


class TestAssocParam:
    """AssocParam entries and display."""

    def test_entries(self):
        param = AssocParam.empty("epsilon_assoc", ["water"], [["H", "e"]])
        param.values[0][0][0, 1] = 2500.0
        param.ismissingvalues[0][0][0, 1] = False
        entries = list(param.entries())
        assert entries == [(("water", "H"), ("water", "e"), 2500.0)]
        assert '("water", "H") >=< ("water", "e"): 2500.0' in str(param)


class TestGroupsAndSites:
    """Group and site bookkeeping."""

    def test_group_param(self):
        groups = GroupParam.from_input(
            [("ethane", [("CH3", 2)]), ("propane", [("CH3", 2), ("CH2", 1)])]
        )
        assert groups.flattenedgroups == ["CH3", "CH2"]
        assert groups.i_groups == [[0], [0, 1]]
        assert groups.n_flattenedgroups == [[2, 0], [2, 1]]
        assert list(groups.i_flattenedgroups) == [0, 1]
        assert repr(groups) == 'GroupParam["ethane" => ["CH3" => 2], "propane" => ["CH3" => 2, "CH2" => 1]]'

    def test_sites_from_counts(self):
        comps = ["water", "methane"]
        counts = {
            "H": SingleParam.from_values("n_H", comps, [2, 0]),
            "e": SingleParam.from_values("n_e", comps, [2, 0]),
        }
        sites = SiteParam.from_site_counts(comps, counts)
        assert sites.sites == [["H", "e"], []]
        assert sites.n_sites == [[2, 2], []]
        assert str(sites).splitlines()[2] == ' "methane": (no sites)'


class TestSplit:
    """Splitting parameters per component."""

    def test_split_single_and_pair(self):
        comps = ["a", "b"]
        tc = SingleParam.from_values("Tc", comps, [300.0, 400.0])
        k = PairParam.from_values("k", comps, [[1.0, 0.1], [0.1, 2.0]])
        tc_a, tc_b = split_param(tc)
        assert tc_a.components == ["a"]
        assert tc_b.values[0] == 400.0
        k_a, k_b = split_param(k)
        assert k_a.values.shape == (1, 1)
        assert k_b.values[0, 0] == 2.0

    def test_split_with_indices(self):
        tc = SingleParam.from_values("Tc", ["a", "b", "c"], [1.0, 2.0, 3.0])
        first, second = split_param(tc, [[0, 1], [2]])
        assert first.components == ["a", "b"]
        assert second.components == ["c"]

    def test_split_by_groups(self):
        groups = GroupParam.from_input(
            [("ethane", [("CH3", 2)]), ("propane", [("CH3", 2), ("CH2", 1)])]
        )
        mw = SingleParam.from_values("Mw", groups.flattenedgroups, [15.035, 14.027])
        ethane, propane = split_param(mw, groups)
        assert ethane.components == ["CH3"]
        assert propane.components == ["CH3", "CH2"]

    def test_arbitraryparam(self):
        @dataclass
        class Empty:
            value: float

        @dataclass
        class Holder:
            value: float
            tc: SingleParam

        tc = SingleParam.from_values("Tc", ["a"], [1.0])
        assert arbitraryparam(Holder(1.0, tc)) is tc
        with pytest.raises(ValueError):
            arbitraryparam(Empty(1.0))


class TestCombining:
    """Combining rules."""

    def test_pair_mix(self):
        x = SingleParam.from_values("a", ["a", "b"], [1.0, 4.0])
        k = PairParam.from_values("k", ["a", "b"], [[0.0, 0.1], [0.1, 0.0]])
        mixed = pair_mix(x, k)
        np.testing.assert_allclose(mixed.values, [[1.0, 1.8], [1.8, 4.0]])

    def test_arith_mix(self):
        x = SingleParam.from_values("b", ["a", "b"], [1.0, 3.0])
        np.testing.assert_allclose(arith_mix(x).values, [[1.0, 2.0], [2.0, 3.0]])

    def test_explicit_values_kept(self):
        x = PairParam.from_values("sigma", ["a", "b"], [[1.0, 5.0], [None, 3.0]])
        mixed = arith_mix(x)
        assert mixed.values[0, 1] == 5.0
        assert mixed.values[1, 0] == 2.0
        assert not mixed.ismissingvalues.any()
