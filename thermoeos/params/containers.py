"""Parameter containers for equation of state models."""

import copy
import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

GroupInput = Sequence[Tuple[str, Sequence[Tuple[str, int]]]]


class ModelParam:
    "Base class of every parameter container."


def _ismissing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (float, np.floating)) and np.isnan(value):
        return True
    return False


def defaultmissing(values) -> Tuple[np.ndarray, np.ndarray]:
    """
    Splits raw values into `(values, ismissingvalues)`.

    `None` and NaN entries are replaced by a default value (`0` for numbers,
    `""` for strings, `False` for booleans) and flagged as missing.
    """
    raw = np.asarray(values, dtype=object)
    missing = np.zeros(raw.shape, dtype=bool)
    for idx, value in np.ndenumerate(raw):
        missing[idx] = _ismissing(value)
    present = raw[~missing]

    if present.size and all(isinstance(v, str) for v in present):
        out = np.full(raw.shape, "", dtype=object)
    elif present.size and all(isinstance(v, (bool, np.bool_)) for v in present):
        out = np.zeros(raw.shape, dtype=bool)
    elif present.size and all(
        isinstance(v, (int, np.integer)) and not isinstance(v, (bool, np.bool_))
        for v in present
    ):
        out = np.zeros(raw.shape, dtype=np.int64)
    else:
        out = np.zeros(raw.shape, dtype=np.float64)
    out[~missing] = present
    return out, missing


def _typename(values: np.ndarray) -> str:
    if values.dtype == object:
        return "str"
    if values.dtype == bool:
        return "bool"
    if np.issubdtype(values.dtype, np.integer):
        return "int"
    return "float"


def _fmt(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    return repr(value.item() if hasattr(value, "item") else value)


@dataclass(eq=False, repr=False)
class SingleParam(ModelParam):
    """
    Parameter with one value per component. Basically a vector with some extra info.

    Example:
        >>> mw = SingleParam.from_values("Mw", ["water", "ammonia"], [18.01, 17.03])
        >>> mw.values
        array([18.01, 17.03])
        >>> mw2 = mw.copy("molecular weight")
    """

    name: str
    components: List[str]
    values: np.ndarray
    ismissingvalues: np.ndarray
    sourcecsvs: List[str] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)

    @classmethod
    def from_values(
        cls,
        name: str,
        components: Sequence[str],
        values: Sequence[Any],
        sourcecsvs: Sequence[str] = (),
        sources: Sequence[str] = (),
    ) -> "SingleParam":
        "Barebones constructor, for parameters not built from csv files."
        if len(values) != len(components):
            raise ValueError(
                f"{name}: got {len(values)} values for {len(components)} components."
            )
        _values, _ismissingvalues = defaultmissing(values)
        return cls(
            name,
            list(components),
            _values,
            _ismissingvalues,
            list(sourcecsvs),
            list(sources),
        )

    @classmethod
    def from_param(cls, x: "SingleParam", name: Optional[str] = None) -> "SingleParam":
        "Deep copy of `x`, optionally renamed."
        return x.copy(name)

    def copy(self, name: Optional[str] = None, deep: bool = True) -> "SingleParam":
        "Copies the parameter, optionally sharing the `values` array."
        return SingleParam(
            self.name if name is None else name,
            self.components,
            copy.deepcopy(self.values) if deep else self.values,
            copy.deepcopy(self.ismissingvalues) if deep else self.ismissingvalues,
            self.sourcecsvs,
            self.sources,
        )

    def with_values(self, values: Sequence[Any]) -> "SingleParam":
        "New parameter with the same metadata and new values."
        _values, _ismissingvalues = defaultmissing(values)
        return SingleParam(
            self.name,
            self.components,
            _values,
            _ismissingvalues,
            self.sourcecsvs,
            self.sources,
        )

    def __len__(self) -> int:
        return len(self.components)

    def __repr__(self) -> str:
        comps = ", ".join(f'"{c}"' for c in self.components)
        return f'SingleParam[{_typename(self.values)}]("{self.name}")[{comps}]'

    def __str__(self) -> str:
        n = len(self.components)
        lines = [
            f'SingleParam[{_typename(self.values)}]("{self.name}") with {n} '
            + ("component:" if n == 1 else "components:")
        ]
        for name, val, miss in zip(self.components, self.values, self.ismissingvalues):
            lines.append(f' "{name}" => ' + ("-" if miss else _fmt(val)))
        return "\n".join(lines)


def singletopair(values: np.ndarray, missingvalue: Any = 0.0) -> np.ndarray:
    "Puts a vector on the diagonal of an otherwise `missingvalue` matrix."
    n = len(values)
    out = np.full((n, n), missingvalue, dtype=object)
    for i in range(n):
        out[i, i] = values[i]
    return out


@dataclass(eq=False, repr=False)
class PairParam(ModelParam):
    """
    Parameter with one value per pair of components, stored as a matrix.

    Example:
        >>> kij = PairParam.from_values("k", ["water", "ammonia"], [[0.0, 0.1], [0.1, 0.0]])
        >>> kij.diagvalues
        array([0., 0.])
    """

    name: str
    components: List[str]
    values: np.ndarray
    ismissingvalues: np.ndarray
    sourcecsvs: List[str] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)

    @classmethod
    def from_values(
        cls,
        name: str,
        components: Sequence[str],
        values,
        sourcecsvs: Sequence[str] = (),
        sources: Sequence[str] = (),
    ) -> "PairParam":
        "Barebones constructor, for parameters not built from csv files."
        _values, _ismissingvalues = defaultmissing(values)
        n = len(components)
        if _values.shape != (n, n):
            raise ValueError(
                f"{name}: expected a {n}x{n} matrix, got shape {_values.shape}."
            )
        return cls(
            name,
            list(components),
            _values,
            _ismissingvalues,
            list(sourcecsvs),
            list(sources),
        )

    @classmethod
    def from_single(cls, x: SingleParam, name: Optional[str] = None) -> "PairParam":
        "Single values go to the diagonal, off-diagonal values are missing."
        pairvalues = singletopair(
            np.where(x.ismissingvalues, None, x.values.astype(object)), None
        )
        _values, _ismissingvalues = defaultmissing(pairvalues)
        return cls(
            x.name if name is None else name,
            x.components,
            _values,
            _ismissingvalues,
            x.sourcecsvs,
            x.sources,
        )

    @property
    def diagvalues(self) -> np.ndarray:
        "Diagonal of the values matrix (read-only view)."
        return self.values.diagonal()

    def copy(self, name: Optional[str] = None, deep: bool = True) -> "PairParam":
        "Copies the parameter, optionally sharing the `values` matrix."
        return PairParam(
            self.name if name is None else name,
            self.components,
            copy.deepcopy(self.values) if deep else self.values,
            copy.deepcopy(self.ismissingvalues) if deep else self.ismissingvalues,
            self.sourcecsvs,
            self.sources,
        )

    def with_values(self, values) -> "PairParam":
        "New parameter with the same metadata and new values."
        return PairParam.from_values(
            self.name, self.components, values, self.sourcecsvs, self.sources
        )

    def __len__(self) -> int:
        return len(self.components)

    def __repr__(self) -> str:
        comps = ", ".join(f'"{c}"' for c in self.components)
        return f'PairParam[{_typename(self.values)}]("{self.name}")[{comps}]'

    def __str__(self) -> str:
        comps = ", ".join(f'"{c}"' for c in self.components)
        return (
            f'PairParam[{_typename(self.values)}]("{self.name}")[{comps}] with values:\n'
            + str(self.values)
        )


@dataclass(eq=False, repr=False)
class AssocParam(ModelParam):
    """
    Association parameters between sites.

    `values[i][j]` is a `(nsites_i, nsites_j)` array for components `i` and `j`.
    """

    name: str
    components: List[str]
    values: List[List[np.ndarray]]
    ismissingvalues: List[List[np.ndarray]]
    allcomponentsites: List[List[str]]
    sourcecsvs: List[str] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)

    @classmethod
    def empty(
        cls,
        name: str,
        components: Sequence[str],
        allcomponentsites: Sequence[Sequence[str]],
        sourcecsvs: Sequence[str] = (),
        sources: Sequence[str] = (),
    ) -> "AssocParam":
        "All-missing association parameter for the given sites."
        n = len(components)
        values = [
            [
                np.zeros((len(allcomponentsites[i]), len(allcomponentsites[j])))
                for j in range(n)
            ]
            for i in range(n)
        ]
        missing = [[np.ones(v.shape, dtype=bool) for v in row] for row in values]
        return cls(
            name,
            list(components),
            values,
            missing,
            [list(s) for s in allcomponentsites],
            list(sourcecsvs),
            list(sources),
        )

    def copy(self, name: Optional[str] = None, deep: bool = True) -> "AssocParam":
        "Copies the parameter, optionally sharing the `values` arrays."
        return AssocParam(
            self.name if name is None else name,
            self.components,
            copy.deepcopy(self.values) if deep else self.values,
            copy.deepcopy(self.ismissingvalues) if deep else self.ismissingvalues,
            self.allcomponentsites,
            self.sourcecsvs,
            self.sources,
        )

    def entries(self):
        "Yields `((comp_i, site_a), (comp_j, site_b), value)` for present values."
        for i, row in enumerate(self.values):
            for j, mat in enumerate(row):
                miss = self.ismissingvalues[i][j]
                for (a, b), value in np.ndenumerate(mat):
                    if not miss[a, b]:
                        yield (
                            (self.components[i], self.allcomponentsites[i][a]),
                            (self.components[j], self.allcomponentsites[j][b]),
                            value,
                        )

    def __len__(self) -> int:
        return len(self.components)

    def __repr__(self) -> str:
        comps = ", ".join(f'"{c}"' for c in self.components)
        return f'AssocParam("{self.name}")[{comps}]'

    def __str__(self) -> str:
        lines = [repr(self) + " with values:"]
        for (ci, sa), (cj, sb), value in self.entries():
            lines.append(f' ("{ci}", "{sa}") >=< ("{cj}", "{sb}"): {_fmt(value)}')
        return "\n".join(lines)


def _flatten_input(input_: GroupInput):
    components = [name for name, _ in input_]
    labels = [[label for label, _ in pairs] for _, pairs in input_]
    counts = [[int(n) for _, n in pairs] for _, pairs in input_]
    flattened: List[str] = []
    for comp_labels in labels:
        for label in comp_labels:
            if label not in flattened:
                flattened.append(label)
    i_labels = [[flattened.index(label) for label in comp_labels] for comp_labels in labels]
    n_flattened = []
    for comp_i, comp_n in zip(i_labels, counts):
        row = [0] * len(flattened)
        for k, n in zip(comp_i, comp_n):
            row[k] = n
        n_flattened.append(row)
    return components, labels, counts, i_labels, flattened, n_flattened


def _show_labelled(kind: str, components, labels, counts, empty: str = "") -> str:
    n = len(components)
    lines = [f"{kind} with {n} " + ("component:" if n == 1 else "components:")]
    for comp, comp_labels, comp_n in zip(components, labels, counts):
        body = ", ".join(f'"{lab}" => {k}' for lab, k in zip(comp_labels, comp_n))
        lines.append(f' "{comp}": ' + (body if body else empty))
    return "\n".join(lines)


@dataclass(eq=False, repr=False)
class GroupParam(ModelParam):
    """
    Group contribution information.

    - `groups[i]`: groups of component `i`, `n_groups[i]` their multiplicities.
    - `flattenedgroups`: unique groups, the order used by group parameters.
    - `i_groups[i]`: indices into `flattenedgroups` of the groups of component `i`.
    - `n_flattenedgroups[i][k]`: multiplicity of flattened group `k` in component `i`.
    """

    components: List[str]
    groups: List[List[str]]
    n_groups: List[List[int]]
    i_groups: List[List[int]]
    flattenedgroups: List[str]
    n_flattenedgroups: List[List[int]]
    sourcecsvs: List[str] = field(default_factory=list)

    @classmethod
    def from_input(cls, input_: GroupInput, sourcecsvs: Sequence[str] = ()) -> "GroupParam":
        "Builds from `[(component, [(group, n), ...]), ...]`."
        return cls(*_flatten_input(input_), list(sourcecsvs))

    @property
    def i_flattenedgroups(self) -> range:
        "Iterator over all flattened group indices."
        return range(len(self.flattenedgroups))

    def __len__(self) -> int:
        return len(self.components)

    def __repr__(self) -> str:
        body = ", ".join(
            f'"{comp}" => ['
            + ", ".join(f'"{g}" => {k}' for g, k in zip(groups, ns))
            + "]"
            for comp, groups, ns in zip(self.components, self.groups, self.n_groups)
        )
        return f"GroupParam[{body}]"

    def __str__(self) -> str:
        return _show_labelled("GroupParam", self.components, self.groups, self.n_groups)


@dataclass(eq=False, repr=False)
class SiteParam(ModelParam):
    """
    Association site information, with the same layout as `GroupParam`.
    """

    components: List[str]
    sites: List[List[str]]
    n_sites: List[List[int]]
    i_sites: List[List[int]]
    flattenedsites: List[str]
    n_flattenedsites: List[List[int]]
    sourcecsvs: List[str] = field(default_factory=list)

    @classmethod
    def from_input(cls, input_: GroupInput, sourcecsvs: Sequence[str] = ()) -> "SiteParam":
        "Builds from `[(component, [(site, n), ...]), ...]`."
        return cls(*_flatten_input(input_), list(sourcecsvs))

    @classmethod
    def empty(cls, components: Sequence[str]) -> "SiteParam":
        "Components without association sites."
        return cls.from_input([(comp, []) for comp in components])

    @classmethod
    def from_site_counts(
        cls, components: Sequence[str], counts: Dict[str, SingleParam]
    ) -> "SiteParam":
        "Builds from `{site: SingleParam of multiplicities}`, skipping zero counts."
        sourcecsvs: List[str] = []
        for param in counts.values():
            for csv in param.sourcecsvs:
                if csv not in sourcecsvs:
                    sourcecsvs.append(csv)
        input_ = []
        for i, comp in enumerate(components):
            pairs = [
                (site, int(param.values[i]))
                for site, param in counts.items()
                if not param.ismissingvalues[i] and int(param.values[i]) != 0
            ]
            input_.append((comp, pairs))
        return cls.from_input(input_, sourcecsvs)

    @property
    def i_flattenedsites(self) -> range:
        "Iterator over all flattened site indices."
        return range(len(self.flattenedsites))

    def __len__(self) -> int:
        return len(self.components)

    def __repr__(self) -> str:
        body = ", ".join(
            f'"{comp}" => [' + ", ".join(f'"{s}" => {k}' for s, k in zip(sites, ns)) + "]"
            for comp, sites, ns in zip(self.components, self.sites, self.n_sites)
        )
        return f"SiteParam[{body}]"

    def __str__(self) -> str:
        return _show_labelled(
            "SiteParam", self.components, self.sites, self.n_sites, empty="(no sites)"
        )


def paramvals(x):
    "Values of a parameter container, anything else is returned as is."
    if isinstance(x, ModelParam):
        return x.values
    return x


def arbitraryparam(params) -> ModelParam:
    """
    Returns the first field of `params` that is a parameter container.
    Raises `ValueError` if there is none.
    """
    if dataclasses.is_dataclass(params):
        candidates = [getattr(params, f.name) for f in dataclasses.fields(params)]
    else:
        candidates = list(vars(params).values())
    for candidate in candidates:
        if isinstance(candidate, (SingleParam, PairParam, AssocParam)):
            return candidate
    raise ValueError(
        f"The parameter struct {type(params).__name__} must contain "
        "at least one parameter container."
    )


def split_groups(groups: GroupParam) -> List[GroupParam]:
    "Splits a `GroupParam` into one `GroupParam` per component."
    return [
        GroupParam.from_input([(comp, list(zip(gs, ns)))], groups.sourcecsvs)
        for comp, gs, ns in zip(groups.components, groups.groups, groups.n_groups)
    ]


def split_param(param, splitter: Optional[Sequence[Sequence[int]]] = None) -> list:
    """
    Splits a parameter into per-component parameters.

    `splitter` is a list of index lists, one per output parameter (by default
    one index per component). A `GroupParam` splitter selects the groups of each
    component. Interactions between indices of different outputs are lost.
    """
    if isinstance(param, GroupParam):
        return split_groups(param)
    if isinstance(splitter, GroupParam):
        splitter = splitter.i_groups
    if splitter is None:
        splitter = [[i] for i in range(len(param.components))]

    out = []
    for idx in splitter:
        idx = list(idx)
        components = [param.components[i] for i in idx]
        if isinstance(param, SingleParam):
            out.append(
                SingleParam(
                    param.name,
                    components,
                    param.values[idx].copy(),
                    param.ismissingvalues[idx].copy(),
                    param.sourcecsvs,
                    param.sources,
                )
            )
        elif isinstance(param, PairParam):
            sel = np.ix_(idx, idx)
            out.append(
                PairParam(
                    param.name,
                    components,
                    param.values[sel].copy(),
                    param.ismissingvalues[sel].copy(),
                    param.sourcecsvs,
                    param.sources,
                )
            )
        elif isinstance(param, AssocParam):
            out.append(
                AssocParam(
                    param.name,
                    components,
                    [[param.values[a][b].copy() for b in idx] for a in idx],
                    [[param.ismissingvalues[a][b].copy() for b in idx] for a in idx],
                    [param.allcomponentsites[a] for a in idx],
                    param.sourcecsvs,
                    param.sources,
                )
            )
        else:
            raise ValueError(f"Cannot split object of type {type(param).__name__}.")
    return out
