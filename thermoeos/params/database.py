"""Module to read model parameters from csv tables"""

import glob
import os.path as osp
import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import polars as pl
from absl import logging

from ..configs.default import get_config
from .containers import AssocParam, GroupParam, PairParam, SingleParam, SiteParam

DATABASE_DIR = get_config().database_dir

Locations = Union[str, Sequence[str]]


@dataclass
class ParamOptions:
    """
    Options for `getparams`.

    - `userlocations`: extra csv paths, or a mapping `{name: values}` with
      direct input (1-D values give single params, 2-D values pair params).
      Read last, so they override the database.
    - `ignore_missing_singleparams`: single params allowed to have missing values.
    - `ignore_headers`: columns that are never read as parameters.
    - `asymmetricparams`: pair/assoc params that are not symmetrised.
    - `selected`: when given, only these parameters (and `n_<site>` counts)
      are read.
    """

    userlocations: Union[Sequence[str], Mapping[str, Any]] = ()
    verbose: bool = False
    ignore_missing_singleparams: List[str] = field(default_factory=list)
    ignore_headers: List[str] = field(
        default_factory=lambda: ["cas", "dipprnumber", "inchikey", "smiles"]
    )
    asymmetricparams: List[str] = field(default_factory=list)
    species_columnreference: str = "species"
    site_columnreference: str = "site"
    normalisespecies: bool = True
    return_sites: bool = False
    selected: Optional[Sequence[str]] = None


@dataclass
class AssocOptions:
    "Options for the association solver of models with sites."

    rtol: float = 1e-12
    atol: float = 1e-12
    max_iters: int = 1000
    combining: str = "nocombining"


def normalisestring(name: str, normalise: bool = True) -> str:
    "Lowercase, without whitespace, `-` and `_`."
    if not normalise:
        return name
    return re.sub(r"[\s\-_]", "", name.lower())


def read_csv(path: str) -> pl.DataFrame:
    "Reads a parameter table, `#` starts a comment line."
    return pl.read_csv(path, comment_prefix="#", infer_schema_length=None)


def getpaths(locations: Locations, database_dir: str = DATABASE_DIR) -> List[str]:
    """
    Resolves locations to csv files.

    Relative locations are looked up first as given, then in `database_dir`.
    Directories expand to the csv files they contain.
    """
    if isinstance(locations, str):
        locations = [locations]
    paths = []
    for location in locations:
        candidates = [location]
        if not osp.isabs(location):
            candidates.append(osp.join(database_dir, location))
        for candidate in candidates:
            if osp.isdir(candidate):
                paths.extend(sorted(glob.glob(osp.join(candidate, "*.csv"))))
                break
            if osp.isfile(candidate):
                paths.append(candidate)
                break
        else:
            raise FileNotFoundError(f"Parameter location not found: {location}")
    return paths


def _table_kind(columns: List[str], options: ParamOptions) -> str:
    lower = [c.lower() for c in columns]
    species = options.species_columnreference.lower()
    site = options.site_columnreference.lower()
    if species + "1" in lower and site + "1" in lower:
        return "assoc"
    if species + "1" in lower:
        return "pair"
    if species in lower and "groups" in lower:
        return "groups"
    if species in lower:
        return "single"
    raise ValueError(f"Unrecognised table layout with columns {columns}.")


class _RawParams:
    "Accumulates raw values, later tables override earlier ones."

    def __init__(self, components: List[str], options: ParamOptions):
        self.components = components
        self.options = options
        n = len(components)
        self.n = n
        self.lookup = {
            normalisestring(c, options.normalisespecies): i
            for i, c in enumerate(components)
        }
        self.found = np.zeros(n, dtype=bool)
        self.single: Dict[str, List[Any]] = {}
        self.pair: Dict[str, np.ndarray] = {}
        self.assoc: Dict[str, Dict[Tuple[int, str, int, str], Any]] = {}
        self.sources: Dict[str, List[str]] = {}
        self.sourcecsvs: Dict[str, List[str]] = {}

    def index(self, species: Any) -> Optional[int]:
        if species is None:
            return None
        return self.lookup.get(
            normalisestring(str(species), self.options.normalisespecies)
        )

    def _track(self, name: str, path: str, source: Optional[str]):
        csvs = self.sourcecsvs.setdefault(name, [])
        if path not in csvs:
            csvs.append(path)
        if source:
            sources = self.sources.setdefault(name, [])
            if source not in sources:
                sources.append(source)

    def _paramcolumns(self, columns: List[str], reserved: List[str]) -> List[str]:
        ignored = [h.lower() for h in self.options.ignore_headers]
        return [
            c
            for c in columns
            if c.lower() not in reserved
            and c.lower() not in ignored
            and self.wanted(c)
        ]

    def wanted(self, name: str) -> bool:
        selected = self.options.selected
        return selected is None or name in selected or name.startswith("n_")

    def read_single(self, df: pl.DataFrame, path: str):
        species_col = _column(df, self.options.species_columnreference)
        names = self._paramcolumns(
            df.columns, [self.options.species_columnreference.lower(), "source"]
        )
        source_col = _column(df, "source", required=False)
        for row in df.iter_rows(named=True):
            i = self.index(row[species_col])
            if i is None:
                continue
            self.found[i] = True
            source = row[source_col] if source_col else None
            for name in names:
                value = row[name]
                if value is None:
                    continue
                self.single.setdefault(name, [None] * self.n)[i] = value
                self._track(name, path, source)

    def read_pair(self, df: pl.DataFrame, path: str):
        ref = self.options.species_columnreference
        col1, col2 = _column(df, ref + "1"), _column(df, ref + "2")
        names = self._paramcolumns(
            df.columns, [ref.lower() + "1", ref.lower() + "2", "source"]
        )
        source_col = _column(df, "source", required=False)
        for row in df.iter_rows(named=True):
            i, j = self.index(row[col1]), self.index(row[col2])
            if i is None or j is None:
                continue
            self.found[[i, j]] = True
            source = row[source_col] if source_col else None
            for name in names:
                value = row[name]
                if value is None:
                    continue
                mat = self.pair.setdefault(name, np.full((self.n, self.n), None, object))
                mat[i, j] = value
                if name not in self.options.asymmetricparams:
                    mat[j, i] = value
                self._track(name, path, source)

    def read_assoc(self, df: pl.DataFrame, path: str):
        ref = self.options.species_columnreference
        site = self.options.site_columnreference
        cols = [_column(df, c) for c in (ref + "1", site + "1", ref + "2", site + "2")]
        names = self._paramcolumns(
            df.columns, [c.lower() for c in cols] + ["source"]
        )
        source_col = _column(df, "source", required=False)
        for row in df.iter_rows(named=True):
            i, j = self.index(row[cols[0]]), self.index(row[cols[2]])
            if i is None or j is None:
                continue
            site_a, site_b = str(row[cols[1]]), str(row[cols[3]])
            source = row[source_col] if source_col else None
            for name in names:
                value = row[name]
                if value is None:
                    continue
                entries = self.assoc.setdefault(name, {})
                entries[(i, site_a, j, site_b)] = value
                if name not in self.options.asymmetricparams:
                    entries[(j, site_b, i, site_a)] = value
                self._track(name, path, source)

    def read_input(self, userlocations: Mapping[str, Any]):
        for name, values in userlocations.items():
            if not self.wanted(name):
                continue
            self.found[:] = True
            values = np.asarray(values, dtype=object)
            if values.ndim == 1:
                if len(values) != self.n:
                    raise ValueError(
                        f"{name}: got {len(values)} values for {self.n} components."
                    )
                self.single[name] = list(values)
            elif values.ndim == 2:
                if values.shape != (self.n, self.n):
                    raise ValueError(
                        f"{name}: expected a {self.n}x{self.n} matrix, got {values.shape}."
                    )
                self.pair[name] = values.copy()
            else:
                raise ValueError(f"{name}: user input must be a vector or a matrix.")
            self._track(name, "user input", None)


def _column(df: pl.DataFrame, name: str, required: bool = True) -> Optional[str]:
    for col in df.columns:
        if col.lower() == name.lower():
            return col
    if required:
        raise ValueError(f"Column {name} not found in table with columns {df.columns}.")
    return None


def _sitecounts(params: Dict[str, Any]) -> Dict[str, SingleParam]:
    return {
        name[2:]: param
        for name, param in params.items()
        if name.startswith("n_") and isinstance(param, SingleParam)
    }


def getparams(
    components: Union[str, Sequence[str]],
    locations: Locations = (),
    options: Optional[ParamOptions] = None,
    **kwargs,
):
    """
    Reads the parameters of `components` from csv tables.

    Args:
        components: Component names.
        locations: csv files or directories, relative to the bundled database
          or absolute.
        options: `ParamOptions`, keyword arguments override its fields.

    Returns:
        Dict of name to `SingleParam`, `PairParam` or `AssocParam`, plus a
        `SiteParam` when `options.return_sites` is set.

    Example:
        >>> params = getparams(["water", "methane"], ["properties/critical.csv"])
        >>> params["Tc"].values
        array([647.13 , 190.564])
    """
    if isinstance(components, str):
        components = [components]
    components = list(components)
    options = replace(options or ParamOptions(), **kwargs)

    raw = _RawParams(components, options)
    userlocations = options.userlocations
    paths = getpaths(locations) if locations else []
    if userlocations and not isinstance(userlocations, Mapping):
        paths += getpaths(userlocations)

    for path in paths:
        df = read_csv(path)
        kind = _table_kind(df.columns, options)
        if options.verbose:
            logging.info(f"Reading {kind} parameters from {path}")
        if kind == "single":
            raw.read_single(df, path)
        elif kind == "pair":
            raw.read_pair(df, path)
        elif kind == "assoc":
            raw.read_assoc(df, path)

    if isinstance(userlocations, Mapping) and userlocations:
        if options.verbose:
            logging.info(f"Using user input for {list(userlocations)}")
        raw.read_input(userlocations)

    if not raw.found.all():
        unknown = [c for c, f in zip(components, raw.found) if not f]
        raise ValueError(f"Components not found in any parameter table: {unknown}")

    params: Dict[str, Any] = {}
    for name, mat in raw.pair.items():
        if name in raw.single:
            for i, value in enumerate(raw.single[name]):
                if mat[i, i] is None:
                    mat[i, i] = value
        params[name] = PairParam.from_values(
            name,
            components,
            mat,
            raw.sourcecsvs.get(name, []),
            raw.sources.get(name, []),
        )

    for name, values in raw.single.items():
        if name in raw.pair:
            continue
        param = SingleParam.from_values(
            name,
            components,
            values,
            raw.sourcecsvs.get(name, []),
            raw.sources.get(name, []),
        )
        is_sitecount = name.startswith("n_")
        if (
            param.ismissingvalues.any()
            and not is_sitecount
            and name not in options.ignore_missing_singleparams
        ):
            missing = [c for c, m in zip(components, param.ismissingvalues) if m]
            raise ValueError(f"Missing values of single parameter {name} for {missing}")
        params[name] = param

    sites = SiteParam.from_site_counts(components, _sitecounts(params))
    allcomponentsites = [list(s) for s in sites.sites]
    for entries in raw.assoc.values():
        for i, site_a, j, site_b in entries:
            for k, site in ((i, site_a), (j, site_b)):
                if site not in allcomponentsites[k]:
                    allcomponentsites[k].append(site)

    for name, entries in raw.assoc.items():
        param = AssocParam.empty(
            name,
            components,
            allcomponentsites,
            raw.sourcecsvs.get(name, []),
            raw.sources.get(name, []),
        )
        for (i, site_a, j, site_b), value in entries.items():
            a = allcomponentsites[i].index(site_a)
            b = allcomponentsites[j].index(site_b)
            param.values[i][j][a, b] = value
            param.ismissingvalues[i][j][a, b] = False
        params[name] = param

    if options.verbose:
        logging.info(f"Built parameters {sorted(params)} for {components}")

    if options.return_sites:
        return params, sites
    return params


def parse_groups(groups: str) -> List[Tuple[str, int]]:
    "Parses `'CH3:2;CH2:1'` into `[('CH3', 2), ('CH2', 1)]`."
    out = []
    for item in groups.split(";"):
        item = item.strip()
        if not item:
            continue
        label, _, count = item.rpartition(":")
        if not label:
            raise ValueError(f"Invalid group entry {item!r}, expected 'group:count'.")
        out.append((label.strip(), int(count)))
    return out


def getgroups(
    components: Sequence[Any],
    locations: Locations = (),
    options: Optional[ParamOptions] = None,
    **kwargs,
) -> GroupParam:
    """
    Builds a `GroupParam` for `components`.

    Each component is either a name, looked up in group tables
    (`species, groups`), or a `(name, {group: n})` tuple given directly.
    """
    options = replace(options or ParamOptions(), **kwargs)
    lookup: Dict[str, Tuple[List[Tuple[str, int]], str]] = {}
    paths = getpaths(locations) if locations else []
    if options.userlocations and not isinstance(options.userlocations, Mapping):
        paths += getpaths(options.userlocations)
    for path in paths:
        df = read_csv(path)
        if _table_kind(df.columns, options) != "groups":
            continue
        if options.verbose:
            logging.info(f"Reading groups from {path}")
        species_col = _column(df, options.species_columnreference)
        groups_col = _column(df, "groups")
        for row in df.iter_rows(named=True):
            key = normalisestring(str(row[species_col]), options.normalisespecies)
            lookup[key] = (parse_groups(str(row[groups_col])), path)

    input_, sourcecsvs = [], []
    for component in components:
        if isinstance(component, str):
            key = normalisestring(component, options.normalisespecies)
            if key not in lookup:
                raise ValueError(f"Groups of {component} not found in {paths}")
            groups, path = lookup[key]
            if path not in sourcecsvs:
                sourcecsvs.append(path)
            input_.append((component, groups))
        else:
            name, groups = component
            if isinstance(groups, Mapping):
                groups = list(groups.items())
            input_.append((name, [(g, int(n)) for g, n in groups]))
    return GroupParam.from_input(input_, sourcecsvs)
