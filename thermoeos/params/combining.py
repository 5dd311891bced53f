"""Combining rules for pair parameters."""

from typing import Optional

import numpy as np

from .containers import PairParam, SingleParam


def _mixed(name, components, pair, ismissing, template) -> PairParam:
    return PairParam(
        name,
        list(components),
        pair,
        ismissing,
        list(template.sourcecsvs),
        list(template.sources),
    )


def _diag(x) -> np.ndarray:
    if isinstance(x, PairParam):
        return np.asarray(x.diagvalues, dtype=np.float64)
    return np.asarray(x.values, dtype=np.float64)


def _correction(k: Optional[PairParam], n: int) -> np.ndarray:
    if k is None:
        return np.zeros((n, n))
    return np.asarray(k.values, dtype=np.float64)


def pair_mix(x, k: Optional[PairParam] = None, name: Optional[str] = None) -> PairParam:
    """
    Geometric mean pair parameter, `x_ij = sqrt(x_i x_j) (1 - k_ij)`.

    Explicit off-diagonal values of a `PairParam` input are kept.
    """
    diag = _diag(x)
    pair = np.sqrt(np.outer(diag, diag)) * (1 - _correction(k, len(diag)))
    return _keep_explicit(x, pair, name)


def arith_mix(x, l: Optional[PairParam] = None, name: Optional[str] = None) -> PairParam:
    """
    Arithmetic mean pair parameter, `x_ij = (x_i + x_j)/2 (1 - l_ij)`.

    Explicit off-diagonal values of a `PairParam` input are kept.
    """
    diag = _diag(x)
    pair = 0.5 * (diag[:, None] + diag[None, :]) * (1 - _correction(l, len(diag)))
    return _keep_explicit(x, pair, name)


def kij_mix(a, k: Optional[PairParam] = None, name: Optional[str] = None) -> PairParam:
    "Energy-like parameter mixing, the same geometric rule as `pair_mix`."
    return pair_mix(a, k, name)


def _keep_explicit(x, pair: np.ndarray, name: Optional[str]) -> PairParam:
    n = len(pair)
    if isinstance(x, PairParam):
        explicit = ~x.ismissingvalues & ~np.eye(n, dtype=bool)
        pair = np.where(explicit, np.asarray(x.values, dtype=np.float64), pair)
        ismissing = np.zeros((n, n), dtype=bool)
    elif isinstance(x, SingleParam):
        ismissing = np.zeros((n, n), dtype=bool)
    else:
        raise ValueError(f"Cannot mix object of type {type(x).__name__}.")
    return _mixed(x.name if name is None else name, x.components, pair, ismissing, x)
