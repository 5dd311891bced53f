"""Coefficient structures of multiparameter Helmholtz energy fluids."""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from ...constants import R_GAS
from ..base import EoSParam


def _check_lengths(owner: str, **arrays):
    lengths = {name: len(values) for name, values in arrays.items()}
    if len(set(lengths.values())) > 1:
        raise ValueError(f"{owner}: coefficient lengths differ {lengths}")


def _floats(values: Optional[Sequence[float]]) -> np.ndarray:
    return np.asarray([] if values is None else values, dtype=np.float64)


@dataclass
class EmpiricSingleFluidIdealParam(EoSParam):
    """
    Ideal part, `α⁰ = ln δ + a1 + a2 τ + c0 ln τ
    + Σ n_gpe ln(c_gpe + d_gpe exp(-t_gpe τ)) + Σ n_p τ^t_p`.

    Generalised Planck-Einstein terms default to `c = 1`, `d = -1`.
    """

    a1: float
    a2: float
    c0: float
    n_gpe: Sequence[float] = ()
    t_gpe: Sequence[float] = ()
    c_gpe: Optional[Sequence[float]] = None
    d_gpe: Optional[Sequence[float]] = None
    n_p: Sequence[float] = ()
    t_p: Sequence[float] = ()

    def __post_init__(self):
        self.n_gpe = _floats(self.n_gpe)
        self.t_gpe = _floats(self.t_gpe)
        n = len(self.n_gpe)
        self.c_gpe = np.ones(n) if self.c_gpe is None else _floats(self.c_gpe)
        self.d_gpe = -np.ones(n) if self.d_gpe is None else _floats(self.d_gpe)
        self.n_p = _floats(self.n_p)
        self.t_p = _floats(self.t_p)
        _check_lengths(
            "EmpiricSingleFluidIdealParam",
            n_gpe=self.n_gpe,
            t_gpe=self.t_gpe,
            c_gpe=self.c_gpe,
            d_gpe=self.d_gpe,
        )
        _check_lengths("EmpiricSingleFluidIdealParam", n_p=self.n_p, t_p=self.t_p)


@dataclass
class GaoBTerm:
    "`n δ^d τ^t exp(η(δ - ε)² + 1/(β(τ - γ)² + b))`"

    n: Sequence[float] = ()
    t: Sequence[float] = ()
    d: Sequence[float] = ()
    eta: Sequence[float] = ()
    beta: Sequence[float] = ()
    gamma: Sequence[float] = ()
    epsilon: Sequence[float] = ()
    b: Sequence[float] = ()

    def __post_init__(self):
        for name in ("n", "t", "d", "eta", "beta", "gamma", "epsilon", "b"):
            setattr(self, name, _floats(getattr(self, name)))
        _check_lengths("GaoBTerm", **vars(self))

    @property
    def active(self) -> bool:
        return len(self.n) != 0


@dataclass
class NonAnalyticTerm:
    """
    IAPWS-95 non-analytic terms, `n Δ^b δ ψ` with
    `θ = (1 - τ) + A ((δ - 1)²)^(1/(2β))`, `Δ = θ² + B ((δ - 1)²)^a`,
    `ψ = exp(-C (δ - 1)² - D (τ - 1)²)`.
    """

    A: Sequence[float] = ()  # pylint: disable=invalid-name
    B: Sequence[float] = ()  # pylint: disable=invalid-name
    C: Sequence[float] = ()  # pylint: disable=invalid-name
    D: Sequence[float] = ()  # pylint: disable=invalid-name
    a: Sequence[float] = ()
    b: Sequence[float] = ()
    beta: Sequence[float] = ()
    n: Sequence[float] = ()

    def __post_init__(self):
        for name in ("A", "B", "C", "D", "a", "b", "beta", "n"):
            setattr(self, name, _floats(getattr(self, name)))
        _check_lengths("NonAnalyticTerm", **vars(self))

    @property
    def active(self) -> bool:
        return len(self.n) != 0


@dataclass
class Associating2BTerm:
    """
    Two-site association term of the EOS-CG mixture model,
    `m a (ln X - X/2 + 1/2)`.
    """

    epsilonbar: float = 0.0
    kappabar: float = 0.0
    a: float = 0.0
    m: float = 0.0
    vbarn: float = 0.0

    @property
    def active(self) -> bool:
        return self.kappabar != 0.0


@dataclass
class ExponentialTerm:
    "`n δ^d τ^t exp(-γ δ^l)`"

    n: Sequence[float] = ()
    t: Sequence[float] = ()
    d: Sequence[float] = ()
    l: Sequence[float] = ()
    gamma: Sequence[float] = ()

    def __post_init__(self):
        for name in ("n", "t", "d", "l", "gamma"):
            setattr(self, name, _floats(getattr(self, name)))
        _check_lengths("ExponentialTerm", **vars(self))

    @property
    def active(self) -> bool:
        return len(self.n) != 0


@dataclass
class EmpiricSingleFluidResidualParam(EoSParam):
    """
    Residual part. The first terms are polynomial (`n δ^d τ^t`), the next
    `len(l)` exponential (`n δ^d τ^t exp(-δ^l)`) and the last `len(beta)`
    gaussian bell shaped (`n δ^d τ^t exp(-η(δ - ε)² - β(τ - γ)²)`).
    """

    n: Sequence[float]
    t: Sequence[float]
    d: Sequence[float]
    l: Sequence[float] = ()
    eta: Sequence[float] = ()
    beta: Sequence[float] = ()
    gamma: Sequence[float] = ()
    epsilon: Sequence[float] = ()
    gao_b: GaoBTerm = field(default_factory=GaoBTerm)
    na: NonAnalyticTerm = field(default_factory=NonAnalyticTerm)
    assoc: Associating2BTerm = field(default_factory=Associating2BTerm)
    exp: ExponentialTerm = field(default_factory=ExponentialTerm)

    def __post_init__(self):
        for name in ("n", "t", "d", "l", "eta", "beta", "gamma", "epsilon"):
            setattr(self, name, _floats(getattr(self, name)))
        _check_lengths("EmpiricSingleFluidResidualParam", n=self.n, t=self.t, d=self.d)
        _check_lengths(
            "EmpiricSingleFluidResidualParam",
            eta=self.eta,
            beta=self.beta,
            gamma=self.gamma,
            epsilon=self.epsilon,
        )
        if len(self.l) + len(self.beta) > len(self.n):
            raise ValueError(
                "EmpiricSingleFluidResidualParam: more exponential and gaussian "
                f"terms ({len(self.l)} + {len(self.beta)}) than coefficients ({len(self.n)})"
            )

    @property
    def iterators(self) -> List[slice]:
        "Slices of the polynomial, exponential and gaussian terms."
        length_pol = len(self.n) - len(self.beta) - len(self.l)
        length_exp = len(self.n) - len(self.beta)
        return [
            slice(0, length_pol),
            slice(length_pol, length_exp),
            slice(length_exp, len(self.n)),
        ]


@dataclass
class EmpiricSingleFluidProperties(EoSParam):
    """
    Fixed properties of the fluid.

    Mw in g/mol, Tc in K, Pc in Pa, rhoc in mol/m^3, lb_volume in m^3/mol,
    triple point temperature Ttp, pressure ptp and densities rhov_tp, rhol_tp.
    """

    Mw: float  # pylint: disable=invalid-name
    Tc: float  # pylint: disable=invalid-name
    Pc: float  # pylint: disable=invalid-name
    rhoc: float
    lb_volume: float
    Ttp: float = math.nan  # pylint: disable=invalid-name
    ptp: float = math.nan
    rhov_tp: float = math.nan
    rhol_tp: float = math.nan
    acentricfactor: float = math.nan
    Rgas: float = R_GAS  # pylint: disable=invalid-name
