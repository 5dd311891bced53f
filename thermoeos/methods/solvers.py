"""Module with scipy solvers driven by jax derivatives."""

from typing import Callable, NamedTuple, Optional, Sequence, Tuple

import jax
import jax.numpy as jnp
import numpy as np
from absl import logging
from scipy.optimize import brentq, newton, root

from ..configs.default import get_config


class SolverResult(NamedTuple):
    "Solution of `nlsolve`."

    x: np.ndarray
    converged: bool
    residual: np.ndarray
    nfev: int


def f_df(f: Callable, x):
    "Value and first derivative of the scalar function `f` at `x`."
    return jax.value_and_grad(f)(jnp.asarray(x, dtype=jnp.float64))


def f_df_d2f(f: Callable, x):
    "Value, first and second derivatives of the scalar function `f` at `x`."
    x = jnp.asarray(x, dtype=jnp.float64)
    df = jax.grad(f)
    return f(x), df(x), jax.grad(df)(x)


def nlsolve(
    f: Callable,
    x0: Sequence[float],
    method: Optional[str] = None,
    atol: Optional[float] = None,
    rtol: Optional[float] = None,
    max_iters: Optional[int] = None,
    f_limit: float = 0.0,
) -> SolverResult:
    """
    Solves `f(x) = 0` with `scipy.optimize.root`, the Jacobian is given by
    `jax.jacfwd(f)`.

    Args:
        f: Vector function written with `jax.numpy`.
        x0: Initial point.
        method: `scipy.optimize.root` method, `hybr` by default.
        atol: Residual tolerance accepted when scipy reports a failure.
        rtol: Relative step tolerance passed to scipy.
        max_iters: Iteration budget.
        f_limit: When positive, a residual below it is also accepted.

    Returns:
        `SolverResult`.
    """
    config = get_config().solver
    method = config.method if method is None else method
    atol = config.atol if atol is None else atol
    rtol = config.rtol if rtol is None else rtol
    max_iters = config.max_iters if max_iters is None else max_iters
    x0 = np.asarray(x0, dtype=np.float64)

    jac = jax.jacfwd(f)

    def fun(x):
        return np.asarray(f(jnp.asarray(x)), dtype=np.float64)

    def dfun(x):
        return np.asarray(jac(jnp.asarray(x)), dtype=np.float64)

    options = {"maxfev": max_iters * (len(x0) + 1)} if method == "hybr" else {}
    sol = root(fun, x0, jac=dfun, method=method, tol=rtol, options=options)
    residual = np.asarray(sol.fun, dtype=np.float64)
    finite = bool(np.all(np.isfinite(sol.x)) and np.all(np.isfinite(residual)))
    small = finite and float(np.max(np.abs(residual))) <= max(atol, f_limit)
    converged = finite and (bool(sol.success) or small)
    logging.debug(f"nlsolve {method}: {sol.message} (converged={converged})")
    return SolverResult(sol.x, converged, residual, int(getattr(sol, "nfev", 0)))


def find_zero(
    f: Callable,
    x0: Optional[float] = None,
    bracket: Optional[Tuple[float, float]] = None,
    use_derivative: bool = False,
    rtol: Optional[float] = None,
    max_iters: Optional[int] = None,
) -> float:
    """
    Root of the scalar function `f`.

    With a `bracket` it uses `brentq`, otherwise `newton` from `x0` (secant
    steps, or Newton steps with the jax derivative if `use_derivative`).
    Returns `nan` and logs a warning when no root is found.
    """
    config = get_config().solver
    rtol = config.rtol if rtol is None else rtol
    max_iters = config.max_iters if max_iters is None else max_iters

    def fun(x):
        return float(f(x))

    try:
        if bracket is not None:
            return float(
                brentq(fun, bracket[0], bracket[1], rtol=max(rtol, 4e-16), maxiter=max_iters)
            )
        if x0 is None:
            raise ValueError("find_zero needs either x0 or a bracket.")
        fprime = None
        if use_derivative:
            df = jax.grad(f)

            def fprime(x):
                return float(df(jnp.asarray(x, dtype=jnp.float64)))

        return float(newton(fun, x0, fprime=fprime, rtol=rtol, maxiter=max_iters))
    except (RuntimeError, ValueError) as err:
        if bracket is None and x0 is None:
            raise
        logging.warning(f"find_zero did not converge: {err}")
        return float("nan")
