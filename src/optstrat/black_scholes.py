# black_scholes.py
# Closed-form European pricing, Greeks, and Newton-Raphson implied vol.

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from scipy.stats import norm

from .core import CALL, PUT, DAYS_PER_YEAR, Greeks, _require_finite
from .errors import InvalidInputError

__all__ = [
    "norm_cdf",
    "norm_pdf",
    "d1_d2",
    "price",
    "greeks",
    "implied_vol",
    "ImpliedVolResult",
]

logger = logging.getLogger(__name__)

# Abramowitz & Stegun 7.1.26, |error| < 1.5e-7
_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429
_P = 0.3275911

GREEKS_DECIMALS = 4

IV_INITIAL_GUESS = 0.20
IV_TOLERANCE = 1e-4
IV_MAX_ITER = 100
IV_FLOOR = 0.01


# ---------------------------------------------------------------------------
# Normal distribution
# ---------------------------------------------------------------------------
def norm_cdf(x):
    """Standard normal CDF via the Abramowitz-Stegun rational approximation.

    Accepts scalars or arrays. Odd symmetry is exact, so
    ``norm_cdf(x) + norm_cdf(-x) == 1`` up to rounding.
    """
    x = np.asarray(x, dtype=float)
    sign = np.where(x < 0, -1.0, 1.0)
    z = np.abs(x) / math.sqrt(2.0)
    t = 1.0 / (1.0 + _P * z)
    poly = ((((_A5 * t + _A4) * t + _A3) * t + _A2) * t + _A1) * t
    y = 1.0 - poly * np.exp(-z * z)
    out = 0.5 * (1.0 + sign * y)
    return float(out) if out.ndim == 0 else out


def norm_pdf(x):
    """Standard normal density."""
    out = norm.pdf(x)
    return float(out) if np.ndim(out) == 0 else out


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------
def _check_kind(kind: str) -> None:
    if kind not in (CALL, PUT):
        raise InvalidInputError(f"kind must be 'call' or 'put', got {kind!r}")


def _check_inputs(S: float, K: float, T: float, r: float, sigma: float) -> None:
    for name, v in (("S", S), ("K", K), ("T", T), ("r", r), ("sigma", sigma)):
        _require_finite(name, v)
    if S <= 0:
        raise InvalidInputError(f"S must be positive, got {S}")
    if K <= 0:
        raise InvalidInputError(f"K must be positive, got {K}")
    if T < 0:
        raise InvalidInputError(f"T must be non-negative, got {T}")
    if sigma <= 0:
        raise InvalidInputError(f"sigma must be positive, got {sigma}")


def d1_d2(S: float, K: float, T: float, r: float, sigma: float) -> tuple[float, float]:
    if T <= 0:
        raise InvalidInputError("d1/d2 are undefined at expiration (T must be positive)")
    _check_inputs(S, K, T, r, sigma)
    return _d1_d2(S, K, T, r, sigma)


def _d1_d2(S, K, T, r, sigma):
    srt = sigma * math.sqrt(T)
    d1 = (math.log(S / K) + (r + 0.5 * sigma * sigma) * T) / srt
    return d1, d1 - srt


def _intrinsic(S: float, K: float, kind: str) -> float:
    return max(S - K, 0.0) if kind == CALL else max(K - S, 0.0)


# ---------------------------------------------------------------------------
# Price and Greeks
# ---------------------------------------------------------------------------
def price(S: float, K: float, T: float, r: float, sigma: float, kind: str = CALL) -> float:
    """Black-Scholes-Merton price; intrinsic value once ``T == 0``."""
    _check_kind(kind)
    _check_inputs(S, K, T, r, sigma)
    if T == 0:
        return _intrinsic(S, K, kind)

    d1, d2 = _d1_d2(S, K, T, r, sigma)
    disc_r = math.exp(-r * T)
    if kind == CALL:
        return S * norm_cdf(d1) - K * disc_r * norm_cdf(d2)
    return K * disc_r * norm_cdf(-d2) - S * norm_cdf(-d1)


def _raw_greeks(S, K, T, r, sigma, kind) -> Greeks:
    d1, d2 = _d1_d2(S, K, T, r, sigma)
    sqrt_T = math.sqrt(T)
    n_d1 = norm_pdf(d1)
    disc_r = math.exp(-r * T)

    # Common
    gamma = n_d1 / (S * sigma * sqrt_T)
    vega = S * n_d1 * sqrt_T / 100.0

    if kind == CALL:
        delta = norm_cdf(d1)
        carry = norm_cdf(d2)
        rho = K * T * disc_r * norm_cdf(d2) / 100.0
    else:
        delta = norm_cdf(d1) - 1.0
        carry = norm_cdf(-d2)
        rho = -K * T * disc_r * norm_cdf(-d2) / 100.0

    theta = (-S * n_d1 * sigma / (2.0 * sqrt_T) - r * K * disc_r * carry) / DAYS_PER_YEAR
    return Greeks(delta=delta, gamma=gamma, theta=theta, vega=vega, rho=rho)


def greeks(S: float, K: float, T: float, r: float, sigma: float, kind: str = CALL) -> Greeks:
    """Greeks rounded to 4 decimals.

    Vega and rho are per 1 percentage point, theta is per calendar day.
    All five are zero once ``T == 0``.
    """
    _check_kind(kind)
    _check_inputs(S, K, T, r, sigma)
    if T == 0:
        return Greeks.zero()
    return _raw_greeks(S, K, T, r, sigma, kind).rounded(GREEKS_DECIMALS)


# ---------------------------------------------------------------------------
# Implied volatility (Newton-Raphson on vega)
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ImpliedVolResult:
    """Best volatility estimate and whether the tolerance was met."""
    volatility: float
    converged: bool
    iterations: int


def implied_vol(
    market_price: float,
    S: float,
    K: float,
    T: float,
    r: float,
    kind: str = CALL,
    *,
    initial: float = IV_INITIAL_GUESS,
    tol: float = IV_TOLERANCE,
    maxiter: int = IV_MAX_ITER,
) -> ImpliedVolResult:
    """Recover sigma from an observed price.

    The update uses the unscaled vega ``dPrice/dSigma``; the per-point
    vega reported by :func:`greeks` is 100 times smaller. Sigma is reset
    to the floor whenever a step would make it non-positive, and the
    returned estimate is never below the floor. A root below the floor is
    reported as not converged unless the floored price still meets ``tol``.
    """
    _check_kind(kind)
    _require_finite("market_price", market_price)
    if market_price < 0:
        raise InvalidInputError(f"market_price must be non-negative, got {market_price}")
    _check_inputs(S, K, T, r, initial)

    sigma = initial
    converged = False
    iterations = 0
    for iterations in range(1, maxiter + 1):
        px = price(S, K, T, r, sigma, kind)
        if T == 0:
            vega = 0.0
        else:
            # per-point vega back to dPrice/dSigma
            vega = _raw_greeks(S, K, T, r, sigma, kind).vega * 100.0

        if abs(px - market_price) < tol:
            converged = True
            break
        if vega < 1e-12:
            break

        step = (px - market_price) / vega
        if not math.isfinite(sigma - step):
            break
        sigma = sigma - step
        if sigma <= 0:
            sigma = IV_FLOOR

    estimate = max(sigma, IV_FLOOR)
    if converged and estimate != sigma:
        # root lies below the floor; the floored estimate must meet tol on its own
        converged = abs(price(S, K, T, r, estimate, kind) - market_price) < tol
    if not converged:
        logger.warning(
            "implied vol did not converge after %d iterations "
            "(target=%.6f, estimate=%.6f)", iterations, market_price, estimate,
        )
    else:
        logger.debug("implied vol %.6f found in %d iterations", estimate, iterations)
    return ImpliedVolResult(volatility=estimate, converged=converged, iterations=iterations)
