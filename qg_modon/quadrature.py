"""Bessel-product integrals and kernels used to fill the operator matrices.

Every matrix entry has the form

    I_{j,k} = int_0^inf F(xi) J_{2j+2}(xi) J_{2k+2}(xi) dxi

where F is a scalar (SQG) or an N x N matrix (layered QG) valued kernel.
The integral is split at ``cutoff``: the finite part is integrated
adaptively and the tail uses the large-argument form of the Bessel product,

    J_{2j+2}(xi) J_{2k+2}(xi) ~ (-1)^(j+k) (1 + sin 2xi) / (pi xi),

with the oscillating term dropped (its contribution is O(cutoff^-2)).
"""

import logging
import typing
from typing import Any

import numpy as np
import numpy.typing as npt
import scipy.integrate  # type: ignore[import-untyped]
import scipy.special  # type: ignore[import-untyped]

import qg_modon.errors

NDArrayF = npt.NDArray[np.floating[Any]]
Kernel = typing.Callable[[float], typing.Any]


_LOG = logging.getLogger(__name__)


def _integrate(
    integrand: Kernel,
    *,
    lower: float,
    upper: float,
    tol: float,
    points: typing.Optional[NDArrayF] = None,
) -> tuple[typing.Any, float]:
    value, error, info = scipy.integrate.quad_vec(
        integrand,
        lower,
        upper,
        epsabs=tol,
        epsrel=tol,
        norm='max',
        points=points,
        full_output=True,
    )
    if not info.success:
        raise qg_modon.errors.QuadratureError(
            'Integral over [%s, %s] did not converge: %s' % (lower, upper, info.message),
        )
    return value, float(error)


def jj_int(
    *,
    kernel: Kernel,
    j: int,
    k: int,
    tol: float = 1e-6,
    cutoff: float = 1000.0,
) -> tuple[typing.Any, float]:
    """Integrate ``kernel(xi) * J_{2j+2}(xi) * J_{2k+2}(xi)`` over [0, inf).

    Parameters
    ----------
    kernel : callable
        Function of xi returning a scalar or an array.
    j, k : int
        Non-negative Bessel indices.
    tol : float
        Absolute and relative tolerance passed to the integrator.
    cutoff : float
        Split point between the adaptive and asymptotic parts.

    Returns
    -------
    tuple
        Integral value (same shape as the kernel output) and error estimate.
    """
    order_j = 2 * j + 2
    order_k = 2 * k + 2
    sign = (-1.0) ** (j + k)

    def body(xi: float) -> typing.Any:
        return kernel(xi) * (scipy.special.jv(order_j, xi) * scipy.special.jv(order_k, xi))

    def tail(xi: float) -> typing.Any:
        return kernel(xi) * (sign / (np.pi * xi))

    breakpoints = np.linspace(0.0, cutoff, 101)[1:-1]
    body_value, body_error = _integrate(body, lower=0.0, upper=cutoff, tol=tol, points=breakpoints)
    tail_value, tail_error = _integrate(tail, lower=cutoff, upper=np.inf, tol=tol)
    _LOG.debug('JJ integral (j=%d, k=%d): error estimate %.2e', j, k, body_error + tail_error)
    return body_value + tail_value, body_error + tail_error


def sqg_kernel(
    *,
    lam: typing.Sequence[float],
    mu: float,
) -> Kernel:
    """Return F(xi) = 1 / (D(xi) xi) for the SQG problem.

    D(xi) = sqrt(xi^2 + mu) tanh(sqrt(xi^2 + mu) / lam[0]) + lam[1] when
    lam[0] > 0, and sqrt(xi^2 + mu) + lam[1] otherwise.
    """
    if len(lam) != 2:
        raise ValueError('SQG lam must have length 2, got %d' % len(lam))
    depth, surface = float(lam[0]), float(lam[1])

    def kernel(xi: float) -> float:
        root = np.sqrt(xi**2 + mu)
        if depth > 0:
            denominator = root * np.tanh(root / depth) + surface
        else:
            denominator = root + surface
        return 1.0 / (denominator * xi)

    return kernel


def stretching_matrix(
    *,
    lam: typing.Union[float, typing.Sequence[float], NDArrayF],
    n_layers: int,
) -> NDArrayF:
    """Vortex stretching operator coupling each layer to its vertical neighbours."""
    lam2 = np.broadcast_to(np.asarray(lam, dtype=float).reshape(-1), (n_layers,)) ** 2
    L: NDArrayF = np.zeros((n_layers, n_layers))
    if n_layers == 1:
        L[0, 0] = lam2[0]
        return L
    for n in range(n_layers):
        for neighbour in (n - 1, n + 1):
            if 0 <= neighbour < n_layers:
                L[n, n] += lam2[n]
                L[n, neighbour] = -lam2[n]
    return L


def _shifted_operator(
    xi: float,
    lam: typing.Union[float, typing.Sequence[float], NDArrayF],
    mu: typing.Union[float, typing.Sequence[float], NDArrayF],
) -> tuple[NDArrayF, NDArrayF]:
    mu_vec = np.asarray(mu, dtype=float).reshape(-1)
    n_layers = mu_vec.size
    K = xi**2 * np.eye(n_layers) + stretching_matrix(lam=lam, n_layers=n_layers)
    return K, np.linalg.inv(K + np.diag(mu_vec))


def a_func(
    xi: float,
    lam: typing.Union[float, typing.Sequence[float], NDArrayF],
    mu: typing.Union[float, typing.Sequence[float], NDArrayF],
) -> NDArrayF:
    """Layered QG kernel for A: K(xi) [K(xi) + diag(mu)]^-1 / xi."""
    K, shifted_inv = _shifted_operator(xi, lam, mu)
    return K @ shifted_inv / xi


def b_func(
    xi: float,
    lam: typing.Union[float, typing.Sequence[float], NDArrayF],
    mu: typing.Union[float, typing.Sequence[float], NDArrayF],
) -> NDArrayF:
    """Layered QG kernel for B: [K(xi) + diag(mu)]^-1 / xi."""
    _, shifted_inv = _shifted_operator(xi, lam, mu)
    return shifted_inv / xi
