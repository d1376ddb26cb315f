"""Build the terms A, B, c, d of the inhomogeneous eigenvalue problem.

The problem, of size MN x MN for M coefficients in each of N layers, is

    [A - sum_n K^m[n] B[n]] a = c0 + sum_n K^m[n] c[n],   d[n]^T a = 0,

with m = 2 for layered QG and m = 1 for SQG.  Coefficients are ordered
grid-major with the layer index fastest, so entry (j, n) of the
coefficient array lives at row j*N + n.
"""

import logging
import typing

import numpy as np
import numpy.typing

import qg_modon.quadrature


_LOG = logging.getLogger(__name__)

LayerParam = typing.Union[float, typing.Sequence[float], numpy.typing.NDArray[np.floating[typing.Any]]]


def sqg_exact_b(*, M: int) -> numpy.typing.NDArray[np.floating[typing.Any]]:
    """Closed-form SQG B for lam = [0, 0] and mu = 0."""
    j = np.arange(M)[:, np.newaxis]
    k = np.arange(M)[np.newaxis, :]
    sign = np.where((j - k) % 2 == 0, -1.0, 1.0)
    denominator = (2 * j - 2 * k - 1) * (2 * j - 2 * k + 1) * (2 * j + 2 * k + 3) * (2 * j + 2 * k + 5)
    return 4.0 * sign / denominator / np.pi


def _build_sqg(
    *,
    M: int,
    lam: LayerParam,
    mu: float,
    tol: float,
    cutoff: float,
) -> tuple[
    numpy.typing.NDArray[np.floating[typing.Any]],
    numpy.typing.NDArray[np.floating[typing.Any]],
    numpy.typing.NDArray[np.floating[typing.Any]],
    numpy.typing.NDArray[np.floating[typing.Any]],
]:
    lam_vec = np.asarray(lam, dtype=float).reshape(-1)
    if lam_vec.size != 2:
        raise ValueError('SQG lam must have length 2, got %d' % lam_vec.size)

    A: numpy.typing.NDArray[np.floating[typing.Any]] = np.diag(1.0 / np.arange(1, M + 1) / 4.0)
    c: numpy.typing.NDArray[np.floating[typing.Any]] = np.zeros((M, 2))
    c[0, 1] = 0.25
    d: numpy.typing.NDArray[np.floating[typing.Any]] = ((-1.0) ** np.arange(M)).reshape(M, 1)

    if mu == 0 and np.all(lam_vec == 0):
        B = sqg_exact_b(M=M)
    else:
        kernel = qg_modon.quadrature.sqg_kernel(lam=lam_vec, mu=mu)
        B = np.zeros((M, M))
        for j in range(M):
            for k in range(M):
                B[j, k] = float(qg_modon.quadrature.jj_int(kernel=kernel, j=j, k=k, tol=tol, cutoff=cutoff)[0])

    return A, B, c, d


def _build_layered(
    *,
    M: int,
    lam: LayerParam,
    mu: LayerParam,
    tol: float,
    cutoff: float,
) -> tuple[
    numpy.typing.NDArray[np.floating[typing.Any]],
    numpy.typing.NDArray[np.floating[typing.Any]],
    numpy.typing.NDArray[np.floating[typing.Any]],
    numpy.typing.NDArray[np.floating[typing.Any]],
]:
    mu_vec = np.asarray(mu, dtype=float).reshape(-1)
    N = mu_vec.size

    def a_kernel(xi: float) -> numpy.typing.NDArray[np.floating[typing.Any]]:
        return qg_modon.quadrature.a_func(xi, lam, mu_vec)

    def b_kernel(xi: float) -> numpy.typing.NDArray[np.floating[typing.Any]]:
        return qg_modon.quadrature.b_func(xi, lam, mu_vec)

    A: numpy.typing.NDArray[np.floating[typing.Any]] = np.zeros((N * M, N * M))
    B0: numpy.typing.NDArray[np.floating[typing.Any]] = np.zeros((N * M, N * M))
    for j in range(M):
        for k in range(M):
            rows = slice(j * N, (j + 1) * N)
            cols = slice(k * N, (k + 1) * N)
            A[rows, cols] = qg_modon.quadrature.jj_int(kernel=a_kernel, j=j, k=k, tol=tol, cutoff=cutoff)[0]
            B0[rows, cols] = qg_modon.quadrature.jj_int(kernel=b_kernel, j=j, k=k, tol=tol, cutoff=cutoff)[0]
        _LOG.info('Integrated coefficient row %s of %s', j + 1, M)

    B: numpy.typing.NDArray[np.floating[typing.Any]] = np.zeros((N * M, N * M, N))
    c: numpy.typing.NDArray[np.floating[typing.Any]] = np.zeros((N * M, N + 1))
    d: numpy.typing.NDArray[np.floating[typing.Any]] = np.zeros((N * M, N))
    c0 = np.concatenate([np.ones(N), np.zeros((M - 1) * N)])
    alternating = (-1.0) ** np.arange(M)

    for n in range(N):
        unit = (np.arange(N) == n).astype(float)
        layer_select = np.kron(np.eye(M), np.diag(unit))
        B[:, :, n] = layer_select @ B0
        c[:, 0] += mu_vec[n] * (layer_select @ c0) / 4
        c[:, n + 1] = (layer_select @ c0) / 4
        d[:, n] = np.kron(alternating, unit)

    return A, B, c, d


def build_lin_sys(
    *,
    M: int,
    lam: LayerParam,
    mu: LayerParam,
    tol: float = 1e-6,
    sqg: bool = False,
    cutoff: float = 1000.0,
) -> tuple[
    numpy.typing.NDArray[np.floating[typing.Any]],
    numpy.typing.NDArray[np.floating[typing.Any]],
    numpy.typing.NDArray[np.floating[typing.Any]],
    numpy.typing.NDArray[np.floating[typing.Any]],
]:
    """Build A, B, c, d for the SQG or layered QG problem.

    Parameters
    ----------
    M : int
        Number of coefficients in each layer.
    lam : float or sequence
        Layered QG: ratio of vortex radius to Rossby radius in each layer.
        SQG: length-2 vector of depth and surface parameters.
    mu : float or sequence
        Nondimensional background vorticity gradient in each layer.
    tol : float
        Quadrature tolerance.
    sqg : bool
        Build the SQG system instead of the layered QG system.
    cutoff : float
        Split point of the Bessel-product quadrature.

    Returns
    -------
    tuple
        A (R, R), B (R, R) for SQG or (R, R, N) otherwise, c (R, N+1), d (R, N),
        where R = M for SQG and R = N*M otherwise.
    """
    if M < 1:
        raise ValueError('M must be at least 1, got %d' % M)
    _LOG.info('Building %s system with M=%d', 'SQG' if sqg else 'layered QG', M)
    if sqg:
        mu_value = float(np.asarray(mu, dtype=float).reshape(-1)[0])
        return _build_sqg(M=M, lam=lam, mu=mu_value, tol=tol, cutoff=cutoff)
    return _build_layered(M=M, lam=lam, mu=mu, tol=tol, cutoff=cutoff)
