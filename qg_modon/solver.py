"""Solve the inhomogeneous eigenvalue problem built by ``build_lin_sys``.

For a single layer the problem is rewritten as a 2M x 2M generalized
eigenvalue problem and solved directly.  For N > 1 layers the coefficient
vector is projected onto the space perpendicular to the constraint vectors
and the resulting square nonlinear system is solved by root finding with an
analytic Jacobian.
"""

import logging
import typing
from typing import Any

import numpy as np
import numpy.typing as npt
import scipy.linalg  # type: ignore[import-untyped]
import scipy.optimize  # type: ignore[import-untyped]

import qg_modon.errors
import qg_modon.orthog
import qg_modon.residual

NDArrayF = npt.NDArray[np.floating[Any]]
NDArrayC = npt.NDArray[np.complexfloating[Any, Any]]
Method = typing.Union[str, int]


_LOG = logging.getLogger(__name__)

_METHOD_ALIASES: dict[Method, str] = {0: 'auto', 1: 'nlsolve'}
_METHODS = ('auto', 'eigensolve', 'nlsolve')
_ROOT_XTOL = 1.49012e-08


def _solve(matrix: npt.NDArray[Any], rhs: npt.NDArray[Any], *, name: str) -> npt.NDArray[Any]:
    try:
        return np.linalg.solve(matrix, rhs)
    except np.linalg.LinAlgError as exc:
        raise qg_modon.errors.LinearSolveError('Linear solve for %s failed: %s' % (name, exc)) from exc


def _resolve_method(method: Method, n_layers: int) -> str:
    resolved = _METHOD_ALIASES.get(method, method)
    if resolved not in _METHODS:
        raise ValueError('Unknown method %r; expected one of %s' % (method, _METHODS))
    if resolved == 'eigensolve' and n_layers > 1:
        raise qg_modon.errors.MethodIncompatibleError(
            'The eigensolve method requires N = 1, got N = %d' % n_layers,
        )
    if resolved == 'auto':
        return 'eigensolve' if n_layers == 1 else 'nlsolve'
    return str(resolved)


def _eigensolve(
    *,
    A: NDArrayF,
    B: NDArrayF,
    c: NDArrayF,
    d: NDArrayF,
    K0: typing.Any,
    m: int,
) -> tuple[NDArrayC, NDArrayC]:
    M = A.shape[0]
    B = B.reshape(M, M)
    c0, c1 = c[:, 0], c[:, 1]
    dT = d.reshape(-1)
    guess = 4.0 if K0 is None else float(np.asarray(K0, dtype=float).reshape(-1)[0])

    A_inv_B = _solve(A, B, name='A^-1 B')
    s0 = dT @ _solve(A, c0, name='A^-1 c0')
    s1 = dT @ _solve(A, c1, name='A^-1 c1')

    D0 = s0 * A
    D1 = s1 * A - s0 * B + np.outer(c0, dT) @ A_inv_B
    D2 = -s1 * B + np.outer(c1, dT) @ A_inv_B

    O = np.zeros((M, M))
    I = np.eye(M)
    D3 = np.block([[D0, O], [O, I]])
    D4 = np.block([[-D1, -D2], [I, O]])

    eigenvalues = scipy.linalg.eigvals(D3, D4)
    with np.errstate(invalid='ignore', over='ignore'):
        distance = np.abs((eigenvalues - guess**m) ** 2)
    distance[~np.isfinite(distance)] = np.inf
    if not np.isfinite(distance).any():
        raise qg_modon.errors.LinearSolveError('Generalized eigenvalue problem has no finite eigenvalues')
    i = int(np.argmin(distance))
    _LOG.info('Selected eigenvalue %s closest to K0^m = %s', eigenvalues[i], guess**m)

    K = np.array([[eigenvalues[i]]], dtype=complex) ** (1 / m)
    Km = K[0, 0] ** m
    a = _solve(A - Km * B, c0 + Km * c1, name='coefficients').reshape(M, 1)
    return K, a


def _nlsolve(
    *,
    A: NDArrayF,
    B: NDArrayF,
    c: NDArrayF,
    d: NDArrayF,
    K0: typing.Any,
    a0: typing.Any,
    tol: float,
    m: int,
    eps: float,
    root_method: str,
) -> tuple[NDArrayC, NDArrayF]:
    n_rows, N = d.shape
    M = n_rows // N
    if B.ndim == 2:
        B = B[:, :, np.newaxis]

    e, basis, free_index = qg_modon.orthog.orthog_space(v=d, eps=eps)

    if a0 is None:
        a0_vec = np.concatenate([-10.0 * np.ones(N), np.zeros(N * (M - 1))])
    else:
        a0_vec = np.asarray(a0, dtype=float).reshape(-1)
    if K0 is None:
        K0_vec = 5.0 * np.ones(N)
    else:
        K0_vec = np.broadcast_to(np.asarray(K0, dtype=float).reshape(-1), (N,))

    projected = _solve(basis, a0_vec, name='initial guess projection')
    x0 = np.concatenate([K0_vec**m, projected[free_index]])

    def fj(x: NDArrayF) -> tuple[typing.Optional[NDArrayF], typing.Optional[NDArrayF]]:
        terms = qg_modon.residual.inhom_evp_f(x, A=A, B=B, c=c, e=e)
        return terms.residual, terms.jacobian

    result = scipy.optimize.root(fj, x0, jac=True, method=root_method, tol=min(tol, _ROOT_XTOL))
    x = result.x
    F = qg_modon.residual.inhom_evp_f(x, A=A, B=B, c=c, e=e, jacobian=False).residual
    residual_norm = float(np.max(np.abs(F)))
    if not residual_norm <= tol:
        raise qg_modon.errors.RootFindNonConvergenceError(
            'Root finding stopped with residual %.3e above tolerance %.1e: %s'
            % (residual_norm, tol, result.message),
        )
    _LOG.info('Converged after %s function evaluations, residual %.2e', result.get('nfev'), residual_norm)

    K = (x[:N].astype(complex) ** (1 / m)).reshape(1, N)
    a = (e @ x[N:]).reshape(M, N)
    return K, a


def solve_inhom_evp(
    *,
    A: NDArrayF,
    B: NDArrayF,
    c: NDArrayF,
    d: NDArrayF,
    K0: typing.Any = None,
    a0: typing.Any = None,
    tol: float = 1e-6,
    method: Method = 'auto',
    m: int = 2,
    sqg: bool = False,
    eps: float = 1e-6,
    root_method: str = 'hybr',
) -> tuple[NDArrayF, NDArrayF]:
    """Find eigenvalues K and coefficients a of the inhomogeneous problem.

    Parameters
    ----------
    A, B, c, d : arrays
        Problem terms from ``build_lin_sys`` (optionally reduced by
        ``apply_passive_layers``).
    K0 : float or array, optional
        Initial guess for K.  Defaults to 4 for the eigensolve and 5 in
        every layer for root finding.
    a0 : array (M, N), optional
        Initial guess for the coefficients (root finding only).  Defaults
        to -10 in the first coefficient of each layer.
    tol : float
        Residual tolerance; coefficients smaller than this are set to 0.
    method : {'auto', 'eigensolve', 'nlsolve'} or {0, 1}
        'auto' (0) uses the eigensolve for N = 1 and root finding otherwise;
        'nlsolve' (1) always uses root finding.
    m : int
        Exponent of K in the problem.
    sqg : bool
        SQG problem; forces m = 1.
    eps : float
        Projection threshold used when building the orthogonal basis.
    root_method : str
        Method passed to ``scipy.optimize.root``; its stopping tolerance is
        *tol*, capped at the MINPACK default step tolerance.

    Returns
    -------
    K : array (1, N)
    a : array (M, N)
    """
    if sqg:
        m = 1

    n_rows, N = d.shape
    if n_rows % N != 0 or A.shape != (n_rows, n_rows) or c.shape != (n_rows, N + 1):
        raise ValueError(
            'Inconsistent system: A %s, c %s and d %s' % (A.shape, c.shape, d.shape),
        )

    resolved = _resolve_method(method, N)
    _LOG.info('Solving with %s for N=%d, M=%d', resolved, N, n_rows // N)
    if resolved == 'eigensolve':
        K, a = _eigensolve(A=A, B=B, c=c, d=d, K0=K0, m=m)
    else:
        K, a = _nlsolve(
            A=A, B=B, c=c, d=d, K0=K0, a0=a0, tol=tol, m=m, eps=eps, root_method=root_method,
        )

    if np.any(np.abs(K.imag) > tol):
        _LOG.warning('Solution has complex K, generally corresponding to passive layers.')

    K_real: NDArrayF = np.array(K.real, dtype=float)
    a_real: NDArrayF = np.array(np.real(a), dtype=float)
    a_real[np.abs(a_real) < tol] = 0
    return K_real, a_real
