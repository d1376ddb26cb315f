"""Extend constraint vectors to an orthonormal basis of R^N."""

import logging
from typing import Any

import numpy as np
import numpy.typing as npt

import qg_modon.errors

NDArrayF = npt.NDArray[np.floating[Any]]


_LOG = logging.getLogger(__name__)


def orthog_space(
    *,
    v: NDArrayF,
    eps: float = 1e-6,
) -> tuple[NDArrayF, NDArrayF, npt.NDArray[np.intp]]:
    """Extend the columns of *v* to an orthonormal basis using Gram-Schmidt.

    Each input column replaces the first still-available standard basis
    vector it has a projection greater than *eps* onto (ascending index
    order).  The full set of columns is then orthogonalised in index order
    and normalised.

    Parameters
    ----------
    v : array (N,) or (N, k)
        Linearly independent vectors as columns.
    eps : float
        Minimum projection for a basis slot to be replaced.

    Returns
    -------
    e : array (N, N - k)
        Orthonormal basis of the complement of span(v).
    basis : array (N, N)
        Full orthonormal basis.
    free_index : array (N - k,)
        Positions in *basis* that were never replaced; ``e = basis[:, free_index]``.

    Raises
    ------
    LinearDependenceError
        If no available slot has sufficient projection onto some column.
    """
    v = np.asarray(v, dtype=float)
    if v.ndim == 1:
        v = v[:, np.newaxis]
    N, k = v.shape

    basis: NDArrayF = np.eye(N)
    free = list(range(N))

    for i in range(k):
        j = 0
        while len(free) > N - i - 1:
            if j >= len(free):
                raise qg_modon.errors.LinearDependenceError(
                    'Constraint vectors must be linearly independent; column %d has no '
                    'available basis slot' % i,
                )
            if np.dot(v[:, i], basis[:, free[j]]) > eps:
                basis[:, free[j]] = v[:, i]
                del free[j]
            j += 1

    for j in range(N):
        for i in range(j):
            basis[:, j] -= basis[:, i] * np.dot(basis[:, i], basis[:, j]) / np.dot(basis[:, i], basis[:, i])

    basis /= np.sqrt(np.sum(basis**2, axis=0))
    free_index = np.array(free, dtype=np.intp)
    _LOG.debug('Retained %d free directions out of %d', free_index.size, N)
    return basis[:, free_index], basis, free_index
