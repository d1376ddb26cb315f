"""Residual and Jacobian of the projected inhomogeneous eigenvalue problem.

The unknown vector x = [K^m; a'] holds one eigenvalue per layer followed by
the coordinates a' of the coefficient vector in the basis ``e`` orthogonal
to the constraint vectors, so that a = e a'.  The residual is

    F(x) = [A - sum_i x_i B[:, :, i]] a - c[:, 0] - sum_i x_i c[:, i + 1].
"""

import dataclasses
import typing
from typing import Any

import numpy as np
import numpy.typing as npt

NDArrayF = npt.NDArray[np.floating[Any]]


@dataclasses.dataclass(frozen=True)
class InhomEVPTerms:
    """Result of one evaluation; unrequested outputs are None."""

    residual: typing.Optional[NDArrayF]
    jacobian: typing.Optional[NDArrayF]


def inhom_evp_f(
    x: NDArrayF,
    *,
    A: NDArrayF,
    B: NDArrayF,
    c: NDArrayF,
    e: NDArrayF,
    residual: bool = True,
    jacobian: bool = True,
) -> InhomEVPTerms:
    """Evaluate F(x) and/or its Jacobian J(x).

    Parameters
    ----------
    x : array (R,)
        Evaluation point; R is the number of rows of A.
    A : array (R, R)
    B : array (R, R, N)
        Per-layer operators.
    c : array (R, N + 1)
        Baseline forcing in column 0, per-layer forcing after it.
    e : array (R, R - N)
        Orthonormal basis perpendicular to the constraint vectors.
    residual, jacobian : bool
        Which outputs to compute.

    Returns
    -------
    InhomEVPTerms
    """
    n_rows, n_free = e.shape
    n_layers = n_rows - n_free
    eigenvalues = x[:n_layers]

    a = e @ x[n_layers:]
    operator = A - np.tensordot(B[:, :, :n_layers], eigenvalues, axes=([2], [0]))

    F = None
    if residual:
        forcing = c[:, 0] + c[:, 1:n_layers + 1] @ eigenvalues
        F = operator @ a - forcing

    J = None
    if jacobian:
        J = np.empty((n_rows, n_rows))
        for i in range(n_layers):
            J[:, i] = -B[:, :, i] @ a - c[:, i + 1]
        J[:, n_layers:] = operator @ e

    return InhomEVPTerms(residual=F, jacobian=J)
