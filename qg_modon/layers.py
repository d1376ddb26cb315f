"""Utilities for removing and restoring passive layers.

A passive layer is one with no vortex inside it; its rows and columns are
dropped from the system before solving and zero columns are put back in
the solution afterwards.  Layer activity is a 0/1 vector of length N.
"""

import typing
from typing import Any

import numpy as np
import numpy.typing as npt

NDArrayF = npt.NDArray[np.floating[Any]]
ActiveLayers = typing.Union[int, typing.Sequence[int], npt.NDArray[Any]]


def _as_mask(active_layers: ActiveLayers) -> npt.NDArray[np.bool_]:
    return np.atleast_1d(np.asarray(active_layers)).reshape(-1).astype(bool)


def apply_passive_layers(
    *,
    A: NDArrayF,
    B: NDArrayF,
    c: NDArrayF,
    d: NDArrayF,
    active_layers: ActiveLayers,
) -> tuple[NDArrayF, NDArrayF, NDArrayF, NDArrayF]:
    """Remove rows and columns belonging to passive layers.

    Parameters
    ----------
    A, B, c, d : arrays
        Layered system from ``build_lin_sys``; B has shape (NM, NM, N).
    active_layers : int or sequence of int
        1 for an active layer, 0 for a passive one; length N.

    Returns
    -------
    tuple
        Reduced A, B, c, d.
    """
    layer_mask = _as_mask(active_layers)
    n_rows, N = d.shape
    if layer_mask.size != N:
        raise ValueError('active_layers has length %d but the system has %d layers' % (layer_mask.size, N))
    M = n_rows // N

    grid_mask = np.kron(np.ones(M, dtype=bool), layer_mask)
    extended_mask = np.concatenate([[True], layer_mask])

    return (
        A[np.ix_(grid_mask, grid_mask)],
        B[np.ix_(grid_mask, grid_mask, layer_mask)],
        c[np.ix_(grid_mask, extended_mask)],
        d[np.ix_(grid_mask, layer_mask)],
    )


def include_passive_layers(
    *,
    K: NDArrayF,
    a: NDArrayF,
    active_layers: ActiveLayers,
) -> tuple[NDArrayF, NDArrayF]:
    """Scatter a solution over active layers back into all N layers."""
    layer_mask = _as_mask(active_layers)
    N = layer_mask.size
    a = np.asarray(a)
    K = np.asarray(K).reshape(-1)
    if K.size != np.count_nonzero(layer_mask) or a.shape[1] != K.size:
        raise ValueError(
            'K has %d and a has %d columns but %d layers are active'
            % (K.size, a.shape[1], np.count_nonzero(layer_mask))
        )

    K_full: NDArrayF = np.zeros((1, N))
    a_full: NDArrayF = np.zeros((a.shape[0], N))
    K_full[0, layer_mask] = K
    a_full[:, layer_mask] = a
    return K_full, a_full
