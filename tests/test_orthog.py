"""Tests for qg_modon.orthog."""

import numpy as np
import pytest

import qg_modon.errors
import qg_modon.orthog


def _layer_constraints(M: int, N: int) -> np.ndarray:
    alternating = (-1.0) ** np.arange(M)
    return np.column_stack([np.kron(alternating, np.eye(N)[n]) for n in range(N)])


def test_complement_of_layer_constraints() -> None:
    d = _layer_constraints(4, 3)
    e, basis, free_index = qg_modon.orthog.orthog_space(v=d)

    assert e.shape == (12, 9)
    np.testing.assert_array_equal(free_index, np.arange(3, 12))
    np.testing.assert_allclose(e.T @ e, np.eye(9), atol=1e-12)
    np.testing.assert_allclose(basis.T @ basis, np.eye(12), atol=1e-12)
    np.testing.assert_allclose(d.T @ e, 0.0, atol=1e-12)
    np.testing.assert_array_equal(e, basis[:, free_index])


def test_random_constraints_with_leading_pivots() -> None:
    rng = np.random.default_rng(7)
    N, k = 7, 3
    v = rng.normal(size=(N, k))
    for i in range(k):
        v[:i, i] = 0.0
        v[i, i] = 1.0 + abs(v[i, i])

    e, _, free_index = qg_modon.orthog.orthog_space(v=v)

    np.testing.assert_array_equal(free_index, np.arange(k, N))
    np.testing.assert_allclose(e.T @ e, np.eye(N - k), atol=1e-12)
    np.testing.assert_allclose(v.T @ e, 0.0, atol=1e-12)


def test_slot_is_first_index_with_positive_projection() -> None:
    v = np.array([0.0, -1.0, 2.0, 1.0])
    _, basis, free_index = qg_modon.orthog.orthog_space(v=v)

    np.testing.assert_array_equal(free_index, [0, 1, 3])
    np.testing.assert_allclose(basis[:, :2], np.eye(4)[:, :2], atol=1e-12)


def test_dependent_columns_raise() -> None:
    v = np.array([[1.0, 1.0], [0.0, 0.0], [0.0, 0.0]])
    with pytest.raises(qg_modon.errors.LinearDependenceError):
        qg_modon.orthog.orthog_space(v=v)


def test_projection_below_eps_is_not_a_slot() -> None:
    v = np.array([1e-8, 0.0])
    with pytest.raises(qg_modon.errors.LinearDependenceError):
        qg_modon.orthog.orthog_space(v=v)
    e, _, _ = qg_modon.orthog.orthog_space(v=v, eps=1e-9)
    assert e.shape == (2, 1)
