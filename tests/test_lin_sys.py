"""Tests for qg_modon.lin_sys."""

import numpy as np
import pytest

import qg_modon.lin_sys


@pytest.fixture(scope='module')
def layered_system() -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    return qg_modon.lin_sys.build_lin_sys(M=2, lam=[1.0, 1.0], mu=[0.5, -0.2])


def test_sqg_exact_system() -> None:
    M = 4
    A, B, c, d = qg_modon.lin_sys.build_lin_sys(M=M, lam=[0, 0], mu=0, sqg=True)

    np.testing.assert_allclose(A, np.diag([1 / 4, 1 / 8, 1 / 12, 1 / 16]))
    np.testing.assert_array_equal(c, [[0.0, 0.25], [0.0, 0.0], [0.0, 0.0], [0.0, 0.0]])
    np.testing.assert_array_equal(d, [[1.0], [-1.0], [1.0], [-1.0]])
    assert B.shape == (M, M)
    np.testing.assert_allclose(B[0, 0], 4 / (15 * np.pi))
    np.testing.assert_allclose(B, B.T)


def test_sqg_quadrature_system_is_symmetric() -> None:
    A, B, c, d = qg_modon.lin_sys.build_lin_sys(M=2, lam=[1.0, 0.5], mu=0.2, sqg=True)

    assert B.shape == (2, 2)
    np.testing.assert_allclose(B, B.T, atol=1e-6)
    assert np.all(np.diag(B) > 0)
    assert c.shape == (2, 2) and d.shape == (2, 1)


def test_layered_shapes(layered_system: tuple[np.ndarray, ...]) -> None:
    A, B, c, d = layered_system
    assert A.shape == (4, 4)
    assert B.shape == (4, 4, 2)
    assert c.shape == (4, 3)
    assert d.shape == (4, 2)


def test_layered_forcing_and_constraints(layered_system: tuple[np.ndarray, ...]) -> None:
    _, _, c, d = layered_system
    mu = np.array([0.5, -0.2])

    np.testing.assert_allclose(c[:, 0], c[:, 1:] @ mu, rtol=0, atol=1e-15)
    np.testing.assert_array_equal(c[:, 1:], [[0.25, 0.0], [0.0, 0.25], [0.0, 0.0], [0.0, 0.0]])
    np.testing.assert_array_equal(d, [[1.0, 0.0], [0.0, 1.0], [-1.0, 0.0], [0.0, -1.0]])


def test_layer_slices_of_b(layered_system: tuple[np.ndarray, ...]) -> None:
    _, B, _, _ = layered_system
    rows = np.arange(4)
    for n in range(2):
        np.testing.assert_array_equal(B[rows % 2 != n, :, n], 0.0)
        assert np.any(B[rows % 2 == n, :, n] != 0.0)


def test_decoupled_layers_match_single_layer() -> None:
    A1, B1, _, _ = qg_modon.lin_sys.build_lin_sys(M=2, lam=0.0, mu=0.0)
    A2, B2, _, _ = qg_modon.lin_sys.build_lin_sys(M=2, lam=[0.0, 0.0], mu=[0.0, 0.0])

    np.testing.assert_allclose(A2, np.kron(A1, np.eye(2)), atol=1e-7)
    np.testing.assert_allclose(B2.sum(axis=2), np.kron(B1[:, :, 0], np.eye(2)), atol=1e-7)


def test_invalid_arguments() -> None:
    with pytest.raises(ValueError):
        qg_modon.lin_sys.build_lin_sys(M=0, lam=0.0, mu=0.0)
    with pytest.raises(ValueError):
        qg_modon.lin_sys.build_lin_sys(M=2, lam=[0.0, 0.0, 0.0], mu=0.0, sqg=True)
