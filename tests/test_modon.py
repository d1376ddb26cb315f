"""Tests for qg_modon.modon."""

import numpy as np
import pytest
import typer.testing

import qg_modon.modon


def test_passive_layer_is_restored() -> None:
    K, a = qg_modon.modon.compute_coefficients(M=2, lam=[1.0, 1.0], mu=[0.0, 0.0], active_layers=[1, 0])

    assert K.shape == (1, 2)
    assert a.shape == (2, 2)
    assert K[0, 1] == 0
    np.testing.assert_array_equal(a[:, 1], 0.0)
    assert np.any(a[:, 0] != 0)


def test_active_layers_rejected_for_sqg() -> None:
    with pytest.raises(ValueError):
        qg_modon.modon.compute_coefficients(M=2, lam=[0.0, 0.0], mu=0.0, sqg=True, active_layers=[1])


def test_cli_sqg() -> None:
    runner = typer.testing.CliRunner()
    result = runner.invoke(qg_modon.modon.app, ['--n-coefficients', '3', '--sqg'])

    assert result.exit_code == 0, result.output
    assert 'K = [' in result.output
    assert 'a =' in result.output
