"""Compute modon coefficients and eigenvalues for layered QG or SQG vortices."""

import logging
import typing

import numpy as np
import numpy.typing
import typer

import qg_modon.layers
import qg_modon.lin_sys
import qg_modon.solver


_LOG = logging.getLogger(__name__)

app = typer.Typer(help='Solve the inhomogeneous eigenvalue problem for a QG or SQG modon.')


def compute_coefficients(
    *,
    M: int,
    lam: qg_modon.lin_sys.LayerParam,
    mu: qg_modon.lin_sys.LayerParam,
    active_layers: typing.Optional[typing.Sequence[int]] = None,
    tol: float = 1e-6,
    sqg: bool = False,
    K0: typing.Any = None,
    a0: typing.Any = None,
    method: qg_modon.solver.Method = 'auto',
    m: int = 2,
    cutoff: float = 1000.0,
) -> tuple[numpy.typing.NDArray[np.floating[typing.Any]], numpy.typing.NDArray[np.floating[typing.Any]]]:
    """Build the system, drop passive layers, solve, and restore passive layers.

    K0 and a0 refer to the active layers only.
    """
    if sqg and active_layers is not None:
        raise ValueError('active_layers only applies to the layered QG problem')

    A, B, c, d = qg_modon.lin_sys.build_lin_sys(M=M, lam=lam, mu=mu, tol=tol, sqg=sqg, cutoff=cutoff)
    if active_layers is not None:
        A, B, c, d = qg_modon.layers.apply_passive_layers(A=A, B=B, c=c, d=d, active_layers=active_layers)

    K, a = qg_modon.solver.solve_inhom_evp(
        A=A, B=B, c=c, d=d, K0=K0, a0=a0, tol=tol, method=method, m=m, sqg=sqg,
    )

    if active_layers is not None:
        K, a = qg_modon.layers.include_passive_layers(K=K, a=a, active_layers=active_layers)
    _LOG.info('Found K = %s', K.ravel())
    return K, a


@app.command()
def cli(
    *,
    n_coefficients: typing.Annotated[int, typer.Option(
        help='Number of coefficients M in each layer',
    )] = 8,
    lam: typing.Annotated[typing.Optional[list[float]], typer.Option(
        help='Vortex radius over Rossby radius, once per layer (SQG: depth then surface parameter)',
    )] = None,
    mu: typing.Annotated[typing.Optional[list[float]], typer.Option(
        help='Background vorticity gradient, once per layer',
    )] = None,
    active_layers: typing.Annotated[typing.Optional[list[int]], typer.Option(
        help='1 for an active layer, 0 for a passive one, once per layer',
    )] = None,
    k0: typing.Annotated[typing.Optional[list[float]], typer.Option(
        help='Initial guess for K in each active layer',
    )] = None,
    tol: typing.Annotated[float, typer.Option(
        help='Quadrature and root finding tolerance',
    )] = 1e-6,
    sqg: typing.Annotated[bool, typer.Option(
        help='Solve the SQG problem instead of layered QG',
    )] = False,
    method: typing.Annotated[str, typer.Option(
        help='auto, eigensolve or nlsolve',
    )] = 'auto',
    exponent: typing.Annotated[int, typer.Option(
        help='Exponent m of K in the problem (ignored for SQG)',
    )] = 2,
) -> None:
    """Solve for modon eigenvalues K and coefficients a and print them."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    if lam is None:
        lam = [0.0, 0.0] if sqg else [0.0]
    if mu is None:
        mu = [0.0] if sqg else [0.0] * len(lam)

    K, a = compute_coefficients(
        M=n_coefficients,
        lam=lam,
        mu=mu,
        active_layers=active_layers,
        tol=tol,
        sqg=sqg,
        K0=k0,
        method=method,
        m=exponent,
    )
    typer.echo('K = %s' % np.array2string(K.ravel(), precision=8))
    typer.echo('a =\n%s' % np.array2string(a, precision=8))


if __name__ == '__main__':
    app()
