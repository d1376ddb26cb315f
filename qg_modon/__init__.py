"""Modon solutions of the layered quasi-geostrophic and SQG equations.

Builds and solves the inhomogeneous eigenvalue problem whose eigenvalues K
and eigenvector coefficients a describe steady dipolar vortices.

Submodules
----------
quadrature -- Bessel-product integrals and the A, B and SQG kernels
lin_sys    -- Construction of the problem terms A, B, c, d
layers     -- Removal and restoration of passive layers
orthog     -- Orthonormal basis perpendicular to the constraint vectors
residual   -- Residual and Jacobian for the root-finding formulation
solver     -- Eigensolve (N = 1) and root-finding (N > 1) solution methods
errors     -- Exception hierarchy
modon      -- CLI: Build, solve and print a modon solution
"""

__version__ = "1.0.0"
