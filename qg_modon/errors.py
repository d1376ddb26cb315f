"""Exceptions raised by the inhomogeneous eigenvalue problem solver."""

import numpy as np


class InhomEVPError(Exception):
    """Base class for all solver errors."""


class LinearDependenceError(InhomEVPError, ValueError):
    """Constraint vectors could not be extended to an orthonormal basis."""


class MethodIncompatibleError(InhomEVPError, ValueError):
    """The requested solution method does not apply to this system."""


class QuadratureError(InhomEVPError, RuntimeError):
    """The Bessel-product integral failed to converge."""


class LinearSolveError(InhomEVPError, np.linalg.LinAlgError):
    """A dense linear solve failed (singular or ill-conditioned matrix)."""


class RootFindNonConvergenceError(InhomEVPError, RuntimeError):
    """The nonlinear root finder did not reach the requested tolerance."""
