"""
===============================================================================
SRP TOOLKIT - Equivalent Cannonball Fitting
===============================================================================
Reduces a detailed (typically panelled) target model to the cannonball model
that best reproduces its force over a set of illumination directions.

For a cannonball of reference area A the force is linear in the coefficient:

    F_cb(d) = E / c * A * C_r * d

so the best-fit C_r over directions d_1 .. d_m is a one-parameter bounded
linear least-squares problem

    min_{C_r >= 0}  sum_k | F_target(d_k) - C_r * E / c * A * d_k |^2

solved with scipy.optimize.lsq_linear.  A purely diffuse panelled sphere
yields C_r -> 1 + 4/9, a flat plate seen head-on yields 1 + specular.
===============================================================================
"""

import logging
from typing import Optional

import numpy as np
from numpy.typing import NDArray
from scipy.optimize import lsq_linear

from core.constants import SOLAR_IRRADIANCE_AT_1AU, SPEED_OF_LIGHT
from core.frames import generate_evenly_spaced_points, spherical_to_cartesian
from dynamics.target_model import (
    CannonballRadiationPressureTargetModel,
    RadiationPressureTargetModel,
)

logger = logging.getLogger(__name__)


def fit_cannonball_coefficient(
    target_model: RadiationPressureTargetModel,
    reference_area: float,
    directions: Optional[NDArray] = None,
    irradiance: float = SOLAR_IRRADIANCE_AT_1AU,
) -> float:
    """
    Best-fit radiation pressure coefficient of an equivalent cannonball.

    Parameters
    ----------
    target_model : RadiationPressureTargetModel
        Model to approximate.  Must already be updated for the epoch of
        interest.
    reference_area : float
        Cross-sectional area of the cannonball (m^2), > 0.
    directions : ndarray, shape (m, 3), optional
        Unit source-to-target directions to fit over.  Defaults to 200
        directions spread evenly over the sphere.
    irradiance : float, optional
        Irradiance used for the force evaluations (W/m^2).  The fitted
        coefficient does not depend on it.

    Returns
    -------
    float
        Fitted coefficient C_r >= 0.
    """
    if not reference_area > 0.0:
        raise ValueError(f"Reference area must be positive, got {reference_area}.")
    if not irradiance > 0.0:
        raise ValueError(f"Irradiance must be positive, got {irradiance}.")

    if directions is None:
        polar_angles, azimuth_angles = generate_evenly_spaced_points(200)
        directions = np.array([
            spherical_to_cartesian(1.0, polar, azimuth)
            for polar, azimuth in zip(polar_angles, azimuth_angles)
        ])
    directions = np.atleast_2d(np.asarray(directions, dtype=np.float64))

    # Stack all force components into one linear system A x = b
    unit_force_scale = irradiance / SPEED_OF_LIGHT * reference_area
    design = (unit_force_scale * directions).reshape(-1, 1)
    observed = np.concatenate([
        target_model.evaluate_radiation_pressure_force(irradiance, direction)
        for direction in directions
    ])

    result = lsq_linear(design, observed, bounds=(0.0, np.inf))
    coefficient = float(result.x[0])

    logger.debug("Fitted cannonball coefficient %.6f over %d directions (cost %.3e)",
                 coefficient, len(directions), result.cost)
    return coefficient


def create_equivalent_cannonball(
    target_model: RadiationPressureTargetModel,
    reference_area: float,
    directions: Optional[NDArray] = None,
) -> CannonballRadiationPressureTargetModel:
    """Cannonball model with the fitted coefficient and *reference_area*."""
    coefficient = fit_cannonball_coefficient(target_model, reference_area, directions)
    return CannonballRadiationPressureTargetModel(reference_area, coefficient)
