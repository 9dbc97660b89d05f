"""
===============================================================================
SRP TOOLKIT - Reference Frame and Geometry Helpers
===============================================================================
Small geometric utilities shared by the radiation pressure models:

    - Body -> inertial rotation by quaternion  (panel normals fixed to the bus)
    - Spherical <-> Cartesian conversion       (panelled sphere construction)
    - Evenly spaced points on the unit sphere  (panelled sphere construction)

All functions operate on NumPy arrays and return NumPy arrays.  Angles are in
radians.  The polar angle is measured from the +Z axis, the azimuth angle from
the +X axis towards +Y.

References
----------
    [1] Montenbruck & Gill, "Satellite Orbits", Springer, 2000.
    [2] Saff & Kuijlaars, "Distributing many points on a sphere",
        The Mathematical Intelligencer, 1997.
    [3] Gonzalez, "Measurement of areas on a sphere using Fibonacci and
        latitude-longitude lattices", Mathematical Geosciences, 2010.

===============================================================================
"""

from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from core.constants import PI


# =============================================================================
# VECTOR HELPERS
# =============================================================================

def unit_vector(v: NDArray) -> NDArray:
    """
    Return *v* scaled to unit length.

    Raises
    ------
    ValueError
        If *v* has zero length (no direction can be defined).
    """
    v = np.asarray(v, dtype=np.float64)
    norm = np.linalg.norm(v)
    if norm == 0.0:
        raise ValueError("Cannot normalise a zero-length vector.")
    return v / norm


# =============================================================================
# BODY -> INERTIAL via QUATERNION
# =============================================================================

def body_to_inertial(v_body: NDArray, quaternion: NDArray) -> NDArray:
    """
    Express a body-frame vector (e.g. a bus panel normal) in the propagation
    frame.

    *quaternion* is the scalar-first unit quaternion [w, x, y, z] of the
    body-to-propagation-frame rotation.  With q_v = [x, y, z]:

        t      = 2 * (q_v x v)
        v_prop = v + w * t + (q_v x t)

    Parameters
    ----------
    v_body : np.ndarray
        Vector in the body frame, shape (3,).
    quaternion : np.ndarray
        Attitude quaternion, shape (4,).

    Returns
    -------
    np.ndarray
        The same vector in the propagation frame.
    """
    v = np.asarray(v_body, dtype=np.float64)
    q = np.asarray(quaternion, dtype=np.float64)

    w = q[0]
    q_vec = q[1:4]

    t = 2.0 * np.cross(q_vec, v)
    return v + w * t + np.cross(q_vec, t)


# =============================================================================
# SPHERICAL GEOMETRY
# =============================================================================

def spherical_to_cartesian(radius: float, polar_angle: float,
                           azimuth_angle: float) -> NDArray:
    """
    Convert spherical coordinates to a Cartesian position vector.

        x = r * sin(theta) * cos(phi)
        y = r * sin(theta) * sin(phi)
        z = r * cos(theta)

    Parameters
    ----------
    radius : float
        Distance from the origin.
    polar_angle : float
        Angle from the +Z axis, theta in [0, pi] (rad).
    azimuth_angle : float
        Angle from the +X axis in the XY-plane, phi (rad).

    Returns
    -------
    np.ndarray
        Cartesian vector [x, y, z].
    """
    sin_theta = np.sin(polar_angle)
    return radius * np.array([
        sin_theta * np.cos(azimuth_angle),
        sin_theta * np.sin(azimuth_angle),
        np.cos(polar_angle),
    ], dtype=np.float64)


def generate_evenly_spaced_points(number_of_points: int) -> Tuple[NDArray, NDArray]:
    """
    Generate near-uniformly distributed points on the unit sphere.

    Uses the staggered Fibonacci (golden-angle) spiral: the k-th point sits
    at the centre of the k-th of *n* equal-area latitude bands,

        cos(theta_k) = 1 - (2k + 1) / n
        phi_k        = k * pi * (3 - sqrt(5))      (mod 2 pi)

    so every point represents the same surface area 4 pi / n.  This makes
    the point set directly usable as panel centres of a panelled sphere.

    Parameters
    ----------
    number_of_points : int
        Number of points n (>= 1).

    Returns
    -------
    tuple of np.ndarray
        (polar_angles, azimuth_angles), each of shape (n,), in radians.
    """
    if number_of_points < 1:
        raise ValueError(
            f"number_of_points must be at least 1, got {number_of_points}."
        )

    k = np.arange(number_of_points, dtype=np.float64)
    golden_angle = PI * (3.0 - np.sqrt(5.0))

    cos_polar = 1.0 - (2.0 * k + 1.0) / number_of_points
    polar_angles = np.arccos(np.clip(cos_polar, -1.0, 1.0))
    azimuth_angles = np.mod(k * golden_angle, 2.0 * PI)

    return polar_angles, azimuth_angles
