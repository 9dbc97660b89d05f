"""
===============================================================================
SRP TOOLKIT - Reflection Laws
===============================================================================
Surface reflection laws used by the panelled radiation pressure model.

A reflection law answers two questions about a flat surface element:

    1. Which fraction of the incident radiation is reflected towards a given
       observer?  (evaluate_reflected_fraction)
    2. Which force per unit area, per unit radiation pressure, does the
       incident radiation exert on the surface?  (evaluate_reaction_vector)

Implemented laws:

    - SpecularDiffuseMixReflectionLaw : mix of absorption, Lambertian (diffuse)
                                        reflection and mirror-like (specular)
                                        reflection, with optional
                                        instantaneous Lambertian re-radiation
                                        of the absorbed energy.

Vector conventions
------------------
    surface_normal      unit outward normal of the (front face of the) surface
    incoming_direction  unit vector FROM the source TO the surface
    observer_direction  unit vector FROM the surface TO the observer

All direction inputs must already be unit vectors; they are not re-normalised.

References
----------
    [1] Montenbruck et al., "A real-time capable solar radiation pressure
        model for GNSS satellites", Advances in Space Research, 2015.
    [2] Wetterer et al., "Refining space object radiation pressure modeling
        with bidirectional reflectance distribution functions",
        Journal of Guidance, Control, and Dynamics, 2014.
===============================================================================
"""

import logging
from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray

from core.constants import (
    PI, LAMBERTIAN_MOMENTUM_FACTOR, REFLECTIVITY_SUM_TOLERANCE,
)

logger = logging.getLogger(__name__)

# Relative precision used to decide whether two directions coincide
_DIRECTION_MATCH_PRECISION = 1e-12


# ============================================================================
#  ABSTRACT BASE
# ============================================================================

class ReflectionLaw(ABC):
    """
    Abstract base class for surface reflection laws.

    Instances hold only material constants and no per-evaluation state, so a
    single instance may be shared by any number of panels.
    """

    @abstractmethod
    def evaluate_reflected_fraction(
        self,
        surface_normal: NDArray,
        incoming_direction: NDArray,
        observer_direction: NDArray,
    ) -> float:
        """
        Fraction of incident radiation reflected towards the observer (1/sr).

        Parameters
        ----------
        surface_normal : ndarray, shape (3,)
            Unit surface normal.
        incoming_direction : ndarray, shape (3,)
            Unit vector from the source to the surface.
        observer_direction : ndarray, shape (3,)
            Unit vector from the surface to the observer.

        Returns
        -------
        float
            Bidirectional reflectance, >= 0.
        """

    @abstractmethod
    def evaluate_reaction_vector(
        self,
        surface_normal: NDArray,
        incoming_direction: NDArray,
    ) -> NDArray:
        """
        Force per unit area per unit radiation pressure on the surface.

        Parameters
        ----------
        surface_normal : ndarray, shape (3,)
            Unit surface normal.
        incoming_direction : ndarray, shape (3,)
            Unit vector from the source to the surface.

        Returns
        -------
        ndarray, shape (3,)
            Dimensionless reaction vector.
        """


# ============================================================================
#  SPECULAR / DIFFUSE MIX
# ============================================================================

class SpecularDiffuseMixReflectionLaw(ReflectionLaw):
    """
    Reflection law mixing absorption, diffuse and specular reflection.

    Incident energy is split into three parts:

        absorptivity + specular_reflectivity + diffuse_reflectivity = 1

    The reaction vector follows Montenbruck (2015) Eq. 5:

        f = (a + d) * i  -  (2/3 * d + 2 * s * cos(theta)) * n

    where cos(theta) = n . (-i).  With instantaneous Lambertian re-radiation
    (Montenbruck (2015) Eq. 6) the absorbed energy is re-emitted from the front
    face straight away, which adds

        f_rerad = -(2/3 * a) * n

    Parameters
    ----------
    absorptivity : float
        Absorbed fraction a in [0, 1].
    specular_reflectivity : float
        Specularly reflected fraction s in [0, 1].
    diffuse_reflectivity : float
        Diffusely reflected fraction d in [0, 1].
    with_instantaneous_reradiation : bool, optional
        Re-radiate the absorbed energy instantaneously as Lambertian
        emission from the front face (default False).

    Raises
    ------
    ValueError
        If any fraction lies outside [0, 1] or the fractions do not sum to 1.
    """

    def __init__(
        self,
        absorptivity: float,
        specular_reflectivity: float,
        diffuse_reflectivity: float,
        with_instantaneous_reradiation: bool = False,
    ) -> None:
        fractions = {
            "absorptivity": absorptivity,
            "specular_reflectivity": specular_reflectivity,
            "diffuse_reflectivity": diffuse_reflectivity,
        }
        for name, value in fractions.items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must lie in [0, 1], got {value}.")

        total = absorptivity + specular_reflectivity + diffuse_reflectivity
        if abs(total - 1.0) > REFLECTIVITY_SUM_TOLERANCE:
            raise ValueError(
                "absorptivity + specular_reflectivity + diffuse_reflectivity "
                f"must equal 1, got {total!r}."
            )

        self._absorptivity = float(absorptivity)
        self._specular_reflectivity = float(specular_reflectivity)
        self._diffuse_reflectivity = float(diffuse_reflectivity)
        self._with_instantaneous_reradiation = bool(with_instantaneous_reradiation)

        logger.debug(
            "Created reflection law: a=%.6g, s=%.6g, d=%.6g, reradiation=%s",
            self._absorptivity, self._specular_reflectivity,
            self._diffuse_reflectivity, self._with_instantaneous_reradiation,
        )

    # ------------------------------------------------------------------ #
    @property
    def absorptivity(self) -> float:
        """Absorbed fraction of incident energy."""
        return self._absorptivity

    @property
    def specular_reflectivity(self) -> float:
        """Specularly reflected fraction of incident energy."""
        return self._specular_reflectivity

    @property
    def diffuse_reflectivity(self) -> float:
        """Diffusely reflected fraction of incident energy."""
        return self._diffuse_reflectivity

    @property
    def with_instantaneous_reradiation(self) -> bool:
        """Whether absorbed energy is re-emitted at once from the front face."""
        return self._with_instantaneous_reradiation

    # ------------------------------------------------------------------ #
    def evaluate_reflected_fraction(
        self,
        surface_normal: NDArray,
        incoming_direction: NDArray,
        observer_direction: NDArray,
    ) -> float:
        """
        Bidirectional reflectance towards *observer_direction*.

        The diffuse part is the Lambertian radiance d / pi, independent of
        the observer.  The specular part s / cos(theta) is only seen by an
        observer exactly on the mirrored incoming ray (ideal point mirror,
        Wetterer (2014) Eq. 4).  Nothing is seen if the radiation arrives at
        the back face or the observer is behind the surface.
        """
        cos_incoming = float(np.dot(surface_normal, -np.asarray(incoming_direction)))
        cos_observer = float(np.dot(surface_normal, observer_direction))
        if cos_incoming <= 0.0 or cos_observer <= 0.0:
            return 0.0

        reflected_fraction = self._diffuse_reflectivity / PI

        mirror_direction = compute_mirrorlike_reflection(
            incoming_direction, surface_normal
        )
        if _directions_match(observer_direction, mirror_direction):
            reflected_fraction += self._specular_reflectivity / cos_incoming

        return reflected_fraction

    # ------------------------------------------------------------------ #
    def evaluate_reaction_vector(
        self,
        surface_normal: NDArray,
        incoming_direction: NDArray,
    ) -> NDArray:
        """
        Reaction vector of the surface; zero if lit from behind.
        """
        n = np.asarray(surface_normal, dtype=np.float64)
        i = np.asarray(incoming_direction, dtype=np.float64)

        cos_incoming = float(np.dot(n, -i))
        if cos_incoming <= 0.0:
            return np.zeros(3)

        # Momentum of the incident photons that are absorbed or diffused
        reaction_from_incidence = (
            (self._absorptivity + self._diffuse_reflectivity) * i
        )

        # Recoil of the reflected photons, along the normal
        reaction_from_reflection = -(
            LAMBERTIAN_MOMENTUM_FACTOR * self._diffuse_reflectivity
            + 2.0 * self._specular_reflectivity * cos_incoming
        ) * n

        reaction = reaction_from_incidence + reaction_from_reflection

        if self._with_instantaneous_reradiation:
            # Absorbed energy leaves the front face like diffuse reflection
            reaction = reaction - (
                LAMBERTIAN_MOMENTUM_FACTOR * self._absorptivity
            ) * n

        return reaction

    # ------------------------------------------------------------------ #
    def __repr__(self) -> str:
        return (
            f"SpecularDiffuseMixReflectionLaw("
            f"absorptivity={self._absorptivity!r}, "
            f"specular_reflectivity={self._specular_reflectivity!r}, "
            f"diffuse_reflectivity={self._diffuse_reflectivity!r}, "
            f"with_instantaneous_reradiation={self._with_instantaneous_reradiation!r})"
        )


# ============================================================================
#  HELPERS
# ============================================================================

def compute_mirrorlike_reflection(
    vector_to_mirror: NDArray,
    surface_normal: NDArray,
) -> NDArray:
    """
    Mirror a vector about a surface:  r = v - 2 (v . n) n

    Only a vector travelling into the front face is reflected; for
    v . n >= 0 the zero vector is returned.

    Parameters
    ----------
    vector_to_mirror : ndarray, shape (3,)
        Incoming vector (pointing towards the surface).
    surface_normal : ndarray, shape (3,)
        Unit surface normal.

    Returns
    -------
    ndarray, shape (3,)
        Reflected vector, or zeros if the vector hits the back face.
    """
    v = np.asarray(vector_to_mirror, dtype=np.float64)
    n = np.asarray(surface_normal, dtype=np.float64)

    v_dot_n = float(np.dot(v, n))
    if v_dot_n >= 0.0:
        return np.zeros(3)
    return v - 2.0 * v_dot_n * n


def _directions_match(a: NDArray, b: NDArray) -> bool:
    """Fuzzy vector equality: |a - b| <= eps * min(|a|, |b|)."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    scale = min(np.linalg.norm(a), np.linalg.norm(b))
    return bool(np.linalg.norm(a - b) <= _DIRECTION_MATCH_PRECISION * scale)


# ============================================================================
#  FACTORY FUNCTIONS
# ============================================================================

def reflection_law_from_specular_and_diffuse_reflectivity(
    specular_reflectivity: float,
    diffuse_reflectivity: float,
    with_instantaneous_reradiation: bool = False,
) -> SpecularDiffuseMixReflectionLaw:
    """
    Build a specular/diffuse law, absorbing whatever is not reflected.

    absorptivity = 1 - specular_reflectivity - diffuse_reflectivity
    """
    absorptivity = 1.0 - specular_reflectivity - diffuse_reflectivity
    return SpecularDiffuseMixReflectionLaw(
        _clip_rounding(absorptivity),
        specular_reflectivity,
        diffuse_reflectivity,
        with_instantaneous_reradiation,
    )


def reflection_law_from_absorptivity_and_diffuse_reflectivity(
    absorptivity: float,
    diffuse_reflectivity: float,
    with_instantaneous_reradiation: bool = False,
) -> SpecularDiffuseMixReflectionLaw:
    """
    Build a specular/diffuse law, reflecting specularly whatever is neither
    absorbed nor diffused.

    specular_reflectivity = 1 - absorptivity - diffuse_reflectivity
    """
    specular_reflectivity = 1.0 - absorptivity - diffuse_reflectivity
    return SpecularDiffuseMixReflectionLaw(
        absorptivity,
        _clip_rounding(specular_reflectivity),
        diffuse_reflectivity,
        with_instantaneous_reradiation,
    )


def reflection_law_from_total_reflectivity(
    total_reflectivity: float,
    specular_fraction: float,
    with_instantaneous_reradiation: bool = False,
) -> SpecularDiffuseMixReflectionLaw:
    """
    Build a specular/diffuse law from the total reflectivity rho and the
    share of the reflected energy that is specular:

        s = rho * f,   d = rho * (1 - f),   a = 1 - rho
    """
    if not 0.0 <= total_reflectivity <= 1.0:
        raise ValueError(
            f"total_reflectivity must lie in [0, 1], got {total_reflectivity}."
        )
    if not 0.0 <= specular_fraction <= 1.0:
        raise ValueError(
            f"specular_fraction must lie in [0, 1], got {specular_fraction}."
        )

    specular_reflectivity = total_reflectivity * specular_fraction
    diffuse_reflectivity = total_reflectivity - specular_reflectivity
    return SpecularDiffuseMixReflectionLaw(
        1.0 - total_reflectivity,
        specular_reflectivity,
        diffuse_reflectivity,
        with_instantaneous_reradiation,
    )


def _clip_rounding(value: float) -> float:
    """Snap a derived fraction within tolerance of [0, 1] back onto it."""
    if -REFLECTIVITY_SUM_TOLERANCE <= value < 0.0:
        return 0.0
    if 1.0 < value <= 1.0 + REFLECTIVITY_SUM_TOLERANCE:
        return 1.0
    return value
