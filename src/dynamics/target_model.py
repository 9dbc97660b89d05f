"""
===============================================================================
SRP TOOLKIT - Radiation Pressure Target Models
===============================================================================
Models of how a spacecraft responds to incident radiation.  Given the
irradiance at the spacecraft and the unit direction from the source to the
spacecraft, a target model returns the radiation pressure force.

    - CannonballRadiationPressureTargetModel : sphere approximation, all shape
                                               and material effects lumped
                                               into one coefficient C_r
    - PaneledRadiationPressureTargetModel    : sum over flat panels, each with
                                               its own area, orientation and
                                               reflection law
    - Panel                                  : single flat surface element

Force models
------------
Cannonball (Montenbruck & Gill (2000) Eq. 3.75):

    F = E / c * A * C_r * d

Panel k of a panelled model (Montenbruck (2015) Eq. 5):

    F_k = E / c * A_k * cos(theta_k) * f(n_k, d),   cos(theta_k) = n_k . (-d)

where E is the irradiance (W/m^2), c the speed of light, d the unit vector
from the source to the target and f the reaction vector of the panel's
reflection law.  Panels facing away from the source (cos <= 0) contribute
nothing.  The source is treated as a parallel-ray source and panels do not
shadow each other.

Update cycle
------------
The external driver calls ``update_members(time)`` once per step; this
re-evaluates time-dependent panel normals.  Calling it again with the same
finite time is a no-op.  A NaN (or None) time always recomputes and leaves
the model without a cached timestamp.  Force queries never trigger an update:
they use the normals of the last update.
===============================================================================
"""

import logging
import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, List, Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from core.constants import PI, SPEED_OF_LIGHT
from core.frames import (
    body_to_inertial, generate_evenly_spaced_points, spherical_to_cartesian,
    unit_vector,
)
from dynamics.reflection_law import ReflectionLaw

logger = logging.getLogger(__name__)

SurfaceNormal = Union[NDArray, Sequence[float], Callable[[], NDArray]]


# ============================================================================
#  UPDATE STATE
# ============================================================================

class UpdateState(Enum):
    """Whether a model's members reflect a known evaluation time."""
    STALE = "stale"
    CURRENT = "current"


def _is_timestamp(time: Optional[float]) -> bool:
    return time is not None and not math.isnan(time)


# ============================================================================
#  PANEL
# ============================================================================

class Panel:
    """
    Flat surface element of a panelled target.

    Parameters
    ----------
    area : float
        Panel area (m^2), > 0.
    surface_normal : array_like or callable
        Either a fixed unit normal in the propagation frame, or a callable
        without arguments returning the current unit normal (for panels that
        track a direction, e.g. a Sun-pointing solar array).  A callable is
        evaluated on every ``update_members`` call.
    reflection_law : ReflectionLaw
        Material of the panel.  Shared by reference, never copied.

    Raises
    ------
    ValueError
        If *area* is not positive.
    """

    def __init__(
        self,
        area: float,
        surface_normal: SurfaceNormal,
        reflection_law: ReflectionLaw,
    ) -> None:
        if not area > 0.0:
            raise ValueError(f"Panel area must be positive, got {area}.")

        self._area = float(area)
        self._reflection_law = reflection_law

        if callable(surface_normal):
            self._surface_normal_function = surface_normal
            self._surface_normal: Optional[NDArray] = None
        else:
            self._surface_normal_function = None
            self._surface_normal = np.array(surface_normal, dtype=np.float64)

    # ------------------------------------------------------------------ #
    @property
    def area(self) -> float:
        return self._area

    @property
    def reflection_law(self) -> ReflectionLaw:
        return self._reflection_law

    @property
    def is_tracking(self) -> bool:
        """True if the normal is recomputed on every update."""
        return self._surface_normal_function is not None

    @property
    def surface_normal(self) -> NDArray:
        """
        Current unit surface normal in the propagation frame.

        Raises
        ------
        RuntimeError
            If the panel tracks a direction and has never been updated.
        """
        if self._surface_normal is None:
            raise RuntimeError(
                "Tracking panel normal has not been evaluated.  "
                "Call update_members() first."
            )
        return self._surface_normal

    # ------------------------------------------------------------------ #
    def update_members(self) -> None:
        """Re-evaluate the surface normal of a tracking panel."""
        if self._surface_normal_function is not None:
            self._surface_normal = np.asarray(
                self._surface_normal_function(), dtype=np.float64
            )

    # ------------------------------------------------------------------ #
    def evaluate_radiation_pressure_force(
        self,
        irradiance: float,
        source_to_target_direction: NDArray,
    ) -> NDArray:
        """
        Radiation pressure force on this panel (N).

        Parameters
        ----------
        irradiance : float
            Irradiance at the target (W/m^2).
        source_to_target_direction : ndarray, shape (3,)
            Unit vector from the source to the target, in the same frame as
            the surface normal.

        Returns
        -------
        ndarray, shape (3,)
            Force vector; zero if the panel faces away from the source.
        """
        normal = self.surface_normal
        direction = np.asarray(source_to_target_direction, dtype=np.float64)

        cos_incoming = float(np.dot(-direction, normal))
        if cos_incoming <= 0.0:
            return np.zeros(3)

        radiation_pressure = irradiance / SPEED_OF_LIGHT
        effective_area = self._area * cos_incoming
        reaction = self._reflection_law.evaluate_reaction_vector(normal, direction)
        return radiation_pressure * effective_area * reaction

    # ------------------------------------------------------------------ #
    def __repr__(self) -> str:
        normal = "tracking" if self.is_tracking else self._surface_normal.tolist()
        return (f"Panel(area={self._area!r}, surface_normal={normal}, "
                f"reflection_law={self._reflection_law!r})")


# ============================================================================
#  SURFACE NORMAL PROVIDERS
# ============================================================================

def source_tracking_normal(
    source_position_function: Callable[[], NDArray],
    target_position_function: Callable[[], NDArray],
) -> Callable[[], NDArray]:
    """
    Normal provider for a panel that always faces the radiation source.

    Returns a callable giving the unit vector from the target to the source.
    """
    def normal() -> NDArray:
        return unit_vector(
            np.asarray(source_position_function(), dtype=np.float64)
            - np.asarray(target_position_function(), dtype=np.float64)
        )
    return normal


def body_fixed_normal(
    normal_in_body_frame: NDArray,
    rotation_function: Callable[[], NDArray],
) -> Callable[[], NDArray]:
    """
    Normal provider for a panel fixed to the spacecraft bus.

    Parameters
    ----------
    normal_in_body_frame : ndarray, shape (3,)
        Panel normal in the body frame (normalised here).
    rotation_function : callable
        Returns the current scalar-first unit quaternion [w, x, y, z] that
        rotates from the body frame to the propagation frame.
    """
    body_normal = unit_vector(normal_in_body_frame)

    def normal() -> NDArray:
        return body_to_inertial(body_normal, rotation_function())
    return normal


# ============================================================================
#  UPDATE CYCLE
# ============================================================================

class TimeCachedModel:
    """
    Update cycle shared by the target models and the acceleration model.

    ``update_members(time)`` calls the ``_update_members`` hook unless the
    model is already current at that finite time.  NaN or None always
    recomputes and leaves the model STALE, so the next call recomputes again.
    If the hook raises, the previous state is kept.
    """

    def __init__(self) -> None:
        self._state = UpdateState.STALE
        self._current_time: Optional[float] = None

    @property
    def state(self) -> UpdateState:
        return self._state

    @property
    def current_time(self) -> Optional[float]:
        """Time of the last timestamped update, None if there is none."""
        return self._current_time

    def update_members(self, current_time: Optional[float] = math.nan) -> None:
        """Bring the model up to date for *current_time*."""
        if (self._state is UpdateState.CURRENT
                and _is_timestamp(current_time)
                and current_time == self._current_time):
            return

        self._update_members(current_time)

        if _is_timestamp(current_time):
            self._state = UpdateState.CURRENT
            self._current_time = float(current_time)
        else:
            self._state = UpdateState.STALE
            self._current_time = None

    def reset_current_time(self) -> None:
        """Forget the cached time so that the next update recomputes."""
        self._state = UpdateState.STALE
        self._current_time = None

    def _update_members(self, current_time: Optional[float]) -> None:
        pass


# ============================================================================
#  TARGET MODEL BASE
# ============================================================================

class RadiationPressureTargetModel(TimeCachedModel, ABC):
    """
    Common interface of the cannonball and panelled target models.

    Subclasses implement ``_evaluate_force`` (pure) and may override
    ``_update_members`` to refresh time-dependent geometry.
    """

    def __init__(self) -> None:
        super().__init__()
        self._current_force = np.zeros(3)

    # ------------------------------------------------------------------ #
    @property
    def current_force(self) -> NDArray:
        """Force returned by the most recent evaluation (N)."""
        return self._current_force.copy()

    # ------------------------------------------------------------------ #
    def evaluate_radiation_pressure_force(
        self,
        irradiance: float,
        source_to_target_direction: NDArray,
    ) -> NDArray:
        """
        Radiation pressure force on the target (N).

        Parameters
        ----------
        irradiance : float
            Irradiance at the target (W/m^2), >= 0.
        source_to_target_direction : ndarray, shape (3,)
            Unit vector from the source to the target.

        Returns
        -------
        ndarray, shape (3,)
            Force vector in the frame of *source_to_target_direction*.

        Raises
        ------
        ValueError
            If *irradiance* is negative.
        """
        if not irradiance >= 0.0:
            raise ValueError(f"Irradiance must be non-negative, got {irradiance}.")

        force = self._evaluate_force(
            float(irradiance),
            np.asarray(source_to_target_direction, dtype=np.float64),
        )
        self._current_force = force.copy()
        return force

    # ------------------------------------------------------------------ #
    @abstractmethod
    def _evaluate_force(self, irradiance: float, direction: NDArray) -> NDArray:
        """Force for validated inputs."""


# ============================================================================
#  CANNONBALL
# ============================================================================

class CannonballRadiationPressureTargetModel(RadiationPressureTargetModel):
    """
    Cannonball (isotropic sphere) target model.

        F = E / c * A * C_r * d

    C_r = 1 is a perfect absorber, C_r = 2 a perfect mirror seen head-on.
    A purely diffuse sphere corresponds to C_r = 1 + 4/9.

    Parameters
    ----------
    area : float
        Cross-sectional area A (m^2), > 0.
    coefficient : float
        Radiation pressure coefficient C_r, >= 0.
    """

    def __init__(self, area: float, coefficient: float) -> None:
        if not area > 0.0:
            raise ValueError(f"Cannonball area must be positive, got {area}.")
        if not coefficient >= 0.0:
            raise ValueError(
                f"Radiation pressure coefficient must be non-negative, got {coefficient}."
            )
        super().__init__()
        self._area = float(area)
        self._coefficient = float(coefficient)
        logger.debug("Created cannonball target: A=%.6g m^2, Cr=%.6g",
                     self._area, self._coefficient)

    @property
    def area(self) -> float:
        return self._area

    @property
    def coefficient(self) -> float:
        return self._coefficient

    def _evaluate_force(self, irradiance: float, direction: NDArray) -> NDArray:
        radiation_pressure = irradiance / SPEED_OF_LIGHT
        return radiation_pressure * self._area * self._coefficient * direction


# ============================================================================
#  PANELLED
# ============================================================================

class PaneledRadiationPressureTargetModel(RadiationPressureTargetModel):
    """
    Panelled (n-plate) target model: the force is the sum of the panel
    forces.  Panel order does not affect the result.

    Parameters
    ----------
    panels : sequence of Panel
        Surface elements of the target (at least one).
    """

    def __init__(self, panels: Sequence[Panel]) -> None:
        panels = list(panels)
        if not panels:
            raise ValueError("A panelled target model needs at least one panel.")
        super().__init__()
        self._panels: List[Panel] = panels
        logger.debug("Created panelled target: %d panels, %.6g m^2 total",
                     len(self._panels), self.total_area)

    # ------------------------------------------------------------------ #
    @classmethod
    def sphere(
        cls,
        radius: float,
        number_of_panels: int,
        reflection_law: ReflectionLaw,
    ) -> "PaneledRadiationPressureTargetModel":
        """
        Approximate a sphere by *number_of_panels* equal-area panels with
        outward normals distributed evenly over the surface.
        """
        if not radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}.")
        if number_of_panels < 1:
            raise ValueError(
                f"A panelled sphere needs at least one panel, got {number_of_panels}."
            )

        panel_area = 4.0 * PI * radius ** 2 / number_of_panels
        polar_angles, azimuth_angles = generate_evenly_spaced_points(number_of_panels)

        panels = [
            Panel(panel_area,
                  unit_vector(spherical_to_cartesian(radius, polar, azimuth)),
                  reflection_law)
            for polar, azimuth in zip(polar_angles, azimuth_angles)
        ]
        return cls(panels)

    @classmethod
    def box_wing(
        cls,
        dimensions: Sequence[float],
        bus_reflection_law: ReflectionLaw,
        solar_array_area: float = 0.0,
        solar_array_reflection_law: Optional[ReflectionLaw] = None,
        source_position_function: Optional[Callable[[], NDArray]] = None,
        target_position_function: Optional[Callable[[], NDArray]] = None,
        rotation_function: Optional[Callable[[], NDArray]] = None,
    ) -> "PaneledRadiationPressureTargetModel":
        """
        Box-wing spacecraft: a cuboid bus plus an optional two-sided solar
        array that always faces the source.

        Parameters
        ----------
        dimensions : sequence of 3 floats
            Bus edge lengths along body X, Y, Z (m).
        bus_reflection_law : ReflectionLaw
            Material of all six bus faces.
        solar_array_area : float, optional
            Area of the solar array (m^2); 0 for no array.
        solar_array_reflection_law : ReflectionLaw, optional
            Material of the array (defaults to the bus material).
        source_position_function, target_position_function : callable, optional
            Position providers; required when the array is present.
        rotation_function : callable, optional
            Body-to-propagation-frame quaternion provider.  Without it the
            body frame is taken to coincide with the propagation frame.
        """
        length_x, length_y, length_z = (float(x) for x in dimensions)
        faces = [
            (np.array([1.0, 0.0, 0.0]), length_y * length_z),
            (np.array([-1.0, 0.0, 0.0]), length_y * length_z),
            (np.array([0.0, 1.0, 0.0]), length_x * length_z),
            (np.array([0.0, -1.0, 0.0]), length_x * length_z),
            (np.array([0.0, 0.0, 1.0]), length_x * length_y),
            (np.array([0.0, 0.0, -1.0]), length_x * length_y),
        ]

        panels = []
        for normal, area in faces:
            if rotation_function is not None:
                normal = body_fixed_normal(normal, rotation_function)
            panels.append(Panel(area, normal, bus_reflection_law))

        if solar_array_area > 0.0:
            if source_position_function is None or target_position_function is None:
                raise ValueError(
                    "A source-tracking solar array needs source and target "
                    "position functions."
                )
            array_law = solar_array_reflection_law or bus_reflection_law
            front = source_tracking_normal(source_position_function,
                                           target_position_function)

            def back() -> NDArray:
                return -front()

            panels.append(Panel(solar_array_area, front, array_law))
            panels.append(Panel(solar_array_area, back, array_law))

        return cls(panels)

    # ------------------------------------------------------------------ #
    @property
    def panels(self) -> List[Panel]:
        return list(self._panels)

    @property
    def total_area(self) -> float:
        """Summed area of all panels (m^2)."""
        return float(sum(panel.area for panel in self._panels))

    # ------------------------------------------------------------------ #
    def _update_members(self, current_time: Optional[float]) -> None:
        for panel in self._panels:
            panel.update_members()

    def evaluate_panel_forces(
        self,
        irradiance: float,
        source_to_target_direction: NDArray,
    ) -> List[NDArray]:
        """Force on each panel (N), in panel order."""
        direction = np.asarray(source_to_target_direction, dtype=np.float64)
        return [
            panel.evaluate_radiation_pressure_force(irradiance, direction)
            for panel in self._panels
        ]

    def _evaluate_force(self, irradiance: float, direction: NDArray) -> NDArray:
        force = np.zeros(3)
        for panel in self._panels:
            force += panel.evaluate_radiation_pressure_force(irradiance, direction)
        return force


# ============================================================================
#  DISPATCH
# ============================================================================

def evaluate_radiation_pressure_force(
    target_model: RadiationPressureTargetModel,
    irradiance: float,
    source_to_target_direction: NDArray,
) -> NDArray:
    """
    Evaluate the force of either target model variant.

    Raises
    ------
    TypeError
        If *target_model* is neither a cannonball nor a panelled model.
    """
    if not isinstance(target_model, (CannonballRadiationPressureTargetModel,
                                     PaneledRadiationPressureTargetModel)):
        raise TypeError(
            f"Unsupported target model type: {type(target_model).__name__}"
        )
    return target_model.evaluate_radiation_pressure_force(
        irradiance, source_to_target_direction
    )
