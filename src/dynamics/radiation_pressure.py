"""
===============================================================================
SRP TOOLKIT - Radiation Pressure Acceleration
===============================================================================
Connects a radiation source, a target model and the positions of source and
target into the acceleration acting on the target:

    d   = (r_target - r_source) / |r_target - r_source|
    E   = source.evaluate_irradiance(|r_target - r_source|)
    F   = target_model.evaluate_radiation_pressure_force(E, d)
    a   = F / m

The acceleration points away from the source for every physically valid
target.  Shadowing by other bodies is not modelled.

All vectors are in the propagation frame.  SI units throughout.
===============================================================================
"""

import logging
from typing import Callable, Optional

import numpy as np
from numpy.typing import NDArray

from dynamics.radiation_source import IsotropicPointRadiationSource
from dynamics.target_model import RadiationPressureTargetModel, TimeCachedModel

logger = logging.getLogger(__name__)


class RadiationPressureAcceleration(TimeCachedModel):
    """
    Radiation pressure acceleration on a target body.

    ``update_members(time)`` follows the same caching rules as the target
    models: a repeated finite time is a no-op, NaN/None always recomputes.

    Parameters
    ----------
    source : IsotropicPointRadiationSource
        Irradiance provider.
    target_model : RadiationPressureTargetModel
        Cannonball or panelled target model of the accelerated body.
    source_position_function : callable
        Returns the current position of the source (m).
    target_position_function : callable
        Returns the current position of the accelerated body (m).
    mass_function : callable
        Returns the current mass of the accelerated body (kg).
    """

    def __init__(
        self,
        source: IsotropicPointRadiationSource,
        target_model: RadiationPressureTargetModel,
        source_position_function: Callable[[], NDArray],
        target_position_function: Callable[[], NDArray],
        mass_function: Callable[[], float],
    ) -> None:
        super().__init__()
        self.source = source
        self.target_model = target_model
        self._source_position_function = source_position_function
        self._target_position_function = target_position_function
        self._mass_function = mass_function

        self._current_direction = np.zeros(3)
        self._current_distance = 0.0
        self._current_irradiance = 0.0
        self._current_mass = 0.0
        self._current_force = np.zeros(3)
        self._current_acceleration = np.zeros(3)

    # ------------------------------------------------------------------ #
    def _update_members(self, current_time: Optional[float]) -> None:
        """
        Recompute geometry, irradiance, force and acceleration.

        Raises
        ------
        ValueError
            If the current mass is not positive or source and target coincide.
        """
        source_to_target = (
            np.asarray(self._target_position_function(), dtype=np.float64)
            - np.asarray(self._source_position_function(), dtype=np.float64)
        )
        distance = float(np.linalg.norm(source_to_target))
        if distance == 0.0:
            raise ValueError("Target and radiation source positions coincide.")

        mass = float(self._mass_function())
        if not mass > 0.0:
            raise ValueError(f"Mass of the accelerated body must be positive, got {mass}.")

        self._current_direction = source_to_target / distance
        self._current_distance = distance
        self._current_irradiance = self.source.evaluate_irradiance(distance)
        self._current_mass = mass

        self.target_model.update_members(current_time)
        self._current_force = self.target_model.evaluate_radiation_pressure_force(
            self._current_irradiance, self._current_direction
        )
        self._current_acceleration = self._current_force / mass

        logger.debug(
            "SRP update t=%s: r=%.6g m, E=%.6g W/m^2, |a|=%.6g m/s^2",
            current_time, distance, self._current_irradiance,
            np.linalg.norm(self._current_acceleration),
        )

    def reset_current_time(self) -> None:
        super().reset_current_time()
        self.target_model.reset_current_time()

    # ------------------------------------------------------------------ #
    @property
    def acceleration(self) -> NDArray:
        """Acceleration from the last update (m/s^2)."""
        return self._current_acceleration.copy()

    @property
    def current_force(self) -> NDArray:
        return self._current_force.copy()

    @property
    def current_irradiance(self) -> float:
        return self._current_irradiance

    @property
    def current_source_to_target_direction(self) -> NDArray:
        return self._current_direction.copy()

    @property
    def current_distance_to_source(self) -> float:
        return self._current_distance

    @property
    def current_mass(self) -> float:
        return self._current_mass
