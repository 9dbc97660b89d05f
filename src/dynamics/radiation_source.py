"""
===============================================================================
SRP TOOLKIT - Radiation Source Models
===============================================================================
Irradiance providers for the radiation pressure target models.

    - IsotropicPointRadiationSource : point source radiating its luminosity
                                      equally in all directions

The irradiance at distance r from an isotropic point source of luminosity L is

    E(r) = L / (4 pi r^2)

which reproduces the usual inverse-square scaling of the solar constant,
E(r) = E_1AU * (AU / r)^2.
===============================================================================
"""

import logging

from core.constants import PI, get_source_luminosity

logger = logging.getLogger(__name__)


class IsotropicPointRadiationSource:
    """
    Isotropic point radiation source with constant luminosity.

    Parameters
    ----------
    luminosity : float
        Total radiated power L (W), >= 0.
    """

    def __init__(self, luminosity: float) -> None:
        if not luminosity >= 0.0:
            raise ValueError(f"Luminosity must be non-negative, got {luminosity}.")
        self.luminosity = float(luminosity)

    # ------------------------------------------------------------------ #
    #  Factory class-methods
    # ------------------------------------------------------------------ #
    @classmethod
    def sun(cls) -> "IsotropicPointRadiationSource":
        """Return a source with the nominal solar luminosity."""
        return cls(get_source_luminosity("sun"))

    @classmethod
    def from_irradiance_at_distance(
        cls, irradiance: float, distance: float,
    ) -> "IsotropicPointRadiationSource":
        """
        Return the source that produces *irradiance* (W/m^2) at *distance*
        (m), e.g. the solar constant at 1 AU.
        """
        if not distance > 0.0:
            raise ValueError(f"Reference distance must be positive, got {distance}.")
        return cls(4.0 * PI * distance ** 2 * irradiance)

    # ------------------------------------------------------------------ #
    def evaluate_irradiance(self, distance: float) -> float:
        """
        Irradiance at *distance* from the source.

        Parameters
        ----------
        distance : float
            Distance from the source (m), > 0.

        Returns
        -------
        float
            Irradiance in W/m^2.
        """
        if not distance > 0.0:
            raise ValueError(f"Distance to source must be positive, got {distance}.")
        return self.luminosity / (4.0 * PI * distance ** 2)

    def __repr__(self) -> str:
        return f"IsotropicPointRadiationSource(luminosity={self.luminosity!r})"
