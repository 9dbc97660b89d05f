"""
===============================================================================
SRP TOOLKIT - Physical and Astronomical Constants
===============================================================================
Central repository for the physical constants used by the radiation pressure
models. SI units throughout (meters, seconds, kilograms, watts, radians).

These values come from IAU 2015 / CODATA 2018 where applicable.
===============================================================================
"""

import numpy as np


# =============================================================================
# MATHEMATICAL CONSTANTS
# =============================================================================
PI = np.pi

# =============================================================================
# FUNDAMENTAL PHYSICAL CONSTANTS
# =============================================================================
SPEED_OF_LIGHT = 299792458.0           # m/s
AU = 1.495978707e11                    # Astronomical Unit in meters

# =============================================================================
# SUN PARAMETERS
# =============================================================================
SUN_LUMINOSITY = 3.828e26              # W (IAU 2015 nominal)
SOLAR_IRRADIANCE_AT_1AU = 1367.0       # W/m^2 (solar constant)

# =============================================================================
# RADIATION PRESSURE MODEL CONSTANTS
# =============================================================================
# Momentum of a Lambertian (cosine-law) emitter integrated over the hemisphere
LAMBERTIAN_MOMENTUM_FACTOR = 2.0 / 3.0

# Cannonball coefficient of a sphere with purely diffuse surface: 1 + 4/9
DIFFUSE_SPHERE_COEFFICIENT = 13.0 / 9.0

# Tolerance on absorptivity + specular + diffuse == 1
REFLECTIVITY_SUM_TOLERANCE = 1e-12


def get_source_luminosity(body_name: str) -> float:
    """
    Look up the total radiated power of a radiation source by name.

    Args:
        body_name: Currently only 'sun'

    Returns:
        Luminosity in watts

    Raises:
        ValueError: If body_name is not recognized
    """
    lookup = {
        'sun': SUN_LUMINOSITY,
    }
    if body_name.lower() not in lookup:
        raise ValueError(f"Unknown radiation source: {body_name}. Valid: {list(lookup.keys())}")
    return lookup[body_name.lower()]
