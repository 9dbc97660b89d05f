"""
===============================================================================
SRP TOOLKIT - Dynamics Module
===============================================================================
Radiation pressure models that turn incident irradiance into a force (and
acceleration) on a spacecraft.

Submodules:
    reflection_law     -- Specular/diffuse reflection law and reaction vector
    target_model       -- Panels, cannonball and panelled target models
    radiation_source   -- Isotropic point source irradiance model
    radiation_pressure -- Radiation pressure acceleration model
    settings           -- Model construction from YAML configuration
    model_fitting      -- Equivalent cannonball coefficient fitting
===============================================================================
"""
