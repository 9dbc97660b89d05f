"""
===============================================================================
SRP TOOLKIT - Model Settings
===============================================================================
Builds reflection laws, target models and radiation sources from
configuration dictionaries, typically loaded from a YAML file:

    radiation_source:
        body: sun                      # or luminosity: <W>
                                       # or irradiance: <W/m^2> + distance: <m>
    materials:
        mli:
            specular_reflectivity: 0.1
            diffuse_reflectivity: 0.3
            instantaneous_reradiation: true
        solar_cell:
            total_reflectivity: 0.2
            specular_fraction: 0.5
    target:
        type: paneled                  # cannonball | paneled | sphere | box_wing
        panels:
            - area: 2.0
              normal: [1.0, 0.0, 0.0]
              material: mli
            - area: 4.0
              track: source
              material: solar_cell

A material may be given by any one of the parameter pairs
(specular_reflectivity, diffuse_reflectivity), (absorptivity,
diffuse_reflectivity) or (total_reflectivity, specular_fraction).
Named materials are built once and the same ReflectionLaw instance is shared
by every panel that references them.

Missing optional keys fall back to defaults; missing required keys and unknown
types raise ValueError naming the offending key.

Usage
-----
    config = load_config("config/spacecraft_srp.yaml")
    source = create_radiation_source(config["radiation_source"])
    materials = create_materials(config["materials"])
    target = create_target_model(config["target"], materials)
===============================================================================
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

import numpy as np
import yaml
from numpy.typing import NDArray

from core.constants import AU
from core.frames import unit_vector
from dynamics.radiation_source import IsotropicPointRadiationSource
from dynamics.reflection_law import (
    ReflectionLaw,
    reflection_law_from_absorptivity_and_diffuse_reflectivity,
    reflection_law_from_specular_and_diffuse_reflectivity,
    reflection_law_from_total_reflectivity,
)
from dynamics.target_model import (
    CannonballRadiationPressureTargetModel,
    Panel,
    PaneledRadiationPressureTargetModel,
    RadiationPressureTargetModel,
    source_tracking_normal,
)

logger = logging.getLogger(__name__)

PositionFunction = Callable[[], NDArray]


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a radiation pressure configuration from a YAML file.

    Args:
        config_path: Path to the YAML file

    Returns:
        Configuration dictionary
    """
    logger.info("Loading radiation pressure configuration from: %s", config_path)
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)
    if not isinstance(config, dict):
        raise ValueError(f"Configuration file {config_path} does not contain a mapping.")
    return config


# ============================================================================
#  MATERIALS
# ============================================================================

def create_reflection_law(cfg: Mapping[str, Any]) -> ReflectionLaw:
    """
    Build a reflection law from a material dictionary.

    Raises
    ------
    ValueError
        If no supported combination of reflectivity keys is present.
    """
    rerad = bool(cfg.get("instantaneous_reradiation", False))

    if "total_reflectivity" in cfg:
        return reflection_law_from_total_reflectivity(
            float(cfg["total_reflectivity"]),
            float(cfg.get("specular_fraction", 0.0)),
            rerad,
        )
    if "absorptivity" in cfg:
        return reflection_law_from_absorptivity_and_diffuse_reflectivity(
            float(cfg["absorptivity"]),
            float(cfg.get("diffuse_reflectivity", 0.0)),
            rerad,
        )
    if "specular_reflectivity" in cfg or "diffuse_reflectivity" in cfg:
        return reflection_law_from_specular_and_diffuse_reflectivity(
            float(cfg.get("specular_reflectivity", 0.0)),
            float(cfg.get("diffuse_reflectivity", 0.0)),
            rerad,
        )
    raise ValueError(
        "Material needs 'total_reflectivity', 'absorptivity' or "
        f"'specular_reflectivity'/'diffuse_reflectivity'; got keys {sorted(cfg)}."
    )


def create_materials(cfg: Mapping[str, Mapping[str, Any]]) -> Dict[str, ReflectionLaw]:
    """Build every named material once."""
    materials = {name: create_reflection_law(params) for name, params in cfg.items()}
    logger.debug("Created %d materials: %s", len(materials), ", ".join(materials))
    return materials


def _resolve_material(
    cfg: Mapping[str, Any],
    materials: Mapping[str, ReflectionLaw],
    key: str = "material",
) -> ReflectionLaw:
    """Named material reference or inline material definition."""
    material = cfg.get(key)
    if material is None:
        raise ValueError(f"Missing '{key}' entry in {dict(cfg)}.")
    if isinstance(material, str):
        if material not in materials:
            raise ValueError(
                f"Unknown material '{material}'. Valid: {list(materials.keys())}"
            )
        return materials[material]
    return create_reflection_law(material)


# ============================================================================
#  TARGET MODELS
# ============================================================================

def create_target_model(
    cfg: Mapping[str, Any],
    materials: Optional[Mapping[str, ReflectionLaw]] = None,
    source_position_function: Optional[PositionFunction] = None,
    target_position_function: Optional[PositionFunction] = None,
    rotation_function: Optional[Callable[[], NDArray]] = None,
) -> RadiationPressureTargetModel:
    """
    Build a cannonball or panelled target model.

    Parameters
    ----------
    cfg : mapping
        Target section of the configuration (see module docstring).
    materials : mapping, optional
        Named reflection laws for panel 'material' references.
    source_position_function, target_position_function : callable, optional
        Position providers, needed for panels with ``track: source`` and for
        the solar array of a box-wing target.
    rotation_function : callable, optional
        Body-to-propagation-frame quaternion provider for the bus faces of a
        box-wing target.  Without it the bus is inertially fixed.
    """
    materials = materials or {}
    model_type = str(cfg.get("type", "cannonball")).lower()

    if model_type == "cannonball":
        model = CannonballRadiationPressureTargetModel(
            area=float(_require(cfg, "area")),
            coefficient=float(cfg.get("coefficient", 1.2)),
        )

    elif model_type == "paneled":
        panel_cfgs = _require(cfg, "panels")
        panels = [
            _create_panel(panel_cfg, materials,
                          source_position_function, target_position_function)
            for panel_cfg in panel_cfgs
        ]
        model = PaneledRadiationPressureTargetModel(panels)

    elif model_type == "sphere":
        model = PaneledRadiationPressureTargetModel.sphere(
            radius=float(_require(cfg, "radius")),
            number_of_panels=int(cfg.get("number_of_panels", 2000)),
            reflection_law=_resolve_material(cfg, materials),
        )

    elif model_type == "box_wing":
        bus_law = _resolve_material(cfg, materials, "bus_material")
        solar_array_area = float(cfg.get("solar_array_area", 0.0))
        array_law = (_resolve_material(cfg, materials, "solar_array_material")
                     if "solar_array_material" in cfg else None)
        model = PaneledRadiationPressureTargetModel.box_wing(
            dimensions=_require(cfg, "dimensions"),
            bus_reflection_law=bus_law,
            solar_array_area=solar_array_area,
            solar_array_reflection_law=array_law,
            source_position_function=source_position_function,
            target_position_function=target_position_function,
            rotation_function=rotation_function,
        )

    else:
        raise ValueError(
            f"Unknown target type: {model_type}. "
            "Valid: ['cannonball', 'paneled', 'sphere', 'box_wing']"
        )

    logger.info("Created %s target model", model_type)
    return model


def _create_panel(
    cfg: Mapping[str, Any],
    materials: Mapping[str, ReflectionLaw],
    source_position_function: Optional[PositionFunction],
    target_position_function: Optional[PositionFunction],
) -> Panel:
    area = float(_require(cfg, "area"))
    reflection_law = _resolve_material(cfg, materials)

    track = cfg.get("track")
    if track is not None:
        if str(track).lower() != "source":
            raise ValueError(f"Unknown panel tracking mode: {track}. Valid: ['source']")
        if source_position_function is None or target_position_function is None:
            raise ValueError(
                "Panels with 'track: source' need source and target position functions."
            )
        normal = source_tracking_normal(source_position_function,
                                        target_position_function)
    else:
        normal = unit_vector(np.asarray(_require(cfg, "normal"), dtype=np.float64))

    return Panel(area, normal, reflection_law)


# ============================================================================
#  RADIATION SOURCE
# ============================================================================

def create_radiation_source(cfg: Mapping[str, Any]) -> IsotropicPointRadiationSource:
    """
    Build an isotropic point source from 'body', 'luminosity' or
    'irradiance' (+ optional 'distance', default 1 AU).
    """
    if "body" in cfg:
        if str(cfg["body"]).lower() != "sun":
            raise ValueError(f"Unknown radiation source: {cfg['body']}. Valid: ['sun']")
        return IsotropicPointRadiationSource.sun()
    if "luminosity" in cfg:
        return IsotropicPointRadiationSource(float(cfg["luminosity"]))
    if "irradiance" in cfg:
        return IsotropicPointRadiationSource.from_irradiance_at_distance(
            float(cfg["irradiance"]),
            float(cfg.get("distance", AU)),
        )
    raise ValueError(
        "Radiation source needs 'body', 'luminosity' or 'irradiance'; "
        f"got keys {sorted(cfg)}."
    )


def _require(cfg: Mapping[str, Any], key: str) -> Any:
    if key not in cfg:
        raise ValueError(f"Missing required key '{key}' in {dict(cfg)}.")
    return cfg[key]
