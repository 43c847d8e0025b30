"""Parameter-driven entry point for plugin hosts.

Hosts render ``PARAMS_SCHEMA`` as a form and call ``main`` with the values.
``main`` is best-effort: any failure, including invalid parameter values,
is logged and answered with the placeholder solid so the host always has
something to display.

Example:
    params = default_params()
    params["height"] = 2
    solid = main(params)
"""

from collections.abc import Mapping
from copy import deepcopy
from typing import Any

import structlog
from pydantic import ValidationError

from image_extrude.config import (
    DEFAULT_IMAGE_DATA_URL,
    DEFAULT_IMAGE_FILE_NAME,
    DEFAULT_IMAGE_MIME_TYPE,
    ExtrusionParameters,
    ImageExtrudeSettings,
)
from image_extrude.core.geometry import create_empty_solid
from image_extrude.core.pipeline import ImageExtruder
from image_extrude.domain import FailurePolicy, ProcessingMode, Solid
from image_extrude.exceptions import ImageExtrudeError
from image_extrude.io import source_from_value

logger = structlog.get_logger(__name__)

PARAMS_SCHEMA: dict[str, dict[str, Any]] = {
    "mode": {
        "type": "choice",
        "label": "Mode",
        "options": [
            {"value": "trace", "label": "Trace"},
            {"value": "sample", "label": "Sample (SVG only)"},
        ],
        "default": "trace",
    },
    "imageFile": {
        "type": "image",
        "label": "Image File",
        "default": {
            "imageUrl": "",
            "dataUrl": DEFAULT_IMAGE_DATA_URL,
            "fileType": DEFAULT_IMAGE_MIME_TYPE,
            "fileName": DEFAULT_IMAGE_FILE_NAME,
        },
    },
    "height": {
        "type": "number",
        "label": "Extrusion Height (mm)",
        "default": 1,
        "min": 0.1,
    },
    "maxWidth": {
        "type": "number",
        "label": "Maximum Width (mm)",
        "default": 50,
        "min": 0.1,
    },
    "despeckleSize": {
        "type": "number",
        "label": "Despeckle Size (Tracing only)",
        "default": 2,
        "min": 0.1,
    },
    "threshold": {
        "type": "number",
        "label": "Brightness Threshold (0 = auto, Tracing only)",
        "default": 0,
        "min": 0,
        "max": 255,
    },
    "invert": {
        "type": "boolean",
        "label": "Invert (Tracing only)",
        "default": False,
    },
}


def default_params() -> dict[str, Any]:
    """Get a fresh mapping of every parameter's default value."""
    return {name: deepcopy(spec["default"]) for name, spec in PARAMS_SCHEMA.items()}


def _check_bounds(values: Mapping[str, Any]) -> None:
    for name, spec in PARAMS_SCHEMA.items():
        if spec["type"] != "number":
            continue
        value = values[name]
        if "min" in spec and value < spec["min"]:
            raise ValueError(f"{name} must be at least {spec['min']}, got {value}")
        if "max" in spec and value > spec["max"]:
            raise ValueError(f"{name} must be at most {spec['max']}, got {value}")


def main(
    params: Mapping[str, Any] | None = None,
    settings: ImageExtrudeSettings | None = None,
    extruder: ImageExtruder | None = None,
) -> Solid:
    """Extrude the configured image, never raising pipeline errors.

    Args:
        params: Values keyed like PARAMS_SCHEMA; missing keys use defaults
        settings: Application settings
        extruder: Orchestrator to use (created from settings by default)

    Returns:
        The extruded solid, or the placeholder solid on any failure
    """
    values = default_params()
    values.update(params or {})

    try:
        _check_bounds(values)
        mode = ProcessingMode(str(values["mode"]).lower())
        extrusion = ExtrusionParameters(
            height_mm=values["height"],
            max_width_mm=values["maxWidth"],
            despeckle_area_px=values["despeckleSize"],
            brightness_threshold=values["threshold"],
            invert_polarity=values["invert"],
        )
    except (TypeError, ValueError, ValidationError) as e:
        logger.warning("Invalid parameters; substituting placeholder solid", error=str(e))
        return create_empty_solid()

    image_file = values.get("imageFile") or {}
    try:
        source = source_from_value(image_file)
    except ImageExtrudeError as e:
        logger.warning("No usable image provided", error=str(e), stage=e.stage)
        return create_empty_solid()

    extruder = extruder or ImageExtruder(settings)
    return extruder.run(source, mode, extrusion, FailurePolicy.FALLBACK).solid
