"""
Reading Model - Validated Sensor Input

One sanitized set of sensor values submitted for classification.
Built only by rakshak.validation.input_validator.
"""

from pydantic import BaseModel, ConfigDict, Field


class Reading(BaseModel):
    """Immutable sensor reading, scoped to a single request."""

    impact: float = Field(..., ge=0.0, allow_inf_nan=False, description="Impact force in G")
    speed: float = Field(..., ge=0.0, allow_inf_nan=False, description="Vehicle speed in km/h")
    tilt: float = Field(..., ge=0.0, le=180.0, allow_inf_nan=False, description="Tilt angle in degrees")
    location: str = Field(..., min_length=1, description="Sanitized location text")

    model_config = ConfigDict(frozen=True)
