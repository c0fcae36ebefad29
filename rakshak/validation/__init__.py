# Validation Package
from rakshak.validation.input_validator import (
    DEFAULT_LOCATION_MAX_LENGTH,
    sanitize_location,
    validate_reading,
)

__all__ = ["DEFAULT_LOCATION_MAX_LENGTH", "sanitize_location", "validate_reading"]
