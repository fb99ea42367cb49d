"""
Core infrastructure shared by the resource adapters.

Only the standard library, PyYAML and the package's own modules are used here:
field schemas, the engine-facing state view and logging helpers.
"""

from .logging import configure_logging, get_logger, log_progress
from .schema import FieldSpec, FieldType, ReplacementRequiredError, ResourceSchema, SchemaError, load_schema
from .state import Presence, ResourceData

__all__ = [
    "FieldSpec",
    "FieldType",
    "Presence",
    "ReplacementRequiredError",
    "ResourceData",
    "ResourceSchema",
    "SchemaError",
    "configure_logging",
    "get_logger",
    "load_schema",
    "log_progress",
]
