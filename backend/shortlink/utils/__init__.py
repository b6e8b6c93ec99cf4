"""
Utility functions - Pure functions with no dependencies.
These can be used across all layers.
"""
from .id_generator import generate_link_id
from .validators import validate_url, validate_link_id, is_redirect_target

__all__ = [
    "generate_link_id",
    "validate_url",
    "validate_link_id",
    "is_redirect_target"
]
