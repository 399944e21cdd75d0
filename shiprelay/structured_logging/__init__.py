"""
Structured logging package for ShipRelay.

All imports should use explicit paths like
'from shiprelay.structured_logging.enhanced_logging_config import get_logger'.

The package is not named 'logging' to avoid shadowing the standard library module.
"""

__all__: list[str] = []
