"""Component catalog model, resource conversion, change application and metric computation."""

__version__ = "0.1.0"
__all__ = ["dtos", "converter", "apply", "compute"]