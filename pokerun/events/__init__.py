"""In-process event channels."""
from .signal import Signal
__all__ = ["Signal"]
