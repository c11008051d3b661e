"""Runtime structures shared by machines."""

from .graph import StateGraph

__all__ = ["StateGraph"]
