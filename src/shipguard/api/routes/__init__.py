"""Route group exports."""

from . import distance, health, policy, sessions

__all__ = ["distance", "health", "policy", "sessions"]
