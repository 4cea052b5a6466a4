from .rules import rules, FEET_TO_METERS

__all__ = ["rules", "FEET_TO_METERS"]
