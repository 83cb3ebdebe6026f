"""
Recommendation signals: forecast → buy/sell/hold with reasoning.

signal : Recommendation dataclass + determine_action() + recommend().
"""
