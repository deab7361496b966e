"""Shared helpers."""
from .rounding import round_cents, round_half_up, round_score

__all__ = ["round_cents", "round_half_up", "round_score"]
