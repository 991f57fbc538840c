"""Shared service helpers."""
from .money import to_decimal, to_float, round_money, format_money

__all__ = [
    "to_decimal",
    "to_float",
    "round_money",
    "format_money",
]
