"""Immutable money and date-range types shared by the domain models and services."""

from domain.value_objects.money import Money, sum_money
from domain.value_objects.date_range import DateRange

__all__ = [
    "Money",
    "sum_money",
    "DateRange",
]
