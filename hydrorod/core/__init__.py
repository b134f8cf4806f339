"""Общие типы состояния, единицы и проверки параметров."""

from __future__ import annotations

__all__ = [
    "units",
    "types",
    "validation",
]
