"""Иерархия ошибок и предупреждений hydrorod."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hydrorod.trace import SimulationTrace


class HydroRodError(Exception):
    pass


class ConfigurationError(HydroRodError, ValueError):
    """Нефизичный или отсутствующий параметр (например, M <= 0)."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field} {message}")
        self.field = field


class SimulationAborted(HydroRodError, RuntimeError):
    """Прогон остановлен до tEnd; несёт последний валидный trace."""

    def __init__(self, message: str, *, t: float, trace: "SimulationTrace") -> None:
        super().__init__(message)
        self.t = t
        self.trace = trace


class NumericDivergence(SimulationAborted):
    """Состояние стало нефинитным (или заведомо нефизичным) во время интегрирования."""


class SimulationBudgetExceeded(SimulationAborted):
    """Превышен лимит шагов или wall-clock бюджета."""


class PressureRangeWarning(RuntimeWarning):
    """Давление в камере ушло ниже нуля и было обрезано до нуля."""
