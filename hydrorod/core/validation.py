"""hydrorod.core.validation

Базовые проверки, чтобы ловить физически невозможные значения как можно раньше.
Все ошибки несут имя поля, чтобы конфиг можно было исправить без отладчика.
"""

from __future__ import annotations

import math

from hydrorod.errors import ConfigurationError


def ensure_finite(value: float, name: str) -> None:
    if not math.isfinite(value):
        raise ConfigurationError(name, f"must be finite, got {value}")


def ensure_non_negative(value: float, name: str) -> None:
    ensure_finite(value, name)
    if value < 0:
        raise ConfigurationError(name, f"must be >= 0, got {value}")


def ensure_positive(value: float, name: str) -> None:
    ensure_finite(value, name)
    if value <= 0:
        raise ConfigurationError(name, f"must be > 0, got {value}")


def ensure_in_range(value: float, min_value: float, max_value: float, name: str) -> None:
    ensure_finite(value, name)
    if not (min_value <= value <= max_value):
        raise ConfigurationError(name, f"must be in [{min_value}, {max_value}], got {value}")


def ensure_number(value: object, name: str) -> float:
    """Привести значение из конфига к float или упасть с именем поля."""

    if value is None:
        raise ConfigurationError(name, "is missing")
    if isinstance(value, bool):
        raise ConfigurationError(name, f"must be a number, got {value!r}")
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise ConfigurationError(name, f"must be a number, got {value!r}") from e
