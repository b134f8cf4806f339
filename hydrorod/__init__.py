"""hydrorod package.

Симулятор жёсткой штанги с грузом на двух гидроцилиндрах (A и B),
питаемых одним насосом через два независимо управляемых клапана.

Важно: пакет не должен иметь побочных эффектов при импорте.
Поэтому здесь нет eager-import'ов тяжёлых модулей (интегратор/физика/конфиги).

Импортируй нужное напрямую:
- from hydrorod.integrator import simulate
- from hydrorod.config import SimulationConfig
"""

from __future__ import annotations

__all__: list[str] = []
