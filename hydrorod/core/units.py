"""hydrorod.core.units

Множители единиц для параметров гидросистемы штанги. Внутри модели всё в СИ;
бар, литры и мм² нужны только на входе (конфиг) и на выходе (сводка прогона).
"""

from __future__ import annotations

METER: float = 1.0
KILOGRAM: float = 1.0
SECOND: float = 1.0

NEWTON: float = KILOGRAM * METER / (SECOND**2)
PASCAL: float = NEWTON / (METER**2)

BAR: float = 1e5 * PASCAL
LITRE: float = 1e-3 * (METER**3)
MM2: float = 1e-6 * (METER**2)                 # сечения клапанов
LITRE_PER_MIN: float = LITRE / (60.0 * SECOND)  # подача насоса

G: float = 9.81 * METER / (SECOND**2)
