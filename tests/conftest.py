"""Общая настройка pytest.

Тесты импортируют `hydrorod` из checkout'а без `pip install -e .`:
корень репозитория добавляется в sys.path.
"""

from __future__ import annotations

import sys
from pathlib import Path


_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))
