from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, slots=True)
class Hit:
    distance: float
    point: np.ndarray
    normal: np.ndarray
    splat_index: int | None = None
