# src/bgmodel/services/thresholds.py
from __future__ import annotations

"""
Selección de umbrales por percentiles (Horprasert et al., 1999, Sec. 4.3).

Para una distribución de tamaño M ordenada ascendentemente se leen los
rangos ⌊(1−r)·M⌋ (izquierdo) y ⌊r·M⌋ (derecho), recortados a
[0, M−1].
"""

import logging
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from ..contracts.core import ThresholdSet

logger = logging.getLogger(__name__)

_RANK_EPS = 1e-9


@dataclass(frozen=True)
class ThresholdBand:
    lower: float
    upper: float


def _check_rate(detection_rate: float) -> float:
    r = float(detection_rate)
    if not (0.0 <= r <= 1.0) or not np.isfinite(r):
        raise ValueError(f"detection_rate debe estar en [0, 1]; llegó {detection_rate}")
    return r


def percentile_ranks(size: int, detection_rate: float) -> Tuple[int, int]:
    if size <= 0:
        raise ValueError("distribución vacía: no hay umbrales que seleccionar")
    r = _check_rate(detection_rate)
    last = size - 1
    # ⌊x⌋ con tolerancia: (1−0.9)·10 da 0.999…98 en float64
    left = math.floor((1.0 - r) * size + _RANK_EPS)
    right = math.floor(r * size + _RANK_EPS)
    return min(max(left, 0), last), min(max(right, 0), last)


def select_threshold_band(values: np.ndarray, detection_rate: float) -> ThresholdBand:
    flat = np.sort(np.ravel(np.asarray(values, dtype=np.float64)))
    left, right = percentile_ranks(int(flat.size), detection_rate)
    logger.debug("size: %d | index_left: %d index_right: %d | %.6g %.6g",
                 flat.size, left, right, flat[left], flat[right])
    return ThresholdBand(lower=float(flat[left]), upper=float(flat[right]))


def select_thresholds(detection_rate: float, bdist_norm: np.ndarray, cdist_norm: np.ndarray) -> ThresholdSet:
    # CD: solo interesa la cola derecha; α: banda [izq, der] alrededor de 0
    cd_band = select_threshold_band(cdist_norm, detection_rate)
    b_band = select_threshold_band(bdist_norm, detection_rate)
    return ThresholdSet(cdist=cd_band.upper, bdist_lower=b_band.lower, bdist_upper=b_band.upper)


__all__ = ["ThresholdBand", "percentile_ranks", "select_threshold_band", "select_thresholds"]
