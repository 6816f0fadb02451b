# src/bgmodel/ports/site_lookup.py
from __future__ import annotations

from typing import Protocol, Tuple, runtime_checkable

import numpy as np

from ..contracts.core import ModelMode
from ..contracts.images import Shape2D

Triple = Tuple[float, float, float]

@runtime_checkable
class SiteLookupPort(Protocol):
    """
    Estadísticas de sitio consultables por coordenada.
    Reglas:
      - Dos variantes cerradas: espacial (un sitio global) y temporal (un sitio por píxel).
      - fields_for() devuelve (mean, stddev, brightness_num, denom) broadcastables a (H, W, 3)/(H, W);
        lanza DimensionMismatch si la variante no admite ese tamaño.
    """
    mode: ModelMode

    def mean_at(self, y: int, x: int) -> Triple: ...
    def stddev_at(self, y: int, x: int) -> Triple: ...
    def brightness_weight_at(self, y: int, x: int) -> Triple: ...
    def denominator_at(self, y: int, x: int) -> float: ...
    def fields_for(self, shape: Shape2D) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]: ...

__all__ = ["SiteLookupPort", "Triple"]
