# src/bgmodel/ports/class_map.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence, Protocol, runtime_checkable
from ..contracts.core import ClassLabel, PixelClass
from ..contracts.images import ClassificationMap

@dataclass(frozen=True)
class ClassSummary:
    """Resumen discreto de un mapa de clasificación."""
    classification: ClassificationMap
    counts: Mapping[PixelClass, int]                   # código -> número de píxeles
    percents: Mapping[PixelClass, float]               # código -> % del total
    palette: Mapping[PixelClass, tuple[int, int, int]]  # código -> (R,G,B)

@runtime_checkable
class ClassSummaryPort(Protocol):
    """
    Conteos/paleta a partir de un mapa de clasificación.
    """
    def summarize(self, classification: ClassificationMap, classes: Sequence[ClassLabel]) -> ClassSummary: ...

__all__ = ["ClassSummaryPort", "ClassSummary"]
