# src/bgmodel/adapters/class_summary_adapter.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..contracts.core import ClassLabel, PixelClass
from ..contracts.images import ClassificationMap
from ..ports.class_map import ClassSummaryPort, ClassSummary

@dataclass(frozen=True)
class ClassSummaryAdapter(ClassSummaryPort):
    """Conteos y porcentajes para las cuatro clases, paleta según `classes`.
    Clases sin píxeles aparecen con conteo 0.
    """

    def summarize(self, classification: ClassificationMap, classes: Sequence[ClassLabel]) -> ClassSummary:
        counts = classification.counts()
        total = float(classification.labels.size)
        percents = {k: (v / total) * 100.0 if total else 0.0 for k, v in counts.items()}
        palette = {PixelClass(c.code): c.color.as_tuple() for c in classes}
        return ClassSummary(classification=classification, counts=counts, percents=percents, palette=palette)
