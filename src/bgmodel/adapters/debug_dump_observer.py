# src/bgmodel/adapters/debug_dump_observer.py
from __future__ import annotations

import itertools
import logging
from pathlib import Path

import numpy as np
from PIL import Image

from ..contracts.core import PixelClass, ThresholdSet
from ..contracts.images import ClassificationMap
from ..ports.observer import NullObserver

logger = logging.getLogger(__name__)


class DebugDumpObserver(NullObserver):
    """
    Escribe las máscaras de foreground/shadow/background de cada clasificación
    como PNG de 0/255 en `out_dir` (una serie numerada por llamada).
    En modo temporal también guarda el mapa de stddev medio por sitio.
    """

    def __init__(self, out_dir: str | Path):
        self.out_dir = Path(out_dir)
        self._seq = itertools.count()

    def _save(self, name: str, arr: np.ndarray) -> Path:
        self.out_dir.mkdir(parents=True, exist_ok=True)
        path = self.out_dir / f"{name}.png"
        Image.fromarray(arr.astype(np.uint8)).save(path)
        logger.debug("debug image: %s", path)
        return path

    def on_statistics(self, stats, variation) -> None:
        if np.ndim(stats.stddev) == 3:
            s = stats.stddev.mean(axis=-1)
            peak = float(s.max())
            self._save("stddev", np.clip(s / peak * 255.0, 0, 255) if peak > 0 else s)

    def on_thresholds(self, thresholds: ThresholdSet) -> None:
        return None

    def on_classification(self, classification: ClassificationMap) -> None:
        i = next(self._seq)
        for label in (PixelClass.FOREGROUND, PixelClass.SHADOW, PixelClass.BACKGROUND):
            self._save(f"{i:04d}_{label.name.lower()}", classification.mask_of(label) * 255)
