# src/bgmodel/adapters/logging_observer.py
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from ..contracts.core import ModelMode, ThresholdSet
from ..contracts.images import ClassificationMap
from ..ports.observer import PipelineObserverPort


class LoggingObserver(PipelineObserverPort):
    """Vuelca los valores de diagnóstico del pipeline al logger (nivel DEBUG por defecto)."""

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.DEBUG):
        self.logger = logger or logging.getLogger("bgmodel.trace")
        self.level = level

    def on_statistics(self, stats, variation) -> None:
        if stats.mode is ModelMode.SPATIAL:
            m, s = stats.mean, stats.stddev
            self.logger.log(self.level, "mean: C0=%.4f C1=%.4f C2=%.4f", *m)
            self.logger.log(self.level, "stddev: C0=%.4f C1=%.4f C2=%.4f", *s)
            self.logger.log(self.level, "denom: %.6g", stats.denom)
        else:
            self.logger.log(self.level, "sites: %s mean∈[%.3f, %.3f] stddev∈[%.3f, %.3f]",
                            stats.shape, float(stats.mean.min()), float(stats.mean.max()),
                            float(stats.stddev.min()), float(stats.stddev.max()))
        self.logger.log(self.level, "nb samples: %d bdist_var: %s cdist_var: %s degraded=%s",
                        variation.n_samples, _describe(variation.bdist), _describe(variation.cdist),
                        variation.degraded)

    def on_thresholds(self, thresholds: ThresholdSet) -> None:
        self.logger.log(self.level, "Thresholds: cdist=%.6g bdist_left=%.6g bdist_right=%.6g",
                        *thresholds.as_tuple())

    def on_classification(self, classification: ClassificationMap) -> None:
        counts = ", ".join(f"{k.name.lower()}={v}" for k, v in classification.counts().items())
        self.logger.log(self.level, "classification %s: %s", classification.shape, counts)


def _describe(v: np.ndarray) -> str:
    if np.ndim(v) == 0:
        return f"{float(v):.6g}"
    return f"[{float(np.min(v)):.6g}, {float(np.max(v)):.6g}]"
