# src/bgmodel/services/site_statistics.py
from __future__ import annotations

"""
Estadísticas de sitio (Horprasert et al., 1999, Sec. 4.1 y Ec. 4-5;
Yacoob y Davis, 2006, Ec. 3).

Dos variantes cerradas detrás de SiteLookupPort:
  • SpatialSiteStatistics: un sitio global estimado con los píxeles de la máscara
    de una sola imagen; se difunde a cualquier tamaño de imagen.
  • TemporalSiteStatistics: un sitio por coordenada, estimado a través de las N
    imágenes; solo admite imágenes del mismo tamaño.

Política numérica: stddev == 0 -> 1 por canal; denominador == 0 -> 1.
"""

import logging
from dataclasses import dataclass
from typing import Union

import numpy as np

from ..contracts.core import ModelMode
from ..contracts.corpus import SpatialCorpus, TemporalCorpus, TrainingCorpus
from ..contracts.errors import ConfigurationError, DimensionMismatch
from ..contracts.images import Shape2D
from ..ports.site_lookup import Triple

logger = logging.getLogger(__name__)


# ----------------------
# Utilidades numéricas
# ----------------------

def clamp_stddev(stddev: np.ndarray) -> np.ndarray:
    s = np.asarray(stddev, dtype=np.float64)
    return np.where(s == 0, 1.0, s)


def brightness_denominator(mean: np.ndarray, stddev: np.ndarray) -> np.ndarray:
    """Σ_c (mean_c/stddev_c)², con 0 -> 1. Reduce el último eje (canales)."""
    d = np.sum(np.square(mean / stddev), axis=-1)
    return np.where(d == 0, 1.0, d)


def _readonly(arr: np.ndarray) -> np.ndarray:
    out = np.array(arr, dtype=np.float64, copy=True)
    out.setflags(write=False)
    return out


def _triple(v: np.ndarray) -> Triple:
    return (float(v[0]), float(v[1]), float(v[2]))


# ----------------------
# Variantes
# ----------------------

@dataclass(frozen=True)
class SpatialSiteStatistics:
    mean: np.ndarray      # (3,)
    stddev: np.ndarray    # (3,), > 0
    denom: float          # > 0

    mode = ModelMode.SPATIAL

    def __post_init__(self):
        object.__setattr__(self, "mean", _readonly(self.mean))
        object.__setattr__(self, "stddev", _readonly(self.stddev))
        object.__setattr__(self, "denom", float(self.denom))

    @property
    def brightness_num(self) -> np.ndarray:
        # mean_c / stddev_c²; el peso w_c es esto dividido por denom
        return self.mean / np.square(self.stddev)

    @property
    def brightness_weight(self) -> np.ndarray:
        return self.brightness_num / self.denom

    def mean_at(self, y: int, x: int) -> Triple:
        return _triple(self.mean)

    def stddev_at(self, y: int, x: int) -> Triple:
        return _triple(self.stddev)

    def brightness_weight_at(self, y: int, x: int) -> Triple:
        return _triple(self.brightness_weight)

    def denominator_at(self, y: int, x: int) -> float:
        return self.denom

    def fields_for(self, shape: Shape2D):
        # Escalares: válidos para cualquier tamaño de imagen
        return self.mean, self.stddev, self.brightness_num, np.float64(self.denom)


@dataclass(frozen=True)
class TemporalSiteStatistics:
    mean: np.ndarray      # (H, W, 3)
    stddev: np.ndarray    # (H, W, 3), > 0
    denom: np.ndarray     # (H, W), > 0

    mode = ModelMode.TEMPORAL

    def __post_init__(self):
        object.__setattr__(self, "mean", _readonly(self.mean))
        object.__setattr__(self, "stddev", _readonly(self.stddev))
        object.__setattr__(self, "denom", _readonly(self.denom))
        object.__setattr__(self, "_num", _readonly(self.mean / np.square(self.stddev)))

    @property
    def shape(self) -> Shape2D:
        return (int(self.mean.shape[0]), int(self.mean.shape[1]))

    @property
    def brightness_num(self) -> np.ndarray:
        return self._num  # type: ignore[attr-defined]

    @property
    def brightness_weight(self) -> np.ndarray:
        return self.brightness_num / self.denom[..., None]

    def mean_at(self, y: int, x: int) -> Triple:
        return _triple(self.mean[y, x])

    def stddev_at(self, y: int, x: int) -> Triple:
        return _triple(self.stddev[y, x])

    def brightness_weight_at(self, y: int, x: int) -> Triple:
        return _triple(self.brightness_num[y, x] / self.denom[y, x])

    def denominator_at(self, y: int, x: int) -> float:
        return float(self.denom[y, x])

    def fields_for(self, shape: Shape2D):
        if tuple(shape) != self.shape:
            raise DimensionMismatch(f"modelo temporal entrenado para {self.shape}, imagen {tuple(shape)}")
        return self.mean, self.stddev, self.brightness_num, self.denom


SiteStatistics = Union[SpatialSiteStatistics, TemporalSiteStatistics]


# ----------------------
# Estimación
# ----------------------

def estimate_spatial(corpus: SpatialCorpus) -> SpatialSiteStatistics:
    samples = corpus.samples()  # (M, 3)
    if samples.shape[0] == 0:
        # Sin muestras: media 0, stddev/denominador quedan en 1 por la política de clamp
        mean = np.zeros(3, dtype=np.float64)
        std = np.zeros(3, dtype=np.float64)
    else:
        mean = samples.mean(axis=0)
        std = samples.std(axis=0)  # poblacional (divide por M)
    std = clamp_stddev(std)
    denom = float(brightness_denominator(mean, std))
    stats = SpatialSiteStatistics(mean=mean, stddev=std, denom=denom)
    logger.debug("spatial stats: n=%d mean=%s stddev=%s denom=%.6g",
                 samples.shape[0], np.round(mean, 3).tolist(), np.round(std, 3).tolist(), denom)
    return stats


def estimate_temporal(corpus: TemporalCorpus) -> TemporalSiteStatistics:
    stack = corpus.stack()  # (N, H, W, 3)
    mean = stack.mean(axis=0)
    std = clamp_stddev(stack.std(axis=0))
    denom = brightness_denominator(mean, std)
    logger.debug("temporal stats: N=%d shape=%s sites_with_variance=%d",
                 stack.shape[0], corpus.shape, int(np.count_nonzero((std != 1.0).any(axis=-1))))
    return TemporalSiteStatistics(mean=mean, stddev=std, denom=denom)


def estimate_site_statistics(corpus: TrainingCorpus) -> SiteStatistics:
    if isinstance(corpus, SpatialCorpus):
        return estimate_spatial(corpus)
    if isinstance(corpus, TemporalCorpus):
        return estimate_temporal(corpus)
    raise ConfigurationError(f"corpus no soportado: {type(corpus).__name__}")


__all__ = [
    "SpatialSiteStatistics",
    "TemporalSiteStatistics",
    "SiteStatistics",
    "clamp_stddev",
    "brightness_denominator",
    "estimate_spatial",
    "estimate_temporal",
    "estimate_site_statistics",
]
