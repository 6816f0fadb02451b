# src/bgmodel/services/variation.py
from __future__ import annotations

"""
Variación de distorsiones (Horprasert et al., 1999, Ec. 7-10).

  bdist_variation = sqrt( Σ (α−1)² / n )      cdist_variation = sqrt( Σ CD² / n )

Espacial: escalares sobre los píxeles de la máscara.
Temporal: una grilla (H, W), cada sitio sobre sus N imágenes.
Nunca vale 0: sin muestras, o con varianza nula, queda en 1.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from ..contracts.corpus import SpatialCorpus, TemporalCorpus, TrainingCorpus
from ..contracts.errors import ConfigurationError, DegradedModelWarning
from .distortion import DistortionPair, compute_distortions
from .site_statistics import SiteStatistics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariationModel:
    bdist: np.ndarray     # escalar 0-d (espacial) o (H, W) (temporal), > 0
    cdist: np.ndarray
    n_samples: int
    degraded: bool = False

    def __post_init__(self):
        for name in ("bdist", "cdist"):
            arr = np.array(getattr(self, name), dtype=np.float64, copy=True)
            arr.setflags(write=False)
            object.__setattr__(self, name, arr)

    def normalize(self, pair: DistortionPair) -> Tuple[np.ndarray, np.ndarray]:
        """(α−1)/bdist_variation y CD/cdist_variation."""
        bn = (pair.alpha - 1.0) / self.bdist
        cn = pair.cd / self.cdist
        return bn, cn


def _clamped_rms(sq: np.ndarray, axis) -> np.ndarray:
    v = np.sqrt(np.mean(sq, axis=axis))
    return np.where(v == 0, 1.0, v)


def estimate_variation(corpus: TrainingCorpus, stats: SiteStatistics) -> VariationModel:
    if isinstance(corpus, SpatialCorpus):
        samples = corpus.samples()
        n = int(samples.shape[0])
        if n == 0:
            msg = "máscara de entrenamiento vacía: variaciones = 1 (modelo degradado)"
            logger.warning(msg)
            warnings.warn(msg, DegradedModelWarning, stacklevel=3)
            return VariationModel(bdist=1.0, cdist=1.0, n_samples=0, degraded=True)
        pair = compute_distortions(samples, stats)
        var = VariationModel(
            bdist=_clamped_rms(np.square(pair.alpha - 1.0), axis=None),
            cdist=_clamped_rms(np.square(pair.cd), axis=None),
            n_samples=n,
        )
        logger.debug("nb pixels: %d bdist_var: %.6g cdist_var: %.6g", n, float(var.bdist), float(var.cdist))
        return var

    if isinstance(corpus, TemporalCorpus):
        pair = compute_distortions(corpus.stack(), stats)  # (N, H, W)
        var = VariationModel(
            bdist=_clamped_rms(np.square(pair.alpha - 1.0), axis=0),
            cdist=_clamped_rms(np.square(pair.cd), axis=0),
            n_samples=int(pair.alpha.size),
        )
        logger.debug("frames: %d bdist_var range: [%.6g, %.6g] cdist_var range: [%.6g, %.6g]",
                     corpus.n_frames, float(var.bdist.min()), float(var.bdist.max()),
                     float(var.cdist.min()), float(var.cdist.max()))
        return var

    raise ConfigurationError(f"corpus no soportado: {type(corpus).__name__}")


def normalized_training_distortions(
    corpus: TrainingCorpus, stats: SiteStatistics, variation: VariationModel
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Distribuciones normalizadas (planas) de las muestras de entrenamiento.
    Espacial: píxeles de la máscara; si está vacía, la imagen completa.
    Temporal: las N imágenes × todos los sitios.
    """
    if isinstance(corpus, SpatialCorpus):
        pixels = corpus.samples() if not corpus.mask.is_empty() else corpus.image.data.reshape(-1, 3)
    elif isinstance(corpus, TemporalCorpus):
        pixels = corpus.stack()
    else:
        raise ConfigurationError(f"corpus no soportado: {type(corpus).__name__}")
    bn, cn = variation.normalize(compute_distortions(pixels, stats))
    return np.ravel(bn), np.ravel(cn)


__all__ = ["VariationModel", "estimate_variation", "normalized_training_distortions"]
