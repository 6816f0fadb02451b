# src/bgmodel/services/background_model.py
from __future__ import annotations

"""
Modelo de color lambertiano de fondo (Horprasert et al., 1999; Yacoob y Davis, 2006).

Ciclo de vida:
  BackgroundColorModel(corpus, detection_rate)   # entrena una vez, falla rápido
    STATISTICS -> VARIATION -> THRESHOLDS
  model.classify(image) -> ClassificationMap      # N veces, solo lectura

El modelo entrenado es inmutable; classify() no guarda estado entre llamadas,
así que puede usarse desde varios hilos con buffers de entrada privados.
"""

import logging
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from ..contracts.core import ModelMode, ThresholdSet, TrainingMeta
from ..contracts.corpus import SpatialCorpus, TemporalCorpus, TrainingCorpus
from ..contracts.errors import ConfigurationError
from ..contracts.images import ClassificationMap, ColorImage, Region, Shape2D
from ..ports.observer import NullObserver, PipelineObserverPort
from .classifier import decide
from .distortion import compute_distortions
from .site_statistics import SiteStatistics, estimate_site_statistics
from .thresholds import select_thresholds
from .variation import VariationModel, estimate_variation, normalized_training_distortions

logger = logging.getLogger(__name__)


def validate_detection_rate(detection_rate: float) -> float:
    try:
        r = float(detection_rate)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"detection_rate inválido: {detection_rate!r}") from e
    if not (0.0 < r <= 1.0):
        raise ConfigurationError(f"detection_rate debe estar en (0, 1]; llegó {r}")
    return r


class BackgroundColorModel:
    def __init__(
        self,
        corpus: TrainingCorpus,
        detection_rate: float,
        *,
        observer: Optional[PipelineObserverPort] = None,
    ):
        if corpus is None:
            raise ConfigurationError("corpus de entrenamiento vacío")
        if not isinstance(corpus, (SpatialCorpus, TemporalCorpus)):
            raise ConfigurationError(f"corpus no soportado: {type(corpus).__name__}")
        self._detection_rate = validate_detection_rate(detection_rate)
        self._observer: PipelineObserverPort = observer or NullObserver()

        meta = TrainingMeta(mode=corpus.mode, detection_rate=self._detection_rate, n_frames=corpus.n_frames)

        # See Horprasert et al., 1999, Section 4.1
        stats = estimate_site_statistics(corpus)
        variation = estimate_variation(corpus, stats)
        self._observer.on_statistics(stats, variation)

        bn, cn = normalized_training_distortions(corpus, stats, variation)
        thresholds = select_thresholds(self._detection_rate, bn, cn)
        logger.debug("Thresholds: cdist=%.6g bdist_left=%.6g bdist_right=%.6g", *thresholds.as_tuple())
        self._observer.on_thresholds(thresholds)

        self._stats: SiteStatistics = stats
        self._variation = variation
        self._thresholds = thresholds
        self._shape: Optional[Shape2D] = corpus.shape if corpus.mode is ModelMode.TEMPORAL else None
        self._meta = meta.model_copy(
            update={"n_samples": variation.n_samples, "degraded": variation.degraded}
        ).end_now()
        logger.info(
            "modelo %s entrenado: muestras=%d degradado=%s (%.3fs)",
            self.mode.value, self._meta.n_samples, self._meta.degraded, self._meta.duration_s or 0.0,
        )

    # --------- Constructores de conveniencia ---------
    @classmethod
    def spatial(
        cls,
        image,
        mask=None,
        *,
        regions: Optional[Iterable[Region]] = None,
        detection_rate: float,
        observer: Optional[PipelineObserverPort] = None,
    ) -> "BackgroundColorModel":
        """Una imagen + máscara, o + rectángulos de entrenamiento."""
        if mask is not None and regions is not None:
            raise ConfigurationError("usa mask o regions, no ambos")
        if regions is not None:
            corpus = SpatialCorpus.from_regions(image, regions)
        else:
            corpus = SpatialCorpus(image=image, mask=mask)
        return cls(corpus, detection_rate, observer=observer)

    @classmethod
    def temporal(
        cls,
        frames: Sequence,
        *,
        detection_rate: float,
        observer: Optional[PipelineObserverPort] = None,
    ) -> "BackgroundColorModel":
        return cls(TemporalCorpus.of(frames), detection_rate, observer=observer)

    # --------- Estado entrenado (solo lectura) ---------
    @property
    def mode(self) -> ModelMode:
        return self._stats.mode

    @property
    def detection_rate(self) -> float:
        return self._detection_rate

    @property
    def statistics(self) -> SiteStatistics:
        return self._stats

    @property
    def variation(self) -> VariationModel:
        return self._variation

    @property
    def thresholds(self) -> ThresholdSet:
        return self._thresholds

    @property
    def meta(self) -> TrainingMeta:
        return self._meta

    @property
    def expected_shape(self) -> Optional[Shape2D]:
        """(H, W) exigido por el modelo temporal; None en modo espacial."""
        return self._shape

    # --------- Clasificación ---------
    def normalized_distortions(self, image) -> Tuple[np.ndarray, np.ndarray]:
        """(bn, cn) de cada píxel. See Horprasert et al., 1999, Eqs. 9 and 10"""
        img = image if isinstance(image, ColorImage) else ColorImage(image)
        return self._variation.normalize(compute_distortions(img, self._stats))

    def classify(self, image) -> ClassificationMap:
        bn, cn = self.normalized_distortions(image)
        result = ClassificationMap(decide(bn, cn, self._thresholds))
        self._observer.on_classification(result)
        return result

    def __repr__(self) -> str:
        t = self._thresholds
        return (f"BackgroundColorModel(mode={self.mode.value}, detection_rate={self._detection_rate}, "
                f"T_cd={t.cdist:.4g}, T_bl={t.bdist_lower:.4g}, T_bu={t.bdist_upper:.4g})")


__all__ = ["BackgroundColorModel", "validate_detection_rate"]
