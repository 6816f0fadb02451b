# src/bgmodel/ports/observer.py
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..contracts.core import ThresholdSet
from ..contracts.images import ClassificationMap

if TYPE_CHECKING:  # evita ciclo ports -> services
    from ..services.site_statistics import SiteStatistics
    from ..services.variation import VariationModel

@runtime_checkable
class PipelineObserverPort(Protocol):
    """
    Ganchos de diagnóstico del pipeline (sustituye al flag global de traza).
    Solo lectura: un observador no puede alterar el modelo ni el resultado.
    """
    def on_statistics(self, stats: "SiteStatistics", variation: "VariationModel") -> None: ...
    def on_thresholds(self, thresholds: ThresholdSet) -> None: ...
    def on_classification(self, classification: ClassificationMap) -> None: ...


class NullObserver:
    """Observador por defecto: no hace nada."""
    def on_statistics(self, stats, variation) -> None:
        return None

    def on_thresholds(self, thresholds: ThresholdSet) -> None:
        return None

    def on_classification(self, classification: ClassificationMap) -> None:
        return None


class CompositeObserver:
    """Reenvía cada gancho a varios observadores, en orden."""
    def __init__(self, *observers: PipelineObserverPort):
        self._observers = tuple(observers)

    def on_statistics(self, stats, variation) -> None:
        for o in self._observers:
            o.on_statistics(stats, variation)

    def on_thresholds(self, thresholds: ThresholdSet) -> None:
        for o in self._observers:
            o.on_thresholds(thresholds)

    def on_classification(self, classification: ClassificationMap) -> None:
        for o in self._observers:
            o.on_classification(classification)

__all__ = ["PipelineObserverPort", "NullObserver", "CompositeObserver"]
