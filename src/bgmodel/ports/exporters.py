# src/bgmodel/ports/exporters.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable, Mapping, Any, Sequence, Optional
from ..contracts.core import ClassLabel
from ..contracts.images import ClassificationMap, ColorImage

URI = str

@dataclass(frozen=True)
class QuicklookSpec:
    """Parámetros mínimos para el render de la clasificación."""
    scale: int = 1              # factor entero de ampliación (vecino más cercano)
    max_size_px: int = 4096     # lado mayor tras escalar

@runtime_checkable
class QuicklookExporterPort(Protocol):
    def render(self, classification: ClassificationMap, classes: Sequence[ClassLabel]) -> ColorImage: ...
    def export_classmap(self, classification: ClassificationMap, classes: Sequence[ClassLabel], out_uri: URI, spec: Optional[QuicklookSpec] = None) -> URI: ...


@runtime_checkable
class ReportExporterPort(Protocol):
    """
    Genera reportes en base a contexto.
    Adapter típico: CSV.
    """
    def render(self, template_id: str, context: Mapping[str, Any], out_uri: URI) -> URI: ...

__all__ = ["QuicklookExporterPort", "ReportExporterPort", "QuicklookSpec", "URI"]
