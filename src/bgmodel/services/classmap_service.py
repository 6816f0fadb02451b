# src/bgmodel/services/classmap_service.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence, Tuple, Mapping as TMapping

import numpy as np

from ..contracts.core import ClassLabel, DEFAULT_CLASS_LABELS, ModelMode, PixelClass, ThresholdSet, TrainingMeta
from ..contracts.corpus import SpatialCorpus, TemporalCorpus, TrainingCorpus
from ..contracts.errors import ConfigurationError
from ..contracts.images import ClassificationMap, ColorImage, Region, mask_from_regions

from ..ports.image_read import ImageReaderPort
from ..ports.image_write import ImageWriterPort
from ..ports.class_map import ClassSummaryPort, ClassSummary
from ..ports.exporters import QuicklookExporterPort, ReportExporterPort, QuicklookSpec
from ..ports.observer import PipelineObserverPort
from .background_model import BackgroundColorModel


"""
Servicio de construcción de CLASSMAP sobre el modelo de color de fondo.
Pipeline determinista:
  LOAD → TRAIN (stats / variation / thresholds) → CLASSIFY → POST (counts/palette) → (EXPORT opcional)

No asume backends concretos: todo va vía *ports*. No usa Settings ni calcula rutas.
"""

# ----------------------
# Especificaciones / DTOs
# ----------------------

@dataclass(frozen=True)
class ClassMapInputs:
    test_uri: str
    training_uris: Sequence[str] = ()          # temporal: N imágenes; espacial: 0 o 1 (si 0 -> test_uri)
    mask_uri: Optional[str] = None             # espacial con máscara
    regions: Sequence[Region] = ()             # espacial con rectángulos
    classes: Optional[Sequence[ClassLabel]] = None

    @property
    def mode(self) -> ModelMode:
        return ModelMode.SPATIAL if (self.mask_uri or self.regions) else ModelMode.TEMPORAL

@dataclass(frozen=True)
class ClassMapSpec:
    name: str                                   # informativo; NO se usa para construir rutas
    detection_rate: float = 0.95
    out_png: Optional[Path] = None              # quicklook con paleta; si None -> no escribe
    out_labels: Optional[Path] = None           # códigos crudos 1..4; si None -> no escribe
    out_report: Optional[Path] = None           # CSV; requiere make_report y reporter
    make_report: bool = False
    report_template: str = "class_summary"
    quicklook: QuicklookSpec = QuicklookSpec()

@dataclass(frozen=True)
class ClassMapResult:
    classification: ClassificationMap
    labels_png: Optional[Path]                  # None si no se escribió
    quicklook_png: Optional[Path]               # None si no se escribió
    report_csv: Optional[Path]
    counts: TMapping[PixelClass, int]
    percents: TMapping[PixelClass, float]
    palette: TMapping[PixelClass, Tuple[int, int, int]]
    thresholds: ThresholdSet
    meta: TrainingMeta

# ----------------------
# Servicio
# ----------------------

@dataclass
class ClassMapService:
    reader: Optional[ImageReaderPort] = None
    writer: Optional[ImageWriterPort] = None
    summarizer: Optional[ClassSummaryPort] = None
    ql_exporter: Optional[QuicklookExporterPort] = None
    reporter: Optional[ReportExporterPort] = None
    observer: Optional[PipelineObserverPort] = None

    # --------- API principal ---------
    def run(self, inputs: ClassMapInputs, spec: ClassMapSpec) -> ClassMapResult:
        if self.reader is None:
            raise RuntimeError("ImageReaderPort no configurado")
        if self.summarizer is None:
            raise RuntimeError("ClassSummaryPort no configurado")

        # 1) LOAD
        test = self.reader.read(inputs.test_uri)
        corpus = self._load_corpus(inputs, test)

        # 2) TRAIN
        model = BackgroundColorModel(corpus, spec.detection_rate, observer=self.observer)

        # 3) CLASSIFY
        classification = model.classify(test)

        # 4) POST → resumen (counts / palette)
        classes = tuple(inputs.classes or DEFAULT_CLASS_LABELS)
        summary: ClassSummary = self.summarizer.summarize(classification, classes)

        # 5) EXPORT opcional
        out_labels, out_png, out_csv = self._export(classification, summary, model, classes, spec)

        return ClassMapResult(
            classification=classification,
            labels_png=out_labels,
            quicklook_png=out_png,
            report_csv=out_csv,
            counts=summary.counts,
            percents=summary.percents,
            palette=summary.palette,
            thresholds=model.thresholds,
            meta=model.meta,
        )

    def train(self, inputs: ClassMapInputs, detection_rate: float) -> BackgroundColorModel:
        """Solo entrenamiento (útil para clasificar varias imágenes con el mismo modelo)."""
        if self.reader is None:
            raise RuntimeError("ImageReaderPort no configurado")
        test = self.reader.read(inputs.test_uri)
        return BackgroundColorModel(self._load_corpus(inputs, test), detection_rate, observer=self.observer)

    # --------- Fases internas ---------
    def _load_corpus(self, inputs: ClassMapInputs, test: ColorImage) -> TrainingCorpus:
        if inputs.mode is ModelMode.SPATIAL:
            if len(inputs.training_uris) > 1:
                raise ConfigurationError("modo espacial admite una sola imagen de entrenamiento")
            image = self.reader.read(inputs.training_uris[0]) if inputs.training_uris else test
            if inputs.mask_uri and inputs.regions:
                raise ConfigurationError("usa mask_uri o regions, no ambos")
            if inputs.mask_uri:
                mask = self.reader.read_mask(inputs.mask_uri)
            else:
                mask = mask_from_regions(image.shape, inputs.regions)
            return SpatialCorpus(image=image, mask=mask)

        if not inputs.training_uris:
            raise ConfigurationError("modo temporal requiere al menos una imagen de entrenamiento")
        return TemporalCorpus.of([self.reader.read(u) for u in inputs.training_uris])

    # --------- Export (opcional y sin rutas implícitas) ---------
    def _export(
        self,
        classification: ClassificationMap,
        summary: ClassSummary,
        model: BackgroundColorModel,
        classes: Sequence[ClassLabel],
        spec: ClassMapSpec,
    ) -> Tuple[Optional[Path], Optional[Path], Optional[Path]]:
        out_labels: Optional[Path] = None
        out_png: Optional[Path] = None
        out_csv: Optional[Path] = None

        # Códigos crudos (solo si se provee path y existe writer)
        if spec.out_labels is not None and self.writer is not None:
            out_labels = Path(spec.out_labels)
            self.writer.mkdirs(str(out_labels))
            self.writer.write_labels(str(out_labels), classification)

        # Quicklook PNG (solo si se provee path)
        if spec.out_png is not None:
            out_png = Path(spec.out_png)
            if self.writer is not None:
                self.writer.mkdirs(str(out_png))
            if self.ql_exporter:
                self.ql_exporter.export_classmap(classification, classes, str(out_png), spec.quicklook)
            elif self.writer is not None:
                self.writer.write(str(out_png), self._render_inline(classification, summary.palette))
            else:
                raise RuntimeError("out_png requiere QuicklookExporterPort o ImageWriterPort")

        # Reporte (solo si el llamador quiere y hay reporter)
        if spec.make_report and self.reporter:
            out_csv = Path(spec.out_report) if spec.out_report else (
                out_png.with_suffix(".csv") if out_png else None
            )
            if out_csv is not None:
                t = model.thresholds
                ctx = {
                    "name": spec.name,
                    "mode": model.mode.value,
                    "detection_rate": model.detection_rate,
                    "thresholds": {"cdist": t.cdist, "bdist_lower": t.bdist_lower, "bdist_upper": t.bdist_upper},
                    "headers": ["code", "name", "count", "percent"],
                    "rows": [
                        {
                            "code": int(c.code),
                            "name": c.name,
                            "count": int(summary.counts.get(c.code, 0)),
                            "percent": round(float(summary.percents.get(c.code, 0.0)), 4),
                        }
                        for c in classes
                    ],
                }
                self.reporter.render(spec.report_template, ctx, str(out_csv))

        return out_labels, out_png, out_csv

    @staticmethod
    def _render_inline(classification: ClassificationMap, palette: Mapping[PixelClass, Tuple[int, int, int]]) -> ColorImage:
        h, w = classification.shape
        rgb = np.zeros((h, w, 3), dtype=np.uint8)
        for code, color in palette.items():
            rgb[classification.mask_of(code)] = color
        return ColorImage(rgb)

__all__ = [
    "ClassMapInputs",
    "ClassMapSpec",
    "ClassMapResult",
    "ClassMapService",
]
