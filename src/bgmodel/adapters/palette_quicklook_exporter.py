# src/bgmodel/adapters/palette_quicklook_exporter.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np

from ..contracts.core import ClassLabel, DEFAULT_CLASS_LABELS
from ..contracts.images import ClassificationMap, ColorImage
from ..ports.exporters import QuicklookExporterPort, QuicklookSpec
from ..ports.image_write import ImageWriterPort
from .pillow_image_writer import PillowImageWriter


@dataclass(frozen=True)
class PaletteQuicklookExporter(QuicklookExporterPort):
    """Pinta cada código con el color de su ClassLabel.

    Paleta por defecto:
      - AZUL:  foreground
      - VERDE: background
      - ROJO:  sombra
      - NEGRO: highlight
    Códigos sin etiqueta quedan en negro.
    """
    writer: ImageWriterPort = field(default_factory=PillowImageWriter)

    def render(self, classification: ClassificationMap, classes: Sequence[ClassLabel] = DEFAULT_CLASS_LABELS) -> ColorImage:
        h, w = classification.shape
        rgb = np.zeros((h, w, 3), dtype=np.uint8)
        for c in classes:
            rgb[classification.mask_of(c.code)] = c.color.as_tuple()
        return ColorImage(rgb)

    def export_classmap(
        self,
        classification: ClassificationMap,
        classes: Sequence[ClassLabel],
        out_uri: str,
        spec: Optional[QuicklookSpec] = None,
    ) -> str:
        spec = spec or QuicklookSpec()
        img = self.render(classification, classes)
        scale = max(int(spec.scale), 1)
        # no superar max_size_px en el lado mayor
        while scale > 1 and max(img.shape) * scale > spec.max_size_px:
            scale -= 1
        if scale > 1:
            img = ColorImage(np.repeat(np.repeat(img.data, scale, axis=0), scale, axis=1))
        return self.writer.write(out_uri, img)
