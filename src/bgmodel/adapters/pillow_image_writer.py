# src/bgmodel/adapters/pillow_image_writer.py
from __future__ import annotations

import os
from pathlib import Path

from PIL import Image

from ..contracts.images import ClassificationMap, ColorImage
from ..ports.image_write import ImageWriterPort


def _ensure_dir(path: str) -> None:
    d = os.path.dirname(path)
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)


class PillowImageWriter(ImageWriterPort):
    """Formato según la extensión (PNG recomendado: sin pérdida para los códigos)."""

    def write(self, uri: str | Path, image: ColorImage) -> str:
        uri = str(uri)
        _ensure_dir(uri)
        Image.fromarray(image.data).save(uri)
        return uri

    def write_labels(self, uri: str | Path, classification: ClassificationMap) -> str:
        uri = str(uri)
        _ensure_dir(uri)
        Image.fromarray(classification.labels).save(uri)
        return uri

    def mkdirs(self, uri: str | Path) -> None:
        _ensure_dir(str(uri))
