# src/bgmodel/ports/image_write.py
from __future__ import annotations

from typing import Protocol, runtime_checkable
from ..contracts.images import ClassificationMap, ColorImage

URI = str

@runtime_checkable
class ImageWriterPort(Protocol):
    """
    Escritor de imágenes.
    write_labels() guarda los códigos crudos (1 byte por píxel, sin paleta).
    """
    def write(self, uri: URI, image: ColorImage) -> URI: ...
    def write_labels(self, uri: URI, classification: ClassificationMap) -> URI: ...
    def mkdirs(self, uri: URI) -> None: ...

__all__ = ["ImageWriterPort", "URI"]
