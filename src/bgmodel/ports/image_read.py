# src/bgmodel/ports/image_read.py
from __future__ import annotations

from typing import Protocol, runtime_checkable
from ..contracts.images import ColorImage, SelectionMask

URI = str

@runtime_checkable
class ImageReaderPort(Protocol):
    """
    Lector de imágenes de color de 8 bits.
    Reglas: devuelve SIEMPRE ColorImage (H, W, 3) con el mismo orden de canales
    para entrenamiento y prueba.
    """
    def read(self, uri: URI) -> ColorImage: ...
    def read_mask(self, uri: URI) -> SelectionMask: ...

__all__ = ["ImageReaderPort", "URI"]
