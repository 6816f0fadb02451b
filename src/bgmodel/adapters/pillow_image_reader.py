# src/bgmodel/adapters/pillow_image_reader.py
from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from ..contracts.images import ColorImage, SelectionMask
from ..ports.image_read import ImageReaderPort


class PillowImageReader(ImageReaderPort):
    """
    Lector basado en Pillow.
    - Imágenes: siempre convertidas a RGB de 8 bits (orden R, G, B).
    - Máscaras: escala de grises; todo valor != 0 selecciona el píxel.
    """

    def read(self, uri: str | Path) -> ColorImage:
        with Image.open(uri) as im:
            arr = np.asarray(im.convert("RGB"), dtype=np.uint8)
        return ColorImage(arr)

    def read_mask(self, uri: str | Path) -> SelectionMask:
        with Image.open(uri) as im:
            arr = np.asarray(im.convert("L"), dtype=np.uint8)
        return SelectionMask(arr)
