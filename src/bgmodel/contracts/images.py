# src/bgmodel/contracts/images.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterable, NamedTuple, Tuple

import numpy as np
import numpy.typing as npt

from .core import PIXEL_CODES, PixelClass
from .errors import ConfigurationError, DimensionMismatch

Shape2D = Tuple[int, int]  # (height, width)


def _frozen_copy(arr: np.ndarray) -> np.ndarray:
    # Copia privada y de solo lectura: el modelo nunca comparte buffers con el llamador
    out = np.array(arr, copy=True)
    out.setflags(write=False)
    return out


def _as_uint8(arr: np.ndarray, what: str) -> np.ndarray:
    if arr.dtype == np.uint8:
        return arr
    if arr.dtype.kind in ("i", "u") and arr.size and (arr.min() < 0 or arr.max() > 255):
        raise ConfigurationError(f"{what}: valores fuera de 0..255")
    if arr.dtype.kind not in ("i", "u", "b"):
        raise ConfigurationError(f"{what}: se espera imagen de 8 bits, llegó dtype={arr.dtype}")
    return arr.astype(np.uint8)


# ---------- Imagen de color (H, W, 3) ----------
@dataclass(frozen=True)
class ColorImage:
    """Grilla H×W de tripletes de 8 bits. El orden de canales lo fija el lector."""
    data: "npt.NDArray[np.uint8]"  # type: ignore[valid-type]

    def __post_init__(self):
        arr = np.asarray(self.data)
        if arr.ndim != 3 or arr.shape[2] != 3:
            raise ConfigurationError(f"imagen debe ser (H, W, 3); llegó shape={arr.shape}")
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ConfigurationError("imagen vacía (alto o ancho = 0)")
        object.__setattr__(self, "data", _frozen_copy(_as_uint8(arr, "imagen")))

    @property
    def shape(self) -> Shape2D:
        return (int(self.data.shape[0]), int(self.data.shape[1]))

    @property
    def height(self) -> int:
        return self.shape[0]

    @property
    def width(self) -> int:
        return self.shape[1]

    def pixel(self, y: int, x: int) -> Tuple[int, int, int]:
        c0, c1, c2 = self.data[y, x]
        return (int(c0), int(c1), int(c2))

    @classmethod
    def filled(cls, height: int, width: int, color: Iterable[int]) -> "ColorImage":
        arr = np.empty((height, width, 3), dtype=np.uint8)
        arr[...] = np.asarray(tuple(color), dtype=np.uint8)
        return cls(arr)


# ---------- Máscara de selección (H, W) ----------
@dataclass(frozen=True)
class SelectionMask:
    """Banderas booleanas; cualquier valor != 0 selecciona el píxel."""
    data: "npt.NDArray[np.bool_]"  # type: ignore[valid-type]

    def __post_init__(self):
        arr = np.asarray(self.data)
        if arr.ndim == 3 and arr.shape[2] == 1:
            arr = arr[..., 0]
        if arr.ndim != 2:
            raise ConfigurationError(f"máscara debe ser 2D; llegó shape={arr.shape}")
        object.__setattr__(self, "data", _frozen_copy(arr != 0))

    @property
    def shape(self) -> Shape2D:
        return (int(self.data.shape[0]), int(self.data.shape[1]))

    @property
    def count(self) -> int:
        return int(np.count_nonzero(self.data))

    def is_empty(self) -> bool:
        return self.count == 0

    @classmethod
    def full(cls, height: int, width: int, value: bool = True) -> "SelectionMask":
        return cls(np.full((height, width), bool(value)))


# ---------- Rectángulos de entrenamiento ----------
class Region(NamedTuple):
    x: int; y: int; width: int; height: int


def mask_from_regions(shape: Shape2D, regions: Iterable[Region]) -> SelectionMask:
    """
    Rellena los rectángulos dados (semiabiertos: [x, x+width) × [y, y+height)).
    Lo que quede fuera de la imagen se recorta; rectángulos sin área no marcan nada.
    """
    h, w = shape
    out = np.zeros((h, w), dtype=bool)
    for r in regions:
        r = Region(*r)
        if r.width < 0 or r.height < 0:
            raise ConfigurationError(f"región con tamaño negativo: {r}")
        x0, y0 = max(r.x, 0), max(r.y, 0)
        x1, y1 = min(r.x + r.width, w), min(r.y + r.height, h)
        if x1 > x0 and y1 > y0:
            out[y0:y1, x0:x1] = True
    return SelectionMask(out)


# ---------- Mapa de clasificación (H, W) ----------
@dataclass(frozen=True)
class ClassificationMap:
    """Una etiqueta de 1 byte por píxel, restringida a PixelClass."""
    labels: "npt.NDArray[np.uint8]"  # type: ignore[valid-type]

    def __post_init__(self):
        arr = np.asarray(self.labels)
        if arr.ndim != 2:
            raise ValueError(f"labels debe ser 2D; llegó shape={arr.shape}")
        # Antes del cast: 257 no debe colarse como 1
        unknown = np.setdiff1d(np.unique(arr), np.asarray(PIXEL_CODES))
        if unknown.size:
            raise ValueError(f"códigos de clase desconocidos: {unknown.tolist()}")
        arr = arr.astype(np.uint8, copy=False)
        object.__setattr__(self, "labels", _frozen_copy(arr))

    @property
    def shape(self) -> Shape2D:
        return (int(self.labels.shape[0]), int(self.labels.shape[1]))

    def mask_of(self, label: PixelClass) -> np.ndarray:
        return self.labels == int(label)

    def counts(self) -> dict[PixelClass, int]:
        return {c: int(np.count_nonzero(self.labels == int(c))) for c in PixelClass}

    def percents(self) -> dict[PixelClass, float]:
        total = float(self.labels.size)
        return {c: (n / total) * 100.0 for c, n in self.counts().items()}

    def label_at(self, y: int, x: int) -> PixelClass:
        return PixelClass(int(self.labels[y, x]))


def validate_same_size(a: Any, b: Any, *, what: str = "imágenes") -> None:
    """Compara (alto, ancho) de dos objetos con `.shape` 2D (o arrays)."""
    sa = tuple(a.shape)[:2]
    sb = tuple(b.shape)[:2]
    if sa != sb:
        raise DimensionMismatch(f"Dimensiones de {what} no coinciden: {sa} vs {sb}")


__all__ = [
    "Shape2D",
    "ColorImage",
    "SelectionMask",
    "Region",
    "mask_from_regions",
    "ClassificationMap",
    "validate_same_size",
]
