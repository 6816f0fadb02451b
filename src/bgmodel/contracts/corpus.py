# src/bgmodel/contracts/corpus.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple, Union

import numpy as np

from .core import ModelMode
from .errors import ConfigurationError
from .images import ColorImage, Region, SelectionMask, Shape2D, mask_from_regions, validate_same_size


def _coerce_image(img) -> ColorImage:
    if img is None:
        raise ConfigurationError("corpus de entrenamiento vacío: no hay imagen")
    return img if isinstance(img, ColorImage) else ColorImage(img)


@dataclass(frozen=True)
class SpatialCorpus:
    """
    Una imagen + máscara del mismo tamaño (Yacoob y Davis, 2006).
    Los píxeles seleccionados son las muestras de entrenamiento de un único sitio.
    """
    image: ColorImage
    mask: SelectionMask

    mode = ModelMode.SPATIAL

    def __post_init__(self):
        image = _coerce_image(self.image)
        if self.mask is None:
            raise ConfigurationError("corpus espacial requiere máscara de selección")
        mask = self.mask if isinstance(self.mask, SelectionMask) else SelectionMask(self.mask)
        validate_same_size(image, mask, what="imagen y máscara")
        object.__setattr__(self, "image", image)
        object.__setattr__(self, "mask", mask)

    @classmethod
    def from_regions(cls, image, regions: Iterable[Region]) -> "SpatialCorpus":
        img = _coerce_image(image)
        return cls(image=img, mask=mask_from_regions(img.shape, regions))

    @property
    def shape(self) -> Shape2D:
        return self.image.shape

    @property
    def n_frames(self) -> int:
        return 1

    def samples(self) -> np.ndarray:
        """Píxeles seleccionados como (M, 3) float64."""
        return self.image.data[self.mask.data].astype(np.float64)


@dataclass(frozen=True)
class TemporalCorpus:
    """N imágenes alineadas (Horprasert et al., 1999): una muestra por sitio y por imagen."""
    frames: Tuple[ColorImage, ...]

    mode = ModelMode.TEMPORAL

    def __post_init__(self):
        frames = tuple(_coerce_image(f) for f in (self.frames or ()))
        if not frames:
            raise ConfigurationError("corpus de entrenamiento vacío: no hay imágenes")
        first = frames[0]
        for i, f in enumerate(frames[1:], start=1):
            validate_same_size(first, f, what=f"imagen 0 e imagen {i}")
        object.__setattr__(self, "frames", frames)

    @classmethod
    def of(cls, frames: Sequence) -> "TemporalCorpus":
        return cls(frames=tuple(frames))

    @property
    def shape(self) -> Shape2D:
        return self.frames[0].shape

    @property
    def n_frames(self) -> int:
        return len(self.frames)

    def stack(self) -> np.ndarray:
        """(N, H, W, 3) float64."""
        return np.stack([f.data for f in self.frames], axis=0).astype(np.float64)


TrainingCorpus = Union[SpatialCorpus, TemporalCorpus]

__all__ = ["SpatialCorpus", "TemporalCorpus", "TrainingCorpus"]
