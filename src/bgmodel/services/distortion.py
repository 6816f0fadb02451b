# src/bgmodel/services/distortion.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

from ..contracts.images import ColorImage
from .site_statistics import SiteStatistics

ArrayLike = Union[np.ndarray, Sequence[float]]


@dataclass(frozen=True)
class DistortionPair:
    """α (≈1 si coincide con el sitio) y CD (≥0, ≈0 si coincide). Escalares o grillas."""
    alpha: np.ndarray
    cd: np.ndarray


def brightness_distortion(pixels: ArrayLike, brightness_num: np.ndarray, denom) -> np.ndarray:
    """
    α = Σ_c P_c · w_c, con w_c = mean_c / (denom · stddev_c²).
    Se divide por denom al final: una coincidencia exacta da α == 1 sin ruido de redondeo.
    See Horprasert et al., 1999, Eq. 5
    """
    p = np.asarray(pixels, dtype=np.float64)
    return np.sum(p * brightness_num, axis=-1) / denom


def chromaticity_distortion(pixels: ArrayLike, mean: np.ndarray, stddev: np.ndarray, alpha) -> np.ndarray:
    """
    CD = sqrt(Σ_c ((P_c − α·mean_c) / stddev_c)²).
    See Horprasert et al., 1999, Eq. 6
    """
    p = np.asarray(pixels, dtype=np.float64)
    a = np.asarray(alpha, dtype=np.float64)[..., None]
    return np.sqrt(np.sum(np.square((p - a * mean) / stddev), axis=-1))


def compute_distortions(pixels: ArrayLike, stats: SiteStatistics) -> DistortionPair:
    """
    Distorsiones de una grilla (H, W, 3) o de una pila (N, H, W, 3) contra `stats`.
    En modo temporal el tamaño (H, W) debe coincidir con el del modelo.
    """
    p = np.asarray(pixels.data if isinstance(pixels, ColorImage) else pixels, dtype=np.float64)
    mean, stddev, num, denom = stats.fields_for(tuple(p.shape[-3:-1]))
    alpha = brightness_distortion(p, num, denom)
    cd = chromaticity_distortion(p, mean, stddev, alpha)
    return DistortionPair(alpha=alpha, cd=cd)


def distortion_at(pixel: ArrayLike, stats: SiteStatistics, y: int = 0, x: int = 0) -> DistortionPair:
    """Distorsiones de un solo píxel usando el sitio (y, x)."""
    mean = np.asarray(stats.mean_at(y, x))
    stddev = np.asarray(stats.stddev_at(y, x))
    denom = stats.denominator_at(y, x)
    alpha = brightness_distortion(pixel, mean / np.square(stddev), denom)
    cd = chromaticity_distortion(pixel, mean, stddev, alpha)
    return DistortionPair(alpha=np.float64(alpha), cd=np.float64(cd))


__all__ = [
    "DistortionPair",
    "brightness_distortion",
    "chromaticity_distortion",
    "compute_distortions",
    "distortion_at",
]
