# src/bgmodel/services/classifier.py
from __future__ import annotations

"""
Decisión por píxel (Horprasert et al., 1999, Ec. 11).

El mapa parte en HIGHLIGHT y cada regla de DECISION_RULES sobrescribe donde su
predicado es verdadero; el orden de la tupla ES la prioridad (la última gana):

    FOREGROUND > SHADOW > BACKGROUND > HIGHLIGHT
"""

from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np

from ..contracts.core import PixelClass, ThresholdSet

Predicate = Callable[[np.ndarray, np.ndarray, ThresholdSet], np.ndarray]

DEFAULT_LABEL = PixelClass.HIGHLIGHT


def is_background_band(bn: np.ndarray, cn: np.ndarray, t: ThresholdSet) -> np.ndarray:
    # Inclusivo: una imagen de entrenamiento gris uniforme deja la banda en [0, 0]
    # y sus propios píxeles deben clasificarse como fondo, no como highlight
    return (bn >= t.bdist_lower) & (bn <= t.bdist_upper)


def is_shadow(bn: np.ndarray, cn: np.ndarray, t: ThresholdSet) -> np.ndarray:
    return bn < 0


def is_foreground(bn: np.ndarray, cn: np.ndarray, t: ThresholdSet) -> np.ndarray:
    return cn > t.cdist


@dataclass(frozen=True)
class DecisionRule:
    label: PixelClass
    predicate: Predicate


DECISION_RULES: tuple[DecisionRule, ...] = (
    DecisionRule(PixelClass.BACKGROUND, is_background_band),
    DecisionRule(PixelClass.SHADOW, is_shadow),
    DecisionRule(PixelClass.FOREGROUND, is_foreground),
)


def decide(
    bn: np.ndarray,
    cn: np.ndarray,
    thresholds: ThresholdSet,
    rules: Sequence[DecisionRule] = DECISION_RULES,
) -> np.ndarray:
    """Etiquetas uint8 con la forma de `bn`."""
    bn = np.asarray(bn, dtype=np.float64)
    cn = np.asarray(cn, dtype=np.float64)
    if bn.shape != cn.shape:
        raise ValueError(f"bn y cn con formas distintas: {bn.shape} vs {cn.shape}")
    out = np.full(bn.shape, int(DEFAULT_LABEL), dtype=np.uint8)
    for rule in rules:
        out[rule.predicate(bn, cn, thresholds)] = int(rule.label)
    return out


def decide_pixel(bn: float, cn: float, thresholds: ThresholdSet) -> PixelClass:
    return PixelClass(int(decide(np.float64(bn), np.float64(cn), thresholds)))


__all__ = [
    "Predicate",
    "DecisionRule",
    "DECISION_RULES",
    "DEFAULT_LABEL",
    "is_background_band",
    "is_shadow",
    "is_foreground",
    "decide",
    "decide_pixel",
]
