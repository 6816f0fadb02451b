# src/bgmodel/contracts/errors.py
from __future__ import annotations


class BGModelError(Exception):
    """Raíz de los errores de dominio del modelo de color de fondo."""


class ConfigurationError(BGModelError, ValueError):
    """Entrada de entrenamiento/clasificación inválida (fatal, sin modelo por defecto)."""


class DimensionMismatch(BGModelError, ValueError):
    """Tamaños espaciales incompatibles entre imágenes, máscaras o modelo."""


class DegradedModelWarning(UserWarning):
    """
    Modelo entrenado sin muestras (máscara vacía): las variaciones quedan en 1
    y el modelo es máximamente permisivo. No es fatal.
    """


__all__ = ["BGModelError", "ConfigurationError", "DimensionMismatch", "DegradedModelWarning"]
