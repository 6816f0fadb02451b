# src/bgmodel/contracts/core.py
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator

# -------------------------
# Colores tipados
# -------------------------
class RGB8(BaseModel):
    model_config = ConfigDict(frozen=True)
    r: int = Field(0, ge=0, le=255)
    g: int = Field(0, ge=0, le=255)
    b: int = Field(0, ge=0, le=255)
    def as_tuple(self) -> tuple[int, int, int]: return (self.r, self.g, self.b)

# -------------------------
# Clases de píxel (Horprasert et al., 1999, Sec. 4.2)
# -------------------------
class PixelClass(IntEnum):
    """Códigos de 1 byte del mapa de clasificación."""
    BACKGROUND = 1   # brillo y cromaticidad similares al modelo
    SHADOW = 2       # cromaticidad similar, brillo menor
    HIGHLIGHT = 3    # cromaticidad similar, brillo mayor
    FOREGROUND = 4   # cromaticidad distinta

PIXEL_CODES: tuple[int, ...] = tuple(int(c) for c in PixelClass)

class ClassLabel(BaseModel):
    model_config = ConfigDict(frozen=True)
    code: PixelClass
    name: str
    color: RGB8 = RGB8()

    @field_validator("name")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("name no puede ser vacío")
        return v2

# azul=foreground, verde=background, rojo=sombra, negro=highlight
DEFAULT_CLASS_LABELS: tuple[ClassLabel, ...] = (
    ClassLabel(code=PixelClass.BACKGROUND, name="background", color=RGB8(r=0, g=255, b=0)),
    ClassLabel(code=PixelClass.SHADOW, name="shadow", color=RGB8(r=255, g=0, b=0)),
    ClassLabel(code=PixelClass.HIGHLIGHT, name="highlight", color=RGB8(r=0, g=0, b=0)),
    ClassLabel(code=PixelClass.FOREGROUND, name="foreground", color=RGB8(r=0, g=0, b=255)),
)

# -------------------------
# Variantes de modelo
# -------------------------
class ModelMode(str, Enum):
    SPATIAL = "spatial"     # una región de entrenamiento en una sola imagen
    TEMPORAL = "temporal"   # N imágenes alineadas, un sitio por coordenada

# -------------------------
# Umbrales (Horprasert et al., 1999, Sec. 4.3)
# -------------------------
class ThresholdSet(BaseModel):
    """Umbrales fijos del modelo, en espacio de distorsión normalizada."""
    model_config = ConfigDict(frozen=True)
    cdist: float            # T_cd
    bdist_lower: float      # T_bl
    bdist_upper: float      # T_bu

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.cdist, self.bdist_lower, self.bdist_upper)

# -------------------------
# Ejecuciones / auditoría
# -------------------------
class TrainingMeta(BaseModel):
    model_config = ConfigDict(frozen=True)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    mode: ModelMode
    detection_rate: float
    n_frames: NonNegativeInt = 1
    n_samples: NonNegativeInt = 0
    degraded: bool = False
    ended_at: datetime | None = None

    def end_now(self) -> "TrainingMeta":
        return self.model_copy(update={"ended_at": datetime.now(timezone.utc)})

    @property
    def duration_s(self) -> Optional[float]:
        if self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds()


__all__ = [
    "RGB8",
    "PixelClass",
    "PIXEL_CODES",
    "ClassLabel",
    "DEFAULT_CLASS_LABELS",
    "ModelMode",
    "ThresholdSet",
    "TrainingMeta",
]
