# src/bgmodel/config.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Literal, Mapping, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .contracts.core import ClassLabel, DEFAULT_CLASS_LABELS, PixelClass

# Placeholders permitidos por clave
OUTPUT_PLACEHOLDERS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "classification": ("name",),
    "labels": ("name",),
    "report": ("name",),
    "debug_dir": ("name",),
})

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

class Settings(BaseSettings):
    """
    Config unificada del proyecto. No toca disco.
    Debe ser construida y provista por composition/di.py (CLI/adapters).
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BGM_",
        env_nested_delimiter="__",
        extra="forbid",
        frozen=True,
    )

    # --- básicos ---
    project_root: Path = Path(".")
    output_dir: Path = Path("work/out")

    # --- modelo ---
    detection_rate: float = Field(0.95, gt=0.0, le=1.0)
    class_labels: tuple[ClassLabel, ...] = DEFAULT_CLASS_LABELS  # paleta inmutable

    # --- diagnóstico ---
    log_level: LogLevel = "INFO"
    trace: bool = False

    output_patterns: Dict[str, str] = Field(default_factory=lambda: {
        "classification": "{name}/classification.png",
        "labels": "{name}/labels.png",
        "report": "{name}/summary.csv",
        "debug_dir": "{name}/debug",
    })

    # ----------------------------
    # Normalizadores / validadores
    # ----------------------------
    @field_validator("project_root", mode="before")
    @classmethod
    def _abs_root(cls, v: Path | str) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("output_dir", mode="after")
    @classmethod
    def _rel_to_root(cls, p: Path, info) -> Path:
        root: Path = info.data.get("project_root") or Path(".").resolve()
        return p if p.is_absolute() else (root / p)

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return str(v).strip().upper()

    @field_validator("class_labels")
    @classmethod
    def _all_codes(cls, labels: tuple[ClassLabel, ...]) -> tuple[ClassLabel, ...]:
        codes = [c.code for c in labels]
        if len(set(codes)) != len(codes):
            raise ValueError("class_labels repite códigos")
        missing = set(PixelClass) - set(codes)
        if missing:
            raise ValueError(f"class_labels sin color para: {sorted(m.name for m in missing)}")
        return tuple(sorted(labels, key=lambda c: int(c.code)))

    @field_validator("output_patterns")
    @classmethod
    def _check_out(cls, d: Dict[str, str]) -> Dict[str, str]:
        for k, pat in d.items():
            if k not in OUTPUT_PLACEHOLDERS:
                raise ValueError(f"output_patterns: clave desconocida {k!r}")
            allowed = set(OUTPUT_PLACEHOLDERS[k])
            used = {frag[1] for frag in _iter_placeholders(pat)}
            unknown = used - allowed
            if unknown:
                raise ValueError(f"output_patterns[{k}] usa placeholders no permitidos: {sorted(unknown)}")
        return d

    # ----------------------------
    # Helpers puros (sin side-effects)
    # ----------------------------
    def out_path(self, key: str, **fmt) -> Path:
        """Resuelve patrón de salida bajo output_dir (no crea carpetas)."""
        pat = self.output_patterns[key]
        return (self.output_dir / pat.format(**fmt)).resolve()


# Utilidad interna: detectar {placeholders}
def _iter_placeholders(fmt: str):
    # Busca {name} muy simple; evita formatear para no explotar
    start = 0
    while True:
        i = fmt.find("{", start)
        if i == -1:
            break
        j = fmt.find("}", i + 1)
        if j == -1:
            break
        name = fmt[i + 1 : j].strip()
        if name:
            yield (i, name)
        start = j + 1


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Instancia cacheada. Úsala SOLO desde composition/di.py o CLI.
    Prohibido usarla en services/ (dominio). Para tests, recuerda limpiar:
        get_settings.cache_clear()
    """
    return Settings()
