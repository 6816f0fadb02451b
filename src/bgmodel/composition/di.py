from __future__ import annotations
from pathlib import Path
import json
import yaml

from ..config import Settings
from ..contracts.core import ClassLabel, PixelClass, RGB8
from ..adapters.pillow_image_reader import PillowImageReader
from ..adapters.pillow_image_writer import PillowImageWriter
from ..adapters.palette_quicklook_exporter import PaletteQuicklookExporter
from ..adapters.class_summary_adapter import ClassSummaryAdapter
from ..adapters.csv_exporter import CSVExporter
from ..adapters.logging_observer import LoggingObserver
from ..adapters.debug_dump_observer import DebugDumpObserver
from ..ports.observer import CompositeObserver, NullObserver, PipelineObserverPort
from ..services.classmap_service import ClassMapService

def load_settings_from_yaml(path: Path) -> Settings:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return Settings(**data)

def load_class_labels(path: Path) -> tuple[ClassLabel, ...]:
    items = json.loads(path.read_text(encoding="utf-8"))
    out: list[ClassLabel] = []
    for it in items:
        code = it["code"]
        out.append(
            ClassLabel(
                code=PixelClass[code.upper()] if isinstance(code, str) else PixelClass(int(code)),
                name=str(it["name"]),
                color=RGB8(**it.get("color", {})),
            )
        )
    return tuple(out)

def build_settings(project_root: Path) -> Settings:
    cfg = (project_root / "00-Config" / "settings.yaml").resolve()
    st = load_settings_from_yaml(cfg) if cfg.exists() else Settings(project_root=project_root)
    labels_json = (project_root / "00-Config" / "class_labels.json").resolve()
    if labels_json.exists():
        st = Settings(**{**st.model_dump(), "class_labels": load_class_labels(labels_json)})
    return st

def build_observer(settings: Settings, *, debug_dir: Path | None = None) -> PipelineObserverPort:
    observers: list[PipelineObserverPort] = []
    if settings.trace:
        observers.append(LoggingObserver())
    if debug_dir is not None:
        observers.append(DebugDumpObserver(debug_dir))
    if not observers:
        return NullObserver()
    return observers[0] if len(observers) == 1 else CompositeObserver(*observers)

def build_service(settings: Settings, *, debug_dir: Path | None = None) -> ClassMapService:
    writer = PillowImageWriter()
    return ClassMapService(
        reader=PillowImageReader(),
        writer=writer,
        summarizer=ClassSummaryAdapter(),
        ql_exporter=PaletteQuicklookExporter(writer=writer),
        reporter=CSVExporter(),
        observer=build_observer(settings, debug_dir=debug_dir),
    )
