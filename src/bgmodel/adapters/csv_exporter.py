# src/bgmodel/adapters/csv_exporter.py

from __future__ import annotations

import csv
import os
from typing import Mapping, Any, Iterable

from ..ports.exporters import ReportExporterPort

class CSVExporter(ReportExporterPort):
    """Reporte de clasificación en CSV a partir de `context`.

    Convención:
      - `context["headers"]`    -> columnas (opcional; si falta se infiere de la primera fila)
      - `context["rows"]`       -> iterable de dicts o secuencias
      - `context["thresholds"]` -> dict opcional; se añade como comentario `# T_...` al inicio
    `template_id` solo se registra en la cabecera de comentario.
    """
    def render(self, template_id: str, context: Mapping[str, Any], out_uri: str) -> str:
        rows = list(context.get("rows", []))  # type: ignore[arg-type]
        headers = context.get("headers")
        if headers is None and rows:
            first = rows[0]
            headers = list(first.keys()) if isinstance(first, Mapping) else [f"col{i+1}" for i in range(len(first))]

        os.makedirs(os.path.dirname(out_uri) or ".", exist_ok=True)
        with open(out_uri, "w", newline="", encoding="utf-8") as f:
            f.write(f"# {template_id}")
            for key in ("name", "mode", "detection_rate"):
                if key in context:
                    f.write(f" {key}={context[key]}")
            f.write("\n")
            for k, v in dict(context.get("thresholds") or {}).items():
                f.write(f"# T_{k}={v}\n")
            writer = csv.writer(f)
            if headers:
                writer.writerow(headers)
            for r in rows:
                writer.writerow([r.get(h, "") for h in headers] if isinstance(r, Mapping) else list(r))
        return out_uri
