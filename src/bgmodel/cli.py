# src/bgmodel/cli.py
from __future__ import annotations

"""
CLI del modelo de color de fondo (contracts-first, minimal).

Comandos principales:
  - spatial: entrena con una región (máscara o rectángulos) de una imagen y
    clasifica esa misma imagen (u otra con --test).
  - temporal: entrena con N imágenes alineadas y clasifica una imagen de prueba.

Salida: PNG con la paleta azul=foreground, verde=background, rojo=sombra,
negro=highlight; opcionalmente los códigos crudos (--labels) y un CSV (--report).

Ejemplos rápidos:
  python -m bgmodel.cli spatial ./hair.jpg --region 40 10 60 30 --rate 0.95

  python -m bgmodel.cli temporal ./test.jpg ./bg01.jpg ./bg02.jpg ./bg03.jpg \
      --rate 0.99 --out ./classification.png --report
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from .config import Settings, get_settings
from .contracts.images import Region
from .composition.di import build_service, build_settings
from .services.classmap_service import ClassMapInputs, ClassMapResult, ClassMapSpec

logger = logging.getLogger(__name__)

# ----------------------
# Utilidades locales
# ----------------------

def _parse_regions(items: Optional[Iterable[List[str]]]) -> tuple[Region, ...]:
    out: list[Region] = []
    for it in items or ():
        try:
            x, y, w, h = (int(v) for v in it)
        except ValueError as e:
            raise ValueError(f"Región inválida {it}: usa --region X Y WIDTH HEIGHT (enteros)") from e
        out.append(Region(x, y, w, h))
    return tuple(out)


def _load_settings(args: argparse.Namespace) -> Settings:
    s = build_settings(Path(args.root)) if args.root else get_settings()
    upd: dict = {}
    if args.rate is not None:
        upd["detection_rate"] = args.rate
    if args.trace:
        upd["trace"] = True
    if args.verbose:
        upd["log_level"] = "DEBUG"
    if upd:
        s = Settings(**{**s.model_dump(), **upd})
    return s


def _configure_logging(s: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, s.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if s.trace:
        logging.getLogger("bgmodel.trace").setLevel(logging.DEBUG)


def _spec_from_args(args: argparse.Namespace, s: Settings, name: str) -> ClassMapSpec:
    out_png = Path(args.out) if args.out else s.out_path("classification", name=name)
    out_labels = None
    if args.labels:
        out_labels = Path(args.labels) if args.labels is not True else s.out_path("labels", name=name)
    out_report = None
    if args.report:
        out_report = Path(args.report) if args.report is not True else s.out_path("report", name=name)
    return ClassMapSpec(
        name=name,
        detection_rate=s.detection_rate,
        out_png=out_png,
        out_labels=out_labels,
        out_report=out_report,
        make_report=out_report is not None,
    )


def _debug_dir(args: argparse.Namespace, s: Settings, name: str) -> Optional[Path]:
    if not args.debug:
        return None
    return Path(args.debug) if args.debug is not True else s.out_path("debug_dir", name=name)


def _print_result(res: ClassMapResult) -> None:
    t = res.thresholds
    print(f"Thresholds: cdist={t.cdist:.6g} bdist_left={t.bdist_lower:.6g} bdist_right={t.bdist_upper:.6g}")
    for code, pct in res.percents.items():
        print(f"  {code.name.lower():<11} {res.counts[code]:>9d}  {pct:6.2f}%")
    for p in (res.quicklook_png, res.labels_png, res.report_csv):
        if p is not None:
            print(str(p))
    print("Blue: foreground, Green: background, Red: shadow, Black: highlight")


# ----------------------
# Comandos
# ----------------------

def cmd_spatial(args: argparse.Namespace) -> int:
    s = _load_settings(args)
    _configure_logging(s)
    regions = _parse_regions(args.region)
    if not regions and not args.mask:
        raise ValueError("modo espacial requiere --mask o al menos un --region")

    test_uri = args.test or args.image
    name = Path(test_uri).stem
    svc = build_service(s, debug_dir=_debug_dir(args, s, name))
    inputs = ClassMapInputs(
        test_uri=test_uri,
        training_uris=(args.image,),
        mask_uri=args.mask,
        regions=regions,
        classes=s.class_labels,
    )
    logger.info("Detection rate: %s | Image: %s | Test: %s", s.detection_rate, args.image, test_uri)
    _print_result(svc.run(inputs, _spec_from_args(args, s, name)))
    return 0


def cmd_temporal(args: argparse.Namespace) -> int:
    s = _load_settings(args)
    _configure_logging(s)
    name = Path(args.test).stem
    svc = build_service(s, debug_dir=_debug_dir(args, s, name))
    inputs = ClassMapInputs(test_uri=args.test, training_uris=tuple(args.training), classes=s.class_labels)
    logger.info("Detection rate: %s | Test image: %s | Training images: %d", s.detection_rate, args.test, len(args.training))
    _print_result(svc.run(inputs, _spec_from_args(args, s, name)))
    return 0


# ----------------------
# Parser
# ----------------------

def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("-r", "--rate", type=float, default=None, help="detection rate (ej. 0.95); sobre-escribe Settings")
    p.add_argument("--out", help="PNG de clasificación (si no, usa Settings.output_patterns['classification'])")
    p.add_argument("--labels", nargs="?", const=True, default=None, help="guarda códigos crudos 1..4 (ruta opcional)")
    p.add_argument("--report", nargs="?", const=True, default=None, help="CSV con conteos por clase (ruta opcional)")
    p.add_argument("--debug", nargs="?", const=True, default=None, help="carpeta para máscaras de depuración")
    p.add_argument("--trace", action="store_true", help="vuelca estadísticas y umbrales al log")
    p.add_argument("-v", "--verbose", action="store_true", help="log en nivel DEBUG")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="bgmodel", description="Clasificación fondo/sombra/highlight/foreground (Horprasert et al.)")
    p.add_argument("--root", help="project_root con 00-Config/settings.yaml (opcional)")
    sub = p.add_subparsers(dest="cmd", required=True)

    # spatial
    ps = sub.add_parser("spatial", help="entrena con una región de una imagen")
    ps.add_argument("image", help="imagen de entrenamiento")
    ps.add_argument("--mask", help="máscara (gris; != 0 selecciona)")
    ps.add_argument("--region", nargs=4, action="append", metavar=("X", "Y", "WIDTH", "HEIGHT"),
                    help="rectángulo de entrenamiento (repetible)")
    ps.add_argument("--test", help="imagen a clasificar (por defecto, la de entrenamiento)")
    _add_common(ps)
    ps.set_defaults(func=cmd_spatial)

    # temporal
    pt = sub.add_parser("temporal", help="entrena con N imágenes alineadas")
    pt.add_argument("test", help="imagen a clasificar")
    pt.add_argument("training", nargs="+", help="imágenes de entrenamiento (mismo tamaño)")
    _add_common(pt)
    pt.set_defaults(func=cmd_temporal)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        return int(bool(args.func(args)))  # 0 si todo bien
    except KeyboardInterrupt:
        return 130
    except Exception as ex:
        print(f"[ERROR] {ex}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
