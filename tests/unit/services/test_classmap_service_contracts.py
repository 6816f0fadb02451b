import numpy as np
import pytest
from bgmodel.adapters.class_summary_adapter import ClassSummaryAdapter
from bgmodel.adapters.csv_exporter import CSVExporter
from bgmodel.contracts.core import DEFAULT_CLASS_LABELS, ModelMode, PixelClass
from bgmodel.contracts.errors import ConfigurationError, DimensionMismatch
from bgmodel.contracts.images import ClassificationMap, ColorImage, Region, SelectionMask
from bgmodel.ports.exporters import QuicklookSpec
from bgmodel.services.classmap_service import ClassMapInputs, ClassMapService, ClassMapSpec
from tests.factories import GRAY, make_frames, make_image, make_noisy_frames

class MemReader:
    def __init__(self, images=None, masks=None):
        self.images = dict(images or {})
        self.masks = dict(masks or {})
        self.reads = []

    def read(self, uri):
        self.reads.append(uri)
        return self.images[uri]

    def read_mask(self, uri):
        return self.masks[uri]

class MemWriter:
    def __init__(self):
        self.images = {}
        self.labels = {}
        self.dirs = []

    def write(self, uri, image):
        self.images[uri] = image
        return uri

    def write_labels(self, uri, classification):
        self.labels[uri] = classification
        return uri

    def mkdirs(self, uri):
        self.dirs.append(uri)

class RecordingQuicklook:
    def __init__(self):
        self.calls = []

    def render(self, classification, classes):
        raise AssertionError("no debería llamarse")

    def export_classmap(self, classification, classes, out_uri, spec=None):
        self.calls.append((out_uri, spec))
        return out_uri

def _test_scene():
    arr = np.empty((6, 8, 3), dtype=np.uint8)
    arr[...] = GRAY
    arr[0, 0] = (0, 0, 0)
    arr[0, 1] = (255, 255, 255)
    arr[0, 2] = (0, 255, 0)
    return ColorImage(arr)

def test_inputs_mode():
    assert ClassMapInputs("t", mask_uri="m").mode is ModelMode.SPATIAL
    assert ClassMapInputs("t", regions=[Region(0, 0, 1, 1)]).mode is ModelMode.SPATIAL
    assert ClassMapInputs("t", training_uris=["a"]).mode is ModelMode.TEMPORAL

def test_spatial_run_with_training_image_and_mask(tmp_path):
    reader = MemReader(images={"train": make_image(), "test": _test_scene()},
                       masks={"mask": SelectionMask.full(6, 8)})
    writer = MemWriter()
    svc = ClassMapService(reader=reader, writer=writer, summarizer=ClassSummaryAdapter())
    out_png = tmp_path / "q" / "cls.png"
    res = svc.run(ClassMapInputs("test", training_uris=["train"], mask_uri="mask"),
                  ClassMapSpec(name="scene", out_png=out_png, out_labels=tmp_path / "labels.png"))

    assert res.classification.label_at(0, 0) is PixelClass.SHADOW
    assert res.classification.label_at(0, 1) is PixelClass.HIGHLIGHT
    assert res.classification.label_at(0, 2) is PixelClass.FOREGROUND
    assert res.counts[PixelClass.BACKGROUND] == 45
    assert sum(res.counts.values()) == 48
    assert res.thresholds.as_tuple() == (0.0, 0.0, 0.0)
    # sin quicklook exporter: render en línea con la paleta
    rendered = writer.images[str(out_png)]
    assert rendered.pixel(0, 2) == (0, 0, 255)
    assert rendered.pixel(3, 3) == (0, 255, 0)
    assert str(tmp_path / "labels.png") in writer.labels
    assert writer.dirs == [str(tmp_path / "labels.png"), str(out_png)]
    assert res.report_csv is None

def test_spatial_defaults_to_test_image_with_regions():
    reader = MemReader(images={"test": _test_scene()})
    svc = ClassMapService(reader=reader, summarizer=ClassSummaryAdapter())
    res = svc.run(ClassMapInputs("test", regions=[Region(2, 2, 4, 3)]), ClassMapSpec(name="r"))
    assert reader.reads == ["test"]
    assert res.meta.n_samples == 12
    assert res.labels_png is None and res.quicklook_png is None

def test_temporal_run_uses_every_training_frame():
    frames = make_frames(n=3, h=4, w=5)
    reader = MemReader(images={f"f{i}": f for i, f in enumerate(frames)})
    svc = ClassMapService(reader=reader, summarizer=ClassSummaryAdapter())
    res = svc.run(ClassMapInputs("f0", training_uris=["f0", "f1", "f2"]), ClassMapSpec(name="t"))
    assert res.meta.mode is ModelMode.TEMPORAL
    assert res.meta.n_frames == 3
    assert res.classification.shape == (4, 5)

def test_temporal_size_mismatch_is_fatal():
    reader = MemReader(images={"a": make_noisy_frames(n=1)[0], "b": make_image(3, 3), "t": make_image(3, 3)})
    svc = ClassMapService(reader=reader, summarizer=ClassSummaryAdapter())
    with pytest.raises(DimensionMismatch):
        svc.run(ClassMapInputs("t", training_uris=["a", "b"]), ClassMapSpec(name="x"))

def test_temporal_without_training_frames():
    svc = ClassMapService(reader=MemReader(images={"t": make_image()}), summarizer=ClassSummaryAdapter())
    with pytest.raises(ConfigurationError):
        svc.run(ClassMapInputs("t"), ClassMapSpec(name="x"))

def test_missing_ports():
    with pytest.raises(RuntimeError):
        ClassMapService().run(ClassMapInputs("t"), ClassMapSpec(name="x"))
    with pytest.raises(RuntimeError):
        ClassMapService(reader=MemReader()).run(ClassMapInputs("t"), ClassMapSpec(name="x"))

def test_png_without_any_writer_is_an_error(tmp_path):
    reader = MemReader(images={"test": make_image()}, masks={"m": SelectionMask.full(6, 8)})
    svc = ClassMapService(reader=reader, summarizer=ClassSummaryAdapter())
    with pytest.raises(RuntimeError):
        svc.run(ClassMapInputs("test", mask_uri="m"), ClassMapSpec(name="x", out_png=tmp_path / "a.png"))

def test_quicklook_exporter_takes_precedence(tmp_path):
    reader = MemReader(images={"test": make_image()}, masks={"m": SelectionMask.full(6, 8)})
    ql = RecordingQuicklook()
    writer = MemWriter()
    svc = ClassMapService(reader=reader, writer=writer, summarizer=ClassSummaryAdapter(), ql_exporter=ql)
    spec = ClassMapSpec(name="x", out_png=tmp_path / "a.png", quicklook=QuicklookSpec(scale=4))
    svc.run(ClassMapInputs("test", mask_uri="m"), spec)
    assert ql.calls == [(str(tmp_path / "a.png"), QuicklookSpec(scale=4))]
    assert writer.images == {}

def test_csv_report(tmp_path):
    reader = MemReader(images={"test": _test_scene(), "train": make_image()}, masks={"m": SelectionMask.full(6, 8)})
    svc = ClassMapService(reader=reader, writer=MemWriter(), summarizer=ClassSummaryAdapter(), reporter=CSVExporter())
    out = tmp_path / "rep" / "summary.csv"
    res = svc.run(ClassMapInputs("test", training_uris=["train"], mask_uri="m"),
                  ClassMapSpec(name="scene", make_report=True, out_report=out))
    assert res.report_csv == out
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "# class_summary name=scene mode=spatial detection_rate=0.95"
    assert lines[1] == "# T_cdist=0.0"
    assert lines[4] == "code,name,count,percent"
    assert len(lines) == 5 + len(DEFAULT_CLASS_LABELS)
    assert any(l.startswith("1,background,45,") for l in lines[5:])

def test_report_path_defaults_next_to_png(tmp_path):
    reader = MemReader(images={"test": make_image()}, masks={"m": SelectionMask.full(6, 8)})
    svc = ClassMapService(reader=reader, writer=MemWriter(), summarizer=ClassSummaryAdapter(), reporter=CSVExporter())
    res = svc.run(ClassMapInputs("test", mask_uri="m"),
                  ClassMapSpec(name="x", out_png=tmp_path / "cls.png", make_report=True))
    assert res.report_csv == tmp_path / "cls.csv"
    assert res.report_csv.exists()

def test_train_only_returns_reusable_model():
    reader = MemReader(images={"test": make_image()}, masks={"m": SelectionMask.full(6, 8)})
    model = ClassMapService(reader=reader).train(ClassMapInputs("test", mask_uri="m"), 0.9)
    cmap = model.classify(make_image(2, 2))
    assert isinstance(cmap, ClassificationMap)
    assert cmap.counts()[PixelClass.BACKGROUND] == 4
