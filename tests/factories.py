import numpy as np
from bgmodel.contracts.images import ColorImage, SelectionMask

GRAY = (128, 128, 128)

def make_image(h=6, w=8, color=GRAY):
    return ColorImage.filled(h, w, color)

def make_noisy_image(h=24, w=32, base=(120, 100, 80), spread=6, seed=0):
    rng = np.random.default_rng(seed)
    arr = np.asarray(base, dtype=np.int16) + rng.integers(-spread, spread + 1, size=(h, w, 3))
    return ColorImage(np.clip(arr, 0, 255).astype(np.uint8))

def make_full_mask(h=6, w=8):
    return SelectionMask.full(h, w)

def make_frames(n=3, h=4, w=5, color=(50, 60, 70), site=(1, 2), site_values=(100, 150, 100)):
    """N imágenes constantes salvo un sitio que toma `site_values` (los tres canales)."""
    frames = []
    for i in range(n):
        arr = np.empty((h, w, 3), dtype=np.uint8)
        arr[...] = color
        if site is not None:
            arr[site[0], site[1], :] = site_values[i % len(site_values)]
        frames.append(ColorImage(arr))
    return frames

def make_noisy_frames(n=5, h=10, w=12, base=(90, 140, 60), spread=5, seed=7):
    return [make_noisy_image(h, w, base, spread, seed + i) for i in range(n)]
