from __future__ import annotations

import numpy as np
from PIL import Image


class ProcessingService:
    """Pure NumPy pixel math. Inputs and outputs are float32 arrays normalized to [0, 1].

    Channel convention:
    - Grayscale: (H, W)
    - RGB: (H, W, 3)
    """

    # Uniform scale so the longer side fits max_dimension; never upscales.
    @staticmethod
    def fit_within(width: int, height: int, max_dimension: int) -> tuple[int, int]:
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be > 0")
        if max_dimension <= 0:
            raise ValueError("max_dimension must be > 0")
        scale = min(1.0, max_dimension / max(width, height))
        if scale >= 1.0:
            return width, height
        return max(1, round(width * scale)), max(1, round(height * scale))

    # Brightness: I_out = I_in * factor
    @staticmethod
    def adjust_brightness(matrix: np.ndarray, factor: float) -> np.ndarray:
        out = np.clip(matrix.astype(np.float32) * float(factor), 0.0, 1.0)
        return out.astype(np.float32)

    # Linear contrast around mid-gray: I_out = (I_in - 0.5) * factor + 0.5
    @staticmethod
    def adjust_contrast(matrix: np.ndarray, factor: float) -> np.ndarray:
        mat = matrix.astype(np.float32)
        out = np.clip((mat - 0.5) * float(factor) + 0.5, 0.0, 1.0)
        return out.astype(np.float32)

    # Grayscale (Luminosity): 0.299*R + 0.587*G + 0.114*B
    @staticmethod
    def grayscale_luminosity(matrix: np.ndarray) -> np.ndarray:
        mat = matrix.astype(np.float32)
        if mat.ndim == 3 and mat.shape[2] >= 3:
            weights = np.array([0.299, 0.587, 0.114], dtype=np.float32)
            return np.dot(mat[..., :3], weights).astype(np.float32)
        return mat

    # Saturation: blend between the luminosity gray and the color image.
    # factor 0 -> gray, 1 -> unchanged, >1 -> more saturated
    @staticmethod
    def adjust_saturation(matrix: np.ndarray, factor: float) -> np.ndarray:
        mat = matrix.astype(np.float32)
        if mat.ndim != 3 or mat.shape[2] < 3:
            return mat
        gray = ProcessingService.grayscale_luminosity(mat)[..., None]
        out = np.clip(gray + (mat[..., :3] - gray) * float(factor), 0.0, 1.0)
        return out.astype(np.float32)

    # The tone boost applied after resizing: contrast, saturation, then brightness.
    @staticmethod
    def tone_boost(
        matrix: np.ndarray,
        contrast: float = 1.1,
        saturation: float = 1.1,
        brightness: float = 1.05,
    ) -> np.ndarray:
        out = ProcessingService.adjust_contrast(matrix, contrast)
        out = ProcessingService.adjust_saturation(out, saturation)
        return ProcessingService.adjust_brightness(out, brightness)

    # --------- conversions ---------
    @staticmethod
    def to_array(image: Image.Image) -> np.ndarray:
        return np.asarray(image.convert("RGB")).astype(np.float32) / 255.0

    @staticmethod
    def from_array(matrix: np.ndarray) -> Image.Image:
        arr = np.clip(matrix, 0.0, 1.0).astype(np.float32)
        if arr.ndim == 2:
            return Image.fromarray(np.rint(arr * 255.0).astype("uint8"))
        return Image.fromarray(np.rint(arr[..., :3] * 255.0).astype("uint8"))
