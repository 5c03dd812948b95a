"""Encoding of tone-mapped canvases to image files."""

from __future__ import annotations

import enum
from pathlib import Path

import PIL.Image

from .canvas import DensityCanvas


class ImageFormat(enum.Enum):
    PNG = "png"
    JPEG = "jpeg"
    BMP = "bmp"

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageFormat.JPEG else self.value

    @classmethod
    def from_name(cls, name: str) -> "ImageFormat":
        normalized = name.strip().lower().lstrip(".")
        if normalized == "jpg":
            normalized = "jpeg"
        for fmt in cls:
            if fmt.value == normalized:
                return fmt
        valid = ", ".join(fmt.value for fmt in cls)
        raise ValueError(f"Unsupported image format '{name}'. Valid choices: {valid}.")


def to_image(canvas: DensityCanvas) -> PIL.Image.Image:
    """Grayscale image of the canvas brightness, one pixel per cell."""

    return PIL.Image.fromarray(canvas.to_uint8())


def save_image(canvas: DensityCanvas, output_path: Path, image_format: ImageFormat) -> Path:
    """Write ``canvas`` to ``output_path`` using the provided format."""

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    to_image(canvas).save(str(output_path), format=image_format.name)
    return output_path
