"""Decoding helpers turning image sources into RGBA pixel buffers."""
from __future__ import annotations

import base64
import binascii
import io
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Tuple, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..errors import InvalidRasterError, LoadError

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, bytes, IO[bytes], Image.Image]

_DATA_URL_PREFIX = "data:image/"


@dataclass(frozen=True, eq=False)
class RasterImage:
    """Read-only RGBA buffer of shape ``(height, width, 4)``."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        pixels = self.pixels
        if not isinstance(pixels, np.ndarray) or pixels.dtype != np.uint8:
            raise InvalidRasterError("Pixel buffer must be a uint8 numpy array")
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise InvalidRasterError(f"Expected an RGBA buffer, got shape {pixels.shape}")
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise InvalidRasterError("Pixel buffer has zero width or height")
        if pixels.flags.writeable:
            pixels = pixels.copy()
            pixels.setflags(write=False)
            object.__setattr__(self, "pixels", pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def data(self) -> np.ndarray:
        """Flat RGBA channel array indexed ``(y * width + x) * 4``."""

        return self.pixels.reshape(-1)

    @property
    def rgb(self) -> np.ndarray:
        return self.pixels[:, :, :3]

    def rgba_at(self, x: int, y: int) -> Tuple[int, int, int, int]:
        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def rgb_at(self, x: int, y: int) -> Tuple[int, int, int]:
        r, g, b, _ = self.rgba_at(x, y)
        return r, g, b

    def to_pil(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.pixels))

    @classmethod
    def from_array(cls, array: np.ndarray) -> "RasterImage":
        array = np.asarray(array)
        if array.ndim == 3 and array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=array.dtype)
            array = np.concatenate([array, alpha], axis=2)
        if array.dtype != np.uint8:
            if array.size and (array.min() < 0 or array.max() > 255):
                raise InvalidRasterError("Channel values must lie in 0-255")
            array = array.astype(np.uint8)
        return cls(array)

    @classmethod
    def from_pil(cls, image: Image.Image) -> "RasterImage":
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(np.array(image, dtype=np.uint8))

    @classmethod
    def from_buffer(cls, width: int, height: int, buffer: bytes) -> "RasterImage":
        expected = width * height * 4
        if width <= 0 or height <= 0 or len(buffer) != expected:
            raise InvalidRasterError(
                f"Buffer of {len(buffer)} bytes does not match {width}x{height} RGBA ({expected} bytes)"
            )
        array = np.frombuffer(buffer, dtype=np.uint8).reshape(height, width, 4)
        return cls(array.copy())


def describe_source(source: ImageSource) -> str:
    if isinstance(source, (str, Path)):
        text = str(source)
        if text.startswith(_DATA_URL_PREFIX):
            return text[: text.find(",") if "," in text else 32]
        return text
    if isinstance(source, bytes):
        return f"<{len(source)} bytes>"
    if isinstance(source, Image.Image):
        return f"<PIL image {source.size[0]}x{source.size[1]}>"
    return getattr(source, "name", repr(source))


def _decode_data_url(url: str) -> bytes:
    header, _, payload = url.partition(",")
    if not payload or ";base64" not in header:
        raise ValueError("Only base64 encoded data URLs are supported")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError("Invalid base64 payload") from exc


def load_image(source: ImageSource) -> RasterImage:
    """Decode ``source`` into a :class:`RasterImage`.

    ``source`` may be a file path, raw encoded bytes, a binary file object, a
    ``data:image/...;base64,`` URL or an already opened Pillow image.
    """

    label = describe_source(source)
    try:
        if isinstance(source, Image.Image):
            return RasterImage.from_pil(source)
        if isinstance(source, str) and source.startswith(_DATA_URL_PREFIX):
            source = io.BytesIO(_decode_data_url(source))
        elif isinstance(source, bytes):
            source = io.BytesIO(source)
        with Image.open(source) as image:
            image.load()
            raster = RasterImage.from_pil(image)
    except (OSError, UnidentifiedImageError, ValueError, InvalidRasterError) as exc:
        logger.warning("Failed to decode %s: %s", label, exc)
        raise LoadError(label, str(exc)) from exc
    logger.debug("Loaded %s (%dx%d)", label, raster.width, raster.height)
    return raster


def load_pair(reference: ImageSource, candidate: ImageSource) -> Tuple[RasterImage, RasterImage]:
    """Decode both images concurrently; fail if either one fails."""

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="designqa-load") as pool:
        futures = [pool.submit(load_image, reference), pool.submit(load_image, candidate)]
        errors = [future.exception() for future in futures]
    for error in errors:
        if error is not None:
            raise error
    return futures[0].result(), futures[1].result()


def align_to_reference(reference: RasterImage, candidate: RasterImage) -> RasterImage:
    """Return ``candidate`` resampled to the pixel grid of ``reference``."""

    if candidate.size == reference.size:
        return candidate
    logger.info(
        "Resampling candidate from %dx%d to reference size %dx%d",
        candidate.width,
        candidate.height,
        reference.width,
        reference.height,
    )
    resized = candidate.to_pil().resize(reference.size, Image.Resampling.BILINEAR)
    return RasterImage.from_pil(resized)


def encode_png(image: RasterImage) -> bytes:
    buffer = io.BytesIO()
    image.to_pil().save(buffer, format="PNG")
    return buffer.getvalue()


def to_data_url(image: RasterImage) -> str:
    return "data:image/png;base64," + base64.b64encode(encode_png(image)).decode("ascii")
