"""Utility functions used across the project."""

from .image_ops import RasterImage, align_to_reference, load_image, load_pair

__all__ = [
    "RasterImage",
    "align_to_reference",
    "load_image",
    "load_pair",
]
