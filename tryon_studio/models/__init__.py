"""Data models for the try-on studio."""

from .capture import CapturedImage, ImageSource
from .product import ProductReference
from .options import BackgroundMode, FitBand, FitOptions, fit_band
from .result import TryOnResult
from .sizing import SizeAnalysis

__all__ = [
    "CapturedImage",
    "ImageSource",
    "ProductReference",
    "BackgroundMode",
    "FitBand",
    "FitOptions",
    "fit_band",
    "TryOnResult",
    "SizeAnalysis",
]
