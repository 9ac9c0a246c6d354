"""Image preprocessing."""

from .normalizer import ImageNormalizer

__all__ = ["ImageNormalizer"]
