"""Texture and batch recoloring pipelines."""

from .batch import BatchRecolorer, ProcessingStatistics
from .recolorer import Algorithm, TextureRecolorer

__all__ = ["Algorithm", "BatchRecolorer", "ProcessingStatistics", "TextureRecolorer"]
