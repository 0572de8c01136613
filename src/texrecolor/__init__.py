"""texrecolor: category-driven texture recoloring."""

__version__ = "0.1.0"
__author__ = "texrecolor contributors"

from .color.analyzer import ColorAnalyzer, analyze
from .color.hsv_transform import ColorParameters, HsvTransformer, hsv_transform
from .color.replacer import ColorReplacer, replace
from .color.types import ColorAnalysisResult, ReplacementParameters
from .core.batch import BatchRecolorer, ProcessingStatistics
from .core.recolorer import TextureRecolorer
from .palettes.catalog import PaletteCatalog, get_palette
from .palettes.categories import Category

__all__ = [
    "analyze",
    "replace",
    "hsv_transform",
    "get_palette",
    "ColorAnalyzer",
    "ColorReplacer",
    "HsvTransformer",
    "ColorParameters",
    "ColorAnalysisResult",
    "ReplacementParameters",
    "PaletteCatalog",
    "Category",
    "TextureRecolorer",
    "BatchRecolorer",
    "ProcessingStatistics",
]
