from .pipeline import get_default_normalizer, NormalizerPipeline
from .rules import DateRule, IntegerRule, parse_date
from .base import Normalizer

__all__ = [
    "get_default_normalizer",
    "NormalizerPipeline",
    "DateRule",
    "IntegerRule",
    "parse_date",
    "Normalizer",
]
