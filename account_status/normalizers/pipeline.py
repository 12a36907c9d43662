from typing import List, Sequence
from .base import Normalizer
from .rules import DateRule, IntegerRule
from account_status.records import Row, Value


class NormalizerPipeline(Normalizer):
    """
    A chain of field normalizers.
    Each stage takes the output of the previous stage, so rules stay
    small and can be tested one at a time.
    """
    def __init__(self, stages: List[Normalizer]):
        self.stages = stages

    def normalize_value(self, column: str, value: Value) -> Value:
        for stage in self.stages:
            value = stage.normalize_value(column, value)
        return value

    def normalize_row(self, header: Sequence[str], fields: Sequence[str], line: int = 0) -> Row:
        """
        Build a Row from raw fields. The key (first column) is normalized
        like any other field, so a numeric id comes out as an int.
        """
        values = tuple(self.normalize_value(col, v) for col, v in zip(header, fields))
        return Row(header=tuple(header), values=values, line=line)


def get_default_normalizer() -> NormalizerPipeline:
    """Factory for the default pipeline: integers first, then dates."""
    return NormalizerPipeline([IntegerRule(), DateRule()])
