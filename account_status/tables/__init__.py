from .reader import read_table
from .writer import build_document, encode_field, render_table

__all__ = [
    "read_table",
    "build_document",
    "encode_field",
    "render_table",
]
