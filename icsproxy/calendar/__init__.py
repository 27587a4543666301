"""ICS document transform: date-time rewriting, VEVENT normalization, folding."""

from .datetime_rewriter import DateTimeClass, TransformOptions, rewrite_datetime_line
from .pipeline import transform, transform_ics

__all__ = [
    "DateTimeClass",
    "TransformOptions",
    "rewrite_datetime_line",
    "transform",
    "transform_ics",
]
