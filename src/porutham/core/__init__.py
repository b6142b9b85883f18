"""Core matching logic: table resolution, filtering and ranking."""

from . import age, errors, filters, models, orchestrator, ranking, rasi, resolver, tables, validation

__all__ = [
    "age",
    "errors",
    "filters",
    "models",
    "orchestrator",
    "ranking",
    "rasi",
    "resolver",
    "tables",
    "validation",
]
