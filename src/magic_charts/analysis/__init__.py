"""Column classification and field analysis."""

from magic_charts.analysis.classifier import CardinalityTier, SemanticType, classify
from magic_charts.analysis.field_analyzer import FieldDescriptor, FieldSet, analyze_field, build_field_set

__all__ = [
    "CardinalityTier",
    "FieldDescriptor",
    "FieldSet",
    "SemanticType",
    "analyze_field",
    "build_field_set",
    "classify",
]
