"""Prompt building and model-backed analysis."""

from .prompt_builder import TryOnPromptBuilder, mentions_no_person
from .size_analyzer import SizeAnalyzer, parse_size_analysis

__all__ = [
    "TryOnPromptBuilder",
    "mentions_no_person",
    "SizeAnalyzer",
    "parse_size_analysis",
]
