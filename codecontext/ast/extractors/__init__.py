"""
Language-Specific Extractors

Each extractor implements the LanguageExtractor interface for one or more languages.
"""

from codecontext.ast.extractors.base import LanguageExtractor, get_extractor, register_extractor

# Import extractors to trigger registration
from codecontext.ast.extractors.dart import DartExtractor
from codecontext.ast.extractors.data import DataExtractor
from codecontext.ast.extractors.go import GoExtractor
from codecontext.ast.extractors.java import JavaExtractor
from codecontext.ast.extractors.markdown import MarkdownExtractor
from codecontext.ast.extractors.python import PythonExtractor
from codecontext.ast.extractors.rust import RustExtractor
from codecontext.ast.extractors.typescript import TypeScriptExtractor

__all__ = [
    "LanguageExtractor",
    "get_extractor",
    "register_extractor",
    "DartExtractor",
    "DataExtractor",
    "GoExtractor",
    "JavaExtractor",
    "MarkdownExtractor",
    "PythonExtractor",
    "RustExtractor",
    "TypeScriptExtractor",
]
