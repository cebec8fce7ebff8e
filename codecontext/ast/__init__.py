"""
Parser Facade

Language classification, parsing, and symbol/import extraction.
"""

from codecontext.ast.models import FileClassification, Language, ParsedFile
from codecontext.ast.parser import ParserManager, is_generated_file, is_test_file

__all__ = [
    "FileClassification",
    "Language",
    "ParsedFile",
    "ParserManager",
    "is_generated_file",
    "is_test_file",
]
