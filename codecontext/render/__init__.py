"""
Rendering

Markdown output for the code graph.
"""

from codecontext.render.markdown import MarkdownGenerator

__all__ = ["MarkdownGenerator"]
