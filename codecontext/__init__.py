"""
CodeContext

Code graph analysis exposed to AI assistants over MCP.
"""

__version__ = "2.0.0"
