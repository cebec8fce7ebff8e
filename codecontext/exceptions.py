"""
CodeContext Exception Hierarchy

Centralized exception classes for structured error handling across the codebase.
All CodeContext-specific exceptions inherit from CodeContextError.

Usage:
    from codecontext.exceptions import CodeContextError, ParseError

    try:
        graph = builder.analyze(target_dir)
    except ParseError as e:
        logger.error(f"Analysis failed: {e}")
"""


class CodeContextError(Exception):
    """Base exception for all CodeContext errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(CodeContextError):
    """Error in CodeContext configuration."""

    pass


# =============================================================================
# Tool Errors
# =============================================================================


class ToolError(CodeContextError):
    """Base class for errors returned to MCP callers."""

    pass


class InvalidArgumentError(ToolError):
    """A required tool argument is missing or malformed."""

    pass


class NotFoundError(ToolError):
    """Requested file or symbol is not in the code graph."""

    pass


class AnalysisCancelledError(ToolError):
    """Analysis was cancelled before the graph was published."""

    pass


# =============================================================================
# Parsing Errors
# =============================================================================


class ParsingError(CodeContextError):
    """Base class for parser facade errors."""

    pass


class UnsupportedLanguageError(ParsingError):
    """File extension has no registered language."""

    pass


class ParseError(ParsingError):
    """File could not be read or parsed."""

    pass


# =============================================================================
# Analysis Errors
# =============================================================================


class AnalysisError(CodeContextError):
    """Base class for graph building errors."""

    pass


class WalkError(AnalysisError):
    """Directory walk failed."""

    pass


class PatternError(AnalysisError):
    """Glob pattern is malformed."""

    pass


class ImportEscapesProjectError(AnalysisError):
    """Import path traverses outside the project or into system directories."""

    pass


class GraphSealedError(AnalysisError):
    """A published code graph was mutated."""

    pass


# =============================================================================
# Git Errors
# =============================================================================


class GitError(CodeContextError):
    """Base class for git-related errors."""

    pass


class GitCommandError(GitError):
    """Git command failed to execute."""

    pass


class GitUnavailableError(GitError):
    """Target directory cannot be analyzed with git."""

    pass


class SemanticAnalysisError(GitError):
    """Co-change analysis or clustering failed."""

    pass
