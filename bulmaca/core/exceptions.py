"""Custom exception hierarchy for crossword generation."""


class CrosswordError(Exception):
    """Base exception for engine failures."""


class EngineNotInitializedError(CrosswordError):
    """Raised when a puzzle is requested before the word index exists."""


class WordBankLoadError(CrosswordError):
    """Raised when a word bank file cannot be read or parsed."""


class TemplateError(CrosswordError):
    """Raised when an unknown grid template is requested."""


class ValidationError(CrosswordError):
    """Raised when a filled puzzle fails the integrity checks."""
