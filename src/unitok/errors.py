"""Custom exception hierarchy for unitok tokenization errors."""

from .types import Token


class UnitokError(Exception):
    """Base exception for all unitok errors."""


class ConfigError(UnitokError):
    """Raised when a vocabulary description or option is malformed."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        available: list[str] | None = None,
    ) -> None:
        """Initialize with optional field name and valid choices appended to the message."""
        extra = " "
        if field:
            extra += f"(field: {field}) "
        if available:
            extra += f"(available: {available}) "
        super().__init__(message + extra)
        self.field = field
        self.available = available


class InputError(UnitokError, ValueError):
    """Raised when caller supplied text cannot be processed."""


class TokenizationError(UnitokError):
    """Raised when tokenization fails."""

    def __init__(
        self,
        message: str,
        *,
        position: int | None = None,
        input_text: str | None = None,
    ) -> None:
        super().__init__(message)
        self.position = position
        self.input_text = input_text


class VocabularyError(UnitokError):
    """Raised when vocabulary operations fail."""

    def __init__(
        self,
        message: str,
        *,
        vocab_size: int | None = None,
        invalid_tok: Token | None = None,
    ) -> None:
        """Initialize with optional token and vocab_size that get appended to the message."""
        extra = " "
        if vocab_size is not None:
            extra += f"(vocab size: {vocab_size}) "
        # decoding: token not in model vocab
        if invalid_tok is not None:
            extra += f"(invalid token: {invalid_tok}) "
        super().__init__(message + extra)
        self.vocab_size = vocab_size
        self.invalid_tok = invalid_tok


class ModelLoadError(UnitokError):
    """Raised when loading a tokenizer description from disk fails."""

    def __init__(self, message: str, *, model_path: str | None = None) -> None:
        extra = " "
        if model_path:
            extra += f"(path: {model_path}) "
        super().__init__(message + extra)
        self.model_path = model_path
