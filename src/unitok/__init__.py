"""unitok: Unigram subword tokenization and text chunking for streaming TTS."""

from ._models.base import Tokenizer
from ._models.unigram import METASPACE, UnigramTokenizer
from .chunking import (
    MAX_TOKENS_PER_CHUNK,
    TextChunk,
    iter_text_chunks,
    prepare_text_prompt,
    split_into_best_sentences,
)
from .errors import (
    ConfigError,
    InputError,
    ModelLoadError,
    TokenizationError,
    UnitokError,
    VocabularyError,
)
from .factory import from_dict, from_pretrained
from .parallel import ParallelMode, list_parallel_modes

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("unitok")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "Tokenizer",
    "UnigramTokenizer",
    "METASPACE",
    "MAX_TOKENS_PER_CHUNK",
    "TextChunk",
    "ParallelMode",
    "UnitokError",
    "ConfigError",
    "InputError",
    "ModelLoadError",
    "TokenizationError",
    "VocabularyError",
    "from_dict",
    "from_pretrained",
    "prepare_text_prompt",
    "split_into_best_sentences",
    "iter_text_chunks",
    "list_parallel_modes",
]
