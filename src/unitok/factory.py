"""Factory functions for creating tokenizers."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any
import json
import logging

from ._decorators import measure_time
from ._models.base import TOKENIZER_FILENAME
from ._models.unigram import UnigramTokenizer
from .errors import ConfigError, ModelLoadError

log = logging.getLogger(__name__)


def from_dict(description: Mapping[str, Any]) -> UnigramTokenizer:
    """
    Build a tokenizer from an already parsed ``tokenizer.json`` document.

    :param description: Mapping with a ``model`` section holding ``unk_id``
                        and ``vocab``.
    :return: Ready to use tokenizer.
    :raises ConfigError: If required fields are missing or malformed.

    .. code-block:: python

        tokenizer = from_dict({"model": {"unk_id": 0, "vocab": [["<unk>", 0.0]]}})
    """
    return UnigramTokenizer.from_dict(description)


def _resolve_tokenizer_path(model_path: str | Path) -> Path:
    """Return the tokenizer file for a file path or a model directory."""
    path = Path(model_path)

    if path.is_dir():
        path = path / TOKENIZER_FILENAME

    if not path.exists():
        raise ModelLoadError("tokenizer filepath does not exist", model_path=str(path))

    return path


@measure_time
def from_pretrained(
    model_path: str | Path, expected_vocab_size: int | None = None
) -> UnigramTokenizer:
    """
    Load a tokenizer from a ``tokenizer.json`` file.

    :param model_path: Path to the json file, or to a model directory that
                       contains ``tokenizer.json``.
    :param expected_vocab_size: When given, the vocabulary must have exactly
                                this many pieces (the number of text embedding
                                rows of the model that consumes the ids).
    :return: Loaded tokenizer.
    :raises ModelLoadError: If the file doesn't exist or is not valid json.
    :raises ConfigError: If the file content is not a unigram tokenizer
                         description or the vocabulary size is unexpected.

    .. code-block:: python

        tokenizer = from_pretrained("path/to/model_dir")
        tokens = tokenizer.encode("Hello world")
    """
    path = _resolve_tokenizer_path(model_path)
    log.info(f"loading tokenizer from {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            description = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ModelLoadError(f"cannot read tokenizer file: {e}", model_path=str(path)) from e

    tokenizer = UnigramTokenizer.from_dict(description)

    if expected_vocab_size is not None and tokenizer.vocab_size() != expected_vocab_size:
        raise ConfigError(
            f"tokenizer has vocab size={tokenizer.vocab_size()} "
            f"but {expected_vocab_size} was expected",
            field="model.vocab",
        )

    return tokenizer
