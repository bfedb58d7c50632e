"""
Text preparation and sentence chunking for streaming speech synthesis.

Long inputs are cut at sentence-ending punctuation and regrouped into chunks
of at most :data:`MAX_TOKENS_PER_CHUNK` tokens, so that each chunk can be fed
to the synthesis model on its own while earlier chunks are already playing.
"""

from collections.abc import Iterator
from typing import Final, NamedTuple
import logging

import regex as re

from ._models.unigram import METASPACE, UnigramTokenizer
from .errors import InputError
from .types import Token

MAX_TOKENS_PER_CHUNK: Final[int] = 50
# prompts shorter than this many words get left padding
SHORT_PROMPT_WORDS: Final[int] = 5
SHORT_PROMPT_PADDING: Final[int] = 8
# prompts of at most this many words need more frames after end of speech
FEW_WORDS: Final[int] = 4
FRAMES_AFTER_EOS_FEW_WORDS: Final[int] = 3
FRAMES_AFTER_EOS_DEFAULT: Final[int] = 1
SENTENCE_END_TEXT: Final[str] = ".!...?"

_SPACE_RUN: Final = re.compile(r" {2,}")

log = logging.getLogger(__name__)


class TextChunk(NamedTuple):
    """One chunk of text and the decoder's frames-after-eos guess for it."""

    text: str
    frames_after_eos: int


def prepare_text_prompt(text: str) -> tuple[str, int]:
    """
    Normalize a prompt for the synthesis model.

    The text is stripped, line breaks become spaces and runs of spaces
    collapse to one. The first letter is capitalized and a final letter or
    digit gets a closing period. Prompts under five words are left padded
    with eight spaces, which keeps generation stable on very short inputs.

    :param text: Raw prompt text.
    :returns: The normalized text and how many frames the decoder should keep
        generating after it signals end of speech.
    :raises InputError: If ``text`` is empty or only whitespace.
    """
    text = text.strip()
    if not text:
        raise InputError("text prompt cannot be empty")

    text = text.replace("\n", " ").replace("\r", " ")
    text = _SPACE_RUN.sub(" ", text)

    n_words = len([word for word in text.split(" ") if word])
    if n_words <= FEW_WORDS:
        frames_after_eos = FRAMES_AFTER_EOS_FEW_WORDS
    else:
        frames_after_eos = FRAMES_AFTER_EOS_DEFAULT

    if text[0].islower():
        text = text[0].upper() + text[1:]

    if text[-1].isalnum():
        text += "."

    if n_words < SHORT_PROMPT_WORDS:
        text = " " * SHORT_PROMPT_PADDING + text

    return text, frames_after_eos


def sentence_end_tokens(tokenizer: UnigramTokenizer) -> set[Token]:
    """
    Return the ids that mark the end of a sentence.

    These are the ids :data:`SENTENCE_END_TEXT` encodes to, minus the bare
    metaspace piece that every encoding starts with.
    """
    end_tokens = set(tokenizer.encode(SENTENCE_END_TEXT))
    metaspace_id = tokenizer.token_to_id(METASPACE)
    if metaspace_id is not None:
        end_tokens.discard(metaspace_id)
    return end_tokens


def _split_points(tokens: list[Token], end_tokens: set[Token]) -> list[int]:
    """Return slice boundaries placed right after each run of end tokens."""
    points = [0]
    previous_was_end = False
    for idx, tok in enumerate(tokens):
        if tok in end_tokens:
            previous_was_end = True
        else:
            if previous_was_end:
                points.append(idx)
            previous_was_end = False
    points.append(len(tokens))
    return points


def split_into_best_sentences(tokenizer: UnigramTokenizer, text: str) -> list[str]:
    """
    Split text into sentence-aligned chunks for streaming synthesis.

    The prepared text is cut after every run of sentence-ending tokens, and
    the resulting sentences are packed greedily into chunks of at most
    :data:`MAX_TOKENS_PER_CHUNK` tokens. A sentence longer than the budget is
    kept whole in its own chunk.

    :param tokenizer: Tokenizer used to count and decode tokens.
    :param text: Raw text to split.
    :returns: Chunks in input order.
    :raises InputError: If ``text`` is empty or only whitespace.
    """
    prepared, _ = prepare_text_prompt(text)
    prepared = prepared.strip()

    tokens = tokenizer.encode(prepared)
    if not tokens:
        return [prepared]

    points = _split_points(tokens, sentence_end_tokens(tokenizer))
    log.debug(f"{len(tokens)} tokens split at {points}")

    sentences: list[tuple[int, str]] = []
    for start, end in zip(points, points[1:]):
        sentences.append((end - start, tokenizer.decode(tokens[start:end])))

    chunks: list[str] = []
    current_chunk = ""
    current_count = 0
    for count, sentence in sentences:
        if current_chunk == "":
            current_chunk = sentence
            current_count = count
            continue

        if current_count + count > MAX_TOKENS_PER_CHUNK:
            chunks.append(current_chunk.strip())
            current_chunk = sentence
            current_count = count
        else:
            current_chunk += " " + sentence
            current_count += count

    if current_chunk != "":
        chunks.append(current_chunk.strip())

    log.debug(f"packed {len(sentences)} sentences into {len(chunks)} chunks")
    return chunks


def iter_text_chunks(tokenizer: UnigramTokenizer, text: str) -> Iterator[TextChunk]:
    """
    Yield the chunks of ``text`` with their frames-after-eos guess.

    Each chunk is passed through :func:`prepare_text_prompt` on its own, the
    way a streaming synthesis loop consumes it.
    """
    for chunk in split_into_best_sentences(tokenizer, text):
        _, frames_after_eos = prepare_text_prompt(chunk)
        yield TextChunk(chunk, frames_after_eos)


__all__ = [
    "MAX_TOKENS_PER_CHUNK",
    "SENTENCE_END_TEXT",
    "TextChunk",
    "prepare_text_prompt",
    "sentence_end_tokens",
    "split_into_best_sentences",
    "iter_text_chunks",
]
