"""Tests for prompt preparation and sentence chunking."""

import pytest

import unitok as utok
from unitok import chunking
from unitok.chunking import _split_points, sentence_end_tokens
from unitok.errors import InputError

from conftest import METASPACE


# prepare_text_prompt
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text, expected",
    [
        ("hi", ("        Hi.", 3)),
        ("hello world", ("        Hello world.", 3)),
        ("hello world how are you", ("Hello world how are you.", 1)),
        ("a b c d", ("        A b c d.", 3)),
        ("a b c d e", ("A b c d e.", 1)),
        ("Already done?", ("        Already done?", 3)),
        ("42 is the answer here", ("42 is the answer here.", 1)),
        ("élan vital is a concept", ("Élan vital is a concept.", 1)),
        ("  padded input with spaces around  ", ("Padded input with spaces around.", 1)),
    ],
)
def test_prepare_text_prompt(text, expected):
    assert utok.prepare_text_prompt(text) == expected


def test_prepare_text_prompt_joins_lines():
    """Line breaks become single spaces."""
    text = "One\ntwo three\r\nfour  five six"
    assert utok.prepare_text_prompt(text) == ("One two three four five six.", 1)


@pytest.mark.parametrize("text", ["", "   ", "\n\t\r\n"])
def test_prepare_text_prompt_rejects_blank(text):
    with pytest.raises(InputError):
        utok.prepare_text_prompt(text)


def test_input_error_is_value_error():
    """Callers catching ValueError also see blank prompts."""
    with pytest.raises(ValueError, match="cannot be empty"):
        utok.prepare_text_prompt("   ")


# split points
# ---------------------------------------------------------------------------


def test_sentence_end_tokens(tokenizer):
    """Boundary ids are the punctuation pieces without the leading marker."""
    expected = {tokenizer.token_to_id(p) for p in [".", "!", "...", "?"]}
    assert sentence_end_tokens(tokenizer) == expected
    assert tokenizer.token_to_id(METASPACE) not in sentence_end_tokens(tokenizer)


@pytest.mark.parametrize(
    "tokens, expected",
    [
        ([1, 2, 9, 9, 9, 3, 9, 4], [0, 5, 7, 8]),
        ([1, 2, 3], [0, 3]),
        ([1, 9, 9], [0, 3]),
        ([9, 1], [0, 1, 2]),
        ([], [0, 0]),
    ],
)
def test_split_points_one_per_run(tokens, expected):
    """One split right after each run of boundary ids."""
    assert _split_points(tokens, {9}) == expected


# split_into_best_sentences
# ---------------------------------------------------------------------------


def test_short_text_is_one_chunk(tokenizer):
    chunks = utok.split_into_best_sentences(tokenizer, "Hello world. The cat sat!")
    assert chunks == ["Hello world. The cat sat!"]


def test_padding_is_not_kept(tokenizer):
    """Short prompts are padded for synthesis but chunks are stripped."""
    assert utok.split_into_best_sentences(tokenizer, "hello world") == ["Hello world."]


def test_sentences_packed_under_budget(tokenizer):
    """Each 'The cat sat.' is four tokens, so twelve fit in 50."""
    chunks = utok.split_into_best_sentences(tokenizer, "The cat sat. " * 20)

    assert chunks == [
        " ".join(["The cat sat."] * 12),
        " ".join(["The cat sat."] * 8),
    ]
    for chunk in chunks:
        assert len(tokenizer.encode(chunk)) <= utok.MAX_TOKENS_PER_CHUNK


def test_oversized_sentence_kept_whole(tokenizer):
    """A run-on sentence over the budget is never cut."""
    text = " ".join(["the"] * 199)
    chunks = utok.split_into_best_sentences(tokenizer, text)

    assert len(chunks) == 1
    assert len(tokenizer.encode(chunks[0])) == 200


def test_punctuation_run_not_split(tokenizer, monkeypatch):
    """With a budget of one token every sentence is a chunk, and '!?!' stays together."""
    monkeypatch.setattr(chunking, "MAX_TOKENS_PER_CHUNK", 1)
    chunks = utok.split_into_best_sentences(tokenizer, "Hello world!?! The cat sat.")
    assert chunks == ["Hello world!?!", "The cat sat."]


def test_chunks_preserve_text(tokenizer):
    """Joining the chunks gives back the prepared text."""
    text = "Hello world. " * 15 + "The cat sat... it is the cat?"
    chunks = utok.split_into_best_sentences(tokenizer, text)

    assert len(chunks) > 1
    prepared, _ = utok.prepare_text_prompt(text)
    assert " ".join(chunks) == prepared


def test_split_rejects_blank(tokenizer):
    with pytest.raises(InputError):
        utok.split_into_best_sentences(tokenizer, " \n ")


# iter_text_chunks
# ---------------------------------------------------------------------------


def test_iter_text_chunks_frames(tokenizer):
    """Every chunk carries the frames-after-eos guess for its own length."""
    assert list(utok.iter_text_chunks(tokenizer, "hello world")) == [
        utok.TextChunk("Hello world.", 3)
    ]

    chunks = list(utok.iter_text_chunks(tokenizer, "The cat sat. " * 20))
    assert [chunk.frames_after_eos for chunk in chunks] == [1, 1]
    assert [chunk.text for chunk in chunks] == utok.split_into_best_sentences(
        tokenizer, "The cat sat. " * 20
    )
