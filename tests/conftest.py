"""Shared fixtures: small hand-scored vocabularies."""

import string

import pytest

import unitok as utok

METASPACE = utok.METASPACE


def build_vocab(pieces: dict[str, float], byte_pieces: bool = True) -> list[list]:
    """Return ``<unk>``, optionally the 256 byte pieces, then ``pieces`` in order."""
    vocab: list[list] = [["<unk>", 0.0]]
    if byte_pieces:
        vocab += [[f"<0x{b:02X}>", 0.0] for b in range(256)]
    vocab += [[piece, score] for piece, score in pieces.items()]
    return vocab


def word_pieces() -> dict[str, float]:
    """Characters, punctuation and a few whole words with realistic ordering."""
    pieces: dict[str, float] = {METASPACE: -3.0}
    pieces.update({ch: -6.0 for ch in string.ascii_lowercase})
    pieces.update({ch: -7.0 for ch in string.ascii_uppercase})
    pieces.update({ch: -6.0 for ch in string.digits})
    pieces.update({".": -4.0, "!": -4.0, "?": -4.0, ",": -4.0, "...": -4.5})
    for word in ["hello", "world", "Hello", "The", "the", "cat", "sat", "is", "it"]:
        pieces[METASPACE + word] = -9.0
    return pieces


# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tokenizer() -> utok.UnigramTokenizer:
    """Return a tokenizer with full byte fallback and a small word vocabulary."""
    return utok.UnigramTokenizer(build_vocab(word_pieces()), unk_id=0)


@pytest.fixture
def toy_tokenizer() -> utok.UnigramTokenizer:
    """Return the a/b/ab tokenizer without any byte pieces."""
    vocab = [
        ["<unk>", 0.0],
        [METASPACE, -1.0],
        ["a", -1.0],
        ["b", -1.0],
        ["ab", -0.5],
    ]
    return utok.UnigramTokenizer(vocab, unk_id=0)


@pytest.fixture
def tokenizer_json() -> dict:
    """Return a ``tokenizer.json`` shaped description of the word vocabulary."""
    return {
        "version": "1.0",
        "model": {
            "type": "Unigram",
            "unk_id": 0,
            "byte_fallback": True,
            "vocab": build_vocab(word_pieces()),
        },
    }
