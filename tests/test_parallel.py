"""Batch helpers and thread safety of a shared tokenizer."""

from concurrent.futures import ThreadPoolExecutor

import pytest

import unitok as utok
from unitok import parallel
from unitok.errors import ConfigError

TEXTS = [
    "hello world",
    "The cat sat.",
    "",
    "café 日本語 🎉",
    "it is the cat? it is!",
    "line\nbreak and\ttab",
] * 5


def test_list_parallel_modes():
    assert utok.list_parallel_modes() == ["auto", "batch", "off"]


@pytest.mark.parametrize("name", ["auto", "BATCH", "Off"])
def test_parallel_mode_get(name):
    assert utok.ParallelMode.get(name).value == name.lower()


def test_parallel_mode_get_unknown():
    with pytest.raises(ConfigError) as excinfo:
        utok.ParallelMode.get("chunk")
    assert excinfo.value.available == ["auto", "batch", "off"]


@pytest.mark.parametrize("mode", list(utok.ParallelMode))
@pytest.mark.parametrize("num_workers", [None, 0, 1, 3])
def test_encode_batch_matches_encode(tokenizer, mode, num_workers):
    """Every mode and worker count gives the serial result in input order."""
    expected = [tokenizer.encode(text) for text in TEXTS]
    got = tokenizer.encode_batch(TEXTS, num_workers=num_workers, parallel_mode=mode)
    assert got == expected


@pytest.mark.parametrize("mode", list(utok.ParallelMode))
def test_decode_batch_matches_decode(tokenizer, mode):
    batch = [tokenizer.encode(text) for text in TEXTS]
    expected = [tokenizer.decode(tokens) for tokens in batch]
    got = tokenizer.decode_batch(batch, num_workers=2, parallel_mode=mode)
    assert got == expected


def test_decode_batch_forwards_strict(tokenizer):
    with pytest.raises(utok.VocabularyError):
        tokenizer.decode_batch(
            [[1], [10_000]], strict=True, parallel_mode=utok.ParallelMode.BATCH
        )


def test_batch_empty_input(tokenizer):
    assert tokenizer.encode_batch([]) == []
    assert tokenizer.decode_batch([]) == []


def test_batch_helpers_accept_mode_names(tokenizer):
    texts = ["hello world", "The cat sat."]
    encoded = parallel.encode_batch(tokenizer, texts, num_workers=2, parallel_mode="batch")
    assert encoded == [tokenizer.encode(text) for text in texts]
    assert parallel.decode_batch(tokenizer, encoded, parallel_mode="off") == texts

    with pytest.raises(ConfigError):
        parallel.encode_batch(tokenizer, texts, parallel_mode="bogus")


def test_shared_tokenizer_across_threads(tokenizer):
    """One instance serves encode, decode and chunking from many threads."""
    text = "Hello world. The cat sat! " * 10

    def work(_):
        ids = tokenizer.encode(text)
        return ids, tokenizer.decode(ids), utok.split_into_best_sentences(tokenizer, text)

    expected = work(None)
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(work, range(32)))

    assert all(result == expected for result in results)
