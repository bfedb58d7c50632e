"""Benchmark encode_batch(), decode_batch() and sentence chunking on a slice of the Sci-Fi Gutenberg dataset.

Outputs a row with the columns:
  Corpus Size | Vocab Size | Load Time | Encoding Throughput |
  Decoding Throughput | Chunking Throughput | Tokens per Char
"""

import argparse
import logging
import time

from datasets import load_dataset

from unitok import ParallelMode, from_pretrained, split_into_best_sentences

HF_DATASET = "stevez80/Sci-Fi-Books-gutenberg"


def load_corpus(num_docs: int | None) -> list[str]:
    """Load up to `num_docs` documents via dataset indexing; full dataset when None."""
    print(f"Loading {HF_DATASET} (non-streaming) …")
    ds = load_dataset(HF_DATASET, split="train")
    if num_docs is not None:
        return ds[:num_docs]["text"]
    return ds["text"]


def main() -> None:
    """Run the encode/decode/chunking benchmark and print a Markdown table row."""
    parser = argparse.ArgumentParser(
        description="Benchmark unitok encode_batch(), decode_batch() and chunking."
    )
    parser.add_argument(
        "model",
        type=str,
        help="Path to a tokenizer.json file or a model directory containing one.",
    )
    parser.add_argument(
        "--num-docs",
        type=int,
        default=None,
        help="Number of documents to encode (default: full dataset).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads for batch mode (default: cpu count).",
    )
    parser.add_argument(
        "--mode",
        type=str,
        default="auto",
        help="Parallel mode: auto, batch or off (default: auto).",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    docs = load_corpus(args.num_docs)
    docs = [d for d in docs if d.strip()]
    if not docs:
        raise RuntimeError("No documents loaded from dataset.")

    total_chars = sum(len(d) for d in docs)
    total_bytes = sum(len(d.encode("utf-8")) for d in docs)
    corpus_mb = total_bytes / (1024 * 1024)
    mode = ParallelMode.get(args.mode)

    t0 = time.perf_counter()
    tokenizer = from_pretrained(args.model)
    load_secs = time.perf_counter() - t0

    # --- Encoding ---
    t0 = time.perf_counter()
    encoded: list[list[int]] = tokenizer.encode_batch(
        docs, num_workers=args.workers, parallel_mode=mode
    )
    encode_elapsed = time.perf_counter() - t0
    encode_mbps = total_bytes / encode_elapsed / (1024 * 1024)

    # --- Decoding ---
    t0 = time.perf_counter()
    tokenizer.decode_batch(encoded, num_workers=args.workers, parallel_mode=mode)
    decode_elapsed = time.perf_counter() - t0
    total_tokens = sum(len(seq) for seq in encoded)
    decode_mtps = total_tokens / decode_elapsed / 1_000_000

    # --- Chunking (serial, one document at a time like a streaming caller) ---
    t0 = time.perf_counter()
    n_chunks = sum(len(split_into_best_sentences(tokenizer, d)) for d in docs)
    chunk_elapsed = time.perf_counter() - t0
    chunk_mbps = total_bytes / chunk_elapsed / (1024 * 1024)
    print(f"{n_chunks:,} chunks from {len(docs):,} documents")

    tokens_per_char = total_tokens / total_chars

    # --- Output ---
    print()
    header = (
        f"| {'Corpus Size':12} | {'Vocab Size':10} | {'Load Time':10} "
        f"| {'Encoding Throughput':19} | {'Decoding Throughput':19} "
        f"| {'Chunking Throughput':19} | {'Tokens per Char':15} |"
    )
    sep = (
        f"| {'-' * 12} | {'-' * 10} | {'-' * 10} "
        f"| {'-' * 19} | {'-' * 19} "
        f"| {'-' * 19} | {'-' * 15} |"
    )
    row = (
        f"| {f'{corpus_mb:.2f} MB':12} | {tokenizer.vocab_size():10,} "
        f"| {f'{load_secs:.2f} secs':10} "
        f"| {f'{encode_mbps:.2f} MB/sec':19} | {f'{decode_mtps:.1f}M tokens/sec':19} "
        f"| {f'{chunk_mbps:.2f} MB/sec':19} | {tokens_per_char:15.3f} |"
    )
    print(header)
    print(sep)
    print(row)
    print()


if __name__ == "__main__":
    main()
