"""Tokenizer implementations for unigram subword segmentation."""

from .base import Tokenizer
from .unigram import UnigramTokenizer


__all__ = ["Tokenizer", "UnigramTokenizer"]
