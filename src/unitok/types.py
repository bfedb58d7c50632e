"""
Core types for tokenization.
"""

type Token = int
type Score = float
type Piece = str
type VocabEntry = tuple[Piece, Score]
type Vocabulary = list[VocabEntry]
type ByteFallback = dict[int, Token]
