"""
Prefix tree over vocabulary pieces for candidate lookup during encoding.
"""

from collections.abc import Iterable

from .types import Piece


class TrieNode:
    """One character step in the trie."""

    __slots__ = ("children", "is_end")

    def __init__(self) -> None:
        self.children: dict[str, TrieNode] = {}
        self.is_end: bool = False


class Trie:
    """
    Static prefix dictionary over vocabulary pieces.

    Built once by the tokenizer and only read afterwards, so lookups are safe
    to run from several threads at once.
    """

    def __init__(self, pieces: Iterable[Piece] = ()) -> None:
        self.root = TrieNode()
        self._size = 0
        self.extend(pieces)

    def insert(self, piece: Piece) -> None:
        """Insert ``piece`` one code point at a time and mark its last node."""
        node = self.root
        for ch in piece:
            child = node.children.get(ch)
            if child is None:
                child = node.children[ch] = TrieNode()
            node = child
        if not node.is_end:
            node.is_end = True
            self._size += 1

    def extend(self, pieces: Iterable[Piece]) -> None:
        """Insert every piece in ``pieces``."""
        for piece in pieces:
            self.insert(piece)

    def common_prefix_search(self, text: str, start: int = 0) -> list[Piece]:
        """
        Return every inserted piece that is a prefix of ``text[start:]``.

        The walk stops at the first character without a matching child, so the
        cost depends on the longest match and not on the vocabulary size.

        :param text: Text to match against.
        :param start: Offset in ``text`` where matching begins.
        :returns: Matching pieces ordered by increasing length.
        """
        matches: list[Piece] = []
        node = self.root
        for end in range(start, len(text)):
            node = node.children.get(text[end])
            if node is None:
                break
            if node.is_end:
                matches.append(text[start : end + 1])
        return matches

    def __contains__(self, piece: object) -> bool:
        if not isinstance(piece, str):
            return False
        node = self.root
        for ch in piece:
            node = node.children.get(ch)
            if node is None:
                return False
        return node.is_end

    def __len__(self) -> int:
        return self._size


__all__ = ["Trie", "TrieNode"]
