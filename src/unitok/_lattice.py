"""
Token lattice and Viterbi search for Unigram segmentation.

The lattice holds every candidate piece for one input sentence as a node in a
flat arena. Adjacency lists store arena indices, and the Viterbi pass records
each node's best predecessor as an index too, so no node is ever shared or
copied between paths.
"""

from dataclasses import dataclass
import logging

from .errors import TokenizationError
from .types import Score, Token

log = logging.getLogger(__name__)


@dataclass(slots=True)
class LatticeNode:
    """A candidate piece spanning ``sentence[start:start + length]``."""

    token_id: Token
    start: int
    length: int
    score: Score
    # arena index of the best left neighbour, set by viterbi()
    prev: int | None = None
    backtrace_score: Score = 0.0

    @property
    def end(self) -> int:
        return self.start + self.length


class TokenLattice:
    """
    Directed acyclic graph of candidate pieces over code point offsets.

    ``begin_nodes[i]`` lists the nodes starting at offset ``i`` and
    ``end_nodes[i]`` the nodes ending there. The BOS sentinel only ends at
    offset 0 and the EOS sentinel only begins at offset ``len(sentence)``.
    """

    BOS: int = 0
    EOS: int = 1

    def __init__(self, sentence: str, bos_id: Token, eos_id: Token) -> None:
        self.sentence = sentence
        n = len(sentence)
        self.nodes: list[LatticeNode] = [
            LatticeNode(token_id=bos_id, start=0, length=0, score=0.0),
            LatticeNode(token_id=eos_id, start=n, length=0, score=0.0),
        ]
        self.begin_nodes: list[list[int]] = [[] for _ in range(n + 1)]
        self.end_nodes: list[list[int]] = [[] for _ in range(n + 1)]
        self.begin_nodes[n].append(self.EOS)
        self.end_nodes[0].append(self.BOS)

    def __len__(self) -> int:
        return len(self.sentence)

    def insert(self, start: int, length: int, score: Score, token_id: Token) -> None:
        """Add a candidate piece of ``length`` code points beginning at ``start``."""
        idx = len(self.nodes)
        self.nodes.append(
            LatticeNode(token_id=token_id, start=start, length=length, score=score)
        )
        self.begin_nodes[start].append(idx)
        self.end_nodes[start + length].append(idx)

    def piece(self, node: LatticeNode) -> str:
        """Return the slice of the sentence covered by ``node``."""
        return self.sentence[node.start : node.end]

    def viterbi(self) -> list[LatticeNode]:
        """
        Find the highest scoring segmentation of the sentence.

        Offsets are relaxed left to right. For every node starting at an
        offset, the left neighbour with the strictly greatest accumulated
        score becomes its predecessor, so the first neighbour seen wins ties.
        The path is read back from EOS and returned left to right without
        the BOS and EOS sentinels.

        :returns: The nodes of the best path, in sentence order.
        :raises TokenizationError: If some offset has no candidate piece or
            the end of the sentence cannot be reached.
        """
        nodes = self.nodes
        for offset in range(len(self.sentence) + 1):
            if not self.begin_nodes[offset]:
                raise TokenizationError(
                    "lattice has no candidate at offset",
                    position=offset,
                    input_text=self.sentence,
                )

            for r_idx in self.begin_nodes[offset]:
                rnode = nodes[r_idx]
                rnode.prev = None
                best_score = 0.0
                best_idx: int | None = None
                for l_idx in self.end_nodes[offset]:
                    lnode = nodes[l_idx]
                    # a left node nothing reaches cannot extend a path
                    if l_idx != self.BOS and lnode.prev is None:
                        continue
                    score = lnode.backtrace_score + rnode.score
                    if best_idx is None or score > best_score:
                        best_idx = l_idx
                        best_score = score

                if best_idx is not None:
                    rnode.prev = best_idx
                    rnode.backtrace_score = best_score

        idx = nodes[self.EOS].prev
        if idx is None:
            raise TokenizationError(
                "lattice has no path to the end of the sentence",
                position=len(self.sentence),
                input_text=self.sentence,
            )

        path: list[LatticeNode] = []
        while idx != self.BOS:
            node = nodes[idx]
            path.append(node)
            if node.prev is None:
                raise TokenizationError(
                    "lattice path does not lead back to the start of the sentence",
                    position=node.start,
                    input_text=self.sentence,
                )
            idx = node.prev
        path.reverse()

        log.debug(f"viterbi picked {len(path)} of {len(nodes) - 2} candidates")
        return path


__all__ = ["LatticeNode", "TokenLattice"]
