"""Unigram language model tokenizer with byte fallback."""

from collections.abc import Mapping, Sequence
from numbers import Real
from pathlib import Path
from types import MappingProxyType
from typing import Any, Final, override
import json
import logging
import math

import regex as re

from .._lattice import TokenLattice
from .._sanitise import render_piece
from .._trie import Trie
from ..errors import ConfigError, TokenizationError, VocabularyError
from ..types import ByteFallback, Piece, Score, Token, VocabEntry, Vocabulary
from .base import MODEL_SUFFIX, VOCAB_SUFFIX, Tokenizer

# word boundary marker, U+2581 LOWER ONE EIGHTH BLOCK
METASPACE: Final[str] = "▁"
# unknown pieces score this far below the worst real piece
UNK_SCORE_PENALTY: Final[float] = 10.0

# byte pieces look like <0x0A>
_BYTE_PIECE: Final = re.compile(r"<0x([0-9A-Fa-f]{2})>")

log = logging.getLogger(__name__)


class UnigramTokenizer(Tokenizer):
    """
    Tokenizer that segments text by maximizing total unigram piece score.

    Every input is rewritten with :data:`METASPACE` word markers, all pieces
    found by a trie lookup are placed in a lattice and the Viterbi path is
    taken as the segmentation. Characters no piece covers are emitted as
    ``<0xHH>`` byte pieces, or as the unknown id when the vocabulary lacks
    the byte piece.

    All tables are built in ``__init__`` and never change afterwards, so one
    instance can serve many threads.
    """

    TOKENIZER_TYPE = "Unigram"

    def __init__(self, vocab: Sequence[Sequence[Any]], unk_id: int) -> None:
        """
        Build the tokenizer from an ordered list of ``(piece, score)`` pairs.

        :param vocab: Vocabulary entries; the position of an entry is its id.
        :param unk_id: Id emitted for text no piece or byte piece can cover.
        :raises ConfigError: If an entry is malformed, the vocabulary is empty
            or ``unk_id`` is not a valid id.
        """
        super().__init__()
        entries: Vocabulary = [
            _parse_entry(entry, idx) for idx, entry in enumerate(vocab)
        ]
        if not entries:
            raise ConfigError("vocabulary is empty", field="model.vocab")
        if isinstance(unk_id, bool) or not isinstance(unk_id, int):
            raise ConfigError("unknown token id must be an integer", field="model.unk_id")
        if not 0 <= unk_id < len(entries):
            raise ConfigError(
                f"unknown token id {unk_id} outside vocabulary of {len(entries)}",
                field="model.unk_id",
            )

        self.vocab: Vocabulary = entries
        self.unk_id: Token = unk_id
        self.unk_score: Score = min(score for _, score in entries) - UNK_SCORE_PENALTY

        # piece -> id, later duplicates win
        self._piece_to_id: dict[Piece, Token] = {
            piece: tok for tok, (piece, _) in enumerate(entries)
        }
        self.trie = Trie(piece for piece, _ in entries)

        # id -> byte for <0xHH> pieces, None for ordinary pieces
        self._id_to_byte: list[int | None] = [
            _byte_value(piece) for piece, _ in entries
        ]
        byte_fallback: ByteFallback = {}
        for tok, byte in enumerate(self._id_to_byte):
            if byte is not None:
                byte_fallback[byte] = tok
        self._byte_fallback = byte_fallback

        if len(byte_fallback) < 256:
            log.warning(
                f"byte fallback covers {len(byte_fallback)}/256 bytes, "
                "uncovered bytes encode to the unknown id"
            )
        if METASPACE not in self._piece_to_id:
            log.warning(f"vocabulary has no {METASPACE!r} piece")
        log.info(
            f"built unigram tokenizer: {len(entries)} pieces, unk id {unk_id}, "
            f"{len(byte_fallback)} byte pieces"
        )

    @classmethod
    def from_dict(cls, description: Mapping[str, Any]) -> "UnigramTokenizer":
        """
        Build a tokenizer from a parsed ``tokenizer.json`` document.

        Only ``model.vocab`` and ``model.unk_id`` are required; ``model.type``
        is checked when present.

        :param description: Mapping shaped like ``{"model": {"unk_id": 0,
            "vocab": [["<unk>", 0.0], ...]}}``.
        :raises ConfigError: If a required field is missing or malformed.
        """
        model = description.get("model") if isinstance(description, Mapping) else None
        if not isinstance(model, Mapping):
            raise ConfigError("missing tokenizer model section", field="model")

        model_type = model.get("type")
        if model_type is not None and model_type != cls.TOKENIZER_TYPE:
            raise ConfigError(
                f"unsupported tokenizer model type {model_type!r}",
                field="model.type",
                available=[cls.TOKENIZER_TYPE],
            )
        if "unk_id" not in model or model["unk_id"] is None:
            raise ConfigError("missing unknown token id", field="model.unk_id")
        vocab = model.get("vocab")
        if not isinstance(vocab, list):
            raise ConfigError("missing vocabulary list", field="model.vocab")

        return cls(vocab, model["unk_id"])

    def to_dict(self) -> dict[str, Any]:
        """Return the ``tokenizer.json`` shaped description of this tokenizer."""
        return {
            "model": {
                "type": self.TOKENIZER_TYPE,
                "unk_id": self.unk_id,
                "byte_fallback": bool(self._byte_fallback),
                "vocab": [[piece, score] for piece, score in self.vocab],
            },
        }

    @override
    def encode(self, text: str) -> list[Token]:
        """
        Encode text into a sequence of tokens.

        :param text: Text to encode. Spaces mark word boundaries.
        :returns: Token ids of the best segmentation; never empty because the
            metaspace marker is always prepended.
        :raises TokenizationError: If the lattice cannot be segmented, which
            the single-character fallback rules out for a valid tokenizer.
        """
        sentence = apply_metaspace(text)
        lattice = TokenLattice(sentence, bos_id=self.unk_id, eos_id=self.unk_id)

        for start in range(len(sentence)):
            has_single = False
            for piece in self.trie.common_prefix_search(sentence, start):
                tok = self._piece_to_id[piece]
                lattice.insert(start, len(piece), self.vocab[tok][1], tok)
                if len(piece) == 1:
                    has_single = True
            # keep every offset reachable even when no piece covers it
            if not has_single:
                lattice.insert(start, 1, self.unk_score, self.unk_id)

        tokens: list[Token] = []
        for node in lattice.viterbi():
            if node.token_id != self.unk_id:
                tokens.append(node.token_id)
                continue
            # unknown span: spell it out byte by byte; lone surrogates keep
            # their bytes so decode drops or rejects them
            raw = lattice.piece(node).encode("utf-8", errors="surrogatepass")
            tokens.extend(self._byte_fallback.get(b, self.unk_id) for b in raw)

        return tokens

    @override
    def decode(self, tokens: Sequence[Token], strict: bool = False) -> str:
        """
        Decode tokens into text.

        Consecutive byte pieces are gathered and decoded as one UTF-8 run.
        Metaspace markers turn back into spaces and the result is stripped.

        :param tokens: Token sequence to decode.
        :param strict: Raise instead of skipping ids outside the vocabulary
            and byte runs that are not valid UTF-8.
        :returns: Decoded text.
        :raises VocabularyError: In strict mode, for an id outside the vocabulary.
        :raises TokenizationError: In strict mode, for an invalid byte run.
        """
        pieces: list[str] = []
        buf = bytearray()
        n_pieces = len(self.vocab)

        for tok in tokens:
            if not 0 <= tok < n_pieces:
                if strict:
                    raise VocabularyError(
                        "token not found in vocabulary",
                        vocab_size=n_pieces,
                        invalid_tok=tok,
                    )
                continue

            byte = self._id_to_byte[tok]
            if byte is not None:
                buf.append(byte)
                continue

            if buf:
                self._flush_bytes(buf, pieces, strict)
            pieces.append(self.vocab[tok][0])

        if buf:
            self._flush_bytes(buf, pieces, strict)

        return "".join(pieces).replace(METASPACE, " ").strip()

    @override
    def vocab_size(self) -> int:
        """Return the number of pieces in the vocabulary."""
        return len(self.vocab)

    def id_to_token(self, tok: Token) -> Piece:
        """
        Return the piece for ``tok``.

        :raises VocabularyError: If ``tok`` is not a valid id.
        """
        if not 0 <= tok < len(self.vocab):
            raise VocabularyError(
                "token not found in vocabulary",
                vocab_size=len(self.vocab),
                invalid_tok=tok,
            )
        return self.vocab[tok][0]

    def token_to_id(self, piece: Piece) -> Token | None:
        """Return the id of ``piece``, or ``None`` if it is not in the vocabulary."""
        return self._piece_to_id.get(piece)

    @property
    def byte_fallback(self) -> Mapping[int, Token]:
        """Read-only view of the byte value -> byte piece id table."""
        return MappingProxyType(self._byte_fallback)

    @override
    def save(self, file_prefix: str) -> None:
        """
        Save tokenizer state to disk.

        Creates two files: a ``.json`` file in the ``tokenizer.json`` layout,
        which :func:`unitok.from_pretrained` reads back, and a ``.vocab`` file
        with one human-readable piece per line.

        :param file_prefix: Path prefix for output files.
        """
        log.info(f"saving tokenizer to {file_prefix}")

        model_path = Path(file_prefix).with_suffix(MODEL_SUFFIX)
        # create directory if does not exist
        model_path.parent.mkdir(parents=True, exist_ok=True)
        with model_path.open("w", encoding="utf-8", newline="\n") as f:
            json.dump(self.to_dict(), f, ensure_ascii=False)

        vocab_path = Path(file_prefix).with_suffix(VOCAB_SUFFIX)
        log.debug(f"saving vocab to {vocab_path}")
        with vocab_path.open("w", encoding="utf-8", newline="\n") as f:
            for tok, (piece, score) in enumerate(self.vocab):
                marker = " (unk)" if tok == self.unk_id else ""
                f.write(f"[{tok}] {render_piece(piece)} {score:.6g}{marker}\n")

        log.info("tokenizer saved successfully")

    def _flush_bytes(self, buf: bytearray, pieces: list[str], strict: bool) -> None:
        """Decode the pending byte run into ``pieces`` and clear ``buf``."""
        try:
            pieces.append(bytes(buf).decode("utf-8"))
        except UnicodeDecodeError as e:
            if strict:
                raise TokenizationError(
                    "byte pieces do not form valid utf-8",
                    position=len(pieces),
                ) from e
            # lenient mode drops the whole run
            log.debug(f"dropping {len(buf)} undecodable bytes")
        buf.clear()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(vocab_size={len(self.vocab)}, "
            f"unk_id={self.unk_id})"
        )


def apply_metaspace(text: str) -> str:
    """Replace spaces with :data:`METASPACE` and prepend one marker."""
    return METASPACE + text.replace(" ", METASPACE)


def _byte_value(piece: Piece) -> int | None:
    """Return the byte a ``<0xHH>`` piece stands for, otherwise ``None``."""
    m = _BYTE_PIECE.fullmatch(piece)
    if m is None:
        return None
    return int(m.group(1), 16)


def _parse_entry(entry: Any, idx: int) -> VocabEntry:
    """Validate one ``(piece, score)`` vocabulary entry."""
    if isinstance(entry, (str, bytes)) or not isinstance(entry, Sequence):
        raise ConfigError(
            f"vocabulary entry {idx} is not a (piece, score) pair",
            field="model.vocab",
        )
    if len(entry) != 2:
        raise ConfigError(
            f"vocabulary entry {idx} has {len(entry)} items, expected 2",
            field="model.vocab",
        )
    piece, score = entry
    if not isinstance(piece, str):
        raise ConfigError(
            f"vocabulary entry {idx} piece is not a string", field="model.vocab"
        )
    # bool is a Real subclass but never a valid score
    if isinstance(score, bool) or not isinstance(score, Real):
        raise ConfigError(
            f"vocabulary entry {idx} score is not a number", field="model.vocab"
        )
    if not math.isfinite(score):
        raise ConfigError(
            f"vocabulary entry {idx} score {score} is not finite", field="model.vocab"
        )
    return piece, float(score)
