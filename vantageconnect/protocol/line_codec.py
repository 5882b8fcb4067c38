"""
Line framing for the host command protocol.

The controller streams newline-terminated text lines. Network reads may
return any slice of that stream, so the codec buffers bytes until a
complete line is available:

    chunk 1: b"S:LOAD 12 10"      -> no lines, 12 bytes buffered
    chunk 2: b"0.000\\r\\nS:BL"   -> [ParsedLine("S:LOAD", ("12", "100.000"))]
    chunk 3: b"IND 4 50\\n"        -> [ParsedLine("S:BLIND", ("4", "50"))]

Lines are decoded only once complete, so a multi-byte UTF-8 character split
across chunks is reassembled before decoding.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ParsedLine:
    """
    One tokenized protocol line.

    Attributes:
        verb: First whitespace-separated token (e.g. "S:LOAD").
        args: Remaining tokens in order.
    """

    verb: str
    args: tuple[str, ...] = ()

    @classmethod
    def from_text(cls, text: str) -> ParsedLine | None:
        """
        Tokenize a single line of text.

        Returns:
            ParsedLine, or None for blank lines.
        """
        tokens = text.split()
        if not tokens:
            return None
        return cls(verb=tokens[0], args=tuple(tokens[1:]))

    def __str__(self) -> str:
        return " ".join((self.verb, *self.args))


class LineCodec:
    """
    Incremental line splitter and tokenizer.

    One codec instance belongs to one connection. It holds no state
    besides the partial trailing line.

    Example:
        >>> codec = LineCodec()
        >>> codec.feed(b"R:GETLOAD 12 7")
        []
        >>> codec.feed(b"5\\r\\n")
        [ParsedLine(verb='R:GETLOAD', args=('12', '75'))]
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding = encoding
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet forming a complete line."""
        return len(self._buffer)

    def feed(self, chunk: bytes) -> list[ParsedLine]:
        """
        Append a chunk and return every complete line it finishes.

        Args:
            chunk: Raw bytes from one network read.

        Returns:
            Parsed lines in stream order; blank lines are dropped.
        """
        self._buffer.extend(chunk)

        end = self._buffer.rfind(b"\n")
        if end < 0:
            return []

        complete = bytes(self._buffer[:end])
        del self._buffer[:end + 1]

        lines: list[ParsedLine] = []
        for raw in complete.split(b"\n"):
            text = raw.decode(self._encoding, errors="replace")
            parsed = ParsedLine.from_text(text)
            if parsed is not None:
                lines.append(parsed)
        return lines

    def reset(self) -> None:
        """Discard any buffered partial line."""
        self._buffer.clear()

    def __repr__(self) -> str:
        return f"LineCodec(pending={len(self._buffer)})"
