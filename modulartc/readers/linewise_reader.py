"""Reader for ``label<TAB>text`` corpora, one document per line."""

from __future__ import annotations

import gzip
import html
import re
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from modulartc.core.data.document import Document, Span, TextUnit, Token
from modulartc.utils.errors.exceptions import ConfigurationError, DocumentAnnotationError
from modulartc.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = get_logger("readers")

TOKEN_PATTERN = re.compile(r"\w+|[^\w\s]", re.UNICODE)

_ESCAPE_PATTERN = re.compile(r"\\(u[0-9a-fA-F]{4}|[ntrbf\"'\\])")
_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", '"': '"', "'": "'", "\\": "\\"}


def unescape_backslashes(text: str) -> str:
    """Resolve backslash escapes (``\\n``, ``\\t``, ``\\uXXXX``, ...) in `text`."""

    def _sub(m: re.Match) -> str:
        esc = m.group(1)
        if esc[0] == "u":
            return chr(int(esc[1:], 16))
        return _SIMPLE_ESCAPES[esc]

    out = _ESCAPE_PATTERN.sub(_sub, text)
    # Escaped UTF-16 surrogate pairs become one code point, lone halves become U+FFFD
    return out.encode("utf-16", "surrogatepass").decode("utf-16", "replace")


def tokenize(text: str) -> tuple[Token, ...]:
    """Split `text` into word and punctuation tokens with character offsets."""
    return tuple(Token(m.group(), m.start(), m.end()) for m in TOKEN_PATTERN.finditer(text))


class LinewiseTextReader:
    """
    Streams documents from files holding one ``label<TAB>text`` pair per line.

    Description:
        Files ending in ``.gz`` are decompressed transparently. Documents get
        sequential ids starting at 1 across all files. Each line is
        tokenized with :data:`TOKEN_PATTERN` and annotated as a single
        sentence and a single unit carrying the line's label, so the
        documents work in every feature mode.

        Empty lines are skipped. A non-empty line without a separator, or
        with an empty label, raises :class:`DocumentAnnotationError`.
        Missing input files raise :class:`ConfigurationError` at construction.

    Args:
        paths (str | Path | Iterable[str | Path]): Input file(s).
        encoding (str, optional): Text encoding. Defaults to "utf-8".
        separator (str, optional): Label/text separator. Defaults to a tab.
        unescape_html (bool, optional): Resolve HTML entities. Defaults to True.
        unescape_escapes (bool, optional): Resolve backslash escapes.
            Defaults to True.
        annotate_sentence (bool, optional): Annotate each line as a sentence.
            Defaults to True.

    """

    def __init__(
        self,
        paths: str | Path | Iterable[str | Path],
        *,
        encoding: str = "utf-8",
        separator: str = "\t",
        unescape_html: bool = True,
        unescape_escapes: bool = True,
        annotate_sentence: bool = True,
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self.paths = [Path(p) for p in paths]
        missing = [str(p) for p in self.paths if not p.exists()]
        if missing:
            msg = f"Input file(s) not found: {missing}"
            raise ConfigurationError(msg)
        self.encoding = encoding
        self.separator = separator
        self.unescape_html = unescape_html
        self.unescape_escapes = unescape_escapes
        self.annotate_sentence = annotate_sentence

    def _open(self, path: Path) -> TextIO:
        if path.suffix == ".gz":
            return gzip.open(path, "rt", encoding=self.encoding)
        return path.open(encoding=self.encoding)

    def __iter__(self) -> Iterator[Document]:
        next_id = 1
        for path in self.paths:
            with self._open(path) as f:
                for lineno, line in enumerate(f, start=1):
                    line = line.rstrip("\r\n")
                    if not line.strip():
                        continue
                    yield self._parse(line, doc_id=str(next_id), origin=f"{path.name}:{lineno}")
                    next_id += 1
            logger.debug(f"Read {path} ({next_id - 1} documents so far).")

    def _parse(self, line: str, *, doc_id: str, origin: str) -> Document:
        label, sep, text = line.partition(self.separator)
        if not sep or not label:
            msg = f"expected 'label{self.separator!r}text' at {origin}."
            raise DocumentAnnotationError(doc_id, msg)

        if self.unescape_html:
            text = html.unescape(text)
        if self.unescape_escapes:
            text = unescape_backslashes(text)

        span = (Span(0, len(text)),) if self.annotate_sentence else ()
        return Document(
            doc_id=doc_id,
            text=text,
            tokens=tokenize(text),
            sentences=span,
            units=(TextUnit(0, len(text), (label,)),),
            outcomes=(label,),
            metadata={"origin": origin},
        )
