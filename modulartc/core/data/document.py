"""Read-only document model handed over by the annotation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field

from modulartc.utils.errors.exceptions import DocumentAnnotationError


@dataclass(frozen=True)
class Token:
    """A token with character offsets into the document text."""

    text: str
    begin: int
    end: int


@dataclass(frozen=True)
class Dependency:
    """A directed dependency edge between two tokens."""

    governor: Token
    dependent: Token
    relation: str


@dataclass(frozen=True)
class TextUnit:
    """
    A classification unit (e.g., a sentence or a token) inside a document.

    Attributes:
        begin (int): Start offset (inclusive).
        end (int): End offset (exclusive).
        outcomes (tuple[str, ...]): Gold labels local to this unit.

    """

    begin: int
    end: int
    outcomes: tuple[str, ...] = ()

    def __post_init__(self):
        if isinstance(self.outcomes, str):
            object.__setattr__(self, "outcomes", (self.outcomes,))
        elif not isinstance(self.outcomes, tuple):
            object.__setattr__(self, "outcomes", tuple(self.outcomes))


@dataclass(frozen=True)
class Span:
    """A plain character span (sentence or sequence boundary)."""

    begin: int
    end: int


@dataclass(frozen=True)
class Document:
    """
    Annotated document consumed read-only by collectors and extractors.

    Description:
        Carries the document text, its tokens, optional dependency edges and
        sentence boundaries, optional classification units and sequences,
        and the document-level gold outcome(s).

        :meth:`select` derives a sub-document restricted to a character span,
        which is how unit and sequence modes hand a single unit to the
        extractors.

    """

    doc_id: str
    text: str
    tokens: tuple[Token, ...] = ()
    dependencies: tuple[Dependency, ...] = ()
    sentences: tuple[Span, ...] = ()
    units: tuple[TextUnit, ...] = ()
    sequences: tuple[Span, ...] = ()
    outcomes: tuple[str, ...] = ()
    metadata: dict[str, str] = field(default_factory=dict, compare=False)
    begin: int = 0
    end: int | None = None

    def __post_init__(self):
        # Accept lists from callers but store immutable tuples
        if isinstance(self.outcomes, str):
            object.__setattr__(self, "outcomes", (self.outcomes,))
        for name in ("tokens", "dependencies", "sentences", "units", "sequences", "outcomes"):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))

    def validate(self) -> None:
        """
        Check that all annotations are consistent with the text.

        Raises:
            DocumentAnnotationError: If offsets fall outside the text, a token's
                text does not match its covered text, or a dependency refers
                to a token that is not part of the document.

        """
        if not isinstance(self.text, str):
            raise DocumentAnnotationError(self.doc_id, "document text is missing.")

        n = len(self.text)
        for tok in self.tokens:
            if not (0 <= tok.begin <= tok.end <= n):
                msg = f"token '{tok.text}' has offsets [{tok.begin}, {tok.end}) outside the text."
                raise DocumentAnnotationError(self.doc_id, msg)
            if self.text[tok.begin : tok.end] != tok.text:
                msg = f"token '{tok.text}' does not match covered text at [{tok.begin}, {tok.end})."
                raise DocumentAnnotationError(self.doc_id, msg)

        known = set(self.tokens)
        for dep in self.dependencies:
            if dep.governor not in known or dep.dependent not in known:
                msg = f"dependency '{dep.relation}' refers to a token outside the document."
                raise DocumentAnnotationError(self.doc_id, msg)
            if not dep.relation:
                raise DocumentAnnotationError(self.doc_id, "dependency without relation type.")

        for span in (*self.sentences, *self.units, *self.sequences):
            if not (0 <= span.begin <= span.end <= n):
                msg = f"span [{span.begin}, {span.end}) lies outside the text."
                raise DocumentAnnotationError(self.doc_id, msg)

    def covered_text(self, begin: int, end: int) -> str:
        return self.text[begin:end]

    @property
    def view_text(self) -> str:
        """Text covered by this document (or by this view, see :meth:`select`)."""
        return self.text[self.begin : self.end]

    def select(self, begin: int, end: int, outcomes: tuple[str, ...] | None = None) -> Document:
        """
        Return a view of this document restricted to ``[begin, end)``.

        Tokens are kept if fully inside the span, dependencies if both ends
        are kept. Offsets stay relative to the original text so that
        ``covered_text`` keeps working.

        Args:
            begin (int): Span start (inclusive).
            end (int): Span end (exclusive).
            outcomes (tuple[str, ...] | None): Outcomes of the view. Defaults
                to the document outcomes.

        Returns:
            Document: Restricted document view.

        """
        tokens = tuple(t for t in self.tokens if t.begin >= begin and t.end <= end)
        kept = set(tokens)
        deps = tuple(
            d for d in self.dependencies if d.governor in kept and d.dependent in kept
        )
        return Document(
            doc_id=self.doc_id,
            text=self.text,
            tokens=tokens,
            dependencies=deps,
            sentences=tuple(s for s in self.sentences if s.begin >= begin and s.end <= end),
            units=tuple(u for u in self.units if u.begin >= begin and u.end <= end),
            sequences=(),
            outcomes=self.outcomes if outcomes is None else tuple(outcomes),
            metadata=self.metadata,
            begin=begin,
            end=end,
        )

    def units_in(self, span: Span) -> list[TextUnit]:
        """Return units inside `span`, in document order."""
        return sorted(
            (u for u in self.units if u.begin >= span.begin and u.end <= span.end),
            key=lambda u: (u.begin, u.end),
        )
