"""Custom exception hierarchy for ModularTC."""

from __future__ import annotations

from collections.abc import Iterable


class ModularTCError(Exception):
    """Base class for all ModularTC-specific exceptions."""


class ConfigurationError(ModularTCError):
    """Raised when a run is configured in a way that cannot be executed."""

    def __init__(self, message: str | None = None):
        """Initialize configuration error with optional message."""
        if message is None:
            message = "Invalid configuration."
        super().__init__(message)


class UnknownComponentError(ConfigurationError):
    """
    Raised when a configuration tag does not resolve to a registered class.

    Attributes:
        kind (str): Component kind that was looked up.
        name (str): Unresolved tag.

    """

    def __init__(
        self,
        kind: str,
        name: str,
        available: Iterable[str] | None = None,
        message: str | None = None,
    ):
        """
        Initialize unknown-component error.

        Args:
            kind (str): Component kind (e.g., "feature filter").
            name (str): Tag that could not be resolved.
            available (Iterable[str] | None, optional): Registered tags.
            message (str | None, optional): Custom message override.

        """
        if message is None:
            message = f"Unknown {kind} '{name}'."
            if available is not None:
                message += f" Available: {', '.join(available)}."
        super().__init__(message)
        self.kind = kind
        self.name = name


class DocumentAnnotationError(ModularTCError):
    """Raised when a document's annotations are malformed or incomplete."""

    def __init__(self, doc_id: str | None = None, message: str | None = None):
        """
        Initialize annotation error with the offending document id.

        Args:
            doc_id (str | None, optional): Identifier of the malformed document.
            message (str | None, optional): Description of the problem.

        """
        if message is None:
            message = "Malformed document annotation."
        if doc_id is not None:
            message = f"Document '{doc_id}': {message}"
        super().__init__(message)
        self.doc_id = doc_id


class VocabularyError(ModularTCError):
    """Raised when a VocabularyStore is misused or cannot be read."""

    def __init__(self, message: str | None = None):
        """Initialize vocabulary error with optional message."""
        if message is None:
            message = "Error with VocabularyStore."
        super().__init__(message)


class FeatureNameCollisionError(ModularTCError):
    """Raised when two features of one instance share the same name."""

    def __init__(self, name: str, message: str | None = None):
        """Initialize collision error for feature `name`."""
        if message is None:
            message = (
                f"Feature name '{name}' was produced more than once for the same "
                "instance. Check that every extractor uses a distinct prefix."
            )
        super().__init__(message)
        self.name = name


class FeatureStoreWriteError(ModularTCError):
    """Raised when instances, vocabularies or name files cannot be persisted."""

    def __init__(self, path: str | None = None, message: str | None = None):
        """Initialize write error with the failing path."""
        if message is None:
            message = "Failed to write feature data."
        if path is not None:
            message = f"{message} (path: {path})"
        super().__init__(message)
        self.path = path


class IncompleteFeatureStoreError(ModularTCError):
    """Raised when a FeatureStore without a completion manifest is opened."""

    def __init__(self, path: str | None = None, message: str | None = None):
        """Initialize incomplete-store error."""
        if message is None:
            message = (
                "FeatureStore is not marked complete; it belongs to an aborted "
                "or unfinished run and must not be used."
            )
        if path is not None:
            message = f"{message} (path: {path})"
        super().__init__(message)
        self.path = path


class AbortedRunError(ModularTCError):
    """
    Raised when an extraction pass is aborted.

    The causing exception is attached as ``__cause__``.

    Attributes:
        stage (str): Lifecycle stage in which the run failed.

    """

    def __init__(self, stage: str, message: str | None = None):
        """
        Initialize aborted-run error.

        Args:
            stage (str): Stage name ("initialize", "process", "complete", ...).
            message (str | None, optional): Custom message override.

        """
        if message is None:
            message = f"Extraction run aborted during '{stage}'."
        super().__init__(message)
        self.stage = stage


class SkippedDocumentWarning(UserWarning):
    """Warning emitted when a malformed document is skipped during counting."""


class FeatureSpaceMismatchWarning(UserWarning):
    """Warning emitted when test and training feature spaces differ."""
