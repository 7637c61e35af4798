"""Second-pass driver: documents in, finalized FeatureStore out."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from modulartc.core.data.feature_store import FeatureStore
from modulartc.core.data.schema_constants import FILENAME_EXTRACTION_CONFIG, FILENAME_FEATURES, FILENAME_OUTCOMES
from modulartc.core.extraction.instance_builder import InstanceBuilder
from modulartc.core.filtering.filter_chain import FilterChain
from modulartc.core.filtering.reconciler import FeatureSpaceReconciler
from modulartc.utils.errors.exceptions import AbortedRunError, ConfigurationError, FeatureStoreWriteError
from modulartc.utils.logging import get_logger
from modulartc.utils.progress_bars import ProgressTask

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from modulartc.core.data.document import Document
    from modulartc.core.data.feature_store import InstanceStreamWriter
    from modulartc.core.data.instance import Instance
    from modulartc.core.extraction.extraction_config import ExtractionConfig
    from modulartc.core.extraction.feature_extractor import FeatureExtractor

logger = get_logger("connector")


@dataclass
class RunAccumulator:
    """Feature names and outcomes seen during one run."""

    feature_names: set[str] = field(default_factory=set)
    outcomes: set[str] = field(default_factory=set)
    n_documents: int = 0
    n_instances: int = 0

    def add(self, instance: Instance) -> None:
        self.feature_names.update(instance.feature_names)
        self.outcomes.update(instance.outcomes)
        self.n_instances += 1


def _write_lines(path: Path, lines: Iterable[str]) -> Path:
    tmp = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        tmp.replace(path)
    except (OSError, ValueError) as exc:
        tmp.unlink(missing_ok=True)
        raise FeatureStoreWriteError(path, str(exc)) from exc
    return path


class StreamingExtractionConnector:
    """
    Runs the extraction pass over a document stream.

    Description:
        Lifecycle:

        1. :meth:`initialize` resolves and initializes the extractors, builds
           the filter chain and opens the instance writer.
        2. :meth:`process` builds the instances of one document and writes
           them immediately, so memory use does not grow with the corpus.
        3. :meth:`collection_process_complete` closes the writer, runs the
           filter chain, writes ``outcomes.txt``, then either persists
           ``feature_names.txt`` (training) or reconciles the store against
           the training names (testing), and finally writes the feature
           table and the completion manifest.

        Any failure after initialization aborts the run: partial output is
        removed and an :class:`AbortedRunError` carrying the cause is raised.
        A store without a completion manifest is never readable via
        :meth:`FeatureStore.load`.

    Attributes:
        config (ExtractionConfig): Run configuration.
        store (FeatureStore): Output store.
        accumulator (RunAccumulator): Names and outcomes seen so far.
        reconciler (FeatureSpaceReconciler): Feature-space persistence and
            test-time alignment.

    """

    def __init__(self, config: ExtractionConfig):
        self.config = config
        self.store = FeatureStore(config.output_dir, encoding=config.encoding)
        self.accumulator = RunAccumulator()
        self.reconciler = FeatureSpaceReconciler(config.train_feature_names_path)

        self.extractors: list[FeatureExtractor] = []
        self.filter_chain: FilterChain | None = None
        self._builder: InstanceBuilder | None = None
        self._writer: InstanceStreamWriter | None = None

    def __repr__(self) -> str:
        return f"StreamingExtractionConnector(output_dir='{self.config.output_dir}', mode={self.config.run_mode.value})"

    # ================================================
    # Lifecycle
    # ================================================
    def initialize(self) -> None:
        """
        Prepare extractors, filters and the instance writer.

        Raises:
            ConfigurationError: If no extractors are configured, a component
                tag is unknown, or a vocabulary cannot be loaded.

        """
        from modulartc.extractors import build_extractor

        if not self.config.extractors:
            msg = "No feature extractors have been defined."
            raise ConfigurationError(msg)

        self.extractors = [build_extractor(e) for e in self.config.extractors]
        for ex in self.extractors:
            ex.initialize()
        self.filter_chain = FilterChain.from_config(self.config.filters)
        self._builder = InstanceBuilder(
            self.extractors,
            feature_mode=self.config.feature_mode,
            learning_mode=self.config.learning_mode,
            encoding=self.config.encoding,
            add_instance_id=self.config.add_instance_id,
        )
        self.accumulator = RunAccumulator()
        self._writer = self.store.writer().open()
        logger.debug(f"Initialized {len(self.extractors)} extractors and {len(self.filter_chain)} filters.")

    def process(self, document: Document) -> list[Instance]:
        """
        Build and write the instances of one document.

        Returns:
            list[Instance]: The instances written for `document`.

        Raises:
            AbortedRunError: If building or writing fails. Partial output is
                removed before raising.

        """
        if self._builder is None or self._writer is None:
            msg = "Connector was not initialized."
            raise ConfigurationError(msg)
        try:
            instances = self._builder.build(document)
            for inst in instances:
                self._writer.write(inst)
                self.accumulator.add(inst)
        except Exception as exc:
            self._abort()
            msg = f"Failed on document '{getattr(document, 'doc_id', '?')}': {exc}"
            raise AbortedRunError("process", msg) from exc
        self.accumulator.n_documents += 1
        return instances

    def collection_process_complete(self) -> FeatureStore:
        """
        Finish the run and return the finalized store.

        Raises:
            AbortedRunError: If any completion step fails. No manifest is
                written and partial output is removed.

        """
        if self._writer is None or self.filter_chain is None:
            msg = "Connector was not initialized."
            raise ConfigurationError(msg)
        try:
            self._writer.close()
            filtered = self.filter_chain.apply(self.store, self.config.run_mode)

            outcomes = sorted(self.accumulator.outcomes)
            _write_lines(self.config.output_dir / FILENAME_OUTCOMES, outcomes)

            if self.config.is_testing:
                # Filters may have changed the feature space seen during processing
                test_names = None if filtered else self.accumulator.feature_names
                self.reconciler.reconcile(
                    self.store,
                    self.config.train_feature_names_path,
                    test_feature_names=test_names,
                )
                feature_names = self.reconciler.read_feature_names(self.config.train_feature_names_path)
            else:
                feature_names = sorted(self.accumulator.feature_names)
                self.reconciler.persist(feature_names, self.config.output_dir / FILENAME_FEATURES)

            self.config.save()
            self.store.finalize(feature_names, outcomes)
        except AbortedRunError:
            self._abort()
            raise
        except Exception as exc:
            self._abort()
            raise AbortedRunError("complete", str(exc)) from exc
        finally:
            self._writer = None

        logger.info(
            f"Wrote {self.accumulator.n_instances} instances from {self.accumulator.n_documents} documents.",
            extra={"title_desc": f"Extraction complete ({self.config.run_mode.value})"},
        )
        return self.store

    def run(self, documents: Iterable[Document]) -> FeatureStore:
        """
        Initialize, process every document of `documents`, and complete.

        Args:
            documents (Iterable[Document]): Corpus stream, consumed once.

        Returns:
            FeatureStore: The finalized store.

        """
        self.initialize()
        with ProgressTask(description="Extracting features", enabled=self.config.show_progress) as task:
            try:
                for doc in documents:
                    self.process(doc)
                    task.tick()
            except AbortedRunError:
                raise
            except Exception as exc:
                # Failures of the document source itself
                self._abort()
                raise AbortedRunError("process", str(exc)) from exc
        return self.collection_process_complete()

    # ================================================
    # Cleanup
    # ================================================
    def _abort(self) -> None:
        if self._writer is not None:
            self._writer.abort()
            self._writer = None
        self.store.discard()
        out = self.config.output_dir
        for name in (FILENAME_OUTCOMES, FILENAME_EXTRACTION_CONFIG):
            (out / name).unlink(missing_ok=True)
        if not self.config.is_testing:
            (out / FILENAME_FEATURES).unlink(missing_ok=True)
        logger.debug(f"Removed partial output in '{out}'.")
