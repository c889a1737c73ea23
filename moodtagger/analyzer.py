"""Mood analysis orchestration - single files, batches and directories."""

import logging
import threading
import time
from concurrent.futures import CancelledError, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .config import AppConfig
from .core.errors import AnalysisCancelled, ResourceError, TagStoreError
from .core.features import ExtractionResult
from .core.mood import MoodAnalysis
from .inference import OllamaClient
from .input import read_metadata
from .pipeline import FeaturePipeline
from .tags import TagStore


@dataclass
class BatchProgress:
    """Progress of a batch run, reported after every file."""

    total: int
    completed: int = 0
    failed: int = 0
    skipped: int = 0
    elapsed: float = 0.0  # seconds
    eta: float = 0.0  # seconds

    @property
    def processed(self) -> int:
        return self.completed + self.failed + self.skipped

    @property
    def percent_complete(self) -> float:
        if self.total == 0:
            return 0.0
        return self.processed / self.total * 100

    def update_timing(self, started: float) -> None:
        self.elapsed = time.monotonic() - started
        if self.completed > 0:
            per_file = self.elapsed / self.completed
            self.eta = per_file * max(0, self.total - self.processed)


@dataclass
class BatchResult:
    """Outcome of a batch run."""

    analyses: Dict[str, MoodAnalysis] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)
    degraded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def succeeded(self) -> int:
        return len(self.analyses)


ProgressCallback = Callable[[BatchProgress], None]


class MoodAnalyzer:
    """Analyzes audio files and stores their mood ratings as tags."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        pipeline: Optional[FeaturePipeline] = None,
        client: Optional[OllamaClient] = None,
        tag_store: Optional[TagStore] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize MoodAnalyzer.

        Args:
            config: Application configuration (defaults if None)
            pipeline: Feature extraction pipeline
            client: Mood inference client
            tag_store: Tag persistence
            logger: Logger receiving per-file diagnostics
        """
        self.config = config or AppConfig()
        self.pipeline = pipeline or FeaturePipeline(self.config)
        self.client = client or OllamaClient(self.config)
        self.tag_store = tag_store or TagStore(self.config)
        self.logger = logger or logging.getLogger(__name__)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "MoodAnalyzer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def extract_features(
        self,
        path: str,
        cancel: Optional[threading.Event] = None,
    ) -> ExtractionResult:
        """
        Read tags and run the feature pipeline on one file.

        Raises:
            ResourceError: If the file doesn't exist
        """
        metadata = read_metadata(path)
        if metadata.error:
            self.logger.warning("Could not read metadata from %s: %s", path, metadata.error)

        result = self.pipeline.extract(path, metadata, cancel)
        for message in result.warnings:
            self.logger.info("%s: %s", Path(path).name, message)
        if result.is_degraded:
            self.logger.warning(
                "Using default features for %s: %s", Path(path).name, result.reason
            )
        return result

    def analyze_file(
        self,
        path: str,
        cancel: Optional[threading.Event] = None,
    ) -> MoodAnalysis:
        """
        Analyze one file and write its mood tags.

        Files that already carry an analysis are returned unchanged unless
        ``reanalyze`` is configured.

        Raises:
            ResourceError: If the file doesn't exist
            InferenceError: If the inference service fails
            TagStoreError: If tags cannot be written
        """
        analysis, _ = self._analyze(path, cancel)
        return analysis

    def _analyze(
        self,
        path: str,
        cancel: Optional[threading.Event],
    ) -> Tuple[MoodAnalysis, Optional[ExtractionResult]]:
        path = str(path)
        if not Path(path).is_file():
            raise ResourceError(f"File not found: {path}")
        if cancel is not None and cancel.is_set():
            raise AnalysisCancelled(f"Cancelled before {path}")

        if not self.config.reanalyze:
            existing = self._existing_analysis(path)
            if existing is not None:
                self.logger.info("Already analyzed with %s: %s", existing.model_used, path)
                return existing, None

        self.logger.info("Extracting features from %s", path)
        result = self.extract_features(path, cancel)

        if cancel is not None and cancel.is_set():
            raise AnalysisCancelled(f"Cancelled before inference for {path}")

        self.logger.info("Analyzing mood with %s", self.config.ollama_model)
        analysis = self.client.analyze_mood(result.vector)
        if not analysis.validate_ranges():
            self.logger.warning("Analysis for %s contains values outside expected ranges", path)

        if self.config.write_tags:
            self.logger.info("Writing tags to %s", path)
            self.tag_store.write(analysis)
        else:
            self.logger.info("Test mode: not writing tags to %s", path)

        return analysis, result

    def _existing_analysis(self, path: str) -> Optional[MoodAnalysis]:
        try:
            existing = self.tag_store.read(path)
        except TagStoreError as e:
            self.logger.warning("%s", e)
            return None
        if existing is not None and existing.model_used:
            return existing
        return None

    def batch_process(
        self,
        paths: Iterable[str],
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
    ) -> BatchResult:
        """
        Analyze many files; a failing file never aborts the batch.

        At most ``max_workers`` files are analyzed (and held decoded in
        memory) at once.

        Args:
            paths: Files to analyze
            progress: Called with a BatchProgress snapshot after every file
            cancel: Event that stops dispatching further files

        Returns:
            BatchResult with analyses, per-file failures and skipped files
        """
        paths = [str(p) for p in paths]
        cancel = cancel or threading.Event()
        state = BatchProgress(total=len(paths))
        result = BatchResult()
        started = time.monotonic()

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = {executor.submit(self._analyze, path, cancel): path for path in paths}

            for future in as_completed(futures):
                path = futures[future]
                try:
                    analysis, extraction = future.result()
                except (AnalysisCancelled, CancelledError):
                    result.skipped.append(path)
                    state.skipped += 1
                except Exception as e:
                    self.logger.error("Error processing %s: %s", path, e)
                    result.failures[path] = str(e)
                    state.failed += 1
                else:
                    result.analyses[path] = analysis
                    if extraction is not None and extraction.is_degraded:
                        result.degraded.append(path)
                    state.completed += 1

                if cancel.is_set():
                    for pending in futures:
                        pending.cancel()

                state.update_timing(started)
                if progress is not None:
                    progress(replace(state))

        result.cancelled = cancel.is_set()
        return result

    def find_audio_files(self, directory: str, recursive: Optional[bool] = None) -> List[str]:
        """
        List audio files with configured extensions, sorted by path.

        Raises:
            ResourceError: If the directory doesn't exist
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise ResourceError(f"Directory not found: {directory}")

        recursive = self.config.recursive if recursive is None else recursive
        candidates = directory.rglob("*") if recursive else directory.glob("*")
        return sorted(
            str(p) for p in candidates
            if p.is_file() and p.suffix.lower() in self.config.file_extensions
        )

    def process_directory(
        self,
        directory: str,
        recursive: Optional[bool] = None,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
    ) -> BatchResult:
        """Analyze every matching file in a directory."""
        files = self.find_audio_files(directory, recursive)
        self.logger.info("Found %d audio files in %s", len(files), directory)
        return self.batch_process(files, progress, cancel)

    def read_tags(self, path: str) -> Optional[MoodAnalysis]:
        """Read stored mood tags; None if the file has none."""
        analysis = self.tag_store.read(path)
        if analysis is None or not analysis.model_used:
            return None
        return analysis

    def restore_backup(self, path: str) -> bool:
        return self.tag_store.restore_backup(path)
