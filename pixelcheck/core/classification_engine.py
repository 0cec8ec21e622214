"""
Core classification engine: feature extraction -> linear scoring -> override rules
"""
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Sequence

from ..config.settings import Settings, settings as default_settings
from ..detectors import FeatureExtractor, default_extractors
from ..utils.logging_config import get_logger, setup_logging
from .exceptions import AnalysisCancelled, FeatureExtractionError
from .pixel_buffer import PixelBuffer
from .rules import RuleOverrideEngine
from .schemas import (
    CLASS_LABELS,
    AnalysisReport,
    ClassificationResult,
    FeatureResult,
    FeatureVector,
    ImageMetadata,
)
from .scorer import LinearScorer

logger = get_logger(__name__)


class CancellationToken:
    """Cooperative cancellation flag checked between pipeline stages"""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self):
        if self._event.is_set():
            raise AnalysisCancelled("Analysis was cancelled")


class PerformanceMonitor:
    """Wall-clock timing of the stages of one analysis"""

    def __init__(self):
        self.stage_times: Dict[str, float] = {}

    @contextmanager
    def stage(self, stage_name: str) -> Iterator[None]:
        """Time the enclosed block; a stage that raises is not recorded"""
        start = time.perf_counter()
        yield
        self.stage_times[stage_name] = (time.perf_counter() - start) * 1000

    def get_performance_report(self) -> Dict:
        total_time = sum(self.stage_times.values())
        stage_report = {
            name: {
                'duration_ms': duration_ms,
                'percentage': duration_ms / total_time * 100 if total_time > 0 else 0.0,
            }
            for name, duration_ms in self.stage_times.items()
        }
        return {
            'total_time_ms': total_time,
            'stage_breakdown': stage_report,
        }


class ClassificationEngine:
    """
    Classifies one decoded image as a real photograph, AI-generated image or
    graphic design.

    The ten extractors only read the shared PixelBuffer, so they may run on a
    thread pool. Any extractor failure aborts the analysis; a cancelled
    analysis discards everything computed so far.
    """

    def __init__(self, config: Optional[Settings] = None, extractors: Optional[Sequence[FeatureExtractor]] = None):
        self.config = config or default_settings
        if self.config.logging.configure_on_startup:
            setup_logging(config=self.config.logging)

        self.extractors: List[FeatureExtractor] = list(extractors) if extractors is not None else default_extractors()
        self.scorer = LinearScorer(self.config.scorer)
        self.rule_engine = RuleOverrideEngine(self.config.rules)

        self.parallel = self.config.engine.parallel_extraction
        self.executor = (
            ThreadPoolExecutor(max_workers=self.config.engine.max_workers, thread_name_prefix="pixelcheck-extract")
            if self.parallel else None
        )
        # Submitted analyses run one at a time; a newer submission cancels the older one
        self._submit_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pixelcheck-analysis")
        self._submit_lock = threading.Lock()
        self._current_token: Optional[CancellationToken] = None

        logger.info(
            "classification_engine_initialized",
            extractors=[extractor.name for extractor in self.extractors],
            parallel=self.parallel,
        )

    def analyze(
        self,
        buffer: PixelBuffer,
        metadata: Optional[ImageMetadata] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> AnalysisReport:
        """
        Run the full pipeline on one image

        Args:
            buffer: Decoded RGBA pixels
            metadata: File-level metadata, if the caller has it
            cancel_token: Checked between stages; cancellation raises AnalysisCancelled

        Returns:
            Classification plus the ten per-feature results
        """
        token = cancel_token or CancellationToken()
        monitor = PerformanceMonitor()

        if metadata is None:
            logger.warning("metadata_missing", width=buffer.width, height=buffer.height)

        with monitor.stage('extraction'):
            feature_results = self._extract_features(buffer, metadata, token)

        token.raise_if_cancelled()
        features = FeatureVector.from_mapping(
            {name: result.score for name, result in feature_results.items()}
        )

        classification = self.classify(features, token=token, monitor=monitor)

        report = AnalysisReport(
            classification=classification,
            features=feature_results,
            metadata=metadata,
            performance=monitor.get_performance_report(),
        )
        logger.info(
            "analysis_completed",
            width=buffer.width,
            height=buffer.height,
            label=classification.label.value,
            confidence=classification.confidence.value,
            fired_rules=classification.fired_rules,
            total_time_ms=report.performance['total_time_ms'],
        )
        return report

    def classify(
        self,
        features: FeatureVector,
        token: Optional[CancellationToken] = None,
        monitor: Optional[PerformanceMonitor] = None,
    ) -> ClassificationResult:
        """Score a feature vector and apply the override rules"""
        token = token or CancellationToken()
        monitor = monitor or PerformanceMonitor()

        token.raise_if_cancelled()
        with monitor.stage('scoring'):
            scored = self.scorer.score(features)

        token.raise_if_cancelled()
        with monitor.stage('overrides'):
            outcome = self.rule_engine.evaluate(features, scored.probabilities, scored.label)

        return ClassificationResult(
            label=outcome.label,
            confidence=outcome.confidence,
            probabilities={CLASS_LABELS[name].value: p for name, p in scored.probabilities.items()},
            raw_scores={CLASS_LABELS[name].value: s for name, s in scored.raw_scores.items()},
            max_probability=scored.max_probability,
            provisional_label=CLASS_LABELS[scored.label],
            fired_rules=outcome.fired_rules,
            features=features,
            indicator_counts=outcome.counts.as_dict(),
        )

    def submit(self, buffer: PixelBuffer, metadata: Optional[ImageMetadata] = None) -> Future:
        """
        Queue an analysis, superseding any analysis submitted earlier.

        The superseded future fails with AnalysisCancelled.
        """
        token = CancellationToken()
        with self._submit_lock:
            if self._current_token is not None:
                self._current_token.cancel()
            self._current_token = token
            return self._submit_executor.submit(self.analyze, buffer, metadata, token)

    def _extract_features(
        self,
        buffer: PixelBuffer,
        metadata: Optional[ImageMetadata],
        token: CancellationToken,
    ) -> Dict[str, FeatureResult]:
        token.raise_if_cancelled()

        futures: List[Future] = []
        if self.executor is not None:
            futures = [self.executor.submit(extractor.extract, buffer, metadata) for extractor in self.extractors]

        results: Dict[str, FeatureResult] = {}
        try:
            for index, extractor in enumerate(self.extractors):
                token.raise_if_cancelled()
                try:
                    if futures:
                        result = futures[index].result()
                    else:
                        result = extractor.extract(buffer, metadata)
                except Exception as e:
                    logger.error("feature_extraction_failed", feature=extractor.name, error=str(e))
                    raise FeatureExtractionError(extractor.name, str(e)) from e
                results[extractor.name] = result
        finally:
            for future in futures:
                future.cancel()

        return results

    def get_system_status(self) -> Dict:
        """Configured extractors and engine options"""
        return {
            'extractors': [extractor.name for extractor in self.extractors],
            'classes': list(self.scorer.classes),
            'rules': [rule.name for rule in self.rule_engine.rules],
            'configuration': {
                'parallel_extraction': self.parallel,
                'max_workers': self.config.engine.max_workers,
            },
        }

    def close(self):
        """Cleanup resources"""
        with self._submit_lock:
            if self._current_token is not None:
                self._current_token.cancel()
        self._submit_executor.shutdown(wait=True)
        if self.executor is not None:
            self.executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
