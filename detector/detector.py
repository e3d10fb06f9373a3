import logging

from .analyzers import (
    CorruptionAnalyzer, FeatureAnalyzer, MetadataAnalyzer, SampleAnalyzer,
)
from .classifiers import FrameClassifier, HuggingFaceCapability
from .config import DetectionConfig
from .scoring import FrameVoteAggregator, RuleScoringEngine
from .types import DetectionReport, IssueVector, PartialResult

logger = logging.getLogger(__name__)


MSG_AI_DISABLED = 'rule engine used (AI disabled)'
MSG_AI_FAILED = 'AI detection failed, fell back to rule engine'
MSG_PRIMARY_USED = 'platform classifier used'
MSG_SECONDARY_USED = 'rule engine and data analysis used'
MSG_NO_FRAMES = 'no frame images supplied, full detection requires frame extraction'
MSG_NO_HOSTED = 'hosted classifier not configured, frame analysis skipped'


def build_capabilities(config):
    """(primary, secondary) capabilities; either is None when not configured."""
    primary = None
    if config.local_model_enabled:
        from .local_model import LocalModelCapability
        primary = LocalModelCapability(top_k=config.local_model_top_k)

    secondary = None
    if config.hf_api_key:
        secondary = HuggingFaceCapability(
            api_key=config.hf_api_key,
            model=config.hf_model,
            base_url=config.hf_base_url,
            timeout=config.hf_request_timeout,
        )
    return primary, secondary


# ================================================================
# Video Quality Detector
# ================================================================
class VideoQualityDetector:
    def __init__(self, config=None, primary=None, secondary=None):
        self.config = config or DetectionConfig()
        self.primary = primary
        self.secondary = secondary

        self.metadata = MetadataAnalyzer()
        self.corruption = CorruptionAnalyzer(self.config)
        self.sampler = SampleAnalyzer(self.config)
        self.features = FeatureAnalyzer()
        self.rules = RuleScoringEngine(self.config)
        self.aggregator = FrameVoteAggregator(self.config)

    @classmethod
    def from_settings(cls):
        config = DetectionConfig.from_settings()
        primary, secondary = build_capabilities(config)
        return cls(config, primary=primary, secondary=secondary)

    def detect(self, raw, mime_type='', ai_enabled=False, frames=None):
        if not raw:
            raise ValueError('empty video buffer')

        metadata = self.metadata.analyze(raw, mime_type)
        check = self.corruption.analyze(raw)
        result = PartialResult(
            issues=IssueVector(corruption=check.has_issue),
            details=check.issues,
        )

        if not ai_enabled:
            logger.info('rule-only detection (size=%d codec=%s)', metadata.size, metadata.codec)
            stage = self._rule_pass(raw, metadata).merge(PartialResult(
                details=(MSG_AI_DISABLED,),
                confidence=self.config.rule_only_confidence,
            ))
        else:
            try:
                stage = self._ai_pass(raw, metadata, frames)
            except Exception:
                logger.exception('AI detection failed, falling back to rules')
                stage = self._rule_pass(raw, metadata).merge(PartialResult(
                    details=(MSG_AI_FAILED,),
                    confidence=self.config.fallback_confidence,
                ))

        result = result.merge(stage)
        return DetectionReport(
            issues=result.issues,
            details=result.details,
            confidence=result.confidence,
            used_ai=bool(ai_enabled),
        )

    def cleanup(self):
        """Release capability resources (the local model's weights)."""
        for capability in (self.primary, self.secondary):
            release = getattr(capability, 'cleanup', None)
            if callable(release):
                release()

    def sample_count(self, raw):
        return self.sampler.effective_count(len(raw))

    def _rule_pass(self, raw, metadata):
        samples = self.sampler.analyze(raw)
        features = self.features.analyze(samples, metadata)
        return self.rules.score(features, metadata)

    def _frame_pass(self, capability, frames, base_confidence):
        results = FrameClassifier(capability, self.config).classify_frames(frames)
        issues, floor = self.aggregator.aggregate(results)
        confidence = base_confidence if floor is None else max(base_confidence, floor)
        return PartialResult(issues=issues, confidence=confidence)

    def _ai_pass(self, raw, metadata, frames):
        cfg = self.config
        frames = list(frames or [])

        if self.primary is not None:
            logger.info('AI detection with platform classifier, %d frames', len(frames))
            head = PartialResult(details=(MSG_PRIMARY_USED,), confidence=cfg.primary_confidence)
            if not frames:
                return head.merge(PartialResult(details=(MSG_NO_FRAMES,)))
            return head.merge(self._frame_pass(self.primary, frames, cfg.primary_confidence))

        logger.info('AI detection with hosted classifier, %d frames', len(frames))
        stage = self._rule_pass(raw, metadata).merge(PartialResult(
            details=(MSG_SECONDARY_USED,),
            confidence=cfg.secondary_confidence,
        ))
        if self.secondary is None:
            logger.warning('no hosted classifier configured, skipping frame analysis')
            return stage.merge(PartialResult(details=(MSG_NO_HOSTED,)))
        if not frames:
            return stage.merge(PartialResult(details=(MSG_NO_FRAMES,)))
        return stage.merge(self._frame_pass(self.secondary, frames, cfg.secondary_confidence))
