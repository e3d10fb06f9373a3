import logging

from .config import DetectionConfig
from .types import ISSUE_KINDS, Codec, IssueVector, PartialResult

logger = logging.getLogger(__name__)


MSG_GLITCH = 'abnormal data fluctuation, possible screen glitch'
MSG_UNKNOWN_CODEC = 'unrecognized codec, possible corruption'
MSG_STUTTER = 'data discontinuity, possible stutter'
MSG_FRAME_ANALYSIS_NEEDED = 'color shift and missing-person detection require frame-level image analysis'


# ================================================================
# Rule Scoring Engine
# ================================================================
class RuleScoringEngine:
    """Fixed thresholds over byte-level features. No learned parameters."""

    def __init__(self, config=None):
        self.config = config or DetectionConfig()

    def score(self, features, metadata):
        cfg = self.config
        flags = {}
        details = []

        if features.variance_volatility > cfg.variance_volatility_threshold:
            flags['glitch'] = True
            details.append(MSG_GLITCH)

        if metadata.codec == Codec.UNKNOWN:
            flags['corruption'] = True
            details.append(MSG_UNKNOWN_CODEC)

        if features.max_variance_change > cfg.max_variance_change_threshold:
            flags['stutter'] = True
            details.append(MSG_STUTTER)

        details.append(MSG_FRAME_ANALYSIS_NEEDED)

        logger.debug('rules: volatility=%.1f max_change=%.1f codec=%s -> %s',
                     features.variance_volatility, features.max_variance_change,
                     metadata.codec, sorted(flags))
        return PartialResult(issues=IssueVector(**flags), details=tuple(details))


# ================================================================
# Frame Vote Aggregator
# ================================================================
class FrameVoteAggregator:
    def __init__(self, config=None):
        self.config = config or DetectionConfig()

    def aggregate(self, frame_results):
        """
        Returns (issues, confidence_floor). A kind is set when strictly more
        than `frame_vote_fraction` of the classified frames report it.
        The floor is None when no frame was classified.
        """
        total = len(frame_results)
        if total == 0:
            return IssueVector(), None

        cut = self.config.frame_vote_fraction * total
        votes = {k: sum(1 for r in frame_results if getattr(r.issues, k))
                 for k in ISSUE_KINDS}
        issues = IssueVector(**{k: votes[k] > cut for k in ISSUE_KINDS})
        logger.debug('frame votes over %d frames: %s', total, votes)
        return issues, self.config.ai_confidence_floor
