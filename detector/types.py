"""
Records passed between the detection stages.
All of them are created per request and never mutated.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple


ISSUE_KINDS = ('glitch', 'corruption', 'stutter', 'colorShift', 'missingPerson')


class Codec:
    MP4 = 'MP4'
    AVI = 'AVI'
    WEBM = 'WebM'
    UNKNOWN = 'unknown'


@dataclass(frozen=True)
class IssueVector:
    glitch: bool = False
    corruption: bool = False
    stutter: bool = False
    colorShift: bool = False
    missingPerson: bool = False

    def merge(self, other):
        """Per-kind OR; a kind set by either side stays set."""
        return IssueVector(**{k: getattr(self, k) or getattr(other, k)
                              for k in ISSUE_KINDS})

    def any(self):
        return any(getattr(self, k) for k in ISSUE_KINDS)

    def to_dict(self):
        return {k: bool(getattr(self, k)) for k in ISSUE_KINDS}

    @classmethod
    def from_dict(cls, data):
        return cls(**{k: bool(data.get(k, False)) for k in ISSUE_KINDS})


@dataclass(frozen=True)
class Metadata:
    size: int
    mime_type: str
    codec: str = Codec.UNKNOWN


@dataclass(frozen=True)
class CorruptionReport:
    has_issue: bool
    issues: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Sample:
    offset: int
    mean: float
    variance: float
    leading_bytes: Tuple[int, ...] = ()


@dataclass(frozen=True)
class FeatureSet:
    variance_volatility: float
    max_variance_change: float
    file_size: int
    codec: str


@dataclass(frozen=True)
class FrameResult:
    frame_index: int
    issues: IssueVector


@dataclass(frozen=True)
class PartialResult:
    """What a single stage contributes to the final report."""
    issues: IssueVector = field(default_factory=IssueVector)
    details: Tuple[str, ...] = ()
    confidence: Optional[float] = None

    def merge(self, other):
        return PartialResult(
            issues=self.issues.merge(other.issues),
            details=self.details + other.details,
            confidence=other.confidence if other.confidence is not None else self.confidence,
        )


@dataclass(frozen=True)
class DetectionReport:
    issues: IssueVector
    details: Tuple[str, ...]
    confidence: float
    used_ai: bool

    def to_dict(self):
        return {
            'issues': self.issues.to_dict(),
            'details': list(self.details),
            'confidence': float(self.confidence),
            'usedAI': bool(self.used_ai),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            issues=IssueVector.from_dict(data.get('issues', {})),
            details=tuple(data.get('details', [])),
            confidence=float(data.get('confidence', 0.0)),
            used_ai=bool(data.get('usedAI', False)),
        )
