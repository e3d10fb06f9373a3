"""
Tunable constants for the detection pipeline, gathered in one place.
"""

from dataclasses import dataclass, fields


@dataclass(frozen=True)
class DetectionConfig:
    # Sampling
    sample_count: int = 10
    window_bytes: int = 100
    leading_bytes: int = 20
    min_file_size: int = 1024

    # Rule engine
    variance_volatility_threshold: float = 5000.0
    max_variance_change_threshold: float = 10000.0

    # Frame voting
    frame_vote_fraction: float = 0.3
    ai_confidence_floor: float = 0.85

    # Confidence per path
    rule_only_confidence: float = 0.6
    primary_confidence: float = 0.8
    secondary_confidence: float = 0.7
    fallback_confidence: float = 0.5

    # Frame classification
    max_frames: int = 5
    frame_workers: int = 5
    frame_timeout: float = 30.0

    # Capabilities
    local_model_enabled: bool = False
    local_model_top_k: int = 5
    hf_api_key: str = ''
    hf_model: str = 'google/vit-base-patch16-224'
    hf_base_url: str = 'https://api-inference.huggingface.co/models'
    hf_request_timeout: float = 10.0

    @classmethod
    def from_mapping(cls, mapping):
        """Build from a dict keyed by field name (case-insensitive); unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in (mapping or {}).items():
            name = key.lower()
            if name in known and value is not None:
                values[name] = value
        return cls(**values)

    @classmethod
    def from_settings(cls):
        from django.conf import settings
        return cls.from_mapping(getattr(settings, 'VIDEO_QUALITY', {}))
