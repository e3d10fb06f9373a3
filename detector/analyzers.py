import logging

import numpy as np

from .config import DetectionConfig
from .types import Codec, CorruptionReport, FeatureSet, Metadata, Sample

logger = logging.getLogger(__name__)


MSG_TOO_SMALL = 'file too small / likely incomplete'
MSG_BAD_HEADER = 'invalid header / possibly corrupted'

_MP4_BRAND = b'ftyp'
_AVI_MAGIC = b'RIFF'
_WEBM_MAGIC = b'\x1a\x45\xdf\xa3'


def as_uint8_array(data):
    """Zero-copy uint8 view over bytes/bytearray/memoryview."""
    if isinstance(data, np.ndarray):
        return data if data.dtype == np.uint8 else data.astype(np.uint8, copy=False)
    return np.frombuffer(data, dtype=np.uint8)


def match_codec(header):
    """Three-way magic match. `header` is the leading bytes of the blob."""
    header = bytes(header)
    if header[4:8] == _MP4_BRAND:
        return Codec.MP4
    if header[0:4] == _AVI_MAGIC:
        return Codec.AVI
    if header[0:4] == _WEBM_MAGIC:
        return Codec.WEBM
    return Codec.UNKNOWN


class Stats:
    @staticmethod
    def window_stats(view):
        """Mean and population variance of a uint8 window."""
        if view.size == 0:
            return 0.0, 0.0
        x = view.astype(np.float64)
        return float(x.mean()), float(x.var(ddof=0))

    @staticmethod
    def abs_deltas(values):
        if len(values) < 2:
            return np.zeros(0, dtype=np.float64)
        return np.abs(np.diff(np.asarray(values, dtype=np.float64)))


class MetadataAnalyzer:
    def analyze(self, raw, mime_type=''):
        codec = match_codec(raw[:12])
        return Metadata(size=len(raw), mime_type=mime_type or '', codec=codec)


class CorruptionAnalyzer:
    def __init__(self, config=None):
        self.config = config or DetectionConfig()

    def analyze(self, raw):
        if len(raw) < self.config.min_file_size:
            # Truncated blobs are not header-checked
            return CorruptionReport(has_issue=True, issues=(MSG_TOO_SMALL,))

        issues = []
        if match_codec(raw[:20]) == Codec.UNKNOWN:
            issues.append(MSG_BAD_HEADER)
        return CorruptionReport(has_issue=bool(issues), issues=tuple(issues))


class SampleAnalyzer:
    """Evenly spaced byte windows over the raw buffer."""

    def __init__(self, config=None):
        self.config = config or DetectionConfig()

    def effective_count(self, length, sample_count=None):
        count = self.config.sample_count if sample_count is None else int(sample_count)
        return max(1, min(count, length))

    def analyze(self, raw, sample_count=None):
        length = len(raw)
        if length == 0:
            raise ValueError('cannot sample an empty buffer')

        count = self.effective_count(length, sample_count)
        chunk_size = length // count
        arr = as_uint8_array(raw)
        cfg = self.config

        samples = []
        for i in range(count):
            offset = i * chunk_size
            view = arr[offset:offset + cfg.window_bytes]
            mean, variance = Stats.window_stats(view)
            samples.append(Sample(
                offset=offset,
                mean=mean,
                variance=variance,
                leading_bytes=tuple(int(b) for b in view[:cfg.leading_bytes]),
            ))
        logger.debug('sampled %d windows of %d bytes (chunk=%d)', count, cfg.window_bytes, chunk_size)
        return samples


class FeatureAnalyzer:
    def analyze(self, samples, metadata):
        deltas = Stats.abs_deltas([s.variance for s in samples])
        if deltas.size:
            volatility = float(np.mean(deltas))
            max_change = float(np.max(deltas))
        else:
            volatility = 0.0
            max_change = 0.0
        return FeatureSet(
            variance_volatility=volatility,
            max_variance_change=max_change,
            file_size=metadata.size,
            codec=metadata.codec,
        )
