"""
Per-frame image classification.

A capability is any object with `classify(image_bytes)` returning either a
list of {'label', 'score'} dicts or a single {'label'} dict, and raising a
CapabilityError subclass when it cannot answer.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait

import requests

from .config import DetectionConfig
from .types import FrameResult, IssueVector

logger = logging.getLogger(__name__)


DEFECT_KEYWORDS = ('glitch', 'corrupt', 'error')


class CapabilityError(Exception):
    pass


class TransientUnavailable(CapabilityError):
    """The capability is temporarily unable to answer (e.g. model warming up)."""


class RequestError(CapabilityError):
    pass


class ClassificationTimeout(Exception):
    pass


def parse_labels(output):
    """Capability output -> IssueVector. Only glitch/corruption have a signal."""
    if isinstance(output, dict):
        output = [output]
    if not isinstance(output, (list, tuple)):
        raise RequestError(f'unexpected classifier output: {type(output).__name__}')

    labels = []
    for item in output:
        if not isinstance(item, dict) or 'label' not in item:
            raise RequestError(f'unexpected classifier item: {item!r}')
        labels.append(str(item['label']).lower())

    text = ' '.join(labels)
    hit = any(word in text for word in DEFECT_KEYWORDS)
    return IssueVector(glitch=hit, corruption=hit)


# ================================================================
# Hosted inference capability
# ================================================================
class HuggingFaceCapability:
    def __init__(self, api_key, model, base_url='https://api-inference.huggingface.co/models',
                 timeout=10.0, session=None):
        self.api_key = api_key
        self.model = model
        self.url = f"{base_url.rstrip('/')}/{model}"
        self.timeout = timeout
        self.session = session or requests

    def classify(self, image_bytes):
        headers = {
            'Authorization': f'Bearer {self.api_key}',
            'Content-Type': 'application/octet-stream',
        }
        try:
            response = self.session.post(self.url, headers=headers, data=image_bytes,
                                         timeout=self.timeout)
        except requests.RequestException as e:
            raise RequestError(f'inference request failed: {e}') from e

        try:
            body = response.json()
        except ValueError:
            body = None

        error = body.get('error') if isinstance(body, dict) else None
        if response.status_code == 503 or (error and 'loading' in str(error).lower()):
            raise TransientUnavailable(f'model {self.model} is warming up')
        if response.status_code >= 400:
            raise RequestError(f'inference returned HTTP {response.status_code}: {error or response.text[:200]}')
        if body is None:
            raise RequestError('inference returned a non-JSON body')
        if error:
            raise RequestError(f'inference error: {error}')
        return body


# ================================================================
# Frame classifier
# ================================================================
class FrameClassifier:
    def __init__(self, capability, config=None):
        self.capability = capability
        self.config = config or DetectionConfig()

    def classify_frame(self, image_bytes, frame_index):
        """FrameResult, or None when the capability could not answer."""
        try:
            output = self.capability.classify(image_bytes)
            issues = parse_labels(output)
        except CapabilityError as e:
            logger.warning('frame %d dropped: %s', frame_index, e)
            return None
        return FrameResult(frame_index=frame_index, issues=issues)

    def classify_frames(self, frames):
        """
        Classify frames concurrently and wait for every outcome.
        Returns successful FrameResults ordered by frame index.
        Raises ClassificationTimeout if the batch outlives `frame_timeout`.
        """
        cfg = self.config
        frames = list(frames or [])
        if len(frames) > cfg.max_frames:
            logger.warning('%d frames supplied, classifying the first %d',
                           len(frames), cfg.max_frames)
            frames = frames[:cfg.max_frames]
        if not frames:
            return []

        executor = ThreadPoolExecutor(max_workers=max(1, min(cfg.frame_workers, len(frames))))
        try:
            futures = [executor.submit(self.classify_frame, frame, i)
                       for i, frame in enumerate(frames)]
            done, not_done = wait(futures, timeout=cfg.frame_timeout)
            if not_done:
                for f in not_done:
                    f.cancel()
                raise ClassificationTimeout(
                    f'{len(not_done)} of {len(futures)} frames unfinished after {cfg.frame_timeout}s')
            results = [f.result() for f in futures]
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        kept = [r for r in results if r is not None]
        logger.info('classified %d/%d frames', len(kept), len(frames))
        return sorted(kept, key=lambda r: r.frame_index)
