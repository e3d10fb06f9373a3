import threading

import numpy as np

from detector.classifiers import RequestError, TransientUnavailable

MP4_HEADER = b'\x00\x00\x00\x18ftypisom\x00\x00\x02\x00isomiso2'


def mp4_bytes(size):
    return MP4_HEADER + b'\x00' * (size - len(MP4_HEADER))


def random_bytes(size, seed=7):
    return np.random.default_rng(seed).integers(0, 256, size, dtype=np.uint8).tobytes()


class LabelCapability:
    """Returns the same labels for every frame and counts calls."""

    def __init__(self, output):
        self.output = output
        self.calls = 0
        self._lock = threading.Lock()

    def classify(self, image_bytes):
        with self._lock:
            self.calls += 1
        return self.output


class ScriptedCapability:
    """Frame bytes decide the answer: b'bad' -> glitch label, b'warm' -> warming up, b'fail' -> error."""

    def classify(self, image_bytes):
        if image_bytes == b'warm':
            raise TransientUnavailable('model warming up')
        if image_bytes == b'fail':
            raise RequestError('HTTP 500')
        if image_bytes == b'bad':
            return [{'label': 'Glitch', 'score': 0.9}, {'label': 'screen', 'score': 0.1}]
        return [{'label': 'tabby cat', 'score': 0.8}]


class BlockingCapability:
    def __init__(self):
        self.release = threading.Event()

    def classify(self, image_bytes):
        self.release.wait(5)
        return {'label': 'ok'}




class ReleasableCapability(LabelCapability):
    """Label capability that records whether its resources were released."""

    def __init__(self, output):
        super().__init__(output)
        self.released = 0

    def cleanup(self):
        self.released += 1
