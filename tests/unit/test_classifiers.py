import pytest
import requests

from detector.classifiers import (
    ClassificationTimeout, FrameClassifier, HuggingFaceCapability, RequestError,
    TransientUnavailable, parse_labels,
)
from detector.config import DetectionConfig
from detector.types import IssueVector
from tests.fakes import LabelCapability, ScriptedCapability


@pytest.mark.parametrize('output,hit', [
    ([{'label': 'Digital GLITCH art', 'score': 0.7}], True),
    ([{'label': 'jpeg', 'score': 0.5}, {'label': 'corrupted file', 'score': 0.2}], True),
    ({'label': 'Error screen'}, True),
    ([{'label': 'golden retriever', 'score': 0.9}], False),
    ([], False),
])
def test_parse_labels(output, hit):
    assert parse_labels(output) == IssueVector(glitch=hit, corruption=hit)


@pytest.mark.parametrize('output', ['cat', 42, [{'score': 0.3}], ['cat']])
def test_parse_labels_rejects_malformed_output(output):
    with pytest.raises(RequestError):
        parse_labels(output)


def test_frame_dropped_on_transient_failure():
    classifier = FrameClassifier(ScriptedCapability())
    assert classifier.classify_frame(b'warm', 3) is None
    assert classifier.classify_frame(b'fail', 4) is None


def test_frame_result_keeps_index():
    result = FrameClassifier(ScriptedCapability()).classify_frame(b'bad', 2)
    assert result.frame_index == 2
    assert result.issues == IssueVector(glitch=True, corruption=True)


def test_batch_keeps_successes_in_frame_order():
    frames = [b'warm', b'bad', b'ok', b'fail', b'bad']
    results = FrameClassifier(ScriptedCapability()).classify_frames(frames)
    assert [r.frame_index for r in results] == [1, 2, 4]
    assert [r.issues.glitch for r in results] == [True, False, True]


def test_batch_capped_at_max_frames():
    cap = LabelCapability([{'label': 'cat', 'score': 1.0}])
    results = FrameClassifier(cap, DetectionConfig(max_frames=2)).classify_frames([b'a'] * 6)
    assert len(results) == 2
    assert cap.calls == 2


def test_empty_batch():
    assert FrameClassifier(ScriptedCapability()).classify_frames([]) == []


def test_batch_times_out(blocking_capability):
    classifier = FrameClassifier(blocking_capability, DetectionConfig(frame_timeout=0.05))
    with pytest.raises(ClassificationTimeout):
        classifier.classify_frames([b'a', b'b'])


def test_unexpected_capability_error_propagates():
    class Broken:
        def classify(self, image_bytes):
            raise RuntimeError('boom')

    with pytest.raises(RuntimeError):
        FrameClassifier(Broken()).classify_frames([b'a'])


class FakeResponse:
    def __init__(self, status_code, body=None, text=''):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError('no json')
        return self._body


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.exc:
            raise self.exc
        return self.response


def _capability(session):
    return HuggingFaceCapability('hf_token', 'google/vit-base-patch16-224',
                                 base_url='https://example.test/models/', session=session)


def test_hosted_capability_posts_image():
    body = [{'label': 'tabby', 'score': 0.9}]
    session = FakeSession(FakeResponse(200, body))
    assert _capability(session).classify(b'\x89PNG') == body
    url, kwargs = session.calls[0]
    assert url == 'https://example.test/models/google/vit-base-patch16-224'
    assert kwargs['headers']['Authorization'] == 'Bearer hf_token'
    assert kwargs['data'] == b'\x89PNG'
    assert kwargs['timeout'] == 10.0


def test_hosted_capability_warming_up():
    session = FakeSession(FakeResponse(503, {'error': 'Model is currently loading', 'estimated_time': 20}))
    with pytest.raises(TransientUnavailable):
        _capability(session).classify(b'img')


@pytest.mark.parametrize('response', [
    FakeResponse(401, {'error': 'Invalid token'}),
    FakeResponse(200, {'error': 'bad input'}),
    FakeResponse(200, None, text='<html>'),
    FakeResponse(500, None, text='oops'),
])
def test_hosted_capability_request_errors(response):
    with pytest.raises(RequestError):
        _capability(FakeSession(response)).classify(b'img')


def test_hosted_capability_network_error():
    session = FakeSession(exc=requests.ConnectionError('refused'))
    with pytest.raises(RequestError):
        _capability(session).classify(b'img')
