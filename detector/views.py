from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
import logging

from .detector import VideoQualityDetector

logger = logging.getLogger(__name__)

_TRUTHY = ('1', 'true', 'yes', 'on')


def _max_upload_bytes():
    return int(getattr(settings, 'VIDEO_QUALITY', {}).get('MAX_UPLOAD_BYTES', 1024 * 1024 * 1024))


def _error(message, status):
    return JsonResponse({'success': False, 'error': message}, status=status)


@csrf_exempt
def detect(request):
    if request.method != 'POST':
        return _error('POST required', 405)

    video = request.FILES.get('video')
    if video is None or video.size == 0:
        return _error('please upload a video file', 400)

    limit = _max_upload_bytes()
    if video.size > limit:
        return _error(f'video file must not exceed {limit // (1024 * 1024)}MB', 400)

    ai_enabled = str(request.POST.get('ai', '')).strip().lower() in _TRUTHY

    detector = None
    try:
        detector = VideoQualityDetector.from_settings()
        uploads = request.FILES.getlist('frames')[:detector.config.max_frames]
        frames = [f.read() for f in uploads]
        raw = video.read()
        report = detector.detect(raw, video.content_type or '', ai_enabled=ai_enabled, frames=frames)
        metadata = detector.metadata.analyze(raw, video.content_type or '')
    except ValueError as e:
        return _error(str(e), 400)
    except Exception as e:
        logger.exception('detection failed for %s', video.name)
        return _error(f'detection failed: {e}', 500)
    finally:
        if detector is not None:
            detector.cleanup()

    return JsonResponse({
        'success': True,
        'results': report.to_dict(),
        'metadata': {
            'size': metadata.size,
            'codec': metadata.codec,
            'mimeType': metadata.mime_type,
        },
        'sampleCount': detector.sample_count(raw),
    })
