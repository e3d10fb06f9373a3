import gc
import logging
import threading

import cv2
import numpy as np
import torch
import torch.nn.functional as F
import torchvision.models as models
import torchvision.transforms as transforms

from .classifiers import RequestError, TransientUnavailable

logger = logging.getLogger(__name__)

device = torch.device('cuda' if torch.cuda.is_available() else 'cpu')


# ================================================================
# In-process ImageNet classifier
# ================================================================
class LocalModelCapability:
    """ResNet-18 with ImageNet weights, loaded on first use."""

    def __init__(self, top_k=5):
        self.top_k = top_k
        self.model = None
        self.categories = []
        self.transform = transforms.Compose([
            transforms.ToPILImage(),
            transforms.Resize((224, 224)),
            transforms.ToTensor(),
            transforms.Normalize([0.485, 0.456, 0.406],
                                 [0.229, 0.224, 0.225])
        ])
        self._lock = threading.Lock()

    def _load(self):
        with self._lock:
            if self.model is not None:
                return
            try:
                weights = models.ResNet18_Weights.DEFAULT
                model = models.resnet18(weights=weights)
                model.eval().to(device)
            except Exception as e:
                raise TransientUnavailable(f'local model unavailable: {e}') from e
            self.categories = list(weights.meta['categories'])
            self.model = model
            logger.info('local classifier loaded on %s', device)

    def classify(self, image_bytes):
        self._load()
        if not image_bytes:
            raise RequestError('empty frame')
        frame = cv2.imdecode(np.frombuffer(image_bytes, dtype=np.uint8), cv2.IMREAD_COLOR)
        if frame is None:
            raise RequestError('frame is not a decodable image')

        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        t = self.transform(rgb).unsqueeze(0).to(device)
        with torch.no_grad():
            probs = F.softmax(self.model(t), dim=1)[0]
        k = min(self.top_k, probs.numel())
        scores, idx = torch.topk(probs, k)
        return [{'label': self.categories[int(i)], 'score': float(s)}
                for s, i in zip(scores.cpu().tolist(), idx.cpu().tolist())]

    def cleanup(self):
        self.model = None
        gc.collect()
        if torch.cuda.is_available():
            torch.cuda.empty_cache()
