"""
training_samples.py
===================
Labeled training samples and the exact-match override built on them.

When an incoming clip matches a labeled sample (by payload fingerprint or by
file name), the heuristic classifiers are skipped and a synthetic result
carrying the stored label is returned instead.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

from .schema import (
    EMOTION_LABELS,
    AnalysisResult,
    AnimalType,
    EmotionLabel,
    FeatureVector,
)

logger = logging.getLogger(__name__)

OVERRIDE_CONFIDENCE = 0.55
OVERRIDE_FLOOR = 0.05


@dataclass(frozen=True)
class TrainingSample:
    id: str
    animal: AnimalType
    emotion: EmotionLabel
    audio_hash: str
    file_name: str
    created_at: str

    @classmethod
    def create(cls, animal, emotion, audio_hash: str, file_name: str) -> "TrainingSample":
        return cls(
            id=str(uuid.uuid4()),
            animal=AnimalType.parse(animal),
            emotion=EmotionLabel.parse(emotion),
            audio_hash=audio_hash,
            file_name=file_name,
            created_at=datetime.now(timezone.utc).isoformat(),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "animal": self.animal.value,
            "emotion": self.emotion.value,
            "audioHash": self.audio_hash,
            "fileName": self.file_name,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "TrainingSample":
        return cls(
            id=data["id"],
            animal=AnimalType(data["animal"]),
            emotion=EmotionLabel(data["emotion"]),
            audio_hash=data["audioHash"],
            file_name=data.get("fileName") or "",
            created_at=data["createdAt"],
        )


class TrainingSampleIndex:
    """
    Key -> sample lookup by fingerprint and by file name. Exact matches only.

    match_threshold is accepted and stored but not consulted: there is no
    approximate fingerprint comparison.
    """

    def __init__(self, samples: Iterable[TrainingSample] = (), match_threshold: float = 0.9):
        self.match_threshold = match_threshold
        self._by_hash: Dict[str, TrainingSample] = {}
        self._by_name: Dict[str, TrainingSample] = {}
        for sample in samples:
            self.add(sample)

    def add(self, sample: TrainingSample) -> None:
        self._by_hash[sample.audio_hash] = sample
        if sample.file_name:
            self._by_name[sample.file_name] = sample

    def __len__(self) -> int:
        return len(self._by_hash)

    def lookup(
        self,
        audio_hash: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> Optional[TrainingSample]:
        """Fingerprint match first, then file name."""
        if audio_hash and audio_hash in self._by_hash:
            return self._by_hash[audio_hash]
        if file_name and file_name in self._by_name:
            return self._by_name[file_name]
        return None


def build_override_result(
    sample: TrainingSample,
    confidence: float = OVERRIDE_CONFIDENCE,
    floor: float = OVERRIDE_FLOOR,
) -> AnalysisResult:
    """Synthetic result: stored label at `confidence`, every other label at `floor`."""
    scores = {
        label: confidence if label == sample.emotion.value else floor
        for label in EMOTION_LABELS
    }
    logger.info(
        f"[TrainingSamples] Override hit: '{sample.file_name}' -> "
        f"{sample.animal.value}/{sample.emotion.value}"
    )
    return AnalysisResult(
        id=str(uuid.uuid4()),
        animal=sample.animal,
        timestamp=datetime.now(timezone.utc).isoformat(),
        dominant_emotion=sample.emotion,
        emotion_scores=scores,
        audio_features=FeatureVector.zeros(),
    )
