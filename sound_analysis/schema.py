"""
schema.py
=========
Record types shared by every stage of the PawPulse analysis pipeline.

  - AnimalType   : closed set of supported species.
  - EmotionLabel : closed set of emotion labels, in the fixed order used for
                   score iteration and tie-breaking.
  - FeatureVector: scalar acoustic features produced by FeatureExtractor.
  - AnalysisResult: the immutable record handed back to callers.

All records serialize to the camelCase JSON shape consumed by the web client.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union


class AnimalType(str, Enum):
    DOG = "dog"
    CAT = "cat"
    LOVEBIRDS = "lovebirds"
    CHICKEN = "chicken"
    PIGEON = "pigeon"

    @classmethod
    def parse(cls, value: Union[str, "AnimalType", None]) -> Optional["AnimalType"]:
        """Accept an enum member, its string value, or None."""
        if value is None or isinstance(value, AnimalType):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown animal '{value}'. Supported: {[a.value for a in cls]}"
            ) from None


class EmotionLabel(str, Enum):
    FEAR = "fear"
    STRESS = "stress"
    AGGRESSION = "aggression"
    COMFORT = "comfort"
    HAPPINESS = "happiness"
    SADNESS = "sadness"
    ANXIETY = "anxiety"
    CONTENTMENT = "contentment"
    ALERTNESS = "alertness"

    @classmethod
    def parse(cls, value: Union[str, "EmotionLabel"]) -> "EmotionLabel":
        if isinstance(value, EmotionLabel):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown emotion '{value}'. Supported: {list(EMOTION_LABELS)}"
            ) from None


ANIMAL_TYPES = tuple(a.value for a in AnimalType)

# Iteration order matters: ties go to the label that comes first here.
EMOTION_LABELS = tuple(e.value for e in EmotionLabel)

N_MFCC = 13
MFCC_FLOOR = math.log(1e-10)

EmotionScores = Dict[str, float]


@dataclass(frozen=True)
class FeatureVector:
    """Acoustic features for one clip. Bounded fields are already clamped."""

    amplitude: float = 0.0
    rms_energy: float = 0.0
    zcr_rate: float = 0.0
    frequency: float = 0.0
    pitch: float = 0.0
    spectral_centroid: float = 0.0
    spectral_rolloff: float = 0.0
    spectral_flux: float = 0.0
    mfcc: tuple = field(default_factory=lambda: (MFCC_FLOOR,) * N_MFCC)
    tempo_dynamics: float = 0.0
    duration: float = 0.0

    @classmethod
    def zeros(cls) -> "FeatureVector":
        """Feature vector for audio with no samples at all."""
        return cls()

    def to_dict(self) -> Dict[str, object]:
        return {
            "pitch": self.pitch,
            "frequency": self.frequency,
            "amplitude": self.amplitude,
            "duration": self.duration,
            "rmsEnergy": self.rms_energy,
            "spectralCentroid": self.spectral_centroid,
            "zcrRate": self.zcr_rate,
            "mfcc": list(self.mfcc),
            "spectralFlux": self.spectral_flux,
            "spectralRolloff": self.spectral_rolloff,
            "tempoDynamics": self.tempo_dynamics,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "FeatureVector":
        return cls(
            amplitude=float(data.get("amplitude", 0.0)),
            rms_energy=float(data.get("rmsEnergy", 0.0)),
            zcr_rate=float(data.get("zcrRate", 0.0)),
            frequency=float(data.get("frequency", 0.0)),
            pitch=float(data.get("pitch", 0.0)),
            spectral_centroid=float(data.get("spectralCentroid", 0.0)),
            spectral_rolloff=float(data.get("spectralRolloff", 0.0)),
            spectral_flux=float(data.get("spectralFlux", 0.0)),
            mfcc=tuple(float(v) for v in data.get("mfcc", (MFCC_FLOOR,) * N_MFCC)),
            tempo_dynamics=float(data.get("tempoDynamics", 0.0)),
            duration=float(data.get("duration", 0.0)),
        )


@dataclass(frozen=True)
class AnalysisResult:
    """
    One analysis outcome. Created once per call and never mutated;
    derived results (e.g. blended with video behavior) are new records.
    """

    id: str
    animal: AnimalType
    timestamp: str
    dominant_emotion: EmotionLabel
    emotion_scores: EmotionScores
    audio_features: FeatureVector

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "animal": self.animal.value,
            "timestamp": self.timestamp,
            "dominantEmotion": self.dominant_emotion.value,
            "emotionScores": {k: float(self.emotion_scores[k]) for k in EMOTION_LABELS},
            "audioFeatures": self.audio_features.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "AnalysisResult":
        scores = data.get("emotionScores") or {}
        return cls(
            id=str(data["id"]),
            animal=AnimalType(data["animal"]),
            timestamp=str(data["timestamp"]),
            dominant_emotion=EmotionLabel(data["dominantEmotion"]),
            emotion_scores={k: float(scores.get(k, 0.0)) for k in EMOTION_LABELS},
            audio_features=FeatureVector.from_dict(data.get("audioFeatures") or {}),
        )
