"""
PawPulse - Sound Analysis Module
================================
Heuristic species and emotion estimation from short animal vocalizations.
Species: dog, cat, lovebirds, chicken, pigeon
Emotions: fear, stress, aggression, comfort, happiness, sadness, anxiety,
contentment, alertness
"""

from .animal_classifier import AnimalClassifier
from .behavior import blend, blend_result, score_behavior
from .emotion_analyzer import EmotionAnalyzer
from .emotion_classifier import EmotionClassifier, dominant_emotion
from .feature_extraction import FeatureExtractor
from .schema import (
    ANIMAL_TYPES,
    EMOTION_LABELS,
    AnalysisResult,
    AnimalType,
    EmotionLabel,
    FeatureVector,
)
from .training_samples import TrainingSample, TrainingSampleIndex, build_override_result
from .utils import AnalysisError, InvalidAudioError, fingerprint

__version__ = "1.0.0"
__all__ = [
    "ANIMAL_TYPES",
    "EMOTION_LABELS",
    "AnalysisError",
    "AnalysisResult",
    "AnimalClassifier",
    "AnimalType",
    "EmotionAnalyzer",
    "EmotionClassifier",
    "EmotionLabel",
    "FeatureExtractor",
    "FeatureVector",
    "InvalidAudioError",
    "TrainingSample",
    "TrainingSampleIndex",
    "blend",
    "blend_result",
    "build_override_result",
    "dominant_emotion",
    "fingerprint",
    "score_behavior",
]
