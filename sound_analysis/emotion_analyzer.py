"""
emotion_analyzer.py
===================
Analysis engine for PawPulse: PCM in, AnalysisResult out.

Pipeline:
  FeatureExtractor -> AnimalClassifier (only when species is unknown)
  -> EmotionClassifier -> dominant emotion -> AnalysisResult

Architecture:
  - Stateless: no model artifacts, no shared mutable state. Instances are
    cheap and may be used from any number of threads at once.
  - Accepts raw PCM buffers or audio file paths.
  - An optional sink (anything with `save(result)`) receives each result;
    the analyzer never reads results back.

Output format (AnalysisResult.to_dict()):
    {
        "id": "5b0c...",
        "animal": "dog",
        "timestamp": "2026-03-01T10:00:00+00:00",
        "dominantEmotion": "happiness",
        "emotionScores": {"fear": 0.09, ..., "alertness": 0.12},
        "audioFeatures": {"pitch": 1240.0, "frequency": 620.0, ...}
    }
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from .animal_classifier import AnimalClassifier
from .emotion_classifier import EmotionClassifier, dominant_emotion
from .feature_extraction import FeatureExtractor
from .schema import AnalysisResult, AnimalType
from .training_samples import TrainingSampleIndex, build_override_result
from .utils import (
    AnalysisError,
    InvalidAudioError,
    fingerprint,
    load_audio_as_pcm,
)

logger = logging.getLogger(__name__)


class EmotionAnalyzer:
    """
    Usage:
        analyzer = EmotionAnalyzer()
        result = analyzer.analyze(None, pcm_bytes, 44100)
        print(result.animal, result.dominant_emotion)
    """

    def __init__(
        self,
        extractor: Optional[FeatureExtractor] = None,
        animal_classifier: Optional[AnimalClassifier] = None,
        emotion_classifier: Optional[EmotionClassifier] = None,
        sink=None,
    ):
        self._extractor = extractor or FeatureExtractor()
        self._animal_classifier = animal_classifier or AnimalClassifier()
        self._emotion_classifier = emotion_classifier or EmotionClassifier()
        self._sink = sink

    def analyze(
        self,
        species: Union[AnimalType, str, None],
        buffer: bytes,
        sample_rate: int,
    ) -> AnalysisResult:
        """
        Run the full pipeline on one PCM buffer.

        Parameters:
            species     : known animal, or None to detect it from the audio
            buffer      : bytes — 16-bit little-endian mono PCM
            sample_rate : int   — Hz

        Returns:
            AnalysisResult (immutable)

        Raises:
            InvalidAudioError: unknown species or invalid sample rate
            AnalysisError    : anything that fails inside the pipeline
        """
        try:
            animal = AnimalType.parse(species)
        except ValueError as e:
            raise InvalidAudioError(str(e)) from e

        try:
            features = self._extractor.extract(buffer, sample_rate)
            if animal is None:
                animal = self._animal_classifier.classify(features)
            emotion_scores = self._emotion_classifier.classify(features)
        except InvalidAudioError:
            raise
        except Exception as e:
            raise AnalysisError(f"[EmotionAnalyzer] Analysis failed: {e}") from e

        result = AnalysisResult(
            id=str(uuid.uuid4()),
            animal=animal,
            timestamp=datetime.now(timezone.utc).isoformat(),
            dominant_emotion=dominant_emotion(emotion_scores),
            emotion_scores=emotion_scores,
            audio_features=features,
        )

        logger.info(
            f"[EmotionAnalyzer] {result.animal.value}: '{result.dominant_emotion.value}' "
            f"({emotion_scores[result.dominant_emotion.value]:.4f}) | "
            f"species {'given' if species else 'detected'} | "
            f"duration {features.duration:.2f}s"
        )

        if self._sink is not None:
            self._sink.save(result)
        return result

    def analyze_with_overrides(
        self,
        species: Union[AnimalType, str, None],
        buffer: bytes,
        sample_rate: int,
        samples: Optional[TrainingSampleIndex] = None,
        file_name: Optional[str] = None,
    ) -> AnalysisResult:
        """
        Same as analyze(), but a clip that exactly matches a labeled training
        sample short-circuits the classifiers.
        """
        if samples is not None and len(samples):
            match = samples.lookup(audio_hash=fingerprint(buffer), file_name=file_name)
            if match is not None:
                result = build_override_result(match)
                if self._sink is not None:
                    self._sink.save(result)
                return result
        return self.analyze(species, buffer, sample_rate)

    def analyze_file(
        self,
        filepath: str,
        species: Union[AnimalType, str, None] = None,
    ) -> AnalysisResult:
        """Analyze a .wav or .mp3 file at its native sample rate."""
        logger.info(f"[EmotionAnalyzer] Analyzing file: {filepath}")
        buffer, sample_rate = load_audio_as_pcm(filepath)
        return self.analyze(species, buffer, sample_rate)

    def analyze_batch(
        self,
        filepaths: List[str],
        species: Union[AnimalType, str, None] = None,
    ) -> List[Dict[str, Any]]:
        """
        Analyze several files. A failing file yields an entry with an
        `error` key instead of aborting the batch.
        """
        results = []
        for i, filepath in enumerate(filepaths):
            try:
                entry = self.analyze_file(filepath, species).to_dict()
            except Exception as e:
                logger.error(f"[EmotionAnalyzer] Failed on file {i} '{filepath}': {e}")
                entry = {"error": str(e), "dominantEmotion": None}
            entry["filepath"] = filepath
            entry["index"] = i
            results.append(entry)
        return results
