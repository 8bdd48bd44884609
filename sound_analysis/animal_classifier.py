"""
animal_classifier.py
====================
Species guess from acoustic features, used only when the caller does not
say which animal was recorded.

Typical vocal ranges the rules are built around:
  pigeon 200-800 Hz (coos), dog 400-2000 Hz (barks), cat 300-1500 Hz (meows),
  chicken 1000-3000 Hz (clucks), lovebirds 2000-6000 Hz (chirps).
"""

import logging
from typing import Dict

from .schema import AnimalType, FeatureVector

logger = logging.getLogger(__name__)

# Tie-break order: the first species to reach the top score wins.
SCORING_ORDER = (
    AnimalType.PIGEON,
    AnimalType.DOG,
    AnimalType.CAT,
    AnimalType.CHICKEN,
    AnimalType.LOVEBIRDS,
)
DEFAULT_ANIMAL = AnimalType.DOG


class AnimalClassifier:
    """Additive frequency / ZCR / amplitude rules over the five species."""

    def scores(self, features: FeatureVector) -> Dict[AnimalType, float]:
        scores = {animal: 0.0 for animal in SCORING_ORDER}
        frequency = features.frequency
        zcr = features.zcr_rate
        amplitude = features.amplitude
        energy = features.rms_energy

        # Primary: frequency band
        if frequency < 600:
            scores[AnimalType.PIGEON] += 0.4
        elif frequency < 1000:
            scores[AnimalType.DOG] += 0.3
            scores[AnimalType.CAT] += 0.2
        elif frequency < 1800:
            scores[AnimalType.DOG] += 0.3
            scores[AnimalType.CHICKEN] += 0.2
        elif frequency < 3000:
            scores[AnimalType.CHICKEN] += 0.35
            scores[AnimalType.LOVEBIRDS] += 0.15
        else:
            scores[AnimalType.LOVEBIRDS] += 0.4

        # Secondary: birds oscillate faster than mammals
        if zcr > 6:
            scores[AnimalType.LOVEBIRDS] += 0.2
            scores[AnimalType.CHICKEN] += 0.15
        elif zcr < 3:
            scores[AnimalType.PIGEON] += 0.2
            scores[AnimalType.DOG] += 0.15

        # Tertiary: attack and sustain
        if amplitude > 0.7:
            scores[AnimalType.DOG] += 0.1
            scores[AnimalType.CHICKEN] += 0.05
        if amplitude < 0.5 and energy < 0.3:
            scores[AnimalType.CAT] += 0.15
        if energy > 0.4:
            scores[AnimalType.PIGEON] += 0.1
            scores[AnimalType.LOVEBIRDS] += 0.1

        return scores

    def classify(self, features: FeatureVector) -> AnimalType:
        scores = self.scores(features)

        detected = DEFAULT_ANIMAL
        best = 0.0
        for animal in SCORING_ORDER:
            if scores[animal] > best:
                best = scores[animal]
                detected = animal

        logger.debug(
            f"[AnimalClassifier] {detected.value} "
            f"({', '.join(f'{a.value}={s:.2f}' for a, s in scores.items())})"
        )
        return detected
