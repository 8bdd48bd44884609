"""
emotion_classifier.py
=====================
Heuristic emotion scoring over the nine PawPulse emotion labels.

Each emotion gets a 0.1 floor plus a weighted sum of normalized features.
The weights are hand-fitted, not learned. After scoring, the raw values are
divided by their total so the output is a probability distribution.

Species is deliberately not an input: the same features always give the
same distribution, whatever animal was recorded.
"""

import logging
from typing import Dict, Mapping

from .schema import EMOTION_LABELS, EmotionLabel, EmotionScores, FeatureVector

logger = logging.getLogger(__name__)

SCORE_FLOOR = 0.1
ZERO_TOTAL_DIVISOR = 0.9
DEFAULT_EMOTION = EmotionLabel.CONTENTMENT


def normalize_features(features: FeatureVector) -> Dict[str, float]:
    """Map the raw features onto [0, 1]."""
    return {
        "freq": min(features.frequency / 2000, 1),
        "amp": min(features.amplitude, 1),
        "energy": min(features.rms_energy * 3, 1),
        "centroid": min(features.spectral_centroid / 10, 1),
        "rolloff": min(features.spectral_rolloff / 10, 1),
        "zcr": min(features.zcr_rate / 10, 1),
        "flux": min(features.spectral_flux * 10, 1),
        "tempo": min(features.tempo_dynamics * 5, 1),
    }


def dominant_emotion(scores: Mapping[str, float]) -> EmotionLabel:
    """
    Arg-max over EMOTION_LABELS order. A later label must score strictly
    higher to win, so ties go to the earlier label.
    """
    dominant = DEFAULT_EMOTION
    best = 0.0
    for label in EMOTION_LABELS:
        score = scores.get(label, 0.0)
        if score > best:
            best = score
            dominant = EmotionLabel(label)
    return dominant


class EmotionClassifier:
    """
    Usage:
        scores = EmotionClassifier().classify(features)
        label = dominant_emotion(scores)
    """

    def raw_scores(self, features: FeatureVector) -> EmotionScores:
        n = normalize_features(features)
        freq, amp, energy = n["freq"], n["amp"], n["energy"]
        centroid, rolloff, zcr = n["centroid"], n["rolloff"], n["zcr"]
        flux, tempo = n["flux"], n["tempo"]

        scores = dict.fromkeys(EMOTION_LABELS, SCORE_FLOOR)

        # Loud, energetic, sharp attacks
        scores["aggression"] = SCORE_FLOOR + (
            amp * 0.25
            + energy * 0.25
            + flux * 0.2
            + centroid * 0.15
            + (0.15 if tempo > 0.6 else 0)
        )

        # High pitched, noisy, rapidly changing
        scores["fear"] = SCORE_FLOOR + (
            freq * 0.25
            + zcr * 0.25
            + flux * 0.2
            + tempo * 0.15
            + (0.1 if rolloff > 0.7 else 0)
        )

        # Pitch away from mid-range, unstable amplitude
        scores["stress"] = SCORE_FLOOR + (
            abs(freq - 0.5) * 0.2
            + energy * 0.2
            + flux * 0.25
            + abs(amp - 0.5) * 0.15
            + tempo * 0.2
        )

        # Moderately high pitch, regular rhythm
        scores["happiness"] = SCORE_FLOOR + (
            freq * 0.2
            + (1 - abs(zcr - 0.5)) * 0.15
            + (0.2 if flux < 0.5 else 0.1)
            + (0.2 if tempo < 0.5 else 0.1)
            + amp * 0.15
        )

        scores["alertness"] = SCORE_FLOOR + (
            freq * 0.2
            + amp * 0.2
            + zcr * 0.2
            + flux * 0.2
            + (0.2 if energy > 0.5 else 0)
        )

        scores["sadness"] = SCORE_FLOOR + (
            (1 - freq) * 0.25
            + (1 - amp) * 0.25
            + (1 - energy) * 0.2
            + (0.15 if flux < 0.4 else 0.05)
            + (0.1 if tempo < 0.4 else 0)
        )

        scores["anxiety"] = SCORE_FLOOR + (
            zcr * 0.25
            + abs(amp - 0.5) * 0.2
            + flux * 0.2
            + tempo * 0.2
            + (0.15 if 0.4 < freq < 0.8 else 0)
        )

        scores["contentment"] = SCORE_FLOOR + (
            (1 - freq) * 0.2
            + (1 - amp) * 0.2
            + (0.25 if flux < 0.3 else 0.1)
            + (1 - zcr) * 0.15
            + (0.2 if tempo < 0.3 else 0.05)
        )

        scores["comfort"] = SCORE_FLOOR + (
            (1 - freq) * 0.25
            + (1 - amp) * 0.25
            + (1 - energy) * 0.15
            + (0.2 if flux < 0.2 else 0.05)
            + (0.1 if tempo < 0.25 else 0)
        )

        return scores

    def classify(self, features: FeatureVector) -> EmotionScores:
        raw = self.raw_scores(features)
        total = sum(raw.values())
        divisor = total if total != 0 else ZERO_TOTAL_DIVISOR
        scores = {label: max(0.0, raw[label] / divisor) for label in EMOTION_LABELS}

        logger.debug(
            f"[EmotionClassifier] "
            f"{', '.join(f'{k}={v:.3f}' for k, v in scores.items())}"
        )
        return scores
