"""Tests for the species and emotion heuristics."""

import pytest

from generate_test_audio import SR, alternating_pcm, silence_pcm, sine_pcm
from sound_analysis import (
    EMOTION_LABELS,
    AnimalClassifier,
    AnimalType,
    EmotionClassifier,
    EmotionLabel,
    FeatureExtractor,
    FeatureVector,
    dominant_emotion,
)
from sound_analysis.animal_classifier import SCORING_ORDER
from sound_analysis.emotion_classifier import normalize_features

EXTREME_VECTORS = [
    FeatureVector.zeros(),
    FeatureVector(
        amplitude=1.0, rms_energy=1.0, zcr_rate=10.0, frequency=20000.0,
        pitch=40000.0, spectral_centroid=10.0, spectral_rolloff=10.0,
        spectral_flux=1.0, tempo_dynamics=1.0, duration=30.0,
    ),
    FeatureVector(amplitude=0.5, rms_energy=0.1, zcr_rate=5.0, frequency=1000.0),
    FeatureVector(amplitude=0.2, spectral_flux=0.03, tempo_dynamics=0.08, frequency=300.0),
]


def features_of(pcm, sr=SR):
    return FeatureExtractor().extract(pcm, sr)


class TestAnimalClassifier:
    """Frequency bands first, then ZCR, then amplitude/energy."""

    def test_low_tone_is_pigeon(self):
        # 500 Hz sits below the 600 Hz pigeon/dog boundary
        assert AnimalClassifier().classify(features_of(sine_pcm(500))) == AnimalType.PIGEON

    def test_mid_tone_is_dog(self):
        assert AnimalClassifier().classify(features_of(sine_pcm(800))) == AnimalType.DOG

    def test_upper_mid_tone_is_dog(self):
        assert AnimalClassifier().classify(features_of(sine_pcm(1400))) == AnimalType.DOG

    def test_two_khz_moderate_tone_is_chicken(self):
        features = features_of(sine_pcm(2000, amplitude=0.6))
        assert AnimalClassifier().classify(features) == AnimalType.CHICKEN

    def test_rapid_oscillation_is_lovebirds(self):
        features = features_of(alternating_pcm(16000, SR))
        assert AnimalClassifier().classify(features) == AnimalType.LOVEBIRDS

    def test_scores_cover_all_species(self):
        scores = AnimalClassifier().scores(FeatureVector.zeros())
        assert set(scores) == set(AnimalType)
        # silence: low band + low zcr + low amplitude/energy
        assert scores[AnimalType.PIGEON] == pytest.approx(0.6)
        assert scores[AnimalType.DOG] == pytest.approx(0.15)
        assert scores[AnimalType.CAT] == pytest.approx(0.15)

    def test_tie_goes_to_first_in_order(self):
        """With every species level, the first one scored (pigeon) wins."""

        class LevelScores(AnimalClassifier):
            def scores(self, features):
                return {animal: 0.5 for animal in SCORING_ORDER}

        assert LevelScores().classify(FeatureVector.zeros()) == AnimalType.PIGEON

    def test_mid_band_features_give_dog_over_cat(self):
        features = FeatureVector(frequency=700.0, zcr_rate=4.0, amplitude=0.6, rms_energy=0.35)
        scores = AnimalClassifier().scores(features)
        assert scores[AnimalType.DOG] == pytest.approx(0.3)
        assert scores[AnimalType.CAT] == pytest.approx(0.2)
        assert AnimalClassifier().classify(features) == AnimalType.DOG

    def test_deterministic(self):
        features = features_of(sine_pcm(1234, amplitude=0.8))
        classifier = AnimalClassifier()
        assert classifier.classify(features) == classifier.classify(features)


class TestEmotionClassifier:
    @pytest.mark.parametrize("features", EXTREME_VECTORS)
    def test_scores_form_a_simplex(self, features):
        scores = EmotionClassifier().classify(features)
        assert sum(scores.values()) == pytest.approx(1.0, abs=1e-6)

    @pytest.mark.parametrize("features", EXTREME_VECTORS)
    def test_all_nine_labels_non_negative(self, features):
        scores = EmotionClassifier().classify(features)
        assert tuple(scores) == EMOTION_LABELS
        assert all(v >= 0 for v in scores.values())

    def test_silence_favors_calm_emotions(self):
        scores = EmotionClassifier().classify(features_of(silence_pcm()))
        assert dominant_emotion(scores) in {
            EmotionLabel.SADNESS, EmotionLabel.COMFORT, EmotionLabel.CONTENTMENT,
        }
        # raw: contentment 1.1 of a 4.55 total
        assert scores["contentment"] == pytest.approx(1.1 / 4.55)

    def test_loud_noisy_input_moves_away_from_calm(self):
        calm = EmotionClassifier().classify(EXTREME_VECTORS[0])
        loud = EmotionClassifier().classify(EXTREME_VECTORS[1])
        assert loud["aggression"] > calm["aggression"]
        assert loud["fear"] > calm["fear"]
        assert loud["comfort"] < calm["comfort"]
        assert dominant_emotion(loud) in {
            EmotionLabel.FEAR, EmotionLabel.AGGRESSION,
            EmotionLabel.ALERTNESS, EmotionLabel.ANXIETY, EmotionLabel.STRESS,
        }

    def test_normalized_features_in_unit_range(self):
        for features in EXTREME_VECTORS:
            assert all(0.0 <= v <= 1.0 for v in normalize_features(features).values())

    def test_deterministic(self):
        features = features_of(sine_pcm(640, amplitude=0.7))
        classifier = EmotionClassifier()
        assert classifier.classify(features) == classifier.classify(features)


class TestDominantEmotion:
    def test_picks_maximum(self):
        scores = dict.fromkeys(EMOTION_LABELS, 0.05)
        scores["anxiety"] = 0.6
        assert dominant_emotion(scores) == EmotionLabel.ANXIETY

    def test_tie_goes_to_earlier_label(self):
        scores = dict.fromkeys(EMOTION_LABELS, 0.0)
        scores["comfort"] = 0.5
        scores["stress"] = 0.5
        # stress precedes comfort in label order
        assert dominant_emotion(scores) == EmotionLabel.STRESS

    def test_all_zero_defaults_to_contentment(self):
        assert dominant_emotion(dict.fromkeys(EMOTION_LABELS, 0.0)) == EmotionLabel.CONTENTMENT
