"""
behavior.py
===========
Emotion cues from video pose keypoints, and blending of those cues with the
audio-derived distribution.

Keypoints follow the 17-point COCO layout (nose, eyes, ears, shoulders,
elbows, wrists, hips, knees, ankles); each is a mapping with `x`, `y` in
pixels and an optional detection `score`.

Rule weighting within score_behavior:
  posture ~60%, head position ~20%, movement clarity ~20%, limbs ~10%.
"""

import logging
from dataclasses import replace
from typing import Mapping, Optional, Sequence

from .emotion_classifier import dominant_emotion
from .schema import EMOTION_LABELS, AnalysisResult, EmotionScores

logger = logging.getLogger(__name__)

BEHAVIOR_WEIGHT = 0.6
MIN_KEYPOINTS = 10

NOSE = 0
LEFT_SHOULDER, RIGHT_SHOULDER = 5, 6
LEFT_HIP, RIGHT_HIP = 11, 12
LEFT_KNEE, RIGHT_KNEE = 13, 14


def _keypoint(keypoints: Sequence, index: int) -> Optional[Mapping]:
    if index >= len(keypoints):
        return None
    point = keypoints[index]
    if not isinstance(point, Mapping) or "x" not in point or "y" not in point:
        return None
    return point


def score_behavior(keypoints: Optional[Sequence]) -> EmotionScores:
    """
    Score the nine emotions from one skeleton.

    Returns a distribution over all labels. With too few keypoints, or
    without a visible torso, a fixed low-information distribution is
    returned instead.
    """
    emotions = dict.fromkeys(EMOTION_LABELS, 0.0)

    if not keypoints or len(keypoints) < MIN_KEYPOINTS:
        emotions["alertness"] = 0.5
        emotions["contentment"] = 0.3
        return emotions

    nose = _keypoint(keypoints, NOSE)
    left_shoulder = _keypoint(keypoints, LEFT_SHOULDER)
    right_shoulder = _keypoint(keypoints, RIGHT_SHOULDER)
    left_hip = _keypoint(keypoints, LEFT_HIP)
    right_hip = _keypoint(keypoints, RIGHT_HIP)

    if not (nose and left_shoulder and right_shoulder and left_hip):
        emotions["alertness"] = 0.4
        return emotions

    # 1. Posture
    shoulder_width = abs(right_shoulder["x"] - left_shoulder["x"])
    shoulder_y = (left_shoulder["y"] + right_shoulder["y"]) / 2
    # without the right hip the body height is unknown: neither upright nor crouched
    body_height = None
    if right_hip:
        hip_y = (left_hip["y"] + right_hip["y"]) / 2
        body_height = abs(hip_y - shoulder_y)

    if body_height is not None and body_height > 80:
        # upright
        emotions["happiness"] += 0.7
        emotions["alertness"] += 0.6
        emotions["contentment"] += 0.4
    elif body_height is not None and body_height < 40:
        # crouched / cowering
        emotions["fear"] += 0.7
        emotions["anxiety"] += 0.6
        emotions["stress"] += 0.5
        emotions["sadness"] += 0.3
    else:
        emotions["contentment"] += 0.5
        emotions["alertness"] += 0.3

    if shoulder_width > 120:
        emotions["happiness"] += 0.6
        emotions["contentment"] += 0.5
        emotions["comfort"] += 0.4
    elif shoulder_width < 60:
        emotions["anxiety"] += 0.5
        emotions["stress"] += 0.4
        emotions["fear"] += 0.3

    # 2. Head position
    shoulder_center_x = (left_shoulder["x"] + right_shoulder["x"]) / 2
    head_tilt = abs(nose["x"] - shoulder_center_x)

    if nose["y"] < shoulder_y - 30:
        emotions["happiness"] += 0.5
        emotions["alertness"] += 0.4
        emotions["contentment"] += 0.3

    if head_tilt > 100:
        emotions["fear"] += 0.4
        emotions["anxiety"] += 0.3
    elif head_tilt < 20:
        emotions["alertness"] += 0.5
        emotions["aggression"] += 0.3

    # 3. Movement clarity, from detector confidence
    confidences = [
        (k.get("score") or 0.5) if isinstance(k, Mapping) else 0.5
        for k in keypoints
    ]
    avg_confidence = sum(confidences) / len(confidences)

    if avg_confidence > 0.75:
        emotions["alertness"] += 0.6
        emotions["aggression"] += 0.3
    elif avg_confidence < 0.5:
        emotions["anxiety"] += 0.6
        emotions["stress"] += 0.4
        emotions["fear"] += 0.3

    # 4. Limbs
    left_knee = _keypoint(keypoints, LEFT_KNEE)
    right_knee = _keypoint(keypoints, RIGHT_KNEE)
    if left_knee and right_knee:
        if abs(right_knee["x"] - left_knee["x"]) > 100:
            emotions["happiness"] += 0.4
            emotions["comfort"] += 0.3
        else:
            emotions["stress"] += 0.3
            emotions["anxiety"] += 0.2

    total = sum(emotions.values())
    if total > 0:
        emotions = {k: min(v / total, 1.0) for k, v in emotions.items()}
    return emotions


def blend(
    audio_scores: Mapping[str, float],
    behavior_scores: Mapping[str, float],
    behavior_weight: float = BEHAVIOR_WEIGHT,
) -> EmotionScores:
    """
    Weighted mix of audio and behavior distributions:
    audio * (1 - behavior_weight) + behavior * behavior_weight.

    Labels absent from either mapping count as 0. No renormalization is
    applied, so two proper distributions blend into a proper distribution.
    """
    if not 0.0 <= behavior_weight <= 1.0:
        raise ValueError(f"behavior_weight must be within [0, 1], got {behavior_weight}")

    audio_weight = 1.0 - behavior_weight
    return {
        label: float(audio_scores.get(label, 0.0) or 0.0) * audio_weight
        + float(behavior_scores.get(label, 0.0) or 0.0) * behavior_weight
        for label in EMOTION_LABELS
    }


def blend_result(
    result: AnalysisResult,
    behavior_scores: Mapping[str, float],
    behavior_weight: float = BEHAVIOR_WEIGHT,
) -> AnalysisResult:
    """New AnalysisResult with blended scores and a recomputed dominant emotion."""
    scores = blend(result.emotion_scores, behavior_scores, behavior_weight)
    blended = replace(
        result,
        emotion_scores=scores,
        dominant_emotion=dominant_emotion(scores),
    )
    logger.info(
        f"[Behavior] Blended {result.id}: {result.dominant_emotion.value} -> "
        f"{blended.dominant_emotion.value} (behavior weight {behavior_weight})"
    )
    return blended
