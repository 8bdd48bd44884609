import json

from sound_analysis.schema import ANIMAL_TYPES, EMOTION_LABELS
from sound_analysis.utils import (
    InvalidAudioError,
    check_payload_size,
    decode_audio_payload,
    validate_sample_rate,
)


def read_audio(data, min_bytes, max_bytes, required=True):
    """Decode and size-check `audioData`. Returns (bytes, error)."""
    audio_data = data.get('audioData')
    if not audio_data:
        if required:
            return None, "audioData is required"
        return b'', None

    try:
        buffer = decode_audio_payload(audio_data)
        check_payload_size(buffer, min_bytes, max_bytes)
    except InvalidAudioError as e:
        return None, str(e)
    return buffer, None


def read_sample_rate(data, default=None):
    """Returns (sample_rate, error)."""
    sample_rate = data.get('sampleRate', default)
    if sample_rate is None:
        return None, "sampleRate is required"
    try:
        return validate_sample_rate(sample_rate), None
    except InvalidAudioError as e:
        return None, str(e)


def read_animal(data, *keys, required=False):
    """First non-empty value among `keys`. Returns (animal or None, error)."""
    for key in keys:
        value = data.get(key)
        if value:
            value = str(value).strip().lower()
            if value not in ANIMAL_TYPES:
                return None, f"Invalid animal. Allowed: {list(ANIMAL_TYPES)}"
            return value, None
    if required:
        return None, f"{keys[0]} is required"
    return None, None


def read_emotion(data):
    value = str(data.get('emotion') or '').strip().lower()
    if not value:
        return None, "emotion is required"
    if value not in EMOTION_LABELS:
        return None, f"Invalid emotion. Allowed: {list(EMOTION_LABELS)}"
    return value, None


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _keypoint_error(index, point):
    if point is None:
        return None
    if not isinstance(point, dict):
        return f"poseData.keypoints[{index}] must be an object or null"
    for axis in ('x', 'y'):
        if not _is_number(point.get(axis)):
            return f"poseData.keypoints[{index}].{axis} must be a number"
    if point.get('score') is not None and not _is_number(point['score']):
        return f"poseData.keypoints[{index}].score must be a number"
    return None


def read_keypoints(data):
    """
    poseData may arrive as a JSON string or an object; either way it must
    carry a `keypoints` list whose entries are null or {x, y[, score]} with
    numeric values. Returns (keypoints or None, error).
    """
    pose_data = data.get('poseData')
    if not pose_data:
        return None, None

    if isinstance(pose_data, str):
        try:
            pose_data = json.loads(pose_data)
        except ValueError:
            return None, "poseData is not valid JSON"

    if not isinstance(pose_data, dict):
        return None, "poseData must be an object"

    keypoints = pose_data.get('keypoints')
    if keypoints is None:
        return None, None
    if not isinstance(keypoints, list):
        return None, "poseData.keypoints must be a list"

    for index, point in enumerate(keypoints):
        err = _keypoint_error(index, point)
        if err:
            return None, err
    return keypoints, None


def read_file_name(data, required=False):
    """Returns (stripped fileName or None, error)."""
    file_name = data.get('fileName')
    if file_name is None or file_name == '':
        if required:
            return None, "fileName is required"
        return None, None
    if not isinstance(file_name, str):
        return None, "fileName must be a string"

    file_name = file_name.strip()
    if not file_name and required:
        return None, "fileName is required"
    return file_name or None, None
