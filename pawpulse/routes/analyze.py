import logging

from flask import Blueprint, current_app, jsonify, request

from pawpulse.models.database import (
    AnalysisStore,
    get_analyses,
    get_analysis_by_id,
    get_training_samples,
)
from pawpulse.utils.payload import (
    read_animal,
    read_audio,
    read_file_name,
    read_keypoints,
    read_sample_rate,
)
from sound_analysis import EmotionAnalyzer, TrainingSampleIndex, blend_result, score_behavior
from sound_analysis.utils import InvalidAudioError

analyze_bp = Blueprint('analyze', __name__)
logger = logging.getLogger(__name__)


def _error(message, status):
    return jsonify({"success": False, "error": message}), status


def _analyzer():
    return EmotionAnalyzer(sink=AnalysisStore())


def _training_index():
    # Oldest first so that a newer label for the same clip wins
    samples = list(reversed(get_training_samples()))
    return TrainingSampleIndex(samples)


# ── POST /api/analyze ─────────────────────────────────────────────────────────
@analyze_bp.route('/api/analyze', methods=['POST'])
def analyze():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _error("JSON body required", 400)

    animal, err = read_animal(data, 'animal')
    if err:
        return _error(err, 400)

    sample_rate, err = read_sample_rate(data)
    if err:
        return _error(err, 400)

    buffer, err = read_audio(
        data,
        current_app.config['MIN_AUDIO_BYTES'],
        current_app.config['MAX_AUDIO_BYTES'],
    )
    if err:
        return _error(err, 400)

    file_name, err = read_file_name(data)
    if err:
        return _error(err, 400)

    try:
        result = _analyzer().analyze_with_overrides(
            animal, buffer, sample_rate,
            samples=_training_index(),
            file_name=file_name,
        )
    except InvalidAudioError as e:
        return _error(str(e), 400)
    except Exception as e:
        logger.exception(f"[analyze] Analysis error: {e}")
        return _error("Failed to analyze audio", 500)

    return jsonify(result.to_dict()), 200


# ── GET /api/analyses ─────────────────────────────────────────────────────────
@analyze_bp.route('/api/analyses', methods=['GET'])
def list_analyses():
    try:
        analyses = get_analyses()
    except Exception as e:
        logger.exception(f"[analyze] Failed to fetch analyses: {e}")
        return _error("Failed to fetch analyses", 500)
    return jsonify([a.to_dict() for a in analyses]), 200


# ── GET /api/analyses/<id> ────────────────────────────────────────────────────
@analyze_bp.route('/api/analyses/<analysis_id>', methods=['GET'])
def get_analysis(analysis_id):
    try:
        analysis = get_analysis_by_id(analysis_id)
    except Exception as e:
        logger.exception(f"[analyze] Failed to fetch analysis: {e}")
        return _error("Failed to fetch analysis", 500)
    if not analysis:
        return _error("Analysis not found", 404)
    return jsonify(analysis.to_dict()), 200


# ── POST /api/analyze-video ───────────────────────────────────────────────────
@analyze_bp.route('/api/analyze-video', methods=['POST'])
def analyze_video():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _error("JSON body required", 400)

    animal, err = read_animal(data, 'animal', 'detectedAnimal')
    if err:
        return _error(err, 400)

    # Soundtrack is optional; without it the audio side is a silent baseline
    buffer, err = read_audio(
        data,
        current_app.config['MIN_AUDIO_BYTES'],
        current_app.config['MAX_AUDIO_BYTES'],
        required=False,
    )
    if err:
        return _error(err, 400)

    sample_rate, err = read_sample_rate(data, default=current_app.config['DEFAULT_SAMPLE_RATE'])
    if err:
        return _error(err, 400)

    keypoints, err = read_keypoints(data)
    if err:
        return _error(err, 400)

    try:
        result = EmotionAnalyzer().analyze(animal or 'dog', buffer, sample_rate)
        if keypoints is not None:
            result = blend_result(
                result,
                score_behavior(keypoints),
                current_app.config['BEHAVIOR_WEIGHT'],
            )
        AnalysisStore().save(result)
    except InvalidAudioError as e:
        return _error(str(e), 400)
    except Exception as e:
        logger.exception(f"[analyze] Video analysis error: {e}")
        return _error("Failed to analyze video", 500)

    return jsonify(result.to_dict()), 200
