import logging

from flask import Blueprint, current_app, jsonify, request

from pawpulse.models.database import (
    delete_training_sample,
    get_training_samples,
    save_training_sample,
)
from pawpulse.utils.payload import read_animal, read_audio, read_emotion, read_file_name
from sound_analysis import TrainingSample, fingerprint

training_bp = Blueprint('training', __name__)
logger = logging.getLogger(__name__)


@training_bp.route('/api/training-samples', methods=['GET'])
def list_training_samples():
    try:
        samples = get_training_samples()
    except Exception as e:
        logger.exception(f"[training] Failed to fetch training samples: {e}")
        return jsonify({"success": False, "error": "Failed to fetch training samples"}), 500
    return jsonify([s.to_dict() for s in samples]), 200


@training_bp.route('/api/training-samples', methods=['POST'])
def create_training_sample():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"success": False, "error": "JSON body required"}), 400

    animal, err = read_animal(data, 'animal', required=True)
    if err:
        return jsonify({"success": False, "error": err}), 400

    emotion, err = read_emotion(data)
    if err:
        return jsonify({"success": False, "error": err}), 400

    buffer, err = read_audio(
        data,
        current_app.config['MIN_AUDIO_BYTES'],
        current_app.config['MAX_AUDIO_BYTES'],
    )
    if err:
        return jsonify({"success": False, "error": err}), 400

    file_name, err = read_file_name(data, required=True)
    if err:
        return jsonify({"success": False, "error": err}), 400

    sample = TrainingSample.create(animal, emotion, fingerprint(buffer), file_name)
    try:
        save_training_sample(sample)
    except Exception as e:
        logger.exception(f"[training] Failed to save training sample: {e}")
        return jsonify({"success": False, "error": "Failed to save training sample"}), 500

    logger.info(f"[training] Sample saved: {file_name} ({animal} - {emotion})")
    return jsonify(sample.to_dict()), 201


@training_bp.route('/api/training-samples/<sample_id>', methods=['DELETE'])
def remove_training_sample(sample_id):
    try:
        deleted = delete_training_sample(sample_id)
    except Exception as e:
        logger.exception(f"[training] Failed to delete training sample: {e}")
        return jsonify({"success": False, "error": "Failed to delete training sample"}), 500
    if not deleted:
        return jsonify({"success": False, "error": "Training sample not found"}), 404
    return jsonify({"success": True}), 200
