"""
utils.py
========
Utility functions for the PawPulse sound analysis module.

Responsibilities:
  - Interpret raw PCM payloads (16-bit signed little-endian mono)
  - Decode base64 / data-URL payloads coming from the web client
  - Load audio files (.wav and .mp3) and convert them to PCM
  - Fingerprint payloads for the training-sample override
  - Consistent error types and logging setup

Design notes:
  - Odd-length PCM buffers are truncated to a whole number of samples;
    this is documented behavior, not an error.
  - Payload size bounds (too short / too large) are enforced here, at the
    boundary. The feature extractor itself never rejects input.
"""

import base64
import binascii
import hashlib
import logging
from pathlib import Path
from typing import Tuple

import librosa
import numpy as np

logger = logging.getLogger(__name__)

# Supported audio formats
SUPPORTED_EXTENSIONS = {".wav", ".mp3"}

PCM_SCALE = 32768.0
MIN_PAYLOAD_BYTES = 100
MAX_PAYLOAD_BYTES = 10 * 1024 * 1024  # 10MB


class InvalidAudioError(ValueError):
    """Input rejected before analysis (size, encoding, sample rate, labels)."""


class AnalysisError(RuntimeError):
    """Raised when the analysis pipeline fails on an accepted input."""


def pcm_to_samples(buffer: bytes) -> np.ndarray:
    """
    Reinterpret a byte buffer as signed 16-bit little-endian samples.

    A trailing odd byte is dropped silently.

    Returns:
        np.ndarray of dtype int16 (possibly empty)
    """
    if buffer is None:
        return np.zeros(0, dtype=np.int16)
    usable = len(buffer) - (len(buffer) % 2)
    if usable != len(buffer):
        logger.debug("[utils] Odd-length PCM buffer; dropping final byte")
    return np.frombuffer(bytes(buffer[:usable]), dtype="<i2")


def normalize_samples(samples: np.ndarray) -> np.ndarray:
    """int16 samples -> float64 in [-1, 1]."""
    return samples.astype(np.float64) / PCM_SCALE


def samples_to_pcm(y: np.ndarray) -> bytes:
    """Float waveform in [-1, 1] -> 16-bit little-endian PCM bytes."""
    clipped = np.clip(np.asarray(y, dtype=np.float64), -1.0, 1.0)
    ints = np.round(clipped * (PCM_SCALE - 1)).astype("<i2")
    return ints.tobytes()


def validate_sample_rate(sample_rate) -> int:
    """
    Raises:
        InvalidAudioError: sample rate missing, non-integer, or not positive
    """
    if isinstance(sample_rate, bool):
        raise InvalidAudioError(f"[utils] Invalid sample rate: {sample_rate!r}")
    try:
        value = int(sample_rate)
    except (TypeError, ValueError):
        raise InvalidAudioError(f"[utils] Invalid sample rate: {sample_rate!r}") from None
    if value != sample_rate or value <= 0:
        raise InvalidAudioError(
            f"[utils] Sample rate must be a positive integer, got {sample_rate!r}"
        )
    return value


def decode_audio_payload(audio_data: str) -> bytes:
    """
    Decode a base64 payload, accepting a data URL prefix
    ("data:audio/wav;base64,....").

    Raises:
        InvalidAudioError: empty or undecodable payload
    """
    if not isinstance(audio_data, str) or not audio_data.strip():
        raise InvalidAudioError("[utils] audioData must be a non-empty base64 string")

    encoded = audio_data.split(",", 1)[1] if "," in audio_data else audio_data
    try:
        return base64.b64decode(encoded.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidAudioError(f"[utils] audioData is not valid base64: {e}") from e


def check_payload_size(
    buffer: bytes,
    min_bytes: int = MIN_PAYLOAD_BYTES,
    max_bytes: int = MAX_PAYLOAD_BYTES,
) -> None:
    """
    Raises:
        InvalidAudioError: buffer shorter than min_bytes or larger than max_bytes
    """
    if len(buffer) < min_bytes:
        raise InvalidAudioError(
            "Audio data too short. Please provide a longer audio sample."
        )
    if len(buffer) > max_bytes:
        raise InvalidAudioError(
            f"Audio data too large. Maximum size is {max_bytes // (1024 * 1024)}MB."
        )


def fingerprint(buffer: bytes) -> str:
    """MD5 hex digest of the raw payload, used as a training-sample key."""
    return hashlib.md5(bytes(buffer)).hexdigest()


def validate_audio_file(filepath: str) -> None:
    """Reject recordings that cannot be fed to load_audio_as_pcm."""
    path = Path(filepath)
    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise InvalidAudioError(
            f"[utils] '{path.name}' is not a .wav or .mp3 recording"
        )
    if not path.is_file():
        raise FileNotFoundError(f"[utils] No such recording: {filepath}")
    if path.stat().st_size == 0:
        raise InvalidAudioError(f"[utils] Recording is empty: {filepath}")


def load_audio_as_pcm(filepath: str, validate: bool = True) -> Tuple[bytes, int]:
    """
    Load an audio file at its native sample rate, downmix to mono and
    return it as 16-bit PCM bytes.

    Returns:
        Tuple[bytes, int] — (PCM payload, sample rate)

    Raises:
        FileNotFoundError : if file doesn't exist
        InvalidAudioError : if file is invalid
        AnalysisError     : if librosa fails to decode the file
    """
    if validate:
        validate_audio_file(filepath)

    try:
        y, sr = librosa.load(filepath, sr=None, mono=True)
    except Exception as e:
        raise AnalysisError(f"[utils] Failed to load audio file '{filepath}': {e}") from e

    logger.info(
        f"[utils] Loaded '{Path(filepath).name}' | "
        f"SR: {sr} Hz | Duration: {len(y)/sr:.2f}s"
    )
    return samples_to_pcm(y), int(sr)


def list_audio_files(directory: str, recursive: bool = True) -> list:
    """Recordings under `directory` in sorted order, as absolute paths."""
    root = Path(directory)
    if not root.is_dir():
        raise FileNotFoundError(f"[utils] Not a directory: {directory}")

    candidates = root.rglob("*") if recursive else root.iterdir()
    recordings = sorted(
        str(p.resolve()) for p in candidates
        if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS
    )
    logger.info(f"[utils] {len(recordings)} recordings under '{directory}'")
    return recordings


def setup_logging(level: str = "INFO") -> None:
    """Root logging for the web service and the batch command."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
    # numba's JIT and librosa's loaders are chatty at INFO
    for name in ("numba", "librosa"):
        logging.getLogger(name).setLevel(logging.WARNING)
