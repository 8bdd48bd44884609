import os


def _env(name, default, cast=str):
    value = os.environ.get(f"PAWPULSE_{name}")
    return cast(value) if value is not None else default


DB_PATH = _env("DB_PATH", os.path.join("data", "pawpulse.db"))

MIN_AUDIO_BYTES = _env("MIN_AUDIO_BYTES", 100, int)
MAX_AUDIO_BYTES = _env("MAX_AUDIO_BYTES", 10 * 1024 * 1024, int)  # 10MB
DEFAULT_SAMPLE_RATE = _env("DEFAULT_SAMPLE_RATE", 44100, int)

BEHAVIOR_WEIGHT = _env("BEHAVIOR_WEIGHT", 0.6, float)

LOG_LEVEL = _env("LOG_LEVEL", "INFO")
