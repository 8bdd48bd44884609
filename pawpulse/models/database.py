import json
import logging
import os
import sqlite3

from pawpulse import config
from sound_analysis.schema import AnalysisResult
from sound_analysis.training_samples import TrainingSample

logger = logging.getLogger(__name__)

_db_path = config.DB_PATH


def get_db(db_path=None):
    conn = sqlite3.connect(db_path or _db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path=None):
    global _db_path
    if db_path:
        _db_path = db_path

    db_dir = os.path.dirname(_db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    conn = get_db()
    cursor = conn.cursor()

    # One row per analysis; the full record is kept as JSON
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS analysis (
            id TEXT PRIMARY KEY,
            animal TEXT NOT NULL,
            dominant_emotion TEXT NOT NULL,
            timestamp TEXT NOT NULL,
            result_json TEXT NOT NULL
        )
    ''')

    # Labeled clips used by the exact-match override
    cursor.execute('''
        CREATE TABLE IF NOT EXISTS training_sample (
            id TEXT PRIMARY KEY,
            animal TEXT NOT NULL,
            emotion TEXT NOT NULL,
            audio_hash TEXT NOT NULL,
            file_name TEXT,
            created_at TEXT NOT NULL
        )
    ''')

    conn.commit()
    conn.close()
    logger.info(f"[DB] Initialized at {_db_path}")


# ── ANALYSES ──────────────────────────────────────────────────────────────────

def save_analysis(result: AnalysisResult) -> AnalysisResult:
    conn = get_db()
    cursor = conn.cursor()
    cursor.execute('''
        INSERT OR REPLACE INTO analysis
        (id, animal, dominant_emotion, timestamp, result_json)
        VALUES (?, ?, ?, ?, ?)
    ''', (
        result.id, result.animal.value, result.dominant_emotion.value,
        result.timestamp, json.dumps(result.to_dict())
    ))
    conn.commit()
    conn.close()
    return result


def get_analyses(limit=None):
    """All analyses, newest first."""
    conn = get_db()
    cursor = conn.cursor()
    if limit:
        cursor.execute(
            "SELECT result_json FROM analysis ORDER BY timestamp DESC LIMIT ?", (limit,)
        )
    else:
        cursor.execute("SELECT result_json FROM analysis ORDER BY timestamp DESC")
    rows = cursor.fetchall()
    conn.close()
    return [AnalysisResult.from_dict(json.loads(row["result_json"])) for row in rows]


def get_analysis_by_id(analysis_id):
    conn = get_db()
    cursor = conn.cursor()
    cursor.execute("SELECT result_json FROM analysis WHERE id = ?", (analysis_id,))
    row = cursor.fetchone()
    conn.close()
    if row:
        return AnalysisResult.from_dict(json.loads(row["result_json"]))
    return None


class AnalysisStore:
    """Persistence sink handed to EmotionAnalyzer."""

    def save(self, result: AnalysisResult) -> AnalysisResult:
        return save_analysis(result)

    def list(self):
        return get_analyses()

    def get_by_id(self, analysis_id):
        return get_analysis_by_id(analysis_id)


# ── TRAINING SAMPLES ──────────────────────────────────────────────────────────

def _row_to_sample(row) -> TrainingSample:
    return TrainingSample.from_dict({
        "id": row["id"],
        "animal": row["animal"],
        "emotion": row["emotion"],
        "audioHash": row["audio_hash"],
        "fileName": row["file_name"],
        "createdAt": row["created_at"],
    })


def save_training_sample(sample: TrainingSample) -> TrainingSample:
    conn = get_db()
    cursor = conn.cursor()
    cursor.execute('''
        INSERT OR REPLACE INTO training_sample
        (id, animal, emotion, audio_hash, file_name, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
    ''', (
        sample.id, sample.animal.value, sample.emotion.value,
        sample.audio_hash, sample.file_name, sample.created_at
    ))
    conn.commit()
    conn.close()
    return sample


def get_training_samples():
    conn = get_db()
    cursor = conn.cursor()
    cursor.execute("SELECT * FROM training_sample ORDER BY created_at DESC")
    rows = cursor.fetchall()
    conn.close()
    return [_row_to_sample(row) for row in rows]


def delete_training_sample(sample_id) -> bool:
    conn = get_db()
    cursor = conn.cursor()
    cursor.execute("DELETE FROM training_sample WHERE id = ?", (sample_id,))
    deleted = cursor.rowcount > 0
    conn.commit()
    conn.close()
    return deleted
