"""
PawPulse - web service
======================
Flask API around the sound_analysis module: analysis, history and labeled
training samples, persisted in SQLite.
"""

__version__ = "1.0.0"
