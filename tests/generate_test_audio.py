"""Synthetic 16-bit PCM clips for the test suite."""

import base64
import wave

import numpy as np

SR = 44100


def to_pcm(y: np.ndarray) -> bytes:
    """Float waveform in [-1, 1] -> little-endian int16 bytes."""
    ints = np.round(np.clip(y, -1.0, 1.0) * 32767).astype("<i2")
    return ints.tobytes()


def sine_pcm(freq: float, duration: float = 1.0, amplitude: float = 1.0, sr: int = SR) -> bytes:
    t = np.arange(int(duration * sr)) / sr
    return to_pcm(amplitude * np.sin(2 * np.pi * freq * t))


def silence_pcm(duration: float = 1.0, sr: int = SR) -> bytes:
    return np.zeros(int(duration * sr), dtype="<i2").tobytes()


def constant_pcm(value: int, n: int) -> bytes:
    return np.full(n, value, dtype="<i2").tobytes()


def ramp_pcm(duration: float = 2.0, sr: int = SR) -> bytes:
    """Amplitude ramp from silence up to full scale."""
    return to_pcm(np.linspace(0.0, 1.0, int(duration * sr)))


def alternating_pcm(level: int, n: int) -> bytes:
    """+level, -level, +level, ... : a square wave at Nyquist."""
    signs = np.where(np.arange(n) % 2 == 0, 1, -1)
    return (signs * level).astype("<i2").tobytes()


def b64(buffer: bytes) -> str:
    return base64.b64encode(buffer).decode("ascii")


def write_wav(path, pcm: bytes, sr: int = SR) -> str:
    with wave.open(str(path), "wb") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(sr)
        w.writeframes(pcm)
    return str(path)
