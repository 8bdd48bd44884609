"""
feature_extraction.py
=====================
Acoustic feature extraction for PawPulse animal vocalization analysis.

Features extracted:
  - Amplitude (peak) and RMS energy of the normalized waveform.
  - Zero Crossing Rate: sign changes scaled by sample rate; also drives the
    frequency / pitch estimate.
  - Spectral Centroid / Rolloff / Flux over a magnitude pseudo-spectrum.
  - 13 MFCC-like log band energies.
  - Tempo dynamics: variability of the 20ms RMS envelope.

APPROXIMATIONS (kept on purpose):
  - The "spectrum" is the absolute value of the first fft_size samples, not a
    Fourier transform. Bin i is still mapped to i / fft_size * sample_rate.
    The classifier thresholds were tuned against this exact proxy, so swapping
    in a real FFT changes behavior and requires re-tuning every threshold.
  - frequency is (crossings / 2) per second. It tracks the fundamental only
    for near-monotone single-oscillator sounds.

DESIGN PRINCIPLES:
  - Stateless: one instance can serve any number of concurrent calls.
  - Never raises on degenerate audio; zero samples produce a zeroed vector.
"""

import logging
import math
from typing import List

import numpy as np

from .schema import FeatureVector, N_MFCC
from .utils import normalize_samples, pcm_to_samples, validate_sample_rate

logger = logging.getLogger(__name__)

# ─── CONSTANTS ────────────────────────────────────────────────────────────────
MAX_FFT_SIZE = 2048
MAX_SPECTRUM_SAMPLES = 4096
FLUX_WINDOW = 2048
FLUX_HOP = 512
N_BANDS = 40
LOG_EPSILON = 1e-10
TEMPO_FRAME_SECONDS = 0.02      # 20ms frames
ROLLOFF_FRACTION = 0.95

ZCR_SCALE = 5000.0
ZCR_MAX = 10.0
SPECTRAL_SCALE = 1000.0         # Hz -> kHz
SPECTRAL_MAX = 10.0
FLUX_MAX = 1.0
MAX_DURATION = 30.0


class FeatureExtractor:
    """
    Stateless feature extractor for 16-bit PCM animal vocalizations.

    Usage:
        extractor = FeatureExtractor()
        features = extractor.extract(pcm_bytes, sample_rate=44100)
        print(features.frequency, features.rms_energy)
    """

    def __init__(
        self,
        n_mfcc: int = N_MFCC,
        n_bands: int = N_BANDS,
        flux_window: int = FLUX_WINDOW,
        flux_hop: int = FLUX_HOP,
        tempo_frame_seconds: float = TEMPO_FRAME_SECONDS,
    ):
        self.n_mfcc = n_mfcc
        self.n_bands = n_bands
        self.flux_window = flux_window
        self.flux_hop = flux_hop
        self.tempo_frame_seconds = tempo_frame_seconds

    def extract(self, buffer: bytes, sample_rate: int) -> FeatureVector:
        """
        Extract the feature vector from a raw PCM buffer.

        Parameters:
            buffer      : bytes — signed 16-bit little-endian mono samples
            sample_rate : int   — samples per second, must be positive

        Returns:
            FeatureVector with every bounded field clamped

        Raises:
            InvalidAudioError: if sample_rate is not a positive integer
        """
        sample_rate = validate_sample_rate(sample_rate)
        samples = pcm_to_samples(buffer)
        n = len(samples)

        if n == 0:
            logger.warning("[FeatureExtractor] No samples in buffer; returning zeroed features.")
            return FeatureVector.zeros()

        y = normalize_samples(samples)
        magnitudes = np.abs(y)

        # ── 1. Amplitude / energy ────────────────────────────────────────────
        amplitude = float(np.max(magnitudes))
        rms_energy = float(np.sqrt(np.sum(y * y) / n))

        # ── 2. Zero crossings (0 counts as non-negative) ─────────────────────
        non_negative = samples >= 0
        crossings = int(np.count_nonzero(non_negative[1:] != non_negative[:-1]))
        zcr_rate = (crossings / n) * sample_rate
        frequency = (crossings / 2) * (sample_rate / n)

        # ── 3. Pseudo-spectrum ───────────────────────────────────────────────
        fft_size = self._fft_size(n)
        spectrum = self._pseudo_spectrum(magnitudes, fft_size)

        spectral_centroid = self._spectral_centroid(spectrum, fft_size, sample_rate)
        spectral_rolloff = self._spectral_rolloff(spectrum, fft_size, sample_rate)

        # ── 4. Frame-based features ──────────────────────────────────────────
        spectral_flux = self._spectral_flux(magnitudes)
        mfcc = self._approximate_mfcc(spectrum)
        tempo_dynamics = self._tempo_dynamics(y, sample_rate)

        features = FeatureVector(
            amplitude=min(amplitude, 1.0),
            rms_energy=min(rms_energy, 1.0),
            zcr_rate=min(zcr_rate / ZCR_SCALE, ZCR_MAX),
            frequency=frequency,
            pitch=frequency * 2,
            spectral_centroid=min(spectral_centroid / SPECTRAL_SCALE, SPECTRAL_MAX),
            spectral_rolloff=min(spectral_rolloff / SPECTRAL_SCALE, SPECTRAL_MAX),
            spectral_flux=min(spectral_flux, FLUX_MAX),
            mfcc=tuple(mfcc),
            tempo_dynamics=tempo_dynamics,
            duration=min(n / sample_rate, MAX_DURATION),
        )

        logger.debug(
            f"[FeatureExtractor] n={n} sr={sample_rate} | "
            f"freq={features.frequency:.1f}Hz amp={features.amplitude:.3f} "
            f"rms={features.rms_energy:.3f} zcr={features.zcr_rate:.3f} "
            f"flux={features.spectral_flux:.4f} tempo={features.tempo_dynamics:.4f}"
        )
        return features

    # ─── PSEUDO-SPECTRUM ─────────────────────────────────────────────────────

    @staticmethod
    def _fft_size(n: int) -> int:
        """Next power of two above min(n, 4096), capped at 2048."""
        if n <= 0:
            return 0
        return min(MAX_FFT_SIZE, 2 ** math.ceil(math.log2(min(n, MAX_SPECTRUM_SAMPLES))))

    @staticmethod
    def _pseudo_spectrum(magnitudes: np.ndarray, fft_size: int) -> np.ndarray:
        spectrum = np.zeros(fft_size, dtype=np.float64)
        width = min(fft_size, len(magnitudes))
        spectrum[:width] = magnitudes[:width]
        return spectrum

    @staticmethod
    def _bin_frequencies(fft_size: int, sample_rate: int) -> np.ndarray:
        return np.arange(fft_size, dtype=np.float64) / fft_size * sample_rate

    def _spectral_centroid(self, spectrum: np.ndarray, fft_size: int, sample_rate: int) -> float:
        if fft_size == 0:
            return 0.0
        total = float(np.sum(spectrum))
        if total <= 0:
            return 0.0
        weighted = float(np.sum(spectrum * self._bin_frequencies(fft_size, sample_rate)))
        return weighted / total

    @staticmethod
    def _spectral_rolloff(spectrum: np.ndarray, fft_size: int, sample_rate: int) -> float:
        """Frequency of the first bin where cumulative magnitude reaches 95%."""
        if fft_size == 0:
            return 0.0
        cumulative = np.cumsum(spectrum)
        threshold = cumulative[-1] * ROLLOFF_FRACTION
        index = int(np.argmax(cumulative >= threshold))
        return (index / fft_size) * sample_rate

    # ─── FRAME FEATURES ──────────────────────────────────────────────────────

    def _spectral_flux(self, magnitudes: np.ndarray) -> float:
        """Mean L2 distance between consecutive hop-spaced magnitude windows."""
        starts = range(0, len(magnitudes) - self.flux_window, self.flux_hop)
        previous = None
        total = 0.0
        count = 0
        for start in starts:
            window = magnitudes[start:start + self.flux_window]
            if previous is not None:
                total += math.sqrt(float(np.sum((window - previous) ** 2)))
                count += 1
            previous = window
        return total / count if count > 0 else 0.0

    def _approximate_mfcc(self, spectrum: np.ndarray) -> List[float]:
        """Log of the mean magnitude in equal-width bands; first n_mfcc bands."""
        band_width = len(spectrum) / self.n_bands
        coefficients = []
        for i in range(min(self.n_mfcc, self.n_bands)):
            start = int(math.floor(i * band_width))
            end = int(math.floor((i + 1) * band_width))
            mean = float(np.sum(spectrum[start:end])) / (end - start) if end > start else 0.0
            coefficients.append(math.log(mean + LOG_EPSILON))
        return coefficients

    def _tempo_dynamics(self, y: np.ndarray, sample_rate: int) -> float:
        """Population std of per-frame RMS over 20ms frames."""
        frame = max(1, int(math.floor(sample_rate * self.tempo_frame_seconds)))
        starts = range(0, len(y) - frame, frame)
        if len(starts) == 0:
            return 0.0
        frame_rms = np.array(
            [math.sqrt(float(np.sum(y[s:s + frame] ** 2)) / frame) for s in starts]
        )
        return float(np.std(frame_rms))
