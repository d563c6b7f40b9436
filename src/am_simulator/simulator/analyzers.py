"""Spectral metrics of a modulated signal.

SNR and THD both look at the first 1024 samples of the modulated signal
through a symmetric Hamming window and run their own FFT on that slice,
independently of the full-length spectrum in `SignalResult`.
"""

import logging
from collections.abc import Iterator

import numpy as np
import numpy.typing as npt
from pydantic import BaseModel
from scipy import signal as scipy_signal

from am_simulator.errors import InsufficientSamples
from am_simulator.simulator.fft import compute_spectrum
from am_simulator.simulator.pipeline import SignalResult

logger = logging.getLogger(__name__)

ANALYSIS_WINDOW_SIZE = 1024

# Carrier search range and assumed sideband half-width for SNR.
SNR_SEARCH_RANGE_HZ = (50.0, 5000.0)
SIDEBAND_WIDTH_HZ = 50.0
DEFAULT_CARRIER_HZ = 1000.0

# Fundamental search range and highest harmonic for THD.
THD_SEARCH_RANGE_HZ = (10.0, 5000.0)
MAX_HARMONIC = 10


def hamming_window(size: int) -> npt.NDArray[np.float64]:
  """Symmetric Hamming window, 0.54 - 0.46 cos(2 pi i / (size - 1))."""
  return scipy_signal.windows.hamming(size, sym=True)


def windowed_spectrum(
  modulated: npt.ArrayLike,
  sample_rate_hz: float,
  start: int = 0,
  window_size: int = ANALYSIS_WINDOW_SIZE,
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
  """One-sided spectrum of a Hamming-windowed slice.

  Args:
    modulated: Signal samples.
    sample_rate_hz: Sample rate in Hz.
    start: Index of the first sample in the slice.
    window_size: Slice length.

  Returns:
    Tuple of (frequencies, magnitudes), each ``window_size // 2`` long.

  Raises:
    InsufficientSamples: If the slice runs past the end of the signal.
  """
  x = np.asarray(modulated, dtype=np.float64)
  if start < 0 or start + window_size > len(x):
    raise InsufficientSamples(required=start + window_size, actual=len(x))
  windowed = x[start : start + window_size] * hamming_window(window_size)
  return compute_spectrum(windowed, 1.0 / sample_rate_hz)


def _dominant_bin(
  frequencies: npt.NDArray[np.float64],
  magnitudes: npt.NDArray[np.float64],
  search_range: tuple[float, float],
) -> int | None:
  low, high = search_range
  candidates = (frequencies >= low) & (frequencies <= high) & (magnitudes > 0)
  if not np.any(candidates):
    return None
  return int(np.argmax(np.where(candidates, magnitudes, -np.inf)))


class SignalToNoiseRatio:
  """Spectral SNR of a modulated signal.

  The strongest bin in 50-5000 Hz is taken as the carrier. Bins within
  50 Hz of it, or within one bin width of carrier +/- 50 Hz, form the signal
  band; every other bin counts as noise.

  Attributes:
    snr_db: 10 log10(signal power / noise power). +inf when the noise power
      is zero, -inf when the signal power is zero.
    carrier_freq_hz: Estimated carrier frequency.
    frequencies: Bin frequencies of the analysis spectrum.
    magnitudes: Bin magnitudes of the analysis spectrum.
    signal_magnitudes: Magnitudes inside the signal band, zero elsewhere.
    noise_magnitudes: Magnitudes outside the signal band, zero elsewhere.
    signal_power: Sum of squared signal-band magnitudes.
    noise_power: Sum of squared noise magnitudes.
  """

  def __init__(self, modulated: npt.ArrayLike, sample_rate_hz: float) -> None:
    """Measure SNR.

    Args:
      modulated: Modulated signal samples.
      sample_rate_hz: Sample rate in Hz.

    Raises:
      InsufficientSamples: If fewer than 1024 samples are supplied.
    """
    self.frequencies, self.magnitudes = windowed_spectrum(modulated, sample_rate_hz)

    peak = _dominant_bin(self.frequencies, self.magnitudes, SNR_SEARCH_RANGE_HZ)
    self.carrier_freq_hz = (
      float(self.frequencies[peak]) if peak is not None else DEFAULT_CARRIER_HZ
    )

    f = self.frequencies
    fc = self.carrier_freq_hz
    resolution = f[1] - f[0]
    in_band = (
      (np.abs(f - fc) < SIDEBAND_WIDTH_HZ)
      | ((f > fc) & (np.abs(f - (fc + SIDEBAND_WIDTH_HZ)) < resolution))
      | ((f < fc) & (np.abs(f - (fc - SIDEBAND_WIDTH_HZ)) < resolution))
    )

    self.signal_magnitudes = np.where(in_band, self.magnitudes, 0.0)
    self.noise_magnitudes = np.where(in_band, 0.0, self.magnitudes)
    self.signal_power = float(np.sum(self.signal_magnitudes**2))
    self.noise_power = float(np.sum(self.noise_magnitudes**2))

    if self.noise_power == 0:
      self.snr_db = float("inf")
    elif self.signal_power == 0:
      self.snr_db = float("-inf")
    else:
      self.snr_db = float(10 * np.log10(self.signal_power / self.noise_power))

    logger.info(
      f"SNR computed: {self.snr_db:.2f} dB for estimated carrier "
      f"frequency {self.carrier_freq_hz:.1f} Hz"
    )

  @classmethod
  def from_result(cls, result: SignalResult) -> "SignalToNoiseRatio":
    """Measure SNR of a pipeline result's modulated signal."""
    return cls(result.modulated, result.sample_rate_hz)


class TotalHarmonicDistortion:
  """Total harmonic distortion of a modulated signal.

  The strongest bin in 10-5000 Hz is the fundamental; harmonics 2 through 10
  are read from the bin nearest each multiple, provided it lies within one
  bin width and below Nyquist.

  Attributes:
    thd_percent: 100 sqrt(sum of squared harmonic magnitudes) / fundamental
      magnitude, or None when no fundamental was found.
    fundamental_found: Whether a fundamental peak exists.
    fundamental_freq_hz: Fundamental frequency, or None.
    fundamental_magnitude: Magnitude of the fundamental bin (0 if not found).
    harmonic_magnitudes: Magnitudes of harmonics 2..10 (zero when absent).
    frequencies: Bin frequencies of the analysis spectrum.
    magnitudes: Bin magnitudes of the analysis spectrum.
  """

  def __init__(self, modulated: npt.ArrayLike, sample_rate_hz: float) -> None:
    """Measure THD.

    Args:
      modulated: Modulated signal samples.
      sample_rate_hz: Sample rate in Hz.

    Raises:
      InsufficientSamples: If fewer than 1024 samples are supplied.
    """
    self.frequencies, self.magnitudes = windowed_spectrum(modulated, sample_rate_hz)
    self.harmonic_magnitudes = np.zeros(MAX_HARMONIC - 1, dtype=np.float64)
    self.fundamental_freq_hz: float | None = None
    self.fundamental_magnitude = 0.0
    self.thd_percent: float | None = None

    peak = _dominant_bin(self.frequencies, self.magnitudes, THD_SEARCH_RANGE_HZ)
    if peak is None:
      logger.warning("Could not identify fundamental frequency for THD.")
      return

    self.fundamental_freq_hz = float(self.frequencies[peak])
    self.fundamental_magnitude = float(self.magnitudes[peak])

    resolution = self.frequencies[1] - self.frequencies[0]
    for harmonic in range(2, MAX_HARMONIC + 1):
      target = harmonic * self.fundamental_freq_hz
      index = round(target / resolution)
      if index >= len(self.frequencies):
        break
      if abs(self.frequencies[index] - target) < resolution:
        self.harmonic_magnitudes[harmonic - 2] = self.magnitudes[index]

    harmonic_power = float(np.sum(self.harmonic_magnitudes**2))
    self.thd_percent = 100 * float(
      np.sqrt(harmonic_power / self.fundamental_magnitude**2)
    )

    logger.info(
      f"THD computed: {self.thd_percent:.4f}% for fundamental frequency "
      f"{self.fundamental_freq_hz:.1f} Hz"
    )

  @property
  def fundamental_found(self) -> bool:
    return self.thd_percent is not None

  @classmethod
  def from_result(cls, result: SignalResult) -> "TotalHarmonicDistortion":
    """Measure THD of a pipeline result's modulated signal."""
    return cls(result.modulated, result.sample_rate_hz)


class SpectrumFrame(BaseModel):
  """Spectrum of one analysis window.

  Attributes:
    start: Index of the first sample in the window.
    start_time_s: Time of the first sample in seconds.
    frequencies: Bin frequencies in Hz.
    magnitudes: Bin magnitudes.
  """

  start: int
  start_time_s: float
  frequencies: np.ndarray
  magnitudes: np.ndarray

  model_config = {"frozen": True, "arbitrary_types_allowed": True}


def sliding_spectrum(
  modulated: npt.ArrayLike,
  sample_rate_hz: float,
  window_size: int = ANALYSIS_WINDOW_SIZE,
  hop: int | None = None,
) -> Iterator[SpectrumFrame]:
  """Spectra of successive overlapping Hamming-windowed slices.

  Args:
    modulated: Signal samples.
    sample_rate_hz: Sample rate in Hz.
    window_size: Samples per window.
    hop: Advance between windows; a quarter window by default.

  Yields:
    One frame per window that fits entirely inside the signal.

  Raises:
    InsufficientSamples: If the signal is shorter than one window.
    ValueError: If `hop` is not positive.
  """
  x = np.asarray(modulated, dtype=np.float64)
  hop = window_size // 4 if hop is None else hop
  if hop <= 0:
    msg = f"hop must be positive, got {hop}"
    raise ValueError(msg)
  if len(x) < window_size:
    raise InsufficientSamples(required=window_size, actual=len(x))

  for start in range(0, len(x) - window_size + 1, hop):
    frequencies, magnitudes = windowed_spectrum(x, sample_rate_hz, start, window_size)
    yield SpectrumFrame(
      start=start,
      start_time_s=start / sample_rate_hz,
      frequencies=frequencies,
      magnitudes=magnitudes,
    )
