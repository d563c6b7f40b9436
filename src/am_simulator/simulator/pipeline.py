"""Signal pipeline: synthesize -> noise -> modulate -> demodulate -> spectrum.

`SignalPipeline` is the entry point for callers. It turns one validated
`SignalSpec` into one immutable `SignalResult`; nothing intermediate is
exposed and nothing is cached between runs.
"""

import logging
from collections.abc import Iterator

import numpy as np
import numpy.typing as npt
from pydantic import BaseModel

from am_simulator.config import DemodulationKind, SignalSpec, validate_spec
from am_simulator.simulator.fft import compute_spectrum
from am_simulator.simulator.modulation import demodulate, modulate
from am_simulator.simulator.sources import NoiseGenerator, generate_message

logger = logging.getLogger(__name__)


def _frozen(values: npt.ArrayLike) -> npt.NDArray[np.float64]:
  array = np.array(values, dtype=np.float64)
  array.flags.writeable = False
  return array


class SignalResult(BaseModel):
  """Sample arrays produced by one pipeline run.

  The five time-domain arrays share indexing: element ``i`` of each belongs
  to ``time[i]``. Arrays are read-only.

  Attributes:
    spec: Configuration that produced this result.
    time: Sample instants in seconds.
    message: Message plus noise.
    carrier: Unmodulated carrier, cos(2 pi fc t).
    modulated: Modulated signal.
    demodulated: Receiver output; all zeros when `has_demodulation` is False.
    frequency: One-sided spectrum bin frequencies in Hz.
    spectrum: One-sided magnitude spectrum of `modulated`.
    has_demodulation: Whether a receiver was run.
  """

  spec: SignalSpec
  time: np.ndarray
  message: np.ndarray
  carrier: np.ndarray
  modulated: np.ndarray
  demodulated: np.ndarray
  frequency: np.ndarray
  spectrum: np.ndarray
  has_demodulation: bool

  model_config = {"frozen": True, "arbitrary_types_allowed": True}

  @property
  def samples(self) -> int:
    """Length of the time-domain arrays."""
    return len(self.time)

  @property
  def dt(self) -> float:
    """Sample spacing in seconds."""
    return self.spec.dt

  @property
  def sample_rate_hz(self) -> float:
    """Sample rate in Hz."""
    return self.spec.sample_rate_hz

  def rows(self) -> Iterator[tuple[float, float, float, float, float]]:
    """Yield (time, message, carrier, modulated, demodulated) per sample."""
    for row in zip(
      self.time,
      self.message,
      self.carrier,
      self.modulated,
      self.demodulated,
      strict=True,
    ):
      yield tuple(float(value) for value in row)


class SignalPipeline:
  """Runs the complete AM simulation chain for a `SignalSpec`."""

  def __init__(self, rng: np.random.Generator | None = None) -> None:
    """Initialize the pipeline.

    Args:
      rng: Random generator for noise. If None, every build creates its own
        generator from ``spec.seed``.
    """
    self._rng = rng

  def build(self, spec: SignalSpec) -> SignalResult:
    """Simulate `spec`.

    Args:
      spec: Signal configuration.

    Returns:
      The complete set of sample arrays.

    Raises:
      InvalidSpec: If any field of `spec` is out of range. Raised before any
        computation starts.
    """
    spec = validate_spec(spec)
    n = spec.samples
    dt = spec.dt

    time = np.arange(n, dtype=np.float64) * dt
    carrier = np.cos(2 * np.pi * spec.carrier_freq_hz * time)

    noise = NoiseGenerator(seed=spec.seed, rng=self._rng)
    message = generate_message(
      time, spec.tones, spec.waveform, spec.pulse_duty_cycle
    ) + noise.samples(spec.noise, spec.noise_amplitude, n)

    modulated = modulate(
      spec.variant,
      message,
      carrier,
      time,
      spec.carrier_freq_hz,
      spec.modulation_index,
      spec.phase_shift_deg,
    )

    demodulated = demodulate(
      spec.demodulation, modulated, time, spec.carrier_freq_hz, spec.filter_alpha
    )

    frequency, spectrum = compute_spectrum(modulated, dt)

    logger.debug(
      f"Built {spec.variant.value} signal: {n} samples over {spec.duration_s}s, "
      f"fc={spec.carrier_freq_hz}Hz, {len(spec.tones)} tone(s), "
      f"noise={spec.noise.value}, demod={spec.demodulation.value}"
    )

    return SignalResult(
      spec=spec,
      time=_frozen(time),
      message=_frozen(message),
      carrier=_frozen(carrier),
      modulated=_frozen(modulated),
      demodulated=_frozen(demodulated),
      frequency=_frozen(frequency),
      spectrum=_frozen(spectrum),
      has_demodulation=spec.demodulation != DemodulationKind.NONE,
    )


def build(spec: SignalSpec, rng: np.random.Generator | None = None) -> SignalResult:
  """Simulate `spec` with a fresh pipeline."""
  return SignalPipeline(rng=rng).build(spec)
