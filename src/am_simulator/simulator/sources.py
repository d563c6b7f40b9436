"""Message and noise sources.

The message is a raw superposition of tones, each rendered in one of the
`Waveform` shapes. Noise is drawn from a generator owned by the caller so
runs can be reproduced from a seed.
"""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt

from am_simulator.config import NoiseKind, Tone, Waveform

# Pink noise is approximated by a weighted average of this many uniform draws.
PINK_NOISE_TERMS = 5


def _tone_shape(
  t: npt.ArrayLike, tone: Tone, shape: Waveform, duty_cycle: float
) -> npt.NDArray[np.float64]:
  freq = tone.frequency_hz
  phase = 2 * np.pi * freq * np.asarray(t, dtype=np.float64)

  match shape:
    case Waveform.SINE:
      wave = np.cos(phase)
    case Waveform.SQUARE:
      wave = np.sign(np.cos(phase))
    case Waveform.TRIANGLE:
      wave = (2 / np.pi) * np.arcsin(np.cos(phase))
    case Waveform.SAWTOOTH:
      cycles = freq * np.asarray(t, dtype=np.float64)
      wave = 2 * (cycles - np.floor(cycles + 0.5))
    case Waveform.PULSE:
      high = np.mod(phase, 2 * np.pi) < 2 * np.pi * duty_cycle / 100
      wave = np.where(high, 1.0, -1.0)
    case _:
      msg = f"Unsupported waveform: {shape!r}"
      raise ValueError(msg)

  return tone.amplitude * wave


def generate_message(
  time: npt.ArrayLike,
  tones: Sequence[Tone],
  shape: Waveform,
  duty_cycle: float = 50.0,
) -> npt.NDArray[np.float64]:
  """Synthesize the multi-tone message over a time grid.

  Args:
    time: Sample instants in seconds.
    tones: Tones to superpose. Contributions are summed without
      normalization by tone count.
    shape: Waveform applied to every tone.
    duty_cycle: Percentage of each period spent high, Pulse shape only.

  Returns:
    Message amplitude at each instant.
  """
  t = np.asarray(time, dtype=np.float64)
  message = np.zeros_like(t)
  for tone in tones:
    message = message + _tone_shape(t, tone, shape, duty_cycle)
  return message


def generate_message_sample(
  t: float,
  tones: Sequence[Tone],
  shape: Waveform,
  duty_cycle: float = 50.0,
) -> float:
  """Message amplitude at a single instant `t` (seconds)."""
  return float(generate_message(t, tones, shape, duty_cycle))


class NoiseGenerator:
  """Draws additive noise from a private random stream.

  Each pipeline run owns one generator, so concurrent runs never share
  state and a fixed seed reproduces the same noise.
  """

  def __init__(
    self, seed: int | None = None, rng: np.random.Generator | None = None
  ) -> None:
    """Initialize the noise generator.

    Args:
      seed: Seed for a new `numpy.random.Generator`. Ignored if `rng` is set.
      rng: Existing generator to draw from.
    """
    self._rng = rng if rng is not None else np.random.default_rng(seed)

  def samples(
    self, kind: NoiseKind, amplitude: float, n: int
  ) -> npt.NDArray[np.float64]:
    """Draw `n` noise samples.

    Args:
      kind: Noise distribution.
      amplitude: Noise scale (uniform bound or Gaussian standard deviation).
      n: Number of samples.

    Returns:
      Noise samples. `NoiseKind.NONE` returns zeros without advancing the
      random stream.
    """
    match kind:
      case NoiseKind.NONE:
        return np.zeros(n, dtype=np.float64)
      case NoiseKind.WHITE:
        return amplitude * self._rng.uniform(-1.0, 1.0, n)
      case NoiseKind.GAUSSIAN:
        return amplitude * self._rng.standard_normal(n)
      case NoiseKind.PINK:
        weights = 1.0 / np.arange(1, PINK_NOISE_TERMS + 1)
        draws = self._rng.uniform(-1.0, 1.0, (n, PINK_NOISE_TERMS))
        return amplitude * (draws @ weights) / PINK_NOISE_TERMS
      case _:
        msg = f"Unsupported noise kind: {kind!r}"
        raise ValueError(msg)

  def sample(self, kind: NoiseKind, amplitude: float) -> float:
    """Draw a single noise sample."""
    return float(self.samples(kind, amplitude, 1)[0])
