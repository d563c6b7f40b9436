"""Amplitude modulation variants and their receivers.

Modulators impress a message onto a carrier over a full time grid:

- DSB-AM: (1 + k m) c
- DSB-SC: k m c
- SSB:    k (m cos(wt) - H(m) sin(wt)), H being the Hilbert transform
- VSB:    (0.5 + k m) c, a simplified model without sideband shaping
- QAM:    k m cos(wt) + k m cos(wt + phi), the same message on both rails

Receivers recover the message either coherently, with a software
phase-locked loop, or by envelope detection. Both smooth their output with
a single-pole low-pass filter.
"""

import math
from abc import ABC, abstractmethod

import numpy as np
import numpy.typing as npt
from pydantic import BaseModel, Field
from scipy import signal as scipy_signal

from am_simulator.config import AMVariant, DemodulationKind
from am_simulator.errors import InvalidSpec, InvalidVariant
from am_simulator.simulator.fft import hilbert_transform

# Loop gain of the coherent receiver's phase-locked loop.
PLL_LOOP_GAIN = 0.01


class Modulator(ABC):
  """Abstract base class for AM modulators."""

  @abstractmethod
  def modulate(
    self,
    message: npt.NDArray[np.float64],
    carrier: npt.NDArray[np.float64],
    time: npt.NDArray[np.float64],
  ) -> npt.NDArray[np.float64]:
    """Modulate `message` onto the carrier.

    Args:
      message: Message samples.
      carrier: Carrier samples, cos(2 pi fc t) on the same grid.
      time: Sample instants in seconds.

    Returns:
      Modulated samples, same length as the inputs.
    """

  @property
  @abstractmethod
  def variant(self) -> AMVariant:
    """The modulation scheme implemented."""

  @property
  def name(self) -> str:
    """Human-readable name for reporting."""
    return f"{self.variant.value}_Mod"


class _CarrierModulator(BaseModel, Modulator):
  carrier_freq_hz: float = Field(gt=0.0)
  modulation_index: float = Field(ge=0.0)

  model_config = {"frozen": True}

  def _phase(self, time: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    return 2 * np.pi * self.carrier_freq_hz * np.asarray(time, dtype=np.float64)


class DSBAMModulator(_CarrierModulator):
  """Double sideband with transmitted carrier."""

  def modulate(
    self,
    message: npt.NDArray[np.float64],
    carrier: npt.NDArray[np.float64],
    time: npt.NDArray[np.float64],
  ) -> npt.NDArray[np.float64]:
    return (1 + self.modulation_index * message) * carrier

  @property
  def variant(self) -> AMVariant:
    return AMVariant.DSB_AM


class DSBSCModulator(_CarrierModulator):
  """Double sideband, suppressed carrier."""

  def modulate(
    self,
    message: npt.NDArray[np.float64],
    carrier: npt.NDArray[np.float64],
    time: npt.NDArray[np.float64],
  ) -> npt.NDArray[np.float64]:
    return self.modulation_index * message * carrier

  @property
  def variant(self) -> AMVariant:
    return AMVariant.DSB_SC


class SSBModulator(_CarrierModulator):
  """Single sideband by the phasing (Hilbert) method, upper sideband."""

  def modulate(
    self,
    message: npt.NDArray[np.float64],
    carrier: npt.NDArray[np.float64],
    time: npt.NDArray[np.float64],
  ) -> npt.NDArray[np.float64]:
    phase = self._phase(time)
    shifted = hilbert_transform(message)
    return self.modulation_index * (
      message * np.cos(phase) - shifted * np.sin(phase)
    )

  @property
  def variant(self) -> AMVariant:
    return AMVariant.SSB


class VSBModulator(_CarrierModulator):
  """Vestigial sideband, modelled as AM with a half-amplitude carrier."""

  def modulate(
    self,
    message: npt.NDArray[np.float64],
    carrier: npt.NDArray[np.float64],
    time: npt.NDArray[np.float64],
  ) -> npt.NDArray[np.float64]:
    return (0.5 + self.modulation_index * message) * carrier

  @property
  def variant(self) -> AMVariant:
    return AMVariant.VSB


class QAMModulator(_CarrierModulator):
  """Quadrature AM carrying the same message on both rails.

  Attributes:
    phase_shift_deg: Phase of the second rail relative to the first.
  """

  phase_shift_deg: float = Field(0.0, ge=0.0, le=360.0)

  def modulate(
    self,
    message: npt.NDArray[np.float64],
    carrier: npt.NDArray[np.float64],
    time: npt.NDArray[np.float64],
  ) -> npt.NDArray[np.float64]:
    phase = self._phase(time)
    k = self.modulation_index
    in_phase = k * message * np.cos(phase)
    shifted = k * message * np.cos(phase + np.deg2rad(self.phase_shift_deg))
    return in_phase + shifted

  @property
  def variant(self) -> AMVariant:
    return AMVariant.QAM


_MODULATORS: dict[AMVariant, type[_CarrierModulator]] = {
  AMVariant.DSB_AM: DSBAMModulator,
  AMVariant.DSB_SC: DSBSCModulator,
  AMVariant.SSB: SSBModulator,
  AMVariant.VSB: VSBModulator,
  AMVariant.QAM: QAMModulator,
}


def make_modulator(
  variant: AMVariant | str,
  carrier_freq_hz: float,
  modulation_index: float,
  phase_shift_deg: float = 0.0,
) -> Modulator:
  """Build the modulator for `variant`.

  Args:
    variant: Modulation scheme, as an enum member or a case-insensitive tag.
    carrier_freq_hz: Carrier frequency in Hz.
    modulation_index: Modulation index k.
    phase_shift_deg: Second-rail phase, used by QAM only.

  Raises:
    InvalidVariant: If `variant` is not a known scheme.
  """
  try:
    variant = AMVariant(variant)
  except ValueError as err:
    msg = f"Unknown modulation variant: {variant!r}"
    raise InvalidVariant(msg) from err

  modulator_cls = _MODULATORS[variant]
  if modulator_cls is QAMModulator:
    return QAMModulator(
      carrier_freq_hz=carrier_freq_hz,
      modulation_index=modulation_index,
      phase_shift_deg=phase_shift_deg,
    )
  return modulator_cls(
    carrier_freq_hz=carrier_freq_hz, modulation_index=modulation_index
  )


def modulate(
  variant: AMVariant | str,
  message: npt.ArrayLike,
  carrier: npt.ArrayLike,
  time: npt.ArrayLike,
  carrier_freq_hz: float,
  modulation_index: float,
  phase_shift_deg: float = 0.0,
) -> npt.NDArray[np.float64]:
  """Modulate `message` with the scheme named by `variant`."""
  modulator = make_modulator(
    variant, carrier_freq_hz, modulation_index, phase_shift_deg
  )
  return modulator.modulate(
    np.asarray(message, dtype=np.float64),
    np.asarray(carrier, dtype=np.float64),
    np.asarray(time, dtype=np.float64),
  )


def exponential_lowpass(
  signal: npt.ArrayLike, alpha: float
) -> npt.NDArray[np.float64]:
  """Single-pole IIR smoother.

  y[0] = x[0], then y[i] = alpha * x[i] + (1 - alpha) * y[i - 1].

  Args:
    signal: Input samples.
    alpha: Smoothing factor in (0, 1]; 1 passes the input through.

  Returns:
    Filtered samples, same length as the input.
  """
  x = np.asarray(signal, dtype=np.float64)
  if len(x) == 0:
    return x.copy()
  # Seeding the filter state with (1 - alpha) x[0] makes y[0] == x[0].
  filtered, _ = scipy_signal.lfilter(
    [alpha], [1.0, alpha - 1.0], x, zi=[(1.0 - alpha) * x[0]]
  )
  return filtered


class Demodulator(ABC):
  """Abstract base class for AM receivers."""

  @abstractmethod
  def demodulate(
    self, modulated: npt.NDArray[np.float64], time: npt.NDArray[np.float64]
  ) -> npt.NDArray[np.float64]:
    """Recover the message from `modulated`.

    Args:
      modulated: Received samples.
      time: Sample instants in seconds.

    Returns:
      Smoothed baseband estimate, same length as the input.
    """

  @property
  @abstractmethod
  def kind(self) -> DemodulationKind:
    """The detection method implemented."""


class CoherentDemodulator(BaseModel, Demodulator):
  """Synchronous detector with a software phase-locked loop.

  The local oscillator phase starts at zero and is nudged by
  ``loop_gain * error`` after every sample, so the loop is inherently
  sequential.
  """

  carrier_freq_hz: float = Field(gt=0.0)
  filter_alpha: float = Field(gt=0.0, le=1.0)
  loop_gain: float = PLL_LOOP_GAIN

  model_config = {"frozen": True}

  def mix(
    self, modulated: npt.NDArray[np.float64], time: npt.NDArray[np.float64]
  ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """Run the loop without filtering.

    Returns:
      Tuple of (mixer output, oscillator phase used at each sample).
    """
    modulated = np.asarray(modulated, dtype=np.float64)
    omega_t = 2 * np.pi * self.carrier_freq_hz * np.asarray(time, dtype=np.float64)
    mixed = np.empty_like(modulated)
    phases = np.empty_like(modulated)

    phase = 0.0
    for i, (sample, wt) in enumerate(zip(modulated, omega_t, strict=True)):
      phases[i] = phase
      product = float(sample) * math.cos(wt + phase)
      mixed[i] = product
      phase_error = product * math.sin(wt + phase)
      phase += self.loop_gain * phase_error

    return mixed, phases

  def demodulate(
    self, modulated: npt.NDArray[np.float64], time: npt.NDArray[np.float64]
  ) -> npt.NDArray[np.float64]:
    mixed, _ = self.mix(modulated, time)
    return exponential_lowpass(mixed, self.filter_alpha)

  @property
  def kind(self) -> DemodulationKind:
    return DemodulationKind.COHERENT


class EnvelopeDemodulator(BaseModel, Demodulator):
  """Non-coherent envelope detector: full-wave rectifier plus smoother."""

  filter_alpha: float = Field(gt=0.0, le=1.0)

  model_config = {"frozen": True}

  def demodulate(
    self, modulated: npt.NDArray[np.float64], time: npt.NDArray[np.float64]
  ) -> npt.NDArray[np.float64]:
    return exponential_lowpass(np.abs(modulated), self.filter_alpha)

  @property
  def kind(self) -> DemodulationKind:
    return DemodulationKind.NON_COHERENT


def make_demodulator(
  kind: DemodulationKind | str, carrier_freq_hz: float, filter_alpha: float
) -> Demodulator | None:
  """Build the receiver for `kind`; None when no demodulation is requested.

  Raises:
    InvalidSpec: If `kind` is not a known demodulation type.
  """
  try:
    kind = DemodulationKind(kind)
  except ValueError as err:
    msg = f"Unknown demodulation type: {kind!r}"
    raise InvalidSpec(msg) from err

  match kind:
    case DemodulationKind.COHERENT:
      return CoherentDemodulator(
        carrier_freq_hz=carrier_freq_hz, filter_alpha=filter_alpha
      )
    case DemodulationKind.NON_COHERENT:
      return EnvelopeDemodulator(filter_alpha=filter_alpha)
    case _:
      return None


def demodulate(
  kind: DemodulationKind | str,
  modulated: npt.ArrayLike,
  time: npt.ArrayLike,
  carrier_freq_hz: float,
  filter_alpha: float,
) -> npt.NDArray[np.float64]:
  """Demodulate with the receiver named by `kind`.

  `DemodulationKind.NONE` yields an all-zero array of matching length.
  """
  modulated = np.asarray(modulated, dtype=np.float64)
  demodulator = make_demodulator(kind, carrier_freq_hz, filter_alpha)
  if demodulator is None:
    return np.zeros_like(modulated)
  return demodulator.demodulate(modulated, np.asarray(time, dtype=np.float64))
