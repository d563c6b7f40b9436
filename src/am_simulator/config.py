"""Signal configuration for the AM simulator.

The `SignalSpec` model is the single input to the signal pipeline. It is
frozen and fully validated on construction, so every downstream stage can
assume in-range values.
"""

from collections.abc import Sequence
from enum import StrEnum
from typing import Any

from pydantic import (
  BaseModel,
  Field,
  ValidationError,
  ValidationInfo,
  field_validator,
)

from am_simulator.errors import InvalidSpec, InvalidVariant


class _Tag(StrEnum):
  """String enum whose lookup ignores case (``"dsb-am"`` -> ``DSB_AM``)."""

  @classmethod
  def _missing_(cls, value: object) -> "_Tag | None":
    if isinstance(value, str):
      folded = value.strip().lower()
      for member in cls:
        if member.value.lower() == folded:
          return member
    return None


class AMVariant(_Tag):
  """Amplitude modulation schemes."""

  DSB_AM = "DSB-AM"
  DSB_SC = "DSB-SC"
  SSB = "SSB"
  VSB = "VSB"
  QAM = "QAM"


class Waveform(_Tag):
  """Message waveform shapes."""

  SINE = "Sine"
  SQUARE = "Square"
  TRIANGLE = "Triangle"
  SAWTOOTH = "Sawtooth"
  PULSE = "Pulse"


class NoiseKind(_Tag):
  """Additive noise distributions."""

  NONE = "None"
  WHITE = "White"
  GAUSSIAN = "Gaussian"
  PINK = "Pink"


class DemodulationKind(_Tag):
  """Receiver types."""

  NONE = "None"
  COHERENT = "Coherent"
  NON_COHERENT = "Non-Coherent"


def _spec_error(err: ValidationError) -> InvalidSpec | InvalidVariant:
  # An unknown modulation tag is reported separately from range errors.
  if any(error["loc"][:1] == ("variant",) for error in err.errors()):
    return InvalidVariant(str(err))
  return InvalidSpec(str(err))


class Tone(BaseModel):
  """A single message tone.

  Attributes:
    frequency_hz: Tone frequency in Hz.
    amplitude: Peak amplitude of the tone.
  """

  frequency_hz: float = Field(gt=0.0)
  amplitude: float = Field(gt=0.0)

  model_config = {"frozen": True}


class SignalSpec(BaseModel):
  """Complete description of one simulation run.

  Attributes:
    variant: Modulation scheme.
    carrier_freq_hz: Carrier frequency in Hz.
    tones: Message tones, superposed without normalization.
    modulation_index: Modulation index k.
    phase_shift_deg: Phase of the second QAM rail in degrees.
    waveform: Shape applied to every tone.
    pulse_duty_cycle: Duty cycle in percent, used by the Pulse shape only.
    noise: Noise distribution added to the message.
    noise_amplitude: Noise scale.
    demodulation: Receiver applied to the modulated signal.
    samples: Number of samples in every full-length output array.
    duration_s: Simulated time span in seconds.
    filter_alpha: Smoothing factor of the receiver low-pass filter.
    seed: Seed for the noise generator; None draws fresh entropy.

  Raises:
    InvalidSpec: On construction, if any field is out of range or a
      waveform, noise or demodulation tag is unknown.
    InvalidVariant: On construction, if the modulation variant is unknown.
  """

  variant: AMVariant = AMVariant.DSB_AM
  carrier_freq_hz: float = Field(1000.0, ge=50.0, le=5000.0)
  tones: tuple[Tone, ...] = Field(..., min_length=1)
  modulation_index: float = Field(0.5, ge=0.0, le=2.0)
  phase_shift_deg: float = Field(0.0, ge=0.0, le=360.0)
  waveform: Waveform = Waveform.SINE
  pulse_duty_cycle: float = Field(50.0, ge=0.0, le=100.0)
  noise: NoiseKind = NoiseKind.NONE
  noise_amplitude: float = Field(0.0, ge=0.0, le=1.0)
  demodulation: DemodulationKind = DemodulationKind.NONE
  samples: int = Field(4096, ge=1024, le=16384)
  duration_s: float = Field(0.05, ge=0.01, le=1.0)
  filter_alpha: float = Field(0.1, ge=0.01, le=1.0)
  seed: int | None = None

  model_config = {"frozen": True}

  def __init__(self, **data) -> None:
    try:
      super().__init__(**data)
    except ValidationError as err:
      raise _spec_error(err) from err

  @field_validator("variant", "waveform", "noise", "demodulation", mode="before")
  @classmethod
  def _parse_tag(cls, value: Any, info: ValidationInfo) -> Any:
    # Route strings through the enum so lookup is case-insensitive.
    if isinstance(value, str):
      enum_type = cls.model_fields[info.field_name].annotation
      return enum_type(value)
    return value

  @field_validator("tones", mode="before")
  @classmethod
  def _parse_tones(cls, value: Any) -> Any:
    if isinstance(value, Sequence) and not isinstance(value, str):
      return tuple(
        {"frequency_hz": tone[0], "amplitude": tone[1]}
        if isinstance(tone, Sequence) and not isinstance(tone, str)
        else tone
        for tone in value
      )
    return value

  @property
  def dt(self) -> float:
    """Sample spacing in seconds."""
    return self.duration_s / self.samples

  @property
  def sample_rate_hz(self) -> float:
    """Sample rate in Hz."""
    return self.samples / self.duration_s

  @classmethod
  def create(cls, **data: Any) -> "SignalSpec":
    """Build a spec from keyword fields; same as calling the class."""
    return cls(**data)

  @classmethod
  def from_lists(
    cls,
    message_freqs: Sequence[float],
    amplitudes: Sequence[float],
    **data: Any,
  ) -> "SignalSpec":
    """Build a spec from parallel frequency and amplitude lists.

    Args:
      message_freqs: Tone frequencies in Hz.
      amplitudes: Tone amplitudes, one per frequency.
      **data: Remaining `SignalSpec` fields.

    Raises:
      InvalidSpec: If the lists are empty, differ in length, or any field is
        out of range.
      InvalidVariant: If the modulation variant is unknown.
    """
    if len(message_freqs) == 0 or len(message_freqs) != len(amplitudes):
      msg = (
        "Message frequencies and amplitudes must be non-empty and match in "
        f"length (got {len(message_freqs)} and {len(amplitudes)})"
      )
      raise InvalidSpec(msg)
    return cls.create(tones=tuple(zip(message_freqs, amplitudes, strict=True)), **data)


def validate_spec(spec: SignalSpec) -> SignalSpec:
  """Re-check every field of `spec`.

  Specs built with `model_construct` or mutated through `object.__setattr__`
  skip validation; the pipeline calls this before simulating.

  Raises:
    InvalidSpec: If `spec` is not a SignalSpec or any field is out of range.
  """
  if not isinstance(spec, SignalSpec):
    msg = f"Expected a SignalSpec, got {type(spec).__name__}"
    raise InvalidSpec(msg)
  try:
    return SignalSpec.model_validate(spec.model_dump())
  except ValidationError as err:
    raise _spec_error(err) from err
