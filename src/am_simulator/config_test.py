"""Tests for the configuration module."""

import pytest
from pydantic import ValidationError

from am_simulator.config import (
  AMVariant,
  DemodulationKind,
  NoiseKind,
  SignalSpec,
  Tone,
  Waveform,
  validate_spec,
)
from am_simulator.errors import InvalidSpec, InvalidVariant


def test_config_defaults() -> None:
  """Test that default values are set correctly."""
  spec = SignalSpec(tones=[(100.0, 1.0)])
  assert spec.variant == AMVariant.DSB_AM
  assert spec.carrier_freq_hz == 1000.0
  assert spec.tones == (Tone(frequency_hz=100.0, amplitude=1.0),)
  assert spec.waveform == Waveform.SINE
  assert spec.noise == NoiseKind.NONE
  assert spec.demodulation == DemodulationKind.NONE
  expected_samples = 4096
  assert spec.samples == expected_samples
  assert spec.seed is None


def test_config_missing_tones() -> None:
  """Test that missing required fields raises an error."""
  with pytest.raises(InvalidSpec):
    SignalSpec()  # type: ignore[call-arg]


@pytest.mark.parametrize(
  ("field", "value"),
  [
    ("carrier_freq_hz", 49.9),
    ("carrier_freq_hz", 5000.1),
    ("modulation_index", -0.1),
    ("modulation_index", 2.1),
    ("phase_shift_deg", 361.0),
    ("pulse_duty_cycle", 101.0),
    ("noise_amplitude", 1.5),
    ("samples", 1023),
    ("samples", 16385),
    ("duration_s", 0.001),
    ("duration_s", 1.5),
    ("filter_alpha", 0.0),
    ("filter_alpha", 1.01),
  ],
)
def test_config_validation(field, value) -> None:
  """Test that every documented range is enforced on direct construction."""
  with pytest.raises(InvalidSpec) as exc_info:
    SignalSpec(tones=[(100.0, 1.0)], **{field: value})
  assert isinstance(exc_info.value.__cause__, ValidationError)
  with pytest.raises(InvalidSpec):
    SignalSpec.create(tones=[(100.0, 1.0)], **{field: value})


@pytest.mark.parametrize("tone", [(0.0, 1.0), (100.0, 0.0), (-5.0, 1.0)])
def test_non_positive_tones_rejected(tone) -> None:
  """Test that tone frequencies and amplitudes must be positive."""
  with pytest.raises(InvalidSpec):
    SignalSpec.create(tones=[tone])


def test_empty_tones_rejected() -> None:
  """Test that at least one tone is required."""
  with pytest.raises(InvalidSpec):
    SignalSpec.create(tones=[])


def test_tags_are_case_insensitive() -> None:
  """Test that string tags are parsed regardless of case."""
  spec = SignalSpec(
    tones=[(100.0, 1.0)],
    variant="dsb-sc",
    waveform="SQUARE",
    noise="gaussian",
    demodulation="non-coherent",
  )
  assert spec.variant is AMVariant.DSB_SC
  assert spec.waveform is Waveform.SQUARE
  assert spec.noise is NoiseKind.GAUSSIAN
  assert spec.demodulation is DemodulationKind.NON_COHERENT


def test_unknown_variant_is_invalid_variant() -> None:
  """Test that an unknown modulation tag raises InvalidVariant."""
  with pytest.raises(InvalidVariant, match="variant"):
    SignalSpec(tones=[(100.0, 1.0)], variant="FM")
  with pytest.raises(InvalidVariant):
    SignalSpec.create(tones=[(100.0, 1.0)], variant="FM")


@pytest.mark.parametrize(
  ("field", "value"),
  [("waveform", "Chirp"), ("noise", "Brown"), ("demodulation", "Synchronous")],
)
def test_unknown_tag_is_invalid_spec(field, value) -> None:
  """Test that other unknown tags are range errors, not variant errors."""
  with pytest.raises(InvalidSpec):
    SignalSpec(tones=[(100.0, 1.0)], **{field: value})


class TestFromLists:
  """Tests for building specs from parallel frequency/amplitude lists."""

  def test_pairs_lists(self) -> None:
    """Test that the lists are zipped into tones in order."""
    spec = SignalSpec.from_lists([100.0, 250.0], [1.0, 0.5], carrier_freq_hz=2000)
    assert [t.frequency_hz for t in spec.tones] == [100.0, 250.0]
    assert [t.amplitude for t in spec.tones] == [1.0, 0.5]
    assert spec.carrier_freq_hz == 2000.0

  def test_mismatched_lengths(self) -> None:
    """Test that mismatched list lengths are rejected."""
    with pytest.raises(InvalidSpec, match="match in length"):
      SignalSpec.from_lists([100.0, 200.0], [1.0])

  def test_empty_lists(self) -> None:
    """Test that empty lists are rejected."""
    with pytest.raises(InvalidSpec):
      SignalSpec.from_lists([], [])


def test_spec_is_frozen() -> None:
  """Test that a spec cannot be modified after construction."""
  spec = SignalSpec(tones=[(100.0, 1.0)])
  with pytest.raises(ValidationError):
    spec.samples = 2048  # type: ignore[misc]


def test_derived_timing() -> None:
  """Test sample spacing and rate derived from duration and sample count."""
  spec = SignalSpec(tones=[(100.0, 1.0)], samples=4096, duration_s=0.05)
  assert spec.dt == pytest.approx(0.05 / 4096)
  assert spec.sample_rate_hz == pytest.approx(81920.0)


class TestValidateSpec:
  """Tests for re-validation of already constructed specs."""

  def test_valid_spec_passes(self) -> None:
    """Test that a valid spec round-trips unchanged."""
    spec = SignalSpec(tones=[(100.0, 1.0)], variant="QAM", phase_shift_deg=90)
    assert validate_spec(spec) == spec

  def test_unvalidated_spec_rejected(self) -> None:
    """Test that a spec built without validation is caught."""
    spec = SignalSpec.model_construct(
      tones=(Tone(frequency_hz=100.0, amplitude=1.0),), samples=10
    )
    with pytest.raises(InvalidSpec):
      validate_spec(spec)

  def test_wrong_type_rejected(self) -> None:
    """Test that anything other than a SignalSpec is rejected."""
    with pytest.raises(InvalidSpec):
      validate_spec({"tones": [(100.0, 1.0)]})  # type: ignore[arg-type]
