"""Tests for message synthesis and noise generation."""

import numpy as np
import pytest

from am_simulator.config import NoiseKind, Tone, Waveform
from am_simulator.simulator.sources import (
  NoiseGenerator,
  generate_message,
  generate_message_sample,
)

TONE = [Tone(frequency_hz=100.0, amplitude=2.0)]


class TestWaveforms:
  """Tests for the per-shape tone formulas."""

  def test_sine_is_cosine(self) -> None:
    """Test that the Sine shape starts at its peak (cosine phase)."""
    assert generate_message_sample(0.0, TONE, Waveform.SINE) == pytest.approx(2.0)
    # Quarter period of 100 Hz
    assert generate_message_sample(0.0025, TONE, Waveform.SINE) == pytest.approx(
      0.0, abs=1e-12
    )

  def test_square(self) -> None:
    """Test that the Square shape follows the sign of the cosine."""
    t = np.array([0.0, 0.001, 0.004, 0.006, 0.009])
    message = generate_message(t, TONE, Waveform.SQUARE)
    np.testing.assert_array_equal(message, [2.0, 2.0, -2.0, -2.0, 2.0])

  def test_triangle(self) -> None:
    """Test that the Triangle shape peaks at +/-amp and crosses zero linearly."""
    t = np.array([0.0, 0.0025, 0.005, 0.00125])
    message = generate_message(t, TONE, Waveform.TRIANGLE)
    np.testing.assert_allclose(message, [2.0, 0.0, -2.0, 1.0], atol=1e-9)

  def test_sawtooth(self) -> None:
    """Test that the Sawtooth ramps from -amp to +amp over each period."""
    t = np.array([0.0, 0.0025, 0.0049, 0.0051])
    message = generate_message(t, TONE, Waveform.SAWTOOTH)
    np.testing.assert_allclose(message, [0.0, 1.0, 1.96, -1.96], atol=1e-9)

  @pytest.mark.parametrize(("duty", "expected_high"), [(25.0, 0.25), (50.0, 0.5)])
  def test_pulse_duty_cycle(self, duty, expected_high) -> None:
    """Test that the Pulse shape is high for the requested share of time."""
    t = np.arange(10000) / 100000  # 10 full periods of 100 Hz
    message = generate_message(t, TONE, Waveform.PULSE, duty_cycle=duty)
    assert set(np.unique(message)) == {-2.0, 2.0}
    assert np.mean(message > 0) == pytest.approx(expected_high, abs=0.01)

  def test_pulse_extreme_duty_cycles(self) -> None:
    """Test that 0% is always low and 100% always high."""
    t = np.linspace(0, 0.05, 500)
    assert np.all(generate_message(t, TONE, Waveform.PULSE, duty_cycle=0.0) == -2.0)
    assert np.all(generate_message(t, TONE, Waveform.PULSE, duty_cycle=100.0) == 2.0)

  def test_tones_superpose_without_normalization(self) -> None:
    """Test that multiple tones are summed raw."""
    tones = [
      Tone(frequency_hz=100.0, amplitude=1.0),
      Tone(frequency_hz=300.0, amplitude=0.5),
    ]
    t = np.linspace(0, 0.02, 257)
    expected = np.cos(2 * np.pi * 100 * t) + 0.5 * np.cos(2 * np.pi * 300 * t)
    np.testing.assert_allclose(generate_message(t, tones, Waveform.SINE), expected)
    assert generate_message_sample(0.0, tones, Waveform.SINE) == pytest.approx(1.5)

  @pytest.mark.parametrize("shape", list(Waveform))
  def test_scalar_matches_vectorized(self, shape) -> None:
    """Test that the scalar and array forms agree sample by sample."""
    t = np.linspace(0, 0.03, 61)
    vector = generate_message(t, TONE, shape, duty_cycle=30.0)
    scalar = [generate_message_sample(ti, TONE, shape, duty_cycle=30.0) for ti in t]
    np.testing.assert_allclose(vector, scalar)


class TestNoiseGenerator:
  """Tests for NoiseGenerator."""

  def test_none_is_zero(self) -> None:
    """Test that NONE yields zeros."""
    noise = NoiseGenerator(seed=1)
    assert noise.sample(NoiseKind.NONE, 1.0) == 0.0
    np.testing.assert_array_equal(noise.samples(NoiseKind.NONE, 1.0, 16), 0.0)

  def test_none_does_not_advance_stream(self) -> None:
    """Test that NONE leaves the random stream untouched."""
    a = NoiseGenerator(seed=7)
    b = NoiseGenerator(seed=7)
    a.samples(NoiseKind.NONE, 1.0, 1000)
    np.testing.assert_array_equal(
      a.samples(NoiseKind.WHITE, 1.0, 10), b.samples(NoiseKind.WHITE, 1.0, 10)
    )

  def test_white_bounds(self) -> None:
    """Test that white noise is uniform within +/- amplitude."""
    noise = NoiseGenerator(seed=42).samples(NoiseKind.WHITE, 0.3, 50000)
    assert np.all(np.abs(noise) <= 0.3)
    assert np.mean(noise) == pytest.approx(0.0, abs=0.01)
    # Variance of U[-a, a] is a^2 / 3
    assert np.var(noise) == pytest.approx(0.3**2 / 3, rel=0.05)

  def test_gaussian_scale(self) -> None:
    """Test that Gaussian noise has standard deviation equal to amplitude."""
    noise = NoiseGenerator(seed=42).samples(NoiseKind.GAUSSIAN, 0.5, 50000)
    assert np.std(noise) == pytest.approx(0.5, rel=0.03)

  def test_pink_weighting(self) -> None:
    """Test pink noise bounds and variance of the weighted uniform average."""
    amplitude = 0.8
    noise = NoiseGenerator(seed=42).samples(NoiseKind.PINK, amplitude, 50000)
    bound = amplitude * sum(1 / i for i in range(1, 6)) / 5
    assert np.all(np.abs(noise) <= bound)
    expected_var = amplitude**2 * sum(1 / i**2 for i in range(1, 6)) / 3 / 25
    assert np.var(noise) == pytest.approx(expected_var, rel=0.05)

  @pytest.mark.parametrize("kind", [NoiseKind.WHITE, NoiseKind.GAUSSIAN, NoiseKind.PINK])
  def test_deterministic_with_seed(self, kind) -> None:
    """Test that the same seed produces the same noise."""
    first = NoiseGenerator(seed=123).samples(kind, 1.0, 256)
    second = NoiseGenerator(seed=123).samples(kind, 1.0, 256)
    np.testing.assert_array_equal(first, second)

  def test_injected_generator_is_used(self) -> None:
    """Test that an injected generator is drawn from directly."""
    rng = np.random.default_rng(5)
    expected = np.random.default_rng(5).standard_normal(4)
    noise = NoiseGenerator(rng=rng).samples(NoiseKind.GAUSSIAN, 1.0, 4)
    np.testing.assert_array_equal(noise, expected)
