#!/usr/bin/env python3
"""AM Simulation Script.

This script runs one pass of the simulation chain:
Message -> Noise -> AM Modulator -> Receiver -> Spectrum, SNR and THD

It reports summary statistics of every stage so different variants,
waveforms and noise conditions can be compared from the command line.
"""

import logging
import sys
from typing import Annotated

import numpy as np
import typer

from am_simulator.config import (
  AMVariant,
  DemodulationKind,
  NoiseKind,
  SignalSpec,
  Waveform,
)
from am_simulator.errors import AMSimulatorError
from am_simulator.setup_logging import setup_logging
from am_simulator.simulator.analyzers import (
  SignalToNoiseRatio,
  TotalHarmonicDistortion,
)
from am_simulator.simulator.pipeline import SignalResult, build

logger = logging.getLogger(__name__)


def parse_tone(text: str) -> tuple[float, float]:
  """Parse a ``FREQ[:AMP]`` tone argument; amplitude defaults to 1."""
  freq, _, amp = text.partition(":")
  try:
    return float(freq), float(amp) if amp else 1.0
  except ValueError:
    logger.exception(f"Invalid tone {text!r}, expected FREQ[:AMP]")
    sys.exit(1)


def describe(name: str, values: np.ndarray) -> None:
  """Log min/max/RMS of one signal."""
  rms = float(np.sqrt(np.mean(values**2)))
  logger.info(
    f"  {name:<12} min={values.min():+.4f} max={values.max():+.4f} rms={rms:.4f}"
  )


def report(result: SignalResult) -> None:
  """Log a summary of a pipeline result and its spectral metrics."""
  spec = result.spec
  logger.info(
    f"{spec.variant.value} at {spec.carrier_freq_hz:.0f} Hz, "
    f"{result.samples} samples @ {result.sample_rate_hz:.0f} Hz"
  )
  describe("message", result.message)
  describe("carrier", result.carrier)
  describe("modulated", result.modulated)
  if result.has_demodulation:
    describe("demodulated", result.demodulated)
  else:
    logger.info("  demodulated  (not computed)")

  peak = int(np.argmax(result.spectrum))
  logger.info(
    f"Spectrum peak: {result.frequency[peak]:.1f} Hz, "
    f"magnitude {result.spectrum[peak]:.4f}"
  )

  snr = SignalToNoiseRatio.from_result(result)
  logger.info(f"SNR: {snr.snr_db:.2f} dB (carrier {snr.carrier_freq_hz:.1f} Hz)")

  thd = TotalHarmonicDistortion.from_result(result)
  if thd.fundamental_found:
    logger.info(
      f"THD: {thd.thd_percent:.3f}% (fundamental {thd.fundamental_freq_hz:.1f} Hz)"
    )
  else:
    logger.info("THD: undefined (no fundamental found)")


def main(
  tones: Annotated[
    list[str] | None,
    typer.Option("--tone", "-t", help="Message tone as FREQ[:AMP]; repeatable."),
  ] = None,
  variant: Annotated[
    AMVariant, typer.Option("--variant", "-v", help="AM variant.")
  ] = AMVariant.DSB_AM,
  carrier: Annotated[
    float, typer.Option("--carrier", "-c", help="Carrier frequency in Hz.")
  ] = 1000.0,
  index: Annotated[
    float, typer.Option("--index", "-k", help="Modulation index (0-2).")
  ] = 0.5,
  phase: Annotated[
    float, typer.Option("--phase", help="QAM phase shift in degrees.")
  ] = 0.0,
  waveform: Annotated[
    Waveform, typer.Option("--waveform", "-w", help="Message waveform.")
  ] = Waveform.SINE,
  duty: Annotated[
    float, typer.Option("--duty", help="Pulse duty cycle in percent.")
  ] = 50.0,
  noise: Annotated[
    NoiseKind, typer.Option("--noise", "-n", help="Noise type.")
  ] = NoiseKind.NONE,
  noise_amplitude: Annotated[
    float, typer.Option("--noise-amplitude", help="Noise amplitude (0-1).")
  ] = 0.0,
  demod: Annotated[
    DemodulationKind, typer.Option("--demod", "-d", help="Demodulation type.")
  ] = DemodulationKind.COHERENT,
  samples: Annotated[
    int, typer.Option("--samples", "-s", help="Sample count (1024-16384).")
  ] = 4096,
  duration: Annotated[
    float, typer.Option("--duration", help="Duration in seconds (0.01-1).")
  ] = 0.05,
  alpha: Annotated[
    float, typer.Option("--alpha", "-a", help="Receiver filter alpha (0.01-1).")
  ] = 0.1,
  seed: Annotated[
    int | None, typer.Option("--seed", help="Noise seed for reproducible runs.")
  ] = None,
  log_level: Annotated[
    str, typer.Option("--log-level", help="Logging level.")
  ] = "INFO",
) -> None:
  """Simulate an AM signal and report its spectrum, SNR and THD."""
  setup_logging(level=log_level)

  parsed_tones = [parse_tone(t) for t in tones] if tones else [(100.0, 1.0)]

  try:
    spec = SignalSpec.create(
      variant=variant,
      carrier_freq_hz=carrier,
      tones=parsed_tones,
      modulation_index=index,
      phase_shift_deg=phase,
      waveform=waveform,
      pulse_duty_cycle=duty,
      noise=noise,
      noise_amplitude=noise_amplitude,
      demodulation=demod,
      samples=samples,
      duration_s=duration,
      filter_alpha=alpha,
      seed=seed,
    )
    logger.info("Running simulation...")
    result = build(spec)
    report(result)
  except AMSimulatorError:
    logger.exception("Simulation failed")
    sys.exit(1)

  logger.info("Simulation complete!")


if __name__ == "__main__":
  typer.run(main)
