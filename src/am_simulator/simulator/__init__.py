"""Simulator module for amplitude modulation signals."""

from am_simulator.simulator import fft
from am_simulator.simulator.analyzers import (
  SignalToNoiseRatio,
  SpectrumFrame,
  TotalHarmonicDistortion,
  sliding_spectrum,
)
from am_simulator.simulator.fft import compute_spectrum, hilbert_transform
from am_simulator.simulator.modulation import (
  CoherentDemodulator,
  Demodulator,
  DSBAMModulator,
  DSBSCModulator,
  EnvelopeDemodulator,
  Modulator,
  QAMModulator,
  SSBModulator,
  VSBModulator,
  demodulate,
  exponential_lowpass,
  make_demodulator,
  make_modulator,
  modulate,
)
from am_simulator.simulator.pipeline import SignalPipeline, SignalResult, build
from am_simulator.simulator.sources import (
  NoiseGenerator,
  generate_message,
  generate_message_sample,
)

__all__ = [
  # Pipeline
  "SignalPipeline",
  "SignalResult",
  "build",
  # Sources
  "NoiseGenerator",
  "generate_message",
  "generate_message_sample",
  # Modulation
  "CoherentDemodulator",
  "DSBAMModulator",
  "DSBSCModulator",
  "Demodulator",
  "EnvelopeDemodulator",
  "Modulator",
  "QAMModulator",
  "SSBModulator",
  "VSBModulator",
  "demodulate",
  "exponential_lowpass",
  "make_demodulator",
  "make_modulator",
  "modulate",
  # Spectral analysis
  "SignalToNoiseRatio",
  "SpectrumFrame",
  "TotalHarmonicDistortion",
  "compute_spectrum",
  "fft",
  "hilbert_transform",
  "sliding_spectrum",
]
