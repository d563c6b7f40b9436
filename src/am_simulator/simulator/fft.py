"""Radix-2 FFT engine and the transforms built on it.

The forward transform is a recursive Cooley-Tukey decimation in time. Each
level allocates fresh even/odd halves, which is fine for the simulator's
sizes (at most 16384 samples, recursion depth 14). Larger inputs would call
for an iterative in-place rewrite.

Shared by SSB modulation (Hilbert transform), the pipeline spectrum, and the
SNR/THD analyzers.
"""

import numpy as np
import numpy.typing as npt


def is_power_of_two(n: int) -> bool:
  """Whether `n` is a positive power of two."""
  return n > 0 and (n & (n - 1)) == 0


def next_power_of_two(n: int) -> int:
  """Smallest power of two that is >= `n` (1 for n <= 1)."""
  size = 1
  while size < n:
    size <<= 1
  return size


def zero_pad(signal: npt.ArrayLike) -> npt.NDArray[np.float64]:
  """Pad `signal` with trailing zeros up to the next power of two.

  Padding changes the frequency resolution of a subsequent FFT (more,
  narrower bins); it is not an error.
  """
  x = np.asarray(signal, dtype=np.float64)
  size = next_power_of_two(len(x))
  if size == len(x):
    return x
  padded = np.zeros(size, dtype=np.float64)
  padded[: len(x)] = x
  return padded


def _fft_recursive(x: npt.NDArray[np.complex128]) -> npt.NDArray[np.complex128]:
  n = len(x)
  if n == 1:
    return x.copy()

  even = _fft_recursive(x[0::2])
  odd = _fft_recursive(x[1::2])

  twiddled = np.exp(-2j * np.pi * np.arange(n // 2) / n) * odd
  return np.concatenate([even + twiddled, even - twiddled])


def _to_complex(
  real: npt.ArrayLike, imag: npt.ArrayLike | None
) -> npt.NDArray[np.complex128]:
  x = np.asarray(real, dtype=np.complex128)
  if imag is not None:
    x = x + 1j * np.asarray(imag, dtype=np.float64)
  if x.ndim != 1:
    msg = f"FFT input must be one-dimensional, got shape {x.shape}"
    raise ValueError(msg)
  if not is_power_of_two(len(x)):
    msg = (
      f"FFT length must be a power of two, got {len(x)}; "
      "zero-pad the input first"
    )
    raise ValueError(msg)
  return x


def fft_complex(x: npt.ArrayLike) -> npt.NDArray[np.complex128]:
  """Forward FFT of a complex sequence whose length is a power of two."""
  return _fft_recursive(_to_complex(x, None))


def ifft_complex(x: npt.ArrayLike) -> npt.NDArray[np.complex128]:
  """Inverse FFT: forward transform of the conjugate, conjugated, over n."""
  spectrum = _to_complex(x, None)
  return np.conj(_fft_recursive(np.conj(spectrum))) / len(spectrum)


def fft(
  real: npt.ArrayLike, imag: npt.ArrayLike | None = None
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
  """Forward FFT.

  Args:
    real: Real part of the input (or the full real signal).
    imag: Optional imaginary part, same length as `real`.

  Returns:
    Tuple of (real, imaginary) parts of the transform.

  Raises:
    ValueError: If the length is not a power of two.
  """
  result = _fft_recursive(_to_complex(real, imag))
  return result.real, result.imag


def ifft(
  real: npt.ArrayLike, imag: npt.ArrayLike
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
  """Inverse FFT, the exact counterpart of `fft`.

  Returns:
    Tuple of (real, imaginary) parts of the time-domain sequence.
  """
  result = ifft_complex(_to_complex(real, imag))
  return result.real, result.imag


def hilbert_transform(signal: npt.ArrayLike) -> npt.NDArray[np.float64]:
  """Hilbert transform via the analytic signal.

  The spectrum keeps its DC and Nyquist bins, doubles the positive
  frequencies and drops the negative ones; the imaginary part of the inverse
  transform is the 90-degree shifted signal. Inputs whose length is not a
  power of two are zero-padded and the result truncated back.

  Args:
    signal: Real input signal.

  Returns:
    Hilbert transform of `signal`, same length.
  """
  x = np.asarray(signal, dtype=np.float64)
  n = len(x)
  padded = zero_pad(x)
  size = len(padded)

  gain = np.zeros(size, dtype=np.float64)
  gain[0] = 1.0
  if size > 1:
    gain[size // 2] = 1.0
    gain[1 : size // 2] = 2.0

  analytic = ifft_complex(fft_complex(padded) * gain)
  return analytic.imag[:n]


def compute_spectrum(
  signal: npt.ArrayLike, dt: float
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
  """One-sided magnitude spectrum.

  Args:
    signal: Real time-domain samples.
    dt: Sample spacing in seconds.

  Returns:
    Tuple of (frequency, magnitude), each of length ``len(signal) // 2``.
    Bin ``i`` sits at ``i / (n * dt)`` Hz, where ``n`` is the zero-padded
    transform length, and has magnitude ``2 * |X[i]| / len(signal)``.
    Padding refines the bin spacing but leaves amplitudes unchanged. For
    lengths that are not a power of two the returned bins stop short of
    Nyquist, at ``len(signal) / n`` of it.
  """
  x = np.asarray(signal, dtype=np.float64)
  half = len(x) // 2
  padded = zero_pad(x)
  n = len(padded)

  transform = fft_complex(padded)
  frequency = np.arange(half) / (n * dt)
  magnitude = 2 * np.abs(transform[:half]) / len(x)
  return frequency, magnitude
