"""Exception types raised by the AM simulator."""


class AMSimulatorError(Exception):
  """Base class for all simulator errors."""


class InvalidSpec(AMSimulatorError, ValueError):
  """A SignalSpec field is outside its documented range.

  Raised before any computation starts, so no partial result is ever
  produced. Callers recover by supplying corrected input.
  """


class InvalidVariant(AMSimulatorError, ValueError):
  """An unrecognized modulation-variant tag reached a modulator factory."""


class InsufficientSamples(AMSimulatorError, ValueError):
  """A metric analyzer received fewer samples than its analysis window.

  Attributes:
    required: Number of samples the analyzer needs.
    actual: Number of samples it received.
  """

  def __init__(self, required: int, actual: int) -> None:
    self.required = required
    self.actual = actual
    super().__init__(
      f"Need at least {required} modulated samples for analysis, got {actual}"
    )
