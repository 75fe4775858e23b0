"""
Module: errors.py

### About This Module
Exception types raised by the meta-d' fitting pipeline. Every error is local to
a single fit call.

### Classes:
- MetadError: base class of all pipeline errors.
- InvalidInput: malformed response counts or MCMC options.
- DomainError: degenerate rate (0 or 1) reaching an inverse CDF.
- DivisionByZero: empty count group or zero area mass in the type-2 ROC.
- SamplerFailure: the posterior sampler could not produce samples.
"""


class MetadError(Exception):
    """Base class for errors raised while fitting meta-d'."""


class InvalidInput(MetadError, ValueError):
    """Count sequences or MCMC options are malformed."""


class DomainError(MetadError, ValueError):
    """A rate of exactly 0 or 1 was passed to the inverse CDF."""


class DivisionByZero(MetadError, ZeroDivisionError):
    """A type-2 count group or model area mass is zero."""


class SamplerFailure(MetadError, RuntimeError):
    """The MCMC engine failed; the fit is not retried."""
