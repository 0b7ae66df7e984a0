"""
Exception types raised by the ray tracer.

Configuration errors are raised while a scene or camera is being assembled.
Zero vector errors surface during tracing and are handled where the tracer
evaluates a single branch.
"""


class ConfigurationError(ValueError):
    """Invalid geometry, camera or render configuration."""
    pass


class ZeroVectorError(ValueError):
    """An operation produced a vector of zero length."""
    pass
