"""Exception hierarchy for the photoemission simulation."""


class PhotoemissionError(Exception):
    """Base exception class for photoemission simulation errors."""
    pass


class DomainError(PhotoemissionError, ValueError):
    """Raised when a parameter lies outside its physical domain.

    Examples: photon energy not above the work function, non-positive laser
    duration, electron number, bin or slice count.
    """
    pass


class IntegrationError(PhotoemissionError, ArithmeticError):
    """Raised when adaptive quadrature fails to reach the requested tolerance.

    Attributes
    ----------
    interval : (float, float)
        Integration limits of the failing quadrature.
    epsabs, epsrel : float
        Requested absolute / relative tolerance.
    abserr : float
        Error estimate actually achieved.
    """

    def __init__(self, message, interval, epsabs, epsrel, abserr):
        self.interval = tuple(interval)
        self.epsabs = epsabs
        self.epsrel = epsrel
        self.abserr = abserr
        super().__init__(
            f"{message} (interval=[{self.interval[0]:.6g}, {self.interval[1]:.6g}], "
            f"epsabs={epsabs:g}, epsrel={epsrel:g}, achieved abserr={abserr:.3g})"
        )


class SequenceError(PhotoemissionError, RuntimeError):
    """Raised when simulation phases are called out of order."""
    pass


class InsufficientDataError(PhotoemissionError, ValueError):
    """Raised when the fit window holds too few populated bins."""
    pass
