"""Exception types for power computations and SEM fits."""


class SemPowerError(Exception):
    """Base exception for all sem_power errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(SemPowerError, ValueError):
    """Raised when alpha, df, ncp, power or sample sizes are out of range."""

    def __init__(self, message: str, argument: str = ""):
        super().__init__(message)
        self.argument = argument


class UpstreamFitFailure(SemPowerError, RuntimeError):
    """Raised when the SEM solver fails or returns a non-finite chi-square."""

    def __init__(self, message: str, description: str = ""):
        super().__init__(message)
        self.description = description
