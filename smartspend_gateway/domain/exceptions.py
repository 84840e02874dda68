"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ConfigurationError(DomainException):
    """Monthly principal budget is zero or negative, nothing can be projected"""

    def __init__(self, message: str = "Set monthly payments to project payoff"):
        super().__init__(message)


class DivergenceError(DomainException):
    """Simulation hit the month cap with balances still outstanding"""

    def __init__(self, message: str = "Payment plan too long; increase payments"):
        super().__init__(message)


class InputDataError(DomainException):
    """Transaction record is malformed (bad date, non-positive amount, unknown type)"""

    pass


class InvalidSimulationRequestError(DomainException, ValueError):
    """Caller passed arguments that violate the simulator contract"""

    pass
