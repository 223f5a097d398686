from fastapi import HTTPException, status

class BaseAppException(HTTPException):
    def __init__(self, status_code: int, detail):
        super().__init__(status_code=status_code, detail=detail)

class NotFoundError(BaseAppException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

class BusinessRuleError(BaseAppException):
    def __init__(self, detail="Request violates a business rule"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

class ConflictError(BaseAppException):
    def __init__(self, detail: str = "Resource already exists"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)

class LocationRestrictedError(BaseAppException):
    def __init__(self, detail: str = "Location restricted"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


# Errors raised by the pure shift/overtime/payroll core. They carry no HTTP
# semantics; main.py maps them to responses.

class InvalidDurationError(ValueError):
    """Clock-out is not after clock-in, or a timestamp cannot be parsed."""


class ComputationFault(ArithmeticError):
    """An overtime computation produced a non-finite value."""
