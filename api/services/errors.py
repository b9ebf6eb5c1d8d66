"""Error kinds raised by the quoting engine.

Every error is terminal for the request that raised it: they describe bad or
changed input, never a transient failure, so nothing here is retried.
"""

from __future__ import annotations


class QuoteError(Exception):
    """Base class. `code` is the stable error kind exposed to API clients."""

    code = "QuoteError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "detail": self.message}


class InvalidCoordinates(QuoteError):
    code = "InvalidCoordinates"


class InvalidPackageSpec(QuoteError):
    code = "InvalidPackageSpec"


class InvalidInsuranceValue(QuoteError):
    code = "InvalidInsuranceValue"


class InvalidDiscount(QuoteError):
    code = "InvalidDiscount"


class NoEligibleVehicle(QuoteError):
    code = "NoEligibleVehicle"

    def __init__(self, message: str, options: list | tuple = ()):
        super().__init__(message)
        self.options = tuple(options)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["rejected"] = {
            opt.type.value: list(opt.reasons_rejected)
            for opt in self.options
            if not opt.eligible
        }
        return data


class StaleQuote(QuoteError):
    code = "StaleQuote"

    def __init__(self, message: str, expected: str, actual: str):
        super().__init__(message)
        self.expected = expected
        self.actual = actual
