"""
Domain Errors

ValidationError      -> caller/programmer defect, never recovered from
RequestBuildError    -> quote request target could not be formed
TransportError       -> network unreachable or I/O failure
ParseAnomaly         -> one response line could not be read as documented
"""

from typing import Optional


class QuoteWatchError(Exception):
    """Base class for all quotewatch errors"""


class ValidationError(QuoteWatchError, ValueError):
    """Invalid construction arguments for a domain object"""


class UnknownExchangeError(ValidationError, LookupError):
    """No exchange is registered under the given name"""

    def __init__(self, name: str):
        super().__init__(f"Cannot parse into Exchange object: {name!r}")
        self.name = name


class RequestBuildError(QuoteWatchError):
    """The quote request target is not a well-formed URL"""

    def __init__(self, target: str, reason: str = "malformed request target"):
        super().__init__(f"Cannot build quote request ({reason}): {target}")
        self.target = target


class TransportError(QuoteWatchError):
    """
    Network failure while talking to the quote service.

    Always raised ``from`` the underlying transport exception.
    """

    DEFAULT_USER_MESSAGE = "Cannot reach the quote service. Please check your connection."

    def __init__(self, detail: str, user_message: Optional[str] = None):
        super().__init__(detail)
        self.user_message = user_message or self.DEFAULT_USER_MESSAGE

    @property
    def cause(self) -> Optional[BaseException]:
        return self.__cause__


class ParseAnomaly(QuoteWatchError, ValueError):
    """A response line or numeric field did not match the quote grammar"""
