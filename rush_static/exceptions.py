import enum
from typing import Any, Dict, Optional, Tuple


class StaticError(Exception):
    """
    Basic exception of the static files extension
    """

    def __init__(self, msg: str = '', **kwargs):
        # an additional stash for dynamic values, same as rush's HTTPError
        for key, value in kwargs.items():
            setattr(self, key, value)

        super(StaticError, self).__init__(msg)


class ConfigError(StaticError):
    """
    Raised once, while setting up the extension, if the configuration can't
    work at all (for example, empty static root)
    """


class MalformedURLError(StaticError, ValueError):
    """
    Raised by the resolver if the requested url can't be percent-decoded.
    We never pass such urls to the filesystem as-is
    """

    code = 400
    description = 'Bad Request'


class Reason(enum.Enum):
    NOT_FOUND = 'not_found'
    FORBIDDEN = 'forbidden'
    INTERNAL_ERROR = 'internal_error'


# every reason of a failed request maps to exactly one status code and
# a plain-text message that is sent to the client
ERROR_TABLE: Dict[Reason, Tuple[int, str]] = {
    Reason.NOT_FOUND: (404, 'File Not Found'),
    Reason.FORBIDDEN: (403, 'Permission Denied'),
    Reason.INTERNAL_ERROR: (502, 'Internal Server Error'),
}


class ServeError(StaticError):
    """
    A single failure of a request. Passed to the error callback of
    FileResponder.serve(), never raised from it
    """

    def __init__(self,
                 reason: Reason,
                 path: str,
                 detail: Optional[Any] = None):
        self.reason = reason
        self.path = path
        self.detail = detail

        super(ServeError, self).__init__(f'{reason.value}: {path}')

    @property
    def code(self) -> int:
        return ERROR_TABLE[self.reason][0]

    @property
    def description(self) -> str:
        return ERROR_TABLE[self.reason][1]
