from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    OK = 0
    GENERIC_ERROR = 1
    OUT_OF_MEMORY = 2
    INITIALIZATION_FAILED = 3
    NOT_INITIALIZED = 4
    UNSUPPORTED_FONT_FORMAT = 5
    ERROR_OPENING_FONT = 6
    FONT_NOT_UNICODE = 7
    UNABLE_TO_SET_SIZE = 8
    FONT_NOT_SET = 9
    CANT_OPEN_FILE = 10


class TextRenderError(Exception):
    """Base failure of a renderer operation; `code` tells the variants apart."""

    code: ErrorCode = ErrorCode.GENERIC_ERROR
    default_message = "Generic error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0])


class GenericError(TextRenderError):
    code = ErrorCode.GENERIC_ERROR
    default_message = "Generic error"


class OutOfMemory(TextRenderError):
    code = ErrorCode.OUT_OF_MEMORY
    default_message = "Out of memory"


class InitializationFailed(TextRenderError):
    code = ErrorCode.INITIALIZATION_FAILED
    default_message = "Library initialization failed"


class NotInitialized(TextRenderError):
    code = ErrorCode.NOT_INITIALIZED
    default_message = "Library not initialized"


class UnsupportedFontFormat(TextRenderError):
    code = ErrorCode.UNSUPPORTED_FONT_FORMAT
    default_message = "Unsupported font format"


class ErrorOpeningFont(TextRenderError):
    code = ErrorCode.ERROR_OPENING_FONT
    default_message = "Error opening font"


class FontNotUnicode(TextRenderError):
    code = ErrorCode.FONT_NOT_UNICODE
    default_message = "Font does not support Unicode"


class UnableToSetSize(TextRenderError):
    code = ErrorCode.UNABLE_TO_SET_SIZE
    default_message = "Unable to set specified font size"


class FontNotSet(TextRenderError):
    code = ErrorCode.FONT_NOT_SET
    default_message = "The font must be set before calling this function"


class CantOpenFile(TextRenderError):
    code = ErrorCode.CANT_OPEN_FILE
    default_message = "Unable to open file"


_ERRORS_BY_CODE: dict[ErrorCode, type[TextRenderError]] = {
    cls.code: cls
    for cls in (
        GenericError,
        OutOfMemory,
        InitializationFailed,
        NotInitialized,
        UnsupportedFontFormat,
        ErrorOpeningFont,
        FontNotUnicode,
        UnableToSetSize,
        FontNotSet,
        CantOpenFile,
    )
}


def error_for_code(code: int | ErrorCode, message: str | None = None) -> TextRenderError:
    """Build the exception matching a numeric result code.

    Unknown codes map to `GenericError` with an "Unknown error" message.
    """
    try:
        key = ErrorCode(int(code))
    except ValueError:
        return GenericError(message or "Unknown error")
    if key is ErrorCode.OK:
        raise ValueError("ErrorCode.OK is not an error")
    return _ERRORS_BY_CODE[key](message)


__all__ = [
    "CantOpenFile",
    "ErrorCode",
    "ErrorOpeningFont",
    "FontNotSet",
    "FontNotUnicode",
    "GenericError",
    "InitializationFailed",
    "NotInitialized",
    "OutOfMemory",
    "TextRenderError",
    "UnableToSetSize",
    "UnsupportedFontFormat",
    "error_for_code",
]
