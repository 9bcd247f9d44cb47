"""
Console output helpers shared by the cli and the help renderer.

One print operation, one payload union:

    printer.notice("error", TextPayload("disk is full"))
    printer.notice("warning", ErrorPayload(exception))

errors and warnings go to the stderr console; info and headers to stdout.
"""
from dataclasses import dataclass

from rich.console import Console
from rich.text import Text

from .faults import CliException


@dataclass(frozen=True, slots=True)
class TextPayload:
    text: object


@dataclass(frozen=True, slots=True)
class ErrorPayload:
    error: BaseException


_LABELS = {
    "error": ("ERROR:", "bold red"),
    "warning": ("WARNING:", "bold yellow"),
    "info": ("", ""),
}


def format_error(error, /):
    """
    'Name - message' for an exception; the name is dropped for plain Exception/Error
    types and the message is dropped when empty.
    """
    if isinstance(error, str):
        return error
    name = type(error).__name__
    if name.lower() in ("exception", "error"):
        name = ""
    message = str(error)
    if name and message:
        return f"{name} - {message}"
    return name + message


class Printer:
    def __init__(self, console=None, stderr=None, /):
        self.console = console or Console()
        self.stderr = stderr or Console(stderr=True)

    def header(self, text, /):
        self.console.print()
        self.console.print(Text(text, style="bold"))
        self.console.print()

    def notice(self, kind, payload, /):
        try:
            label, style = _LABELS[kind]
        except KeyError:
            raise ValueError(f"notice() kind must be one of {', '.join(_LABELS)}") from None
        console = self.console if kind == "info" else self.stderr

        match payload:
            case ErrorPayload(error=CliException() as error) if kind == "error":
                console.print(error)
                return
            case ErrorPayload(error=error):
                body = Text(format_error(error))
            case TextPayload(text=Text() as text):
                body = text
            case TextPayload(text=text):
                body = Text(str(text))
            case _:
                raise TypeError("notice() payload must be a text or an error payload")

        if label:
            body = Text.assemble((label, style), " ", body)
        console.print(body)


__all__ = (
    "TextPayload",
    "ErrorPayload",
    "Printer",
    "format_error",
)
