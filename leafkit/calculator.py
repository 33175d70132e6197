"""A small remote calculator: command parsing, evaluation and HTTP-style replies."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Optional

from leafkit.printing import diagnostic

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

WHITESPACE = "\t \r\n"

HELP = (
    "Help:\n"
    "    error-quit                  Simulated error to end the session\n"
    "    sum <int64>*                Addition\n"
    "    sub <int64>+                Substraction\n"
    "    mul <int64>*                Multiplication\n"
    "    div <int64>+                Division\n"
    "    mod <int64> <int64>         Remainder\n"
    "    <anything else>             This message"
)

SERVER_NAME = "Example-with-leafkit"

_INT_PREFIX = re.compile(r"[+-]?[0-9]+")


class CalculatorError(Exception):
    """Base class for failures while serving a calculator request.

    ``command`` names the command being executed, if any, and ``status`` is
    the HTTP status the reply should carry.
    """

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.command: Optional[str] = None
        self.status: Optional[HTTPStatus] = None


class ParseInt64Error(CalculatorError):
    """A word could not be read as a signed 64-bit integer."""

    def __init__(self, word: str, position: int) -> None:
        super().__init__(f"int64 parse error: {word!r} at {position}")
        self.word = word
        self.position = position

    def location(self) -> str:
        """Show where in the word parsing stopped."""
        word, pos = self.word, self.position
        if pos == 0:
            return f'->"{word}"'
        if pos < len(word):
            return f'"{word[:pos]}"->"{word[pos:]}"'
        return f'"{word}"<-'

    def __str__(self) -> str:
        return f"int64 parse error: {self.location()}"


class ArgCountError(CalculatorError):
    """A command got the wrong number of arguments.

    ``maximum`` of None means there is no upper bound.
    """

    def __init__(self, count: int, minimum: int, maximum: Optional[int]) -> None:
        super().__init__()
        self.count = count
        self.minimum = minimum
        self.maximum = maximum

    def describe(self) -> str:
        """Describe the count received and the count required."""
        if self.minimum == self.maximum:
            required = str(self.minimum)
        elif self.maximum is not None:
            required = f"[{self.minimum}, {self.maximum}]"
        else:
            required = f"[{self.minimum}, MAX]"
        return f"{self.count} (required: {required})"

    def __str__(self) -> str:
        return f"wrong argument count: {self.describe()}"


class ErrorQuit(CalculatorError):
    """The client asked for a simulated server-side failure."""

    def __str__(self) -> str:
        return "error-quit"


class UnexpectedMethodError(CalculatorError):
    """The request used an HTTP method other than the expected one."""

    def __init__(self, expected: str) -> None:
        super().__init__()
        self.expected = expected

    def __str__(self) -> str:
        return f"unexpected HTTP method. Expected: {self.expected}"


class DivisionByZero(CalculatorError, ArithmeticError):
    """A division or remainder by zero was requested."""

    def __init__(self) -> None:
        super().__init__("division by zero")

    def __str__(self) -> str:
        return "division by zero"


@dataclass
class Response:
    """A reply to send back to the client."""

    status: HTTPStatus
    body: str
    keep_alive: bool = True
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.headers.setdefault("Server", SERVER_NAME)
        self.headers.setdefault("Content-Type", "text/plain")
        self.headers["Content-Length"] = str(len(self.body.encode("utf-8")))
        self.headers["Connection"] = "keep-alive" if self.keep_alive else "close"

    @property
    def need_eof(self) -> bool:
        """True when the connection must be closed after this reply."""
        return not self.keep_alive


def _wrap(value: int) -> int:
    return ((value - INT64_MIN) % 2**64) + INT64_MIN


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return _wrap(-quotient if (a < 0) != (b < 0) else quotient)


def _trunc_mod(a: int, b: int) -> int:
    remainder = abs(a) % abs(b)
    return -remainder if a < 0 else remainder


def parse_int64(word: str) -> int:
    """Parse ``word`` as a whole signed 64-bit integer."""
    match = _INT_PREFIX.match(word)
    if match is None:
        raise ParseInt64Error(word, 0)
    value = int(match.group())
    if not INT64_MIN <= value <= INT64_MAX:
        raise ParseInt64Error(word, 0)
    if match.end() != len(word):
        raise ParseInt64Error(word, match.end())
    return value


def split_words(line: str) -> list[str]:
    """Split ``line`` on tabs, spaces, carriage returns and newlines."""
    words: list[str] = []
    current: list[str] = []
    for char in line:
        if char in WHITESPACE:
            if current:
                words.append("".join(current))
                current = []
        else:
            current.append(char)
    if current:
        words.append("".join(current))
    return words


def _run(command: str, args: list[str]) -> str:
    if command == "error-quit":
        raise ErrorQuit()
    if command == "sum":
        total = 0
        for word in args:
            total = _wrap(total + parse_int64(word))
        return str(total)
    if command == "sub":
        if len(args) < 2:
            raise ArgCountError(len(args), 2, None)
        first, *rest = args
        total = parse_int64(first)
        for word in rest:
            total = _wrap(total - parse_int64(word))
        return str(total)
    if command == "mul":
        product = 1
        for word in args:
            product = _wrap(product * parse_int64(word))
        return str(product)
    if command == "div":
        if len(args) < 2:
            raise ArgCountError(len(args), 2, None)
        first, *rest = args
        quotient = parse_int64(first)
        for word in rest:
            divisor = parse_int64(word)
            if divisor == 0:
                raise DivisionByZero()
            quotient = _trunc_div(quotient, divisor)
        return str(quotient)
    if command == "mod":
        if len(args) != 2:
            raise ArgCountError(len(args), 2, 2)
        dividend = parse_int64(args[0])
        divisor = parse_int64(args[1])
        if divisor == 0:
            raise DivisionByZero()
        return str(_trunc_mod(dividend, divisor))
    return HELP


def execute_command(line: str) -> str:
    """Execute one calculator command and return its textual result.

    Failures raise a :class:`CalculatorError` tagged with the command and a
    400 status.
    """
    words = split_words(line)
    if not words:
        return HELP
    command, *args = words
    try:
        return _run(command, args)
    except CalculatorError as exc:
        exc.command = command
        exc.status = HTTPStatus.BAD_REQUEST
        raise


def diagnostic_to_str(text: str) -> str:
    """Frame a diagnostic text block for inclusion in a reply."""
    indented = text.replace("\n", "\n    ")
    return "\nDetailed error diagnostic:\n----\n" + indented + "\n----"


def _describe_failure(exc: Exception) -> str:
    lines = [diagnostic(exc)]
    command = getattr(exc, "command", None)
    status = getattr(exc, "status", None)
    if command is not None:
        lines.append(f"command: {command}")
    if status is not None:
        lines.append(f"http status: {int(status)} {status.phrase}")
    return "\n".join(lines)


def _error_message(exc: Exception) -> str:
    command = getattr(exc, "command", None)
    prefix = f"Error ({command}):" if command is not None else "Error:"
    if isinstance(exc, ParseInt64Error):
        text = f"{prefix} int64 parse error: {exc.location()}"
    elif isinstance(exc, ArgCountError):
        text = f"{prefix} wrong argument count: {exc.describe()}"
    elif isinstance(exc, UnexpectedMethodError):
        text = f"{prefix} unexpected HTTP method. Expected: {exc.expected}"
    else:
        text = f"{prefix} {exc}"
    return text + diagnostic_to_str(_describe_failure(exc))


def handle_request(method: str, body: str, keep_alive: bool = True) -> Response:
    """Build the reply for one request.

    The ``error-quit`` command makes this raise ``RuntimeError`` instead of
    producing a reply.
    """
    try:
        if method.upper() != "POST":
            error = UnexpectedMethodError("POST")
            error.status = HTTPStatus.BAD_REQUEST
            raise error
        status, text = HTTPStatus.OK, execute_command(body)
    except ErrorQuit as exc:
        raise RuntimeError("error_quit") from exc
    except Exception as exc:  # every other failure is reported to the client
        status = getattr(exc, "status", None) or HTTPStatus.INTERNAL_SERVER_ERROR
        text = _error_message(exc)
    return Response(status=status, body=text + "\n", keep_alive=keep_alive)