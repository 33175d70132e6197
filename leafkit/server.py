"""A one-client HTTP server that runs calculator sessions."""

from __future__ import annotations

import ipaddress
import re
import socket
import sys
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Sequence, TextIO

from leafkit.calculator import Response, diagnostic_to_str, handle_request
from leafkit.printing import diagnostic, type_name

BODY_LIMIT = 1024
READ_OPERATION = "async_demo_rpc::continuation-read"
WRITE_OPERATION = "async_demo_rpc::continuation-write"
MAIN_OPERATION = "main"

_LEADING_INT = re.compile(r"\s*[+-]?\d+")


class HttpProtocolError(Exception):
    """The peer sent bytes that do not form a valid HTTP request."""


class SessionError(Exception):
    """A session stopped because of a failure during ``operation``."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation}: {cause}")
        self.operation = operation
        self.cause = cause


@dataclass
class Request:
    """One parsed HTTP request."""

    method: str
    target: str
    version: tuple[int, int]
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""

    @property
    def keep_alive(self) -> bool:
        """Whether the connection stays open after the reply."""
        tokens = {t.strip().lower() for t in self.headers.get("connection", "").split(",")}
        if self.version >= (1, 1):
            return "close" not in tokens
        return "keep-alive" in tokens


def _readline(reader: BinaryIO) -> bytes:
    line = reader.readline()
    if not line:
        raise HttpProtocolError("partial message")
    if not line.endswith(b"\n"):
        raise HttpProtocolError("partial message")
    return line.rstrip(b"\r\n")


def _read_exact(reader: BinaryIO, size: int) -> bytes:
    data = reader.read(size)
    if data is None or len(data) != size:
        raise HttpProtocolError("partial message")
    return data


def _parse_version(text: str) -> tuple[int, int]:
    match = re.fullmatch(r"HTTP/(\d)\.(\d)", text)
    if match is None:
        raise HttpProtocolError(f"bad version: {text!r}")
    return int(match.group(1)), int(match.group(2))


def _read_chunked(reader: BinaryIO) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        size_line = _readline(reader).split(b";", 1)[0].strip()
        try:
            size = int(size_line, 16)
        except ValueError:
            raise HttpProtocolError(f"bad chunk size: {size_line!r}") from None
        if size == 0:
            while _readline(reader):
                pass
            return b"".join(chunks)
        total += size
        if total > BODY_LIMIT:
            raise HttpProtocolError("body limit exceeded")
        chunks.append(_read_exact(reader, size))
        if _readline(reader):
            raise HttpProtocolError("bad chunk terminator")


def read_request(reader: BinaryIO) -> Optional[Request]:
    """Read one request; return None when the peer closed the stream first."""
    first = reader.readline()
    if not first:
        return None
    if not first.endswith(b"\n"):
        raise HttpProtocolError("partial message")
    parts = first.decode("latin-1").strip().split(" ")
    if len(parts) != 3 or not parts[0]:
        raise HttpProtocolError(f"bad request line: {first!r}")
    method, target, version_text = parts
    version = _parse_version(version_text)

    headers: dict[str, str] = {}
    while line := _readline(reader):
        name, sep, value = line.decode("latin-1").partition(":")
        if not sep or not name.strip():
            raise HttpProtocolError(f"bad header: {line!r}")
        headers[name.strip().lower()] = value.strip()

    if "chunked" in headers.get("transfer-encoding", "").lower():
        raw = _read_chunked(reader)
    else:
        length_text = headers.get("content-length", "0")
        if not length_text.isdigit():
            raise HttpProtocolError(f"bad content length: {length_text!r}")
        length = int(length_text)
        if length > BODY_LIMIT:
            raise HttpProtocolError("body limit exceeded")
        raw = _read_exact(reader, length)

    return Request(method, target, version, headers, raw.decode("utf-8", errors="replace"))


def write_response(writer: BinaryIO, response: Response) -> None:
    """Serialize ``response`` onto ``writer``."""
    lines = [f"HTTP/1.1 {int(response.status)} {response.status.phrase}"]
    lines.extend(f"{name}: {value}" for name, value in response.headers.items())
    head = ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")
    writer.write(head + response.body.encode("utf-8"))
    writer.flush()


class RpcSession:
    """Serves calculator requests from one connection until it ends."""

    def __init__(self, reader: BinaryIO, writer: BinaryIO) -> None:
        self._reader = reader
        self._writer = writer

    def run(self) -> None:
        """Serve requests; raise :class:`SessionError` on failure."""
        while True:
            try:
                request = read_request(self._reader)
                if request is None:
                    return
                response = handle_request(request.method, request.body, request.keep_alive)
            except Exception as exc:
                raise SessionError(READ_OPERATION, exc) from exc
            try:
                write_response(self._writer, response)
            except Exception as exc:
                raise SessionError(WRITE_OPERATION, exc) from exc
            if response.need_eof:
                return


def _format_endpoint(host: str, port: int) -> str:
    return f"[{host}]:{port}" if ":" in host else f"{host}:{port}"


def serve(address, port: int, out: TextIO) -> int:
    """Accept one client on ``address``:``port`` and serve it; return 0."""
    ip = ipaddress.ip_address(str(address))
    family = socket.AF_INET6 if ip.version == 6 else socket.AF_INET
    with socket.create_server((str(ip), port), family=family) as listener:
        host, bound_port = listener.getsockname()[:2]
        try_host = "localhost" if host == "0.0.0.0" else host
        print(f"Server: Started on: {_format_endpoint(host, bound_port)}", file=out)
        print(
            "Try in a different terminal:\n"
            f'    curl {try_host}:{bound_port} -d ""\nor\n'
            f'    curl {try_host}:{bound_port} -d "sum 1 2 3"',
            file=out,
        )
        conn, peer = listener.accept()
    with conn:
        print(f"Server: Client connected: {_format_endpoint(peer[0], peer[1])}", file=out)
        try:
            with conn.makefile("rb") as reader, conn.makefile("wb") as writer:
                RpcSession(reader, writer).run()
            print("Server: Client work completed successfully", file=out)
        finally:
            try:
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
    return 0


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group()) if match else 0


def _report(err: TextIO, operation: str, exc: BaseException) -> int:
    prefix = f"Error ({operation}): "
    details = diagnostic_to_str(diagnostic(exc))
    if isinstance(exc, (OSError, HttpProtocolError)):
        code = getattr(exc, "errno", None)
        label = f"{type_name(type(exc))}:{code}" if code is not None else type_name(type(exc))
        print(f"{prefix}{label}:{exc}{details}", file=err)
        return -22
    print(f"{prefix}{exc}{details}", file=err)
    return -21


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the server from command-line arguments ``<address> <port>``."""
    args = sys.argv[1:] if argv is None else list(argv)
    out, err = sys.stdout, sys.stderr
    try:
        if len(args) != 2:
            print("Usage: leafkit-server <address> <port>", file=err)
            print("Example:\n    leafkit-server 0.0.0.0 8080", file=err)
            return -1
        address = ipaddress.ip_address(args[0])
        port = _atoi(args[1]) & 0xFFFF
        return serve(address, port, out)
    except SessionError as exc:
        return _report(err, exc.operation, exc.cause)
    except Exception as exc:
        return _report(err, MAIN_OPERATION, exc)