# leafkit

Small building blocks for reporting and handling errors, and two
command-line programs that use them: a one-client HTTP calculator server
and a runner for tasks that fail at random.

No third-party dependencies; Python 3.10 or later.

## Modules

- `leafkit.result`: `Result`, a container that holds either a value or an
  `ErrorId`; `new_error_id()`, which hands out fresh, unique, non-zero ids
  (thread-safe); and `BadResult`, raised when the value of a failed result
  is asked for.
- `leafkit.printing`: turns arbitrary objects into diagnostic text:
  `type_name`, `is_printable`, `has_printable_value`, `diagnostic` and
  `print_result_value`.
- `leafkit.calculator`: the calculator: `split_words`, `parse_int64`,
  `execute_command`, `handle_request` and `diagnostic_to_str`, the
  `Response` they produce, and the errors they raise (`ParseInt64Error`,
  `ArgCountError`, `UnexpectedMethodError`, `ErrorQuit`, `DivisionByZero`,
  all subclasses of `CalculatorError`).
- `leafkit.server`: reads HTTP requests (`read_request`), writes replies
  (`write_response`), runs a session over one connection (`RpcSession`),
  and `serve` / `main` for the `leafkit-server` command.
- `leafkit.tasks`: `task`, `run_tasks`, `report` and `main` for the
  `leafkit-tasks` command.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Results and error ids

```python
from leafkit.result import BadResult, Result, new_error_id

ok = Result(42)
assert ok and ok.value() == 42
assert not ok.error()          # a zero ErrorId on success

failed = Result.failure(new_error_id())
assert failed.has_error()
assert failed.get() is None
try:
    failed.value()
except BadResult as exc:
    print(exc.error_id)

print(Result())                # "No error"
print(failed)                  # "Error ID <n>"
```

An `ErrorId` is either 0 ("no error") or a number whose two low bits are
`01`; any other value raises `ValueError`.

## Diagnostics

`diagnostic(obj)` picks the first form that applies:

- the object's own text, when its class defines `__str__` (or it is a
  built-in value);
- `"<qualified type name>: <value>"`, when it has a printable `value`
  attribute;
- `"<qualified type name>: what(): <message>"` for exceptions;
- `"<qualified type name>: <value>"` for enum members;
- `"<qualified type name>: {not printable}"` otherwise.

`print_result_value(obj)` gives the object's text, or `{not printable}`.

## The calculator

```python
from leafkit.calculator import execute_command, handle_request

execute_command("sum 0 1 2 3")   # "6"
execute_command("")              # the help text

reply = handle_request("POST", "div 7 2")
reply.status, reply.body          # (HTTPStatus.OK, "3\n")
```

Commands (words are separated by tabs, spaces, carriage returns or
newlines):

```
error-quit                  Simulated error to end the session
sum <int64>*                Addition
sub <int64>+                Subtraction (at least two numbers)
mul <int64>*                Multiplication
div <int64>+                Division (at least two numbers)
mod <int64> <int64>         Remainder
<anything else>             The help text
```

Arithmetic wraps around like signed 64-bit integers; division and remainder
truncate toward zero. Numbers outside the 64-bit range, malformed numbers,
wrong argument counts and division by zero raise errors tagged with the
command and a 400 status.

`handle_request(method, body, keep_alive=True)` turns those errors into a
`Response` whose body is `Error (<command>): <message>` followed by a
"Detailed error diagnostic" block. A method other than POST gives a 400
reply; any other unexpected failure gives a 500. The `error-quit` command
makes `handle_request` raise `RuntimeError` instead of replying.

## The server

```
leafkit-server 0.0.0.0 8080
```

The server binds the address and port, prints where it listens, accepts a
single client and answers its POST requests, whose bodies (at most 1024
bytes, plain or chunked) are calculator commands. From another terminal:

```
curl localhost:8080 -d "sum 0 1 2 3"
curl localhost:8080 -d "div 1 0"
curl localhost:8080 -X DELETE -d ""
curl localhost:8080 -d "error-quit"
```

The session ends when the client closes the connection or a reply does not
keep it alive, and the command exits with status 0. `error-quit`, a
malformed request or a network failure end the session with a report on
standard error naming the operation that failed. Wrong arguments print the
usage and exit with -1.

## The task runner

```
leafkit-tasks [--count N] [--seed S]
```

Runs N tasks (42 by default) on worker threads; each fails one time in
four. Every success prints `Success!` to standard output; every failure
prints the thread id and the two values it carried to standard error.
`--seed` makes the run repeatable.

## Limits

The server handles exactly one client and then stops; it does not keep
listening for further connections or serve clients in parallel.