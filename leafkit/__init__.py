"""Error ids, value-or-error results and diagnostics, with a calculator server and task runner."""

__version__ = "0.1.0"