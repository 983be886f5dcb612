"""
Package logging setup.

Modules log through logging.getLogger(__name__) so everything hangs off
the 'simplesheets' logger.  configure_logging() is called from init() and
only touches that package logger, the root logger belongs to the
application.
"""
import logging
import os

PACKAGE_LOGGER = "simplesheets"

_DEV_ENVIRONMENTS = ("dev", "test")
_DEV_FORMAT = "%(asctime)s %(levelname)s [simplesheets] %(message)s"

class _ContextFormatter(logging.Formatter):
    """
    Appends the structured extra= fields to the message so they show up
    when reading a terminal.  Fields are whatever isn't a standard
    LogRecord attribute.
    """
    _STANDARD = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = {k: v for k, v in vars(record).items() if k not in self._STANDARD}
        if extras:
            base += " " + " ".join(f"{k}={v!r}" for k, v in extras.items())
        return base

class _ForwardHandler(logging.Handler):
    """Hands records to a caller supplied logger."""
    def __init__(self, target: logging.Logger) -> None:
        super().__init__()
        self.target = target

    def emit(self, record: logging.LogRecord) -> None:
        if self.target.isEnabledFor(record.levelno):
            self.target.handle(record)

def is_dev(environment: str) -> bool:
    return str(environment).lower() in _DEV_ENVIRONMENTS

def resolve_level(environment: str, level: int|str|None = None) -> int:
    """
    Explicit level wins, then the LOG_LEVEL env var, then DEBUG for
    dev/test and INFO for everything else.
    """
    v = level if level is not None else os.environ.get("LOG_LEVEL")
    if v is None or v == "":
        return logging.DEBUG if is_dev(environment) else logging.INFO
    if isinstance(v, int):
        return v
    resolved = logging.getLevelName(str(v).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Invalid log level: {v}")
    return resolved

def configure_logging(environment: str,
                      level: int|str|None = None,
                      logger: logging.Logger|None = None) -> logging.Logger:
    """
    Configure the package logger for the given environment and return it.
    If the caller hands in their own logger package records are forwarded
    to it instead of getting a handler of their own.
    """
    pkg = logging.getLogger(PACKAGE_LOGGER)
    pkg.setLevel(resolve_level(environment, level))
    if logger is not None and logger is not pkg:
        # route our records through the caller's handlers
        for h in list(pkg.handlers):
            if getattr(h, "_simplesheets", False) or isinstance(h, _ForwardHandler):
                pkg.removeHandler(h)
        pkg.propagate = False
        pkg.addHandler(_ForwardHandler(logger))
        return pkg

    pkg.propagate = True
    for h in list(pkg.handlers):
        if isinstance(h, _ForwardHandler):
            pkg.removeHandler(h)
    has_ours = any(getattr(h, "_simplesheets", False) for h in pkg.handlers)
    if is_dev(environment) and not has_ours:
        handler = logging.StreamHandler()
        handler.setFormatter(_ContextFormatter(_DEV_FORMAT))
        handler._simplesheets = True
        pkg.addHandler(handler)
    elif not is_dev(environment):
        # prod leaves output to whatever the application configured
        for h in list(pkg.handlers):
            if getattr(h, "_simplesheets", False):
                pkg.removeHandler(h)
    return pkg
