from __future__ import annotations
import logging
import functools
import inspect
from typing import Type, Callable, Any

class S3PrefixError(Exception): pass
class ConfigError(S3PrefixError): pass
class S3ListError(S3PrefixError): pass

def setup_logging(level: int = logging.INFO, logfile: str | None = None) -> None:
    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):  # avoid duplicate handlers
        root.removeHandler(h)
    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    stream = logging.StreamHandler()
    stream.setFormatter(fmt)
    root.addHandler(stream)
    if logfile:
        fh = logging.FileHandler(logfile)
        fh.setFormatter(fmt)
        root.addHandler(fh)
    # boto noise stays at WARNING even with --verbose
    logging.getLogger("botocore").setLevel(max(level, logging.WARNING))
    logging.getLogger("boto3").setLevel(max(level, logging.WARNING))

def log_and_reraise(exception_cls: Type[Exception] = S3PrefixError):
    """
    Re-raise anything except our own errors as `exception_cls`.
    Generator functions are wrapped as generators, so errors raised while iterating are converted too.
    """
    def deco(func: Callable[..., Any]):
        if inspect.isgeneratorfunction(func):
            @functools.wraps(func)
            def gen_wrapper(*a, **kw):
                try:
                    yield from func(*a, **kw)
                except S3PrefixError:
                    raise
                except Exception as e:
                    logging.getLogger(func.__module__).error("%s failed: %s", func.__name__, e)
                    raise exception_cls(f"{func.__name__} failed: {e}") from e
            return gen_wrapper

        @functools.wraps(func)
        def wrapper(*a, **kw):
            try:
                return func(*a, **kw)
            except S3PrefixError:
                raise
            except Exception as e:
                logging.getLogger(func.__module__).error("%s failed: %s", func.__name__, e)
                raise exception_cls(f"{func.__name__} failed: {e}") from e
        return wrapper
    return deco
