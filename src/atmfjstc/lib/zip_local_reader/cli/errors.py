"""
Utilities for nicely handling errors in the command-line front end.
"""

import sys
import traceback

from typing import ContextManager, List, Callable
from textwrap import dedent, indent
from functools import wraps
from contextlib import contextmanager

from .console import console


class DescriptiveError(RuntimeError):
    """
    An exception class for errors where it is clear from the message what happened and where, and the traceback is
    redundant.

    Only the message of such an error is shown to the user, without the trace or exception type. Do NOT use this in
    the library proper, only in the command-line front end.
    """


@contextmanager
def descriptive_errors(*classes: type) -> ContextManager[None]:
    """
    Use ``with descriptive_errors(Exc1, Exc2, ...): <code>`` to transform all exceptions of a given kind into
    descriptive errors.
    """
    try:
        yield
    except BaseException as e:
        for cls in e.__class__.__mro__:
            if cls in classes:
                exc = DescriptiveError(short_format_exception(e, follow_cause=False, force_descriptive=True))
                exc.__cause__ = e.__cause__

                raise exc

        raise


def pretty_print_exception(exception: BaseException, follow_cause: bool = True):
    """
    Prints an exception on the console.

    There is special handling for `KeyboardInterrupt` and `DescriptiveError`. All other exceptions are
    assumed to be bugs and will show a full stack trace.
    """

    if isinstance(exception, KeyboardInterrupt):
        console.print_warning("Stopped by user")
        return

    if isinstance(exception, DescriptiveError):
        console.print_error(short_format_exception(exception, follow_cause=follow_cause))
        return

    for index, cause in enumerate(_causal_chain(exception, follow_cause=follow_cause)):
        base_indent = '' if index == 0 else '  '

        if index > 0:
            console.print_error("Cause:", minor=True)

        console.print_error(indent(_format_exception_head(cause), base_indent))
        console.print_error(base_indent + "Traceback:", minor=True)
        console.print_error(indent(_format_exception_trace(cause), base_indent + '  '), minor=True)


def short_format_exception(exception: BaseException, follow_cause: bool = True, force_descriptive: bool = False) -> str:
    """
    Presents an exception in a shorter format, e.g. for inclusion into a message.

    For a `DescriptiveError` (or if `force_descriptive` is set), just the message is shown. For other exceptions, the
    class name will be printed too, but not the trace. Exceptions in `__cause__` are followed, so the result may be
    multiline.
    """

    causes = _causal_chain(exception, follow_cause)

    if force_descriptive or isinstance(exception, DescriptiveError):
        head = str(exception)
        if head == '':
            head = exception.__class__.__name__

        return '\n'.join([
            head,
            *(
                indent(short_format_exception(cause, follow_cause=False, force_descriptive=True), '  ')
                for cause in causes[1:]
            )
        ])

    return '\n'.join([
        _format_exception_head(exception),
        *(indent(_format_exception_head(cause), '  ') for cause in causes[1:])
    ])


def _causal_chain(exception: BaseException, follow_cause: bool) -> List[BaseException]:
    result = [exception]

    while follow_cause and exception.__cause__ is not None:
        exception = exception.__cause__
        result.append(exception)

    return result


def _format_exception_head(exception: BaseException) -> str:
    return ''.join(traceback.format_exception_only(exception.__class__, exception)).rstrip()


def _format_exception_trace(exception: BaseException) -> str:
    return dedent(''.join(traceback.format_list(traceback.extract_tb(exception.__traceback__))).rstrip())


def pretty_unhandled(main_method: Callable) -> Callable:
    """
    Decorator for a main method that causes unhandled exceptions to be displayed in a pretty way, after which
    ``sys.exit(-1)`` is called.
    """

    @wraps(main_method)
    def wrapper(*args, **kwargs):
        try:
            return main_method(*args, **kwargs)
        except SystemExit:
            raise
        except KeyboardInterrupt as e:
            pretty_print_exception(e)
            sys.exit(0)
        except BaseException as e:
            pretty_print_exception(e)

        sys.exit(-1)

    return wrapper
