"""
Console abstraction for the command-line front end.

It shows messages of various types (info, warnings, errors) in appropriate colors (where available) and on the
appropriate stream (stdout vs stderr). The abstraction is provided as a singleton(-ish) `Console` instance available
through the `console` property of this module.
"""

import sys

from typing import Optional, Tuple, TextIO
from termcolor import cprint


class Console:
    """
    An abstraction for communicating with the user via the terminal.

    Don't create your own instances of this.
    """

    def print_info(self, message: str, **kwargs) -> 'Console':
        return self.print_message('info', message, **kwargs)

    def print_success(self, message: str, **kwargs) -> 'Console':
        """
        Print a success message, highlighted if the terminal supports colors.
        """
        return self.print_message('success', message, **kwargs)

    def print_warning(self, message: str, **kwargs) -> 'Console':
        """
        Print a warning message. The message will be highlighted in yellow and sent to stderr.
        """
        return self.print_message('warning', message, **kwargs)

    def print_error(self, message: str, **kwargs) -> 'Console':
        """
        Print an error message. The message will be highlighted in red and sent to stderr.
        """
        return self.print_message('error', message, **kwargs)

    def print_message(self, kind: str, message: str, minor: bool = False) -> 'Console':
        """
        Prints a message of a programmatically specified type.

        Args:
            kind: Can be 'info', 'success', 'warning', 'error' with the meanings as described by the respective
                `print_*` methods.
            message: The message to print. Can be multiline.
            minor: Signals that this message is somehow less important than others of its kind (bold removed).

        Returns:
            The console object (to enable a fluent interface)
        """
        props = _PROPS_BY_MSG_TYPE[kind]

        channel = sys.stderr if props.get('channel') == 'stderr' else sys.stdout

        attrs = props.get('attrs', ())
        if minor and ('bold' in attrs):
            attrs = tuple(attr for attr in attrs if attr != 'bold')

        _print_maybe_with_color(message, props.get('color'), attrs, channel)

        return self


def _print_maybe_with_color(
    text: str, color: Optional[str], attrs: Optional[Tuple[str, ...]], channel: TextIO
):
    if (color is None) and (len(attrs or []) == 0):
        print(text, file=channel)
    else:
        cprint(text, color or 'white', attrs=list(attrs), file=channel)


_PROPS_BY_MSG_TYPE = {
    'info': dict(),
    'success': dict(color='green', attrs=('bold',)),
    'warning': dict(color='yellow', attrs=('bold',), channel='stderr'),
    'error': dict(color='red', attrs=('bold',), channel='stderr'),
}


# Singleton
console = Console()
"""The currently active console abstraction."""
