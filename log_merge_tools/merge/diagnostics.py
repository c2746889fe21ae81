"""Progress and error reporting helpers shared by the merge tools."""

import sys


def log_progress(message, verbose=False):
    """
    Log progress message to stderr if verbose is enabled.

    Args:
        message: Message to log
        verbose: Whether to output the message
    """
    if verbose:
        print(message, file=sys.stderr)


def log_error(message, stream=None):
    """
    Write a diagnostic message to the error stream.

    Args:
        message: Message to log
        stream: Text stream for diagnostics (default: current sys.stderr)
    """
    print(message, file=stream if stream is not None else sys.stderr)
