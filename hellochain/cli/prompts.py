"""Console input providers for stages that ask the operator for numbers."""

from __future__ import annotations

from typing import Callable

import click

from hellochain.utils import Number, parse_number


def console_number(question: str, *, err: bool = False) -> Number:
    """
    Ask ``question`` on the console and coerce the answer to a number.

    The read blocks until a line is entered. Non-numeric answers become ``NaN``
    instead of re-prompting. With ``err`` the question goes to stderr so stdout
    stays machine-readable.
    """
    answer = click.prompt(
        question, default="", show_default=False, type=str, prompt_suffix=" ", err=err
    )
    return parse_number(answer)


def fixed_number(value: str) -> Callable[[str], Number]:
    """Return a provider that answers every question with ``value`` without console I/O."""
    parsed = parse_number(value)

    def _provider(question: str) -> Number:
        del question
        return parsed

    return _provider
