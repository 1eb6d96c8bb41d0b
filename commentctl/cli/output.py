"""Render command outcomes to the terminal; the only place comment commands exit."""

from __future__ import annotations

import typer

from commentctl.comments.outcome import LineKind, Outcome


def _label(text: str, color: str, use_color: bool) -> str:
    return typer.style(text, fg=color, bold=True) if use_color else text


def render_outcome(outcome: Outcome, *, color: bool = True) -> None:
    """Print outcome lines to stdout and its error to stderr.

    Raises:
        typer.Exit: when the outcome carries a non-zero exit code.
    """
    for item in outcome.lines:
        if item.kind is LineKind.SUCCESS:
            typer.echo(f"{_label('Success:', 'green', color)} {item.text}")
        elif item.kind is LineKind.HEADER:
            typer.echo(typer.style(item.text, fg="yellow") if color else item.text)
        else:
            typer.echo(item.text)
    if outcome.error is not None:
        typer.echo(f"{_label('Error:', 'red', color)} {outcome.error}", err=True)
    if outcome.exit_code:
        raise typer.Exit(outcome.exit_code)
