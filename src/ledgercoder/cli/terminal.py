"""Terminal adapter used by the coding session."""

import click


class ClickTerminal:
    """Writes to stdout and reads answers with click prompts."""

    def echo(self, message: str = "") -> None:
        click.echo(message)

    def prompt(self, text: str) -> str:
        return click.prompt(text, default="", show_default=False)
