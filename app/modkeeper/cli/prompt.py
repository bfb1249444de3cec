"""Terminal implementation of the Prompter used by interactive commands."""

from collections.abc import Sequence

import typer

from modkeeper.utils.formatting import console, print_warning


class TerminalPrompter:
    """Asks questions on the terminal with typer prompts."""

    def ask_yes_no(self, question: str, default: bool = False) -> bool:
        return typer.confirm(question, default=default)

    def ask_text(self, prompt: str, default: str | None = None) -> str:
        # An empty default lets the user just press Enter
        value: str = typer.prompt(
            prompt,
            default=default if default is not None else "",
            show_default=bool(default),
        )
        return value

    def ask_choice(self, prompt: str, options: Sequence[str]) -> int:
        if not options:
            msg = "No options to choose from"
            raise ValueError(msg)

        for index, option in enumerate(options, start=1):
            console.print(f"  [info]{index}[/] {option}")
        while True:
            answer: int = typer.prompt(prompt, type=int)
            if 1 <= answer <= len(options):
                return answer - 1
            print_warning(f"Please enter a number between 1 and {len(options)}.")
