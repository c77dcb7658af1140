from rich.console import Console
from rich.markup import escape

console = Console(emoji=False)
err_console = Console(stderr=True, emoji=False)


class UX:
    """
    Centralized console output for the CLI.
    """

    @staticmethod
    def print_progress(message: str):
        console.print(f"[green]{escape(message)}[/green]")

    @staticmethod
    def print_line(message: str):
        console.print(escape(message), highlight=False, soft_wrap=True)

    @staticmethod
    def print_warning(message: str):
        console.print(f"[yellow]⚠️  {escape(message)}[/yellow]")

    @staticmethod
    def print_stderr(message: str):
        err_console.print(escape(message), style="red", highlight=False, soft_wrap=True)
