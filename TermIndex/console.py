"""Shared rich console for all user-facing output."""
from rich.console import Console
from rich.markup import escape

console = Console(highlight=False)


def warn(message: str) -> None:
    console.print(f"[yellow]Warning: {escape(message)}[/yellow]")


def error(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
