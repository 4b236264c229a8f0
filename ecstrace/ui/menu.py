"""
Numbered selection menus for clusters and tasks.

Used when --cluster or --task is not given on the command line.
"""

from __future__ import annotations
from typing import Generic, List, Optional, TypeVar
from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

T = TypeVar('T')


class MenuItem(Generic[T]):
    """Represents a single menu item."""

    def __init__(self, label: str, value: T, description: Optional[str] = None):
        """
        Initialize a menu item.

        Args:
            label: Display text for the menu item
            value: Value returned when this item is selected
            description: Optional detail shown dimmed after the label
        """
        self.label = label
        self.value = value
        self.description = description


class Menu:
    """Menu display and selection handler."""

    def __init__(self, console: Optional[Console] = None):
        """
        Initialize menu handler.

        Args:
            console: Rich console instance (creates new one if not provided)
        """
        self.console = console or Console()

    def show(
        self,
        prompt: str,
        items: List[MenuItem[T]],
        default: Optional[int] = None,
    ) -> T:
        """
        Display a numbered menu and get user selection.

        Invalid input is reported and the question asked again.

        Args:
            prompt: Question or instruction to display
            items: List of menu items to choose from
            default: Default selection index (1-based)

        Returns:
            Selected item value

        Raises:
            ValueError: If menu is empty
        """
        if not items:
            raise ValueError("Menu must have at least one item")

        self.console.print(f"\n[bold green]{escape(prompt)}[/bold green]")

        for idx, item in enumerate(items, start=1):
            line = f"[#00bfff]\\[{idx}][/#00bfff] [#808080]{escape(item.label)}[/#808080]"
            if item.description:
                line += f" - [dim]{escape(item.description)}[/dim]"
            self.console.print(line)

        default_str = str(default) if default else None
        while True:
            choice_str = Prompt.ask(
                "[bold green]Enter a number[/bold green]",
                console=self.console,
                default=default_str,
                show_default=bool(default_str)
            )
            try:
                choice = int(choice_str)
            except (TypeError, ValueError):
                self.console.print("[red]Please enter a valid number[/red]")
                continue

            if 1 <= choice <= len(items):
                chosen = items[choice - 1]
                self.console.print(f"[yellow]You chose: {escape(chosen.label)}[/yellow]")
                return chosen.value

            self.console.print(
                f"[red]Please enter a number between 1 and {len(items)}[/red]"
            )

    def show_simple(
        self,
        prompt: str,
        choices: List[str],
        default: Optional[int] = None
    ) -> str:
        """
        Display a simple menu with string choices.

        Args:
            prompt: Question or instruction to display
            choices: List of string choices
            default: Default selection index (1-based)

        Returns:
            Selected choice string
        """
        items = [MenuItem(label=choice, value=choice) for choice in choices]
        return self.show(prompt, items, default)


def create_menu(console: Optional[Console] = None) -> Menu:
    """
    Factory function to create a Menu instance.

    Args:
        console: Optional Rich console instance

    Returns:
        Menu instance
    """
    return Menu(console)
