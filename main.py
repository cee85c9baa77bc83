#!/usr/bin/env python3
import os
import sys
from typing import Any

from prompt_toolkit import prompt
from prompt_toolkit.formatted_text import HTML, FormattedText
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.styles import Style
from rich.console import Console
from rich.panel import Panel

from command_processor import CommandProcessor
from common.containers import container
from common.paths import shorten_home
from common.utils import console, logger

# Change events are printed on the console unless another transport is configured
container.config.transport.from_value(os.environ.get("FILEVIEW_TRANSPORT", "console"))

history = InMemoryHistory()
processor = CommandProcessor()


def build_bottom_toolbar() -> FormattedText:
    """Render watcher status for the bottom toolbar."""
    watchers = processor.registry.list_watchers()
    targets = sum(len(watcher.targets) for watcher in watchers)

    segments = [
        ("fg:#00ffff", " Watchers "),
        ("default", f"{len(watchers)}  "),
        ("fg:#ffd166", "Targets "),
        ("default", f"{targets}  "),
        ("fg:#00ffff", "cwd "),
        ("default", shorten_home(os.getcwd())),
    ]
    return FormattedText(segments)


def display_banner() -> None:
    """Display the welcome banner using Rich"""
    console = Console()

    welcome_panel = Panel(
        "\n[bold cyan]FILEVIEW CLI[/bold cyan]\n\n"
        + "[italic green]Browse directories and watch them change[/italic green]\n",
        border_style="bright_blue",
        title="Welcome",
        title_align="center",
        width=80,
    )

    console.print(welcome_panel, justify="center")
    console.print(
        "\nType a path to list it, or a command starting with '/'. Type '/exit' to quit.\n"
    )


def create_keybindings() -> KeyBindings:
    """Create custom key bindings for the prompt"""
    kb = KeyBindings()

    @kb.add("enter")
    def _(event: Any) -> None:
        """Process the input when Enter is pressed"""
        buffer = event.app.current_buffer
        text = buffer.text.strip()

        if text == "/exit":
            console.print("Thank you for using fileview. Goodbye!", style="bold green")
            shutdown()
            sys.exit(0)
        buffer.validate_and_handle()

    @kb.add("c-j")
    def _(event: Any) -> None:
        """Accept the input with Ctrl+J as well"""
        event.current_buffer.validate_and_handle()

    return kb


def shutdown() -> None:
    """Release every native watch handle."""
    stopped = processor.registry.stop()
    logger.info(f"Shutdown stopped {stopped} watcher(s)")


def main() -> None:
    """Main function"""
    display_banner()

    style = Style.from_dict({
        'prompt': '#00ff00 bold',
        'response': '#ffffff',
    })

    bindings = create_keybindings()

    try:
        while True:
            try:
                user_input = prompt(
                    HTML('<ansicyan><b>fileview></b></ansicyan> '),
                    history=history,
                    style=style,
                    key_bindings=bindings,
                    bottom_toolbar=build_bottom_toolbar,
                    wrap_lines=True,
                )

                user_input = user_input.strip()
                if not user_input:
                    continue

                if not user_input.startswith("/"):
                    user_input = f"/ls {user_input}"

                console.print("\n")
                result = processor.process_command(user_input)
                console.print(result)
                console.print("\n")

            except KeyboardInterrupt:
                console.print("\n\nGoodbye!", style="bold green")
                break
            except EOFError:
                console.print("\n\nGoodbye!", style="bold green")
                break
            except Exception as e:
                logger.exception(f"Command failed: {e}")
                console.print(f"\n[red]Error: {str(e)}[/red]\n")
    finally:
        shutdown()


if __name__ == "__main__":
    main()
