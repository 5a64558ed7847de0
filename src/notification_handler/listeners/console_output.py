"""Console output listener rendering events with Rich."""

from typing import Dict, Optional

from rich.console import Console

from ..events.event import Event, EventLevel
from ..models.config import ConsoleConfig
from .base import Listener


# Channel style per level; INFO prints unstyled.
LEVEL_STYLES: Dict[EventLevel, Optional[str]] = {
    EventLevel.DEBUG: "dim",
    EventLevel.INFO: None,
    EventLevel.WARNING: "yellow",
    EventLevel.ERROR: "red",
    EventLevel.EXCEPTION: "bold red",
}


class ConsoleOutputListener(Listener):
    """Writes every received event to a Rich console."""

    def __init__(self, console: Optional[Console] = None, config: Optional[ConsoleConfig] = None):
        self.config = config or ConsoleConfig()
        self.console = console or Console(stderr=self.config.stderr)

    def render(self, event: Event) -> str:
        """Text written for the event."""
        if self.config.show_data:
            return str(event)
        return f"notification_handler.{event.kind.value}: {event.id} (Level {int(event.level)})"

    async def receive(self, event: Event) -> None:
        text = self.render(event)

        if event.level not in LEVEL_STYLES:
            # Unmapped levels go to the generic log channel
            self.console.log(text, markup=False, highlight=False)
            return

        self.console.print(text, style=LEVEL_STYLES[event.level], markup=False, highlight=False)
