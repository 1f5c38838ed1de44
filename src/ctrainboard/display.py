"""Rendering collaborator contract and a console implementation."""

import sys
from datetime import datetime
from typing import List, Optional, Protocol, TextIO

from .models import AlertState, Arrival


class BoardDisplay(Protocol):
    def render(self, container_id: str, arrivals: List[Arrival]) -> None:
        ...

    def update_alert(self, alert: AlertState) -> None:
        ...

    def show_reconnecting(self) -> None:
        ...


class ConsoleDisplay:
    """Prints the board to a text stream."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def _write(self, line: str = "") -> None:
        self.stream.write(line + "\n")
        self.stream.flush()

    def render(self, container_id: str, arrivals: List[Arrival]) -> None:
        self._write(f"\n{container_id} ({datetime.now().strftime('%H:%M:%S')}):")
        if not arrivals:
            self._write("  No trains")
            return
        for arrival in arrivals:
            self._write(
                f"  {arrival.route_color.upper():<5} {arrival.destination:<12} "
                f"{arrival.minutes_until_arrival:>3} min  {arrival.boarding_status}"
            )

    def update_alert(self, alert: AlertState) -> None:
        if alert.active:
            self._write(f"\n!! {alert.message}")
        elif alert.message:
            self._write(f"\n{alert.message}")

    def show_reconnecting(self) -> None:
        self._write("\nReconnecting...")
