"""
Terminal feed for simulation status messages.

Every line is prefixed with the subsystem that produced it and kept in
``lines`` so a run can be inspected after the fact.
"""

from typing import List, Optional


class TerminalFeed:
    """Manages terminal output for status messages."""

    def __init__(self, echo: bool = True, max_lines: Optional[int] = None):
        self.echo = echo
        self.max_lines = max_lines
        self.lines: List[str] = []
        self.banner_printed = False

    def _emit(self, prefix: str, text: str):
        line = f"{prefix} | {text}"
        self.lines.append(line)
        if self.max_lines is not None and len(self.lines) > self.max_lines:
            self.lines.pop(0)
        if self.echo:
            print(line, flush=True)

    def banner(self, title: str):
        if self.echo:
            print("\n" + "=" * 70)
            print(title)
            print("=" * 70)
        self.banner_printed = True

    def section(self, title: str):
        if self.echo:
            print(f"\n{title}")

    def raw(self, text: str):
        """Unprefixed output (tables). Not recorded."""
        if self.echo:
            print(text)

    def announce_clearance(self, text: str):
        self._emit("ATC", text)

    def runway_status(self, busy: bool, reason: str):
        state = "BUSY" if busy else "FREE"
        self._emit("ATC", f"Runway {state} → {reason}")

    def gate_event(self, text: str):
        self._emit("GATE", text)

    def arrival_event(self, text: str):
        self._emit("ARRIVAL", text)

    def departure_event(self, text: str):
        self._emit("DEPARTURE", text)

    def security_event(self, text: str):
        self._emit("SECURITY", text)

    def passenger_event(self, text: str):
        self._emit("PASSENGER", text)

    def cargo_event(self, text: str):
        self._emit("CARGO", text)

    def status_update(self, text: str):
        """General status updates for terminal."""
        self._emit("STATUS", text)

    def error(self, text: str):
        self._emit("ERROR", text)

    def matching(self, fragment: str) -> List[str]:
        return [line for line in self.lines if fragment in line]
