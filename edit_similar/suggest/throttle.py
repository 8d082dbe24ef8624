"""
Display throttle: show suggestions once every N qualifying edits.

State lives on a ``SessionState`` owned by the host and passed in on every
call. Concurrent requests in one session may race on the counter; the worst
case is one extra shown or suppressed message.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class SessionState:
    """Per-session state owned by the host.

    Attributes:
        saved:   ``True`` between a qualifying save and the next page output.
        counter: Throttle countdown; ``None`` until the first check.
    """

    saved:   bool = False
    counter: Optional[int] = None


class DisplayThrottle:
    """Counter-based throttle.

    Args:
        start_value: Show on the first check and then every
            ``start_value``-th check; 1 shows every time.
    """

    def __init__(self, start_value: int = 1) -> None:
        if start_value < 1:
            raise ValueError(f"start_value must be >= 1, got {start_value}")
        self.start_value = start_value

    def should_display(self, session: SessionState) -> bool:
        """Advance the session's counter and report whether to show now."""
        if session.counter is None:
            session.counter = self.start_value
            return True

        session.counter -= 1
        if session.counter > 0:
            return False

        session.counter = self.start_value
        return True
