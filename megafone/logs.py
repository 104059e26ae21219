"""Reading back the generation log (``megafone logs``)."""

from __future__ import annotations

import time
from collections import deque
from pathlib import Path
from typing import Callable, List, Optional, TextIO


def tail_lines(path: Path, n: int) -> List[str]:
    """Last ``n`` lines of the file (all lines when ``n`` <= 0)."""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        if n <= 0:
            return f.readlines()
        return list(deque(f, maxlen=n))


def follow(path: Path, out: TextIO, poll_interval: float = 0.5,
           should_stop: Optional[Callable[[], bool]] = None) -> None:
    """Stream lines appended after the current end of file, like ``tail -f``."""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        f.seek(0, 2)
        while not (should_stop and should_stop()):
            line = f.readline()
            if line:
                out.write(line)
                out.flush()
                continue
            time.sleep(poll_interval)


def show_logs(path: Path, out: TextIO, tail: int = 50, follow_output: bool = False,
              should_stop: Optional[Callable[[], bool]] = None) -> None:
    if not path.exists():
        out.write("No logs found yet. Generate a post to create logs.\n")
        return

    lines = tail_lines(path, tail)
    if not lines and not follow_output:
        out.write("Log file is empty.\n")
        return
    out.writelines(lines)

    if follow_output:
        follow(path, out, should_stop=should_stop)
