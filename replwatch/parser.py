"""Parser for SHOW ENGINE INNODB STATUS output."""

import re
from dataclasses import dataclass
from typing import Optional


# Known section headers of the InnoDB monitor output
INNODB_SECTIONS = [
    "BACKGROUND THREAD",
    "SEMAPHORES",
    "LATEST FOREIGN KEY ERROR",
    "LATEST DETECTED DEADLOCK",
    "TRANSACTIONS",
    "FILE I/O",
    "INSERT BUFFER AND ADAPTIVE HASH INDEX",
    "LOG",
    "BUFFER POOL AND MEMORY",
    "INDIVIDUAL BUFFER POOL INFO",
    "ROW OPERATIONS",
    "END OF INNODB MONITOR OUTPUT",
]

SEMAPHORES_SECTION = "SEMAPHORES"

MUTEX_SPIN_PATTERN = re.compile(r"^Mutex spin waits\s+(\d+),\s+rounds\s+(\d+),\s+OS waits\s+(\d+)")

_SECTION_HEADERS = frozenset(INNODB_SECTIONS)


@dataclass(frozen=True)
class InnoDBCounters:
    """Mutex counters from the SEMAPHORES section."""
    mutex_spin_waits: int = 0
    mutex_spin_rounds: int = 0
    mutex_os_waits: int = 0


def section_header(line: str) -> Optional[str]:
    """Return the section name if the whole line is a known header, else None."""
    candidate = line.strip()
    if candidate in _SECTION_HEADERS:
        return candidate
    return None


def parse_innodb_counters(innodb_text: str) -> InnoDBCounters:
    """
    Extract mutex spin counters from an InnoDB status dump.

    Only lines inside the SEMAPHORES section are mined; if the mutex line
    shows up more than once there, the last one wins. Missing section or
    missing line yields all-zero counters.
    """
    counters = InnoDBCounters()
    current_section = ""

    for line in innodb_text.splitlines():
        header = section_header(line)
        if header is not None:
            current_section = header
            continue

        if current_section != SEMAPHORES_SECTION:
            continue

        match = MUTEX_SPIN_PATTERN.match(line)
        if match:
            counters = InnoDBCounters(
                mutex_spin_waits=int(match.group(1)),
                mutex_spin_rounds=int(match.group(2)),
                mutex_os_waits=int(match.group(3)),
            )

    return counters
