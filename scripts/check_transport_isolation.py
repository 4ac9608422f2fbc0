#!/usr/bin/env python3
"""Transport isolation validation script.

Enforces the architectural rule that core/ and types/ must remain independent
of any concrete HTTP library. The failover core talks to transports only
through the protocols in types/; the aiohttp transport in utils/ may only be
imported lazily (inside a function) when no transport was injected.

This script scans for:
- Any import of aiohttp (or another HTTP client library)
- Module-level imports of env_failover.utils.http_client

Exit codes:
    0: No violations found (clean)
    1: Violations detected (architectural rule broken)
"""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import Final

# ANSI color codes for terminal output
RED: Final[str] = "\033[91m"
GREEN: Final[str] = "\033[92m"
YELLOW: Final[str] = "\033[93m"
RESET: Final[str] = "\033[0m"

# Directories that must remain transport-agnostic
PROTECTED_DIRS: Final[tuple[str, ...]] = ("core", "types")

# Any import of an HTTP client library, at any indentation
HTTP_LIBRARY_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^\s*(?:import|from)\s+(?:aiohttp|httpx|requests|urllib3)\b"
)

# Module-level import of the concrete transport (lazy imports are indented)
TRANSPORT_MODULE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:import|from)\s+env_failover\.utils\.http_client\b"
)


def check_file(file_path: Path) -> list[tuple[int, str]]:
    """Check a single Python file for transport isolation violations.

    Args:
        file_path: Path to the Python file to check.

    Returns:
        List of (line_number, violation_description) tuples.
        Empty list if no violations found.
    """
    violations: list[tuple[int, str]] = []

    try:
        lines = file_path.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        print(f"{YELLOW}Warning: Could not read {file_path}: {e}{RESET}", file=sys.stderr)
        return violations

    for line_num, line in enumerate(lines, start=1):
        if HTTP_LIBRARY_PATTERN.search(line):
            violations.append((line_num, f"HTTP library import: {line.strip()}"))

        if TRANSPORT_MODULE_PATTERN.search(line):
            violations.append((line_num, f"Module-level transport import: {line.strip()}"))

    return violations


def scan_directory(base_path: Path, protected_dir: str) -> dict[Path, list[tuple[int, str]]]:
    """Scan a protected directory for violations.

    Args:
        base_path: Root path of the env_failover package.
        protected_dir: Name of protected directory (core or types).

    Returns:
        Dictionary mapping file paths to their violations.
    """
    dir_path = base_path / protected_dir
    if not dir_path.exists():
        print(
            f"{YELLOW}Warning: Protected directory {dir_path} does not exist{RESET}",
            file=sys.stderr,
        )
        return {}

    violations_by_file: dict[Path, list[tuple[int, str]]] = {}
    for py_file in dir_path.rglob("*.py"):
        if "__pycache__" in py_file.parts:
            continue

        file_violations = check_file(py_file)
        if file_violations:
            violations_by_file[py_file] = file_violations

    return violations_by_file


def main() -> int:
    """Main entry point for transport isolation check.

    Returns:
        Exit code: 0 if no violations, 1 if violations found.
    """
    project_root = Path(__file__).parent.parent
    src_path = project_root / "src" / "env_failover"

    if not src_path.exists():
        print(f"{RED}Error: Could not find src/env_failover directory{RESET}", file=sys.stderr)
        return 1

    print("Checking transport isolation in core and types modules...")
    print(f"Scanning: {src_path}\n")

    all_violations: dict[Path, list[tuple[int, str]]] = {}
    for protected_dir in PROTECTED_DIRS:
        all_violations.update(scan_directory(src_path, protected_dir))

    if not all_violations:
        print(f"{GREEN}✓ No transport isolation violations found!{RESET}")
        return 0

    total_violations = sum(len(v) for v in all_violations.values())
    print(f"{RED}✗ Found {total_violations} transport isolation violations:{RESET}\n")

    for file_path, violations in sorted(all_violations.items()):
        try:
            rel_path = file_path.relative_to(project_root)
        except ValueError:
            rel_path = file_path

        print(f"{RED}{rel_path}{RESET}")
        for line_num, description in violations:
            print(f"  {line_num}: {description}")
        print()

    print(f"{RED}Transport isolation check failed!{RESET}")
    print(
        "\nCore and types modules must not depend on a concrete HTTP library."
        "\nInject a transport or import utils.http_client lazily inside a function."
    )
    return 1


if __name__ == "__main__":
    sys.exit(main())
