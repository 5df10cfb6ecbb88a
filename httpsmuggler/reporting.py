"""
Reading target lists and presenting findings.

Findings are printed as they arrive, written one per line to the output
file, and summarised once the scan is done.
"""

from typing import List, Sequence

from colorama import Fore, Style
from rich.console import Console

from httpsmuggler.models import DetectionResult, escape_header


def read_targets(path: str) -> List[str]:
    """Read a newline-delimited target list.

    Blank lines and lines starting with ``#`` are ignored.

    Raises:
        OSError: If the file cannot be opened
    """
    targets = []
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#'):
                targets.append(line)
    return targets


def write_results(path: str, results: Sequence[DetectionResult]) -> None:
    """Write findings as ``URL | SmugglingType | Technique | Details`` lines.

    Raises:
        OSError: If the file cannot be written
    """
    with open(path, 'w', encoding='utf-8') as f:
        for result in results:
            f.write(result.to_line() + "\n")


def print_result(result: DetectionResult) -> None:
    """Print one finding as a small colored tree."""
    branch = f"  {Fore.GREEN}├─{Style.RESET_ALL}"
    print(f"\n{Fore.RED}[POTENTIAL VULNERABILITY]{Style.RESET_ALL} {result.url}")
    print(f"{branch} Type: {Fore.YELLOW}{result.smuggling_type}{Style.RESET_ALL} ({result.smuggling_type.desc})")
    print(f"{branch} Technique: {result.technique}")
    if result.time_diff > 0:
        print(f"{branch} Time Difference: {result.time_diff:.3f}s")
    print(f"  {Fore.GREEN}└─{Style.RESET_ALL} Details: {escape_header(result.details)}")


def print_summary(console: Console, results: Sequence[DetectionResult]) -> None:
    """Print the end-of-scan summary."""
    console.print(f"\n[bold cyan][*][/] Scan complete! Found {len(results)} potential vulnerability(ies)")
    if results:
        console.print("\n[bold yellow]Note:[/] These are potential vulnerabilities that require manual verification.")
        console.print("   Use tools like Burp Suite's HTTP Request Smuggler for confirmation.")
