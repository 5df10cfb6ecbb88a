"""
Main CLI entry point for the HTTP request smuggling scanner.

This module provides the command-line interface: it gathers targets, runs
the scanner over them and reports what it found.
"""

import asyncio
import sys
from typing import List, Optional

import click
from colorama import just_fix_windows_console
from rich.console import Console
from rich.markup import escape

from httpsmuggler import __version__
from httpsmuggler.config import ConfigError, load_config
from httpsmuggler.reporting import print_result, print_summary, read_targets, write_results
from httpsmuggler.scanner import Scanner
from httpsmuggler.utils.logging import get_logger, setup_logging

console = Console(highlight=False)

BANNER = f"""
  _   _ _____ _____ ____    ____                              _
 | | | |_   _|_   _|  _ \\  / ___| _ __ ___  _   _  __ _  __ _| | ___ _ __
 | |_| | | |   | | | |_) | \\___ \\| '_ ` _ \\| | | |/ _` |/ _` | |/ _ \\ '__|
 |  _  | | |   | | |  __/   ___) | | | | | | |_| | (_| | (_| | |  __/ |
 |_| |_| |_|   |_| |_|     |____/|_| |_| |_|\\__,_|\\__, |\\__, |_|\\___|_|
                                                  |___/ |___/
    HTTP Request Smuggling Detector v{__version__}
"""

SAFETY_WARNING = (
    "Warning: This tool sends potentially malicious requests.\n"
    "   Only use against systems you have permission to test."
)


@click.command(context_settings={'help_option_names': ['-h', '--help']})
@click.version_option(__version__, '-version', '--version', prog_name='httpsmuggler')
@click.option('-u', '--url', help='Single target URL')
@click.option('-l', '--list', 'url_list', type=click.Path(dir_okay=False), help='File containing list of URLs')
@click.option('-t', '--threads', type=click.IntRange(min=1), help='Number of concurrent targets  [default: 5]')
@click.option('-timeout', '--timeout', type=click.IntRange(min=1), help='Request timeout in seconds  [default: 15]')
@click.option('--threshold', type=click.FloatRange(min=0), help='Seconds of extra delay that flag a timing test  [default: 5]')
@click.option('-v', '--verbose', is_flag=True, help='Verbose output')
@click.option('-o', '--output', type=click.Path(dir_okay=False), help='Output file for results')
@click.option('--config', 'config_file', type=click.Path(dir_okay=False), help='JSON config file')
@click.option('--log-file', type=click.Path(dir_okay=False), help='Log file path')
@click.pass_context
def cli(
    ctx: click.Context,
    url: Optional[str],
    url_list: Optional[str],
    threads: Optional[int],
    timeout: Optional[int],
    threshold: Optional[float],
    verbose: bool,
    output: Optional[str],
    config_file: Optional[str],
    log_file: Optional[str],
):
    """Detect CL.TE, TE.CL and TE.TE HTTP request smuggling.

    Findings are suspicions that need manual confirmation.
    """
    console.print(BANNER, style="bold red", markup=False)

    if not url and not url_list:
        click.echo(ctx.get_help())
        console.print(f"\n[bold yellow]{SAFETY_WARNING}[/]")
        return

    try:
        config = load_config(
            overrides={
                'threads': threads,
                'timeout': timeout,
                'time_threshold': threshold,
                'verbose': verbose or None,
            },
            config_file=config_file,
        )
    except ConfigError as e:
        console.print(f"[bold red]Error loading configuration:[/] {escape(str(e))}")
        sys.exit(1)

    setup_logging(verbose=config.verbose, log_file=log_file)

    urls: List[str] = []
    if url:
        urls.append(url)
    if url_list:
        try:
            urls.extend(read_targets(url_list))
        except OSError as e:
            console.print(f"[bold red]Error opening file:[/] {escape(str(e))}")
            sys.exit(1)

    console.print(f"\n[bold cyan][*][/] Testing {len(urls)} URL(s) for HTTP Request Smuggling...")
    console.print("[bold cyan][*][/] Testing: CL.TE, TE.CL, TE.TE variants")

    scanner = Scanner(config, on_finding=print_result)
    try:
        results = asyncio.run(scanner.scan_urls(urls))
    except KeyboardInterrupt:
        console.print("\n[bold yellow]Scan interrupted by user[/]")
        sys.exit(130)

    print_summary(console, results)

    if output and results:
        try:
            write_results(output, results)
            console.print(f"[bold cyan][*][/] Results saved to {output}")
        except OSError as e:
            console.print(f"[bold red]Error creating output file:[/] {escape(str(e))}")


def main():
    """Main entry point for the CLI."""
    just_fix_windows_console()
    try:
        cli()
    except Exception as e:
        console.print(f"[bold red]Unexpected error:[/] {escape(str(e))}")
        get_logger().exception("Unhandled exception in main")
        sys.exit(1)


if __name__ == '__main__':
    main()
