#!/usr/bin/env python3
"""
jXSS CLI - find reflected XSS in inline JavaScript.

Usage:
    jxss -l urls.txt -c CANARY [options]

Examples:
    jxss -l urls.txt -c jxss1337
    jxss -l urls.txt -c jxss1337 --config jxss.yaml -f json -o results.json
"""

import asyncio
import signal
import sys

import click
from rich.console import Console
from rich.panel import Panel

from jxss import __version__
from jxss.config import generate_example_config, load_config
from jxss.errors import ConfigError
from jxss.reporter import write_output
from jxss.scanner import JXSSScanner, ScanSummary
from jxss.utils.http import read_urls
from jxss.utils.logging import setup_logging, shutdown_logging

# Banner and status go to stderr so stdout only carries the report.
console = Console(stderr=True)


def print_banner():
    """Print the jXSS banner."""
    banner = r"""
     ______  ___  _________ _________
    |__\   \/  / /   _____//   _____/
    |  |\     /  \_____  \ \_____  \
    |  |/     \  /        \/        \
/\__|  /___/\  \/_______  /_______  /
\______|     \_/        \/        \/
    """
    console.print(Panel(banner, title=f"[bold red]jXSS v{__version__}[/]", subtitle="Reflected XSS in inline JavaScript"))


async def run_scan(scanner: JXSSScanner, urls: list[str]) -> ScanSummary:
    """Run the scanner with SIGINT/SIGTERM wired to cancellation."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, scanner.cancel)
        except (NotImplementedError, RuntimeError):
            pass
    return await scanner.scan(urls)


@click.command()
@click.option("-l", "--list", "list_file", type=click.Path(), help="File containing list of URLs")
@click.option("-c", "--canary", help="Custom canary string")
@click.option("--concurrency", type=int, help="Number of concurrent workers [default: 5]")
@click.option("--config", "config_file", type=click.Path(), help="YAML configuration file")
@click.option("-f", "--format", "output_format",
              type=click.Choice(["text", "json", "csv", "html"], case_sensitive=False),
              help="Output format [default: text]")
@click.option("-o", "--output", "output_file", help="File to write output")
@click.option("-p", "--proxy", "proxies", multiple=True, help="Proxy URL (can be used multiple times)")
@click.option("--rate-limit", type=float, help="Requests per second [default: 5]")
@click.option("--empty-only", is_flag=True, help="Only test assignments of empty string literals")
@click.option("--insecure", is_flag=True, help="Skip TLS certificate verification")
@click.option("--json-logs", is_flag=True, help="Log as JSON lines")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@click.option("-s", "--silent", is_flag=True, help="Do not print the banner")
@click.option("--example-config", is_flag=True, help="Print an example config file and exit")
@click.version_option(version=__version__)
def cli(list_file, canary, concurrency, config_file, output_format, output_file,
        proxies, rate_limit, empty_only, insecure, json_logs, verbose, silent, example_config):
    """jXSS - Find reflected XSS in inline JavaScript."""
    if example_config:
        click.echo(generate_example_config(), nl=False)
        return

    if not list_file:
        raise click.UsageError("--list <file> is required")

    if not silent:
        print_banner()

    logger = setup_logging(verbose=verbose, json_logs=json_logs)

    try:
        cfg = load_config(config_file)
        if canary:
            cfg.canary = canary
        if concurrency is not None:
            cfg.concurrency = concurrency
        if rate_limit is not None:
            cfg.rate_limit = rate_limit
        if proxies:
            cfg.proxies = [*cfg.proxies, *proxies]
        if empty_only:
            cfg.empty_literals_only = True
        if insecure:
            cfg.verify_ssl = False
        if output_format:
            cfg.output.format = output_format.lower()
        if output_file:
            cfg.output.file = output_file
        cfg.validate()
        if not cfg.canary:
            raise ConfigError("a canary is required (--canary or 'canary' in config)")
        urls = read_urls(list_file)
    except ConfigError as e:
        logger.error("Error loading config: %s", e)
        shutdown_logging()
        sys.exit(1)

    scanner = JXSSScanner(cfg, logger=logger)
    summary = asyncio.run(run_scan(scanner, urls))

    try:
        write_output(summary.findings, cfg.output.format, cfg.output.file)
    except OSError as e:
        logger.error("Error writing output: %s", e)

    logger.info(
        "Processing complete. Total URLs processed: %d", summary.urls_processed,
        extra={"findings": len(summary.findings), "errors": summary.errors},
    )
    shutdown_logging()


def main():
    """Main entry point."""
    return cli()


if __name__ == "__main__":
    main()
