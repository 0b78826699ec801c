#!/usr/bin/env python3
"""
Photo Organizer CLI

Copies photos from an export directory into a <year>/<Month>/<extension>
tree, dating each file from sidecar metadata, EXIF, or file times.
"""

import sys
import logging
import click
from pathlib import Path
from colorama import init, Fore, Style

from photo_sorter import Config, PhotoOrganizer, RunReporter

# Initialize colorama for cross-platform colored output
init()

_file_handler = None


def setup_logging(level: str = 'INFO', log_dir: Path = None):
    """Set up logging configuration."""
    global _file_handler
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.addHandler(console_handler)

    # File handler if log_dir provided
    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        if _file_handler is not None:
            root_logger.removeHandler(_file_handler)
        _file_handler = logging.FileHandler(log_dir / 'photo_sorter.log')
        _file_handler.setFormatter(formatter)
        root_logger.addHandler(_file_handler)

    # Reduce noise from libraries
    logging.getLogger('exifread').setLevel(logging.WARNING)


def print_header(title: str):
    """Print a formatted header."""
    click.echo(f"\n{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}")
    click.echo(f"{Fore.CYAN}{title.center(60)}{Style.RESET_ALL}")
    click.echo(f"{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}\n")
    sys.stdout.flush()

def print_success(message: str):
    """Print success message."""
    click.echo(f"{Fore.GREEN}OK: {message}{Style.RESET_ALL}")
    sys.stdout.flush()

def print_warning(message: str):
    """Print warning message."""
    click.echo(f"{Fore.YELLOW}WARN: {message}{Style.RESET_ALL}")
    sys.stdout.flush()

def print_error(message: str):
    """Print error message."""
    click.echo(f"{Fore.RED}ERROR: {message}{Style.RESET_ALL}")
    sys.stdout.flush()

def print_info(message: str):
    """Print info message."""
    click.echo(f"{Fore.BLUE}INFO: {message}{Style.RESET_ALL}")
    sys.stdout.flush()


@click.command()
@click.option('--input', '-i', 'input_dir', required=True,
              help='The input directory containing photos and metadata files')
@click.option('--output', '-o', 'output_dir', required=True,
              help='The output directory where organized photos will be stored')
@click.option('--config', '-c', help='Path to configuration file')
@click.option('--log-level', '-l', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Logging level (overrides config)')
@click.option('--workers', '-w', type=int, default=None,
              help='Number of parallel workers (overrides config)')
@click.option('--dry-run/--no-dry-run', default=None, help='Perform dry run (override config)')
@click.option('--report', '-r', help='Save report to file (.json for machine-readable)')
@click.option('--progress/--no-progress', default=True, help='Show a progress bar')
def cli(input_dir, output_dir, config, log_level, workers, dry_run, report, progress):
    """Organize photos into year/month/extension folders by capture time."""

    try:
        config_obj = Config(config)
    except Exception as e:
        print_error(f"Failed to load configuration: {e}")
        sys.exit(1)

    if workers is not None:
        config_obj.set('organizer.workers', workers)
    if log_level is not None:
        config_obj.set('logging.level', log_level)

    setup_logging(config_obj.get_log_level(), config_obj.get_log_dir())
    logger = logging.getLogger(__name__)

    errors = config_obj.validate_config()
    if errors:
        print_error("Configuration validation failed:")
        for error in errors:
            click.echo(f"  - {error}")
        sys.exit(1)

    if not Path(input_dir).exists():
        logger.error(f"Input directory does not exist: {input_dir}")
        print_error(f"Input directory does not exist: {input_dir}")
        sys.exit(1)

    if not Path(output_dir).exists():
        logger.error(f"Output directory does not exist: {output_dir}")
        print_error(f"Output directory does not exist: {output_dir}")
        sys.exit(1)

    print_header("PHOTO ORGANIZER")

    organizer = PhotoOrganizer(config_obj)
    reporter = RunReporter()

    results = organizer.organize(Path(input_dir), Path(output_dir), dry_run, progress)

    if results['dry_run']:
        print_info("DRY RUN completed - no files were actually copied")

    stats = results['statistics']
    if results['errors']:
        print_warning(f"Completed with {len(results['errors'])} errors:")
        for error in results['errors'][:5]:  # Show first 5 errors
            click.echo(f"  - {error}")
        if len(results['errors']) > 5:
            click.echo(f"  - ... and {len(results['errors']) - 5} more errors")

    print_success(f"Organized {stats['files_placed']:,} of {stats['total_files']:,} files")

    if report:
        try:
            report_file = reporter.save_report(results, report)
            print_success(f"Report saved: {report_file}")
        except OSError as e:
            print_warning(f"Could not save report: {e}")

    click.echo("\n" + reporter.generate_summary_report(results))
    sys.stdout.flush()


if __name__ == '__main__':
    cli()
