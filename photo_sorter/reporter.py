"""Reporting and statistics for photo sorting runs."""

import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

SOURCE_LABELS = {
    'sidecar': 'Sidecar metadata',
    'exif': 'EXIF DateTimeOriginal',
    'filesystem': 'File creation/modification time',
}


class RunReporter:
    """Generates reports for an organizing run."""

    def __init__(self, max_errors: int = 20):
        self.max_errors = max_errors

    def generate_summary_report(self, results: Dict[str, Any]) -> str:
        """
        Generate human-readable summary report.

        Args:
            results: Results from PhotoOrganizer.organize

        Returns:
            Formatted summary report
        """
        stats = results.get('statistics', {})
        paths = results.get('paths', {})

        report = []
        report.append("=" * 50)
        report.append("PHOTO ORGANIZER SUMMARY REPORT")
        report.append("=" * 50)
        report.append(f"Completed: {results.get('timestamp', 'Unknown')}")
        report.append(f"Mode: {'DRY RUN' if results.get('dry_run', False) else 'LIVE RUN'}")
        report.append(f"Source: {paths.get('input_dir', 'N/A')}")
        report.append(f"Target: {paths.get('output_dir', 'N/A')}")
        report.append("")

        report.append("=== SIDECAR METADATA ===")
        report.append(f"• Sidecars indexed: {stats.get('sidecars_indexed', 0):,}")
        report.append(f"• Sidecars skipped: {stats.get('sidecars_skipped', 0):,}")
        report.append("")

        report.append("=== FILE STATISTICS ===")
        report.append(f"• Files found: {stats.get('total_files', 0):,}")
        report.append(f"• Files placed: {stats.get('files_placed', 0):,} "
                      f"({stats.get('bytes_placed_human', '0B')})")
        report.append(f"• Files failed: {stats.get('files_failed', 0):,}")
        report.append("")

        report.append("=== TIMESTAMP SOURCES ===")
        for source, count in stats.get('by_source', {}).items():
            label = SOURCE_LABELS.get(source, source)
            report.append(f"• {label}: {count:,}")
        report.append("")

        errors = results.get('errors', [])
        if errors:
            report.append("=== ERRORS ENCOUNTERED ===")
            for error in errors[:self.max_errors]:
                report.append(f"❌ {error}")
            if len(errors) > self.max_errors:
                report.append(f"... and {len(errors) - self.max_errors} more errors")
            report.append("")

        success = results.get('success', True) and len(errors) == 0
        status = "✅ COMPLETE SUCCESS" if success else "⚠️ COMPLETED WITH ISSUES"
        report.append(f"STATUS: {status}")

        return "\n".join(report)

    def save_report(self, results: Dict[str, Any], filename: Optional[str] = None) -> str:
        """
        Save report to file: JSON for a .json filename, text otherwise.

        Args:
            results: Results dictionary
            filename: Optional filename (auto-generated in the output root if None)

        Returns:
            Path to saved report file
        """
        if filename is None:
            timestamp = results.get('timestamp', 'unknown').replace(':', '-')
            output_dir = results.get('paths', {}).get('output_dir', '.')
            report_file = Path(output_dir) / f"organize_report_{timestamp}.txt"
        else:
            report_file = Path(filename)

        report_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(report_file, 'w', encoding='utf-8') as f:
                if report_file.suffix.lower() == '.json':
                    json.dump(results, f, indent=2, default=str)
                else:
                    f.write(self.generate_summary_report(results))

            logger.info(f"Report saved: {report_file}")
            return str(report_file)

        except Exception as e:
            logger.error(f"Failed to save report: {e}")
            raise
