"""End-to-end organizing run: index sidecars, then resolve and place every file."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from tqdm import tqdm

from .config import Config
from .metadata_index import MetadataIndex, MetadataIndexBuilder
from .placement import PlacementEngine, PlacementResult
from .reservations import ReservationTable
from .timestamps import TimestampResolver, TimestampSource
from .utils import (
    find_candidate_files,
    find_sidecar_files,
    format_bytes,
    get_available_space,
    get_current_timestamp,
    get_file_size,
)

logger = logging.getLogger(__name__)


@dataclass
class OrganizeStats:
    """Statistics for an organizing run."""
    sidecars_indexed: int = 0
    sidecars_skipped: int = 0
    total_files: int = 0
    files_placed: int = 0
    files_failed: int = 0
    bytes_placed: int = 0
    by_source: Dict[str, int] = field(
        default_factory=lambda: {source.value: 0 for source in TimestampSource}
    )
    errors: List[str] = field(default_factory=list)

    def record(self, result: PlacementResult) -> None:
        if result.ok:
            self.files_placed += 1
            self.bytes_placed += get_file_size(result.source)
            self.by_source[result.timestamp.source.value] += 1
        else:
            self.files_failed += 1
            self.errors.append(f"{result.source}: {result.error}")


class PhotoOrganizer:
    """Organizes a source tree into <output>/<year>/<Month>/<ext>/ copies."""

    def __init__(self, config: Config):
        """
        Initialize organizer with configuration.

        Args:
            config: Configuration instance
        """
        self.config = config
        self.workers = config.get_workers()

    def organize(
        self,
        input_dir: Path,
        output_dir: Path,
        dry_run: Optional[bool] = None,
        progress: bool = True,
    ) -> Dict[str, Any]:
        """
        Organize every file under input_dir into output_dir.

        The sidecar index is fully built before any placement starts. Per-file
        failures are counted and reported, they never stop the run.

        Args:
            input_dir: Source tree with photos and sidecar files
            output_dir: Existing destination root
            dry_run: Whether to perform dry run (defaults to config setting)
            progress: Show a progress bar

        Returns:
            Dictionary with run results
        """
        if dry_run is None:
            dry_run = self.config.is_dry_run()

        input_dir = Path(input_dir)
        output_dir = Path(output_dir)
        stats = OrganizeStats()

        logger.info(f"{'DRY RUN: ' if dry_run else ''}Starting the photo organizer "
                    f"({input_dir} -> {output_dir}, {self.workers} workers)")

        # Phase 1: sidecar index, a barrier before any placement
        index = self._build_index(input_dir, stats)

        # Phase 2: placement
        candidates = list(find_candidate_files(
            input_dir,
            self.config.get_sidecar_suffix(),
            self.config.get_excluded_extensions(),
        ))
        stats.total_files = len(candidates)
        logger.info(f"Found {stats.total_files:,} files to organize")

        if not dry_run:
            self._check_space(candidates, output_dir)

        if candidates:
            self._place_all(candidates, index, output_dir, dry_run, stats, progress)

        logger.info(f"{'DRY RUN: ' if dry_run else ''}Organizing complete: "
                    f"{stats.files_placed:,} placed, {stats.files_failed:,} failed, "
                    f"{format_bytes(stats.bytes_placed)}")

        return self._build_results(stats, input_dir, output_dir, dry_run)

    def _build_index(self, input_dir: Path, stats: OrganizeStats) -> MetadataIndex:
        logger.info("Parsing sidecar metadata files...")
        builder = MetadataIndexBuilder(self.workers)
        index = builder.build(find_sidecar_files(input_dir, self.config.get_sidecar_suffix()))
        stats.sidecars_indexed = builder.parsed
        stats.sidecars_skipped = builder.skipped
        return index

    def _check_space(self, candidates: List[Path], output_dir: Path) -> None:
        needed = sum(get_file_size(f) for f in candidates)
        available = get_available_space(output_dir)
        if needed > available:
            logger.warning(
                f"Output may run out of space: need {format_bytes(needed)}, "
                f"have {format_bytes(available)}"
            )
        else:
            logger.info(f"Space check OK: need {format_bytes(needed)}, "
                        f"have {format_bytes(available)}")

    def _place_all(
        self,
        candidates: List[Path],
        index: MetadataIndex,
        output_dir: Path,
        dry_run: bool,
        stats: OrganizeStats,
        progress: bool,
    ) -> None:
        resolver = TimestampResolver(index)
        engine = PlacementEngine(
            output_dir,
            ReservationTable(),
            no_extension_dir=self.config.get_no_extension_dir(),
            max_collision_attempts=self.config.get_max_collision_attempts(),
            verify_copies=self.config.should_verify_copies(),
            dry_run=dry_run,
        )

        with tqdm(total=len(candidates), desc="Organizing", unit="files",
                  disable=not progress) as pbar:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                future_to_file = {
                    executor.submit(self._process_file, file_path, resolver, engine): file_path
                    for file_path in candidates
                }

                for future in as_completed(future_to_file):
                    file_path = future_to_file[future]
                    try:
                        result = future.result()
                    except Exception as e:
                        logger.error(f"Exception processing {file_path}: {e}")
                        result = PlacementResult(file_path, error=str(e))
                    stats.record(result)
                    pbar.update(1)

    @staticmethod
    def _process_file(
        file_path: Path, resolver: TimestampResolver, engine: PlacementEngine
    ) -> PlacementResult:
        try:
            resolved = resolver.resolve(file_path)
        except OSError as e:
            logger.error(f"Error processing photo file {file_path}: {e}")
            return PlacementResult(file_path, error=f"Cannot read file times: {e}")

        return engine.place(file_path, resolved)

    def _build_results(
        self, stats: OrganizeStats, input_dir: Path, output_dir: Path, dry_run: bool
    ) -> Dict[str, Any]:
        return {
            'dry_run': dry_run,
            'timestamp': get_current_timestamp(),
            'statistics': {
                'sidecars_indexed': stats.sidecars_indexed,
                'sidecars_skipped': stats.sidecars_skipped,
                'total_files': stats.total_files,
                'files_placed': stats.files_placed,
                'files_failed': stats.files_failed,
                'bytes_placed': stats.bytes_placed,
                'bytes_placed_human': format_bytes(stats.bytes_placed),
                'by_source': dict(stats.by_source),
            },
            'paths': {
                'input_dir': str(input_dir),
                'output_dir': str(output_dir),
            },
            'configuration': {
                'workers': self.workers,
                'sidecar_suffix': self.config.get_sidecar_suffix(),
                'verify_copies': self.config.should_verify_copies(),
                'max_collision_attempts': self.config.get_max_collision_attempts(),
            },
            'errors': stats.errors,
            'success': len(stats.errors) == 0,
        }
