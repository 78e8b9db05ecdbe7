"""Core copy functionality: walk source trees and copy missing files in parallel."""

import errno
import logging
import os
import shutil
import tempfile
from concurrent.futures import CancelledError, ThreadPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple

from .config import CopyConfig
from .logging_setup import TRACE

logger = logging.getLogger(__name__)

MB = 1024 * 1024

# Prefix of in-progress copies next to their target
PARTIAL_PREFIX = ".schedule-copy-"

# Local disk transfer (SSD/HDD average)
LOCAL_RATE_BPS = 50 * MB


class CopyResult:
    """Result of one copy run."""

    def __init__(
        self,
        files_copied: int = 0,
        files_skipped: int = 0,
        bytes_copied: int = 0,
        execution_time: float = 0.0,
        started_at: Optional[datetime] = None,
    ):
        self.files_copied = files_copied
        self.files_skipped = files_skipped
        self.bytes_copied = bytes_copied
        self.execution_time = execution_time
        self.started_at = started_at


class CopyPlan:
    """Files found at the sources and the subset that still has to be copied."""

    def __init__(
        self,
        sources: List[Path],
        destination: Path,
        pairs: Optional[List[Tuple[Path, Path]]] = None,
        source_file_count: int = 0,
        destination_file_count: int = 0,
    ):
        self.sources = sources
        self.destination = destination
        self.pairs = pairs or []
        self.source_file_count = source_file_count
        self.destination_file_count = destination_file_count

    @property
    def total_files(self) -> int:
        return len(self.pairs)

    @property
    def total_size(self) -> int:
        return calculate_total_size(source for source, _ in self.pairs)


class DryRunResult:
    """Result of a dry run analysis."""

    def __init__(
        self,
        sources: List[str],
        destination: str,
        total_files: int = 0,
        total_size: int = 0,
        filtered_files: Optional[List[Path]] = None,
        error_message: str = "",
        success: bool = True,
    ):
        self.sources = sources
        self.destination = destination
        self.total_files = total_files
        self.total_size = total_size
        self.filtered_files = filtered_files or []
        self.error_message = error_message
        self.success = success


def _raise_walk_error(error: OSError) -> None:
    raise error


def walk_files(root) -> List[Path]:
    """
    List every file below root.

    Symlinked directories are not descended into; a symlink pointing at a
    file is reported like a file. A root that is itself a file yields
    just that file.

    Raises:
        OSError: If root is missing or any directory cannot be read
    """
    root_path = Path(root)
    if root_path.is_file():
        return [root_path]
    if not root_path.is_dir():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(root_path))

    files = []
    for dirpath, _dirnames, filenames in os.walk(root_path, onerror=_raise_walk_error):
        for name in filenames:
            file_path = Path(dirpath) / name
            if file_path.is_file():
                files.append(file_path)
    return files


def calculate_total_size(paths: Iterable[Path]) -> int:
    """Sum file sizes, ignoring files that can no longer be stat'ed."""
    total = 0
    for path in paths:
        try:
            total += Path(path).stat().st_size
        except OSError:
            continue
    return total


def estimate_transfer_time(total_size: int, rate_bps: int = LOCAL_RATE_BPS) -> float:
    """
    Estimate transfer time based on size.

    Args:
        total_size: Total size in bytes
        rate_bps: Transfer rate in bytes per second

    Returns:
        Estimated time in seconds
    """
    if total_size == 0:
        return 0.0
    return total_size / rate_bps


def format_size(size_bytes: int) -> str:
    """Format byte size in human-readable format."""
    if size_bytes == 0:
        return "0 B"

    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_bytes < 1024.0:
            if unit == "B":
                return f"{size_bytes} {unit}"
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0

    return f"{size_bytes:.1f} PB"


def format_duration(seconds: float) -> str:
    """Format duration in human-readable format."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    elif seconds < 3600:
        return f"{seconds // 60:.0f}m {seconds % 60:.0f}s"
    else:
        return f"{seconds // 3600:.0f}h {(seconds % 3600) // 60:.0f}m"


def format_copy_summary(results: List[CopyResult], total_execution_time: float) -> str:
    """Format copy results into a readable summary."""
    summary = ["=== Schedule Copy Summary ===\n"]

    total_copied = sum(r.files_copied for r in results)
    total_skipped = sum(r.files_skipped for r in results)
    total_bytes = sum(r.bytes_copied for r in results)

    summary.append(f"Copy runs: {len(results)}")
    summary.append(f"Files copied: {total_copied}")
    summary.append(f"Files skipped: {total_skipped}")
    summary.append(f"Total bytes copied: {total_bytes:,} bytes ({format_size(total_bytes)})")
    summary.append(f"Total execution time: {total_execution_time:.2f} seconds")

    for index, result in enumerate(results, start=1):
        started = (
            result.started_at.strftime("%Y-%m-%d %H:%M:%S") if result.started_at else "-"
        )
        summary.append(
            f"  [{index}] {started}: {result.files_copied} copied, "
            f"{result.files_skipped} skipped, {format_size(result.bytes_copied)} "
            f"in {result.execution_time:.2f}s"
        )

    return "\n".join(summary)


class CopyManager:
    """Walks sources, compares them with the destination and copies what is missing."""

    def __init__(self, config: CopyConfig):
        self.config = config
        self.max_workers = config.parallel_threads or os.cpu_count() or 1

    def perform_preflight_checks(self) -> List[str]:
        """
        Check sources and prepare the destination before copying.

        A missing destination is created, except in dry run mode.

        Returns:
            List of error messages (empty if all checks pass)
        """
        errors = []
        sources = self.config.source_paths

        resolved = [path.resolve() for path in sources]
        if len(set(resolved)) != len(resolved):
            errors.append(f"duplicated paths: {[str(p) for p in sources]}")

        for path in sources:
            if not path.exists():
                errors.append(f"path {path} does not exist")

        if errors:
            return errors

        destination = self.config.destination_path
        if not destination.exists():
            if self.config.dry_run:
                logger.info(f"to target path does not exist yet: {destination}")
            else:
                logger.info(f"creating to target path: {destination}")
                try:
                    destination.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    errors.append(f"cannot create directory {destination}: {e}")
        elif not destination.is_dir():
            errors.append(
                f"directory {destination} does not exist, please create a directory"
            )

        return errors

    def plan_copy(self) -> CopyPlan:
        """
        Work out which source files are missing at the destination.

        Sources that cannot be walked are logged and skipped. Errors walking
        the destination propagate.
        """
        sources = [path.resolve(strict=True) for path in self.config.source_paths]
        destination_path = self.config.destination_path
        destination = destination_path.resolve(strict=not self.config.dry_run)
        logger.log(TRACE, f"try copy from {[str(p) for p in sources]} to {destination}")

        source_items = []
        for source in sources:
            try:
                source_items.append((source, walk_files(source)))
            except OSError as e:
                logger.warning(f"failed to walk path `{source}`: {e}")

        distinct_sources: Set[Path] = {
            path for _, files in source_items for path in files
        }
        if logger.isEnabledFor(logging.INFO):
            size = calculate_total_size(distinct_sources)
            logger.info(
                f"found {len(distinct_sources)} items in from: {[str(p) for p in sources]}. "
                f"size: {size / MB}MB"
            )

        if destination.exists():
            destination_items = set(walk_files(destination))
        else:
            destination_items = set()
        logger.debug(f"found {len(destination_items)} items in to: {destination}")

        pairs = []
        planned_targets: Set[Path] = set()
        for base, files in source_items:
            for source_file in files:
                if base == source_file:
                    relative = Path(base.name)
                else:
                    relative = source_file.relative_to(base)
                target = destination / relative
                if target in destination_items:
                    continue
                if target in planned_targets:
                    logger.debug(f"{target} is already planned from an earlier source")
                    continue
                planned_targets.add(target)
                pairs.append((source_file, target))

        plan = CopyPlan(
            sources=sources,
            destination=destination,
            pairs=pairs,
            source_file_count=len(distinct_sources),
            destination_file_count=len(destination_items),
        )

        if logger.isEnabledFor(logging.INFO):
            logger.info(
                f"trying parallel copy {plan.total_files} items {plan.total_size / MB}MB "
                f"from `{[str(p) for p in sources]}` to {destination}"
            )

        return plan

    def _copy_file(self, source: Path, target: Path) -> Tuple[bool, int]:
        """Copy one file unless the target exists. Returns (copied, bytes)."""
        if target.exists():
            logger.warning(f"skipped existing file {target}")
            return False, 0

        parent = target.parent
        if not parent.exists():
            logger.debug(f"creating directories {parent} for {target}")
            parent.mkdir(parents=True, exist_ok=True)

        logger.log(TRACE, f"copying from `{source}` to `{target}`")
        fd, partial_name = tempfile.mkstemp(
            prefix=PARTIAL_PREFIX, suffix=".part", dir=parent
        )
        os.close(fd)
        partial = Path(partial_name)
        try:
            shutil.copy2(source, partial)
            if target.exists():
                logger.warning(f"skipped existing file {target}")
                partial.unlink()
                return False, 0
            os.replace(partial, target)
        except BaseException:
            partial.unlink(missing_ok=True)
            raise
        return True, target.stat().st_size

    def try_copy(self) -> CopyResult:
        """
        Copy every missing file from the sources to the destination.

        Raises:
            OSError: The first error hit while copying, after running copies finish
        """
        start_time = datetime.now()
        plan = self.plan_copy()

        result = CopyResult(started_at=start_time)
        first_error: Optional[BaseException] = None

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self._copy_file, source, target)
                for source, target in plan.pairs
            ]
            try:
                for future in as_completed(futures):
                    try:
                        copied, size = future.result()
                    except CancelledError:
                        continue
                    except Exception as e:
                        if first_error is None:
                            first_error = e
                            for pending in futures:
                                pending.cancel()
                        continue

                    if copied:
                        result.files_copied += 1
                        result.bytes_copied += size
                    else:
                        result.files_skipped += 1
            except BaseException:
                # Ctrl-C: drop queued copies, let running ones finish
                executor.shutdown(wait=True, cancel_futures=True)
                raise

        result.execution_time = (datetime.now() - start_time).total_seconds()

        if first_error is not None:
            logger.error(f"copy to {plan.destination} failed: {first_error}")
            raise first_error

        logger.info(
            f"copied {result.files_copied} files ({format_size(result.bytes_copied)}), "
            f"skipped {result.files_skipped} in {result.execution_time:.2f}s"
        )
        return result

    def analyze(self) -> DryRunResult:
        """Report what try_copy would do without writing anything."""
        logger.info(f"Analyzing copy to {self.config.destination}")

        try:
            plan = self.plan_copy()
            return DryRunResult(
                sources=self.config.sources,
                destination=str(plan.destination),
                total_files=plan.total_files,
                total_size=plan.total_size,
                filtered_files=[source for source, _ in plan.pairs],
            )

        except Exception as e:
            error_msg = f"Dry run analysis failed: {e}"
            logger.error(error_msg)
            return DryRunResult(
                sources=self.config.sources,
                destination=self.config.destination,
                error_message=error_msg,
                success=False,
            )
