"""
Multi-file runs.

Files are independent, so a run can fan out across worker processes. Each
file's work is bounded by a timeout; a file that overruns, fails to read, or
fails to tokenize becomes a diagnostic and the rest of the run continues.

Usage:
    from luastyle.pool import lint_paths

    reporter = lint_paths([Path("src")], config, jobs=4, timeout=30)
    print(reporter.render_human())
"""

from __future__ import annotations

import logging
import multiprocessing
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from luastyle.config import LintConfig
from luastyle.discovery import DEFAULT_EXTENSIONS, iter_files, read_source
from luastyle.engine import FileResult, Linter
from luastyle.errors import Diagnostic
from luastyle.reporting import Reporter


logger = logging.getLogger(__name__)

DEFAULT_JOBS = min(os.cpu_count() or 2, 4)
DEFAULT_TIMEOUT_SECONDS = 30.0


def lint_file(path: str, config: LintConfig) -> FileResult:
    """Read and lint one file. Runs in worker processes, so it must stay top-level."""
    try:
        text = read_source(Path(path))
    except OSError as e:
        return FileResult(path=path, diagnostics=[Diagnostic(
            component="io", message=f"cannot read file: {e}", path=path,
        )])
    return Linter(config).lint_source(text, path)


def _timeout_result(path: str, timeout: float) -> FileResult:
    return FileResult(path=path, diagnostics=[Diagnostic(
        component="pool", message=f"processing exceeded {timeout:g}s", path=path,
    )])


def _failure_result(path: str, error: Exception) -> FileResult:
    logger.warning(f"{path}: worker failed: {error}")
    return FileResult(path=path, diagnostics=[Diagnostic(
        component="pool", message=f"worker failed: {type(error).__name__}: {error}", path=path,
    )])


def _collect(reporter: Reporter, result: FileResult) -> None:
    reporter.files_checked += 1
    reporter.extend(result.violations)
    for diagnostic in result.diagnostics:
        reporter.add_diagnostic(diagnostic)


def _run_pool(
    files: List[str],
    config: LintConfig,
    jobs: int,
    timeout: Optional[float],
    results: Dict[str, FileResult],
) -> List[str]:
    """
    Lint `files` in one pool, filling `results`.

    Stops at the first timeout and returns the files that had not finished by
    then. Leaving the `with` block terminates the pool, hung worker included.
    """
    workers = max(1, min(jobs, len(files)))
    logger.debug(f"Linting {len(files)} file(s) with {workers} worker(s)")
    with multiprocessing.Pool(processes=workers) as pool:
        pending = [(path, pool.apply_async(lint_file, (path, config))) for path in files]
        for n, (path, handle) in enumerate(pending):
            try:
                results[path] = handle.get(timeout=timeout)
            except multiprocessing.TimeoutError:
                logger.warning(f"{path}: timed out after {timeout}s, restarting pool")
                results[path] = _timeout_result(path, timeout)
                unfinished = []
                for later, later_handle in pending[n + 1:]:
                    if not later_handle.ready():
                        unfinished.append(later)
                        continue
                    try:
                        results[later] = later_handle.get()
                    except Exception as e:
                        results[later] = _failure_result(later, e)
                return unfinished
            except Exception as e:
                results[path] = _failure_result(path, e)
    return []


def lint_files(
    files: List[str],
    config: LintConfig,
    jobs: int = 1,
    timeout: Optional[float] = None,
) -> Reporter:
    """
    Lint the given files.

    With jobs == 1 and no timeout the files are linted in-process. Otherwise a
    process pool is used. A file that times out gets a diagnostic and the pool
    is replaced, so the remaining files run on fresh workers.
    """
    reporter = Reporter()
    if not files:
        return reporter

    if jobs <= 1 and timeout is None:
        for path in files:
            logger.debug(f"Linting {path}")
            _collect(reporter, lint_file(path, config))
        return reporter

    results: Dict[str, FileResult] = {}
    remaining = list(files)
    while remaining:
        remaining = _run_pool(remaining, config, jobs, timeout, results)
    for path in files:
        _collect(reporter, results[path])
    return reporter


def lint_paths(
    paths: Iterable[Path],
    config: LintConfig,
    jobs: int = 1,
    timeout: Optional[float] = None,
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
) -> Reporter:
    """Discover files under `paths` and lint them."""
    files = [str(p) for p in iter_files(paths, extensions)]
    return lint_files(files, config, jobs=jobs, timeout=timeout)
