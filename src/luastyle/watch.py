"""
Watch mode: re-lint Lua files as they change.

The most recently edited file is linted first. Repeated saves of the same
file inside the debounce window are collapsed into one run.

Usage:
    luastyle --watch src/
    luastyle --watch --interval 1.0 src/ lib/
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from luastyle.config import LintConfig
from luastyle.discovery import DEFAULT_EXCLUDE_DIRS, DEFAULT_EXTENSIONS, should_exclude_path
from luastyle.engine import FileResult
from luastyle.pool import lint_file
from luastyle.reporting import Reporter


logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 0.5
DEFAULT_DEBOUNCE_SECONDS = 1.0


class RecentQueue:
    """Thread-safe set of changed paths, popped most recent first."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: Dict[str, float] = {}  # path -> last change time

    def push(self, path: Path, ts: float) -> None:
        p = str(path)
        with self._lock:
            prev = self._items.get(p)
            if prev is None or ts > prev:
                self._items[p] = ts

    def pop_most_recent(
        self, is_due: Optional[Callable[[str], bool]] = None
    ) -> Optional[Tuple[Path, float]]:
        """Pop the newest path, considering only paths `is_due` accepts when given."""
        with self._lock:
            candidates = [kv for kv in self._items.items() if is_due is None or is_due(kv[0])]
            if not candidates:
                return None
            p, ts = max(candidates, key=lambda kv: kv[1])
            del self._items[p]
            return Path(p), ts

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class LuaChangeHandler(FileSystemEventHandler):
    """
    Queues created and modified source files.

    With `only` set, just those files are queued, whatever their extension;
    it is used when a single file's directory is watched.
    """

    def __init__(
        self,
        queue: RecentQueue,
        extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS,
        clock: Callable[[], float] = time.time,
        only: Optional[Set[Path]] = None,
    ) -> None:
        super().__init__()
        self.queue = queue
        self.extensions = extensions
        self.clock = clock
        self.only = {p.resolve() for p in only} if only is not None else None

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = Path(str(event.src_path))
        if self.only is not None:
            if path.resolve() not in self.only:
                return
        elif path.suffix not in self.extensions or should_exclude_path(path, DEFAULT_EXCLUDE_DIRS):
            return
        self.queue.push(path, self.clock())

    def on_created(self, event: FileSystemEvent) -> None:
        self.on_modified(event)


class Watcher:
    """Lints queued files, skipping ones linted within the debounce window."""

    def __init__(
        self,
        config: LintConfig,
        queue: Optional[RecentQueue] = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.queue = queue if queue is not None else RecentQueue()
        self.debounce_seconds = debounce_seconds
        self.clock = clock
        self._last_linted: Dict[str, float] = {}

    def process_next(self) -> Optional[FileResult]:
        """
        Lint the most recently changed file that is due.

        Files linted within the debounce window stay queued and are passed
        over, so they never hold up other changed files.
        """
        now = self.clock()

        def is_due(p: str) -> bool:
            return now - self._last_linted.get(p, float("-inf")) >= self.debounce_seconds

        item = self.queue.pop_most_recent(is_due)
        if item is None:
            return None
        p = str(item[0])
        self._last_linted[p] = now
        return lint_file(p, self.config)


def _print_result(result: FileResult) -> None:
    reporter = Reporter()
    reporter.files_checked = 1
    reporter.extend(result.violations)
    for diagnostic in result.diagnostics:
        reporter.add_diagnostic(diagnostic)
    if reporter.violations:
        print(reporter.render_human(), flush=True)
    if reporter.diagnostics:
        print(reporter.render_diagnostics(), flush=True)
    if result.ok:
        print(f"{result.path}: clean", flush=True)


def run_watch(
    paths: Iterable[Path],
    config: LintConfig,
    interval: float = DEFAULT_INTERVAL_SECONDS,
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS,
) -> int:
    """Watch `paths` until interrupted, linting files as they change."""
    watcher = Watcher(config, debounce_seconds=debounce_seconds)
    observer = Observer()

    roots: List[Path] = []
    files: Dict[Path, Set[Path]] = {}  # parent dir -> requested files in it
    for path in paths:
        if path.is_dir():
            observer.schedule(LuaChangeHandler(watcher.queue, extensions), str(path), recursive=True)
            roots.append(path)
        else:
            files.setdefault(path.parent, set()).add(path)
    for parent, requested in files.items():
        handler = LuaChangeHandler(watcher.queue, extensions, only=requested)
        observer.schedule(handler, str(parent), recursive=False)
        roots.extend(sorted(requested))
    observer.start()
    logger.info(f"Watching {', '.join(str(r) for r in roots)}")
    print(f"[luastyle] watching {len(roots)} path(s); press Ctrl+C to stop", flush=True)

    try:
        while True:
            result = watcher.process_next()
            if result is not None:
                _print_result(result)
            time.sleep(interval)
    except KeyboardInterrupt:
        print("\n[luastyle] stopping...", flush=True)
    finally:
        observer.stop()
        observer.join()
    return 0
