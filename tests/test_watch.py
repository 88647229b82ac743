"""
Tests for watch mode. The observer loop itself is not started; the handler
and watcher are driven directly.
"""

from pathlib import Path

from watchdog.events import DirCreatedEvent, FileCreatedEvent, FileModifiedEvent

from luastyle.config import default_config
from luastyle.watch import LuaChangeHandler, RecentQueue, Watcher


class FakeClock:

    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


class TestRecentQueue:

    def test_most_recent_first(self):
        queue = RecentQueue()
        queue.push(Path("a.lua"), 1.0)
        queue.push(Path("b.lua"), 2.0)
        assert queue.pop_most_recent() == (Path("b.lua"), 2.0)
        assert queue.pop_most_recent() == (Path("a.lua"), 1.0)
        assert queue.pop_most_recent() is None

    def test_repeated_push_keeps_latest(self):
        queue = RecentQueue()
        queue.push(Path("a.lua"), 3.0)
        queue.push(Path("a.lua"), 1.0)
        assert len(queue) == 1
        assert queue.pop_most_recent() == (Path("a.lua"), 3.0)


class TestLuaChangeHandler:

    def test_queues_lua_files(self, tmp_path):
        queue = RecentQueue()
        handler = LuaChangeHandler(queue, clock=FakeClock())
        handler.on_modified(FileModifiedEvent(str(tmp_path / "a.lua")))
        handler.on_created(FileCreatedEvent(str(tmp_path / "b.lua")))
        assert len(queue) == 2

    def test_ignores_other_files(self, tmp_path):
        queue = RecentQueue()
        handler = LuaChangeHandler(queue)
        handler.on_modified(FileModifiedEvent(str(tmp_path / "notes.txt")))
        handler.on_created(DirCreatedEvent(str(tmp_path / "pkg.lua")))
        handler.on_modified(FileModifiedEvent(str(tmp_path / ".git" / "x.lua")))
        assert len(queue) == 0

    def test_only_listed_files(self, tmp_path):
        queue = RecentQueue()
        handler = LuaChangeHandler(queue, clock=FakeClock(), only={tmp_path / "a.lua"})
        handler.on_modified(FileModifiedEvent(str(tmp_path / "b.lua")))
        handler.on_modified(FileModifiedEvent(str(tmp_path / "a.lua")))
        assert queue.pop_most_recent() == (tmp_path / "a.lua", 100.0)
        assert len(queue) == 0


class TestWatcher:

    def test_lints_changed_file(self, tmp_path):
        path = tmp_path / "a.lua"
        path.write_text('local x = "a";\n', encoding="utf-8")
        watcher = Watcher(default_config(), clock=FakeClock())
        watcher.queue.push(path, 1.0)
        result = watcher.process_next()
        assert result.path == str(path)
        assert [v.rule_id for v in result.violations] == ["quoting"]

    def test_empty_queue(self):
        assert Watcher(default_config()).process_next() is None

    def test_debounce_keeps_change_queued(self, tmp_path):
        path = tmp_path / "a.lua"
        path.write_text("local x = 1;\n", encoding="utf-8")
        clock = FakeClock()
        watcher = Watcher(default_config(), debounce_seconds=1.0, clock=clock)

        watcher.queue.push(path, 1.0)
        assert watcher.process_next().ok

        watcher.queue.push(path, 2.0)
        clock.now += 0.5
        assert watcher.process_next() is None
        assert len(watcher.queue) == 1

        clock.now += 1.0
        assert watcher.process_next() is not None

    def test_debounced_file_does_not_block_others(self, tmp_path):
        a = tmp_path / "a.lua"
        b = tmp_path / "b.lua"
        a.write_text("local x = 1;\n", encoding="utf-8")
        b.write_text("local y = 2;\n", encoding="utf-8")
        clock = FakeClock()
        watcher = Watcher(default_config(), debounce_seconds=1.0, clock=clock)

        watcher.queue.push(a, 1.0)
        assert watcher.process_next().path == str(a)

        watcher.queue.push(b, 2.0)
        watcher.queue.push(a, 3.0)
        assert watcher.process_next().path == str(b)
        assert watcher.process_next() is None
        assert len(watcher.queue) == 1

        clock.now += 1.0
        assert watcher.process_next().path == str(a)
        assert len(watcher.queue) == 0
