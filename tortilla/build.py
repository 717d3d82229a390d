"""
Build cycle and watch mode

build() runs one full compile of the configured inputs and prints or writes
the artifacts. BuildWatcher repeats that whenever an input changes. Every
rebuild starts from scratch; nothing is cached between cycles.
"""

import logging
import sys
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional, TextIO

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .core.compiler import Compiler
from .core.contract import Contract
from .core.solc import SolcInvoker
from .utils.config_manager import BuildConfig
from .utils.exceptions import TortillaError

LOG = logging.getLogger(__name__)

REBUILD_EVENTS = ("created", "modified", "moved")


def make_compiler(config: BuildConfig) -> Compiler:
    return Compiler(invoker=SolcInvoker(config.solc), outputs=config.outputs)


def build(
    config: BuildConfig,
    compiler: Optional[Compiler] = None,
    stream: Optional[TextIO] = None,
) -> List[Contract]:
    """
    Compile all inputs once and emit the artifacts.

    With output "-" each contract document is printed to stream (stdout by
    default); with any other non-empty output the documents are written to
    that directory as <Name>.json.

    Returns:
        The compiled contracts
    """
    compiler = compiler or make_compiler(config)
    contracts = compiler.compile_paths(config.inputs)

    if config.gas:
        for contract in contracts:
            LOG.info(f"{contract.name} gas estimates:\n{contract.gas_estimate_report()}")

    if config.prints_to_stdout:
        stream = stream or sys.stdout
        for contract in contracts:
            document = contract.serialize_pretty() if config.pretty else contract.serialize()
            print(document, file=stream)
    elif config.output:
        for contract in contracts:
            contract.write_to_dir(config.output, pretty=config.pretty)

    return contracts


class _RebuildEventHandler(FileSystemEventHandler):
    """Coalesces bursts of file events into one rebuild call"""

    def __init__(
        self,
        inputs: List[Path],
        on_change: Callable[[], None],
        debounce_seconds: float,
    ) -> None:
        super().__init__()
        self._dirs = [p.resolve() for p in inputs if p.is_dir()]
        self._files = {p.resolve() for p in inputs if not p.is_dir()}
        self._on_change = on_change
        self._debounce_seconds = debounce_seconds
        self._pending_timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def is_relevant(self, src_path) -> bool:
        if isinstance(src_path, bytes):
            src_path = src_path.decode("utf-8")
        path = Path(src_path).resolve()
        if path in self._files:
            return True
        return any(d == path or d in path.parents for d in self._dirs)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in REBUILD_EVENTS:
            return
        paths = [event.src_path, getattr(event, "dest_path", None)]
        if not any(p and self.is_relevant(p) for p in paths):
            return

        LOG.debug(f"{event.event_type}: {event.src_path}")
        with self._lock:
            if self._pending_timer is not None:
                self._pending_timer.cancel()
            self._pending_timer = threading.Timer(self._debounce_seconds, self._fire_callback)
            self._pending_timer.daemon = True
            self._pending_timer.start()

    def _fire_callback(self) -> None:
        with self._lock:
            self._pending_timer = None
        self._on_change()

    def cancel(self) -> None:
        with self._lock:
            if self._pending_timer is not None:
                self._pending_timer.cancel()
                self._pending_timer = None


class BuildWatcher:
    """
    Rebuilds whenever one of the configured inputs changes.

    Usage:
        with BuildWatcher(config) as watcher:
            ...  # rebuilds happen on a background thread

        BuildWatcher(config).run_forever()  # blocks until Ctrl-C
    """

    def __init__(
        self,
        config: BuildConfig,
        compiler: Optional[Compiler] = None,
        debounce_seconds: float = 0.5,
    ):
        self.config = config
        self.compiler = compiler or make_compiler(config)
        self.handler = _RebuildEventHandler(config.inputs, self.rebuild, debounce_seconds)
        self._observer = None
        self._build_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def rebuild(self) -> Optional[List[Contract]]:
        """Run one build; errors are logged so the watcher keeps going"""
        # Events that arrive mid-build wait for the running build to finish
        with self._build_lock:
            try:
                contracts = build(self.config, self.compiler)
            except TortillaError as e:
                LOG.error(f"Build failed: {e}")
                return None

        for contract in contracts:
            LOG.info(f"{contract.name} compiled")
        return contracts

    def start(self) -> None:
        if self.is_running:
            LOG.warning("Watcher already running")
            return

        observer = Observer()
        for path in self.config.inputs:
            path = Path(path)
            if path.is_dir():
                observer.schedule(self.handler, str(path), recursive=True)
            else:
                observer.schedule(self.handler, str(path.parent), recursive=False)
        observer.start()
        self._observer = observer
        LOG.info(f"Watching {', '.join(str(p) for p in self.config.inputs)}")

    def stop(self) -> None:
        self.handler.cancel()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
            LOG.info("Watcher stopped")

    def run_forever(self) -> None:
        self.rebuild()
        self.start()
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()

    def __enter__(self) -> "BuildWatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
