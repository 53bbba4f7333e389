"""Watch mode for proofline - re-analyze a text file as it is edited."""

import json
import signal
import sys
import threading
from pathlib import Path
from typing import Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .adapters.text_document import Doc, diff_documents, from_text
from .controller import EditSignal, RenderUpdate
from .core.flatten import flatten
from .locate import format_location, locate_annotation


class FileEditHandler(FileSystemEventHandler):
    """Turns saves of one file into document edit signals."""

    def __init__(self, path: Path, doc: Doc, on_edit: Callable[[EditSignal], None]):
        super().__init__()
        self.path = path.resolve()
        self.doc = doc
        self.on_edit = on_edit

    def _is_target(self, event: FileSystemEvent) -> bool:
        if event.is_directory:
            return False
        paths = [event.src_path, getattr(event, "dest_path", "") or ""]
        return any(p and Path(str(p)).resolve() == self.path for p in paths)

    def on_modified(self, event: FileSystemEvent) -> None:
        if self._is_target(event):
            self.reload()

    def on_created(self, event: FileSystemEvent) -> None:
        if self._is_target(event):
            self.reload()

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors that save via rename land here
        if self._is_target(event):
            self.reload()

    def reload(self) -> None:
        """Read the file and emit an edit if its document changed."""
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return
        new_doc = from_text(text)
        if new_doc == self.doc:
            return
        mapping = diff_documents(self.doc, new_doc)
        self.doc = new_doc
        self.on_edit(EditSignal(doc=new_doc, mapping=mapping))


class ConsoleSink:
    """Prints every annotation update."""

    def __init__(
        self,
        doc_provider: Callable[[], Any],
        position_base: int = 1,
        quiet: bool = False,
        json_output: bool = False,
    ):
        self.doc_provider = doc_provider
        self.position_base = position_base
        self.quiet = quiet
        self.json_output = json_output

    def render(self, update: RenderUpdate) -> None:
        doc = self.doc_provider()
        if doc is None:
            return
        flat_map = flatten(doc)
        located = [locate_annotation(a, flat_map, self.position_base) for a in update.annotations]

        if self.json_output:
            event = {
                "type": "annotations",
                "origin": update.origin,
                "version": update.version,
                "attributes": update.attributes,
                "annotations": located,
            }
            print(json.dumps(event), flush=True)
            return
        if self.quiet or update.origin == "load":
            return
        print(f"[{update.origin}] version {update.version}: {len(located)} annotations", flush=True)
        for info in located:
            print(f"  {format_location(info)}", flush=True)


def watch_file(
    path: Path,
    runtime: Any,
    quiet: bool = False,
    json_output: bool = False,
) -> int:
    """
    Watch a text file and keep its annotations current.

    Args:
        path: File to watch
        runtime: Runtime with config and analysis client
        quiet: Suppress output
        json_output: Output JSON events instead of human-readable

    Returns:
        Exit code
    """
    if not path.is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1

    doc = from_text(path.read_text(encoding="utf-8"))
    stop = threading.Event()
    session = None

    def signal_handler(signum: int, frame: Any) -> None:
        stop.set()
        if not quiet and not json_output:
            print("\nShutting down...", flush=True)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    sink = ConsoleSink(
        lambda: session.controller.document if session else None,
        position_base=runtime.config.document.position_base,
        quiet=quiet,
        json_output=json_output,
    )
    session = runtime.new_session(sink)
    handler = FileEditHandler(path, doc, session.post)
    observer = Observer()
    observer.schedule(handler, str(path.resolve().parent), recursive=False)

    debounce_ms = runtime.config.scheduler.debounce_ms
    if not quiet and not json_output:
        print(f"Watching {path} (debounce: {debounce_ms}ms)", flush=True)
        print("Press Ctrl+C to stop", flush=True)

    observer.start()
    try:
        session.open(doc)
        session.run(stop)
    finally:
        observer.stop()
        observer.join()
        session.close()

    if not quiet and not json_output:
        print("Watch stopped", flush=True)

    return 0
