"""Build a directory of posts to JSON and rebuild on change.

Each ``<source>/<path>.md`` compiles to ``<output>/<path>.json`` holding the
serialized :class:`~pressroom.compiler.CompiledDocument`. :class:`PostWatcher`
runs a ``watchdog`` observer over the source directory and calls back for
every created or modified markdown file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from pressroom.compiler import compile_document
from pressroom.resolvers import ExampleStore, SocialStore

log = logging.getLogger(__name__)

POST_EXTENSIONS = (".md", ".mdx", ".markdown")

# Callback signature: (absolute path of changed post)
ChangeCallback = Callable[[Path], None]


def output_path_for(path: Path, source_dir: Path, output_dir: Path) -> Path:
    """Map a post under *source_dir* to its JSON file under *output_dir*."""
    return output_dir / path.relative_to(source_dir).with_suffix(".json")


def iter_posts(source_dir: Path) -> list[Path]:
    """Markdown posts under *source_dir*, skipping hidden files and dirs."""
    posts = []
    for p in sorted(source_dir.rglob("*")):
        if not p.is_file() or p.suffix.lower() not in POST_EXTENSIONS:
            continue
        if any(part.startswith(".") for part in p.relative_to(source_dir).parts):
            continue
        posts.append(p)
    return posts


async def build_file(
    path: Path,
    source_dir: Path,
    output_dir: Path,
    *,
    examples: ExampleStore,
    social: SocialStore,
    config: dict[str, Any] | None = None,
) -> Path:
    """Compile one post and write its JSON. Returns the output path."""
    document = await compile_document(
        path.read_text(), examples=examples, social=social, config=config,
    )
    out = output_path_for(path, source_dir, output_dir)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(document.to_json(indent=2) + "\n")
    log.info("Built %s -> %s", path.relative_to(source_dir), out)
    return out


async def build_dir(
    source_dir: Path,
    output_dir: Path,
    *,
    examples: ExampleStore,
    social: SocialStore,
    config: dict[str, Any] | None = None,
) -> list[Path]:
    """Compile every post under *source_dir*. Stops at the first failure."""
    built = []
    for path in iter_posts(source_dir):
        built.append(await build_file(
            path, source_dir, output_dir,
            examples=examples, social=social, config=config,
        ))
    return built


class _PostEventHandler(FileSystemEventHandler):
    """Watchdog handler that calls back on markdown create/modify events."""

    def __init__(self, callback: ChangeCallback, source_dir: Path) -> None:
        super().__init__()
        self._callback = callback
        self._source_dir = source_dir

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._handle(event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._handle(event.src_path)

    def _handle(self, abs_path: str | bytes) -> None:
        path = Path(abs_path if isinstance(abs_path, str) else abs_path.decode())
        if path.suffix.lower() not in POST_EXTENSIONS:
            return
        try:
            rel = path.relative_to(self._source_dir)
        except ValueError:
            return
        # Skip hidden files and editor swap dirs
        if any(p.startswith(".") for p in rel.parts):
            return
        self._callback(path)


class PostWatcher:
    """Watchdog-based watcher for a posts directory.

    Parameters
    ----------
    source_dir:
        Directory holding markdown posts.
    callback:
        Called with the changed post's path.
    """

    def __init__(self, source_dir: Path, callback: ChangeCallback) -> None:
        self._source_dir = Path(source_dir).resolve()
        self._callback = callback
        self._observer: Observer | None = None

    def start(self) -> None:
        """Start the filesystem observer."""
        if not self._source_dir.is_dir():
            log.warning("Posts directory not found: %s", self._source_dir)
            return

        handler = _PostEventHandler(self._callback, self._source_dir)
        self._observer = Observer()
        self._observer.schedule(handler, str(self._source_dir), recursive=True)
        log.info("Watching: %s", self._source_dir)

        self._observer.daemon = True
        self._observer.start()

    def stop(self) -> None:
        """Stop the filesystem observer."""
        if self._observer:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
