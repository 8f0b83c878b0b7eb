"""CLI entry point for pressroom."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, TypeVar

import click

T = TypeVar("T")

# Default config template
CONFIG_TEMPLATE = """\
database: .pressroom/content.db

compile:
  max_concurrency: null  # null = resolve every directive at once
  external_link_indicator: "↗"

social:
  domains:
    - twitter.com
    - x.com
  endpoint: https://cdn.syndication.twimg.com/tweet-result
  timeout: 10.0
  fixtures: null  # Optional YAML/JSON file of post id -> metadata (offline builds)

watch:
  source: posts
  output: build
"""

_project_root_option = click.option(
    "--project-root",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    default=".",
    help="Project root directory (default: cwd).",
)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _load(project_root: str) -> tuple[Path, dict[str, Any]]:
    from pressroom.config import ConfigError, load_config

    root = Path(project_root)
    try:
        return root, load_config(root)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


def _open_db(root: Path, config: dict[str, Any]):
    from pressroom.config import resolve_paths
    from pressroom.store import ContentDB

    return ContentDB(resolve_paths(config, root)["database"])


async def _with_stores(
    root: Path,
    config: dict[str, Any],
    fn: Callable[[Any, Any, Any], Awaitable[T]],
) -> T:
    """Open the stores the config names, run ``fn(db, examples, social)``."""
    from pressroom.config import resolve_paths
    from pressroom.store import ContentDB, ExampleLookup, HTTPSocialStore, StaticSocialStore

    paths = resolve_paths(config, root)
    db = ContentDB(paths["database"])
    fixtures = paths["social_fixtures"]
    if fixtures is not None:
        social = StaticSocialStore.from_file(fixtures)
        return await fn(db, ExampleLookup(db), social)

    social_cfg = config["social"]
    async with HTTPSocialStore(social_cfg["endpoint"], timeout=social_cfg["timeout"]) as social:
        return await fn(db, ExampleLookup(db), social)


def _build_errors() -> tuple[type[BaseException], ...]:
    """Failures a compile can end in that are reported rather than raised.

    Beyond the pipeline's own errors this covers an unreadable or malformed
    social fixtures file and a failing content database.
    """
    import sqlite3

    import yaml

    from pressroom.errors import CompileError
    from pressroom.store import SocialFetchError

    return (CompileError, SocialFetchError, OSError, ValueError, yaml.YAMLError, sqlite3.Error)


def _run(coro: Awaitable[T]) -> T:
    """Run a compile coroutine, mapping pipeline and store failures to CLI errors."""
    errors = _build_errors()
    try:
        return asyncio.run(coro)  # type: ignore[arg-type]
    except errors as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
def cli() -> None:
    """Pressroom: compile markdown posts into embeddable documents."""


@cli.command()
@_project_root_option
def init(project_root: str) -> None:
    """Initialize .pressroom/ with a config file and an empty content database."""
    root = Path(project_root)
    pressroom_dir = root / ".pressroom"
    config_path = pressroom_dir / "config.yaml"

    if config_path.exists():
        click.echo(f"Config already exists: {config_path}")
    else:
        pressroom_dir.mkdir(parents=True, exist_ok=True)
        config_path.write_text(CONFIG_TEMPLATE)
        click.echo(f"Created {config_path}")

    root, config = _load(project_root)
    _open_db(root, config)
    (root / config["watch"]["source"]).mkdir(parents=True, exist_ok=True)
    click.echo("Initialized pressroom project.")


@cli.command("compile")
@_project_root_option
@click.argument("post_file", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("-o", "--output", type=click.Path(dir_okay=False), default=None,
              help="Write JSON here instead of stdout.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
def compile_cmd(project_root: str, post_file: str, output: str | None, verbose: bool) -> None:
    """Compile a markdown post file and print the document as JSON."""
    from pressroom.compiler import compile_document

    if verbose:
        _setup_logging(verbose)
    root, config = _load(project_root)
    text = Path(post_file).read_text()

    async def _compile(db: Any, examples: Any, social: Any):
        return await compile_document(text, examples=examples, social=social, config=config)

    document = _run(_with_stores(root, config, _compile))
    payload = document.to_json(indent=2)
    if output:
        Path(output).write_text(payload + "\n")
        click.echo(f"Wrote {output}")
    else:
        click.echo(payload)


@cli.command()
@_project_root_option
@click.argument("site")
@click.argument("slug")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
def render(project_root: str, site: str, slug: str, verbose: bool) -> None:
    """Compile the stored post at SITE/SLUG and print it as JSON.

    SITE is a subdomain, or a custom domain if it contains a dot.
    """
    import json

    from pressroom.compiler import compile_post

    if verbose:
        _setup_logging(verbose)
    root, config = _load(project_root)

    async def _compile(db: Any, examples: Any, social: Any):
        return await compile_post(
            db, site, slug, examples=examples, social=social, config=config,
        )

    result = _run(_with_stores(root, config, _compile))
    if result is None:
        click.echo(f"Post not found: {site}/{slug}", err=True)
        raise SystemExit(1)

    payload = {
        "post": {k: v for k, v in result.post.items() if k != "content"},
        "document": result.document.to_dict(),
        "adjacent": result.adjacent,
    }
    click.echo(json.dumps(payload, indent=2, default=str, ensure_ascii=False))


@cli.command()
@_project_root_option
def paths(project_root: str) -> None:
    """List SITE/SLUG paths of published posts."""
    root, config = _load(project_root)
    db = _open_db(root, config)
    listed = db.published_paths()
    if not listed:
        click.echo("No published posts.")
        return
    for site, slug in listed:
        click.echo(f"{site}/{slug}")


@cli.command("add-site")
@_project_root_option
@click.argument("subdomain")
@click.option("--custom-domain", default=None, help="Custom domain serving this site.")
@click.option("--name", default=None, help="Display name.")
def add_site(project_root: str, subdomain: str, custom_domain: str | None, name: str | None) -> None:
    """Register a site under SUBDOMAIN."""
    import sqlite3

    root, config = _load(project_root)
    db = _open_db(root, config)
    try:
        site_id = db.add_site(subdomain, custom_domain=custom_domain, name=name)
    except sqlite3.IntegrityError as exc:
        raise click.ClickException(f"Site already exists: {exc}") from exc
    click.echo(f"Added site {subdomain} (id={site_id})")


@cli.command("add-post")
@_project_root_option
@click.argument("site")
@click.argument("post_file", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.option("--slug", default=None, help="Post slug (default: file stem).")
@click.option("--draft", is_flag=True, help="Store unpublished.")
def add_post(project_root: str, site: str, post_file: str, slug: str | None, draft: bool) -> None:
    """Store POST_FILE as a post of SITE. Title and description come from frontmatter."""
    from pressroom.errors import CompileError
    from pressroom.parse import split_frontmatter

    root, config = _load(project_root)
    db = _open_db(root, config)
    site_id = db.get_site_id(site)
    if site_id is None:
        raise click.ClickException(f"Unknown site: {site}")

    path = Path(post_file)
    content = path.read_text()
    try:
        meta = split_frontmatter(content).frontmatter
    except CompileError as exc:
        raise click.ClickException(str(exc)) from exc

    slug = slug or path.stem
    post_id = db.add_post(
        site_id,
        slug,
        content,
        title=meta.get("title"),
        description=meta.get("description"),
        image=meta.get("image"),
        published=not draft,
    )
    click.echo(f"Stored {site}/{slug} (id={post_id})")


@cli.command("add-example")
@_project_root_option
@click.argument("name")
@click.option("--id", "example_id", type=int, default=None, help="Explicit primary key.")
@click.option("--description", default=None)
@click.option("--domain", default=None)
@click.option("--url", default=None)
@click.option("--image", default=None)
def add_example(
    project_root: str,
    name: str,
    example_id: int | None,
    description: str | None,
    domain: str | None,
    url: str | None,
    image: str | None,
) -> None:
    """Add an example record that posts can embed with <Examples names=[id]/>."""
    import sqlite3

    root, config = _load(project_root)
    db = _open_db(root, config)
    try:
        new_id = db.add_example(
            name, description=description, domain=domain, url=url, image=image,
            example_id=example_id,
        )
    except sqlite3.IntegrityError as exc:
        raise click.ClickException(f"Example id already taken: {exc}") from exc
    click.echo(f"Added example {name} (id={new_id})")


@cli.command()
@_project_root_option
@click.option("--once", is_flag=True, help="Build everything once and exit.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging.")
def watch(project_root: str, once: bool, verbose: bool) -> None:
    """Build posts to JSON, then rebuild each post when it changes."""
    from pressroom.config import resolve_paths
    from pressroom.watcher import PostWatcher, build_dir, build_file

    _setup_logging(verbose)
    log = logging.getLogger("pressroom.watch")

    root, config = _load(project_root)
    paths_ = resolve_paths(config, root)
    source_dir = paths_["watch_source"].resolve()
    output_dir = paths_["watch_output"].resolve()
    if not source_dir.is_dir():
        raise click.ClickException(f"Posts directory not found: {source_dir}")

    async def _build_all(db: Any, examples: Any, social: Any):
        return await build_dir(
            source_dir, output_dir, examples=examples, social=social, config=config,
        )

    built = _run(_with_stores(root, config, _build_all))
    click.echo(f"Built {len(built)} post(s) into {output_dir}")
    if once:
        return

    def on_change(path: Path) -> None:
        async def _rebuild(db: Any, examples: Any, social: Any):
            return await build_file(
                path, source_dir, output_dir,
                examples=examples, social=social, config=config,
            )

        try:
            asyncio.run(_with_stores(root, config, _rebuild))
        except _build_errors() as exc:
            log.error("Failed to build %s: %s", path.name, exc)

    watcher = PostWatcher(source_dir, on_change)
    watcher.start()
    click.echo(f"Watching {source_dir} (Ctrl-C to stop)...")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()
