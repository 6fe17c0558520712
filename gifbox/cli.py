"""Command-line interface for the image store.

Environment variables:
    GIFBOX_STORE: Store directory (overrides the config file)
    GIFBOX_CONFIG: Path to a YAML config file with a `store_path` key
    GIFBOX_HTTP_TIMEOUT: Timeout in seconds for each URL fetch (default: 30)
"""

import argparse
import logging
import sys

import yaml
from dotenv import load_dotenv
from tqdm import tqdm

from .config import store_path
from .core.addressing import FetchError
from .core.filters import NullFilter, RemoteFilter, build_filter
from .core.outcome import OutcomeSink
from .storage.store import Store
from .transfer.exporter import wants_bundle
from .transfer.importer import ImportFormatError, import_location


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def get_store(args) -> Store:
    """Open the store selected by --store, the environment or the config file."""
    if args.store:
        return Store(args.store)
    try:
        return Store(store_path(args.config))
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}")
        sys.exit(1)


def listing_filter(args, remote_only: bool = False):
    try:
        return build_filter(args.type, args.order, args.limit, remote_only=remote_only)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def import_command(args):
    """Import a bundle, a URL manifest, a URL or a directory of images."""
    store = get_store(args)
    sink = OutcomeSink(write=tqdm.write)

    try:
        import_location(
            store, args.location, sink,
            recursive=args.recursive,
            progress=sys.stderr.isatty(),
        )
    except (FetchError, ImportFormatError, OSError) as e:
        print(f"Import Error: {e}")
        sys.exit(1)

    print(f"\nDone: {sink.summary()}")
    print(f"Total in store: {store.count()}")


def export_command(args):
    """Export metadata, or a full bundle with content."""
    store = get_store(args)
    include_content = wants_bundle(args.output, args.bundle)

    # Metadata-only exports list remote entries only
    export_filter = NullFilter() if include_content else RemoteFilter(NullFilter())

    try:
        if args.output == "-":
            store.export(sys.stdout.buffer, export_filter, include_content)
            sys.stdout.buffer.flush()
        else:
            with open(args.output, "wb") as f:
                store.export(f, export_filter, include_content)
    except OSError as e:
        print(f"Export error: {e}")
        sys.exit(1)


def list_command(args):
    """List stored entries."""
    store = get_store(args)
    entries = store.list(listing_filter(args))

    if not entries:
        print("Store is empty")
        return

    print(f"{'ID':<10} {'Type':<5} {'Size':>12} {'Added':<12} {'Tags / URL'}")
    print("-" * 80)
    for e in entries:
        added = e.added_at.strftime('%Y-%m-%d') if e.added_at else 'N/A'
        detail = ", ".join(e.tags) or e.url
        print(f"{e.id[:8]}.. {e.type or '?':<5} {e.size:>10} B {added:<12} {detail}")
    print(f"\nTotal: {len(entries)} image(s)")


def urls_command(args):
    """Print source URLs of remote entries."""
    store = get_store(args)
    for entry in store.list(listing_filter(args, remote_only=True)):
        print(entry.url)


def paths_command(args):
    """Print store paths of entries."""
    store = get_store(args)
    for entry in store.list(listing_filter(args)):
        print(store.path_for(entry))


def purge_command(args):
    """Delete the entire store."""
    store = get_store(args)
    if not args.yes:
        answer = input(f"Delete everything in {store.root}? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Aborted")
            return
    try:
        store.purge()
    except OSError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(f"Removed {store.root}")


def _add_listing_options(parser):
    parser.add_argument("--type", "-t", default="", help="Only entries of this type (e.g. gif, png)")
    parser.add_argument(
        "--order", "-O",
        choices=["newest", "oldest", "random"],
        default=None,
        help="Sort order by addition date",
    )
    parser.add_argument("--limit", "-n", type=int, default=0, help="Maximum number of entries (0: no limit)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gifbox",
        description="Content-addressed image store with bundle import/export",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to YAML config file")
    parser.add_argument("--store", "-s", default=None, help="Store directory (overrides config)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Import a bundle, manifest, URL or directory")
    import_parser.add_argument("location", help="URL, file, directory, or - for stdin")
    import_parser.add_argument("--recursive", "-r", action="store_true", help="Recurse into subdirectories")
    import_parser.set_defaults(func=import_command)

    export_parser = subparsers.add_parser("export", help="Export metadata or a full bundle")
    export_parser.add_argument(
        "--output", "-o",
        default="-",
        help="Output file, - for stdout. Names ending in .tar.gz or .gifb produce a bundle",
    )
    export_parser.add_argument("--bundle", "-b", action="store_true", help="Include image content")
    export_parser.set_defaults(func=export_command)

    list_parser = subparsers.add_parser("list", help="List stored images")
    _add_listing_options(list_parser)
    list_parser.set_defaults(func=list_command)

    urls_parser = subparsers.add_parser("urls", help="Print source URLs of remote images")
    _add_listing_options(urls_parser)
    urls_parser.set_defaults(func=urls_command)

    paths_parser = subparsers.add_parser("paths", help="Print store paths of images")
    _add_listing_options(paths_parser)
    paths_parser.set_defaults(func=paths_command)

    purge_parser = subparsers.add_parser("purge", help="Delete the entire store")
    purge_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    purge_parser.set_defaults(func=purge_command)

    return parser


def main(argv=None):
    load_dotenv()

    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
