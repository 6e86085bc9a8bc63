"""Command line entry point.

Examples:
    vue-i18n-it scan src/views/home/index.vue
    vue-i18n-it apply src/views/home/index.vue \
      --keys src/views/home/index.vue.i18n.todo.md \
      --translate --languages en,jp
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import Settings, load_env_file, load_settings, parse_languages
from .document import MemoryHighlighter, TextDocument
from .errors import ConfigurationError, KeyFileError
from .export import export_entries
from .keyfile import read_keys, write_keyfile
from .registry import Registry
from .rewriter import rewrite_document
from .scanner import scan_document
from .translate import BaiduTranslateClient, translate_entries

logger = logging.getLogger(__name__)


def display_path(path: Path) -> str:
    try:
        return path.resolve().relative_to(Path.cwd()).as_posix()
    except ValueError:
        return path.as_posix()


def default_keyfile_path(path: Path) -> Path:
    return path.with_name(f"{path.name}.i18n.todo.md")


def open_document(path: Path) -> tuple[TextDocument, Registry]:
    if not path.is_file():
        raise FileNotFoundError(f"Source file not found: {path}")
    document = TextDocument.from_path(path)
    registry = Registry(MemoryHighlighter())
    scan_document(document, registry)
    return document, registry


def cmd_scan(args: argparse.Namespace) -> int:
    path = args.file.resolve()
    document, registry = open_document(path)
    output = args.output.resolve() if args.output else default_keyfile_path(path)
    write_keyfile(output, registry.entries, display_path(path))

    occurrences = sum(len(entry.spans) for entry in registry.entries)
    print(f"Found {len(registry)} text(s) in {occurrences} place(s)")
    print(f"Key file written: {output}")
    return 0


def resolve_settings(args: argparse.Namespace) -> Settings:
    env_file = args.env_file.resolve()
    loaded = load_env_file(env_file)
    if env_file.is_file():
        print(f"Loaded {loaded} env var(s) from {env_file}")
    return load_settings().with_overrides(
        function=args.function,
        languages=parse_languages(args.languages) or None,
        source_language=args.source_language,
        auto_translate=args.translate,
    )


def cmd_apply(args: argparse.Namespace) -> int:
    settings = resolve_settings(args)
    path = args.file.resolve()
    try:
        keys = read_keys(args.keys.resolve())
    except KeyFileError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 2

    document, registry = open_document(path)
    assigned = registry.assign_keys(keys)
    known = {entry.value for entry in registry.entries}
    for value in keys:
        if value not in known:
            print(f"[WARN] No text {value!r} in {display_path(path)}")

    report = rewrite_document(document, registry, function=settings.function)
    print(
        f"Assigned {assigned} key(s); rewrote {len(report.applied)} place(s), "
        f"skipped {len(report.skipped)}"
    )
    for outcome in report.uncertain:
        print(
            f"[WARN] {display_path(path)}:{outcome.span.start.line + 1} "
            f"unrecognised context, inserted {outcome.replacement}"
        )

    if args.dry_run:
        sys.stdout.write(document.text)
        return 0
    document.save()
    print(f"Updated: {path}")

    languages = [lang for lang in settings.languages if lang != settings.source_language]
    if settings.auto_translate and languages:
        try:
            client = BaiduTranslateClient.from_settings(settings)
        except ConfigurationError as exc:
            print(f"[WARN] {exc} Skipping translation.")
        else:
            failures = translate_entries(
                registry.entries,
                client,
                languages,
                source=settings.source_language,
            )
            for lang, error in sorted(failures.items()):
                print(f"[WARN] Translation to {lang} failed: {error.message}")

    export_dir = args.export_dir.resolve() if args.export_dir else path.parent
    written = export_entries(
        registry.entries,
        path,
        export_dir,
        source_language=settings.source_language,
        languages=languages,
    )
    for item in written:
        print(f"Exported: {item}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vue-i18n-it",
        description="Find Chinese text in Vue/TS files and replace it with i18n calls.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="List texts found in a file as an editable key file.")
    scan.add_argument("file", type=Path)
    scan.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Key file path (.md or .json). Default: <file>.i18n.todo.md",
    )
    scan.set_defaults(handler=cmd_scan)

    apply = sub.add_parser("apply", help="Replace keyed texts and export locale files.")
    apply.add_argument("file", type=Path)
    apply.add_argument("--keys", type=Path, required=True, help="Key file written by `scan`.")
    apply.add_argument(
        "--export-dir",
        type=Path,
        default=None,
        help="Directory that receives the i18n/ folder. Default: the file's directory.",
    )
    apply.add_argument("--function", default=None, help="i18n function name. Default: $t")
    apply.add_argument(
        "--translate",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Translate keyed texts with the Baidu API before exporting.",
    )
    apply.add_argument("--languages", default=None, help="Comma-separated target languages.")
    apply.add_argument("--source-language", default=None)
    apply.add_argument(
        "--env-file",
        type=Path,
        default=Path(".env"),
        help="Path to dotenv file with translation credentials. Default: .env",
    )
    apply.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the rewritten file instead of saving and exporting.",
    )
    apply.set_defaults(handler=cmd_apply)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
