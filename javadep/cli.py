"""CLI entrypoint for javadep."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, NamedTuple, Optional, Sequence

from .classpath import ClasspathError, list_jars
from .config import ConfigError, JavadepConfig, load_config
from .logging import configure_logging, get_logger
from .models import ScanPolicy
from .report import RENDERERS
from .traversal import analyze


class ClasspathArg(NamedTuple):
    """A ``--root`` directory (expanded to its jars) or a single ``--path-element``."""

    kind: str
    path: Path


def _root_arg(value: str) -> ClasspathArg:
    return ClasspathArg("root", Path(value).expanduser())


def _path_element_arg(value: str) -> ClasspathArg:
    return ClasspathArg("path", Path(value).expanduser())


def _add_switch(
    parser: argparse.ArgumentParser,
    dest: str,
    on: Sequence[str],
    off: Sequence[str],
    help_on: str,
    help_off: str,
) -> None:
    parser.add_argument(*on, dest=dest, action="store_const", const=True, help=help_on)
    parser.add_argument(*off, dest=dest, action="store_const", const=False, help=help_off)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="javadep",
        description="List the classes and jars that compiled Java classes depend on.",
    )
    parser.add_argument(
        "-c",
        "--class",
        dest="classes",
        action="append",
        default=[],
        metavar="NAME",
        help="Fully-qualified seed class name (repeatable).",
    )
    parser.add_argument(
        "-r",
        "--root",
        dest="classpath",
        action="append",
        type=_root_arg,
        default=[],
        metavar="DIR",
        help="Add every *.jar found below DIR to the classpath (repeatable).",
    )
    parser.add_argument(
        "-p",
        "--path-element",
        dest="classpath",
        action="append",
        type=_path_element_arg,
        metavar="PATH",
        help="Add a jar or class directory to the classpath (repeatable).",
    )
    parser.add_argument(
        "--system-path",
        dest="system_path",
        action="append",
        type=Path,
        default=[],
        metavar="PATH",
        help="Archive searched after the classpath and treated as a system archive.",
    )
    parser.add_argument(
        "--java-home",
        type=Path,
        default=None,
        help="JDK whose runtime classes resolve without an archive (defaults to $JAVA_HOME).",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log progress information."
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Only log errors."
    )
    parser.add_argument(
        "-d", "--debug", action="store_true", help="Log every discovered dependency."
    )
    _add_switch(
        parser,
        "system",
        ("-s", "--system"),
        ("-S", "--no-system"),
        "Report and follow archives outside the classpath.",
        "Ignore archives outside the classpath (default).",
    )
    _add_switch(
        parser,
        "code",
        ("-o", "--code"),
        ("-O", "--no-code"),
        "Follow field and method references in method bodies (default).",
        "Ignore references in method bodies.",
    )
    _add_switch(
        parser,
        "declarations",
        ("-e", "--decl", "--declaration"),
        ("-E", "--no-decl", "--no-declaration"),
        "Follow types used in field and method declarations (default).",
        "Ignore types used in declarations.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("."),
        help="Path to .javadep.yml or the directory holding it (defaults to the current directory).",
    )
    parser.add_argument(
        "--cache",
        type=Path,
        default=None,
        help="JSON file caching scan results between runs.",
    )
    parser.add_argument(
        "--format",
        choices=sorted(RENDERERS),
        default="text",
        help="Report format.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records to this file.",
    )
    return parser


def _expand_classpath(entries: Sequence[ClasspathArg]) -> List[Path]:
    classpath: List[Path] = []
    for entry in entries:
        if entry.kind == "root":
            classpath.extend(list_jars(entry.path))
        else:
            classpath.append(entry.path)
    return classpath


def _merge_policy(config: JavadepConfig, args: argparse.Namespace) -> ScanPolicy:
    base = config.policy.to_policy()
    return ScanPolicy(
        declarations=base.declarations if args.declarations is None else args.declarations,
        code=base.code if args.code is None else args.code,
        system=base.system if args.system is None else args.system,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint for javadep."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        quiet=args.quiet, verbose=args.verbose, debug=args.debug, log_file=args.log_file
    )
    logger = get_logger("cli")

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        parser.exit(2, f"javadep: {exc}\n")

    seeds = [*config.classes, *args.classes]
    if not seeds:
        logger.warning("No classes given; use -c/--class or the 'classes' config key")

    try:
        config_entries = [ClasspathArg("root", path) for path in config.roots]
        config_entries += [ClasspathArg("path", path) for path in config.path_elements]
        classpath = _expand_classpath([*config_entries, *args.classpath])
        result = analyze(
            seeds,
            classpath,
            system_path=[*config.system_path, *args.system_path],
            java_home=args.java_home or config.java_home,
            policy=_merge_policy(config, args),
            cache_path=args.cache or config.cache,
        )
    except ClasspathError as exc:
        parser.exit(1, f"javadep: {exc}\n")

    sys.stdout.write(RENDERERS[args.format](result))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
