"""CLI entrypoints for wasmjsgen commands."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, List

from .config import ConfigError, GenerationConfig, load_config
from .descriptors import DescriptorError, load_descriptor_set
from .fileset import DirectoryHost
from .generator import GenerationError, Generator
from .logging import configure_logging


def _add_verbosity_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    default: object = argparse.SUPPRESS if suppress_default else False
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default,
        help="Log every collection and planning decision.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=default,
        help="Only report warnings and errors.",
    )


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    _add_verbosity_options(parser, suppress_default=True)
    parser.add_argument(
        "descriptors",
        help="YAML or JSON descriptor set listing the schema files to compile.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to .wasmjsgen.yml or the directory holding it (defaults to the current directory).",
    )
    parser.add_argument(
        "--opt",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a configuration option; may be repeated.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write debug-level diagnostics to this file.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wasmjsgen",
        description="Generate Go/WASM wrappers and TypeScript clients from schema descriptors.",
    )
    _add_verbosity_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan_parser = subparsers.add_parser(
        "plan",
        help="Print the output paths a generation run would produce.",
    )
    _add_common_options(plan_parser)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Render and write every planned file.",
    )
    _add_common_options(generate_parser)
    generate_parser.add_argument(
        "--out",
        required=True,
        help="Directory that receives the generated files.",
    )
    return parser


def _parse_overrides(values: List[str]) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    for item in values:
        if "=" not in item:
            raise ConfigError(f"invalid --opt value: {item} (expected KEY=VALUE)")
        key, value = item.split("=", 1)
        overrides[key.strip()] = value.strip()
    return overrides


def _load_config(args: argparse.Namespace) -> GenerationConfig:
    config_path = Path(args.config) if args.config else Path.cwd()
    return load_config(config_path, _parse_overrides(args.opt))


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for wasmjsgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if getattr(args, "log_file", None) else None
    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=log_file)

    try:
        config = _load_config(args)
        files = load_descriptor_set(Path(args.descriptors))
    except (ConfigError, DescriptorError) as exc:
        parser.exit(1, f"wasmjsgen {args.command} failed: {exc}\n")

    generator = Generator()

    if args.command == "plan":
        try:
            _, plan = generator.plan(files, config)
        except GenerationError as exc:
            parser.exit(1, f"wasmjsgen plan failed: {exc}\nRun with --verbose for more details.\n")
        for path in plan.paths():
            print(path)
    elif args.command == "generate":
        host = DirectoryHost(Path(args.out))
        try:
            result = generator.generate(files, config, host)
        except GenerationError as exc:
            parser.exit(
                1, f"wasmjsgen generate failed: {exc}\nRun with --verbose for more details.\n"
            )
        if result.is_empty:
            print("Nothing to generate")
        else:
            print(f"Generated {len(result.written)} files in {args.out}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":  # pragma: no cover
    main()
