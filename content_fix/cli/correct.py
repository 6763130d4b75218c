# content_fix/cli/correct.py
"""
CLI commands for content correction.

Usage:
    python -m content_fix.cli.correct run input.json
    python -m content_fix.cli.correct run input.json --provider mock --json-logs
    python -m content_fix.cli.correct run - < input.json
    python -m content_fix.cli.correct providers

Input file format:
    {
      "content": {"title": "...", "meta_description": "...", "content": "<p>...</p>"},
      "issues": [{"type": "title_too_long", "current_value": 72, "target_value": 60,
                  "severity": "major", "locations": []}],
      "focus_keyword": "seo tips"
    }
"""

import argparse
import json
import sys

from dotenv import load_dotenv

load_dotenv()


def _configure_logging(args):
    from content_fix.config import get_settings
    from content_fix.logging_config import configure_logging

    settings = get_settings()
    configure_logging(json_format=args.json_logs or settings.LOG_JSON, level=settings.LOG_LEVEL.upper())


def _read_input(path: str) -> dict:
    if path == "-":
        return json.load(sys.stdin)
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def cmd_run(args):
    """Correct one content item and print the result as JSON."""
    from content_fix.llm import get_llm_provider
    from content_fix.services.content_pipeline import correct_content
    from content_fix.services.correction import Content, Issue
    from content_fix.services.resilience import ProviderConfigError

    _configure_logging(args)

    try:
        data = _read_input(args.input)
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error: could not read input {args.input}: {e}", file=sys.stderr)
        return 2

    content = Content.from_dict(data.get("content") or {})
    issues = [Issue.from_dict(item) for item in data.get("issues") or []]
    focus_keyword = data.get("focus_keyword") or ""

    providers = None
    if args.provider:
        try:
            providers = [get_llm_provider(name) for name in args.provider]
        except ProviderConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2

    result = correct_content(content, issues, focus_keyword=focus_keyword, providers=providers)
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0 if result.success else 1


def cmd_providers(args):
    """Show the resolved provider failover chain."""
    from content_fix.config import get_settings
    from content_fix.llm import build_provider_chain

    _configure_logging(args)

    settings = get_settings()
    providers = build_provider_chain(settings)

    print("\n=== Provider Chain ===\n")
    print(f"Configured order: {', '.join(settings.provider_order) or '(none)'}")
    if settings.disabled_providers:
        print(f"Disabled: {', '.join(sorted(settings.disabled_providers))}")

    if not providers:
        print("\nNo usable providers (check API keys)")
        return 1

    print("\nUsable:")
    for i, provider in enumerate(providers, 1):
        print(f"  {i}. {provider.name} ({provider.model_name})")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Content correction CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # run command
    run_parser = subparsers.add_parser("run", help="Correct a content item from a JSON file")
    run_parser.add_argument("input", help="Input JSON file, or - for stdin")
    run_parser.add_argument(
        "--provider",
        action="append",
        help="Provider to use (repeat for a failover chain); defaults to configured chain",
    )
    run_parser.add_argument("--json-logs", action="store_true", help="Emit single-line JSON logs")
    run_parser.set_defaults(func=cmd_run)

    # providers command
    providers_parser = subparsers.add_parser("providers", help="Show resolved provider chain")
    providers_parser.add_argument("--json-logs", action="store_true", help="Emit single-line JSON logs")
    providers_parser.set_defaults(func=cmd_providers)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
