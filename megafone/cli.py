#!/usr/bin/env python3
import argparse
import sys
from pathlib import Path

from megafone.errors import MegafoneError
from megafone.logs import show_logs
from megafone.orchestrator import GenerateOptions, run_generate
from megafone.utils import build_run_logger, close_run_logger, redact_secrets
from megafone.writer import log_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="megafone",
        description="AI-powered content generation for Hugo sites",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Generate a new blog post from a repository, website or topic")
    gen.add_argument("-t", "--topic", required=True, help="GitHub repository URL, website URL or research topic")
    gen.add_argument("-s", "--site-source", dest="site_source", help="Path to local Hugo site repository")
    gen.add_argument("-i", "--image", help="Path to hero image")
    gen.add_argument("-T", "--tags", help="Comma-separated tags (AI will suggest if not provided)")
    gen.add_argument("-p", "--prompt", help="Path to prompt template file (overrides the built-in template)")
    gen.add_argument("-d", "--dry-run", dest="dry_run", action="store_true", help="Print generated content without writing files")
    gen.add_argument("-m", "--model", help="OpenAI model to use (default gpt-4o-mini)")
    gen.add_argument("-k", "--openai-key", dest="openai_key", help="OpenAI API key (or set OPENAI_API_KEY env var)")
    gen.add_argument("-c", "--config", help="Path to YAML config file")

    logs = sub.add_parser("logs", help="View generation logs")
    logs.add_argument("-n", "--tail", type=int, default=50, help="Number of lines to show from the end")
    logs.add_argument("-f", "--follow", action="store_true", help="Follow log output (like tail -f)")
    logs.add_argument("-s", "--site-source", dest="site_source", default=".", help="Hugo site whose logs to show")
    return parser


def _generate(args) -> int:
    log = build_run_logger()
    opts = GenerateOptions(
        topic=args.topic,
        site_source=args.site_source,
        image=args.image,
        tags=args.tags,
        prompt=args.prompt,
        dry_run=args.dry_run,
        model=args.model,
        openai_key=args.openai_key,
        config=args.config,
    )
    try:
        run_generate(opts, log)
    except MegafoneError as e:
        message = redact_secrets(str(e), extra=(args.openai_key,) if args.openai_key else ())
        log.error("%s", message)
        print(f"Error: {message}", file=sys.stderr)
        return 1
    finally:
        close_run_logger(log)
    return 0


def _logs(args) -> int:
    path = log_path(Path(args.site_source).expanduser().resolve())
    try:
        show_logs(path, sys.stdout, tail=args.tail, follow_output=args.follow)
    except KeyboardInterrupt:
        return 0
    except OSError as e:
        print(f"Error: failed to read log file: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "generate":
        return _generate(args)
    return _logs(args)


if __name__ == "__main__":
    sys.exit(main())
