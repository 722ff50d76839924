"""Command line entry point: ask a question or backfill embeddings."""

import argparse
import sys
from collections.abc import Sequence

from museum_guide.application.dto.backfill_dto import BackfillRequest
from museum_guide.application.dto.query_dto import QueryRequest
from museum_guide.config.compose import Container, build_container
from museum_guide.config.logging_setup import configure_logging
from museum_guide.domain.errors import DomainError
from museum_guide.domain.models import GroundedAnswer
from museum_guide.domain.services.citations import (
    confidence_label,
    dedupe_top,
    display_host,
    similarity_percent,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="museum-guide")
    sub = parser.add_subparsers(dest="command", required=True)

    ask = sub.add_parser("ask", help="Answer a visitor question")
    ask.add_argument("--museum-id", required=True)
    ask.add_argument("--question", required=True)
    ask.add_argument("--k", type=int, default=None, help="Strong matches to use (1-10)")

    backfill = sub.add_parser("backfill", help="Embed passages that have no vector yet")
    backfill.add_argument("--museum-id", required=True)
    backfill.add_argument("--limit", type=int, default=50)
    return parser


def format_answer(answer: GroundedAnswer) -> str:
    lines = ["=" * 80, "ANSWER:", "=" * 80, answer.text]
    top = dedupe_top(answer.citations, limit=1)
    if top:
        lines += ["", "=" * 80, "SOURCES:", "=" * 80]
        for i, c in enumerate(top, 1):
            pct = similarity_percent(c.similarity)
            where = display_host(c.source_url) if c.source_url else "Source document"
            lines.append(f"#{i} {where} {pct}% {confidence_label(pct)}")
    return "\n".join(lines)


def run(argv: Sequence[str] | None = None, container: Container | None = None) -> int:
    args = build_parser().parse_args(argv)
    container = container or build_container()
    configure_logging(container.settings.log_level)

    try:
        if args.command == "ask":
            result = container.get_answer_use_case().execute(
                QueryRequest(tenant_id=args.museum_id, question=args.question, match_count=args.k)
            )
            if result.ok and result.value is not None:
                print(format_answer(result.value))
                return 0
        else:
            result = container.get_backfill_use_case().execute(
                BackfillRequest(tenant_id=args.museum_id, limit=args.limit)
            )
            if result.ok and result.value is not None:
                print(f"embedded={result.value.embedded} updated={result.value.updated}")
                return 0
    except DomainError as ex:
        print(f"[ERROR] {type(ex).__name__}: {ex}", file=sys.stderr)
        return 2

    err = result.error
    print(f"[ERROR] {type(err).__name__}: {err}", file=sys.stderr)
    return 1


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
