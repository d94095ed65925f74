"""Build the search index from a directory of markdown posts.

Usage:
    python -m scripts.build_index [POSTS_DIR] [--output PATH]

This script:
1. Loads every post under POSTS_DIR, oldest first
2. Tokenizes and indexes title + body
3. Scores every term/document pair (TF-IDF with recency boost)
4. Writes search.json; nothing is written if any step fails
"""

import argparse
import logging
import sys

from rankedsearch.config import settings
from rankedsearch.errors import RankedSearchError
from rankedsearch.services.indexer.pipeline import generate_index


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate the ranked search index.")
    parser.add_argument("posts_dir", nargs="?", default=settings.posts_dir)
    parser.add_argument("--output", "-o", default=settings.index_path)
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose or settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s %(message)s",
    )

    print("=== Ranked Search: generating search index ===\n")
    try:
        index = generate_index(args.posts_dir, args.output)
    except RankedSearchError as e:
        print(f"Build failed, no index written: {e}", file=sys.stderr)
        return 1

    print(f"Documents: {index.total_docs}")
    print(f"Terms:     {len(index.vocabulary)}")
    print(f"Output:    {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
