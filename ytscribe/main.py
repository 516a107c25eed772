"""
Command line entry point for ytscribe.

Fetches a transcript (or a summary) for one URL using the same flows as the
HTTP API.
"""

import sys
import json
import asyncio
import argparse
from dotenv import load_dotenv

from ytscribe.config import config
from ytscribe.core.exceptions import TranscriptServiceError
from ytscribe.core.transcript_service import build_service
from ytscribe.utils.caching import create_cache_store


async def run(url: str, lang: str = None, summary: bool = False, model: str = None) -> dict:
    """Run one transcript or summary request against the configured cache store."""
    store = create_cache_store(config.REDIS_URL)
    service = build_service(store)
    try:
        if summary:
            return await service.smart_summary(url, model, lang, include_metadata=True)
        return await service.smart_transcript(url, lang, detailed=True)
    finally:
        await store.close()


def main():
    """Main function to run the application from command line."""
    parser = argparse.ArgumentParser(description="YouTube transcript fetcher")
    parser.add_argument("url", help="YouTube video URL")
    parser.add_argument("--lang", help="Caption language code (default: best available)")
    parser.add_argument("--summary", action="store_true", help="Generate a summary instead of a transcript")
    parser.add_argument("--model", default=config.DEFAULT_SUMMARY_MODEL,
                        help="Summary model endpoint (chatgpt, deepseek, anthropic)")
    parser.add_argument("--json", action="store_true", help="Print the full JSON response")

    args = parser.parse_args()

    # Load environment variables
    load_dotenv()

    try:
        result = asyncio.run(run(args.url, args.lang, args.summary, args.model))
    except TranscriptServiceError as e:
        print(f"Error ({e.status_code}): {e.message}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    elif args.summary:
        print(result["summary"])
    else:
        print("\n" + "=" * 80)
        print(f"{result['title']} ({result['duration']} min, {result['transcriptLanguageCode']})")
        print("=" * 80)
        print(result["transcript"])
        print("=" * 80)


if __name__ == "__main__":
    main()
