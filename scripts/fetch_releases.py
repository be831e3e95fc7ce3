"""
Fetch Releases Script

Runs the catalog refresh once from the command line, optionally limited
to specific TMDB query types.

Usage:
    python scripts/fetch_releases.py
    python scripts/fetch_releases.py discover/movie tv/airing_today
"""

import os
import sys
import asyncio

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from app.core.logging import setup_logging
from app.jobs.ingestion import IngestionJob, default_batches


async def main(query_types):
    batches = default_batches()
    if query_types:
        unknown = set(query_types) - {query_type for query_type, _ in batches}
        if unknown:
            print(f"❌ Unknown query types: {', '.join(sorted(unknown))}")
            return 1
        batches = [(q, params) for q, params in batches if q in query_types]

    summary = await IngestionJob(batches=batches).run()

    for batch in summary.batches:
        status = f"❌ {batch.error}" if batch.error else "✅"
        print(f"{status} {batch.query_type}: fetched={batch.fetched} kept={batch.kept} persisted={batch.persisted}")
    if summary.pruning_skipped:
        print("⚠️  Stale releases kept (a batch failed)")
    else:
        print(f"🧹 Pruned {summary.pruned} stale releases")

    return 1 if summary.failed_batches else 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(main(sys.argv[1:])))
