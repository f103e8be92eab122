"""
Round-trip check against a live vector store.

Writes a turn into a throwaway conversation, then polls search until the
turn shows up in the top-K (hosted indexes are eventually consistent), and
checks that a second conversation cannot see it.

Usage:
    python scripts/check_memory.py                     # backend from VECTOR_STORE
    python scripts/check_memory.py --store chroma      # override backend
    python scripts/check_memory.py --attempts 20 --interval 1.5
"""

import sys
import time
import uuid
import argparse

from dotenv import load_dotenv

load_dotenv()

from nurturetalk.config import Settings
from nurturetalk.core.embeddings import get_embedder
from nurturetalk.models.memory import MemoryDocument
from nurturetalk.vector_stores import get_store, needs_embedder


def poll_search(store, query: str, conversation_id: str, expected: str, attempts: int, interval: float) -> bool:
    """Search until ``expected`` is among the results or attempts run out."""
    for attempt in range(1, attempts + 1):
        results = store.search(query, conversation_id)
        texts = [r.page_content for r in results]
        if any(expected in t for t in texts):
            print(f"  Found after {attempt} attempt(s)")
            return True
        print(f"  Attempt {attempt}/{attempts}: {len(results)} results, not yet visible")
        time.sleep(interval)
    return False


def main():
    parser = argparse.ArgumentParser(description="Vector store round-trip check")
    parser.add_argument("--store", type=str, default=None, help="Backend name (default: VECTOR_STORE)")
    parser.add_argument("--attempts", type=int, default=10, help="Search attempts before giving up")
    parser.add_argument("--interval", type=float, default=2.0, help="Seconds between attempts")
    parser.add_argument("--keep", action="store_true", help="Keep the test records")
    args = parser.parse_args()

    settings = Settings()
    if args.store:
        settings.vector_store = args.store

    missing = settings.missing_credentials()
    if missing:
        print(f"ERROR: missing {', '.join(missing)} in .env")
        sys.exit(1)

    embedder = get_embedder(settings) if needs_embedder(settings) else None
    store = get_store(settings.vector_store, settings, embedder)
    print(f"Using {store.name} vector store...")

    conversation_a = f"check-{uuid.uuid4()}"
    conversation_b = f"check-{uuid.uuid4()}"
    marker = f"volunteer onboarding checklist {uuid.uuid4().hex[:8]}"

    print(f"\nUpserting into {conversation_a}...")
    store.upsert([MemoryDocument(role="user", content=f"How do we build a {marker}?")], conversation_a)

    ok = True
    print("\nSearching the same conversation...")
    if not poll_search(store, f"build a {marker}", conversation_a, marker, args.attempts, args.interval):
        print("FAIL: record never became searchable")
        ok = False

    print("\nSearching another conversation...")
    leaked = [r for r in store.search(f"build a {marker}", conversation_b) if marker in r.page_content]
    if leaked:
        print(f"FAIL: {len(leaked)} record(s) leaked across conversations")
        ok = False
    else:
        print("  No cross-conversation results")

    if not args.keep:
        store.delete_conversation(conversation_a)
        print(f"\nCleaned up {conversation_a}")

    print("\nOK" if ok else "\nFAILED")
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
