import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path so that 'bookgraph' package can be imported
CURRENT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = CURRENT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from bookgraph.library import create_library
from bookgraph.rag_pipeline import CONTEXT_TOP_K


def main() -> None:
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        force=True,
    )

    library = create_library()
    library.init()

    print(f"=== {len(library.index)} fact(s) in index ===")
    for fact in library.index.facts:
        print(f"  [{fact.kind.value}] {fact.text}")

    if len(sys.argv) < 2:
        return

    query = " ".join(sys.argv[1:])
    print(f"\n=== Top {CONTEXT_TOP_K} for: {query} ===")
    for fact, score in library.index.search(query, CONTEXT_TOP_K):
        print(f"  {score:.3f}  {fact.text}")


if __name__ == "__main__":
    main()
