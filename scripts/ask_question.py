import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path so that 'bookgraph' package can be imported
CURRENT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = CURRENT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from bookgraph.config import get_settings
from bookgraph.library import create_library


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        force=True,
    )
    logger = logging.getLogger(__name__)

    if len(sys.argv) < 2:
        print("Usage: python scripts/ask_question.py <question>")
        sys.exit(1)

    question = " ".join(sys.argv[1:])
    settings = get_settings()
    logger.info("Using LLM_BASE_URL=%s, model=%s", settings.llm_base_url, settings.llm_model_name)
    logger.info("Using graph backend=%s", settings.graph_backend)

    library = create_library(settings)
    library.init()
    logger.info("Index ready with %d fact(s)", len(library.index))

    answer = library.ask(question)
    print(f"Question: {question}")
    print(f"Answer:   {answer}")


if __name__ == "__main__":
    main()
