from typing import List, Protocol, Tuple
import logging

from .fact_extractor import Fact
from .vector_store import VectorIndex


logger = logging.getLogger(__name__)


# Facts are very short sentences, so retrieval leans towards recall.
CONTEXT_TOP_K = 15

ERROR_PREFIX = "Bot Error: "


SYSTEM_PROMPT = (
    "You are a helpful book recommendation assistant for a library system. "
    "Answer questions using ONLY the information provided in the context below. "
    "Do NOT use any external knowledge about books.\n\n"
    "The context contains:\n"
    "- BOOK facts: titles, genres, authors, and reading levels of books in our database\n"
    "- USER facts: user preferences (preferred genres and reading levels)\n\n"
    "When someone asks for a recommendation:\n"
    "- If they mention a genre they like (e.g. 'I like Fantasy'), recommend books "
    "with matching genres from the context\n"
    "- If they ask about a specific user (e.g. 'What would Alice like?'), match "
    "that user's preferences to books\n"
)


class Completer(Protocol):
    def complete(self, prompt: str) -> str: ...


def build_prompt(context: str, question: str) -> str:
    return (
        SYSTEM_PROMPT
        + "Context from database:\n"
        + context
        + "\n\nQuestion: "
        + question
        + "\n\nAnswer:"
    )


class RetrievalOrchestrator:
    """
    Stateless question answering over the fact index.

    The question is embedded by the index itself, so it always shares the
    embedding space of the stored facts. The top facts become the grounding
    context and the completion collaborator produces the answer.
    """

    def __init__(self, index: VectorIndex, completer: Completer):
        self.index = index
        self.completer = completer

    def retrieve(self, question: str) -> List[Tuple[Fact, float]]:
        return self.index.search(question, CONTEXT_TOP_K)

    def build_context(self, question: str) -> str:
        matches = self.retrieve(question)
        logger.info("Retrieved %d fact(s) for question: %s", len(matches), question)
        return "\n".join(fact.text for fact, _ in matches)

    def answer(self, question: str) -> str:
        """
        Answer a question from retrieved facts.

        Never raises: any failure is turned into a message starting with
        "Bot Error: ".
        """
        try:
            context = self.build_context(question)
            prompt = build_prompt(context, question)
            answer = self.completer.complete(prompt)
            logger.info("LLM answered (response length=%d chars)", len(answer))
        except Exception as e:
            logger.exception("Failed to answer question: %s", question)
            return f"{ERROR_PREFIX}I'm having trouble connecting to the AI. {e}"
        return answer


__all__ = [
    "CONTEXT_TOP_K",
    "ERROR_PREFIX",
    "SYSTEM_PROMPT",
    "Completer",
    "build_prompt",
    "RetrievalOrchestrator",
]
