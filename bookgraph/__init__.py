"""
Core package for the book knowledge-graph assistant.

Facts are extracted from a small triple store of books and readers,
embedded with a local MiniLM sentence-transformer and retrieved as
grounding context for an OpenAI-compatible chat endpoint.
"""
