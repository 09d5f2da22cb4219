"""
Event Scout.

Aggregates candidate B2B event listings from web search results and scraped
pages, extracts structured events with an LLM, de-duplicates them and exposes
live per-source progress.
"""

__version__ = "1.0.0"
