"""LLM access and prompt management for the extraction step."""
