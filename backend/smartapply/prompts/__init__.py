"""Prompt templates for LLM interactions.

Modules:
    roadmap: Career roadmap, alternative careers and health check prompts
"""
