"""Prompt template for shotlist extraction."""

from __future__ import annotations

SHOTLIST_PROMPT = """Extract all people explicitly mentioned in this script. For each person, provide their name and a Getty Images-compatible search term that includes relevant context (event, date, location if mentioned in the script).

Return ONLY a valid JSON array with this exact format:
[{{"name": "Person Name", "searchTerm": "Person Name context"}}]

Examples:
[{{"name": "Taylor Swift", "searchTerm": "Taylor Swift 2025 Grammy Awards"}}]
[{{"name": "Joe Biden", "searchTerm": "Joe Biden White House 2024"}}]

Script:
{script}"""


def build_shotlist_prompt(script: str) -> str:
    """Fill the extraction template with the operator's script."""
    return SHOTLIST_PROMPT.format(script=script)
