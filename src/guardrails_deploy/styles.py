"""Custom styling for questionary prompts.

This module provides a consistent style for the interactive prompts
(API key entry).
"""

from questionary import Style

# ANSI 256 colors for broad terminal compatibility
PROMPT_STYLE = Style(
    [
        ("qmark", "fg:#76b900 bold"),  # Green question mark
        ("question", "bold"),
        ("answer", "fg:#76b900 bold"),
        ("instruction", "fg:#6c6c6c italic"),
        ("text", ""),
    ]
)

QMARK = "? "
