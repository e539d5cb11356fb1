"""Custom styling for questionary prompts."""

from questionary import Style

# ANSI 256 colors for broad terminal compatibility
PROMPT_STYLE = Style(
    [
        ("qmark", "fg:#ffaf00 bold"),  # Amber question mark, every prompt guards a change
        ("question", "bold"),
        ("answer", "fg:#ff87d7 bold"),  # Pink submitted answer
        ("instruction", "fg:#6c6c6c italic"),  # Gray (y/N) hint
        ("text", ""),
    ]
)

QMARK = "? "
