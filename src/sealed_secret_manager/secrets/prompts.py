"""Interactive confirmation prompts.

The lifecycle manager asks for approval before every mutation through an
injected ``Confirm`` callable; these are the two implementations the CLI
chooses between.
"""

import questionary

from sealed_secret_manager.styles import PROMPT_STYLE, QMARK


def confirm(message: str) -> bool:
    """Ask the operator to approve an action; defaults to No.

    Args:
        message: The question to display.

    Returns:
        True if the operator approved.

    """
    return bool(
        questionary.confirm(
            message,
            default=False,
            style=PROMPT_STYLE,
            qmark=QMARK,
        ).unsafe_ask()
    )


def auto_approve(message: str) -> bool:  # noqa: ARG001
    """Approve without asking (``--yes``)."""
    return True
