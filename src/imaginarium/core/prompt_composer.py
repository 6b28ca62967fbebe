"""Final instruction text for the generation service.

Without a mask the instruction is simply the user's trimmed prompt.  With a
mask, the prompt is wrapped in a fixed template that scopes the edit to the
highlighted region:

    (IMPORTANT: Modify ONLY the area highlighted in magenta to match this
    description: <prompt>. Do NOT modify the rest of the image.)

The mask itself reaches the service only as highlighted pixels baked into the
reference image, so this is a soft, prompt-level constraint rather than a
pixel-exact one.

The gallery always records the user's prompt, never the composed
instruction.
"""

from __future__ import annotations

from imaginarium.core.models import MASK_HIGHLIGHT_COLOR_NAME

MASK_REGION_DIRECTIVE = (
    f"Modify ONLY the area highlighted in {MASK_HIGHLIGHT_COLOR_NAME} to match this description:"
)
PRESERVE_REST_DIRECTIVE = "Do NOT modify the rest of the image."


def compose(user_prompt: str, mask_was_used: bool) -> str:
    """Build the instruction sent to the generator.

    Args:
        user_prompt: Raw prompt as typed by the user
        mask_was_used: Whether any mask stroke was drawn on the reference

    Returns:
        The trimmed prompt, or the mask template embedding it verbatim.
        A blank prompt stays blank even with a mask.
    """
    trimmed = user_prompt.strip()
    if not mask_was_used or not trimmed:
        return trimmed
    return f"(IMPORTANT: {MASK_REGION_DIRECTIVE} {trimmed}. {PRESERVE_REST_DIRECTIVE})"
