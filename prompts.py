# prompts.py

EXTRACTION_PROMPT = (
    "List all Japanese sentences in these images, separated by a newline. "
    "Say nothing else."
)


def get_extraction_prompt() -> str:
    """
    Returns the instruction sent ahead of the images in every request.
    The model is asked for bare sentences, one per line, so the reply can
    be split on newlines without further parsing.
    """
    return EXTRACTION_PROMPT
