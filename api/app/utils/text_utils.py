"""
Text utility functions.
"""


def strip_markdown_fences(text: str) -> str:
    """
    Remove a surrounding markdown code block (``` or ```json) from LLM output.
    Text without fences is returned stripped of outer whitespace.
    
    Args:
        text: Raw text returned by the model
        
    Returns:
        Text with the code fences removed
    """
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def make_preview(text: str, length: int = 100) -> str:
    """
    Shorten text to at most `length` characters, appending an ellipsis when cut.
    
    Args:
        text: The text to shorten
        length: Maximum number of characters kept from the original text
        
    Returns:
        The preview string
    """
    if len(text) <= length:
        return text
    return text[:length].rstrip() + "..."
