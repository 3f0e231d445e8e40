"""
Utility functions for schema validation.
"""


def normalize_card_text(v: str) -> str:
    """
    Strip surrounding whitespace from flashcard text and reject blank values.
    
    Args:
        v: Front or back text as submitted
        
    Returns:
        The stripped text
        
    Raises:
        ValueError: If nothing but whitespace was submitted
    """
    v_normalized = v.strip()
    if not v_normalized:
        raise ValueError("Text cannot be empty")
    return v_normalized
