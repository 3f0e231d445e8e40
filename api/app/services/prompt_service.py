"""
Service for generating LLM prompts.
"""

FLASHCARD_SYSTEM_INSTRUCTION = "You are an expert educational flashcard creator."

# Structured output contract passed as response_format
FLASHCARD_RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "flashcards": {
            "type": "array",
            "description": "Array of generated flashcards",
            "items": {
                "type": "object",
                "properties": {
                    "front": {
                        "type": "string",
                        "description": "Question or front side of the flashcard"
                    },
                    "back": {
                        "type": "string",
                        "description": "Answer or back side of the flashcard"
                    }
                },
                "required": ["front", "back"],
                "additionalProperties": False
            }
        }
    },
    "required": ["flashcards"],
    "additionalProperties": False
}


def generate_flashcards_system_instruction() -> str:
    """
    Generate the system instruction for flashcard generation.

    Returns:
        The system instruction string
    """
    return FLASHCARD_SYSTEM_INSTRUCTION


def generate_flashcards_prompt(source_text: str) -> str:
    """
    Generate the user prompt asking for question/answer flashcards.

    Args:
        source_text: The study material the flashcards are built from

    Returns:
        The prompt string
    """
    return f"""You create study flashcards. From the source text below, generate a set of question-answer flashcards.

Rules:
1. Each flashcard must hold a concrete, checkable fact from the text
2. Questions (front) must be clear and unambiguous
3. Answers (back) must be concise but complete
4. Avoid questions that are too general or open to several readings
5. Generate 5-15 flashcards depending on how much material there is
6. Write the flashcards in the same language as the source text

Source text:
{source_text}"""
