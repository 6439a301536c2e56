"""
LLM Prompts for Study Buddy.

Contains prompts for:
- Summaries of user input text (length/format/focus options)
- Quizzes over a summary (multiple choice or true/false)

Quiz prompts ask for a single JSON object; the parser in
quiz_generator extracts and validates it.
"""
from __future__ import annotations

# =============================================================================
# Summary Prompt
# =============================================================================

LENGTH_INSTRUCTIONS = {
    "short": "very concise (1-2 sentences)",
    "medium": "concise (1 paragraph)",
    "long": "detailed but still summarized (2-3 paragraphs)",
}

FORMAT_INSTRUCTIONS = {
    "paragraph": "a coherent paragraph",
    "bullet": "bullet points",
    "numbered": "numbered list",
}

FOCUS_INSTRUCTIONS = {
    "keyPoints": "focus on the key points and main ideas",
    "detailed": "include important details along with main ideas",
    "actionItems": "focus on action items and conclusions",
}

STRATEGY_INSTRUCTIONS = {
    "fast": "Prioritize speed and efficiency.",
    "balanced": "Balance speed and thoroughness.",
    "thorough": "Be comprehensive and detailed in analysis.",
}

PRIORITY_INSTRUCTIONS = {
    "speed": "Generate quickly with good quality.",
    "accuracy": "Ensure maximum accuracy and precision.",
    "creativity": "Use creative and engaging language.",
}

SUMMARY_PROMPT = """Please summarize the following text according to these specifications:
- Length: {length}
- Format: {format}
- Focus: {focus}
- Strategy: {strategy}
- Priority: {priority}

Text to summarize:
"{text}"

Format the summary with clear, concise points using simple dashes (-) instead of asterisks.
Make each point well-structured and easily readable. Avoid using *** or ** or * for formatting or highlighting.
If the format is bullet points or numbered list, ensure each item is a complete sentence without the asterisks.
"""

# =============================================================================
# Quiz Prompt
# =============================================================================

DIFFICULTY_INSTRUCTIONS = {
    "easy": "Focus on basic facts, definitions, and simple recall. Questions should test fundamental understanding.",
    "medium": "Include application, comparison, and analysis questions. Test deeper comprehension and connections.",
    "hard": "Create challenging questions requiring critical thinking, synthesis, and complex reasoning.",
}

TYPE_INSTRUCTIONS = {
    "mcq": '''Create multiple choice questions with exactly 4 options each. Ensure:
  - Only one option is clearly correct
  - Distractors are plausible but incorrect
  - Options are roughly equal in length
  - Avoid "all of the above" or "none of the above"''',
    "true-false": """Create true/false questions that:
  - Test specific facts or concepts
  - Avoid ambiguous statements
  - Include both true and false correct answers
  - Choices should be exactly ["True", "False"]""",
}

QUIZ_PROMPT = """You are an expert educational assessment creator. Generate a high-quality quiz based STRICTLY on the provided content.

CONTENT TO USE:
---
{summary}
---

REQUIREMENTS:
- Generate exactly {num_questions} questions
- Difficulty level: {difficulty} - {difficulty_instructions}
- Question type: {question_type}
- {type_instructions}

QUALITY STANDARDS:
- Questions must be directly answerable from the provided content
- Avoid questions requiring external knowledge
- Each question should test a different concept/fact
- Provide clear, educational explanations for correct answers
- Use varied question stems and formats

OUTPUT FORMAT (JSON only, no markdown):
{{
  "questions": [
    {{
      "id": "unique_id_string",
      "question": "Clear, specific question text",
      "choices": ["Option A", "Option B", "Option C", "Option D"],
      "correct": "Exact text of correct option",
      "explanation": "Clear explanation of why this answer is correct and others are wrong",
      "difficulty": "{difficulty}",
      "concept": "Main concept being tested"
    }}
  ]
}}

Generate the quiz now:"""


# =============================================================================
# Prompt Factory
# =============================================================================


def get_summary_prompt(
    text: str,
    length: str = "medium",
    format: str = "paragraph",
    focus: str = "keyPoints",
    strategy: str = "balanced",
    priority: str = "accuracy",
) -> str:
    """
    Build the summarization prompt.

    Args:
        text: User input to summarize
        length: short, medium or long
        format: paragraph, bullet or numbered
        focus: keyPoints, detailed or actionItems
        strategy: fast, balanced or thorough
        priority: speed, accuracy or creativity

    Returns:
        Formatted prompt string
    """
    return SUMMARY_PROMPT.format(
        length=LENGTH_INSTRUCTIONS[length],
        format=FORMAT_INSTRUCTIONS[format],
        focus=FOCUS_INSTRUCTIONS[focus],
        strategy=STRATEGY_INSTRUCTIONS[strategy],
        priority=PRIORITY_INSTRUCTIONS[priority],
        text=text,
    )


def get_quiz_prompt(
    summary: str,
    num_questions: int,
    difficulty: str,
    question_type: str,
) -> str:
    """Build the quiz generation prompt for a summary."""
    return QUIZ_PROMPT.format(
        summary=summary,
        num_questions=num_questions,
        difficulty=difficulty,
        difficulty_instructions=DIFFICULTY_INSTRUCTIONS[difficulty],
        question_type=question_type,
        type_instructions=TYPE_INSTRUCTIONS[question_type],
    )
