"""Prompt templates for quiz and exam generation."""
from __future__ import annotations

FORMAT_INSTRUCTIONS = """\
Format the questions and answers as follows:
- For multiple choice questions:
    Question: (question)
    a) (answer)
    b) (answer)
    c) (answer)
    d) (answer)
    Correct answer: (a, b, c or d)
    Explanation: (explain why this is the correct answer)
- For True or False questions:
    Question: (question)
    Correct answer: (True or False)
    Explanation: (explain why this is the correct answer)"""

QUIZ_PROMPT = """\
Generate {number_of_questions} questions about: {content}
The questions should be only of the types: {question_types}.
{format_instructions}
Ensure all the questions are about the provided content. \
Return only the questions and answers with explanations, do not add any extra information.
"""

EXAM_PROMPT = """\
Generate {number_of_questions} questions for a {title} certification exam.
The questions should cover the following topics: {content}
The questions should be only of the types: {question_types}.
{format_instructions}
Ensure all the questions are challenging and reflect real certification exam difficulty.
Make sure the questions test understanding and application of concepts, not just memorization.
Return only the questions and answers with explanations, do not add any extra information.
"""


def format_question_types(question_types: list[str]) -> str:
    return ", ".join(question_types)


def build_quiz_prompt(content: str, number_of_questions: int, question_types: list[str]) -> str:
    return QUIZ_PROMPT.format(
        number_of_questions=number_of_questions,
        content=content,
        question_types=format_question_types(question_types),
        format_instructions=FORMAT_INSTRUCTIONS,
    )


def build_exam_prompt(
    title: str, content: str, number_of_questions: int, question_types: list[str]
) -> str:
    return EXAM_PROMPT.format(
        number_of_questions=number_of_questions,
        title=title or "general",
        content=content,
        question_types=format_question_types(question_types),
        format_instructions=FORMAT_INSTRUCTIONS,
    )
