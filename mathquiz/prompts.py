"""System prompts for the question generator."""

RESPONSE_FORMAT = """<output_format>
Respond with a JSON object in this exact format:
{{
  "question": "The math question text",
  "answer": "The correct answer (just the number)",
  "difficulty": "{difficulty}",
  "explanation": "A brief explanation of how to solve this problem",
  "steps": [
    "Step 1: Description of first step in solving",
    "Step 2: Description of second step in solving",
    "..."
  ]
}}

The "steps" array should contain 3-5 clear step-by-step instructions showing exactly how to solve the problem, breaking down the solution process into manageable chunks suitable for the difficulty level. Make the steps detailed enough for a student to follow along and learn from.

Do not include any other text in your response, only the JSON object.
</output_format>"""


BOUNDED = """<task>
You are a math question generator meant to create an adaptive placement test.
Generate one question at a time.
</task>

<bounds>
All generated questions are between {lower} and {upper}.
</bounds>

<adaptation>
{instruction}
Current difficulty level: {current}
</adaptation>

<constraints>
Do not generate questions below {lower} difficulty or above {upper} difficulty, even if the adaptive rules would suggest doing so.
</constraints>

""" + RESPONSE_FORMAT


SKILLS = """<task>
You are a math question generator meant to create an adaptive placement test.
Generate one question at a time.
</task>

<skills>
I have provided a list of skills in order of increasing difficulty:
{numbered_skills}
</skills>

<adaptation>
{instruction}
Current skill: {current}
Next skill to test: {target}
</adaptation>

<constraints>
Generate a question that tests the skill: {target}
</constraints>

""" + RESPONSE_FORMAT


USER_MESSAGE = "Generate a math question based on the criteria above."


# Outcome-specific sentences, keyed by the `previousAnswer` wire value (None = first question).
BOUNDED_INSTRUCTIONS = {
    None: "Start with {lower}.",
    "incorrect": "The student submitted a wrong answer, make the question half a level easier.",
    "dontknow": "The student submitted \"I Don't Know\", make the question 1.5 levels easier.",
    "correct": (
        "The student submitted a correct answer. They have gotten {streak} correct "
        "in a row. Increase the difficulty by {streak} levels."
    ),
}

SKILLS_INSTRUCTIONS = {
    None: "Start with the first skill: {first}.",
    "incorrect": "The student submitted a wrong answer, so we are moving to an easier skill.",
    "dontknow": "The student submitted \"I Don't Know\", so we are moving to a much easier skill.",
    "correct": (
        "The student submitted a correct answer. They have gotten {streak} correct "
        "in a row, so we are moving to a harder skill."
    ),
}
