"""Next-difficulty selection for bounded ranges and ordered skill lists.

Bounded ranges only describe the adjustment to the LLM, which interprets the
free-text labels and is trusted to respect the bounds. Skill lists are
resolved locally and the LLM is told exactly which skill to target.
"""

from typing import NamedTuple, Optional

from mathquiz.models import (
    BoundedDifficulty,
    DifficultyDescriptor,
    Outcome,
    QuestionRecord,
    QuestionRequest,
    SkillListDifficulty,
)
from mathquiz.prompts import (
    BOUNDED,
    BOUNDED_INSTRUCTIONS,
    SKILLS,
    SKILLS_INSTRUCTIONS,
)

# Steps back down the skill list after a miss.
INCORRECT_STEP_BACK = 1
UNKNOWN_STEP_BACK = 2


class DifficultySelection(NamedTuple):
    current: str
    target: str
    target_index: Optional[int]  # None for bounded ranges
    prompt: str


def resolve_index(skills: list[str], label: str) -> int:
    """Position of `label` in `skills` ignoring case and padding; 0 if absent."""
    wanted = label.strip().lower()
    for index, skill in enumerate(skills):
        if skill.strip().lower() == wanted:
            return index
    return 0


def next_skill_index(current_index: int, length: int, outcome: Outcome, streak: int) -> int:
    last = length - 1
    if outcome is Outcome.CORRECT:
        return min(current_index + streak, last)
    if outcome is Outcome.INCORRECT:
        return max(current_index - INCORRECT_STEP_BACK, 0)
    if outcome is Outcome.UNKNOWN:
        return max(current_index - UNKNOWN_STEP_BACK, 0)
    # No prior answer: always open on the easiest skill.
    return 0


def numbered(skills: list[str]) -> str:
    return "\n".join(f"{i}. {skill}" for i, skill in enumerate(skills, 1))


def _select_bounded(
    descriptor: BoundedDifficulty, outcome: Outcome, streak: int
) -> DifficultySelection:
    instruction = BOUNDED_INSTRUCTIONS[outcome.wire_value].format(
        lower=descriptor.lower, streak=streak
    )
    prompt = BOUNDED.format(
        lower=descriptor.lower,
        upper=descriptor.upper,
        instruction=instruction,
        current=descriptor.current,
        difficulty="The current difficulty level as a string",
    )
    return DifficultySelection(
        current=descriptor.current,
        target=descriptor.current,
        target_index=None,
        prompt=prompt,
    )


def _select_skill(
    descriptor: SkillListDifficulty, outcome: Outcome, streak: int
) -> DifficultySelection:
    skills = descriptor.skills
    index = next_skill_index(descriptor.current_index, len(skills), outcome, streak)
    target = skills[index]
    instruction = SKILLS_INSTRUCTIONS[outcome.wire_value].format(
        first=skills[0], streak=streak
    )
    prompt = SKILLS.format(
        numbered_skills=numbered(skills),
        instruction=instruction,
        current=descriptor.current,
        target=target,
        difficulty=target,
    )
    return DifficultySelection(
        current=descriptor.current,
        target=target,
        target_index=index,
        prompt=prompt,
    )


def select_next(
    descriptor: DifficultyDescriptor, outcome: Outcome, streak: int
) -> DifficultySelection:
    """Pick the next difficulty and build the generator instructions for it."""
    if isinstance(descriptor, SkillListDifficulty):
        return _select_skill(descriptor, outcome, streak)
    return _select_bounded(descriptor, outcome, streak)


def descriptor_from_request(request: QuestionRequest) -> DifficultyDescriptor:
    """Rebuild the descriptor a request describes (service side)."""
    skills = [skill for skill in request.skills_list if skill.strip()]
    if request.use_skills_list and skills:
        return SkillListDifficulty(
            skills=skills,
            current_index=resolve_index(skills, request.current_difficulty),
        )
    return BoundedDifficulty(
        lower=request.lower_bound_difficulty,
        upper=request.upper_bound_difficulty,
        current=request.current_difficulty,
    )


def build_request(
    descriptor: DifficultyDescriptor, outcome: Outcome, streak: int
) -> QuestionRequest:
    """Describe the next question to the generation service (client side)."""
    if isinstance(descriptor, SkillListDifficulty):
        return QuestionRequest(
            previous_answer=outcome.wire_value,
            correct_streak=streak,
            current_difficulty=descriptor.current,
            use_skills_list=True,
            skills_list=list(descriptor.skills),
        )
    return QuestionRequest(
        previous_answer=outcome.wire_value,
        correct_streak=streak,
        current_difficulty=descriptor.current,
        lower_bound_difficulty=descriptor.lower,
        upper_bound_difficulty=descriptor.upper,
        use_skills_list=False,
        skills_list=[],
    )


def follow_question(
    descriptor: DifficultyDescriptor,
    question: QuestionRecord,
    target_index: Optional[int] = None,
) -> DifficultyDescriptor:
    """Move the descriptor to the level of a question that was just shown."""
    if isinstance(descriptor, SkillListDifficulty):
        label = question.difficulty.strip().lower()
        if any(skill.strip().lower() == label for skill in descriptor.skills):
            index = resolve_index(descriptor.skills, question.difficulty)
        elif target_index is not None:
            # The generator relabelled the skill; trust what was asked for.
            index = target_index
        else:
            index = 0
        return descriptor.model_copy(update={"current_index": index})
    return descriptor.model_copy(update={"current": question.difficulty})
