"""Streamlit UI for the adaptive math quiz."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import altair as alt
import streamlit as st
from openai import OpenAIError

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from mathquiz.config import settings
from mathquiz.models import Outcome, SessionPhase
from mathquiz.services.question_client import default_question_source
from mathquiz.session import QuizController
from mathquiz.timer import Timer
from mathquiz.ui_utils import (
    build_descriptor,
    feedback_message,
    format_elapsed,
    history_series,
    multiplier_message,
    numbered_steps,
    streak_message,
)


def init_state() -> None:
    """Initialize Streamlit session state keys."""
    st.session_state.setdefault("lower_bound", settings.DEFAULT_LOWER_BOUND)
    st.session_state.setdefault("upper_bound", settings.DEFAULT_UPPER_BOUND)
    st.session_state.setdefault("skills_text", settings.DEFAULT_SKILLS)
    st.session_state.setdefault("use_skills_list", False)
    if "controller" not in st.session_state:
        try:
            source = default_question_source()
        except (OpenAIError, ValueError) as exc:
            st.error(f"Question generator unavailable: {exc}")
            st.stop()
        # The page redraws the clock itself, so no background tick thread.
        st.session_state["controller"] = QuizController(source, Timer(interval=None))


def get_controller() -> QuizController:
    return st.session_state["controller"]


def _widget_key(key: str) -> str:
    """Widget key for a form value; Streamlit drops it while the widget is hidden."""
    widget_key = f"{key}_input"
    if widget_key not in st.session_state:
        st.session_state[widget_key] = st.session_state[key]
    return widget_key


def _remember(key: str) -> None:
    st.session_state[key] = st.session_state[f"{key}_input"]


def render_settings(controller: QuizController) -> None:
    use_skills_list = st.toggle(
        "Use skills list instead of bounds",
        key=_widget_key("use_skills_list"),
        on_change=_remember,
        args=("use_skills_list",),
    )
    if not use_skills_list:
        cols = st.columns(2)
        with cols[0]:
            st.text_input(
                "Lower Bound Difficulty",
                key=_widget_key("lower_bound"),
                on_change=_remember,
                args=("lower_bound",),
                placeholder="e.g., single digit addition",
                help="The minimum difficulty level",
            )
        with cols[1]:
            st.text_input(
                "Upper Bound Difficulty",
                key=_widget_key("upper_bound"),
                on_change=_remember,
                args=("upper_bound",),
                placeholder="e.g., division to 9",
                help="The maximum difficulty level",
            )
    else:
        st.text_area(
            "Skills List",
            key=_widget_key("skills_text"),
            on_change=_remember,
            args=("skills_text",),
            placeholder="Enter one skill per line, in order of increasing difficulty",
            help="List skills in order from easiest to hardest",
            height=160,
        )

    descriptor = build_descriptor(
        use_skills_list=use_skills_list,
        skills_text=st.session_state["skills_text"],
        lower=st.session_state["lower_bound"],
        upper=st.session_state["upper_bound"],
    )
    if st.button(
        "Generate Test",
        type="primary",
        use_container_width=True,
        disabled=descriptor is None,
    ):
        with st.spinner("Generating your first question..."):
            controller.start(descriptor)
        st.rerun()


@st.fragment(run_every=1.0)
def render_timer() -> None:
    controller = get_controller()
    if controller.phase is SessionPhase.PRESENTING:
        st.caption(f"⏱ {format_elapsed(controller.elapsed())}")
    elif controller.session.response_seconds is not None:
        st.caption(f"⏱ {format_elapsed(controller.session.response_seconds)}")


def render_feedback(controller: QuizController) -> None:
    session = controller.session
    question = session.current_question
    message = feedback_message(session.outcome, question)
    if session.outcome is Outcome.CORRECT:
        st.success(message)
    else:
        st.error(message)
    st.write(question.explanation)
    bonus = multiplier_message(session.multiplier, session.response_seconds)
    if bonus:
        st.caption(bonus)

    if question.steps:
        label = "Hide step-by-step solution" if session.show_steps else "Show step-by-step solution"
        if st.button(label):
            controller.toggle_steps()
            st.rerun()
        if session.show_steps:
            st.markdown("\n".join(f"- {line}" for line in numbered_steps(question.steps)))

    if st.button(
        "Next Question",
        type="primary",
        use_container_width=True,
        disabled=not controller.can_advance,
    ):
        controller.advance()
        st.rerun()


def render_answer_form(controller: QuizController) -> None:
    # Keyed per question so the box is empty for each new question.
    number = len(controller.session.history)
    with st.form(key=f"answer_form_{number}", clear_on_submit=True):
        answer = st.text_input("Your Answer", placeholder="Enter your answer")
        cols = st.columns(2)
        submitted = cols[0].form_submit_button("Submit Answer", type="primary")
        dont_know = cols[1].form_submit_button("I Don't Know")
    if dont_know:
        with st.spinner("Preparing the next question..."):
            controller.dont_know()
        st.rerun()
    elif submitted and answer.strip():
        with st.spinner("Preparing the next question..."):
            controller.submit_answer(answer)
        st.rerun()


def render_history_chart(history: list[dict[str, Any]]) -> None:
    if not history:
        st.caption("Answer a question to see your progress.")
        return
    base = alt.Chart(alt.Data(values=history)).encode(
        x=alt.X("question:Q", title="Question", axis=alt.Axis(tickMinStep=1))
    )
    streak_chart = (
        base.mark_line(point=True)
        .encode(
            y=alt.Y("streak:Q", title="Streak"),
            tooltip=["question:Q", "streak:Q", "outcome:N"],
        )
        .properties(height=160)
    )
    seconds_chart = (
        base.mark_bar()
        .encode(
            y=alt.Y("seconds:Q", title="Response time (s)"),
            color=alt.Color("outcome:N", title="Outcome"),
            tooltip=["question:Q", "seconds:Q", "outcome:N"],
        )
        .properties(height=160)
    )
    st.altair_chart(streak_chart, use_container_width=True)
    st.altair_chart(seconds_chart, use_container_width=True)


def render_quiz(controller: QuizController) -> None:
    session = controller.session
    if session.error:
        st.error(f"{session.error}. Please try again.", icon="⚠️")
        if st.button("Retry"):
            with st.spinner("Retrying..."):
                controller.retry()
            st.rerun()

    question = session.current_question
    if question is None:
        if not session.error:
            st.info("Loading your first question...")
    else:
        with st.container(border=True):
            st.markdown(f"**Question:** {question.question}")
            st.caption(f"Difficulty: {question.difficulty}")
            render_timer()
            if session.show_explanation:
                render_feedback(controller)
            else:
                render_answer_form(controller)

        streak = streak_message(session.streak)
        if streak:
            st.markdown(f"<p style='text-align:center;color:green;font-weight:700'>{streak}</p>", unsafe_allow_html=True)

    if st.button("Back to Settings", disabled=session.loading):
        controller.return_to_settings()
        st.rerun()


st.set_page_config(page_title="Math Placement Test", layout="centered")
init_state()

st.title("Math Practice Test Generator")

quiz = get_controller()
if quiz.phase is SessionPhase.IDLE:
    render_settings(quiz)
else:
    with st.sidebar:
        st.subheader("This session")
        if quiz.session.target_difficulty:
            st.caption(f"Targeting: {quiz.session.target_difficulty}")
        render_history_chart(history_series(quiz.session.history))
    render_quiz(quiz)
