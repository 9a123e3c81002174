"""Tests for the Streamlit settings page."""

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from mathquiz.config import settings

APP_PATH = Path(__file__).resolve().parents[1] / "frontend" / "streamlit_app.py"


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setattr(settings, "OPENAI_API_KEY", "test-key")
    monkeypatch.setattr(settings, "QUESTION_SERVICE_URL", None)
    at = AppTest.from_file(str(APP_PATH), default_timeout=30)
    at.run()
    assert not at.exception
    return at


def test_bounds_survive_switching_to_skills_and_back(app):
    app.text_input(key="lower_bound_input").input("counting").run()
    app.toggle(key="use_skills_list_input").set_value(True).run()
    app.text_area(key="skills_text_input").input("halves\nquarters").run()

    app.toggle(key="use_skills_list_input").set_value(False).run()

    assert app.text_input(key="lower_bound_input").value == "counting"
    assert app.session_state["lower_bound"] == "counting"
    assert app.session_state["skills_text"] == "halves\nquarters"

    app.toggle(key="use_skills_list_input").set_value(True).run()

    assert app.text_area(key="skills_text_input").value == "halves\nquarters"


def test_controller_timer_has_no_background_tick(app):
    controller = app.session_state["controller"]

    controller.timer.start()

    assert not controller.timer.ticking
    controller.timer.stop()
