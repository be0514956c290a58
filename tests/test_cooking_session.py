"""Tests for cooking mode."""

import pytest
from conftest import FakeSpeech, make_recipe, run

from fridgechef.constants import TRANSLATION_FAILED_MESSAGE
from fridgechef.services.cooking_session import CookingSession
from fridgechef.services.speech import UnsupportedSpeech, VoiceCommand, parse_voice_command
from fridgechef.services.translation_cache import RecipeTranslator, Translator
from fridgechef.utils.exceptions import GeminiError, NotFoundError, ValidationError


def new_session(fake_ai, speech=None, cook_time=10, estimates=None):
    recipe = make_recipe(
        "Pancakes",
        ingredients=["Flour", "Milk", "Eggs"],
        steps=["Mix.", "Rest the batter.", "Fry."],
        cook_time=cook_time,
    )
    return CookingSession(
        recipe,
        fake_ai,
        RecipeTranslator(Translator(fake_ai, "en")),
        speech or FakeSpeech(),
        {} if estimates is None else estimates,
    )


@pytest.mark.parametrize(
    "transcript, expected",
    [
        ("next", VoiceCommand.NEXT),
        ("Next step please", VoiceCommand.NEXT),
        ("go back", VoiceCommand.PREVIOUS),
        ("PREVIOUS", VoiceCommand.PREVIOUS),
        ("how long do I fry?", None),
        ("", None),
    ],
)
def test_parse_voice_command(transcript, expected):
    assert parse_voice_command(transcript) == expected


def test_availability_toggle_and_missing(fake_ai):
    session = new_session(fake_ai)
    assert session.missing_ingredients == ["Flour", "Milk", "Eggs"]
    assert session.toggle_availability("Milk") is True
    assert session.missing_ingredients == ["Flour", "Eggs"]
    assert session.toggle_availability("Milk") is False


def test_unknown_ingredient(fake_ai):
    with pytest.raises(NotFoundError):
        new_session(fake_ai).toggle_availability("Sugar")


def test_steps_are_bounded(fake_ai):
    session = new_session(fake_ai)
    assert session.previous_step() == 0
    assert session.next_step() == 1
    assert session.next_step() == 2
    assert session.next_step() == 2
    assert session.current_instruction() == "Fry."


def test_step_change_cancels_speech(fake_ai):
    speech = FakeSpeech()
    session = new_session(fake_ai, speech)
    assert session.read_aloud() == "Mix."
    assert session.is_speaking
    session.next_step()
    assert speech.cancelled == 1
    assert not session.is_speaking


def test_read_aloud_toggles_and_uses_language(fake_ai):
    speech = FakeSpeech()
    session = new_session(fake_ai, speech)
    run(session.set_language("es"))

    assert session.read_aloud() == "Spanish: Mix."
    assert speech.spoken == [("Spanish: Mix.", "es")]
    assert session.read_aloud() is None
    assert not session.is_speaking


def test_speech_end_callback_clears_flag(fake_ai):
    speech = FakeSpeech()
    session = new_session(fake_ai, speech)
    session.read_aloud()
    speech.finish()
    assert not session.is_speaking


def test_unsupported_speech_degrades_silently(fake_ai):
    session = new_session(fake_ai, UnsupportedSpeech())
    assert session.read_aloud() == "Mix."
    assert not session.is_speaking
    run(session.listen())
    assert not session.is_listening


def test_listen_applies_voice_commands(fake_ai):
    speech = FakeSpeech()
    speech.transcripts = ["next", "next", "what?", "back"]
    session = new_session(fake_ai, speech)
    run(session.listen())
    assert session.current_step == 1
    assert not session.is_listening


def test_set_language_translates_display(fake_ai):
    session = new_session(fake_ai)
    run(session.set_language("fr"))

    snap = session.snapshot(is_favorite=False)
    assert snap.language == "fr"
    assert [i.name for i in snap.ingredients] == ["French: Flour", "French: Milk", "French: Eggs"]
    assert [i.originalName for i in snap.ingredients] == ["Flour", "Milk", "Eggs"]
    assert snap.instructions[0] == "French: Mix."


def test_availability_survives_translation(fake_ai):
    """Availability is keyed by original names, not the translated copies."""
    session = new_session(fake_ai)
    session.toggle_availability("Eggs")
    run(session.set_language("de"))
    snap = session.snapshot(is_favorite=False)
    assert [i.isAvailable for i in snap.ingredients] == [False, False, True]
    assert snap.missingIngredients == ["Flour", "Milk"]


def test_translation_failure_reverts_to_english(fake_ai):
    fake_ai.translate_error = GeminiError("offline")
    session = new_session(fake_ai)
    run(session.set_language("ja"))

    assert session.language == "en"
    assert session.translation_error == TRANSLATION_FAILED_MESSAGE
    assert session.snapshot(is_favorite=False).instructions == ["Mix.", "Rest the batter.", "Fry."]


def test_unknown_language_is_rejected(fake_ai):
    with pytest.raises(ValidationError):
        run(new_session(fake_ai).set_language("xx"))


def test_cook_time_estimated_only_when_missing(fake_ai):
    session = new_session(fake_ai, cook_time=10)
    assert run(session.estimate_cook_time()) is None
    assert fake_ai.cook_time_calls == []

    estimates = {}
    session = new_session(fake_ai, cook_time=None, estimates=estimates)
    assert run(session.estimate_cook_time()) == 25
    assert estimates == {session.recipe.id: 25}
    assert session.snapshot(is_favorite=False).estimatedCookTime == 25

    run(session.estimate_cook_time())
    assert fake_ai.cook_time_calls == ["Pancakes"]


def test_non_positive_estimate_is_no_estimate(fake_ai):
    fake_ai.cook_time = 0
    session = new_session(fake_ai, cook_time=None)
    assert run(session.estimate_cook_time()) is None
    assert session.estimated_cook_time is None


def test_substitute_prompt_uses_displayed_name(fake_ai):
    session = new_session(fake_ai)
    assert session.substitute_prompt("Milk") == "What's a good substitute for Milk in a \"Pancakes\" recipe?"
    run(session.set_language("es"))
    assert "Spanish: Milk" in session.substitute_prompt("Milk")
    assert "Pancakes" in session.social_links_prompt()
