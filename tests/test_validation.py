from factories import make_hints, make_steps
from walkthrough.state.models import Hint, Step
from walkthrough.state.validation import validate_hint, validate_hints, validate_step, validate_tour


def test_valid_tour():
    result = validate_tour("tour", make_steps())
    assert result
    assert result.errors == []


def test_tour_requires_id_and_steps():
    result = validate_tour("", [])
    assert not result
    assert "Tour ID is required" in result.errors
    assert "Tour must have at least one step" in result.errors
    assert validate_tour("t", None).errors == ["Steps must be a sequence"]


def test_duplicate_and_blank_step_ids():
    steps = [Step("a", "x"), Step("a", "y"), Step("", "z")]
    errors = validate_tour("t", steps).errors
    assert "Duplicate step ID: a" in errors
    assert "Step at index 2 must have an ID" in errors


def test_step_content_and_side():
    result = validate_step(Step("a", "  ", preferred_side="diagonal"))
    assert "Step content cannot be empty" in result.errors
    assert "Step has invalid position: diagonal" in result.errors
    assert validate_step(Step("a", "ok", preferred_side="left"))


def test_hint_checks():
    assert validate_hint(make_hints(1)[0])
    bad = Hint(id="", target_id="", content="", position="nowhere")
    errors = validate_hint(bad).errors
    assert errors == [
        "Hint ID is required",
        "Hint target_id is required",
        "Hint content cannot be empty",
        "Invalid hint position: nowhere",
    ]


def test_hint_list_reports_index_and_duplicates():
    hints = [Hint("a", "t", "x"), Hint("a", "t", "y"), Hint("b", "t", "")]
    errors = validate_hints(hints).errors
    assert "Duplicate hint ID: a" in errors
    assert "Hint at index 2: Hint content cannot be empty" in errors
    assert not validate_hints(None)
