import asyncio
import logging

import pytest

from factories import FakeMeasurement, FakeScroll, RecordingAnnouncer, default_rects, make_hints, make_steps, no_sleep
from walkthrough.design.motion import MotionPreference
from walkthrough.services.intro_controller import (
    HintCallbacks,
    HintsShowRequest,
    IntroController,
    TourCallbacks,
    TourStartRequest,
)
from walkthrough.services.persistence import DismissedToursPersistence, InMemoryStorage
from walkthrough.state.models import Hint, HintRegistration, Step, StepRegistration, TourState


def _controller(**kwargs):
    announcer = RecordingAnnouncer()
    kwargs.setdefault("measurement", FakeMeasurement(default_rects(3)))
    ctrl = IntroController(
        scroll=FakeScroll(),
        announcer=announcer,
        motion=MotionPreference(),
        sleep=no_sleep,
        **kwargs,
    )
    return ctrl, announcer


def _request(n=3, **options):
    return TourStartRequest("t", make_steps(n), options or None)


# Starting --------------------------------------------------------------------


def test_start_tour_reveals_first_step():
    events = []
    ctrl, announcer = _controller(tour_callbacks=TourCallbacks(on_start=events.append))

    async def scenario():
        assert await ctrl.start_tour(_request()) is True
        await ctrl.wait_idle()

    asyncio.run(scenario())
    snap = ctrl.tour
    assert snap.is_active and snap.tour_id == "t"
    assert (snap.current_step, snap.total_steps) == (0, 3)
    assert snap.current_step_config.id == "s0"
    assert ctrl.state.ui.tooltip_visible is True
    assert events == ["t"]
    assert announcer.messages == ["Step 1 of 3: Title 0"]


def test_second_start_while_active_is_rejected(caplog):
    ctrl, _ = _controller()

    async def scenario():
        await ctrl.start_tour(_request())
        with caplog.at_level(logging.WARNING):
            assert await ctrl.start_tour(TourStartRequest("other", make_steps())) is False
        await ctrl.wait_idle()

    asyncio.run(scenario())
    assert ctrl.tour.tour_id == "t"
    assert "already active" in caplog.text


def test_start_without_or_with_invalid_steps_fails():
    ctrl, _ = _controller()

    async def scenario():
        assert await ctrl.start_tour(TourStartRequest("empty")) is False
        dup = [Step("a", "x", "t0"), Step("a", "y", "t1")]
        assert await ctrl.start_tour(TourStartRequest("dup", dup)) is False

    asyncio.run(scenario())
    assert ctrl.tour.is_active is False
    assert ctrl.coordinator is None


@pytest.mark.parametrize("veto", [False, "async"])
def test_before_start_can_veto(veto):
    async def async_veto(tour_id):
        return False

    hook = async_veto if veto == "async" else (lambda tour_id: False)
    ctrl, _ = _controller(tour_callbacks=TourCallbacks(on_before_start=hook))
    assert asyncio.run(ctrl.start_tour(_request())) is False
    assert ctrl.tour.is_active is False


def test_hook_returning_none_does_not_veto():
    ctrl, _ = _controller(tour_callbacks=TourCallbacks(on_before_start=lambda tour_id: None))

    async def scenario():
        assert await ctrl.start_tour(_request()) is True
        await ctrl.wait_idle()

    asyncio.run(scenario())


def test_hook_exceptions_propagate():
    def boom(tour_id):
        raise RuntimeError("hook failed")

    ctrl, _ = _controller(tour_callbacks=TourCallbacks(on_before_start=boom))
    with pytest.raises(RuntimeError):
        asyncio.run(ctrl.start_tour(_request()))
    assert ctrl.tour.is_active is False


# Navigation ------------------------------------------------------------------


def test_full_walkthrough_completes():
    changes, completed = [], []
    callbacks = TourCallbacks(
        on_change=lambda current, previous: changes.append((current, previous)),
        on_complete=lambda tour_id, reason: completed.append((tour_id, reason)),
    )
    ctrl, announcer = _controller(tour_callbacks=callbacks)

    async def scenario():
        await ctrl.start_tour(_request())
        await ctrl.wait_idle()
        for _ in range(2):
            assert await ctrl.next_step() is True
            await ctrl.wait_idle()
        assert await ctrl.next_step() is True
        await ctrl.wait_idle()

    asyncio.run(scenario())
    assert changes == [(1, 0), (2, 1)]
    assert completed == [("t", TourState.COMPLETED)]
    assert ctrl.state.tour.state is TourState.COMPLETED
    assert ctrl.coordinator is None
    assert announcer.messages == [
        "Step 1 of 3: Title 0",
        "Step 2 of 3: Title 1",
        "Step 3 of 3: Title 2",
        "Tour completed",
    ]


def test_before_change_veto_keeps_step():
    calls = []

    def before_change(current, target, direction):
        calls.append((current, target, direction))
        return False

    ctrl, _ = _controller(tour_callbacks=TourCallbacks(on_before_change=before_change))

    async def scenario():
        await ctrl.start_tour(_request())
        await ctrl.wait_idle()
        assert await ctrl.next_step() is False
        assert await ctrl.go_to_step(2) is False

    asyncio.run(scenario())
    assert calls == [(0, 1, "next"), (0, 2, "goto")]
    assert ctrl.tour.current_step == 0


def test_prev_and_go_to_bounds():
    ctrl, _ = _controller()

    async def scenario():
        await ctrl.start_tour(_request())
        await ctrl.wait_idle()
        assert await ctrl.prev_step() is False
        assert await ctrl.go_to_step(5) is False
        assert await ctrl.go_to_step(0) is False
        assert await ctrl.go_to_step(2) is True
        await ctrl.wait_idle()
        assert await ctrl.prev_step() is True
        await ctrl.wait_idle()

    asyncio.run(scenario())
    assert ctrl.tour.current_step == 1


def test_navigation_when_idle_returns_false():
    ctrl, _ = _controller()

    async def scenario():
        return [await ctrl.next_step(), await ctrl.prev_step(), await ctrl.stop_tour(), await ctrl.skip_tour()]

    assert asyncio.run(scenario()) == [False, False, False, False]


def test_before_exit_veto_keeps_tour_running():
    ctrl, _ = _controller(tour_callbacks=TourCallbacks(on_before_exit=lambda reason: False))

    async def scenario():
        await ctrl.start_tour(_request())
        await ctrl.wait_idle()
        assert await ctrl.skip_tour() is False

    asyncio.run(scenario())
    assert ctrl.tour.is_active


def test_overlay_press_respects_option():
    ctrl, announcer = _controller()

    async def scenario():
        await ctrl.start_tour(_request())
        await ctrl.wait_idle()
        assert await ctrl.overlay_pressed() is False
        await ctrl.stop_tour()
        await ctrl.start_tour(_request(exit_on_overlay_click=True))
        await ctrl.wait_idle()
        assert await ctrl.overlay_pressed() is True

    asyncio.run(scenario())
    assert ctrl.state.tour.state is TourState.DISMISSED
    assert announcer.messages[-1] == "Tour dismissed"


def test_restart_goes_back_or_starts_again():
    ctrl, _ = _controller()

    async def scenario():
        await ctrl.start_tour(_request())
        await ctrl.wait_idle()
        assert await ctrl.restart() is False
        await ctrl.next_step()
        await ctrl.wait_idle()
        assert await ctrl.restart() is True
        await ctrl.wait_idle()
        assert ctrl.tour.current_step == 0
        await ctrl.skip_tour()
        assert await ctrl.restart() is True
        await ctrl.wait_idle()

    asyncio.run(scenario())
    assert ctrl.tour.is_active
    assert ctrl.state.ui.tooltip_visible is True


def test_restart_runs_change_hooks():
    before, changes = [], []
    veto = {"on": False}

    def before_change(current, target, direction):
        before.append((current, target, direction))
        return not veto["on"]

    callbacks = TourCallbacks(
        on_before_change=before_change,
        on_change=lambda current, previous: changes.append((current, previous)),
    )
    ctrl, _ = _controller(tour_callbacks=callbacks)

    async def scenario():
        await ctrl.start_tour(_request())
        await ctrl.wait_idle()
        await ctrl.go_to_step(2)
        await ctrl.wait_idle()
        veto["on"] = True
        assert await ctrl.restart() is False
        assert ctrl.tour.current_step == 2
        veto["on"] = False
        assert await ctrl.restart() is True
        await ctrl.wait_idle()

    asyncio.run(scenario())
    assert before == [(0, 2, "goto"), (2, 0, "goto"), (2, 0, "goto")]
    assert changes == [(2, 0), (0, 2)]
    assert ctrl.tour.current_step == 0


# Don't show again / persistence ----------------------------------------------


def test_dont_show_again_dismisses_and_persists():
    persistence = DismissedToursPersistence(InMemoryStorage())
    ctrl, _ = _controller(persistence=persistence)

    async def scenario():
        await ctrl.initialize()
        await ctrl.start_tour(_request(dont_show_again=True))
        await ctrl.wait_idle()
        ctrl.set_dont_show_again(True)
        await ctrl.skip_tour()
        await ctrl.wait_idle()
        return await persistence.load()

    payload = asyncio.run(scenario())
    assert ctrl.is_dismissed("t")
    assert payload.dismissed_tours == ("t",)

    fresh, _ = _controller(persistence=persistence)

    async def again():
        await fresh.initialize()
        return await fresh.start_tour(_request())

    assert asyncio.run(again()) is False
    assert fresh.is_dismissed("t")


def test_checkbox_ignored_when_option_disabled():
    ctrl, _ = _controller()

    async def scenario():
        await ctrl.initialize()
        await ctrl.start_tour(_request())
        await ctrl.wait_idle()
        ctrl.set_dont_show_again(True)
        await ctrl.stop_tour()

    asyncio.run(scenario())
    assert not ctrl.is_dismissed("t")


def test_clear_dismissed_is_saved():
    persistence = DismissedToursPersistence(InMemoryStorage())
    ctrl, _ = _controller(persistence=persistence)

    async def scenario():
        await ctrl.initialize()
        ctrl.dismiss_permanently("a")
        ctrl.dismiss_permanently("b")
        await ctrl.wait_idle()
        ctrl.clear_dismissed("a")
        await ctrl.wait_idle()
        return await persistence.load()

    assert asyncio.run(scenario()).dismissed_tours == ("b",)


def test_initialize_without_persistence_marks_initialized():
    ctrl, _ = _controller()
    asyncio.run(ctrl.initialize())
    assert ctrl.state.persistence.initialized is True


# Registry --------------------------------------------------------------------


def test_build_steps_orders_registrations():
    ctrl, _ = _controller()
    ctrl.register_step("b", StepRegistration("Second"))
    ctrl.register_step("a", StepRegistration("Third", title="A"), order=5)
    ctrl.register_step("c", StepRegistration("Fourth"))
    ctrl.register_step("intro", StepRegistration("Welcome", floating=True), order=-1)
    steps = ctrl.build_steps()
    assert [s.id for s in steps] == ["step-1", "step-2", "step-3", "step-4"]
    assert [s.target_id for s in steps] == [None, "b", "a", "c"]
    assert steps[2].title == "A"
    ctrl.unregister_step("b")
    assert len(ctrl.build_steps()) == 3


def test_start_tour_from_group():
    ctrl, _ = _controller()
    ctrl.register_step("t0", StepRegistration("Name field", group="settings"))
    ctrl.register_step("t1", StepRegistration("Other", group="profile"))

    async def scenario():
        assert await ctrl.start_tour(TourStartRequest(group="settings")) is True
        await ctrl.wait_idle()

    asyncio.run(scenario())
    assert ctrl.tour.tour_id == "settings"
    assert ctrl.tour.total_steps == 1
    assert ctrl.state.measurements["t0"] == default_rects()["t0"]


def test_refresh_measures_all_targets():
    ctrl, _ = _controller()

    async def scenario():
        await ctrl.start_tour(_request())
        await ctrl.wait_idle()
        await ctrl.refresh()
        await ctrl.wait_idle()

    asyncio.run(scenario())
    assert set(ctrl.state.measurements) == {"t0", "t1", "t2"}
    assert ctrl.state.ui.tooltip_visible is True


def test_spotlight_listener_registered_before_start():
    ctrl, _ = _controller()
    seen = []
    remove = ctrl.add_spotlight_listener(lambda rect, animate: seen.append((rect, animate)))

    async def scenario():
        await ctrl.start_tour(_request())
        await ctrl.wait_idle()
        remove()
        await ctrl.next_step()
        await ctrl.wait_idle()

    asyncio.run(scenario())
    assert seen == [(default_rects()["t0"], False)]


# Hints -----------------------------------------------------------------------


def test_hint_lifecycle_and_announcements():
    events = []
    callbacks = HintCallbacks(
        on_hints_show=lambda: events.append("show"),
        on_hints_hide=lambda: events.append("hide"),
        on_hint_click=lambda hint_id: events.append(("click", hint_id)),
        on_hint_close=lambda hint_id: events.append(("close", hint_id)),
    )
    ctrl, announcer = _controller(hint_callbacks=callbacks)
    assert ctrl.show_hints(HintsShowRequest(make_hints(2))) is True
    assert ctrl.show_hint("missing") is False
    assert ctrl.show_hint("h1") is True
    assert ctrl.hints.active_hint_id == "h1"
    ctrl.hide_hint("h1")
    ctrl.remove_hint("h0")
    ctrl.hide_hints()
    assert ctrl.hints.is_visible is False
    assert [h.id for h in ctrl.hints.hints] == ["h1"]
    assert events == ["show", ("click", "h1"), ("close", "h1"), "hide"]
    assert announcer.messages == ["Hint: Hint 1"]


def test_show_hints_from_registry_and_validation():
    ctrl, _ = _controller()
    assert ctrl.show_hints() is False
    ctrl.register_hint("save", HintRegistration("Saves the form"))
    assert ctrl.show_hints() is True
    assert [h.id for h in ctrl.hints.hints] == ["hint-save"]
    ctrl.unregister_hint("save")
    assert ctrl.build_hints() == []
    assert ctrl.show_hints(HintsShowRequest([Hint("x", "t0", "")])) is False


def test_refresh_hints_measures_targets():
    ctrl, _ = _controller()
    ctrl.show_hints(HintsShowRequest(make_hints(2)))
    asyncio.run(ctrl.refresh_hints())
    assert set(ctrl.state.measurements) == {"t0", "t1"}
