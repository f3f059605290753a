"""Demo window: ``python -m walkthrough``.

Builds a scrollable settings form, registers its widgets as tour targets and
runs a five step tour (one floating step, one target far below the fold).
With ``--hints`` the registered hints are shown instead.
"""

from __future__ import annotations

import argparse
import logging
import sys

from PyQt6.QtWidgets import (
    QApplication,
    QFormLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QPushButton,
    QScrollArea,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from walkthrough.components import (
    QtAnnouncer,
    QtAsyncioPump,
    QtMeasurementProvider,
    HintsOverlay,
    QtScrollProvider,
    TourOverlay,
)
from walkthrough.config import settings
from walkthrough.design.motion import MotionPreference
from walkthrough.services import (
    DismissedToursPersistence,
    IntroController,
    JsonFileStorage,
    LoggingService,
    TourStartRequest,
)
from walkthrough.state.models import HintRegistration, HintType, Step, initial_state
from walkthrough.state.store import IntroStore

DEMO_TOUR_ID = "settings-tour"


def demo_steps():
    return [
        Step("welcome", "This short tour shows the most important settings.", title="Welcome"),
        Step("name", "Your display name is shown to other users.", target_id="name", title="Name"),
        Step("team", "Pick the team size you plan with.", target_id="team-size", preferred_side="right"),
        Step("save", "Changes are only stored after saving.", target_id="save", title="Save"),
        Step("help", "Restart this tour at any time from here.", target_id="help", preferred_side="top"),
    ]


def build_window():
    window = QMainWindow()
    window.setWindowTitle("walkthrough demo")
    window.resize(480, 420)
    central = QWidget()
    outer = QVBoxLayout(central)
    scroll = QScrollArea()
    scroll.setWidgetResizable(True)
    form_host = QWidget()
    form = QFormLayout(form_host)
    name = QLineEdit()
    team = QSpinBox()
    team.setRange(1, 40)
    form.addRow("Name", name)
    form.addRow("Team size", team)
    for i in range(12):
        form.addRow(f"Option {i + 1}", QLineEdit())
    save = QPushButton("Save")
    form.addRow(save)
    scroll.setWidget(form_host)
    help_button = QPushButton("Restart tour")
    live = QLabel()
    live.setObjectName("LiveRegion")
    outer.addWidget(scroll)
    outer.addWidget(help_button)
    outer.addWidget(live)
    window.setCentralWidget(central)
    targets = {"name": name, "team-size": team, "save": save, "help": help_button}
    return window, scroll, targets, live


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="walkthrough")
    p.add_argument("--reduced-motion", action="store_true", help="Disable spotlight and scroll animations")
    p.add_argument("--debug", action="store_true", help="Verbose placement / transition logging")
    p.add_argument("--data-dir", default=settings.DATA_DIR, help="Directory for persisted tour state")
    p.add_argument("--reset", action="store_true", help="Forget permanently dismissed tours")
    p.add_argument("--hints", action="store_true", help="Show contextual hints instead of the tour")
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    log_service = LoggingService().attach()
    if args.debug:
        log_service.enable_debug()

    app = QApplication.instance() or QApplication(sys.argv)
    window, scroll, targets, live = build_window()
    central = window.centralWidget()
    motion = MotionPreference(reduced=True) if args.reduced_motion else MotionPreference.from_env()

    measurement = QtMeasurementProvider(central)
    for target_id, widget in targets.items():
        measurement.register(target_id, widget)
    persistence = DismissedToursPersistence(JsonFileStorage(args.data_dir))
    store = IntroStore(initial_state(hint_options={"auto_show": args.hints}))
    controller = IntroController(
        store,
        measurement=measurement,
        scroll=QtScrollProvider(scroll, measurement, motion=motion),
        announcer=QtAnnouncer(live),
        persistence=persistence,
        motion=motion,
    )
    pump = QtAsyncioPump(app)
    controller.register_hint("save", HintRegistration("Unsaved changes are lost on close.", type=HintType.WARNING))
    controller.register_hint("name", HintRegistration("Shown next to your comments."))
    overlay = TourOverlay(central, controller, measurement, pump, motion=motion)
    hints = HintsOverlay(central, controller, measurement, motion=motion)
    request = TourStartRequest(DEMO_TOUR_ID, demo_steps(), {"dont_show_again": True})

    async def startup():
        if args.reset:
            await persistence.clear()
        await controller.initialize()
        if not args.hints:
            await controller.start_tour(request)

    async def restart():
        controller.clear_dismissed(DEMO_TOUR_ID)
        if controller.tour.is_active:
            await controller.restart()
        else:
            await controller.start_tour(request)

    targets["help"].clicked.connect(lambda: pump.spawn(restart()))
    window.show()
    hints.sync()
    pump.start()
    pump.spawn(startup())
    try:
        return app.exec()
    finally:
        hints.dispose()
        overlay.dispose()
        controller.dispose()
        pump.close()
        log_service.detach()


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
