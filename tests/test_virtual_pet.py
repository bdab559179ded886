from __future__ import annotations

import logging
import sys
import tempfile
import unittest
from pathlib import Path

from logging.handlers import RotatingFileHandler

from rich.logging import RichHandler
from rich.panel import Panel

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from _helpers import FakeConsole, ScriptedRandom
from pet_actions import PetSession
from pet_state import Mood, PetSnapshot, RandomEvent, StateStore
from virtual_pet import (
    ANIMATION_FRAME,
    INVALID_CHOICE_MESSAGE,
    ask_pet_name,
    build_arg_parser,
    game_loop,
    get_alerts,
    main,
    render_status,
    setup_logger,
)


def _reset_logger() -> None:
    logger = logging.getLogger("VirtualPet")
    for handler in list(logger.handlers):
        if isinstance(handler, (RotatingFileHandler, RichHandler)):
            handler.close()
            logger.removeHandler(handler)
    logger.propagate = True


def _session(event_rolls=None, events=None) -> PetSession:
    store = StateStore("Rex", rng=ScriptedRandom(picks=events))
    return PetSession(store, rng=ScriptedRandom(rolls=event_rolls), sleep=lambda seconds: None)


class AskPetNameTest(unittest.TestCase):
    def test_uses_given_name(self) -> None:
        console = FakeConsole(["Rex"])
        self.assertEqual(ask_pet_name(console).name, "Rex")

    def test_falls_back_to_default_name(self) -> None:
        console = FakeConsole([""])
        self.assertEqual(ask_pet_name(console).name, "Sharik")
        self.assertIn("Sharik", console.text())


class GameLoopTest(unittest.TestCase):
    def test_invalid_input_reprompts_without_side_effects(self) -> None:
        session = _session(event_rolls=[0.0], events=[RandomEvent.GOT_ANGRY])
        before = session.status()
        console = FakeConsole(["abc", "9", "", "6"])
        game_loop(console, session, sleep=lambda seconds: None)
        self.assertEqual(console.printed.count(INVALID_CHOICE_MESSAGE), 3)
        self.assertEqual(session.status(), before)
        self.assertIn("Goodbye! Rex will miss you!", console.text())

    def test_actions_and_status(self) -> None:
        session = _session()
        console = FakeConsole(["2", "1", "5", "6"])
        game_loop(console, session, sleep=lambda seconds: None)
        self.assertEqual(sum(isinstance(item, Panel) for item in console.printed), 1)
        self.assertEqual(console.printed.count(ANIMATION_FRAME), 6)
        snapshot = session.status()
        self.assertEqual(snapshot.energy, 85)
        self.assertEqual(snapshot.hunger, 0)

    def test_random_event_after_action(self) -> None:
        session = _session(event_rolls=[0.0], events=[RandomEvent.GOT_ANGRY])
        console = FakeConsole(["4", "6"])
        game_loop(console, session, sleep=lambda seconds: None)
        self.assertIn("Rex got angry for no reason!", console.text())
        self.assertEqual(session.status().mood, Mood.ANGRY)

    def test_end_of_input_quits(self) -> None:
        console = FakeConsole([])
        game_loop(console, _session(), sleep=lambda seconds: None)
        self.assertIn("Goodbye!", console.text())


class RenderTest(unittest.TestCase):
    def test_status_panel(self) -> None:
        panel = render_status(PetSnapshot("Rex", 100, 0, 100, Mood.HAPPY, 7))
        self.assertEqual(panel.title, "Rex - Age: 7")
        self.assertEqual(panel.border_style, "blue")

    def test_alerts(self) -> None:
        self.assertEqual(get_alerts(PetSnapshot("Rex", 100, 0, 100, Mood.HAPPY, 0)), [])
        alerts = get_alerts(PetSnapshot("Rex", 10, 95, 5, Mood.HUNGRY, 40))
        self.assertEqual(len(alerts), 3)
        self.assertEqual(render_status(PetSnapshot("Rex", 10, 95, 5, Mood.HUNGRY, 40)).border_style, "red")


class LoggerTest(unittest.TestCase):
    def setUp(self) -> None:
        _reset_logger()

    def tearDown(self) -> None:
        _reset_logger()

    def test_logger_writes_file_once(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_dir = Path(tmp)
            logger = setup_logger(log_dir, debug=True)
            again = setup_logger(log_dir, debug=True)
            self.assertIs(logger, again)
            ours = [handler for handler in logger.handlers if isinstance(handler, (RotatingFileHandler, RichHandler))]
            self.assertEqual(len(ours), 2)
            logger.info("logger test line")
            for handler in logger.handlers:
                handler.flush()
            content = (log_dir / "virtual_pet.log").read_text(encoding="utf-8")
            self.assertIn("logger test line", content)
            _reset_logger()

    def test_foreign_handler_does_not_skip_file_log(self) -> None:
        logger = logging.getLogger("VirtualPet")
        foreign = logging.NullHandler()
        logger.addHandler(foreign)
        try:
            with tempfile.TemporaryDirectory() as tmp:
                setup_logger(Path(tmp))
                logger.info("written despite another handler")
                for handler in logger.handlers:
                    handler.flush()
                content = (Path(tmp) / "virtual_pet.log").read_text(encoding="utf-8")
                self.assertIn("written despite another handler", content)
                _reset_logger()
        finally:
            logger.removeHandler(foreign)


class MainTest(unittest.TestCase):
    def setUp(self) -> None:
        _reset_logger()

    def tearDown(self) -> None:
        _reset_logger()

    def test_rejects_non_positive_tick(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            build_arg_parser().parse_args(["--tick-seconds", "0"])
        self.assertEqual(ctx.exception.code, 2)

    def test_rejects_non_finite_periods(self) -> None:
        for flag in ("--tick-seconds", "--nap-seconds"):
            for value in ("nan", "inf", "-inf", "1e300", "abc"):
                with self.assertRaises(SystemExit) as ctx:
                    build_arg_parser().parse_args([flag, value])
                self.assertEqual(ctx.exception.code, 2, (flag, value))

    def test_full_session(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            console = FakeConsole(["", "3", "5", "6"])
            code = main(
                ["--tick-seconds", "0.01", "--nap-seconds", "0.01", "--log-dir", tmp],
                console=console,
                sleep=lambda seconds: None,
            )
            self.assertEqual(code, 0)
            text = console.text()
            self.assertIn("Sharik is happy to meet you", text)
            self.assertIn("Sharik is sleeping sweetly", text)
            self.assertIn("Goodbye! Sharik will miss you!", text)
            for handler in logging.getLogger("VirtualPet").handlers:
                handler.flush()
            content = (Path(tmp) / "virtual_pet.log").read_text(encoding="utf-8")
            self.assertIn("Created pet 'Sharik'", content)
            self.assertIn("Aging clock stopped", content)
            _reset_logger()


if __name__ == "__main__":
    unittest.main()
