from __future__ import annotations

import argparse
import logging
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable

from rich.align import Align
from rich.console import Console, Group
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn

from pet_actions import MOOD_ART, NAP_SECONDS, ActionOutcome, MenuChoice, PetSession, parse_menu_choice
from pet_clock import TICK_INTERVAL_SECONDS, AgingClock, is_valid_interval
from pet_state import InvalidNameError, PetSnapshot, StateStore, create

# --- Constants ---
LOG_DIR = Path.home() / ".virtual_pet"
DEFAULT_PET_NAME = "Sharik"

ANIMATION_FRAME = "▶️"
ANIMATION_FRAMES = 3
ANIMATION_FRAME_SECONDS = 0.3

CRITICAL_HUNGER_THRESHOLD = 90
TIRED_ENERGY_THRESHOLD = 20
CRITICAL_HEALTH_THRESHOLD = 15

MENU = """
Choose an action:
1. 🍎 Feed
2. 🎾 Play
3. 💤 Put to bed
4. 🗣️ Talk
5. 📊 Status
6. 🚪 Quit"""

BANNER = """🐾 Welcome to Virtual Pet! 🐾
------------------------------------------"""

INVALID_CHOICE_MESSAGE = "[red]Please enter a number from 1 to 6[/red]"


# --- Logging ---
def setup_logger(log_dir: Path, debug: bool = False) -> logging.Logger:
    """
    Configure rotating file logger. Console logging only in debug mode, so the
    menu stays readable.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger("VirtualPet")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False

    # prevent duplicate handlers if setup is called multiple times
    if any(isinstance(handler, RotatingFileHandler) for handler in logger.handlers):
        return logger

    file_handler = RotatingFileHandler(
        log_dir / "virtual_pet.log",
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(file_handler)

    if debug:
        console_handler = RichHandler(console=Console(stderr=True), show_path=False)
        console_handler.setLevel(logging.DEBUG)
        logger.addHandler(console_handler)

    return logger


# --- Rendering ---
def create_progress_bar(label, completed, total, low_color, mid_color, high_color, low_threshold, high_threshold, reverse_colors=False):
    progress = Progress(
        TextColumn(f"{label}:{' ' * (10 - len(label))}"),
        BarColumn(bar_width=20),
        TextColumn("{task.percentage:>3.0f}%"),
    )
    style = mid_color
    if reverse_colors:
        if completed <= low_threshold:
            style = high_color
        elif completed >= high_threshold:
            style = low_color
    else:
        if completed <= low_threshold:
            style = low_color
        elif completed >= high_threshold:
            style = high_color
    task_id = progress.add_task(label.lower(), total=total, completed=completed)
    progress.update(task_id, style=style)
    return progress


def get_alerts(snapshot: PetSnapshot) -> list[str]:
    alerts = []
    if snapshot.hunger > CRITICAL_HUNGER_THRESHOLD:
        alerts.append("[bold red]Starving! Health is dropping.[/]")
    if snapshot.energy < TIRED_ENERGY_THRESHOLD:
        alerts.append("[bold yellow]Tired![/]")
    if snapshot.health <= CRITICAL_HEALTH_THRESHOLD:
        alerts.append("[bold red]Health critical![/]")
    return alerts


def render_status(snapshot: PetSnapshot) -> Panel:
    alerts = get_alerts(snapshot)
    health_bar = create_progress_bar("Health", snapshot.health, 100, "red", "yellow", "green", CRITICAL_HEALTH_THRESHOLD + 10, 80)
    satiety_bar = create_progress_bar("Satiety", snapshot.satiety, 100, "red", "yellow", "green", 100 - CRITICAL_HUNGER_THRESHOLD, 60)
    energy_bar = create_progress_bar("Energy", snapshot.energy, 100, "red", "yellow", "green", TIRED_ENERGY_THRESHOLD, 75)
    mood_line = Align.center(f"Mood: {MOOD_ART[snapshot.mood]} ({snapshot.mood.value})")
    parts = [mood_line, health_bar, satiety_bar, energy_bar]
    if alerts:
        parts.append(":warning: " + " ".join(alerts))
    return Panel(
        Group(*parts),
        title=f"{snapshot.name} - Age: {snapshot.age}",
        border_style="red" if alerts else "blue",
    )


def animate_action(console: Console, text: str, sleep: Callable[[float], None] = time.sleep) -> None:
    console.print()
    for _ in range(ANIMATION_FRAMES):
        console.print(ANIMATION_FRAME, end="")
        sleep(ANIMATION_FRAME_SECONDS)
    console.print(f" {text}")


# --- Game loop ---
def ask_pet_name(console: Console, rng=None) -> StateStore:
    console.print("[bold cyan]Give your pet a name:[/bold cyan]")
    try:
        name = console.input()
    except (EOFError, KeyboardInterrupt):
        name = ""
    try:
        return create(name, rng=rng)
    except InvalidNameError:
        console.print(f"[yellow]A pet needs a name! Let's call it... {DEFAULT_PET_NAME}![/yellow]")
        return create(DEFAULT_PET_NAME, rng=rng)


def show_result(console: Console, result: ActionOutcome | PetSnapshot | str, sleep: Callable[[float], None] = time.sleep) -> None:
    if isinstance(result, PetSnapshot):
        console.print(render_status(result))
    elif isinstance(result, ActionOutcome) and result.animate:
        animate_action(console, result.message, sleep)
    elif isinstance(result, ActionOutcome):
        console.print(result.message)
    else:
        console.print(result)


def game_loop(console: Console, session: PetSession, sleep: Callable[[float], None] = time.sleep) -> None:
    """Reads menu choices until the player quits (or input runs out)."""
    while True:
        console.print(MENU)
        try:
            choice = parse_menu_choice(console.input())
        except (EOFError, KeyboardInterrupt):
            choice = MenuChoice.QUIT

        if choice is None:
            console.print(INVALID_CHOICE_MESSAGE)
            continue
        if choice is MenuChoice.QUIT:
            console.print(f"[blue]Goodbye! {session.name} will miss you! 😢[/blue]")
            return

        show_result(console, session.handle(choice), sleep)

        event_message = session.maybe_trigger_random_event()
        if event_message:
            console.print(event_message)


def build_arg_parser() -> argparse.ArgumentParser:
    def positive_float(value: str) -> float:
        number = float(value)
        if not is_valid_interval(number):
            raise argparse.ArgumentTypeError(f"must be a positive number of seconds: {value}")
        return number

    parser = argparse.ArgumentParser(prog="virtual-pet", description="A virtual pet that gets older while you are away.")
    parser.add_argument("--tick-seconds", type=positive_float, default=TICK_INTERVAL_SECONDS, help="seconds between aging ticks")
    parser.add_argument("--nap-seconds", type=positive_float, default=NAP_SECONDS, help="how long the pet naps after being put to bed")
    parser.add_argument("--log-dir", type=Path, default=LOG_DIR, help="directory for the log file")
    parser.add_argument("--debug", action="store_true", help="verbose logging, also to stderr")
    return parser


def main(argv: list[str] | None = None, console: Console | None = None, sleep: Callable[[float], None] = time.sleep) -> int:
    args = build_arg_parser().parse_args(argv)
    logger = setup_logger(args.log_dir, debug=args.debug)
    console = console if console is not None else Console()

    console.print(BANNER)
    store = ask_pet_name(console)
    logger.info("Created pet %r", store.name)
    console.print(f"\n[bold green]Great! {store.name} is happy to meet you! {MOOD_ART[store.snapshot().mood]}[/bold green]")

    session = PetSession(
        store,
        sleep=sleep,
        nap_seconds=args.nap_seconds,
        notify=lambda message: animate_action(console, message, sleep),
    )
    clock = AgingClock(store.decay, interval=args.tick_seconds)
    clock.start()
    try:
        game_loop(console, session, sleep)
    finally:
        clock.stop()
    logger.info("Session over for %r: %s", store.name, store.snapshot())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
