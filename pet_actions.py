from __future__ import annotations

import logging
import random
import time
from enum import IntEnum
from typing import Callable, NamedTuple

from pet_state import Mood, PetSnapshot, RandomEvent, StateStore

logger = logging.getLogger("VirtualPet")

# --- Constants ---
NAP_SECONDS = 3.0
RANDOM_EVENT_CHANCE = 0.1

# --- Emojis ---
MOOD_ART = {
    Mood.HAPPY: "😊",
    Mood.HUNGRY: "🍕",
    Mood.SLEEPY: "😴",
    Mood.BORED: "🥱",
    Mood.ANGRY: "😠",
}

GAMES = ["plays with a ball", "runs in circles", "hides behind the couch"]
PET_SOUNDS = ["Meow!", "Woof!", "Peep!", "Burr-burr!", "Shhh!", "Wheee!"]

RANDOM_EVENT_MESSAGES = {
    RandomEvent.FOUND_SOMETHING: "🌟 {name} found something interesting!",
    RandomEvent.GOT_SCARED: "💨 {name} saw something scary and got frightened!",
    RandomEvent.GLAD_TO_SEE_YOU: "🎉 {name} is really glad to see you!",
    RandomEvent.GOT_ANGRY: "😠 {name} got angry for no reason!",
}


class MenuChoice(IntEnum):
    FEED = 1
    PLAY = 2
    REST = 3
    TALK = 4
    STATUS = 5
    QUIT = 6


class ActionOutcome(NamedTuple):
    message: str
    accepted: bool = True
    animate: bool = False


def parse_menu_choice(raw: str | None) -> MenuChoice | None:
    if raw is None:
        return None
    try:
        return MenuChoice(int(raw.strip()))
    except ValueError:
        return None


class PetSession:
    """
    The command side of the game: turns menu choices into StateStore calls and
    builds the text the terminal shows for them.

    Runs on the caller's thread. The nap after ``rest`` blocks only that
    thread; the aging clock keeps ticking meanwhile.
    """

    def __init__(
        self,
        store: StateStore,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
        nap_seconds: float = NAP_SECONDS,
        event_chance: float = RANDOM_EVENT_CHANCE,
        notify: Callable[[str], None] | None = None,
    ):
        self.store = store
        self._rng = rng if rng is not None else random.Random()
        self._sleep = sleep
        self._nap_seconds = nap_seconds
        self._event_chance = event_chance
        self._notify = notify if notify is not None else (lambda message: None)

    @property
    def name(self) -> str:
        return self.store.name

    def feed(self) -> ActionOutcome:
        self.store.feed()
        return ActionOutcome(f"[green]{self.name} is eating... nom-nom![/green]", animate=True)

    def play(self) -> ActionOutcome:
        if not self.store.play():
            logger.debug("%s refused to play", self.name)
            return ActionOutcome(f"[yellow]{self.name} is too tired to play {MOOD_ART[Mood.SLEEPY]}[/yellow]", accepted=False)
        game = self._rng.choice(GAMES)
        return ActionOutcome(f"[cyan]{self.name} {game} 🎾[/cyan]", animate=True)

    def rest(self) -> ActionOutcome:
        self.store.rest()
        self._notify(f"[purple]💤 {self.name} is sleeping sweetly... Zzz[/purple]")
        self._sleep(self._nap_seconds)
        return ActionOutcome(f"[bold]{self.name} woke up full of energy! ⚡[/bold]")

    def talk(self) -> str:
        snapshot = self.store.snapshot()
        responses = [
            f"{snapshot.name} looks at you curiously",
            f"{snapshot.name} makes a happy sound",
            f"{snapshot.name} tilts its head",
            f"{MOOD_ART[snapshot.mood]} {snapshot.name}: {self._rng.choice(PET_SOUNDS)}",
        ]
        return self._rng.choice(responses)

    def status(self) -> PetSnapshot:
        return self.store.snapshot()

    def maybe_trigger_random_event(self) -> str | None:
        if self._rng.random() >= self._event_chance:
            return None
        event = self.store.trigger_random_event()
        logger.info("Random event: %s", event.value)
        return RANDOM_EVENT_MESSAGES[event].format(name=self.name)

    def handle(self, choice: MenuChoice) -> ActionOutcome | PetSnapshot | str:
        handlers = {
            MenuChoice.FEED: self.feed,
            MenuChoice.PLAY: self.play,
            MenuChoice.REST: self.rest,
            MenuChoice.TALK: self.talk,
            MenuChoice.STATUS: self.status,
        }
        if choice not in handlers:
            raise ValueError(f"no handler for menu choice {choice!r}")
        logger.debug("Handling %s", choice.name.lower())
        return handlers[choice]()
