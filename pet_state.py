from __future__ import annotations

import random
import threading
from dataclasses import dataclass
from enum import Enum

# --- Constants ---
STAT_MIN = 0
STAT_MAX = 100

# Per-tick decay
HUNGER_DECAY_AMOUNT = 5
ENERGY_DECAY_AMOUNT = 3
HEALTH_DECAY_STARVING = 5
STARVING_HUNGER_THRESHOLD = 90

# Mood cascade
HUNGRY_MOOD_THRESHOLD = 70
SLEEPY_MOOD_THRESHOLD = 20
RANDOM_MOOD_AGE_PERIOD = 5

# Actions
FEED_HUNGER_RESTORE = 30
PLAY_MIN_ENERGY = 10
PLAY_ENERGY_COST = 15
PLAY_HUNGER_COST = 10
REST_HUNGER_COST = 20


class Mood(Enum):
    HAPPY = "happy"
    HUNGRY = "hungry"
    SLEEPY = "sleepy"
    BORED = "bored"
    ANGRY = "angry"


# Happy is listed twice so it comes up two times out of three.
PLAY_MOODS = (Mood.HAPPY, Mood.HAPPY, Mood.BORED)


class RandomEvent(Enum):
    FOUND_SOMETHING = "found_something"
    GOT_SCARED = "got_scared"
    GLAD_TO_SEE_YOU = "glad_to_see_you"
    GOT_ANGRY = "got_angry"


class InvalidNameError(ValueError):
    """Raised by create() when the pet would be left without a name."""


@dataclass(frozen=True)
class PetSnapshot:
    name: str
    health: int
    hunger: int
    energy: int
    mood: Mood
    age: int

    @property
    def satiety(self) -> int:
        return STAT_MAX - self.hunger


def clamp(value: int, low: int = STAT_MIN, high: int = STAT_MAX) -> int:
    return max(low, min(high, value))


class StateStore:
    """
    Owns a single pet's attributes.

    Every public method runs under one lock, so a tick coming from the aging
    clock and a command coming from the player never see each other half done.
    Randomness is drawn from ``rng`` so tests can script it.
    """

    def __init__(self, name: str, rng: random.Random | None = None):
        self._name = name
        self._rng = rng if rng is not None else random.Random()
        self._lock = threading.Lock()
        self._health = STAT_MAX
        self._hunger = STAT_MIN
        self._energy = STAT_MAX
        self._mood = Mood.HAPPY
        self._age = 0

    @property
    def name(self) -> str:
        return self._name

    def decay(self) -> PetSnapshot:
        # aging clock only
        with self._lock:
            self._age += 1
            self._hunger = clamp(self._hunger + HUNGER_DECAY_AMOUNT)
            self._energy = clamp(self._energy - ENERGY_DECAY_AMOUNT)
            self._derive_mood()
            if self._hunger > STARVING_HUNGER_THRESHOLD:
                self._health -= HEALTH_DECAY_STARVING
            self._health = clamp(self._health)
            return self._snapshot()

    def feed(self) -> None:
        with self._lock:
            self._hunger = clamp(self._hunger - FEED_HUNGER_RESTORE)
            self._mood = Mood.HAPPY

    def play(self) -> bool:
        """Returns False, touching nothing, when the pet is too tired."""
        with self._lock:
            if self._energy <= PLAY_MIN_ENERGY:
                return False
            self._energy = clamp(self._energy - PLAY_ENERGY_COST)
            self._hunger = clamp(self._hunger + PLAY_HUNGER_COST)
            self._mood = self._rng.choice(PLAY_MOODS)
            return True

    def rest(self) -> None:
        # The nap delay is up to the caller; the lock is only held for the update.
        with self._lock:
            self._energy = STAT_MAX
            self._hunger = clamp(self._hunger + REST_HUNGER_COST)
            self._mood = Mood.HAPPY

    def trigger_random_event(self) -> RandomEvent:
        with self._lock:
            event = self._rng.choice(list(RandomEvent))
            if event is RandomEvent.GOT_ANGRY:
                self._mood = Mood.ANGRY
            return event

    def snapshot(self) -> PetSnapshot:
        with self._lock:
            return self._snapshot()

    def _snapshot(self) -> PetSnapshot:
        return PetSnapshot(
            name=self._name,
            health=self._health,
            hunger=self._hunger,
            energy=self._energy,
            mood=self._mood,
            age=self._age,
        )

    def _derive_mood(self) -> None:
        if self._hunger > HUNGRY_MOOD_THRESHOLD:
            self._mood = Mood.HUNGRY
        elif self._energy < SLEEPY_MOOD_THRESHOLD:
            self._mood = Mood.SLEEPY
        elif self._age % RANDOM_MOOD_AGE_PERIOD == 0:
            self._mood = self._rng.choice(list(Mood))


def create(name: str, rng: random.Random | None = None) -> StateStore:
    if not name or not name.strip():
        raise InvalidNameError("pet name must not be empty")
    return StateStore(name.strip(), rng=rng)
