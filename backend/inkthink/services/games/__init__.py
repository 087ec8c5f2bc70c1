"""Game domain services: rounds, timers, scoring, anti-cheat and membership.

Socket handlers and HTTP routes talk to these objects through the
``GameServices`` bundle stored on the app, keeping transport concerns
separated from core game mechanics.
"""
from dataclasses import dataclass

from .cheat import CheatDetector
from .engine import GameEngine, GameRules
from .membership import Membership


@dataclass
class GameServices:
    registry: object
    notifier: object
    scheduler: object
    engine: GameEngine
    cheat_detector: CheatDetector
    membership: Membership


def build_services(registry, notifier, scheduler, classifier, config, logger=None) -> GameServices:
    engine = GameEngine(registry, notifier, scheduler, rules=GameRules.from_config(config), logger=logger)
    return GameServices(
        registry=registry,
        notifier=notifier,
        scheduler=scheduler,
        engine=engine,
        cheat_detector=CheatDetector(engine, classifier, logger=logger),
        membership=Membership(engine, username_max_length=int(config.get('USERNAME_MAX_LENGTH', 20))),
    )
