# sketchrelay/models/__init__.py
from .player import Player
from .season import Season, SeasonConfig, PlayersOnSeasons
from .game import Game, Turn
from sketchrelay.core.database import Base


# 이것들을 expose 해야 create_all이 인식함
__all__ = [
    "Base",
    "Player",
    "Season", "SeasonConfig", "PlayersOnSeasons",
    "Game", "Turn",
]
