"""Simple bot arena for Ninety-Nine."""

from __future__ import annotations

import argparse
import logging
from collections import Counter
from random import Random
from typing import Iterable, List, Optional, Sequence

from ninetynine.config import GameSettings
from ninetynine.deck import DeckVariant
from ninetynine.errors import EngineError
from ninetynine.game import winners
from ninetynine.phases import Phase
from ninetynine.scoring import RoundResult
from ninetynine.service import GameService
from ninetynine.state import AILevel

from .driver import next_actor, take_ai_turn

logger = logging.getLogger(__name__)

LEVEL_CHOICES = [level.value for level in AILevel]


def play_round(service: GameService) -> RoundResult:
    """Drive bidding and play to the end of the round, then score it."""
    while service.state.phase in (Phase.BIDDING, Phase.PLAYING):
        actor = next_actor(service.state)
        if actor is None:
            raise RuntimeError(f"No player can act in phase {service.state.phase.value}.")
        service.run_ai_turn(actor)
    return service.score_round()


def play_game(service: GameService) -> List[RoundResult]:
    results = [play_round(service)]
    while service.state.phase is Phase.DEALING:
        service.start_new_round()
        results.append(play_round(service))
    return results


def run_match(
    levels: Sequence[str],
    *,
    n_games: int = 10,
    seed: Optional[int] = None,
    settings: Optional[GameSettings] = None,
) -> dict:
    rng = Random(seed)
    wins: Counter[str] = Counter()
    history = []
    for game_index in range(n_games):
        service = GameService(settings=settings, seed=rng.randrange(2**32), ai_turn=take_ai_turn)
        for seat, level in enumerate(levels, start=1):
            service.add_player(f"{level.title()} {seat}", is_ai=True, ai_level=level)
        service.start_game()
        rounds = play_game(service)
        game_winners = winners(service.state)
        wins.update(game_winners)
        scores = {player_id: player.score for player_id, player in service.state.players.items()}
        logger.info("Game %d finished after %d rounds: %s", game_index + 1, len(rounds), scores)
        history.append({"scores": scores, "rounds": len(rounds), "winners": game_winners})
    return {"wins": dict(wins), "history": history}


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run AI-only Ninety-Nine games.")
    parser.add_argument(
        "--players",
        nargs="+",
        default=["easy", "medium", "hard"],
        choices=LEVEL_CHOICES,
        help="AI level for each seat, in seating order.",
    )
    parser.add_argument("--n", type=int, default=10, help="Number of games to play.")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--deck", default=DeckVariant.NINETY_NINE.value, choices=[v.value for v in DeckVariant])
    parser.add_argument("--cards", type=int, default=None, help="Cards dealt to each player.")
    parser.add_argument("--max-rounds", type=int, default=None)
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING, ...). Default: WARNING.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    overrides: dict = {"deck_variant": args.deck}
    if args.cards is not None:
        overrides["cards_per_player"] = args.cards
    if args.max_rounds is not None:
        overrides["max_rounds"] = args.max_rounds
    settings = GameSettings(**overrides)

    try:
        results = run_match(args.players, n_games=args.n, seed=args.seed, settings=settings)
    except EngineError as exc:
        parser.error(str(exc))

    print(f"Wins after {args.n} games: {results['wins']}")
    for index, entry in enumerate(results["history"], start=1):
        print(f"Game {index}: {entry['rounds']} rounds, scores {entry['scores']}")


if __name__ == "__main__":
    main()
