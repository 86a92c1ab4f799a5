"""Validation schema for Ninety-Nine game settings."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .deck import DECK_SIZES, DeckVariant


class ScoringConfig(BaseModel):
    points_per_trick: int = Field(10, ge=0, description="Points per trick when the bid is made exactly.")
    exact_bid_bonus: int = Field(30, ge=0, description="Bonus on top of trick points for an exact bid.")
    miss_penalty_per_trick: int = Field(
        10,
        ge=0,
        description="Penalty per trick of difference between tricks won and the bid.",
    )
    zero_bid_bonus: int = Field(50, ge=0, description="Award for bidding zero and taking no tricks.")
    marriage_bonus: int = Field(20, ge=0, description="Bonus for a king and queen of one suit among bid cards.")
    run_bonus: int = Field(30, ge=0, description="Bonus for three consecutive ranks of one suit among bid cards.")
    three_of_a_kind_bonus: int = Field(40, ge=0, description="Bonus for three bid cards of the same rank.")
    game_over_threshold: int = Field(100, gt=0, description="Cumulative score that ends the game.")


class GameSettings(BaseModel):
    deck_variant: DeckVariant = Field(DeckVariant.NINETY_NINE, description="Which deck is dealt each round.")
    min_players: int = Field(2, ge=1)
    max_players: int = Field(6, ge=1)
    cards_per_player: int = Field(12, ge=1)
    tricks_per_round: Optional[int] = Field(
        None,
        ge=1,
        description="Tricks played before scoring; defaults to the number of cards per player.",
    )
    max_rounds: int = Field(10, ge=1)
    trump_allowed: bool = Field(True, description="Whether the turnup card names a trump suit.")
    bid_card_count: int = Field(3, ge=1, description="Number of cards set aside to express a card bid.")
    require_reveal: bool = Field(True, description="Play starts only after every bid has been revealed.")
    bid_time_limit: Optional[float] = Field(None, gt=0, description="Advisory seconds allowed per bid.")
    play_time_limit: Optional[float] = Field(None, gt=0, description="Advisory seconds allowed per play.")
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    @field_validator("deck_variant", mode="before")
    @classmethod
    def normalize_variant(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower().replace("_", "-")
        return value

    @model_validator(mode="after")
    def check_consistency(self) -> "GameSettings":
        if self.min_players > self.max_players:
            raise ValueError("min_players cannot exceed max_players.")
        if self.tricks_per_round is not None and self.tricks_per_round > self.cards_per_player:
            raise ValueError("tricks_per_round cannot exceed cards_per_player.")
        if self.bid_card_count > self.cards_per_player:
            raise ValueError("bid_card_count cannot exceed cards_per_player.")
        if self.cards_per_player > DECK_SIZES[self.deck_variant]:
            raise ValueError("cards_per_player exceeds the size of the deck.")
        return self

    @property
    def round_tricks(self) -> int:
        if self.tricks_per_round is None:
            return self.cards_per_player
        return self.tricks_per_round

    @property
    def deck_size(self) -> int:
        return DECK_SIZES[self.deck_variant]
