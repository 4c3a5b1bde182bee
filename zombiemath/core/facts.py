from __future__ import annotations

import random

from zombiemath.core.entities import DIRECTIONS, Direction, MathFact
from zombiemath.settings import DEFAULT_SETTINGS, GameSettings


class FactGenerator:
    """Multiplication / division facts for the four direction slots."""

    def __init__(self, *, rng: random.Random | None = None, settings: GameSettings = DEFAULT_SETTINGS) -> None:
        self.rng = rng or random.Random()
        self.settings = settings

    def _operand(self) -> int:
        return self.rng.randint(self.settings.operand_min, self.settings.operand_max)

    def _is_hard(self, a: int, b: int) -> bool:
        threshold = self.settings.hard_operand_threshold
        return a >= threshold and b >= threshold

    def generate_fact(self) -> MathFact:
        if self.rng.random() < self.settings.division_chance:
            divisor = self._operand()
            quotient = self._operand()
            dividend = divisor * quotient
            return MathFact(text=f"{dividend} ÷ {divisor}", answer=quotient, hard=self._is_hard(divisor, quotient))

        a = self._operand()
        b = self._operand()
        return MathFact(text=f"{a} x {b}", answer=a * b, hard=self._is_hard(a, b))

    def generate_all_facts(self) -> dict[Direction, MathFact]:
        """Fill every direction with a fact whose answer differs from the earlier slots.

        Each slot gets `max_fact_attempts` tries; after that a duplicate answer is
        accepted as-is.
        """

        facts: dict[Direction, MathFact] = {}
        used: set[int] = set()

        for direction in DIRECTIONS:
            attempts = 0
            while True:
                fact = self.generate_fact()
                attempts += 1
                if fact.answer not in used or attempts >= self.settings.max_fact_attempts:
                    break
            used.add(fact.answer)
            facts[direction] = fact

        return facts
