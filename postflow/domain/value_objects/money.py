"""Money value object. Amounts are integer cents."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Money:
    cents: int
    currency: str = "USD"

    def __post_init__(self):
        if self.cents < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency required")

    @classmethod
    def zero(cls, currency: str = "USD") -> "Money":
        return cls(0, currency)

    def percentage(self, percent: float) -> "Money":
        """Portion of this amount, rounded down to the cent."""
        return Money(int(self.cents * percent // 100), self.currency)

    def __add__(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.cents + other.cents, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(max(self.cents - other.cents, 0), self.currency)

    def _check_currency(self, other: "Money") -> None:
        if other.currency != self.currency:
            raise ValueError("Currency mismatch")

    def to_dollars(self) -> float:
        return self.cents / 100

    def __str__(self) -> str:
        return f"{self.cents / 100:.2f} {self.currency}"
