"""
Account category tree - classifies an account by its balance

Каждый узел покрывает диапазон [min_balance, max_balance] (обе границы
включительно). Диапазон потомка должен лежать внутри диапазона родителя;
соседние диапазоны могут пересекаться - побеждает первый по порядку.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from functools import lru_cache

UNBOUNDED = Decimal("Infinity")


@dataclass(frozen=True)
class AccountCategory:
    """Immutable category node"""
    name: str
    min_balance: Decimal
    max_balance: Decimal
    children: tuple["AccountCategory", ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.min_balance > self.max_balance:
            raise ValueError(
                f"category {self.name}: min_balance {self.min_balance} > max_balance {self.max_balance}"
            )
        for child in self.children:
            if child.min_balance < self.min_balance or child.max_balance > self.max_balance:
                raise ValueError(
                    f"category {child.name} [{child.min_balance}, {child.max_balance}] "
                    f"is outside parent {self.name} [{self.min_balance}, {self.max_balance}]"
                )

    def contains(self, balance: Decimal) -> bool:
        return self.min_balance <= balance <= self.max_balance

    def find_optimal_category(self, balance: Decimal) -> "AccountCategory | None":
        """
        Найти самую глубокую категорию, содержащую баланс

        Depth-first: if this node contains the balance, the first child
        (declaration order) that yields a match wins, otherwise this node.

        Returns:
            AccountCategory или None если корень не содержит баланс
        """
        if not self.contains(balance):
            return None
        for child in self.children:
            found = child.find_optimal_category(balance)
            if found is not None:
                return found
        return self

    def add_child(self, child: "AccountCategory") -> "AccountCategory":
        """New node with child appended (the tree itself is never mutated)"""
        return AccountCategory(
            name=self.name,
            min_balance=self.min_balance,
            max_balance=self.max_balance,
            children=self.children + (child,)
        )


@lru_cache
def default_category_tree() -> AccountCategory:
    """
    Root [0, inf) -> Basic [0, 1000], Premium [1000, 5000] -> PremiumPlus [3000, 5000],
    Elite [5000, inf)
    """
    premium = AccountCategory(
        name="Premium",
        min_balance=Decimal("1000"),
        max_balance=Decimal("5000"),
        children=(
            AccountCategory("PremiumPlus", Decimal("3000"), Decimal("5000")),
        )
    )
    return AccountCategory(
        name="Root",
        min_balance=Decimal("0"),
        max_balance=UNBOUNDED,
        children=(
            AccountCategory("Basic", Decimal("0"), Decimal("1000")),
            premium,
            AccountCategory("Elite", Decimal("5000"), UNBOUNDED),
        )
    )
