"""Category catalog for accounting transactions."""

from enum import Enum
from typing import Iterator


class CategoryType(str, Enum):
    """Top-level account group a category belongs to."""

    EXPENSE = "expense"
    INCOME = "income"
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    UNKNOWN = "unknown"


CATEGORY_PREFIXES: dict[CategoryType, str] = {
    CategoryType.EXPENSE: "Expenses:",
    CategoryType.INCOME: "Income:",
    CategoryType.ASSET: "Assets:",
    CategoryType.LIABILITY: "Liabilities:",
    CategoryType.EQUITY: "Equity:",
}

DEFAULT_CATEGORIES: dict[CategoryType, tuple[str, ...]] = {
    CategoryType.EXPENSE: (
        "Expenses:Rent",
        "Expenses:Utilities",
        "Expenses:Salaries",
        "Expenses:Insurance",
        "Expenses:Office",
        "Expenses:Professional",
        "Expenses:Taxes",
        "Expenses:Interest",
        "Expenses:Maintenance",
        "Expenses:Other",
    ),
    CategoryType.INCOME: (
        "Income:Sales",
        "Income:Services",
        "Income:Interest",
        "Income:Rent",
        "Income:Other",
    ),
    CategoryType.ASSET: (
        "Assets:Cash",
        "Assets:Accounts Receivable",
        "Assets:Inventory",
        "Assets:Equipment",
        "Assets:Property",
        "Assets:Other",
    ),
    CategoryType.LIABILITY: (
        "Liabilities:Accounts Payable",
        "Liabilities:Loans",
        "Liabilities:Mortgage",
        "Liabilities:Credit Cards",
        "Liabilities:Taxes Payable",
        "Liabilities:Other",
    ),
    CategoryType.EQUITY: (
        "Equity:Capital",
        "Equity:Retained Earnings",
        "Equity:Drawings",
        "Equity:Other",
    ),
}


# Menu options offered while coding; catalog categories start at 3
SPLIT_OPTION = 1
NEW_CATEGORY_OPTION = 2
FIRST_CATEGORY_OPTION = 3


def category_type(category: str) -> CategoryType:
    """Classify a category by its top-level prefix (e.g. "Expenses:")."""
    for kind, prefix in CATEGORY_PREFIXES.items():
        if category.startswith(prefix):
            return kind
    return CategoryType.UNKNOWN


class CategoryCatalog:
    """Ordered catalog of the categories offered when coding transactions.

    Iteration order is expense, income, asset, liability, equity; within a
    group, defaults come first and custom categories follow in the order
    they were added.
    """

    def __init__(self, categories: dict[CategoryType, tuple[str, ...]] | None = None):
        source = DEFAULT_CATEGORIES if categories is None else categories
        self._groups: dict[CategoryType, list[str]] = {
            kind: list(source.get(kind, ())) for kind in CATEGORY_PREFIXES
        }

    def categories(self, kind: CategoryType) -> list[str]:
        """Return the categories of one group."""
        return list(self._groups.get(kind, []))

    def all_categories(self) -> list[str]:
        """Return every category in catalog order."""
        return [category for kind in CATEGORY_PREFIXES for category in self._groups[kind]]

    def __iter__(self) -> Iterator[str]:
        return iter(self.all_categories())

    def __len__(self) -> int:
        return sum(len(group) for group in self._groups.values())

    def __contains__(self, category: object) -> bool:
        return self.is_valid_category(category)

    def is_valid_category(self, category: object) -> bool:
        return any(category in group for group in self._groups.values())

    def add_custom_category(self, category: str) -> bool:
        """Register a custom category in the group matching its prefix.

        Duplicates and categories with an unrecognized prefix are ignored.

        Returns:
            True if the category was added
        """
        kind = category_type(category)
        if kind is CategoryType.UNKNOWN:
            return False
        group = self._groups[kind]
        if category in group:
            return False
        group.append(category)
        return True

    def option_number(self, category: str) -> int | None:
        """Return the menu option for a category (options 1 and 2 are reserved)."""
        try:
            return self.all_categories().index(category) + FIRST_CATEGORY_OPTION
        except ValueError:
            return None

    def category_for_option(self, option: int) -> str | None:
        """Return the category behind a menu option, or None if out of range."""
        index = option - FIRST_CATEGORY_OPTION
        all_cats = self.all_categories()
        if 0 <= index < len(all_cats):
            return all_cats[index]
        return None
