from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple

from faker import Faker

from . import RESERVED_COLUMN

Rule = Tuple[Callable[[str], bool], Callable[[Faker], Any]]

# Checked in order; the first matching rule wins.
GENERATION_RULES: List[Rule] = [
    (lambda c: 'email' in c, lambda f: f.email()),
    (lambda c: 'name' in c, lambda f: f.name()),
    (lambda c: 'id' in c and 'uuid' not in c, lambda f: f.bothify('????????', letters='ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789')),
    (lambda c: 'uuid' in c or 'guid' in c, lambda f: f.uuid4()),
    (lambda c: 'phone' in c or 'number' in c, lambda f: f.phone_number()),
    (lambda c: 'address' in c, lambda f: f.street_address()),
    (lambda c: 'city' in c, lambda f: f.city()),
    (lambda c: 'zip' in c or 'postal' in c, lambda f: f.postcode()),
    (lambda c: 'country' in c, lambda f: f.country()),
    (lambda c: 'date' in c, lambda f: f.past_date().strftime('%m/%d/%Y')),
    (lambda c: 'url' in c or 'website' in c, lambda f: f.url()),
    (lambda c: 'price' in c or 'amount' in c, lambda f: f"{f.pyfloat(min_value=1, max_value=1000, right_digits=2):.2f}"),
    (lambda c: 'description' in c or 'comment' in c or 'text' in c, lambda f: f.sentence()),
]


class DataGenerator:
    """Synthetic cell values chosen from the column name."""

    def __init__(self, faker: Optional[Faker] = None, seed: Optional[int] = None):
        self.faker = faker or Faker()
        if seed is not None:
            self.faker.seed_instance(seed)

    def __call__(self, column: str) -> Any:
        return self.generate_value(column)

    def generate_value(self, column: str) -> Any:
        if column == RESERVED_COLUMN:
            return None
        key = column.lower()
        for matches, make in GENERATION_RULES:
            if matches(key):
                return make(self.faker)
        return ' '.join(self.faker.words(3))

