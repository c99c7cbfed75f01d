from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, List, Optional, Tuple

from faker import Faker

from . import RESERVED_COLUMN
from .errors import StateError
from .ledger import bulk_add_rows, edit_cell, remove_field
from .table import TestCaseTable

logger = logging.getLogger(__name__)

DATA_TYPES = (
    'string', 'number', 'date', 'email', 'enum', 'boolean', 'null', 'array',
    'object', 'uuid', 'phone', 'url', 'ip', 'color', 'json',
)

NAME_PATTERNS: List[Tuple[Tuple[str, ...], str]] = [
    (('date', 'time'), 'date'),
    (('email',), 'email'),
    (('price', 'amount', 'cost'), 'number'),
    (('status', 'type'), 'enum'),
    (('is_', 'has_', 'should_'), 'boolean'),
    (('uuid', 'guid'), 'uuid'),
    (('phone', 'mobile'), 'phone'),
    (('url', 'website'), 'url'),
    (('ip',), 'ip'),
    (('color',), 'color'),
]


@dataclass
class FieldRules:
    data_type: str = 'string'
    min_value: str = ''
    max_value: str = ''
    enum_values: str = ''
    number_of_cases: int = 0
    boolean_value: str = 'true'
    null_probability: float = 0
    string_length: Tuple[int, int] = (1, 10)
    array_length: Tuple[int, int] = (1, 5)
    object_keys: str = ''
    apply_to_existing: bool = False
    remove_field: bool = False
    remove_object: bool = False

    def __post_init__(self):
        if self.data_type not in DATA_TYPES:
            raise StateError(f"Unknown data type '{self.data_type}'.")


def _parse_date(text: str, default: date) -> date:
    if not text:
        return default
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return default


def _split_list(text: str) -> List[str]:
    return [v.strip() for v in (text or '').split(',') if v.strip()]


def _to_float(text: str, default: float) -> float:
    try:
        return float(text)
    except (TypeError, ValueError):
        return default


def detect_field_type(field_name: str, sample_value: Any = None) -> str:
    """Guess a rule data type from the field name, then from a sample value."""
    name = (field_name or '').lower()
    for needles, data_type in NAME_PATTERNS:
        if any(n in name for n in needles):
            return data_type

    if isinstance(sample_value, bool):
        return 'boolean'
    if isinstance(sample_value, (int, float)):
        return 'number'
    if isinstance(sample_value, list):
        return 'array'
    if isinstance(sample_value, dict):
        return 'object'
    if isinstance(sample_value, str) and sample_value:
        try:
            datetime.fromisoformat(sample_value)
            return 'date'
        except ValueError:
            pass
        if '@' in sample_value:
            return 'email'
    return 'string'


def _one_value(rules: FieldRules, faker: Faker) -> Any:
    kind = rules.data_type
    if kind == 'string':
        low, high = rules.string_length
        low, high = max(1, int(low or 1)), max(1, int(high or 10))
        word = faker.pystr(min_chars=min(low, high), max_chars=max(low, high))
        return word.lower()
    if kind == 'number':
        low = _to_float(rules.min_value, 0)
        high = _to_float(rules.max_value, 100)
        return round(faker.random.uniform(min(low, high), max(low, high)), 2)
    if kind == 'date':
        start = _parse_date(rules.min_value, date(2020, 1, 1))
        end = _parse_date(rules.max_value, date.today())
        return faker.date_between(start_date=start, end_date=end).isoformat()
    if kind == 'email':
        return faker.email()
    if kind == 'enum':
        values = _split_list(rules.enum_values)
        return faker.random.choice(values) if values else None
    if kind == 'boolean':
        if rules.boolean_value == 'random':
            return faker.pybool()
        return rules.boolean_value == 'true'
    if kind == 'array':
        low, high = rules.array_length
        length = faker.random.randint(min(low, high), max(low, high))
        return [faker.word() for _ in range(length)]
    if kind == 'object':
        return {key: faker.word() for key in _split_list(rules.object_keys)}
    if kind == 'uuid':
        return faker.uuid4()
    if kind == 'phone':
        return faker.phone_number()
    if kind == 'url':
        return faker.url()
    if kind == 'ip':
        return faker.ipv4()
    if kind == 'color':
        return faker.hex_color()
    if kind == 'json':
        return json.dumps({
            'id': faker.uuid4(),
            'name': faker.name(),
            'email': faker.email(),
            'date': faker.past_datetime().isoformat(),
        })
    return faker.word()


def generate_test_data(rules: FieldRules, count: Optional[int] = None, faker: Optional[Faker] = None) -> List[Any]:
    """Generate `count` values (default: rules.number_of_cases) following the rules."""
    faker = faker or Faker()
    count = rules.number_of_cases if count is None else count
    results: List[Any] = []
    for _ in range(max(0, int(count))):
        if rules.data_type == 'null' or (rules.null_probability and faker.random.random() * 100 < rules.null_probability):
            results.append(None)
        else:
            results.append(_one_value(rules, faker))
    return results


def _object_columns(table: TestCaseTable, column: str) -> List[str]:
    head = table.schema.path_for(column)[:1]
    return [c for c in table.columns if c != RESERVED_COLUMN and table.schema.path_for(c)[:1] == head]


def apply_field_rules(
    table: TestCaseTable,
    row_index: int,
    column: str,
    rules: FieldRules,
    faker: Optional[Faker] = None,
) -> TestCaseTable:
    """Apply a rule set saved for one column of one row."""
    if column == RESERVED_COLUMN:
        raise StateError("Rules cannot be applied to the test case name.")

    if rules.remove_object:
        for target in _object_columns(table, column):
            table = remove_field(table, row_index, target)
        return table
    if rules.remove_field:
        return remove_field(table, row_index, column)

    faker = faker or Faker()
    if rules.apply_to_existing:
        values = generate_test_data(rules, len(table.rows), faker)
        for idx, value in enumerate(values):
            if column in table.rows[idx]:
                table = edit_cell(table, idx, column, value)

    if rules.number_of_cases:
        values = generate_test_data(rules, rules.number_of_cases, faker)
        table = bulk_add_rows(table, [{column: value} for value in values])
    logger.info("Applied %s rules to %r", rules.data_type, column)
    return table
