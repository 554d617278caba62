"""Result rows, their schema and sets of rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Union

from miniob.parse_defs import AttrType
from miniob.value import FloatValue, IntValue, StringValue, TupleValue

__all__ = ["Tuple", "TupleField", "TupleSchema", "TupleSet"]


class Tuple:
    """One row of values."""

    def __init__(self, values: Optional[Sequence[Union[TupleValue, int, float, str]]] = None) -> None:
        self._values: List[TupleValue] = []
        for value in values or ():
            self.add(value)

    def add(self, value: Union[TupleValue, int, float, str]) -> None:
        """Append a value; plain ints, floats and strings are wrapped."""
        if isinstance(value, TupleValue):
            self._values.append(value)
        elif isinstance(value, bool):
            raise TypeError("cannot add a bool to a tuple")
        elif isinstance(value, int):
            self._values.append(IntValue(value))
        elif isinstance(value, float):
            self._values.append(FloatValue(value))
        elif isinstance(value, str):
            self._values.append(StringValue(value))
        else:
            raise TypeError(f"unsupported tuple value: {type(value).__name__}")

    @property
    def values(self) -> List[TupleValue]:
        return self._values

    def get(self, index: int) -> TupleValue:
        return self._values[index]

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[TupleValue]:
        return iter(self._values)

    def render(self) -> str:
        return " | ".join(value.to_string() for value in self._values)


@dataclass(frozen=True)
class TupleField:
    """A column of a result: its type and where it comes from."""

    type: AttrType
    table_name: str
    field_name: str

    def to_string(self) -> str:
        return f"{self.table_name}.{self.field_name}{int(self.type)}"


class TupleSchema:
    """The ordered columns of a result."""

    def __init__(self, fields: Optional[Sequence[TupleField]] = None) -> None:
        self._fields: List[TupleField] = list(fields or ())

    @property
    def fields(self) -> List[TupleField]:
        return self._fields

    def field(self, index: int) -> TupleField:
        return self._fields[index]

    def add(self, type: AttrType, table_name: str, field_name: str) -> None:
        self._fields.append(TupleField(type, table_name, field_name))

    def add_if_not_exists(self, type: AttrType, table_name: str, field_name: str) -> None:
        """Add a column unless one with the same table and field name is present."""
        if self.index_of_field(table_name, field_name) < 0:
            self.add(type, table_name, field_name)

    def append(self, other: "TupleSchema") -> None:
        self._fields.extend(other.fields)

    def index_of_field(self, table_name: str, field_name: str) -> int:
        """Return the position of the column, or -1 if there is none."""
        return next(
            (
                i
                for i, f in enumerate(self._fields)
                if f.table_name == table_name and f.field_name == field_name
            ),
            -1,
        )

    def clear(self) -> None:
        self._fields.clear()

    def copy(self) -> "TupleSchema":
        return TupleSchema(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[TupleField]:
        return iter(self._fields)

    def render(self) -> str:
        """Return the header line; names are table-qualified when several tables appear."""
        if not self._fields:
            return "No schema"
        multi_table = len({f.table_name for f in self._fields}) > 1
        names = (
            f"{f.table_name}.{f.field_name}" if multi_table else f.field_name
            for f in self._fields
        )
        return " | ".join(names) + "\n"


class TupleSet:
    """A schema together with the rows that follow it."""

    def __init__(self, schema: Optional[TupleSchema] = None) -> None:
        self._tuples: List[Tuple] = []
        self._schema = schema.copy() if schema is not None else TupleSchema()

    @property
    def schema(self) -> TupleSchema:
        return self._schema

    @property
    def tuples(self) -> List[Tuple]:
        return self._tuples

    def set_schema(self, schema: TupleSchema) -> None:
        self._schema = schema.copy()

    def add(self, tuple: Tuple) -> None:
        self._tuples.append(tuple)

    def clear(self) -> None:
        self._tuples.clear()
        self._schema.clear()

    def is_empty(self) -> bool:
        return not self._tuples

    def get(self, index: int) -> Tuple:
        return self._tuples[index]

    def __len__(self) -> int:
        return len(self._tuples)

    def __iter__(self) -> Iterator[Tuple]:
        return iter(self._tuples)

    def render(self) -> str:
        """Return the header and one line per row; empty when there is no schema."""
        if not self._schema.fields:
            return ""
        lines = [self._schema.render()]
        lines.extend(row.render() + "\n" for row in self._tuples)
        return "".join(lines)