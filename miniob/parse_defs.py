"""Data structures that describe a parsed SQL statement."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import List, Optional, Union

__all__ = [
    "MAX_NUM",
    "MAX_REL_NAME",
    "MAX_ATTR_NAME",
    "MAX_ERROR_MESSAGE",
    "MAX_DATA",
    "CompOp",
    "AttrType",
    "SqlCommandFlag",
    "RelAttr",
    "Value",
    "Condition",
    "Selects",
    "Inserts",
    "Deletes",
    "Updates",
    "AttrInfo",
    "CreateTable",
    "DropTable",
    "CreateIndex",
    "DropIndex",
    "DescTable",
    "LoadData",
    "Query",
    "value_from_int",
    "value_from_float",
    "value_from_string",
    "make_load_data",
]

MAX_NUM = 20
MAX_REL_NAME = 20
MAX_ATTR_NAME = 20
MAX_ERROR_MESSAGE = 20
MAX_DATA = 50


class CompOp(enum.IntEnum):
    """Comparison operators usable in a condition."""

    EQUAL_TO = 0
    LESS_EQUAL = 1
    NOT_EQUAL = 2
    LESS_THAN = 3
    GREAT_EQUAL = 4
    GREAT_THAN = 5
    NO_OP = 6


class AttrType(enum.IntEnum):
    """Types an attribute or a literal value can have."""

    UNDEFINED = 0
    CHARS = 1
    INTS = 2
    FLOATS = 3


class SqlCommandFlag(enum.IntEnum):
    """Kind of statement a query holds."""

    SCF_ERROR = 0
    SCF_SELECT = 1
    SCF_INSERT = 2
    SCF_UPDATE = 3
    SCF_DELETE = 4
    SCF_CREATE_TABLE = 5
    SCF_DROP_TABLE = 6
    SCF_CREATE_INDEX = 7
    SCF_DROP_INDEX = 8
    SCF_SYNC = 9
    SCF_SHOW_TABLES = 10
    SCF_DESC_TABLE = 11
    SCF_BEGIN = 12
    SCF_COMMIT = 13
    SCF_ROLLBACK = 14
    SCF_LOAD_DATA = 15
    SCF_HELP = 16
    SCF_EXIT = 17


def _check_limit(count: int, what: str) -> None:
    if count > MAX_NUM:
        raise ValueError(f"too many {what}: {count} (at most {MAX_NUM})")


@dataclass
class RelAttr:
    """An attribute reference, optionally qualified by its relation."""

    attribute_name: str
    relation_name: Optional[str] = None


@dataclass
class Value:
    """A literal value together with its type."""

    type: AttrType
    data: Union[int, float, str, None]


def value_from_int(v: int) -> Value:
    """Build an integer literal."""
    return Value(AttrType.INTS, int(v))


def value_from_float(v: float) -> Value:
    """Build a float literal, stored with single precision."""
    single = struct.unpack("<f", struct.pack("<f", float(v)))[0]
    return Value(AttrType.FLOATS, single)


def value_from_string(v: str) -> Value:
    """Build a character literal."""
    return Value(AttrType.CHARS, str(v))


Operand = Union[RelAttr, Value]


@dataclass
class Condition:
    """A comparison between two operands, each an attribute or a value."""

    comp: CompOp
    left: Operand
    right: Operand

    @property
    def left_is_attr(self) -> bool:
        return isinstance(self.left, RelAttr)

    @property
    def right_is_attr(self) -> bool:
        return isinstance(self.right, RelAttr)


@dataclass
class Selects:
    """A select statement: projected attributes, relations and conditions."""

    attributes: List[RelAttr] = field(default_factory=list)
    relations: List[str] = field(default_factory=list)
    conditions: List[Condition] = field(default_factory=list)

    def append_attribute(self, rel_attr: RelAttr) -> None:
        _check_limit(len(self.attributes) + 1, "attributes")
        self.attributes.append(rel_attr)

    def append_relation(self, relation_name: str) -> None:
        _check_limit(len(self.relations) + 1, "relations")
        self.relations.append(relation_name)

    def append_conditions(self, conditions) -> None:
        """Replace the where-clause conditions with the given ones."""
        new_conditions = list(conditions)
        _check_limit(len(new_conditions), "conditions")
        self.conditions = new_conditions


@dataclass
class Inserts:
    """An insert statement."""

    relation_name: str
    values: List[Value] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.values = list(self.values)
        _check_limit(len(self.values), "values")


@dataclass
class Deletes:
    """A delete statement."""

    relation_name: str
    conditions: List[Condition] = field(default_factory=list)

    def set_conditions(self, conditions) -> None:
        """Replace the where-clause conditions with the given ones."""
        new_conditions = list(conditions)
        _check_limit(len(new_conditions), "conditions")
        self.conditions = new_conditions


@dataclass
class Updates:
    """An update statement setting one attribute."""

    relation_name: str
    attribute_name: str
    value: Value
    conditions: List[Condition] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.conditions = list(self.conditions)
        _check_limit(len(self.conditions), "conditions")


@dataclass
class AttrInfo:
    """A column definition of a table being created."""

    name: str
    type: AttrType
    length: int


@dataclass
class CreateTable:
    """A create-table statement."""

    relation_name: str
    attributes: List[AttrInfo] = field(default_factory=list)

    def append_attribute(self, attr_info: AttrInfo) -> None:
        _check_limit(len(self.attributes) + 1, "attributes")
        self.attributes.append(attr_info)


@dataclass
class DropTable:
    relation_name: str


@dataclass
class CreateIndex:
    index_name: str
    relation_name: str
    attribute_name: str


@dataclass
class DropIndex:
    index_name: str


@dataclass
class DescTable:
    relation_name: str


@dataclass
class LoadData:
    relation_name: str
    file_name: str


def make_load_data(relation_name: str, file_name: str) -> LoadData:
    """Build a load-data statement, dropping one quote at each end of the file name."""
    if file_name[:1] in ("'", '"'):
        file_name = file_name[1:]
    if file_name[-1:] in ("'", '"'):
        file_name = file_name[:-1]
    return LoadData(relation_name, file_name)


Statement = Union[
    Selects,
    Inserts,
    Deletes,
    Updates,
    CreateTable,
    DropTable,
    CreateIndex,
    DropIndex,
    DescTable,
    LoadData,
]


@dataclass
class Query:
    """A parsed statement: its kind, its payload and any parse error."""

    flag: SqlCommandFlag = SqlCommandFlag.SCF_ERROR
    statement: Optional[Statement] = None
    errors: Optional[str] = None

    def reset(self) -> None:
        """Drop the statement and return to the freshly created state."""
        self.flag = SqlCommandFlag.SCF_ERROR
        self.statement = None
        self.errors = None