# miniob

The core pieces of a small teaching database server, kept simple so they can
be read and extended:

- `miniob.rc`: the `RC` result-code enumeration and `strrc()`, which gives a
  code's name or `"UNKNOWN"`.
- `miniob.parse_defs`: the structures that describe a parsed statement:
  `Query` (with a `SqlCommandFlag`), `Selects`, `Inserts`, `Deletes`,
  `Updates`, `CreateTable`, `DropTable`, `CreateIndex`, `DropIndex`,
  `DescTable`, `LoadData`, `Condition`, `RelAttr`, `AttrInfo` and `Value`.
  It also has the helpers `value_from_int`, `value_from_float` (which keeps
  single precision), `value_from_string` and `make_load_data` (which drops one
  quote from each end of the file name). Lists are limited to `MAX_NUM` (20)
  entries. Going past the limit raises `ValueError`.
- `miniob.value`: the cell values `IntValue`, `FloatValue` and `StringValue`,
  each with `to_string()` and `compare()`.
- `miniob.tuple`: `Tuple`, `TupleField`, `TupleSchema` and `TupleSet`, with
  `render()` for a text table (`a | b` per line).
- `miniob.session`: `Session`, which holds the current database and the
  multi-statement flag.
- `miniob.events`: `ConnectionContext`, `SessionEvent`, `SQLStageEvent`,
  `ExecutionPlanEvent` and `StorageEvent`.
- `miniob.session_stage`: `SessionStage`, which turns a request into an
  `SQLStageEvent`, passes it to an optional next stage and sends the framed
  reply. It also provides `frame_response()` and `is_blank()`.
- `miniob.server`: `Server` and `ServerParam`, a TCP or Unix-socket server. A
  message is text that ends with a NUL byte and may be at most 8192 bytes,
  NUL included. `extract_message()` raises `MessageTooLongError` for a longer
  message, and the server closes that connection.
- `miniob.observer` and `miniob.client`: the two command-line programs.

## What it does not do

The package has no SQL parser, no query execution and no storage. The
server that `miniob-observer` starts has no next stage behind its
`SessionStage`, so it answers every non-blank request with `No data`. The
statement, tuple and session structures are there for a parser and an
executor to build on. The package does not provide either of them.

## Install

```
pip install .
```

## Running the server

```
miniob-observer -f observer.ini -p 6789
```

Options:

- `-p PORT`: the port to listen on. It takes precedence over `PORT` in the
  `[NET]` section. The default is 6789.
- `-f FILE`: the ini configuration file to read.
- `-s PATH`: listen on a Unix socket at this path instead of a TCP port.
- `-d`: redirect standard output and standard error to the files that `-o`
  and `-e` name. These default to `<program>.out` and `<program>.err`.
- `-o FILE`, `-e FILE`: the redirection targets for `-d`.
- `-h`: print the usage and exit.

The configuration file may contain these keys:

```ini
[NET]
PORT=6789
CLIENT_ADDRESS=0
MAX_CONNECTION_NUM=8192

[LOG]
LOG_FILE_NAME=observer.log
LOG_FILE_LEVEL=3
LOG_CONSOLE_LEVEL=3
```

The log levels run from 0 (panic) to 5 (trace). The default is 3 (info).
If `LOG_FILE_NAME` is not set, the log goes to `<program>.log`. `SIGINT` or
`SIGTERM` stops the server.

## Running the client

```
miniob-client -h 127.0.0.1 -p 6789
miniob-client -s /tmp/miniob.sock
```

At the `miniob > ` prompt, each non-blank line goes to the server and the
client prints the reply. A line that starts with `exit` or `bye`, in any
case, ends the session.

## Using the library

```python
from miniob.rc import RC, strrc
from miniob.parse_defs import AttrType
from miniob.tuple import Tuple, TupleSchema, TupleSet

print(strrc(RC.SCHEMA_TABLE_NOT_EXIST))   # SCHEMA_TABLE_NOT_EXIST

schema = TupleSchema()
schema.add(AttrType.INTS, "t", "id")
schema.add_if_not_exists(AttrType.INTS, "t", "id")
print(schema.index_of_field("t", "id"))   # 0

rows = TupleSet(schema)
rows.add(Tuple([1]))
print(rows.render(), end="")              # id\n1\n
```

## Tests

```
pip install .[test]
pytest
```