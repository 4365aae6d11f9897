"""
Parser combinators over any kind of input.

See the objects for more explanations.

See the `combparse.general` module for text parsers you can use as examples.

Defining parsers:
```
from combparse import *
from combparse.general import char, spaces, unsigned

number = unsigned().skip(spaces())
numbers = sep_by(number, char(",").skip(spaces()))
array = between(char("["), numbers, char("]"))
```

Using parsers:
```
result = array("[1, 2, 3]")

if result:
    value, rest = result    # `result` is a `Success` object
else:
    ...                     # `result` is a `ParseError` object

value = array.parse("[1, 2, 3]", consume_all=True)  # raises `ParseException` on failure
```

Input doesn't have to be text. Any sequence works, as does anything implementing `Input`:
```
tokens = [("num", 1), ("op", "+"), ("num", 2)]
num = satisfy(lambda t: t[0] == "num").map(lambda t: t[1])
plus = token(("op", "+"))
addition = num.skip(plus).and_(num)
addition.parse(tokens)      # (1, 2)
```
"""

import combparse.const as const
from combparse.input import (
    Input,
    SequenceInput,
    StringInput,
    BytesInput,
    as_input,
)
from combparse.error import (
    ParseError,
    UnexpectedEnd,
    Expected,
    Message,
    Many,
    ParseException,
)
from combparse.main import (
    Success,
    ParseResult,
    Parser,
    FunctionParser,
    Forward,
    parser,
    pure,
    fail,
    forward,
    map2,
    map3,
    tuple2,
    tuple3,
)
from combparse.combinators import (
    item,
    satisfy,
    token,
    eof,
    empty,
    between,
    choice,
    sep_by,
    sep_by1,
)
import combparse.general as general

__all__ = [
    "const",
    "general",
    "Input",
    "SequenceInput",
    "StringInput",
    "BytesInput",
    "as_input",
    "ParseError",
    "UnexpectedEnd",
    "Expected",
    "Message",
    "Many",
    "ParseException",
    "Success",
    "ParseResult",
    "Parser",
    "FunctionParser",
    "Forward",
    "parser",
    "pure",
    "fail",
    "forward",
    "map2",
    "map3",
    "tuple2",
    "tuple3",
    "item",
    "satisfy",
    "token",
    "eof",
    "empty",
    "between",
    "choice",
    "sep_by",
    "sep_by1",
]
