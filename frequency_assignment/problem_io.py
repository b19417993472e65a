"""
Problem-definition file I/O.

Format (whitespace separated tokens, line layout irrelevant):

    <emitter count>
    <id> <x> <y> <z> <demand>        # once per emitter
    <separation> <distance>          # repeated until end of input

The interference entries are not checked for monotonicity; a repeated
separation replaces the earlier entry.
"""

from pathlib import Path
from typing import List, Union

from .errors import ParseError
from .model import Emitter, ProblemBuilder, ProblemModel


class _Tokens:
    """Sequential token reader producing ParseError on bad input"""

    def __init__(self, text: str, source: str):
        self.tokens: List[str] = text.split()
        self.position = 0
        self.source = source

    def has_next(self) -> bool:
        return self.position < len(self.tokens)

    def next(self, what: str) -> str:
        if not self.has_next():
            raise ParseError(f"Unexpected end of input, expected {what}", self.source)
        token = self.tokens[self.position]
        self.position += 1
        return token

    def next_int(self, what: str) -> int:
        token = self.next(what)
        try:
            return int(token)
        except ValueError:
            raise ParseError(f"Expected integer {what}, got {token!r}", self.source) from None

    def next_float(self, what: str) -> float:
        token = self.next(what)
        try:
            return float(token)
        except ValueError:
            raise ParseError(f"Expected number {what}, got {token!r}", self.source) from None


def parse_problem(text: str, source: str = "<input>") -> ProblemModel:
    """
    Parse problem-definition text into a finalized ProblemModel.

    Raises:
        ParseError: On missing, non-numeric or out-of-range tokens
    """
    tokens = _Tokens(text, source)
    builder = ProblemBuilder()

    count = tokens.next_int("emitter count")
    if count < 0:
        raise ParseError(f"Emitter count must be non-negative, got {count}", source)

    for i in range(count):
        emitter_id = tokens.next(f"id of emitter {i + 1}")
        x = tokens.next_float(f"x of emitter {emitter_id}")
        y = tokens.next_float(f"y of emitter {emitter_id}")
        z = tokens.next_float(f"z of emitter {emitter_id}")
        demand = tokens.next_int(f"demand of emitter {emitter_id}")
        try:
            builder.add_emitter(Emitter(emitter_id, x, y, z, demand))
        except ValueError as e:
            raise ParseError(str(e), source) from None

    while tokens.has_next():
        separation = tokens.next_int("separation")
        distance = tokens.next_float(f"distance for separation {separation}")
        try:
            builder.add_interference(separation, distance)
        except ValueError as e:
            raise ParseError(str(e), source) from None

    return builder.finalize()


def load_problem(path: Union[str, Path]) -> ProblemModel:
    """
    Load a problem-definition file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ParseError: If the content is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Problem file not found: {path}")
    return parse_problem(path.read_text(), source=str(path))


def format_problem(model: ProblemModel) -> str:
    """Render a model in the problem-definition format"""
    lines = [str(model.num_emitters)]
    for emitter_id in model.emitter_order:
        e = model.emitters[emitter_id]
        lines.append(f"{e.id} {e.x!r} {e.y!r} {e.z!r} {e.demand}")
    for separation in model.separations:
        lines.append(f"{separation} {model.interference[separation]!r}")
    return "\n".join(lines) + "\n"


def write_problem(model: ProblemModel, output_path: Union[str, Path], overwrite: bool = False) -> Path:
    """
    Write a model to a problem-definition file.

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)
    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(format_problem(model))
    return output_path
