"""
kscope Configuration
====================

Parser configuration: the binary-operator precedence table and the
driver options. Configuration can come from:
- Default values (defined here)
- Keyword arguments / CLI flags
- Environment variables (ParserOptions.from_env)

Precedence Table
----------------
| Operator | Precedence |
|----------|------------|
| <        | 10         |
| + -      | 20         |
| *        | 40         |

Higher binds tighter. A character that is not in the table, or whose
entry is not positive, is not an infix operator.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional
import logging
import os


logger = logging.getLogger(__name__)


DEFAULT_PRECEDENCE: Mapping[str, int] = MappingProxyType({
    "<": 10,
    "+": 20,
    "-": 20,
    "*": 40,
})

DEFAULT_PROMPT = "ready> "

# Each nesting level costs a few Python stack frames
DEFAULT_MAX_NESTING = 100


# =============================================================================
# Precedence Table
# =============================================================================

class PrecedenceTable(Mapping[str, int]):
    """
    Read-only mapping from a one-character operator to its precedence.

    The table is built once before parsing begins. Parsers only read it,
    so one table can be shared by any number of independent parsers.

    Example:
        table = PrecedenceTable()
        table.lookup("+")   # 20
        table.lookup("/")   # -1 (not an operator)
    """

    def __init__(self, entries: Optional[Mapping[str, int]] = None):
        if entries is None:
            entries = DEFAULT_PRECEDENCE
        for op, prec in entries.items():
            if not isinstance(op, str) or len(op) != 1:
                raise ValueError(f"operator must be a single character, got {op!r}")
            if isinstance(prec, bool) or not isinstance(prec, int):
                raise ValueError(f"precedence of {op!r} must be an int, got {prec!r}")
        self._entries: Dict[str, int] = dict(entries)

    def lookup(self, op: str) -> int:
        """Return the precedence of op, or -1 if op is not a valid infix operator."""
        prec = self._entries.get(op, -1)
        if prec <= 0:
            return -1
        return prec

    def __getitem__(self, op: str) -> int:
        return self._entries[op]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"PrecedenceTable({self._entries!r})"


# =============================================================================
# Driver Options
# =============================================================================

class RecoveryPolicy(Enum):
    """
    What the driver does after a failed top-level construct.

    SKIP_ONE_TOKEN discards exactly one token and resumes. If that token
    is not a construct boundary the following parse usually fails too,
    so one mistake can produce several diagnostics.
    """
    SKIP_ONE_TOKEN = "skip-one-token"


@dataclass
class ParserOptions:
    """
    Lexer, parser and driver configuration.

    Attributes:
        precedence: Binary operator precedences (see PrecedenceTable)
        strict_numbers: Reject numeric literals such as "1.2.3" instead of
                        keeping their longest valid prefix
        prompt: Write prompt_text before each top-level construct
        prompt_text: The interactive prompt
        max_errors: Stop the driver after this many failures (0, the default,
                    runs to end of input)
        recovery: Error recovery policy of the driver
        max_nesting: Deepest nesting of parentheses and call arguments
    """
    precedence: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_PRECEDENCE))
    strict_numbers: bool = False
    prompt: bool = False
    prompt_text: str = DEFAULT_PROMPT
    max_errors: int = 0
    recovery: RecoveryPolicy = RecoveryPolicy.SKIP_ONE_TOKEN
    max_nesting: int = DEFAULT_MAX_NESTING

    def precedence_table(self) -> PrecedenceTable:
        """Build the read-only table used by the parser."""
        return PrecedenceTable(self.precedence)

    @classmethod
    def from_env(cls) -> "ParserOptions":
        """
        Create ParserOptions from environment variables.

        Environment variables (all optional):
            KSCOPE_STRICT_NUMBERS: "1"/"true"/"yes" enables strict numbers
            KSCOPE_MAX_ERRORS: Maximum failures before the driver stops
            KSCOPE_PROMPT: "1"/"true"/"yes" shows the interactive prompt

        Returns:
            ParserOptions with values from environment variables
        """
        options = cls()

        if strict := os.environ.get("KSCOPE_STRICT_NUMBERS"):
            options.strict_numbers = _parse_flag(strict)

        if max_errors := os.environ.get("KSCOPE_MAX_ERRORS"):
            try:
                options.max_errors = int(max_errors)
            except ValueError:
                logger.warning(f"Ignoring invalid KSCOPE_MAX_ERRORS={max_errors!r}")

        if prompt := os.environ.get("KSCOPE_PROMPT"):
            options.prompt = _parse_flag(prompt)

        return options


def _parse_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")
