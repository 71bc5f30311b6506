"""Regular expression parser."""

from nfalab.parser.ast import Alternate, Charset, Concat, Node, Quantifier
from nfalab.parser.parser import RegexParser, parse

__all__ = [
    "Node",
    "Charset",
    "Concat",
    "Alternate",
    "Quantifier",
    "RegexParser",
    "parse",
]
