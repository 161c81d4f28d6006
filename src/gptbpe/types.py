"""
Core types for tokenization.
"""

from typing import TypeAlias

Token: TypeAlias = int
Symbol: TypeAlias = str
SymbolPair: TypeAlias = tuple[Symbol, Symbol]
Word: TypeAlias = list[Symbol]
