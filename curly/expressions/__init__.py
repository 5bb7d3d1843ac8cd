"""
Язык выражений внутри директив: лексер, парсер, модель и вычислитель.
"""

from .evaluator import ExpressionEvaluator
from .lexer import ExpressionLexer, Token
from .model import Expr, ExprType
from .parser import ExpressionParser, parse_expression

__all__ = [
    "ExpressionEvaluator",
    "ExpressionLexer",
    "ExpressionParser",
    "Expr",
    "ExprType",
    "Token",
    "parse_expression",
]
