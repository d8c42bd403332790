"""Exception types raised by ts-validator."""

from typing import Optional


class TsValidatorError(Exception):
    """Base class for all ts-validator errors."""


class ParseError(TsValidatorError):
    """A source file could not be turned into a syntax tree."""

    def __init__(self, file_name: str, line: Optional[int] = None, column: Optional[int] = None):
        self.file_name = file_name
        self.line = line
        self.column = column
        where = file_name
        if line is not None:
            where = f"{file_name}:{line}:{column or 1}"
        super().__init__(f"Syntax error in {where}")
