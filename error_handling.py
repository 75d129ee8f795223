"""
Error types and error reporting for loopcalc
Structured error dicts plus exception classes used across the interpreter
"""

from typing import Dict, Optional
from pyparsing import ParseException


GENERIC_COMMAND_ERROR = "Error in command, expression or assignment operation"


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class CalculatorError(Exception):
    """Base class for every error the calculator reports"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidNameError(CalculatorError):
    """Name is empty, longer than 22 characters or not purely alphabetic"""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid name '{name}'")


class InvalidRangeError(CalculatorError):
    """Loop bounds and increment are inconsistent"""
    def __init__(self, start: float, increment: float, end: float):
        self.start = start
        self.increment = increment
        self.end = end
        super().__init__(
            f"Invalid range: start={start}, increment={increment}, end={end}")


class DuplicateNameError(CalculatorError):
    """Name is already taken by a variable or a loop"""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Name '{name}' is already defined")


class InvalidDefinitionError(CalculatorError):
    """A --define or --loopable string could not be decoded"""
    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid definition '{text}': {reason}")


class CalcSyntaxError(CalculatorError):
    """Malformed directive or expression"""
    pass


class CommandSyntaxError(CalcSyntaxError):
    """A line does not match any command form"""
    def __init__(self, message: str, line: str = ""):
        self.line = line
        super().__init__(message)


class ExpressionSyntaxError(CalcSyntaxError):
    """The expression evaluator rejected an expression"""
    def __init__(self, message: str, position: int = 0, text: str = ""):
        self.position = position
        self.text = text
        super().__init__(message)

    def __str__(self) -> str:
        return format_expression_error(make_expression_error(
            self.message, self.position, self.text))


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_expression_error(
    message: str,
    position: int,
    text: str,
    got: Optional[str] = None
) -> Dict:
    """Create an immutable expression error structure"""
    return {
        'message': message,
        'position': position,
        'text': text,
        'got': got if got is not None else extract_got(text, position)
    }


def format_expression_error(error: Dict) -> str:
    """Format expression error as string"""
    if not error['position']:
        return f"Expression error: {error['message']}"

    error_msg = f"Expression error at column {error['position']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['text']:
        error_msg += f"  {error['text']}\n"
        error_msg += f"  {' ' * (error['position'] - 1)}^ Error here"

    return error_msg.rstrip('\n')


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def extract_got(text: str, position: int) -> str:
    """Extract what was actually found at the error position"""
    if position < 1:
        return ""
    if position > len(text):
        return "end of expression"
    got_text = text[position - 1:position + 9].strip()
    if got_text:
        return f"'{got_text}'"
    return "end of expression"


def enhance_parse_exception(exc: ParseException, text: str) -> ExpressionSyntaxError:
    """Convert pyparsing exception to an expression syntax error"""
    position = exc.loc + 1
    return ExpressionSyntaxError(
        message=f"Unexpected input (expected {describe_expected(exc)})",
        position=position,
        text=text
    )


def describe_expected(exc: ParseException) -> str:
    """Describe what the grammar wanted at the failure point"""
    msg = str(exc)
    if msg.startswith("Expected "):
        return msg[len("Expected "):].split(", found")[0].split("  (at")[0]
    return "an expression"
