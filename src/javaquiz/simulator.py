import re

# Text heuristics only; nothing here executes or parses Java.
PRINT_LITERAL = re.compile(r'System\.out\.print(?:ln)?\(\s*"([^"]*)"\s*\)')
ENTRY_POINT = "public static void main"

OUTPUT_PREFIX = "Program output:\n"
SUCCESS_NO_OUTPUT = "Program executed successfully with no visible output."
MISSING_ENTRY_POINT = (
    "Error: no main method found. "
    "Add 'public static void main(String[] args)' to run your program."
)


def simulate(source: str) -> str:
    """Fabricates console output for a snippet.

    The first print call with a plain string literal wins, then the presence
    of a main method, then the missing entry point diagnostic.
    """
    match = PRINT_LITERAL.search(source)
    if match:
        return OUTPUT_PREFIX + match.group(1)
    if ENTRY_POINT in source:
        return SUCCESS_NO_OUTPUT
    return MISSING_ENTRY_POINT
