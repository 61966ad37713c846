from typing import List, Optional


def check_strings_for_injection(*values: Optional[str]):
    """Raise ValueError if any of the given strings contains a semicolon.

    Queries should go through bound parameters anyway; this is a second line
    for models whose values end up near hand-written SQL.
    """
    for value in values:
        if value is not None and ";" in value:
            raise ValueError("Found semicolon in string field")


def split_delimited(value: str, delimiter: str) -> List[str]:
    # "a::b::c" -> ["a", "b", "c"]; "" -> []
    if value == "":
        return []
    return value.split(delimiter)
