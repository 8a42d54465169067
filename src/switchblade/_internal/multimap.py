"""Folding of ordered key/value pairs into a plain dict."""


def collect_multi(pairs: list[tuple[str, str]]) -> dict[str, str | list[str]]:
    """Fold ordered key/value pairs into a dict.

    A key seen once maps to its value; a repeated key maps to the list of
    all its values in the order they appeared.
    """
    result: dict[str, str | list[str]] = {}
    for key, value in pairs:
        if key not in result:
            result[key] = value
            continue
        existing = result[key]
        if isinstance(existing, list):
            existing.append(value)
        else:
            result[key] = [existing, value]
    return result
