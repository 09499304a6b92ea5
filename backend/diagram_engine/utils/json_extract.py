import json
import re


def extract_json(text: str) -> dict:
    """
    Extract the first JSON object from model output.
    Returns {} if nothing parses.
    """
    try:
        value = json.loads(text)
        return value if isinstance(value, dict) else {}
    except (TypeError, ValueError):
        pass

    match = re.search(r"\{.*\}", text or "", re.DOTALL)
    if not match:
        return {}

    try:
        value = json.loads(match.group(0))
    except ValueError:
        return {}
    return value if isinstance(value, dict) else {}
