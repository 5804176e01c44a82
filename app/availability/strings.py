import logging


logger = logging.getLogger(__name__)


DEFAULT_STRINGS: dict[str, str] = {
    "accessrestrictions": "Access restrictions",
    "restrictaccess": "Restrict access",
    "noconditions": "No restrictions",
    "complete_on": "Complete ({date})",
    "notcomplete": "Not complete",
    "date_from": "From {date}",
    "date_until": "Until {date}",
    "grade_any": "You get a grade in {item}",
    "grade_min": "You achieve a grade of at least {min}% in {item}",
    "grade_max": "You get a grade below {max}% in {item}",
    "grade_range": "You achieve a grade of at least {min}% and below {max}% in {item}",
    "group_any": "You belong to any group",
    "group_specific": "You belong to group {group}",
    "completion_incomplete": "The activity {cm} is not marked complete",
    "completion_complete": "The activity {cm} is marked complete",
    "completion_pass": "The activity {cm} is complete and passed",
    "completion_fail": "The activity {cm} is complete and failed",
}


class StringLookup:
    """Look up display text by key and fill in named parameters."""

    def __init__(self, strings: dict[str, str] | None = None):
        self._strings = {**DEFAULT_STRINGS, **(strings or {})}

    def get_string(self, key: str, **params) -> str:
        template = self._strings.get(key)
        if template is None:
            logger.warning(f"Missing display string for key '{key}'")
            return f"[[{key}]]"
        return template.format(**params)


default_strings = StringLookup()
