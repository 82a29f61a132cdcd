"""Access level names and their GitLab API values.

The same name/value mapping is shared by members, shares, tokens and
protections, but each endpoint only accepts a subset of the names.
See https://docs.gitlab.com/ee/api/members.html#valid-access-levels
"""

ACCESS_LEVEL_NAME_TO_VALUE: dict[str, int] = {
    "no one": 0,
    "minimal": 5,
    "guest": 10,
    "reporter": 20,
    "developer": 30,
    "maintainer": 40,
    "owner": 50,
    # Deprecated alias of maintainer
    "master": 40,
}

ACCESS_LEVEL_VALUE_TO_NAME: dict[int, str] = {
    0: "no one",
    5: "minimal",
    10: "guest",
    20: "reporter",
    30: "developer",
    40: "maintainer",
    50: "owner",
}

VALID_PROJECT_ACCESS_LEVEL_NAMES = (
    "no one",
    "minimal",
    "guest",
    "reporter",
    "developer",
    "maintainer",
    "owner",
    "master",
)

VALID_GROUP_ACCESS_LEVEL_NAMES = VALID_PROJECT_ACCESS_LEVEL_NAMES

VALID_PROTECTED_BRANCH_TAG_ACCESS_LEVEL_NAMES = ("no one", "developer", "maintainer")

VALID_PROJECT_ACCESS_TOKEN_ACCESS_LEVEL_NAMES = (
    "guest",
    "reporter",
    "developer",
    "maintainer",
    "owner",
)


def access_level_value(name: str, valid: tuple[str, ...] = VALID_PROJECT_ACCESS_LEVEL_NAMES) -> int:
    """Convert an access level name to its API value.

    Args:
        name: Access level name, e.g. "developer"
        valid: Names accepted by the endpoint in question

    Returns:
        Integer access level

    Raises:
        ValueError: If the name is not accepted
    """
    if name not in valid:
        raise ValueError(f"invalid access level {name!r}, expected one of: {', '.join(valid)}")
    return ACCESS_LEVEL_NAME_TO_VALUE[name]


def access_level_name(value: int) -> str:
    """Convert an API access level value back to its name."""
    try:
        return ACCESS_LEVEL_VALUE_TO_NAME[value]
    except KeyError as e:
        raise ValueError(f"unknown access level value {value}") from e
