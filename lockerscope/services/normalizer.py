"""Identifier normalization shared by every catalog lookup."""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize(value: str | None) -> str:
    """
    Lower-case and strip everything outside [a-z0-9].

    "CID_327 Athena Commando" and "cid327athenacommando" share a key.
    Empty or None input yields "".
    """
    if not value:
        return ""
    return _NON_ALNUM.sub("", value.lower())
