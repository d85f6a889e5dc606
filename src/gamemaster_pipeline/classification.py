"""Item template name classification.

Game master item templates are only identifiable by their name string:
- ``V0149_POKEMON_DRAGONITE``  -> creature #149, ``DRAGONITE``
- ``V0204_MOVE_DRAGON_BREATH`` -> ability #204, ``DRAGON_BREATH``
- ``POKEMON_TYPE_DRAGON``      -> type, ``DRAGON`` (id lives in the details)
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TemplateKind(Enum):
    CREATURE = "creature"
    ABILITY = "ability"
    TYPE = "type"


# Checked in order, first match wins
_CREATURE_PATTERN = re.compile(r"^V(\d+)_POKEMON_(.*)$")
_ABILITY_PATTERN = re.compile(r"^V(\d+)_MOVE_(.*)$")
_TYPE_PATTERN = re.compile(r"^POKEMON_TYPE_(.*)$")


@dataclass(frozen=True)
class TemplateName:
    kind: TemplateKind
    number: Optional[int]
    remainder: str
    raw: str


def classify_template_name(name: str) -> Optional[TemplateName]:
    """Classify an item template name, or return None if it is out of scope."""
    if not name:
        return None

    m = _CREATURE_PATTERN.match(name)
    if m:
        return TemplateName(TemplateKind.CREATURE, int(m.group(1)), m.group(2), name)

    m = _ABILITY_PATTERN.match(name)
    if m:
        return TemplateName(TemplateKind.ABILITY, int(m.group(1)), m.group(2), name)

    m = _TYPE_PATTERN.match(name)
    if m:
        return TemplateName(TemplateKind.TYPE, None, m.group(1), name)

    return None


def normalize_name(name) -> Optional[str]:
    """Normalize a human-entered creature/ability name to template spelling.

    Examples:
        "Dragon Breath" -> "DRAGON_BREATH"
        " ho-oh "       -> "HO_OH"
    """
    if name is None:
        return None
    name = str(name).strip().strip('"')
    if name == "" or name.lower() == "nan":
        return None
    name = name.replace("-", "_")
    name = "_".join(name.split())
    return name.upper()
