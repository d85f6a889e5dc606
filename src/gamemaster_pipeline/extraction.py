"""Record extraction from a decoded game master buffer.

The outer buffer is a flat run of item template envelopes. Each envelope
holds a name string and exactly one details sub-message; only three kinds
are of interest here (creatures, abilities, type chart rows), recognised by
their name (see :mod:`classification`). Field numbers below were recovered
from the dump by hand; any field number not listed is skipped.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, FrozenSet, Iterable, List, Optional

from src.combat_engine.models import Ability, Creature, TypeChart
from src.gamemaster_pipeline.classification import (
    TemplateKind,
    TemplateName,
    classify_template_name,
)
from src.gamemaster_pipeline.wire import (
    DecodeError,
    Fixed32Value,
    LengthDelimitedValue,
    VarIntValue,
    WireDecoder,
)

logger = logging.getLogger(__name__)

OUTER_ITEM_TEMPLATE_FIELD = 2


class ItemTemplateField(IntEnum):
    NAME = 1
    CREATURE_DETAILS = 2
    ABILITY_DETAILS = 4
    TYPE_DETAILS = 8


_DETAILS_FIELDS = {
    ItemTemplateField.CREATURE_DETAILS,
    ItemTemplateField.ABILITY_DETAILS,
    ItemTemplateField.TYPE_DETAILS,
}


class CreatureField(IntEnum):
    PRIMARY_TYPE = 4
    SECONDARY_TYPE = 5
    BASE_STATS = 8
    FAST_ABILITIES = 9
    CHARGED_ABILITIES = 10


class BaseStatField(IntEnum):
    STAMINA = 1
    ATTACK = 2
    DEFENSE = 3


class AbilityField(IntEnum):
    TYPE = 3
    POWER = 4
    DURATION_MS = 12
    ENERGY_DELTA = 15


class TypeField(IntEnum):
    EFFECTIVENESS = 1
    TYPE_ID = 2


@dataclass
class GameMasterData:
    """Record tables built once per run.

    Written only by :class:`RecordExtractor` and the legacy-move step,
    read-only afterwards.
    """

    creatures: Dict[int, Creature] = field(default_factory=dict)
    abilities: Dict[int, Ability] = field(default_factory=dict)
    type_chart: TypeChart = field(default_factory=TypeChart)
    creature_ids_by_name: Dict[str, int] = field(default_factory=dict)
    ability_ids_by_name: Dict[str, int] = field(default_factory=dict)
    skipped_templates: int = 0
    malformed_templates: int = 0


class RecordExtractor:
    """Turns the raw game master bytes into :class:`GameMasterData`."""

    def __init__(self, excluded_creatures: Optional[Iterable[str]] = None):
        self.excluded_creatures: FrozenSet[str] = frozenset(excluded_creatures or ())

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extract(self, buffer: bytes) -> GameMasterData:
        """Decode every item template in *buffer*.

        A malformed template is logged and dropped. A decode error in the
        outer envelope itself propagates and aborts the run.

        Raises:
            DecodeError: if the outer buffer cannot be walked.
        """
        data = GameMasterData()
        decoder = WireDecoder(buffer)

        for value in decoder.iter_fields():
            if (
                value.field_number != OUTER_ITEM_TEMPLATE_FIELD
                or not isinstance(value, LengthDelimitedValue)
            ):
                continue
            try:
                self._extract_template(value, data)
            except DecodeError as e:
                data.malformed_templates += 1
                logger.warning("Dropping malformed item template: %s", e)

        logger.info(
            "Extracted %d creatures, %d abilities, %d types "
            "(%d templates skipped, %d malformed)",
            len(data.creatures), len(data.abilities),
            len(data.type_chart.effectiveness),
            data.skipped_templates, data.malformed_templates,
        )
        return data

    # ------------------------------------------------------------------
    # Envelope
    # ------------------------------------------------------------------

    def _extract_template(self, envelope: LengthDelimitedValue, data: GameMasterData):
        name = None
        details = None
        for value in WireDecoder.from_value(envelope).iter_fields():
            if value.field_number == ItemTemplateField.NAME:
                name = value
            elif value.field_number in _DETAILS_FIELDS:
                details = value

        if not isinstance(name, LengthDelimitedValue) or not isinstance(
            details, LengthDelimitedValue
        ):
            data.skipped_templates += 1
            return

        template = classify_template_name(name.as_text())
        if template is None:
            data.skipped_templates += 1
            return

        if template.kind is TemplateKind.CREATURE:
            if template.remainder in self.excluded_creatures:
                logger.debug("Excluded creature %s", template.remainder)
                data.skipped_templates += 1
                return
            creature = self.extract_creature(template, details)
            data.creatures[creature.creature_id] = creature
            data.creature_ids_by_name[creature.name] = creature.creature_id
        elif template.kind is TemplateKind.ABILITY:
            ability = self.extract_ability(template, details)
            data.abilities[ability.ability_id] = ability
            data.ability_ids_by_name[ability.name] = ability.ability_id
        else:
            self.extract_type(template, details, data.type_chart)

    # ------------------------------------------------------------------
    # Record shapes
    # ------------------------------------------------------------------

    def extract_creature(
        self, template: TemplateName, details: LengthDelimitedValue
    ) -> Creature:
        """Build a :class:`Creature` from its details sub-message."""
        creature = Creature(creature_id=template.number, name=template.remainder)
        types: List[int] = []

        for value in WireDecoder.from_value(details).iter_fields():
            number = value.field_number
            if number in (CreatureField.PRIMARY_TYPE, CreatureField.SECONDARY_TYPE):
                if isinstance(value, VarIntValue):
                    types.append(value.value)
            elif number == CreatureField.BASE_STATS:
                if isinstance(value, LengthDelimitedValue):
                    self._read_base_stats(value, creature)
            elif number == CreatureField.FAST_ABILITIES:
                if isinstance(value, LengthDelimitedValue):
                    creature.fast_abilities.extend(_packed_varints(value))
            elif number == CreatureField.CHARGED_ABILITIES:
                if isinstance(value, LengthDelimitedValue):
                    creature.charged_abilities.extend(_packed_varints(value))

        if len(types) == 1:
            types.append(types[0])
        creature.types = types
        creature.standard_fast_count = len(creature.fast_abilities)
        creature.standard_charged_count = len(creature.charged_abilities)

        logger.debug(
            "Creature #%d %s: ATK %d DEF %d STA %d types %s fast %s charged %s",
            creature.creature_id, creature.name,
            creature.attack, creature.defense, creature.stamina,
            creature.types, creature.fast_abilities, creature.charged_abilities,
        )
        return creature

    @staticmethod
    def _read_base_stats(stats: LengthDelimitedValue, creature: Creature):
        for value in WireDecoder.from_value(stats).iter_fields():
            if not isinstance(value, VarIntValue):
                continue
            if value.field_number == BaseStatField.STAMINA:
                creature.stamina = value.value
            elif value.field_number == BaseStatField.ATTACK:
                creature.attack = value.value
            elif value.field_number == BaseStatField.DEFENSE:
                creature.defense = value.value

    def extract_ability(
        self, template: TemplateName, details: LengthDelimitedValue
    ) -> Ability:
        """Build an :class:`Ability` from its details sub-message."""
        ability = Ability(ability_id=template.number, name=template.remainder)

        for value in WireDecoder.from_value(details).iter_fields():
            number = value.field_number
            if number == AbilityField.TYPE and isinstance(value, VarIntValue):
                ability.type_id = value.value
            elif number == AbilityField.POWER and isinstance(value, Fixed32Value):
                ability.power = value.as_float()
            elif number == AbilityField.DURATION_MS and isinstance(value, VarIntValue):
                ability.duration = value.value / 1000.0
            elif number == AbilityField.ENERGY_DELTA and isinstance(value, VarIntValue):
                ability.energy_delta = value.as_signed()

        logger.debug(
            "Ability #%d %s: type %d power %g duration %gs energy %d",
            ability.ability_id, ability.name, ability.type_id,
            ability.power, ability.duration, ability.energy_delta,
        )
        return ability

    def extract_type(
        self,
        template: TemplateName,
        details: LengthDelimitedValue,
        type_chart: TypeChart,
    ) -> Optional[int]:
        """Add one attacking-type row to *type_chart* and return its id.

        The effectiveness row lists this type's multiplier against every
        defending type, in ascending type id order starting at 1.
        """
        type_id = None
        row: Dict[int, float] = {}

        for value in WireDecoder.from_value(details).iter_fields():
            if value.field_number == TypeField.EFFECTIVENESS and isinstance(
                value, LengthDelimitedValue
            ):
                row = _packed_float_row(value)
            elif value.field_number == TypeField.TYPE_ID and isinstance(
                value, VarIntValue
            ):
                type_id = value.value

        if type_id is None:
            logger.warning("Type template %s has no type id, skipping", template.raw)
            return None

        type_chart.effectiveness[type_id] = row
        type_chart.names[type_id] = template.raw
        logger.debug("Type #%d %s: %d effectiveness entries", type_id, template.raw, len(row))
        return type_id


def _packed_varints(value: LengthDelimitedValue) -> List[int]:
    """A flat run of varints with no per-element keys."""
    decoder = WireDecoder.from_value(value)
    ids = []
    while decoder.bytes_remaining():
        ids.append(decoder.read_varint())
    return ids


def _packed_float_row(value: LengthDelimitedValue) -> Dict[int, float]:
    """A flat run of little-endian float32 values, keyed from 1."""
    decoder = WireDecoder.from_value(value)
    row = {}
    index = 1
    while decoder.bytes_remaining():
        row[index] = Fixed32Value(index, decoder.read_fixed(4)).as_float()
        index += 1
    return row
