"""Legacy movepool augmentation.

Legacy abilities are no longer in a creature's decoded movepool but can
still be found on older creatures. They are appended after the standard
movepool so that rankings can flag every moveset that uses one.
"""

import logging
from typing import Iterable, Tuple

from src.gamemaster_pipeline.extraction import GameMasterData

logger = logging.getLogger(__name__)


def apply_legacy_moves(
    data: GameMasterData, pairs: Iterable[Tuple[str, str]]
) -> int:
    """Append legacy abilities to creature movepools.

    Each ability goes to the fast list when its energy delta is positive and
    to the charged list otherwise. Unknown names are skipped with a warning,
    as are abilities the creature already has. Must run once, before any
    simulation.

    Returns:
        Number of abilities appended.
    """
    added = 0
    for creature_name, ability_name in pairs:
        creature_id = data.creature_ids_by_name.get(creature_name)
        ability_id = data.ability_ids_by_name.get(ability_name)

        if creature_id is None or creature_id not in data.creatures:
            logger.warning(
                "Legacy move %s: unknown or excluded creature %s",
                ability_name, creature_name,
            )
            continue
        if ability_id is None or ability_id not in data.abilities:
            logger.warning(
                "Legacy move for %s: unknown ability %s", creature_name, ability_name
            )
            continue

        creature = data.creatures[creature_id]
        ability = data.abilities[ability_id]
        movepool = (
            creature.fast_abilities if ability.is_fast else creature.charged_abilities
        )

        if ability_id in movepool:
            logger.warning(
                "Legacy move %s already in %s movepool", ability_name, creature_name
            )
            continue

        movepool.append(ability_id)
        added += 1
        logger.debug("Added legacy move %s to %s", ability_name, creature_name)

    logger.info("Applied %d legacy moves", added)
    return added
