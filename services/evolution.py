import logging

logger = logging.getLogger(__name__)


def walk_evolution_chain(node):
    """Collect species names along an evolution-chain node, in evolution order.

    Only the first `evolves_to` branch is followed at each step, so families
    that split (e.g. eevee) come back as a single line.
    """
    names = []
    current = node
    while current:
        names.append(current['species']['name'])
        branches = current.get('evolves_to') or []
        if len(branches) > 1:
            logger.debug('Evolution chain branches at %s (%d paths), following the first',
                         names[-1], len(branches))
        current = branches[0] if branches else None
    return names
