# estimating/domain/regeneration.py
"""
Selective merge of a freshly generated costing into the previous one.

Sections are matched by exact title. A section renamed by the user since the
last generation is therefore treated as new and its manual overrides are not
carried over. Within a section, items are keyed by
"assembly_id:assembly_line_id" when both are set, else by title; duplicate
keys in the previous section resolve last-wins.
"""
from enum import Enum
from typing import Dict, List, Optional

from estimating.domain.totals import recompute_estimate
from estimating.domain.types import InternalCosting, LineItem, Section


class RegenerationMode(str, Enum):
    AUTO_RATED_ONLY = "auto-rated-only"
    FULL = "full"


def previous_lookup(section: Section) -> Dict[str, LineItem]:
    lookup: Dict[str, LineItem] = {}
    for item in section.items:
        lookup[item.merge_key()] = item
    return lookup


def resolve_item(previous: Optional[LineItem], fresh: LineItem) -> LineItem:
    # manual edits always win
    if previous is not None and previous.is_manual_override:
        return previous
    if fresh.is_auto_rated:
        return fresh
    return previous if previous is not None else fresh


def merge_section(previous: Section, fresh: Section) -> Section:
    lookup = previous_lookup(previous)
    items: List[LineItem] = []
    for fresh_item in fresh.items:
        chosen = resolve_item(lookup.get(fresh_item.merge_key()), fresh_item)
        items.append(chosen.model_copy(deep=True))
    return fresh.model_copy(update={"items": items})


def merge_regeneration(
    previous: InternalCosting,
    fresh: InternalCosting,
    mode: RegenerationMode = RegenerationMode.AUTO_RATED_ONLY,
) -> InternalCosting:
    '''
    Merge fresh into previous and recompute.

    :param previous: costing currently stored on the estimate
    :param fresh: costing produced by the generator
    :param mode: "full" discards previous; "auto-rated-only" keeps manual
                 overrides and non-auto-rated items that fresh also produces
    :return: recomputed InternalCosting
    '''
    mode = RegenerationMode(mode)
    if mode == RegenerationMode.FULL:
        return recompute_estimate(fresh)

    sections: List[Section] = []
    for fresh_section in fresh.sections:
        previous_section = previous.find_section_by_title(fresh_section.title)
        if previous_section is None:
            sections.append(fresh_section.model_copy(deep=True))
        else:
            sections.append(merge_section(previous_section, fresh_section))

    merged = fresh.model_copy(update={"sections": sections})
    return recompute_estimate(merged)
