"""
color_rules.py

Threshold colour resolution for data sources.

Rules are evaluated after sorting: less-than style operators (<, <=) come
before greater-than style operators (>, >=). Less-style thresholds ascend and
greater-style thresholds descend, so the tightest bound in each direction is
tried first. The first rule whose predicate holds supplies the colour. With
that order a rule set such as ``<10, >=10, >=25`` partitions the value line
(5 -> <10, 15 -> >=10, 30 -> >=25) no matter how the rules were authored.
"""

from typing import List, Sequence, Tuple, Union

from zonecast.config import NEUTRAL_COLOR
from zonecast.models.dashboard import ColorRule, DataSource, Measurement


def sort_rules(rules: Sequence[ColorRule]) -> List[ColorRule]:
    """Less-style rules by ascending threshold, then greater-style by descending (stable)."""
    less = [r for r in rules if r.operator.is_less_style]
    greater = [r for r in rules if not r.operator.is_less_style]
    return sorted(less, key=lambda r: r.threshold) + sorted(
        greater, key=lambda r: r.threshold, reverse=True
    )


def resolve_color(
    value: Union[Measurement, float, int, None], rules: Sequence[ColorRule]
) -> str:
    """
    Pick the display colour for a value.

    :param value: Measurement or plain number; None counts as unknown
    :param rules: The data source's rules in list order
    :return: Colour of the first matching sorted rule, else the first listed
        rule's colour, else the neutral colour
    """
    if isinstance(value, Measurement):
        value = value.get()
    if value is None or not rules:
        return NEUTRAL_COLOR

    for rule in sort_rules(rules):
        if rule.matches(value):
            return rule.color

    return rules[0].color


def legend_entries(source: DataSource) -> List[Tuple[str, str]]:
    """(colour, label) pairs in authoring order for the map legend."""
    return [(rule.color, rule.display_label(source.unit)) for rule in source.color_rules]
