"""
Health-threshold issue detection for forecast values.

Evaluates a set of (usually predicted) channel values against fixed
health limits and reports qualitative findings. Rules are independent
and can fire together; compound rules flag combinations that point at a
specific cause, like combustion or failing filtration.
"""

from typing import Callable, List, Mapping, Optional, Tuple

Fields = Mapping[str, Optional[float]]


def _above(fields: Fields, channel: str, limit: float) -> bool:
    value = fields.get(channel)
    return value is not None and value > limit


def _below(fields: Fields, channel: str, limit: float) -> bool:
    value = fields.get(channel)
    return value is not None and value < limit


# Evaluated in order; the output preserves this order
ISSUE_RULES: Tuple[Tuple[str, Callable[[Fields], bool]], ...] = (
    ('High CO levels predicted',
     lambda f: _above(f, 'co', 9)),
    ('Elevated PM2.5 levels predicted',
     lambda f: _above(f, 'pm2_5', 25)),
    ('Elevated PM10 levels predicted',
     lambda f: _above(f, 'pm10', 50)),
    ('High VOC levels predicted',
     lambda f: _above(f, 'voc', 400)),
    ('Elevated methane levels predicted',
     lambda f: _above(f, 'methane', 25)),
    ('Potential combustion issue detected',
     lambda f: _above(f, 'co', 7) and _above(f, 'methane', 20)),
    ('Dry conditions with high particulate matter — check filtration systems',
     lambda f: (
         _above(f, 'pm2_5', 20)
         and _above(f, 'pm10', 40)
         and _below(f, 'humidity', 30)
     )),
)


class IssueDetector:
    """Applies the issue rule table to a mapping of channel values."""

    def __init__(self, rules=ISSUE_RULES):
        self.rules = rules

    def evaluate(self, fields: Fields) -> List[str]:
        """
        Return the messages of every rule that fires, in rule order.

        Channels absent from fields (or None) never trigger a rule.
        """
        return [message for message, check in self.rules if check(fields)]
