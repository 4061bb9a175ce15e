"""
Programme Fee Structure Resolver

Maps a free-text programme name (as typed on an application) to the
canonical fee schedule for that programme.

Resolution order:
1. Exact, case-sensitive match on the canonical programme name
2. Keyword containment on the upper-cased name, rules tried in a fixed
   order so a name matching several keywords always lands on the first rule

The fee table is built once (from settings.ACADEMICS["FEE_SCHEDULES"] or the
built-in table) and never mutated afterwards.
"""
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence, Tuple

from django.conf import settings

from .domain_fees import FeeComponent

# component -> template attribute, in billing order
COMPONENT_FIELDS: Tuple[Tuple[str, str], ...] = (
    (FeeComponent.ADMISSION, 'admission'),
    (FeeComponent.TUITION, 'tuition'),
    (FeeComponent.ACCOMMODATION, 'accommodation'),
    (FeeComponent.LIBRARY, 'library'),
    (FeeComponent.LABORATORY, 'laboratory'),
    (FeeComponent.EXAMINATION, 'examination'),
)


@dataclass(frozen=True)
class FeeScheduleTemplate:
    programme: str
    admission: Decimal
    tuition: Decimal
    accommodation: Decimal
    library: Decimal
    examination: Decimal
    laboratory: Optional[Decimal] = None  # science/technical programmes only
    declared_total: Optional[Decimal] = None

    @property
    def billed_total(self) -> Decimal:
        """Sum of the line items the schedule bills."""
        return sum((amount for _, amount in self.components()), Decimal('0'))

    @property
    def total(self) -> Decimal:
        """Published schedule total; the component sum when the table gives none."""
        if self.declared_total is not None:
            return self.declared_total
        return self.billed_total

    def components(self):
        """Yield (component, amount) for every component present, in billing order."""
        for component, field in COMPONENT_FIELDS:
            amount = getattr(self, field)
            if amount is not None:
                yield component, amount

    @classmethod
    def from_mapping(cls, programme: str, values: Mapping) -> 'FeeScheduleTemplate':
        def _amount(key, required=True):
            raw = values.get(key)
            if raw in (None, ''):
                if required:
                    raise ValueError(f"Fee schedule for '{programme}' is missing '{key}'")
                return None
            return Decimal(str(raw))

        return cls(
            programme=programme,
            admission=_amount('admission'),
            tuition=_amount('tuition'),
            accommodation=_amount('accommodation'),
            library=_amount('library'),
            examination=_amount('examination'),
            laboratory=_amount('laboratory', required=False),
            declared_total=_amount('total', required=False),
        )


IT = 'BACHELOR OF SCIENCE (INFORMATION TECHNOLOGY)'
CS = 'BACHELOR OF SCIENCE (COMPUTER SCIENCE)'
SE = 'BACHELOR OF SCIENCE (SOFTWARE ENGINEERING)'
BA = 'BACHELOR OF ARTS (BUSINESS ADMINISTRATION)'
ACCOUNTING = 'BACHELOR OF SCIENCE (ACCOUNTING)'

DEFAULT_FEE_SCHEDULES: Dict[str, Dict[str, int]] = {
    IT: {'admission': 5000, 'tuition': 18000, 'accommodation': 3500, 'library': 600, 'laboratory': 1200, 'examination': 800, 'total': 26100},
    CS: {'admission': 5000, 'tuition': 18000, 'accommodation': 3500, 'library': 600, 'laboratory': 1200, 'examination': 800, 'total': 26100},
    SE: {'admission': 5000, 'tuition': 20000, 'accommodation': 3500, 'library': 600, 'laboratory': 1500, 'examination': 800, 'total': 27400},
    BA: {'admission': 5000, 'tuition': 15000, 'accommodation': 3500, 'library': 500, 'examination': 600, 'total': 21600},
    ACCOUNTING: {'admission': 5000, 'tuition': 16000, 'accommodation': 3500, 'library': 500, 'examination': 700, 'total': 21700},
}

# (keywords, canonical programme); order matters
KEYWORD_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (('COMPUTER SCIENCE', 'CS'), CS),
    (('INFORMATION TECHNOLOGY', 'IT'), IT),
    (('SOFTWARE ENGINEERING', 'SE'), SE),
    (('BUSINESS ADMINISTRATION', 'BA'), BA),
    (('ACCOUNTING',), ACCOUNTING),
)


class FeeStructureResolver:
    """Pure lookup over an immutable programme -> template table."""

    def __init__(self, templates: Mapping[str, FeeScheduleTemplate], rules: Sequence = KEYWORD_RULES):
        self.templates = MappingProxyType(dict(templates))
        self.rules = tuple(rules)

    @classmethod
    def from_config(cls, schedules: Optional[Mapping[str, Mapping]] = None) -> 'FeeStructureResolver':
        schedules = schedules or DEFAULT_FEE_SCHEDULES
        templates = {
            name: FeeScheduleTemplate.from_mapping(name, values)
            for name, values in schedules.items()
        }
        return cls(templates)

    def resolve(self, programme_name: str) -> Optional[FeeScheduleTemplate]:
        if not programme_name:
            return None

        template = self.templates.get(programme_name)
        if template is not None:
            return template

        upper = programme_name.upper()
        for keywords, canonical in self.rules:
            if any(keyword in upper for keyword in keywords):
                # a configured table may omit a programme the rules know about
                return self.templates.get(canonical)
        return None

    def available_programmes(self):
        return sorted(self.templates)


@lru_cache(maxsize=1)
def get_resolver() -> FeeStructureResolver:
    """Process-wide resolver built from settings on first use."""
    schedules = getattr(settings, 'ACADEMICS', {}).get('FEE_SCHEDULES')
    return FeeStructureResolver.from_config(schedules)


def resolve(programme_name: str) -> Optional[FeeScheduleTemplate]:
    return get_resolver().resolve(programme_name)
