"""
Tariff Model

Enumerates charging tariff kinds, which of them incur AC charging loss,
and where each one takes its price from.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from evjournal.utils.text_utils import normalize_label


class TariffType(str, Enum):
    """Charging tariff kinds. Values are the labels shown on exported sheets."""

    PEAK = "Heures Pleines"
    OFF_PEAK = "Heures Creuses"
    TEMPO_BLUE_PEAK = "Tempo Bleu - Heures Pleines"
    TEMPO_BLUE_OFFPEAK = "Tempo Bleu - Heures Creuses"
    TEMPO_WHITE_PEAK = "Tempo Blanc - Heures Pleines"
    TEMPO_WHITE_OFFPEAK = "Tempo Blanc - Heures Creuses"
    TEMPO_RED_PEAK = "Tempo Rouge - Heures Pleines"
    TEMPO_RED_OFFPEAK = "Tempo Rouge - Heures Creuses"
    QUICK_CHARGE = "Recharge borne rapide"
    FREE_CHARGE = "Borne gratuite"


# Wall-outlet tariffs, subject to the AC conversion loss
AC_TARIFFS = frozenset({
    TariffType.PEAK,
    TariffType.OFF_PEAK,
    TariffType.TEMPO_BLUE_PEAK,
    TariffType.TEMPO_BLUE_OFFPEAK,
    TariffType.TEMPO_WHITE_PEAK,
    TariffType.TEMPO_WHITE_OFFPEAK,
    TariffType.TEMPO_RED_PEAK,
    TariffType.TEMPO_RED_OFFPEAK,
    TariffType.FREE_CHARGE,
})

# Settings attribute holding the price of each settings-priced tariff
TARIFF_PRICE_FIELDS: Dict[TariffType, str] = {
    TariffType.PEAK: "price_peak",
    TariffType.OFF_PEAK: "price_off_peak",
    TariffType.TEMPO_BLUE_PEAK: "price_tempo_blue_peak",
    TariffType.TEMPO_BLUE_OFFPEAK: "price_tempo_blue_offpeak",
    TariffType.TEMPO_WHITE_PEAK: "price_tempo_white_peak",
    TariffType.TEMPO_WHITE_OFFPEAK: "price_tempo_white_offpeak",
    TariffType.TEMPO_RED_PEAK: "price_tempo_red_peak",
    TariffType.TEMPO_RED_OFFPEAK: "price_tempo_red_offpeak",
}

# Tariffs priced outside of settings
RECORD_PRICED_TARIFFS = frozenset({TariffType.QUICK_CHARGE})
FREE_TARIFFS = frozenset({TariffType.FREE_CHARGE})

_unpriced = set(TariffType) - set(TARIFF_PRICE_FIELDS) - RECORD_PRICED_TARIFFS - FREE_TARIFFS
if _unpriced:
    raise RuntimeError(f"No price rule for tariff(s): {sorted(t.name for t in _unpriced)}")

# Report groupings
PEAK_OFFPEAK_TARIFFS = (TariffType.PEAK, TariffType.OFF_PEAK)
TEMPO_TARIFFS = (
    TariffType.TEMPO_BLUE_PEAK,
    TariffType.TEMPO_BLUE_OFFPEAK,
    TariffType.TEMPO_WHITE_PEAK,
    TariffType.TEMPO_WHITE_OFFPEAK,
    TariffType.TEMPO_RED_PEAK,
    TariffType.TEMPO_RED_OFFPEAK,
)
QUICK_CHARGE_TARIFFS = (TariffType.QUICK_CHARGE,)

TARIFF_GROUPS = {
    "peak_offpeak": PEAK_OFFPEAK_TARIFFS,
    "tempo": TEMPO_TARIFFS,
    "quick": QUICK_CHARGE_TARIFFS,
}

_TARIFF_LOOKUP = {}
for _tariff in TariffType:
    _TARIFF_LOOKUP[normalize_label(_tariff.value)] = _tariff
    _TARIFF_LOOKUP[normalize_label(_tariff.name)] = _tariff


def is_ac_tariff(tariff: TariffType) -> bool:
    """Return True if charging under this tariff goes through the onboard AC charger."""
    return tariff in AC_TARIFFS


def parse_tariff(value: Any) -> Optional[TariffType]:
    """
    Resolve a tariff from an enum member, its label or its member name.

    Matching ignores case, accents and surrounding whitespace.

    Examples:
        >>> parse_tariff("heures creuses")
        <TariffType.OFF_PEAK: 'Heures Creuses'>
        >>> parse_tariff("QUICK_CHARGE")
        <TariffType.QUICK_CHARGE: 'Recharge borne rapide'>
        >>> parse_tariff("unknown") is None
        True
    """
    if isinstance(value, TariffType):
        return value
    if value is None:
        return None
    return _TARIFF_LOOKUP.get(normalize_label(value))


def parse_tariff_filter(values: Iterable[Any]) -> List[TariffType]:
    """
    Expand tariff labels and group names into a list of tariffs.

    Group names are the keys of TARIFF_GROUPS. Unknown values are skipped;
    duplicates are kept once, in first-seen order.

    Examples:
        >>> parse_tariff_filter(["quick", "Heures Creuses"])
        [<TariffType.QUICK_CHARGE: 'Recharge borne rapide'>, <TariffType.OFF_PEAK: 'Heures Creuses'>]
    """
    tariffs: List[TariffType] = []
    for value in values:
        group = TARIFF_GROUPS.get(normalize_label(value))
        if group is None:
            tariff = parse_tariff(value)
            group = (tariff,) if tariff is not None else ()
        for tariff in group:
            if tariff not in tariffs:
                tariffs.append(tariff)
    return tariffs
