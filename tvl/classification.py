from __future__ import annotations

from typing import NamedTuple, Optional, Tuple

from .config import GLOBAL_SECTION_EXCEPTIONS


class SectionClass(NamedTuple):
    is_auxiliary: bool
    category_key: Optional[str] = None


NOT_AUXILIARY = SectionClass(False, None)


def classify_section(section_name: str, chain: Optional[str] = None) -> SectionClass:
    """Deterministic classification of a chainTvls section name.

    Chain-scoped (chain given): a name with the exact "<chain>-" prefix is
    auxiliary and keyed by everything after its first dash, so
    "Polygon-zkEVM-staking" under chain "Polygon-zkEVM" keys as "zkEVM-staking".
    Global (no chain): names starting with a lowercase character, plus the
    "Offers" and "Treasury" exceptions, are auxiliary and keyed by the name
    itself. Upstream data relies on this exact convention.
    """
    if not section_name:
        return NOT_AUXILIARY

    if chain:
        if section_name.startswith(f"{chain}-"):
            return SectionClass(True, section_name.split("-", 1)[1])
        return NOT_AUXILIARY

    first = section_name[0]
    if first == first.lower() or section_name in GLOBAL_SECTION_EXCEPTIONS:
        return SectionClass(True, section_name)
    return NOT_AUXILIARY


def split_chain_section(key: str) -> Optional[Tuple[str, str]]:
    """Split "<chain>-<category>[-...]" into (chain, lowercased category); None without a dash.

    Only the segment between the first and second dash is the category;
    anything after a second dash is ignored.
    """
    if "-" not in key:
        return None
    parts = key.split("-")
    return parts[0], parts[1].lower()
