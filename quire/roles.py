from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from .errors import ValidationError
from .metadata import entry_parts, refining_elements
from .models import MetaElement, RoleEntry

CREATOR = "creator"
CONTRIBUTOR = "contributor"
RELATOR_SCHEME = "marc:relators"
CREATOR_PREFIX = "a-"


@dataclass(frozen=True)
class RoleRule:
    kind: str
    also_publisher: bool = False


_CREATOR_CODES = (
    "a-adp", "a-ann", "a-arr", "a-art", "a-asn", "a-aqt", "a-aft", "a-aui", "a-ant", "a-bkp",
    "a-clb", "a-cmm", "a-csl", "a-dsr", "a-edt", "a-ill", "a-lyr", "a-mdc", "a-mus", "a-nrt",
    "a-oth", "a-pht", "a-prt", "a-red", "a-rev", "a-spn", "a-ths", "a-trc", "a-trl", "aut",
)
_CONTRIBUTOR_CODES = (
    "adp", "ann", "arr", "art", "asn", "aqt", "aft", "aui", "ant", "bkp",
    "clb", "cmm", "csl", "dsr", "edt", "ill", "lyr", "mdc", "mus", "nrt",
    "oth", "pbd", "pbl", "pht", "prt", "red", "rev", "spn", "ths", "trc", "trl",
)
# Printer and publisher are also emitted as dc:publisher.
_PUBLISHER_CODES = frozenset({"prt", "pbl"})

ROLE_TABLE: dict[str, RoleRule] = {
    **{code: RoleRule(CREATOR) for code in _CREATOR_CODES},
    **{code: RoleRule(CONTRIBUTOR, also_publisher=code in _PUBLISHER_CODES) for code in _CONTRIBUTOR_CODES},
}


def classify(role: str) -> RoleRule:
    try:
        return ROLE_TABLE[role]
    except KeyError:
        raise ValidationError(f"unrecognized role code: {role!r}", field=role) from None


def validate_roles(roles: Iterable[str]) -> None:
    for role in roles:
        classify(role)


def relator_code(role: str) -> str:
    return role.removeprefix(CREATOR_PREFIX)


def _person_elements(tag: str, element_id: str, relator: str, entry: RoleEntry) -> list[MetaElement]:
    name, extras = entry_parts(entry)
    return [
        MetaElement(tag, name, id=element_id),
        MetaElement("meta", relator, refines=f"#{element_id}", property="role", scheme=RELATOR_SCHEME),
        *refining_elements(element_id, extras),
    ]


def role_elements(roles: Mapping[str, tuple[RoleEntry, ...]]) -> list[MetaElement]:
    """Emit creator/contributor/publisher elements in role-table order.

    Each ``role+index`` pair is handled on its own: one person listed under
    both ``prt`` and ``pbl`` yields two publisher elements.
    """
    validate_roles(roles)
    elements: list[MetaElement] = []
    for role, rule in ROLE_TABLE.items():
        entries = roles.get(role)
        if not entries:
            continue
        relator = relator_code(role)
        for index, entry in enumerate(entries):
            elements.extend(_person_elements(f"dc:{rule.kind}", f"{role}-{index}", relator, entry))
            if rule.also_publisher:
                elements.extend(_person_elements("dc:publisher", f"pub-{role}-{index}", relator, entry))
    return elements
