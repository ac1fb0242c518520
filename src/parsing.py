"""GEDCOM import into a FamilyTree, and date normalisation."""

from dataclasses import dataclass, field
from pathlib import Path
import re

from ged4py import GedcomReader

from errors import FamilyTreeError
from family import FamilyTree
from log import get_logger
from models import ParentRole, Person
from settings import LayoutSettings

logger = get_logger(__name__)

MONTHS = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}

QUALIFIERS = re.compile(
    r"^(ABT|ABOUT|BEF|BEFORE|AFT|AFTER|EST|CAL|FROM|TO|BET|CIRCA|CA|AROUND)\.?:?\s*",
    flags=re.IGNORECASE,
)


@dataclass
class ImportResult:
    tree: FamilyTree
    warnings: list[str] = field(default_factory=list)


def _month(name: str) -> int | None:
    # Accepts abbreviations and full names: "Nov", "NOV.", "November", "Sept"
    return MONTHS.get(name.upper().rstrip(".")[:3])


def parse_date_string(date_str: str | None) -> str | None:
    """
    Parse a GEDCOM date string into ISO format (YYYY-MM-DD).
    Returns None if the date cannot be parsed.

    Handles formats like "25 NOV 1954", "NOV 1954", "1698", "ABT 1905",
    "1839-08-29" and "April 17, 1850". Missing day or month default to 01.
    """
    if not date_str:
        return None

    s = QUALIFIERS.sub("", date_str.strip().strip("()").rstrip("?")).strip()
    if not s:
        return None

    match = re.match(r"^(\d{4})-(\d{2})-(\d{2})$", s)
    if match:
        year, month, day = (int(g) for g in match.groups())
        month, day = month or 1, day or 1
        if 1 <= month <= 12 and 1 <= day <= 31:
            return f"{year:04d}-{month:02d}-{day:02d}"
        return None

    match = re.match(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$", s)
    if match and _month(match.group(2)):
        return f"{int(match.group(3)):04d}-{_month(match.group(2)):02d}-{int(match.group(1)):02d}"

    match = re.match(r"^([A-Za-z]+)\.?\s*(\d{1,2}),\s*(\d{4})$", s)
    if match and _month(match.group(1)):
        return f"{int(match.group(3)):04d}-{_month(match.group(1)):02d}-{int(match.group(2)):02d}"

    match = re.match(r"^([A-Za-z]+)\.?,?\s*(\d{4})$", s)
    if match and _month(match.group(1)):
        return f"{int(match.group(2)):04d}-{_month(match.group(1)):02d}-01"

    match = re.match(r"^(\d{4})$", s)
    if match:
        return f"{int(match.group(1)):04d}-01-01"

    return None


def xref_to_id(xref_id: str) -> str:
    """'@I12@' -> 'I12'"""
    return xref_id.strip("@")


def extract_name(indi) -> str:
    """Full display name of an individual record."""
    name_rec = indi.sub_tag("NAME")
    if name_rec is None or name_rec.value is None:
        return "Unknown"

    # ged4py returns NAME as tuple: (given, surname, suffix)
    if isinstance(name_rec.value, tuple):
        parts = [p for p in name_rec.value if p]
        return " ".join(parts) if parts else "Unknown"

    return str(name_rec.value).replace("/", "").strip() or "Unknown"


def extract_event_date(indi, tag: str) -> str | None:
    """ISO date of an event tag (BIRT, DEAT, ...) or None."""
    event = indi.sub_tag(tag)
    if event is None:
        return None
    date_rec = event.sub_tag("DATE")
    if date_rec is None or not date_rec.value:
        return None
    # ged4py may return DateValue objects
    return parse_date_string(str(date_rec.value))


def extract_media(indi) -> str | None:
    obj = indi.sub_tag("OBJE")
    if obj is None:
        return None
    file_rec = obj.sub_tag("FILE")
    return str(file_rec.value) if file_rec is not None and file_rec.value else None


def read_person(indi) -> Person:
    sex_rec = indi.sub_tag("SEX")
    metadata = {}
    death_date = extract_event_date(indi, "DEAT")
    if death_date:
        metadata["death_date"] = death_date
    return Person(
        id=xref_to_id(indi.xref_id),
        name=extract_name(indi),
        sex=sex_rec.value if sex_rec else None,
        birth_date=extract_event_date(indi, "BIRT"),
        media=extract_media(indi),
        metadata=metadata,
    )


def _try(result: ImportResult, action, *args) -> None:
    try:
        action(*args)
    except FamilyTreeError as exc:
        result.warnings.append(f"Skipped {action.__name__}{args}: {exc}")
        logger.warning("gedcom_edge_skipped", action=action.__name__, error=str(exc))


def load_gedcom(filepath: Path, settings: LayoutSettings | None = None) -> ImportResult:
    """
    Read a GEDCOM file into a new ``FamilyTree``.

    INDI records become persons. Each FAM record adds a spouse edge between HUSB and
    WIFE, and father/mother parent edges from them to every CHIL. Relationships the
    tree rejects (unknown persons, cycles, conflicting parents) are skipped and
    reported as warnings.
    """
    tree = FamilyTree(settings)
    result = ImportResult(tree=tree)

    with GedcomReader(str(filepath)) as reader:
        for rec in reader.records0("INDI"):
            if rec.xref_id is None:
                continue
            _try(result, tree.add_person, read_person(rec))

        for rec in reader.records0("FAM"):
            husb = rec.sub_tag("HUSB")
            wife = rec.sub_tag("WIFE")
            husb_id = xref_to_id(husb.xref_id) if husb and husb.xref_id else None
            wife_id = xref_to_id(wife.xref_id) if wife and wife.xref_id else None

            if husb_id and wife_id:
                _try(result, tree.add_spouse_edge, husb_id, wife_id)

            for child in rec.sub_tags("CHIL"):
                if not child.xref_id:
                    continue
                child_id = xref_to_id(child.xref_id)
                if husb_id:
                    _try(result, tree.add_parent_edge, husb_id, child_id, ParentRole.FATHER)
                if wife_id:
                    _try(result, tree.add_parent_edge, wife_id, child_id, ParentRole.MOTHER)

    logger.info(
        "gedcom_loaded",
        path=str(filepath),
        persons=len(tree),
        edges=tree.edge_count(),
        warnings=len(result.warnings),
    )
    return result
