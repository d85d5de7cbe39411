"""Turn raw import rows into article candidates using a field mapping"""

import logging
import re
import uuid
from typing import Callable, Dict, List, Optional, Union

from entity_resolution.importing.loader import CellValue
from entity_resolution.matching.category_index import CategoryIndex, suggest_for_index
from entity_resolution.models.article import CanonicalSupplier, NutritionInfo
from entity_resolution.models.configs import NutritionConfig, ResolutionConfig
from entity_resolution.models.decisions import MappingResult, NutritionClusterOption
from entity_resolution.models.importing import ImportCandidate

logger = logging.getLogger(__name__)

_CURRENCY = re.compile(r"[€$£]")
_WHITESPACE = re.compile(r"\s+")
_THOUSANDS_GROUPED = re.compile(r"^[-+]?[1-9]\d{0,2}(\.\d{3})+$")
_LEADING_NUMBER = re.compile(r"^[-+]?(\d+(\.\d*)?|\.\d+)")

# Formats a name must already have to be taken as its own article number
KNOWN_ARTICLE_NUMBER_FORMATS = [
    re.compile(r"^[A-Z]{2}-[0-9]{4}$"),  # XX-0000
    re.compile(r"^[0-9]{5}$"),  # 00000
    re.compile(r"^[A-Z]{3}-[0-9]{3}$"),  # XXX-000
    re.compile(r"^[A-Z]{2}[0-9]{4}$"),  # XX0000
    re.compile(r"^[0-9]{4}-[A-Z]{2}$"),  # 0000-XX
    re.compile(r"^[A-Z]{4}-[0-9]{4}$"),  # XXXX-0000
    re.compile(r"^[0-9]{4}-[A-Z]{4}$"),  # 0000-XXXX
]


def parse_german_number(value: Union[str, int, float, None]) -> float:
    """
    Parse a number written in German or plain notation.

    Numbers are returned unchanged. In text, whitespace and currency symbols are
    removed. With a decimal comma, every dot is a thousands separator ("1.234,56" ->
    1234.56). Without a comma, dots are thousands separators only when they group
    digits in threes after a non-zero lead ("1.234" -> 1234), otherwise the dot is the
    decimal point ("1.5" -> 1.5, "0.125" -> 0.125). Trailing text is ignored.

    Args:
        value: Cell value

    Returns:
        Parsed number, 0.0 when nothing numeric can be read
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if not value or not isinstance(value, str):
        return 0.0

    cleaned = _CURRENCY.sub("", _WHITESPACE.sub("", value))

    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    elif _THOUSANDS_GROUPED.match(cleaned):
        cleaned = cleaned.replace(".", "")

    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return 0.0
    return float(match.group(0))


def parse_vat_rate(value: Union[str, int, float, None], default: float = 19.0) -> float:
    """VAT rate from a cell such as "7 %", "19" or 7; empty or zero gives the default"""
    if isinstance(value, str):
        value = value.replace("%", "")
    return parse_german_number(value) or default


def split_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated cell into trimmed, non-empty items"""
    if not value:
        return []
    return [item.strip() for item in str(value).split(",") if item.strip()]


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _pattern_to_regex(pattern: str) -> re.Pattern:
    parts = []
    for char in pattern.strip():
        if char == "X":
            parts.append("[A-Za-z]")
        elif char == "0":
            parts.append("[0-9]")
        elif char.isspace():
            parts.append(r"\s*")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts))


def generate_article_number(name: str, pattern: Optional[str] = None) -> str:
    """
    Derive a supplier article number from an article name.

    With a pattern ("X" = letter, "0" = digit, whitespace optional, anything else
    literal) the first match inside the name is returned. Without a pattern the name
    itself is returned if it already has one of the known article-number formats.

    Args:
        name: Article name
        pattern: User pattern such as "XX-0000"

    Returns:
        Article number, or "" if none could be derived
    """
    if not name or not name.strip():
        return ""
    name = name.strip()

    if pattern and pattern.strip():
        match = _pattern_to_regex(pattern).search(name)
        return match.group(0) if match else ""

    for known_format in KNOWN_ARTICLE_NUMBER_FORMATS:
        if known_format.match(name):
            return name
    return ""


def _nutrients_in_header(header: str, nutrition: NutritionConfig) -> List[str]:
    lowered = header.lower()
    return [
        nutrient
        for nutrient, terms in nutrition.nutrients.items()
        if any(term.lower() in lowered for term in terms)
    ]


def extract_nutrition(
    row: Dict[str, CellValue],
    source_header: Optional[str],
    nutrition: NutritionConfig,
    cluster: Optional[NutritionClusterOption] = None,
) -> Optional[NutritionInfo]:
    """
    Read nutrition values from a row.

    When the nutrition field is mapped to the cluster, every member header feeds each
    nutrient whose term it contains. When it is mapped to a single column, that column
    is read as calories and any nutrient-looking column in the row still fills its
    nutrient.

    Args:
        row: Source row
        source_header: Header mapped to the nutrition field (None when unmapped)
        nutrition: Nutrition vocabulary
        cluster: Nutrition cluster of the mapping run

    Returns:
        NutritionInfo, or None when the nutrition field is unmapped
    """
    if not source_header:
        return None

    values: Dict[str, float] = {}

    if cluster is not None and source_header == cluster.label:
        for header in cluster.headers:
            if not row.get(header):
                continue
            for nutrient in _nutrients_in_header(header, nutrition):
                values[nutrient] = parse_german_number(row[header])
    else:
        if row.get(source_header):
            values["calories"] = parse_german_number(row[source_header])

        for nutrient, terms in nutrition.nutrients.items():
            header = next(
                (h for h in row if any(term.lower() in h.lower() for term in terms)),
                None,
            )
            if header and row.get(header):
                values[nutrient] = parse_german_number(row[header])

    return NutritionInfo(**values)


class RowTransformer:
    """
    Transforms source rows into ImportCandidates for one import run.

    Keeps the case-insensitive supplier name map of the run, so a supplier name that
    is not yet known creates exactly one new supplier however many rows use it.
    """

    def __init__(
        self,
        mapping: MappingResult,
        config: ResolutionConfig,
        suppliers: List[CanonicalSupplier],
        defaults: Optional[Dict[str, str]] = None,
        category_index: Optional[CategoryIndex] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.mapping = mapping
        self.config = config
        self.defaults = defaults or {}
        self.category_index = category_index
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))

        self.supplier_ids: Dict[str, str] = {}
        for supplier in suppliers:
            self.supplier_ids.setdefault(supplier.name.strip().lower(), supplier.id)
        self.new_suppliers: List[CanonicalSupplier] = []

    def cell(self, row: Dict[str, CellValue], field: str) -> CellValue:
        """
        Cell of the header mapped to the field ("" when unmapped or empty).

        Numbers from typed sources are returned as numbers, everything else as
        stripped text.
        """
        header = self.mapping.header_for(field)
        if not header or header not in row:
            return ""
        value = row[header]
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
        return _text(value)

    def value(self, row: Dict[str, CellValue], field: str) -> CellValue:
        """Cell of the mapped header, falling back to the user default for the field"""
        cell = self.cell(row, field)
        if cell != "":
            return cell
        return _text(self.defaults.get(field))

    def text(self, row: Dict[str, CellValue], field: str) -> str:
        """value() as text, for name-like fields"""
        return _text(self.value(row, field))

    def resolve_supplier(self, supplier_name: str) -> Optional[str]:
        """Id of the supplier with this name (ignoring case), creating it on first use"""
        if not supplier_name:
            return None

        key = supplier_name.lower()
        if key not in self.supplier_ids:
            supplier = CanonicalSupplier(id=self.id_factory(), name=supplier_name)
            self.new_suppliers.append(supplier)
            self.supplier_ids[key] = supplier.id
            logger.info("New supplier %r created with id %s", supplier_name, supplier.id)
        return self.supplier_ids[key]

    def _category(self, row: Dict[str, CellValue], name: str) -> str:
        category = self.text(row, "category")
        if category or not name or self.category_index is None:
            return category
        return suggest_for_index(name, self.category_index, self.config.categories)

    def _article_number(self, row: Dict[str, CellValue], name: str) -> Optional[str]:
        if self.mapping.header_for("supplier_article_number"):
            return _text(self.cell(row, "supplier_article_number")) or None
        # Unmapped: the default is a pattern to search for in the name
        pattern = self.defaults.get("supplier_article_number") or None
        return generate_article_number(name, pattern) or None

    def transform(self, row: Dict[str, CellValue]) -> ImportCandidate:
        """
        Transform one source row.

        Args:
            row: Header -> cell text or number

        Returns:
            ImportCandidate (check missing_fields before accepting it)
        """
        defaults = self.config.defaults

        name = self.text(row, "name")
        supplier_name = self.text(row, "supplier")
        bundle_price = parse_german_number(self.value(row, "bundle_price"))
        content_cell = self.value(row, "content")

        nutrition_field = self.config.nutrition.field
        nutrition = extract_nutrition(
            row,
            self.mapping.header_for(nutrition_field),
            self.config.nutrition,
            self.mapping.nutrition_cluster,
        )

        return ImportCandidate(
            name=name,
            supplier_id=self.resolve_supplier(supplier_name),
            supplier_name=supplier_name or None,
            supplier_article_number=self._article_number(row, name),
            category=self._category(row, name),
            bundle_unit=self.text(row, "bundle_unit") or defaults.bundle_unit,
            bundle_price=bundle_price,
            content=parse_german_number(content_cell) or defaults.content,
            content_unit=self.text(row, "content_unit") or defaults.content_unit,
            price_per_unit=parse_german_number(self.value(row, "price_per_unit")) or bundle_price,
            vat_rate=parse_vat_rate(self.value(row, "vat_rate"), defaults.vat_rate),
            allergens=split_list(self.text(row, "allergens")),
            additives=split_list(self.text(row, "additives")),
            ingredients=self.text(row, "ingredients"),
            nutrition=nutrition,
        )
