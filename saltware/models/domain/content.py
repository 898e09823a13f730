"""
Content domain models - the five site collections

Storage: one table per collection (services, employees, projects,
industries, stats), every row carrying a store-assigned `id` and a
caller-supplied integer `sort_order`.

Records are always handled whole: updates replace every field, so the
models carry the complete row minus storage-only columns.
"""
import dataclasses
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Type


class CollectionKind(str, Enum):
    """Site content collections (also the table names)"""
    SERVICES = "services"
    EMPLOYEES = "employees"
    PROJECTS = "projects"
    INDUSTRIES = "industries"
    STATS = "stats"


def coerce_int(value: Any) -> int:
    """
    Convert entered text to an integer.

    Non-numeric input falls back to 0 rather than failing.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    text = str(value).strip() if value is not None else ""
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return int(number)


@dataclass
class ContentRecord:
    """
    Base for all content rows.

    Subclasses declare their columns as dataclass fields (all defaulted, so a
    bare constructor call yields a fresh draft) and the class-level metadata
    below.
    """
    kind: ClassVar[CollectionKind]
    required_fields: ClassVar[Tuple[str, ...]] = ()
    nullable_fields: ClassVar[Tuple[str, ...]] = ()
    numeric_fields: ClassVar[Tuple[str, ...]] = ("sort_order",)

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        """Editable columns (everything except the identity)"""
        return tuple(f.name for f in dataclasses.fields(cls) if f.name != "id")

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ContentRecord":
        """Build a record from a store row, ignoring storage-only columns"""
        known = {f.name for f in dataclasses.fields(cls)}
        values = {k: v for k, v in dict(row).items() if k in known}
        if values.get("id") is not None:
            values["id"] = str(values["id"])
        if "sort_order" in values:
            values["sort_order"] = coerce_int(values["sort_order"])
        return cls(**values)

    @classmethod
    def coerce(cls, name: str, value: Any) -> Any:
        """Convert a form value for column `name` to its stored type"""
        if name in cls.numeric_fields:
            return coerce_int(value)
        if name in cls.nullable_fields:
            if value is None:
                return None
            text = str(value)
            return text or None
        return "" if value is None else str(value)

    def to_row(self) -> Dict[str, Any]:
        """Row payload without the identity (the store assigns it)"""
        return {name: getattr(self, name) for name in self.field_names()}

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    def copy(self) -> "ContentRecord":
        return dataclasses.replace(self)

    def summary(self) -> Tuple[str, str]:
        """(label, sub) pair shown in list rows"""
        raise NotImplementedError


@dataclass
class Service(ContentRecord):
    """Offered service card"""
    id: Optional[str] = None
    icon: str = "Code2"
    title: str = ""
    description: str = ""
    sort_order: int = 0

    kind: ClassVar[CollectionKind] = CollectionKind.SERVICES
    required_fields: ClassVar[Tuple[str, ...]] = ("icon", "title")

    def summary(self) -> Tuple[str, str]:
        return self.title, self.description


@dataclass
class Employee(ContentRecord):
    """Team member"""
    id: Optional[str] = None
    name: str = ""
    position: str = ""
    photo_url: Optional[str] = None
    sort_order: int = 0

    kind: ClassVar[CollectionKind] = CollectionKind.EMPLOYEES
    required_fields: ClassVar[Tuple[str, ...]] = ("name", "position")
    nullable_fields: ClassVar[Tuple[str, ...]] = ("photo_url",)

    def summary(self) -> Tuple[str, str]:
        return self.name, self.position


@dataclass
class Project(ContentRecord):
    """Portfolio project"""
    id: Optional[str] = None
    title: str = ""
    description: str = ""
    image_url: Optional[str] = None
    link: Optional[str] = None
    sort_order: int = 0

    kind: ClassVar[CollectionKind] = CollectionKind.PROJECTS
    required_fields: ClassVar[Tuple[str, ...]] = ("title",)
    nullable_fields: ClassVar[Tuple[str, ...]] = ("image_url", "link")

    def summary(self) -> Tuple[str, str]:
        return self.title, self.description


@dataclass
class Industry(ContentRecord):
    """Industry served"""
    id: Optional[str] = None
    icon: str = "Building2"
    title: str = ""
    sort_order: int = 0

    kind: ClassVar[CollectionKind] = CollectionKind.INDUSTRIES
    required_fields: ClassVar[Tuple[str, ...]] = ("icon", "title")

    def summary(self) -> Tuple[str, str]:
        return self.title, f"Icon: {self.icon}"


@dataclass
class Stat(ContentRecord):
    """Headline figure (value is a display string, e.g. "50+")"""
    id: Optional[str] = None
    value: str = ""
    label: str = ""
    sort_order: int = 0

    kind: ClassVar[CollectionKind] = CollectionKind.STATS
    required_fields: ClassVar[Tuple[str, ...]] = ("value", "label")

    def summary(self) -> Tuple[str, str]:
        return self.value, self.label


RECORD_TYPES: Dict[CollectionKind, Type[ContentRecord]] = {
    CollectionKind.SERVICES: Service,
    CollectionKind.EMPLOYEES: Employee,
    CollectionKind.PROJECTS: Project,
    CollectionKind.INDUSTRIES: Industry,
    CollectionKind.STATS: Stat,
}


def record_type(kind) -> Type[ContentRecord]:
    """Look up the record class for a collection (kind or its name)"""
    return RECORD_TYPES[CollectionKind(kind)]
