from __future__ import annotations
import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional

from .utils import norm_text

IDENTITY_NAME = "name"
IDENTITY_EMAIL = "email"


def _roles(values: Iterable[str]) -> FrozenSet[str]:
    return frozenset(r for r in (norm_text(v) for v in values) if r)


@dataclass(frozen=True)
class SchemaVariant:
    """
    Вариант структуры выгрузки: где лежат имя/роль/email, что считается
    идентичностью человека и какие роли засчитываются как присутствие.
    Позиции колонок - 0-based. Для named_columns позиции берутся из строки-заголовка.
    """
    key: str
    label: str
    identity: str = IDENTITY_NAME
    qualifying_roles: FrozenSet[str] = field(default_factory=frozenset)

    name_col: Optional[int] = 0
    role_col: Optional[int] = 6
    email_col: Optional[int] = None

    named_columns: bool = False
    name_header: str = "Name"
    role_header: str = "Role"
    email_header: str = "Email"

    # якорь секции участников
    header_name_token: str = "Name"
    header_role_token: str = "Role"

    require_email: bool = False
    reject_unverified: bool = False

    def with_roles(self, roles: Iterable[str]) -> "SchemaVariant":
        return dataclasses.replace(self, qualifying_roles=_roles(roles))


# Выгрузка Teams: Name | First Join | Last Leave | In-Meeting Duration | Email | Participant ID (UPN) | Role
PRESENTERS = SchemaVariant(
    key="presenters",
    label="Докладчики/организаторы (по имени)",
    identity=IDENTITY_NAME,
    qualifying_roles=_roles(["presenter", "organizer"]),
    name_col=0,
    role_col=6,
)

PRESENTERS_BY_EMAIL = SchemaVariant(
    key="presenters_by_email",
    label="Докладчики/организаторы (по email)",
    identity=IDENTITY_EMAIL,
    qualifying_roles=_roles(["presenter", "organizer"]),
    name_col=0,
    role_col=6,
    email_col=4,
    require_email=True,
    reject_unverified=True,
)

ATTENDEES = SchemaVariant(
    key="attendees",
    label="Участники (колонки Name/Role)",
    identity=IDENTITY_NAME,
    qualifying_roles=_roles(["attendee"]),
    name_col=None,
    role_col=None,
    named_columns=True,
)

BUILTIN_VARIANTS: Dict[str, SchemaVariant] = {v.key: v for v in (PRESENTERS, PRESENTERS_BY_EMAIL, ATTENDEES)}

# короткие имена A/B/C
VARIANT_ALIASES = {"a": "presenters", "b": "presenters_by_email", "c": "attendees"}


def qualifying_roles(variant: SchemaVariant) -> FrozenSet[str]:
    return variant.qualifying_roles


def _variant_from_rules(key: str, raw: Dict[str, Any], variants: Dict[str, SchemaVariant]) -> SchemaVariant:
    base_key = str(raw.get("base", key))
    base = variants.get(base_key) or variants.get(VARIANT_ALIASES.get(base_key.lower(), ""), PRESENTERS)

    known = {f.name for f in dataclasses.fields(SchemaVariant)}
    kw: Dict[str, Any] = {k: v for k, v in raw.items() if k in known}
    kw["key"] = key
    if "qualifying_roles" in kw:
        kw["qualifying_roles"] = _roles(kw["qualifying_roles"])
    for col in ("name_col", "role_col", "email_col"):
        if col in kw and kw[col] is not None:
            kw[col] = int(kw[col])
    if "identity" in kw and kw["identity"] not in (IDENTITY_NAME, IDENTITY_EMAIL):
        raise ValueError(f"Вариант {key!r}: identity должен быть 'name' или 'email'")

    return dataclasses.replace(base, **kw)


def load_variants(rules: Optional[Dict[str, Any]] = None) -> Dict[str, SchemaVariant]:
    """
    Встроенные варианты + переопределения из rules.json:
      {"attendance": {"variants": {"presenters": {"role_col": 5}, "my": {"base": "attendees", ...}}}}
    """
    variants = dict(BUILTIN_VARIANTS)
    raw_variants = ((rules or {}).get("attendance") or {}).get("variants") or {}
    for key, raw in raw_variants.items():
        if not isinstance(raw, dict):
            continue
        variants[key] = _variant_from_rules(key, raw, variants)
    return variants


def get_variant(key: str, variants: Optional[Dict[str, SchemaVariant]] = None) -> SchemaVariant:
    variants = variants or BUILTIN_VARIANTS
    if key in variants:
        return variants[key]
    alias = VARIANT_ALIASES.get(str(key).lower())
    if alias and alias in variants:
        return variants[alias]
    raise ValueError(f"Неизвестный вариант выгрузки: {key!r} (доступны: {', '.join(variants)})")


@dataclass(frozen=True)
class PipelineConfig:
    # Все параметры разбора задаются явно при вызове
    variant: SchemaVariant = PRESENTERS
    encoding: str = "utf-16le"
    delimiter: str = "\t"
    quote: Optional[str] = '"'
    trim: bool = True
    strict_header: bool = False


_PIPELINE_FIELDS = ("encoding", "delimiter", "quote", "trim", "strict_header")


def load_config(rules: Optional[Dict[str, Any]] = None, variant: Optional[str] = None, **overrides: Any) -> PipelineConfig:
    # Порядок: значения по умолчанию -> rules.json ("attendance.pipeline") -> явные аргументы
    section = (rules or {}).get("attendance") or {}
    pipeline = section.get("pipeline") or {}
    variants = load_variants(rules)

    kw: Dict[str, Any] = {k: pipeline[k] for k in _PIPELINE_FIELDS if k in pipeline}
    kw.update({k: v for k, v in overrides.items() if k in _PIPELINE_FIELDS and v is not None})

    variant_key = variant or pipeline.get("variant") or PRESENTERS.key
    kw["variant"] = get_variant(variant_key, variants)
    return PipelineConfig(**kw)
