# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
Validation helpers shared by every schema module.

* ``check_password_policy`` – the password complexity rule.
* ``blank_to_none``          – browsers post ``""`` for untouched optional
                               inputs; treat them as absent.
* ``validate_payload``       – run a pydantic model over an untyped record
                               and report *every* failing field at once.
"""

import re
from typing import Any, Dict, Iterable, Mapping, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from core.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

PASSWORD_SYMBOLS = "@$!%*?&#^()-_=+"
PASSWORD_MIN_LENGTH = 8

# Leading location segments FastAPI adds that carry no field information
_LOCATION_PREFIXES = {"body", "query", "path", "header"}


def check_password_policy(pw: str) -> str:
    """
    Raise ``ValueError`` if *pw* does not meet the policy, else return it.

    Policy: >= 8 chars, at least one uppercase, one lowercase, one digit and
    one symbol from ``PASSWORD_SYMBOLS``.
    """
    if len(pw) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if not re.search(r"[A-Z]", pw):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", pw):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", pw):
        raise ValueError("Password must contain at least one digit")
    if not any(ch in PASSWORD_SYMBOLS for ch in pw):
        raise ValueError(f"Password must contain at least one symbol ({PASSWORD_SYMBOLS})")
    return pw


def blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def format_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, str]:
    """
    Collapse pydantic error dicts into ``{field: message}``.

    Several errors on the same field are joined with ``"; "``.
    """
    details: Dict[str, str] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        field = ".".join(loc) or "__all__"
        msg = str(err.get("msg", "Invalid value"))
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        details[field] = f"{details[field]}; {msg}" if field in details else msg
    return details


def validate_payload(model: Type[ModelT], data: Any) -> ModelT:
    """Validate *data* against *model*; raise ``ValidationError`` on failure."""
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValidationError({"__all__": "Expected a JSON object"})
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(format_errors(exc.errors())) from exc
