"""Load access policies from TOML files."""

from __future__ import annotations

import tomllib
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from .schema import PolicyDocument
from .translator import to_access_policy

if TYPE_CHECKING:
    from planaccess.domain.model import AccessPolicy

log = getLogger(__name__)


class PolicyFileError(ValueError):
    """Raised when a policy file cannot be read or does not validate."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


def _format_validation_error(error: ValidationError) -> str:
    parts: list[str] = []
    for detail in error.errors():
        location = ".".join(str(item) for item in detail["loc"]) or "<root>"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)


def load_policy_document(path: str | Path) -> PolicyDocument:
    policy_path = Path(path)
    try:
        with policy_path.open("rb") as handle:
            raw = tomllib.load(handle)
    except OSError as exc:
        raise PolicyFileError(policy_path, f"cannot read policy file ({exc.strerror})") from exc
    except tomllib.TOMLDecodeError as exc:
        raise PolicyFileError(policy_path, f"invalid TOML ({exc})") from exc

    try:
        return PolicyDocument.model_validate(raw)
    except ValidationError as exc:
        raise PolicyFileError(policy_path, _format_validation_error(exc)) from exc


def load_access_policy(path: str | Path) -> AccessPolicy:
    """Read, validate and translate the policy stored at ``path``."""

    document = load_policy_document(path)
    policy = to_access_policy(document)
    log.debug(
        "Loaded policy for broker %s with %s declaration(s) from %s",
        policy.broker_name,
        len(policy.declarations),
        path,
    )
    return policy
