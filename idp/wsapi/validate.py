from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Sequence

Validator = Callable[[Mapping[str, Any]], Optional[str]]


def validator(args: Sequence[str]) -> Validator:
    """Build a check that every name in `args` is present (and non-blank) in the request params."""
    required = tuple(args)

    def _validate(params: Mapping[str, Any]) -> Optional[str]:
        for name in required:
            value = params.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                return f"missing '{name}' argument"
        return None

    return _validate
