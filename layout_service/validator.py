# layout_service/validator.py
import argparse
import json
import logging
import math
import sys
from collections import deque
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

from layout_service.panel_schema import PANEL_DOCUMENT

logger = logging.getLogger("layout_service")

RULE_REQUIRED = "required"
RULE_TYPE = "type"
RULE_ARITY = "arity"
RULE_UNIQUE = "unique"
RULE_PARSE = "parse"

_ARITY_ERRORS = ("too_short", "too_long")


class Violation(BaseModel):
    path: str
    rule: str
    message: str
    pydantic_type: Optional[str] = None


class ValidationResult(BaseModel):
    valid: bool
    errors: List[Violation] = Field(default_factory=list)


def format_path(loc) -> str:
    """
    (0, "layout", "parts", 1, "dimensions") style locations become
    "$[0].layout.parts[1].dimensions".
    """
    path = "$"
    for segment in loc:
        if isinstance(segment, int):
            path += f"[{segment}]"
        else:
            path += f".{segment}"
    return path


def _to_violation(error: dict) -> Violation:
    err_type = error.get("type", "")
    loc = tuple(error.get("loc", ()))
    path = format_path(loc)

    if err_type == "missing":
        field = loc[-1] if loc else "?"
        return Violation(
            path=path,
            rule=RULE_REQUIRED,
            message=f"Missing required field '{field}' at '{format_path(loc[:-1])}'.",
            pydantic_type=err_type,
        )
    if err_type in _ARITY_ERRORS:
        found = error.get("input")
        count = len(found) if isinstance(found, (list, tuple)) else "?"
        return Violation(
            path=path,
            rule=RULE_ARITY,
            message=f"'{path}' must contain exactly 2 numbers, found {count}.",
            pydantic_type=err_type,
        )
    return Violation(
        path=path,
        rule=RULE_TYPE,
        message=f"{error.get('msg', 'Invalid value')} at '{path}'.",
        pydantic_type=err_type,
    )


def _duplicate_id_violations(document: Any) -> List[Violation]:
    # ids only have to be unique among siblings of the same `parts` list
    violations: List[Violation] = []
    pending = deque([("$", document)])
    while pending:
        path, parts = pending.popleft()
        if not isinstance(parts, list):
            continue
        seen = {}
        for index, part in enumerate(parts):
            if not isinstance(part, dict):
                continue
            part_id = part.get("id")
            if isinstance(part_id, str):
                if part_id in seen:
                    violations.append(Violation(
                        path=f"{path}[{index}].id",
                        rule=RULE_UNIQUE,
                        message=f"Duplicate part id '{part_id}', already used at '{path}[{seen[part_id]}]'.",
                    ))
                else:
                    seen[part_id] = index
            layout = part.get("layout")
            if isinstance(layout, dict):
                pending.append((f"{path}[{index}].layout.parts", layout.get("parts")))
    return violations


def validate_layout_document(document: Any) -> ValidationResult:
    """
    Check an already-decoded value against the Part schema.

    Never raises and never stops at the first problem: every violation found
    anywhere in the tree is returned, in document order.
    """
    violations: List[Violation] = []
    try:
        PANEL_DOCUMENT.validate_python(document)
    except ValidationError as e:
        violations.extend(_to_violation(err) for err in e.errors(include_url=False))

    violations.extend(_duplicate_id_violations(document))
    return ValidationResult(valid=not violations, errors=violations)


def _reject_constant(name):
    raise ValueError(f"Invalid JSON constant: {name}")


def _parse_finite_float(text):
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"Number out of range: {text}")
    return value


def _parse_failure(message: str) -> ValidationResult:
    return ValidationResult(valid=False, errors=[
        Violation(path="$", rule=RULE_PARSE, message=message)
    ])


def parse_layout_body(raw) -> Tuple[Any, Optional[ValidationResult]]:
    """
    Decode a raw request body. Returns (document, None) on success and
    (None, result) with a single `parse` violation otherwise.
    """
    if raw is None or (isinstance(raw, (str, bytes)) and not raw.strip()):
        return None, _parse_failure("Request body is empty.")
    try:
        document = json.loads(
            raw,
            parse_constant=_reject_constant,
            parse_float=_parse_finite_float,
        )
    except RecursionError:
        return None, _parse_failure("Request body nesting too deep.")
    except (ValueError, TypeError) as e:
        return None, _parse_failure(f"Request body is not valid JSON: {e}")
    return document, None


def validate_layout_body(raw) -> Tuple[Any, ValidationResult]:
    document, failure = parse_layout_body(raw)
    if failure is not None:
        logger.info("Layout body could not be parsed")
        return None, failure

    result = validate_layout_document(document)
    if not result.valid:
        logger.info(f"Layout document rejected with {len(result.errors)} violation(s)")
    return document, result


def main(argv=None):
    parser = argparse.ArgumentParser(description="Validate a panel layout JSON file offline.")
    parser.add_argument("path", help="Path to a Layout Document (.json)")
    args = parser.parse_args(argv)

    try:
        with open(args.path, "rb") as f:
            raw = f.read()
    except OSError as e:
        print(f"Cannot read {args.path}: {e}")
        return 2

    _, result = validate_layout_body(raw)
    if result.valid:
        print("JSON is valid")
        return 0

    print(f"Validation errors ({len(result.errors)}):")
    for violation in result.errors:
        print(f"  {violation.path} [{violation.rule}] {violation.message}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
