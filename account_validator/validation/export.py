"""
Result export — JSON and CSV renderings of finished validations.
"""
import csv
import io
import json
from typing import Iterable, List, Union

from account_validator.models.validation_result import ValidationResult

CSV_HEADERS: List[str] = ["Number", "Registered", "Banned", "Ban Type", "Review Available", "Summary"]


def _as_list(results: Union[ValidationResult, Iterable[ValidationResult]]) -> List[ValidationResult]:
    if isinstance(results, ValidationResult):
        return [results]
    return list(results)


def export_json(results: Union[ValidationResult, Iterable[ValidationResult]], indent: int = 2) -> str:
    """Serialize one result (as an object) or many (as an array)."""
    if isinstance(results, ValidationResult):
        return json.dumps(results.to_dict(), indent=indent, ensure_ascii=False)
    return json.dumps([r.to_dict() for r in results], indent=indent, ensure_ascii=False)


def result_to_row(result: ValidationResult) -> List[str]:
    return [
        result.number,
        str(result.is_registered).lower(),
        str(result.ban.is_banned).lower(),
        result.ban.type.value,
        str(result.review.available).lower(),
        result.summary,
    ]


def export_csv(results: Union[ValidationResult, Iterable[ValidationResult]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for result in _as_list(results):
        writer.writerow(result_to_row(result))
    return buffer.getvalue()
