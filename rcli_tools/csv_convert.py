import csv
import enum
import json
import logging
from typing import Any, List

import yaml

log = logging.getLogger(__name__)


class OutputFormat(enum.Enum):
    JSON = "json"
    YAML = "yaml"

    @classmethod
    def parse(cls, value: str) -> "OutputFormat":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Invalid output format: {value!r}") from None

    def __str__(self) -> str:
        return self.value


def read_csv(input_path: str, delimiter: str = ",", header: bool = True) -> List[Any]:
    """Rows as dicts keyed by the header row, or as plain lists when header=False."""
    with open(input_path, newline='', encoding='utf-8') as f:
        if header:
            return [dict(row) for row in csv.DictReader(f, delimiter=delimiter)]
        return [row for row in csv.reader(f, delimiter=delimiter)]


def render(rows: List[Any], output_format: OutputFormat) -> str:
    if output_format is OutputFormat.YAML:
        return yaml.safe_dump(rows, allow_unicode=True, sort_keys=False)
    return json.dumps(rows, indent=2, ensure_ascii=False)


def process_csv(input_path: str, output_path: str, output_format: OutputFormat,
                delimiter: str = ",", header: bool = True) -> str:
    rows = read_csv(input_path, delimiter=delimiter, header=header)
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(render(rows, output_format))
    log.info("Converted %d rows from '%s' to %s '%s'", len(rows), input_path, output_format, output_path)
    return output_path
