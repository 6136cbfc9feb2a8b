# file: wastewatch/report_store.py
import json
import os
import logging
from typing import List

from pydantic import ValidationError

from wastewatch.models import Report


def load_reports(input_file: str) -> List[Report] :
    """Load reports from a JSON export of the report store (read-only)."""
    if not os.path.exists(input_file) :
        logging.warning(f"Report export {input_file} not found, showing no reports")
        return []

    with open(input_file, "r", encoding = "utf-8") as f :
        data = json.load(f)

    if not isinstance(data, list) :
        raise ValueError(f"{input_file} must contain a JSON list of reports")

    reports = []
    for entry in data :
        try :
            reports.append(Report.model_validate(entry))
        except ValidationError as e :
            logging.warning(f"Skipping malformed report {entry.get('id') if isinstance(entry, dict) else entry!r}: {e}")
    logging.info(f"Loaded {len(reports)} reports from {input_file}")
    return reports
