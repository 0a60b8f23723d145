"""
Load TLE records from a list of files and URLs and push them into the store.

Purpose
-------
The source list is a text file with one location per line. Each location is
read as a local file unless it looks like a URL; if the file cannot be opened
it is handed to the fetcher anyway. Every parsed record is merged by catalog
number (last one wins) and upserted.

A bad location never stops the update: it is reported and skipped.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import requests

from satnow import config
from satnow.errors import FetchError, SourceError
from satnow.tle import Diagnostic, OrbitalRecord, parse_bytes

logger = logging.getLogger(__name__)


@dataclass
class UpdateReport:
    records: Dict[int, OrbitalRecord] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    stored: int = 0


def fetch_url(url, timeout=config.FETCH_TIMEOUT):
    try:
        r = requests.get(url, timeout=timeout, headers={"User-Agent": config.USER_AGENT})
        r.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"{url}: {e}") from e
    return r.content


def looks_remote(location):
    return config.URL_SCHEME_SEPARATOR in location


def read_source_list(path) -> List[Tuple[int, str]]:
    entries = []
    with open(path, encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            location = line.split("#", 1)[0].strip()
            if location:
                entries.append((line_no, location))
    return entries


def load_location(location, fetch=fetch_url) -> bytes:
    if not looks_remote(location):
        try:
            with open(location, "rb") as f:
                return f.read()
        except OSError as e:
            logger.debug("cannot open %s as a file (%s), trying the fetcher", location, e)

    logger.info("[+] Downloading contents from %s", location)
    try:
        return fetch(location)
    except FetchError as e:
        raise SourceError(f"cannot read or fetch '{location}': {e}") from e


def collect_records(entries, source_name, fetch=fetch_url) -> UpdateReport:
    report = UpdateReport()
    for line_no, location in entries:
        logger.info("[+] Loading TLEs from '%s'", location)
        try:
            data = load_location(location, fetch)
        except SourceError as e:
            diag = Diagnostic(source_name, line_no, f"unknown entry '{location}' ({e})")
            report.diagnostics.append(diag)
            logger.warning("[-] %s", diag)
            continue

        records, diagnostics = parse_bytes(data, location)
        report.diagnostics.extend(diagnostics)
        for record in records:
            report.records[record.catalog_id] = record
    return report


def update(source_file, store, fetch=fetch_url, verbose=False) -> UpdateReport:
    """Refresh the store from every location listed in source_file."""
    try:
        entries = read_source_list(source_file)
    except (OSError, UnicodeDecodeError) as e:
        diag = Diagnostic(str(source_file), None, f"cannot read source list: {e}")
        logger.warning("[-] %s", diag)
        return UpdateReport(diagnostics=[diag])

    report = collect_records(entries, str(source_file), fetch)
    records = list(report.records.values())
    report.stored = store.upsert(records)

    if verbose:
        for count, record in enumerate(records, start=1):
            logger.info("[+] Refreshing [%d/%d]: %d (%s)", count, len(records), record.catalog_id, record.name)
    logger.info("[+] Stored %d records from %s", report.stored, source_file)
    return report
