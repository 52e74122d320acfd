"""Client for the TAR (Teisės aktų registras) open-data API.

Two models are consumed:
 - ``Dokumentas``  law-level metadata (and the raw ``tekstas_lt`` fallback text)
 - ``Suvestine``   consolidated editions, metadata and text

Queries use the register's filter DSL, passed as query-string parts:
``field='value'`` equality, ``a='x'|a='y'`` for OR, ``select(f1,f2)`` projection
and ``offset(n)`` / ``limit(n)`` pagination. Directives are zero-value keys.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence
from urllib.parse import quote as url_quote

import requests

from lt_law import config
from lt_law.errors import FetchError, PaginationLimitError
from lt_law.ingest.schemas import (
    DOCUMENT_MODEL,
    EDITION_MODEL,
    DocumentRecord,
    EditionRecord,
    EditionTextRecord,
)
from lt_law.scraper.rate_limit import RateLimiter
from lt_law.scraper.retry import run_bounded_chain

logger = logging.getLogger(__name__)

DOCUMENT_FIELDS = ['dokumento_id', 'pavadinimas', 'nuoroda', 'atv_dok_nr', 'galioj_busena', 'rusis', 'priimtas', 'isigalioja']
EDITION_FIELDS = ['dokumento_id', 'suvestines_id', 'nuoroda', 'galioja_nuo', 'galioja_iki']
TEXT_FIELD = 'tekstas_lt'

LAW_CATEGORY = 'Įstatymas'
STATUS_IN_FORCE = 'galioja'

# Same unreserved set as JavaScript's encodeURIComponent
_URI_SAFE = "-_.!~*'()"

Params = Dict[str, Optional[str]]


def quote(value: str) -> str:
    """Single-quote a filter value, doubling embedded quotes."""
    return "'" + value.replace("'", "''") + "'"


def eq_expression(field: str, value: str) -> str:
    return f"{field}={quote(value)}"


def or_expression(field: str, values: Sequence[str]) -> str:
    if not values:
        raise ValueError(f"Cannot build OR expression for empty values list: {field}")
    return '|'.join(eq_expression(field, v) for v in values)


def select_directive(fields: Iterable[str]) -> str:
    return f"select({','.join(fields)})"


def build_query(params: Params) -> str:
    parts = []
    for key, value in params.items():
        if value is None or value == '':
            parts.append(url_quote(key, safe=_URI_SAFE))
        else:
            parts.append(f"{url_quote(key, safe=_URI_SAFE)}={url_quote(value, safe=_URI_SAFE)}")
    return '&'.join(parts)


def sort_editions_newest_first(editions: Sequence[EditionRecord]) -> List[EditionRecord]:
    return sorted(editions, key=lambda e: e.galioja_nuo, reverse=True)


def pick_current_edition(editions: Sequence[EditionRecord]) -> Optional[EditionRecord]:
    """Edition in force right now, else the newest one."""
    if not editions:
        return None
    for e in editions:
        if e.is_current:
            return e
    return sort_editions_newest_first(editions)[0]


@dataclass
class _Attempt:
    status: Optional[int]
    rows: Optional[List[Dict[str, Any]]] = None
    error: Optional[Exception] = None
    # timeouts and dropped connections may succeed on a later attempt
    transient: bool = True

    @property
    def ok(self) -> bool:
        return self.rows is not None

    @property
    def retryable(self) -> bool:
        if self.error is not None:
            return self.transient
        return self.status is not None and (self.status == 429 or self.status >= 500)


def _is_success(status: int) -> bool:
    return 200 <= status < 300


class TarClient:
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        limiter: Optional[RateLimiter] = None,
        base_url: str = config.API_BASE,
        user_agent: str = config.USER_AGENT,
        timeout: float = config.REQUEST_TIMEOUT,
        max_retries: int = config.MAX_RETRIES,
        backoff_step: float = config.RETRY_BACKOFF_STEP,
        max_offset: int = config.MAX_PAGINATION_OFFSET,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.limiter = limiter or RateLimiter(config.MIN_REQUEST_INTERVAL)
        self.base_url = base_url.rstrip('/')
        self.headers = {'User-Agent': user_agent, 'Accept': 'application/json'}
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_step = backoff_step
        self.max_offset = max_offset
        self._sleep = sleep or time.sleep
        self.requests_made = 0

    def build_url(self, model: str, params: Params) -> str:
        return f"{self.base_url}/{model}/:format/json?{build_query(params)}"

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    def _get_once(self, url: str) -> _Attempt:
        self.limiter.wait()
        self.requests_made += 1
        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)
        except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
            return _Attempt(status=None, error=e)
        except requests.exceptions.RequestException as e:
            # invalid URL, redirect loops, broken chunked bodies ...
            return _Attempt(status=None, error=e, transient=False)
        status = response.status_code
        if not _is_success(status):
            return _Attempt(status=status)
        try:
            payload = response.json()
        except ValueError as e:
            return _Attempt(status=status, error=e, transient=False)
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            return _Attempt(status=status, error=ValueError(f"expected a JSON object, got {type(payload).__name__}"), transient=False)
        rows = payload.get('_data') or []
        if not isinstance(rows, list):
            return _Attempt(status=status, error=ValueError(f"expected '_data' to be a list, got {type(rows).__name__}"), transient=False)
        return _Attempt(status=status, rows=rows)

    def fetch_json(self, url: str) -> List[Dict[str, Any]]:
        def backoff(n: int, attempt: _Attempt) -> None:
            delay = (n + 1) * self.backoff_step
            reason = f"HTTP {attempt.status}" if attempt.error is None else repr(attempt.error)
            logger.warning("Request attempt %d failed (%s); retrying in %.1fs: %s", n + 1, reason, delay, url)
            self._sleep(delay)

        outcome = run_bounded_chain(
            lambda _n: self._get_once(url),
            is_done=lambda a: a.ok or not a.retryable,
            max_attempts=self.max_retries + 1,
            between=backoff,
        )
        last = outcome.value
        if last is not None and last.ok:
            return last.rows or []
        if last is not None and last.error is not None:
            raise FetchError(
                f"Request failed after {outcome.attempts} attempt(s) ({type(last.error).__name__}: {last.error}) while fetching {url}",
                status=last.status,
                url=url,
            )
        status = last.status if last is not None else None
        raise FetchError(f"HTTP {status} while fetching {url}", status=status, url=url)

    def fetch_page(self, model: str, params: Params) -> List[Dict[str, Any]]:
        return self.fetch_json(self.build_url(model, params))

    def fetch_all(self, model: str, params: Params, page_size: int = config.TEXT_PAGE_SIZE) -> List[Dict[str, Any]]:
        out: List[Dict[str, Any]] = []
        offset = 0
        while True:
            page_params: Params = dict(params)
            page_params[f"offset({offset})"] = None
            page_params[f"limit({page_size})"] = None
            rows = self.fetch_page(model, page_params)
            out.extend(rows)
            if len(rows) < page_size:
                break
            offset += page_size
            if offset > self.max_offset:
                raise PaginationLimitError(
                    f"Pagination safety stop reached for {model} at offset {offset}",
                    url=self.build_url(model, page_params),
                )
        logger.debug("Fetched %d %s rows", len(out), model)
        return out

    # ------------------------------------------------------------------
    # Dokumentas
    # ------------------------------------------------------------------
    def fetch_in_force_laws(self, page_size: int = config.METADATA_PAGE_SIZE) -> List[DocumentRecord]:
        rows = self.fetch_all(DOCUMENT_MODEL, {
            select_directive(DOCUMENT_FIELDS): None,
            'rusis': quote(LAW_CATEGORY),
            'galioj_busena': quote(STATUS_IN_FORCE),
        }, page_size)
        return [DocumentRecord.model_validate(r) for r in rows]

    def fetch_documents_by_ids(
        self,
        document_ids: Sequence[str],
        with_text: bool = False,
        page_size: int = config.TEXT_PAGE_SIZE,
    ) -> List[DocumentRecord]:
        if not document_ids:
            return []
        fields = DOCUMENT_FIELDS + ([TEXT_FIELD] if with_text else [])
        rows = self.fetch_all(DOCUMENT_MODEL, {
            select_directive(fields): None,
            or_expression('dokumento_id', list(document_ids)): None,
        }, page_size)
        return [DocumentRecord.model_validate(r) for r in rows]

    def fetch_document_record(self, document_id: str) -> Optional[DocumentRecord]:
        rows = self.fetch_page(DOCUMENT_MODEL, {
            select_directive(DOCUMENT_FIELDS): None,
            'dokumento_id': quote(document_id),
        })
        return DocumentRecord.model_validate(rows[0]) if rows else None

    # ------------------------------------------------------------------
    # Suvestine
    # ------------------------------------------------------------------
    def fetch_edition_metadata(
        self,
        document_ids: Sequence[str],
        page_size: int = config.METADATA_PAGE_SIZE,
    ) -> List[EditionRecord]:
        if not document_ids:
            return []
        rows = self.fetch_all(EDITION_MODEL, {
            select_directive(EDITION_FIELDS): None,
            or_expression('dokumento_id', list(document_ids)): None,
        }, page_size)
        return [EditionRecord.model_validate(r) for r in rows]

    def fetch_edition_records(self, document_id: str) -> List[EditionRecord]:
        return self.fetch_edition_metadata([document_id])

    def fetch_edition_texts(
        self,
        edition_ids: Sequence[str],
        page_size: int = config.TEXT_PAGE_SIZE,
    ) -> List[EditionTextRecord]:
        if not edition_ids:
            return []
        rows = self.fetch_all(EDITION_MODEL, {
            select_directive(EDITION_FIELDS + [TEXT_FIELD]): None,
            or_expression('suvestines_id', list(edition_ids)): None,
        }, page_size)
        return [EditionTextRecord.model_validate(r) for r in rows]

    def fetch_edition_text(self, document_id: str, edition_id: str) -> Optional[EditionTextRecord]:
        rows = self.fetch_page(EDITION_MODEL, {
            select_directive(EDITION_FIELDS + [TEXT_FIELD]): None,
            'dokumento_id': quote(document_id),
            'suvestines_id': quote(edition_id),
        })
        return EditionTextRecord.model_validate(rows[0]) if rows else None


__all__ = [
    'TarClient', 'quote', 'eq_expression', 'or_expression', 'select_directive',
    'build_query', 'sort_editions_newest_first', 'pick_current_edition',
]
