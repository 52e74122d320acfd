import os
import sys

# Ensure the `src/` directory is on sys.path so we can import `lt_law` package
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_DIR = os.path.join(PROJECT_ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

import pytest  # noqa: E402

from lt_law.ingest.schemas import DocumentRecord, EditionRecord, EditionTextRecord  # noqa: E402


class FakeClock:
    """Manual clock; sleeping advances time instead of blocking."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeResponse:
    def __init__(self, status_code=200, payload=None, json_error=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self._json_error = json_error

    def json(self):
        if self._json_error is not None:
            raise self._json_error
        return self._payload


class FakeSession:
    """Replays queued responses (or exceptions) and records requested URLs."""

    def __init__(self, responses=None, handler=None):
        self.responses = list(responses or [])
        self.handler = handler
        self.urls = []

    def get(self, url, headers=None, timeout=None):
        self.urls.append(url)
        if self.handler is not None:
            return self.handler(url)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeTarClient:
    """In-memory stand-in for TarClient used by resolver/orchestrator tests."""

    def __init__(self, documents=(), editions=(), texts=None, document_texts=None):
        self.documents = list(documents)
        self.editions = list(editions)
        self.texts = dict(texts or {})
        self.document_texts = dict(document_texts or {})
        self.text_batches = []
        self.fallback_batches = []
        self.metadata_batches = []

    def fetch_in_force_laws(self):
        return list(self.documents)

    def fetch_documents_by_ids(self, ids, with_text=False):
        if with_text:
            self.fallback_batches.append(list(ids))
        out = []
        for d in self.documents:
            if d.dokumento_id in ids:
                text = self.document_texts.get(d.dokumento_id) if with_text else None
                out.append(d.model_copy(update={'tekstas_lt': text}))
        return out

    def fetch_edition_metadata(self, ids):
        self.metadata_batches.append(list(ids))
        return [e for e in self.editions if e.dokumento_id in ids]

    def fetch_edition_texts(self, edition_ids):
        self.text_batches.append(list(edition_ids))
        out = []
        for e in self.editions:
            if e.suvestines_id in edition_ids:
                out.append(EditionTextRecord(**e.model_dump(), tekstas_lt=self.texts.get(e.suvestines_id)))
        return out


def make_doc(doc_id, **kw):
    data = {
        'dokumento_id': doc_id,
        'pavadinimas': f"Įstatymas {doc_id}",
        'nuoroda': f"https://e-tar.lt/{doc_id}",
        'rusis': 'Įstatymas',
    }
    data.update(kw)
    return DocumentRecord(**data)


def make_edition(doc_id, edition_id, valid_from, valid_until='2099-01-01'):
    return EditionRecord(
        dokumento_id=doc_id,
        suvestines_id=edition_id,
        nuoroda=f"https://e-tar.lt/{doc_id}/{edition_id}",
        galioja_nuo=valid_from,
        galioja_iki=valid_until,
    )


SAMPLE_LAW = """LIETUVOS RESPUBLIKOS
ASMENS DUOMENŲ TEISINĖS APSAUGOS
ĮSTATYMAS

1 straipsnis. Įstatymo paskirtis
Šis įstatymas reglamentuoja asmens duomenų tvarkymą.

2 straipsnis. Pagrindinės šiame įstatyme vartojamos sąvokos
1. Duomenų valdytojas – juridinis arba fizinis asmuo, kuris tvarko duomenis.
2. Duomenų subjektas – fizinis asmuo, kurio duomenys tvarkomi.

II SKYRIUS
PRIEŽIŪRA

3 straipsnis. Priežiūros institucija
Priežiūrą atlieka Valstybinė duomenų apsaugos inspekcija.
"""


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample_law_text():
    return SAMPLE_LAW
