"""Canonical schemas for statute ingestion.

Upstream records keep the field names the TAR open-data API returns
(``dokumento_id``, ``suvestines_id``, ``galioja_nuo`` ...). Parsed and output
records use the corpus naming consumed by the lookup layer.
"""
from __future__ import annotations
from pydantic import BaseModel, ConfigDict
from typing import List, Literal, Optional

DOCUMENT_MODEL = 'Dokumentas'
EDITION_MODEL = 'Suvestine'

SourceModel = Literal['Dokumentas', 'Suvestine']
LawStatus = Literal['in_force', 'amended', 'repealed', 'not_yet_in_force']


class _Upstream(BaseModel):
    # the API adds bookkeeping keys (_id, _revision ...) we never use
    model_config = ConfigDict(extra='ignore')


class DocumentRecord(_Upstream):
    dokumento_id: str
    pavadinimas: str = ''
    nuoroda: str = ''
    atv_dok_nr: Optional[str] = None
    galioj_busena: Optional[str] = None
    rusis: Optional[str] = None
    priimtas: Optional[str] = None
    isigalioja: Optional[str] = None
    tekstas_lt: Optional[str] = None


class EditionRecord(_Upstream):
    dokumento_id: str
    suvestines_id: str
    nuoroda: str = ''
    galioja_nuo: str = ''
    galioja_iki: Optional[str] = None

    @property
    def is_current(self) -> bool:
        return self.galioja_iki is None


class EditionTextRecord(EditionRecord):
    tekstas_lt: Optional[str] = None


class SelectedSource(BaseModel):
    model: SourceModel
    text: str
    url: str
    edition: Optional[EditionRecord] = None


class ParsedProvision(BaseModel):
    provision_ref: str
    chapter: Optional[str] = None
    section: str
    title: str
    content: str


class ParsedDefinition(BaseModel):
    term: str
    definition: str
    source_provision: Optional[str] = None


class ParseResult(BaseModel):
    provisions: List[ParsedProvision] = []
    definitions: List[ParsedDefinition] = []


class KnownLaw(BaseModel):
    file: str
    id: str
    short_name: str
    title_en: str
    description: str
    document_id: str
    preferred_edition_id: Optional[str] = None


class SeedRecord(BaseModel):
    id: str
    type: Literal['statute'] = 'statute'
    title: str
    title_en: Optional[str] = None
    short_name: Optional[str] = None
    status: LawStatus
    issued_date: Optional[str] = None
    in_force_date: Optional[str] = None
    url: str
    description: Optional[str] = None
    provisions: List[ParsedProvision]
    definitions: List[ParsedDefinition]


class SourceRecord(BaseModel):
    document_id: str
    law_id: str
    atv_dok_nr: Optional[str] = None
    title: str
    source_model: SourceModel
    selected_suvestines_id: Optional[str] = None
    selected_galioja_nuo: Optional[str] = None
    selected_galioja_iki: Optional[str] = None
    source_url: str
    raw_text_length: int
    provision_count: int
    definition_count: int


__all__ = [
    'DOCUMENT_MODEL', 'EDITION_MODEL', 'SourceModel', 'LawStatus',
    'DocumentRecord', 'EditionRecord', 'EditionTextRecord', 'SelectedSource',
    'ParsedProvision', 'ParsedDefinition', 'ParseResult', 'KnownLaw',
    'SeedRecord', 'SourceRecord',
]
