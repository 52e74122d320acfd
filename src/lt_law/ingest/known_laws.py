"""Curated laws with pinned identifiers, English metadata and preferred editions.

``sample`` runs ingest exactly these laws; ``full`` runs still use the table
to pin identifiers and preferred editions for the laws it covers.
"""
from __future__ import annotations

from typing import Dict, List

from lt_law.errors import ConfigurationError
from lt_law.ingest.schemas import KnownLaw

KNOWN_LAWS: List[KnownLaw] = [
    KnownLaw(
        file='01-personal-data-protection.json',
        id='lt-pdpa-i1374',
        short_name='ADTAĮ',
        title_en='Law on Legal Protection of Personal Data',
        description='Lithuanian framework law on personal data protection and data-subject rights in national legal context.',
        document_id='TAR.5368B592234C',
        preferred_edition_id='yKQDfQUMHT',
    ),
    KnownLaw(
        file='02-cyber-security.json',
        id='lt-cybersec-xii1428',
        short_name='Kibernetinio saugumo įstatymas',
        title_en='Cybersecurity Law',
        description='Sets the national cybersecurity framework, including institutional roles, obligations, and incident handling duties.',
        document_id='5468a25089ef11e4a98a9f2247652cf4',
        preferred_edition_id='bjhGPyIkxw',
    ),
    KnownLaw(
        file='03-electronic-communications.json',
        id='lt-ecomm-ix2135',
        short_name='ERĮ',
        title_en='Law on Electronic Communications',
        description='Regulates electronic communications networks and services, including operator obligations and user protections.',
        document_id='TAR.82D8168D3049',
        preferred_edition_id='nnraxghcVJ',
    ),
    KnownLaw(
        file='04-information-society-services.json',
        id='lt-iss-x614',
        short_name='IVPĮ',
        title_en='Law on Information Society Services',
        description='Defines legal requirements for information society services and intermediary service provider responsibilities.',
        document_id='TAR.8A719A97956F',
        preferred_edition_id='eszgoxyWad',
    ),
    KnownLaw(
        file='05-right-to-information.json',
        id='lt-rti-viii1524',
        short_name='TGIDPNĮ',
        title_en='Law on the Right to Obtain Information and Re-use Data',
        description='Governs access to information held by public bodies and the re-use of public sector data.',
        document_id='TAR.FA13E28615F6',
        preferred_edition_id='HIgGrRVEfx',
    ),
    KnownLaw(
        file='06-electronic-identification.json',
        id='lt-eidas-xiii1120',
        short_name='eIDAS įstatymas',
        title_en='Law on Electronic Identification and Trust Services for Electronic Transactions',
        description='Provides national rules for electronic identification and trust services in electronic transactions.',
        document_id='88ad61b052c111e884cbc4327e55f3ca',
        preferred_edition_id='QQZOtRRnEm',
    ),
    KnownLaw(
        file='07-state-information-resources.json',
        id='lt-sir-xi1807',
        short_name='VIIVĮ',
        title_en='Law on the Management of State Information Resources',
        description='Establishes governance and management requirements for state information resources and information systems.',
        document_id='TAR.85C510BA700A',
        preferred_edition_id='bhspVpLFPO',
    ),
    KnownLaw(
        file='08-criminal-code.json',
        id='lt-cc-viii1968',
        short_name='BK',
        title_en='Criminal Code',
        description='Contains criminal law provisions, including offenses relevant to information systems, data, and cybersecurity.',
        document_id='TAR.2B866DFF7D43',
        # latest two editions expose empty text upstream
        preferred_edition_id='kdXNfHZbYx',
    ),
    KnownLaw(
        file='09-health-data-reuse.json',
        id='lt-health-data-xiv789',
        short_name='PSDNĮ',
        title_en='Law on Re-use of Health Data',
        description='Regulates secondary use of health data, including access conditions, governance, and safeguards.',
        document_id='0457ba8067e611eca9ac839120d251c4',
        preferred_edition_id='zjELZwRAeE',
    ),
    KnownLaw(
        file='10-national-security-objects.json',
        id='lt-ns-ix1132',
        short_name='NSUĮ',
        title_en='Law on Protection of Objects Important for Ensuring National Security',
        description='Sets legal protections and control mechanisms for facilities and assets important to national security.',
        document_id='TAR.57E0E8B29108',
        preferred_edition_id='IDenoFjHHS',
    ),
]


def index_known_laws(laws: List[KnownLaw]) -> Dict[str, KnownLaw]:
    """Map upstream document id -> KnownLaw, rejecting duplicate pins."""
    by_document: Dict[str, KnownLaw] = {}
    ids: Dict[str, str] = {}
    files: Dict[str, str] = {}
    for law in laws:
        if law.id in ids:
            raise ConfigurationError(f"Duplicate pinned identifier {law.id!r} for {ids[law.id]} and {law.document_id}")
        if law.file in files:
            raise ConfigurationError(f"Duplicate seed file {law.file!r} for {files[law.file]} and {law.document_id}")
        if law.document_id in by_document:
            raise ConfigurationError(f"Document {law.document_id} is pinned twice")
        ids[law.id] = law.document_id
        files[law.file] = law.document_id
        by_document[law.document_id] = law
    return by_document


__all__ = ['KNOWN_LAWS', 'index_known_laws']
