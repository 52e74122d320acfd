from lt_law.ingest.resolver import EditionResolver, dedupe_editions, group_editions, order_editions

from conftest import FakeTarClient, make_doc, make_edition


def _resolve(client, docs, preferred=None, batch_size=25, max_rounds=6):
    grouped = group_editions(client.editions, preferred)
    return EditionResolver(client).resolve(docs, grouped, batch_size=batch_size, max_rounds=max_rounds)


def test_empty_newest_edition_falls_through_to_older_one():
    e1 = make_edition('D1', 'E1', '2024-01-01')
    e2 = make_edition('D1', 'E2', '2023-01-01')
    client = FakeTarClient([make_doc('D1')], [e1, e2], texts={'E1': '   ', 'E2': '1 straipsnis. Tekstas'})
    selected, unresolved = _resolve(client, client.documents)
    assert unresolved == []
    assert selected['D1'].edition.suvestines_id == 'E2'
    assert selected['D1'].model == 'Suvestine'
    assert selected['D1'].text == '1 straipsnis. Tekstas'
    assert client.text_batches == [['E1'], ['E2']]


def test_preferred_edition_resolves_in_first_round():
    editions = [
        make_edition('D1', 'E1', '2024-01-01'),
        make_edition('D1', 'E2', '2023-01-01'),
        make_edition('D1', 'E3', '2022-01-01'),
    ]
    client = FakeTarClient([make_doc('D1')], editions, texts={'E1': 'a', 'E2': 'b', 'E3': 'preferred text'})
    selected, _ = _resolve(client, client.documents, preferred={'D1': 'E3'})
    assert selected['D1'].edition.suvestines_id == 'E3'
    assert client.text_batches == [['E3']]


def test_texts_are_fetched_in_batches():
    docs = [make_doc(f"D{i}") for i in range(5)]
    editions = [make_edition(f"D{i}", f"E{i}", '2024-01-01') for i in range(5)]
    client = FakeTarClient(docs, editions, texts={f"E{i}": f"text {i}" for i in range(5)})
    selected, unresolved = _resolve(client, docs, batch_size=2)
    assert len(selected) == 5
    assert [len(b) for b in client.text_batches] == [2, 2, 1]


def test_documents_without_more_editions_drop_out():
    docs = [make_doc('ONE'), make_doc('TWO'), make_doc('NONE')]
    editions = [
        make_edition('ONE', 'O1', '2024-01-01'),
        make_edition('TWO', 'T1', '2024-01-01'),
        make_edition('TWO', 'T2', '2023-01-01'),
    ]
    client = FakeTarClient(docs, editions, texts={'T2': 'two'})
    selected, unresolved = _resolve(client, docs)
    assert set(selected) == {'TWO'}
    assert unresolved == ['ONE', 'NONE']
    assert client.text_batches == [['O1', 'T1'], ['T2']]


def test_max_rounds_bounds_resolution():
    editions = [make_edition('D1', f"E{i}", f"202{i}-01-01") for i in range(4)]
    client = FakeTarClient([make_doc('D1')], editions, texts={'E0': 'oldest has text'})
    selected, unresolved = _resolve(client, client.documents, max_rounds=2)
    assert selected == {}
    assert unresolved == ['D1']
    assert client.text_batches == [['E3'], ['E2']]


def test_text_row_link_is_used():
    e1 = make_edition('D1', 'E1', '2024-01-01')
    client = FakeTarClient([make_doc('D1')], [e1], texts={'E1': 'x'})
    selected, _ = _resolve(client, client.documents)
    assert selected['D1'].url == e1.nuoroda


def test_fallback_uses_document_text():
    docs = [make_doc('D1'), make_doc('D2')]
    client = FakeTarClient(docs, [], document_texts={'D1': '  1 straipsnis. Tekstas  ', 'D2': ''})
    selected = EditionResolver(client).resolve_fallback(['D1', 'D2'], batch_size=1)
    assert set(selected) == {'D1'}
    assert selected['D1'].model == 'Dokumentas'
    assert selected['D1'].text == '1 straipsnis. Tekstas'
    assert selected['D1'].url == docs[0].nuoroda
    assert selected['D1'].edition is None
    assert client.fallback_batches == [['D1'], ['D2']]


def test_order_editions_puts_current_then_newest():
    current = make_edition('D', 'CUR', '2020-01-01', valid_until=None)
    newer = make_edition('D', 'NEW', '2025-01-01')
    older = make_edition('D', 'OLD', '2010-01-01')
    assert [e.suvestines_id for e in order_editions([older, newer, current])] == ['CUR', 'NEW', 'OLD']
    assert [e.suvestines_id for e in order_editions([older, newer, current], 'OLD')] == ['OLD', 'CUR', 'NEW']
    assert [e.suvestines_id for e in order_editions([older, newer], 'MISSING')] == ['NEW', 'OLD']


def test_dedupe_keeps_latest_valid_from():
    a = make_edition('D', 'E', '2020-01-01')
    b = make_edition('D', 'E', '2021-06-01')
    kept = dedupe_editions([a, b, a])
    assert len(kept) == 1
    assert kept[0].galioja_nuo == '2021-06-01'
