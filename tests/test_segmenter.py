import pytest

from lt_law.parsing.segmenter import (
    ARTICLE,
    CHAPTER,
    clean_content,
    collect_markers,
    normalize_text,
    provision_ref,
    segment,
)


@pytest.mark.parametrize("text", ["", None, "Įsakymas be straipsnių.\nTik tekstas.", "straipsnis. be numerio"])
def test_empty_or_headingless_text_yields_nothing(text):
    result = segment(text)
    assert result.provisions == []
    assert result.definitions == []


def test_sample_law_structure(sample_law_text):
    result = segment(sample_law_text)
    refs = [p.provision_ref for p in result.provisions]
    assert refs == ['art1', 'art2', 'art3']
    assert result.provisions[0].title == '1 straipsnis. Įstatymo paskirtis'
    assert result.provisions[0].content == 'Šis įstatymas reglamentuoja asmens duomenų tvarkymą.'
    assert [p.chapter for p in result.provisions] == [None, None, 'II SKYRIUS PRIEŽIŪRA']


def test_chapter_heading_does_not_leak_into_previous_article(sample_law_text):
    result = segment(sample_law_text)
    assert 'SKYRIUS' not in result.provisions[1].content


def test_sample_law_definitions(sample_law_text):
    result = segment(sample_law_text)
    pairs = [(d.term, d.definition, d.source_provision) for d in result.definitions]
    assert pairs == [
        ('Duomenų valdytojas', 'juridinis arba fizinis asmuo, kuris tvarko duomenis.', 'art2'),
        ('Duomenų subjektas', 'fizinis asmuo, kurio duomenys tvarkomi.', 'art2'),
    ]


def test_hyphenated_inserted_article():
    text = "4 straipsnis. Pirmas\nTekstas.\n4-1 straipsnis. Įterptas\nĮterptas tekstas.\n5 straipsnis. Kitas\nDar tekstas."
    result = segment(text)
    assert [p.section for p in result.provisions] == ['4', '4-1', '5']
    assert [p.provision_ref for p in result.provisions] == ['art4', 'art4-1', 'art5']


def test_document_order_is_kept_for_non_monotonic_numbering():
    text = "2 straipsnis. B\nbe.\n1 straipsnis. A\na."
    assert [p.section for p in segment(text).provisions] == ['2', '1']


def test_title_promoted_from_first_line():
    result = segment("5 straipsnis.\nTaikymo sritis\nŠis įstatymas taikomas visiems.")
    p = result.provisions[0]
    assert p.title == '5 straipsnis. Taikymo sritis'
    assert p.content == 'Šis įstatymas taikomas visiems.'


def test_no_promotion_with_inline_title():
    result = segment("5 straipsnis. Taikymo sritis\nAntraštę primenanti eilutė\nTurinys.")
    p = result.provisions[0]
    assert p.title == '5 straipsnis. Taikymo sritis'
    assert p.content.startswith('Antraštę primenanti eilutė')


def test_no_promotion_of_numbered_item():
    result = segment("6 straipsnis.\n1. Pirmas punktas.\n2. Antras punktas.")
    p = result.provisions[0]
    assert p.title == '6 straipsnis'
    assert p.content.startswith('1. Pirmas punktas.')


def test_no_promotion_of_long_line():
    long_line = "Ž" * 181
    result = segment(f"7 straipsnis.\n{long_line}\nToliau.")
    assert result.provisions[0].title == '7 straipsnis'


def test_single_line_content_is_not_promoted_away():
    result = segment("8 straipsnis.\nVienintelė eilutė")
    assert len(result.provisions) == 1
    assert result.provisions[0].title == '8 straipsnis'
    assert result.provisions[0].content == 'Vienintelė eilutė'


def test_amendments_log_is_trimmed():
    text = (
        "1 straipsnis. Paskirtis\nTekstas.\n\n"
        "Pakeitimai:\n\n1.\nLietuvos Respublikos Seimas, Įstatymas\nNr. XII-1, 2015-01-01\n"
        "2 straipsnis. Neturi būti įtrauktas\nPakeitimo tekstas."
    )
    result = segment(text)
    assert [p.provision_ref for p in result.provisions] == ['art1']
    assert 'Pakeitimai' not in result.provisions[0].content


def test_empty_articles_are_dropped():
    text = "1 straipsnis. Tuščias\n\n\n2 straipsnis. Antras\nTurinys.\n3 straipsnis. Irgi tuščias\n"
    result = segment(text)
    assert [p.provision_ref for p in result.provisions] == ['art2']


def test_normalization_handles_crlf_nbsp_tabs_and_zero_width():
    text = "1\u00a0straipsnis.\tPaskirtis\r\nTeks\u200btas\r\n"
    result = segment(text)
    assert result.provisions[0].title == '1 straipsnis. Paskirtis'
    assert result.provisions[0].content == 'Tekstas'
    assert normalize_text("a\r\nb\rc") == "a\nb\nc"


def test_chapter_without_subtitle_when_article_follows():
    text = "1 straipsnis. A\nTekstas.\nIII SKYRIUS\n2 straipsnis. B\nKitas tekstas."
    result = segment(text)
    assert [p.chapter for p in result.provisions] == [None, 'III SKYRIUS']
    assert result.provisions[0].content == 'Tekstas.'


def test_chapter_covers_following_articles_until_next_chapter():
    text = (
        "1 straipsnis. A\na.\n"
        "II SKYRIUS\n\nANTRASIS\n"
        "2 straipsnis. B\nb.\n3 straipsnis. C\nc.\n"
        "III SKYRIUS\nTREČIASIS\n"
        "4 straipsnis. D\nd."
    )
    chapters = [p.chapter for p in segment(text).provisions]
    assert chapters == [None, 'II SKYRIUS ANTRASIS', 'II SKYRIUS ANTRASIS', 'III SKYRIUS TREČIASIS']


def test_collect_markers_is_ordered_and_typed(sample_law_text):
    body = sample_law_text[sample_law_text.index('1 straipsnis'):]
    markers = collect_markers(body)
    assert [m.kind for m in markers] == [ARTICLE, ARTICLE, CHAPTER, ARTICLE]
    offsets = [m.offset for m in markers]
    assert offsets == sorted(offsets)
    chapter = markers[2]
    assert body[chapter.offset:chapter.end] == 'II SKYRIUS\nPRIEŽIŪRA'


def test_duplicate_labels_get_unique_refs():
    text = "1 straipsnis. A\nx.\n1 straipsnis. B\ny.\n1 straipsnis. C\nz."
    refs = [p.provision_ref for p in segment(text).provisions]
    assert refs == ['art1', 'art1_2', 'art1_3']
    assert len(set(refs)) == len(refs)


def test_provision_ref_normalisation():
    assert provision_ref('12-1') == 'art12-1'
    assert provision_ref('3A') == 'art3a'
    assert provision_ref(' 7 ') == 'art7'


def test_clean_content_collapses_blank_runs():
    assert clean_content("\n  a  \n\n\n\n b\n\n") == "a\n\nb"


def test_quoted_definitions():
    text = "2 straipsnis. Sąvokos\n„Paslauga“ – veikla, teikiama už atlyginimą.\n„Teikėjas“ – asmuo, teikiantis paslaugą."
    result = segment(text)
    assert [(d.term, d.definition) for d in result.definitions] == [
        ('Paslauga', 'veikla, teikiama už atlyginimą.'),
        ('Teikėjas', 'asmuo, teikiantis paslaugą.'),
    ]


def test_definitions_only_from_trigger_provisions():
    text = "3 straipsnis. Pareigos\n1. Operatorius – privalo pranešti apie incidentą.\n2. Naudotojas – gali pateikti skundą."
    assert segment(text).definitions == []


def test_short_matches_are_discarded():
    text = "2 straipsnis. Sąvokos\n„A“ – per trumpa sąvoka.\n„Bb“ – trum\n„Cc“ – tinkama apibrėžtis."
    terms = [d.term for d in segment(text).definitions]
    assert terms == ['Cc']


def test_definitions_are_deduplicated_across_provisions():
    text = (
        "2 straipsnis. Sąvokos\n„Paslauga“ – veikla, teikiama už atlyginimą.\n"
        "3 straipsnis. Kitos sąvokos\n„paslauga“ – veikla, teikiama už atlyginimą.\n"
    )
    result = segment(text)
    assert len(result.definitions) == 1
    assert result.definitions[0].source_provision == 'art2'


def test_definitions_are_capped_and_deterministic():
    items = "\n".join(f"{i}. Sąvoka{i} – apibrėžtis numeris {i}." for i in range(1, 251))
    text = f"2 straipsnis. Pagrindinės sąvokos\n{items}"
    first = segment(text)
    second = segment(text)
    assert len(first.definitions) == 200
    assert first.definitions[0].term == 'Sąvoka1'
    assert first.definitions[-1].term == 'Sąvoka200'
    assert first == second
