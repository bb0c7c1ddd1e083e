"""Tests for the CSV record parser."""

import pytest

from relationship_mapper.csv_parser import (
    infer_industry,
    parse_businesses_csv,
    parse_row,
    parse_rows,
    read_csv,
    sanitize_text,
)
from relationship_mapper.exceptions import InputError
from relationship_mapper.models import INDUSTRIES, NOT_SPECIFIED

HEADER = (
    "Name,Company / Brand Name,Your Product or Service in one sentence,Business Website,"
    "Your Ideal Client / Target Market,\"Your current need (capital, marketing, legal, tech etc.)\","
    "Contact EMAIL,Contact Phone,LinkedIn Profile URL,Fun Fact About You"
)


def full_row(**overrides):
    row = {
        'Name': 'Jane Doe',
        'Company / Brand Name': 'JAX AI Agency',
        'Your Product or Service in one sentence': 'We build AI chatbots for small firms',
        'Business Website': 'https://jaxai.example',
        'Your Ideal Client / Target Market': 'Local service businesses',
        'Your current need (capital, marketing, legal, tech etc.)': 'Marketing',
        'Contact EMAIL': 'jane@jaxai.example',
        'Contact Phone': '555-0100',
        'LinkedIn Profile URL': 'https://linkedin.com/in/jane',
        'Fun Fact About You': 'Sails on weekends',
    }
    row.update(overrides)
    return row


def test_sanitize_text_trims_and_caps():
    assert sanitize_text('  hello  ') == 'hello'
    assert sanitize_text(None) == ''
    assert sanitize_text('   ') == ''
    assert len(sanitize_text('x' * 5000)) == 1000


@pytest.mark.parametrize("description,name,expected", [
    ("Custom software for clinics", "", 'Technology'),
    ("Brand design studio", "", 'Marketing & Design'),
    ("Massage therapy", "", 'Health & Wellness'),
    ("Executive coach", "", 'Coaching & Consulting'),
    ("Commercial appraisal", "", 'Real Estate'),
    ("Handmade gift baskets", "", 'Events & Gifts'),
    ("Gourmet cookie delivery", "", 'Food & Beverage'),
    ("Freight dispatch", "", 'Logistics'),
    ("Office janitorial crews", "", 'Facilities Services'),
    ("Public mural commissions", "", 'Arts & Creative'),
    ("Bookkeeping", "Acme Ledgers", 'Professional Services'),
    ("", "", 'Professional Services'),
])
def test_infer_industry(description, name, expected):
    assert infer_industry(description, name) == expected


def test_infer_industry_first_match_wins():
    # "consulting" is listed under Technology before Coaching & Consulting
    assert infer_industry("leadership consulting", "") == 'Technology'
    # "creative" matches Marketing & Design before Events & Gifts or Arts & Creative
    assert infer_industry("creative mural painting", "") == 'Marketing & Design'


def test_infer_industry_matches_whole_words_only():
    assert infer_industry("maintenance contracts", "") == 'Professional Services'
    assert infer_industry("", "Tech Titans") == 'Technology'


def test_parse_row_populates_fields():
    business = parse_row(full_row(), 0)

    assert business.name == 'JAX AI Agency'
    assert business.contact_name == 'Jane Doe'
    assert business.contact_email == 'jane@jaxai.example'
    assert business.website == 'https://jaxai.example'
    assert business.fun_fact == 'Sails on weekends'
    assert business.current_needs == 'Marketing'
    assert business.services == business.description
    assert business.industry == 'Technology'


def test_parse_row_defaults_for_blank_fields():
    business = parse_row({'Company / Brand Name': 'Quiet Co'}, 0)

    assert business.description == NOT_SPECIFIED
    assert business.target_market == NOT_SPECIFIED
    assert business.current_needs == NOT_SPECIFIED
    assert business.contact_email == ''
    assert business.contact_phone == ''
    assert business.linkedin == ''
    assert business.industry in INDUSTRIES


def test_parse_row_name_fallbacks():
    assert parse_row({'Name': 'Solo Person'}, 0).name == 'Solo Person'
    assert parse_row({}, 4).name == 'Business 5'


def test_parse_row_trims_header_names():
    business = parse_row({'  Company / Brand Name ': 'Padded Inc'}, 0)
    assert business.name == 'Padded Inc'


def test_parse_row_caps_long_fields():
    business = parse_row(full_row(**{'Your Product or Service in one sentence': 'a' * 3000}), 0)
    assert len(business.description) == 1000


def test_ids_are_deterministic():
    first = parse_rows([full_row(), full_row(Name='X', **{'Company / Brand Name': 'Other'})])
    second = parse_rows([full_row(), full_row(Name='X', **{'Company / Brand Name': 'Other'})])

    assert [b.id for b in first] == [b.id for b in second]
    assert first[0].id != first[1].id


def test_duplicate_rows_keep_first():
    businesses = parse_rows([full_row(), full_row(**{'Contact Phone': '999'})])
    assert len(businesses) == 1
    assert businesses[0].contact_phone == '555-0100'


def test_read_csv_skips_malformed_rows(tmp_path):
    csv_file = tmp_path / "businesses.csv"
    csv_file.write_text(
        "Company / Brand Name,Contact EMAIL\n"
        "Alpha,a@example.com\n"
        "Broken,b@example.com,extra,fields\n"
        "\n"
        "Gamma,g@example.com\n",
        encoding='utf-8',
    )

    result = read_csv(csv_file)

    assert result.skipped == 1
    assert [row['Company / Brand Name'] for row in result.rows] == ['Alpha', 'Gamma']


def test_parse_businesses_csv(tmp_path):
    csv_file = tmp_path / "businesses.csv"
    csv_file.write_text(
        HEADER + "\n"
        'Jane,Fresh Cookies,"Gourmet cookie catering",,Offices,Capital,jane@c.example,,,\n'
        'Bob,Haul Co,"Freight logistics",,Retailers,Tech,bob@h.example,,,\n',
        encoding='utf-8',
    )

    businesses = parse_businesses_csv(csv_file)

    assert [b.name for b in businesses] == ['Fresh Cookies', 'Haul Co']
    assert [b.industry for b in businesses] == ['Food & Beverage', 'Logistics']
    assert businesses[0].website == ''


def test_missing_csv_raises_input_error(tmp_path):
    with pytest.raises(InputError):
        read_csv(tmp_path / "nope.csv")


def test_empty_csv_yields_no_rows(tmp_path):
    csv_file = tmp_path / "empty.csv"
    csv_file.write_text("", encoding='utf-8')
    assert read_csv(csv_file).rows == []
