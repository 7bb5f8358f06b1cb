import pytest

from app.utils.phone import to_e164


@pytest.mark.parametrize('raw, expected', [
    ('555-123-4567', '+15551234567'),
    ('(555) 123-4567', '+15551234567'),
    ('555.123.4567', '+15551234567'),
    ('15551234567', '+15551234567'),
    ('1 (555) 123-4567', '+15551234567'),
    ('+44 20 7946 0958', '+442079460958'),
])
def test_to_e164(raw, expected):
    assert to_e164(raw) == expected


def test_to_e164_already_normalized():
    assert to_e164('+15551234567') == '+15551234567'
