"""
test_api_server.py
==================

HTTP surface: import, rows, pay-window endpoints and their status codes.

Run: python -m pytest tests/test_api_server.py -v
"""

import json

import pytest
from fastapi.testclient import TestClient

import parsers.roster_parser as roster_parser
from api.api_server import app
from models.data_models import TextFragment
from parsers.text_items import RosterInputUnavailable


client = TestClient(app)


def page(page_no, rows):
    return [
        TextFragment(text=text, x=float(x), y=y, page=page_no)
        for y, words in rows
        for x, text in words
    ]


ROSTER_PAGES = [
    page(1, [
        (720.0, [(10, 'Date'), (100, 'Flight'), (130, 'Number'), (200, 'Sector'), (280, 'STD'), (320, 'STA')]),
        (700.0, [(10, '07DEC25'), (50, 'SUN'), (60, 'FLY'), (100, 'VA0916'),
                 (200, 'SYD'), (240, 'BNE'), (280, '0610'), (320, '0815')]),
        (688.0, [(60, 'LO'), (380, 'BNEO')]),
    ]),
    page(2, [
        (740.0, [(10, '08DEC25'), (50, 'MON'), (60, 'RDO'), (100, 'RTP4-Day1')]),
    ]),
]

ENVELOPE = {
    'source': 'pdf',
    'capturedAt': '2025-12-01T00:00:00+00:00',
    'fileName': 'roster.pdf',
    'duties': [
        {'startDate': '05DEC25', 'dutyCodes': ['RDO'], 'remarks': ['RTP4-Day1']},
        {'startDate': '07DEC25', 'dutyCodes': ['FLY', 'LO'], 'flights': ['VA0916'],
         'sectors': ['SYD-BNE'], 'hotels': ['BNEO']},
        {'startDate': '22DEC25', 'dutyCodes': ['TVL']},
    ],
}


@pytest.fixture
def stub_pdf(monkeypatch):
    def _install(pages=None, error=None):
        def _fragments(source):
            if error is not None:
                raise error
            yield from pages
        monkeypatch.setattr(roster_parser, 'iter_pdf_fragments', _fragments)
    return _install


def upload(name='roster.pdf', content=b'%PDF-1.4'):
    return client.post('/api/import', files={'file': (name, content, 'application/pdf')})


class TestHealth:

    def test_root(self):
        assert client.get('/').json()['status'] == 'ok'

    def test_health(self):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'


class TestImport:

    def test_import_pdf(self, stub_pdf):
        stub_pdf(ROSTER_PAGES)
        response = upload()
        assert response.status_code == 200

        body = response.json()
        assert body['status'] == 'Imported 2 duty days from roster.pdf'
        assert body['envelope']['fileName'] == 'roster.pdf'
        duties = body['envelope']['duties']
        assert [d['startDate'] for d in duties] == ['07DEC25', '08DEC25']
        assert duties[0]['sectors'] == ['SYD-BNE']
        assert duties[0]['hotels'] == ['BNEO']
        assert duties[1]['remarks'] == ['RTP4-Day1']

        diagnostics = body['diagnostics']
        assert diagnostics['page_count'] == 2
        assert diagnostics['header_found'] is True
        assert diagnostics['column_bounds'] == {'left': 196.0, 'right': 276.0}
        assert diagnostics['warnings'] == []

    def test_non_pdf_rejected(self):
        response = upload(name='roster.txt')
        assert response.status_code == 400

    def test_unreadable_pdf_is_422(self, stub_pdf):
        stub_pdf(error=RosterInputUnavailable("Could not open roster PDF: encrypted"))
        response = upload()
        assert response.status_code == 422
        assert 'encrypted' in response.json()['detail']

    def test_unexpected_failure_is_500(self, stub_pdf):
        stub_pdf(error=KeyError('boom'))
        assert upload().status_code == 500


class TestRows:

    def test_rows_bucketed_and_flagged(self):
        response = client.post('/api/rows', json={
            'envelope': ENVELOPE,
            'fortnight_start': '2025-12-07',
            'pay_date': '2025-12-24',
        })
        assert response.status_code == 200

        body = response.json()
        assert body['ok'] is True
        assert body['status'] == 'Loaded 3 duty days'
        assert body['windows']['current'] == {'start': '2025-12-07', 'end': '2025-12-20'}
        assert body['windows']['pay_delta_days'] == 0

        rows = {r['start_date']: r for r in body['rows']}
        assert rows['05DEC25']['bucket'] == 'PREV'
        assert rows['05DEC25']['flags'] == ['RDO', 'TRN']
        assert rows['07DEC25']['bucket'] == 'CURRENT'
        assert rows['07DEC25']['flags'] == ['FLY', 'LO', 'OA']
        assert rows['22DEC25']['bucket'] == ''

        summary = {s['bucket']: s for s in body['summary']}
        assert summary['CURRENT']['duties'] == 1
        assert summary['CURRENT']['flags']['OA'] == 1
        assert summary['']['flags']['TVL'] == 1

    def test_envelope_as_json_text(self):
        response = client.post('/api/rows', json={
            'envelope': json.dumps(ENVELOPE),
            'fortnight_start': '2025-12-07',
        })
        assert response.json()['ok'] is True
        assert len(response.json()['rows']) == 3

    def test_malformed_envelope_is_not_an_error(self):
        response = client.post('/api/rows', json={
            'envelope': {'nothing': 'here'},
            'fortnight_start': '2025-12-07',
        })
        assert response.status_code == 200
        body = response.json()
        assert body['ok'] is False
        assert body['status'] == "Envelope has no 'duties' array"
        assert body['rows'] == []

    def test_bad_date_is_400(self):
        response = client.post('/api/rows', json={'envelope': ENVELOPE, 'fortnight_start': '07/12/2025'})
        assert response.status_code == 400


class TestPayWindowEndpoints:

    def test_pay_windows(self):
        response = client.get('/api/pay-windows', params={'fortnight_start': '2025-12-07'})
        assert response.status_code == 200
        body = response.json()
        assert body['prev'] == {'start': '2025-11-23', 'end': '2025-12-06'}
        assert body['inferred_pay_date'] == '2025-12-24'
        assert body['pay_delta_days'] is None

    def test_pay_windows_bad_date(self):
        response = client.get('/api/pay-windows', params={'fortnight_start': 'tomorrow'})
        assert response.status_code == 400

    def test_suggest_from_pay_date(self):
        response = client.get('/api/pay-windows/suggest', params={'pay_date': '2025-12-24'})
        assert response.json() == {'fortnight_start': '2025-12-07', 'source': 'pay_date'}

    def test_suggest_keeps_existing(self):
        response = client.get('/api/pay-windows/suggest',
                              params={'pay_date': '2025-12-24', 'fortnight_start': '2025-11-30'})
        assert response.json() == {'fortnight_start': '2025-11-30', 'source': 'existing'}
