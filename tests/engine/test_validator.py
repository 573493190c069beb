from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import httpx

from conftest import text_response
from fuzzgen.engine import Fetcher, SourceValidator

GOOD = "https://lists.example/good.txt"
MISSING = "https://lists.example/missing.txt"
DOWN = "https://down.example/list.txt"
ALSO_GOOD = "https://mirror.example/list.txt"


def _refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("refused", request=request)


def test_validator_keeps_only_reachable_sources(sample_global_config, mock_client) -> None:
    client, transport = mock_client(
        {
            GOOD: text_response("a\n"),
            MISSING: text_response("", status_code=404),
            DOWN: _refuse,
            ALSO_GOOD: text_response("b\n"),
        }
    )
    with ThreadPoolExecutor(max_workers=4) as executor:
        validator = SourceValidator(Fetcher(sample_global_config, client=client), executor)
        report = validator.validate([GOOD, MISSING, DOWN, ALSO_GOOD, GOOD])

    assert report.valid == [GOOD, ALSO_GOOD]
    assert report.rejected[MISSING] == "status 404"
    assert "ConnectError" in report.rejected[DOWN]
    assert transport.methods_for(GOOD) == ["HEAD"]


def test_validator_empty_result_is_not_an_error(sample_global_config, mock_client) -> None:
    client, _ = mock_client({})
    with ThreadPoolExecutor(max_workers=2) as executor:
        validator = SourceValidator(Fetcher(sample_global_config, client=client), executor)
        report = validator.validate([MISSING, DOWN])
    assert report.valid == []
    assert set(report.rejected) == {MISSING, DOWN}


def test_validator_rejects_malformed_url_without_aborting(sample_global_config, mock_client) -> None:
    malformed = "http://[::1/words.txt"
    client, _ = mock_client({GOOD: text_response("a\n")})
    with ThreadPoolExecutor(max_workers=2) as executor:
        validator = SourceValidator(Fetcher(sample_global_config, client=client), executor)
        report = validator.validate([malformed, GOOD])
    assert report.valid == [GOOD]
    assert "InvalidURL" in report.rejected[malformed]
