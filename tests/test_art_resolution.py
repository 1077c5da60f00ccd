"""
Tests for single-game art resolution and the status machine
"""
import pytest
from unittest.mock import MagicMock

from exceptions import GameNotFoundException
from services.art_resolution import (
    ArtResolver,
    ResolutionOutcome,
    ResolutionStatusMachine,
    REASON_SEARCH_FAILED,
    REASON_THING_FAILED,
    REASON_UNEXPECTED,
)
from services.catalog_matching import CandidateMatch
from services.catalog_xml import CatalogImages

from conftest import FIXED_NOW, FakeGameRepository

RESOLVED = {
    "catalog_id": 13,
    "image_url": "https://img/catan.jpg",
    "thumbnail_url": "https://img/catan_t.jpg",
    "image_source": "bgg",
    "resolution_status": "ok",
}


@pytest.fixture
def resolved_repository():
    return FakeGameRepository([{"id": 1, "name": "Catan", **RESOLVED}])


@pytest.fixture
def client():
    client = MagicMock()
    client.search.return_value = [CandidateMatch(13, "Catan", 1995)]
    client.fetch_details.return_value = CatalogImages(
        image="https://img/catan.jpg", thumbnail="https://img/catan_t.jpg"
    )
    return client


def make_resolver(config, repository, client, clock):
    return ArtResolver(
        config,
        repository,
        client=client,
        status_machine=ResolutionStatusMachine(repository, config.source_name, clock=clock),
    )


class TestResolutionStatusMachine:
    """Each outcome writes a fixed set of fields"""

    def test_matched_with_image_sets_everything(self, fake_repository, fixed_clock):
        machine = ResolutionStatusMachine(fake_repository, "bgg", clock=fixed_clock)

        outcome = machine.mark_matched(1, 13, CatalogImages("https://img/a.jpg", "https://img/a_t.jpg"))

        assert outcome == ResolutionOutcome("ok", 13, "https://img/a.jpg", "https://img/a_t.jpg")
        game = fake_repository.games[1]
        assert game.catalog_id == 13
        assert game.image_url == "https://img/a.jpg"
        assert game.thumbnail_url == "https://img/a_t.jpg"
        assert game.image_source == "bgg"
        assert game.resolution_status == "ok"
        assert game.status_updated_at == FIXED_NOW

    def test_matched_without_image_keeps_catalog_id(self, resolved_repository, fixed_clock):
        machine = ResolutionStatusMachine(resolved_repository, "bgg", clock=fixed_clock)

        outcome = machine.mark_matched(1, 7, CatalogImages(image=None, thumbnail="https://img/t.jpg"))

        assert outcome.status == "missing"
        assert outcome.catalog_id == 7
        game = resolved_repository.games[1]
        assert game.catalog_id == 7
        assert game.resolution_status == "missing"
        assert game.image_url is None
        assert game.thumbnail_url is None
        assert game.image_source is None

    @pytest.mark.parametrize("method,status", [
        ("mark_disabled", "disabled"),
        ("mark_missing", "missing"),
        ("mark_ambiguous", "ambiguous"),
    ])
    def test_clearing_outcomes(self, resolved_repository, fixed_clock, method, status):
        machine = ResolutionStatusMachine(resolved_repository, "bgg", clock=fixed_clock)

        outcome = getattr(machine, method)(1)

        assert outcome == ResolutionOutcome(status)
        game = resolved_repository.games[1]
        assert game.resolution_status == status
        assert game.catalog_id is None
        assert game.image_url is None
        assert game.thumbnail_url is None
        assert game.image_source is None
        assert game.status_updated_at == FIXED_NOW

    def test_error_keeps_last_known_good_art(self, resolved_repository, fixed_clock):
        machine = ResolutionStatusMachine(resolved_repository, "bgg", clock=fixed_clock)

        outcome = machine.mark_error(1, reason="boom")

        assert outcome == ResolutionOutcome("error", reason="boom")
        assert resolved_repository.writes == [
            (1, {"resolution_status": "error", "status_updated_at": FIXED_NOW})
        ]
        game = resolved_repository.games[1]
        assert game.catalog_id == 13
        assert game.image_url == "https://img/catan.jpg"

    def test_repeat_status_still_stamps_time(self, fake_repository):
        times = iter(["t1", "t2"])
        machine = ResolutionStatusMachine(fake_repository, "bgg", clock=lambda: next(times))

        machine.mark_missing(1)
        machine.mark_missing(1)

        assert [w[1]["status_updated_at"] for w in fake_repository.writes] == ["t1", "t2"]


class TestArtResolver:
    """Tests for ArtResolver.resolve"""

    def test_disabled_makes_no_network_calls(self, disabled_config, resolved_repository, client, fixed_clock):
        resolver = make_resolver(disabled_config, resolved_repository, client, fixed_clock)

        outcome = resolver.resolve(1)

        assert outcome.status == "disabled"
        client.search.assert_not_called()
        client.fetch_details.assert_not_called()
        assert resolved_repository.games[1].image_url is None
        assert resolved_repository.games[1].resolution_status == "disabled"

    def test_happy_path(self, catalog_config, fake_repository, client, fixed_clock):
        resolver = make_resolver(catalog_config, fake_repository, client, fixed_clock)

        outcome = resolver.resolve(1)

        assert outcome == ResolutionOutcome("ok", 13, "https://img/catan.jpg", "https://img/catan_t.jpg")
        client.search.assert_called_once_with("Catan")
        client.fetch_details.assert_called_once_with(13)
        assert fake_repository.games[1].image_source == "bgg"

    def test_name_override_is_used_for_search_and_match(self, catalog_config, fake_repository, client, fixed_clock):
        client.search.return_value = [
            CandidateMatch(50, "Catan: Cities & Knights", 1998),
            CandidateMatch(51, "Catan", 1995),
        ]
        resolver = make_resolver(catalog_config, fake_repository, client, fixed_clock)

        outcome = resolver.resolve(1, name_override="Catan: Cities & Knights")

        client.search.assert_called_once_with("Catan: Cities & Knights")
        client.fetch_details.assert_called_once_with(50)
        assert outcome.catalog_id == 50
        assert fake_repository.games[1].name == "Catan"

    def test_search_failure_only_touches_status(self, catalog_config, resolved_repository, client, fixed_clock):
        client.search.return_value = None
        resolver = make_resolver(catalog_config, resolved_repository, client, fixed_clock)

        outcome = resolver.resolve(1)

        assert outcome == ResolutionOutcome("error", reason=REASON_SEARCH_FAILED)
        client.fetch_details.assert_not_called()
        game = resolved_repository.games[1]
        assert game.resolution_status == "error"
        assert game.status_updated_at == FIXED_NOW
        assert game.catalog_id == 13
        assert game.image_url == "https://img/catan.jpg"
        assert game.image_source == "bgg"

    def test_no_results_is_missing(self, catalog_config, resolved_repository, client, fixed_clock):
        client.search.return_value = []
        resolver = make_resolver(catalog_config, resolved_repository, client, fixed_clock)

        assert resolver.resolve(1).status == "missing"
        assert resolved_repository.games[1].catalog_id is None
        assert resolved_repository.games[1].image_url is None

    def test_ambiguous_clears_previous_art(self, catalog_config, resolved_repository, client, fixed_clock):
        client.search.return_value = [CandidateMatch(3, "Catan Jr.", None), CandidateMatch(4, "Catan Dice", None)]
        resolver = make_resolver(catalog_config, resolved_repository, client, fixed_clock)

        assert resolver.resolve(1).status == "ambiguous"
        client.fetch_details.assert_not_called()
        assert resolved_repository.games[1].catalog_id is None
        assert resolved_repository.games[1].image_url is None

    def test_detail_failure_is_error(self, catalog_config, resolved_repository, client, fixed_clock):
        client.fetch_details.return_value = None
        resolver = make_resolver(catalog_config, resolved_repository, client, fixed_clock)

        outcome = resolver.resolve(1)

        assert outcome == ResolutionOutcome("error", reason=REASON_THING_FAILED)
        assert resolved_repository.games[1].image_url == "https://img/catan.jpg"

    def test_match_without_image(self, catalog_config, fake_repository, client, fixed_clock):
        client.search.return_value = [CandidateMatch(7, "Catan", None)]
        client.fetch_details.return_value = CatalogImages()
        resolver = make_resolver(catalog_config, fake_repository, client, fixed_clock)

        outcome = resolver.resolve(1)

        assert outcome.status == "missing"
        game = fake_repository.games[1]
        assert game.catalog_id == 7
        assert game.resolution_status == "missing"
        assert game.image_url is None

    def test_ok_can_regress_to_missing(self, catalog_config, resolved_repository, client, fixed_clock):
        client.search.return_value = []
        resolver = make_resolver(catalog_config, resolved_repository, client, fixed_clock)

        resolver.resolve(1)

        assert resolved_repository.games[1].resolution_status == "missing"

    def test_unexpected_exception_becomes_error(self, catalog_config, resolved_repository, client, fixed_clock):
        client.search.side_effect = RuntimeError("parser exploded")
        resolver = make_resolver(catalog_config, resolved_repository, client, fixed_clock)

        outcome = resolver.resolve(1)

        assert outcome == ResolutionOutcome("error", reason=REASON_UNEXPECTED)
        assert resolved_repository.games[1].resolution_status == "error"
        assert resolved_repository.games[1].image_url == "https://img/catan.jpg"

    def test_unknown_game_raises(self, catalog_config, fake_repository, client, fixed_clock):
        resolver = make_resolver(catalog_config, fake_repository, client, fixed_clock)

        with pytest.raises(GameNotFoundException):
            resolver.resolve(404)
        client.search.assert_not_called()

    def test_failed_record_read_becomes_error(self, catalog_config, client, fixed_clock):
        repository = MagicMock()
        repository.get_record.side_effect = RuntimeError("db read failed")
        resolver = make_resolver(catalog_config, repository, client, fixed_clock)

        outcome = resolver.resolve(1)

        assert outcome == ResolutionOutcome("error", reason=REASON_UNEXPECTED)
        client.search.assert_not_called()
        repository.write_resolution.assert_called_once_with(
            1, {"resolution_status": "error", "status_updated_at": FIXED_NOW}
        )

    def test_failed_read_when_disabled_becomes_error(self, disabled_config, client, fixed_clock):
        repository = MagicMock()
        repository.get_record.side_effect = RuntimeError("db read failed")
        resolver = make_resolver(disabled_config, repository, client, fixed_clock)

        assert resolver.resolve(1).status == "error"

    def test_mark_error_safely_swallows_write_failure(self, catalog_config, client, fixed_clock):
        repository = MagicMock()
        repository.write_resolution.side_effect = RuntimeError("db down")
        resolver = make_resolver(catalog_config, repository, client, fixed_clock)

        outcome = resolver.mark_error_safely(1, reason="x")

        assert outcome == ResolutionOutcome("error", reason="x")


class TestResolutionOutcome:
    def test_to_dict_includes_catalog_fields_when_matched(self):
        outcome = ResolutionOutcome("ok", 13, "https://img/a.jpg", "https://img/t.jpg")
        assert outcome.to_dict() == {
            "status": "ok",
            "catalogId": 13,
            "imageUrl": "https://img/a.jpg",
            "thumbnailUrl": "https://img/t.jpg",
        }

    def test_to_dict_error_has_reason(self):
        assert ResolutionOutcome("error", reason="catalog search failed").to_dict() == {
            "status": "error",
            "reason": "catalog search failed",
        }
