"""
Game Routes - catalog art trigger for a single game
"""

from flask import Blueprint, current_app, jsonify, request
import structlog

from api_responses import success_response, not_found_response, validation_error_response
from constants import STATUS_ERROR
from exceptions import GameNotFoundException
from repositories.games_repository import GamesRepository
from services.art_resolution import ArtResolver, REASON_UNEXPECTED

logger = structlog.get_logger("routes.games")

games_bp = Blueprint("games", __name__, url_prefix="/api")


def get_art_resolver():
    return ArtResolver(current_app.config["CATALOG_CONFIG"], GamesRepository)


@games_bp.route("/games/<int:game_id>/catalog-art", methods=["GET"])
def get_catalog_art(game_id):
    """Current persisted resolution fields for a game"""
    game = GamesRepository.get_by_id(game_id)
    if not game:
        return not_found_response("Game", game_id)
    return success_response(dict(game.resolution_fields(), id=game.id, name=game.name))


@games_bp.route("/games/<int:game_id>/fetch-catalog-art", methods=["POST"])
def fetch_catalog_art(game_id):
    """
    Resolve catalog id and box art for a game, typically right after it was
    created or renamed. Accepts an optional {"name": "..."} to search under a
    different name than the stored one.
    """
    body = request.get_json(silent=True) or {}
    name_override = body.get("name") if isinstance(body, dict) else None
    if name_override is not None and (not isinstance(name_override, str) or not name_override.strip()):
        return validation_error_response("name", "must be a non-empty string")

    resolver = get_art_resolver()
    try:
        outcome = resolver.resolve(game_id, name_override)
    except GameNotFoundException:
        return not_found_response("Game", game_id)
    except Exception as e:
        logger.error(f"Catalog art fetch error for game {game_id}: {e}", exc_info=True)
        resolver.mark_error_safely(game_id, reason=REASON_UNEXPECTED)
        return jsonify({"status": STATUS_ERROR, "reason": REASON_UNEXPECTED}), 500

    if outcome.status == STATUS_ERROR:
        status_code = 500 if outcome.reason == REASON_UNEXPECTED else 502
        return jsonify(outcome.to_dict()), status_code

    return jsonify(outcome.to_dict()), 200
