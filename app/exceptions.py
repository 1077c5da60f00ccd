"""
BoardShelf - Custom Exceptions and Exception Handlers
"""
import structlog
from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = structlog.get_logger('exceptions')


class BoardShelfException(Exception):
    """Base exception for BoardShelf"""
    def __init__(self, message: str, code: str = "BOARDSHELF_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self):
        return {
            'error': True,
            'code': self.code,
            'message': self.message
        }


class GameNotFoundException(BoardShelfException):
    """Raised when a game record does not exist"""
    def __init__(self, game_id):
        super().__init__(f"Game with ID '{game_id}' not found", code="NOT_FOUND")
        self.game_id = game_id


class SettingsException(BoardShelfException):
    """settings.yaml holds a value the app cannot run with"""
    def __init__(self, errors):
        self.errors = errors
        details = "; ".join(f"{e['path']}: {e['error']}" for e in errors)
        super().__init__(f"Invalid settings: {details}", code="INVALID_SETTINGS")


class CatalogDisabledException(BoardShelfException):
    """The catalog credential is not configured"""
    def __init__(self, message: str = "Catalog integration is disabled (no API token configured)"):
        super().__init__(message, code="CATALOG_DISABLED")
        logger.warning(message)


def register_exception_handlers(app):
    """Register exception handlers with Flask app"""

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle HTTP exceptions"""
        return jsonify({
            'error': True,
            'code': e.name.upper().replace(' ', '_'),
            'message': e.description
        }), e.code

    @app.errorhandler(BoardShelfException)
    def handle_boardshelf_exception(e):
        """Handle BoardShelf custom exceptions"""
        return jsonify(e.to_dict()), 400

    @app.errorhandler(GameNotFoundException)
    def handle_not_found_exception(e):
        """Handle missing game records"""
        return jsonify(e.to_dict()), 404

    @app.errorhandler(CatalogDisabledException)
    def handle_catalog_disabled_exception(e):
        """Handle calls that need a catalog credential"""
        return jsonify(e.to_dict()), 409

    @app.errorhandler(Exception)
    def handle_generic_exception(e):
        """Handle all other exceptions"""
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify({
            'error': True,
            'code': 'INTERNAL_ERROR',
            'message': 'An unexpected error occurred'
        }), 500
