"""Error handlers for the application (JSON only)."""
from flask import jsonify
from werkzeug.exceptions import HTTPException


def _error(status: int, title: str, message: str):
    return jsonify({"error": title, "message": message}), status


def register_error_handlers(app):
    """Register error handlers with the Flask app."""

    @app.errorhandler(400)
    def bad_request(error):
        """Handle 400 Bad Request errors."""
        description = getattr(error, "description", None) or "Malformed request"
        return _error(400, "Bad Request", str(description))

    @app.errorhandler(401)
    def unauthorized(error):
        """Handle 401 Unauthorized errors."""
        return _error(401, "Unauthorized", "Authentication required")

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found errors."""
        description = getattr(error, "description", None)
        if not description or str(description).startswith("The requested URL was not found"):
            description = "Resource not found"
        return _error(404, "Not Found", str(description))

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 Method Not Allowed errors."""
        return _error(405, "Method Not Allowed", "Method not allowed for this endpoint")

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 Internal Server Error."""
        app.logger.error(f"Internal error: {error}", exc_info=True)
        return _error(500, "Internal Server Error", "An unexpected error occurred")

    @app.errorhandler(Exception)
    def handle_exception(error):
        """Handle uncaught exceptions."""
        # Pass through HTTP errors
        if isinstance(error, HTTPException):
            return error

        app.logger.error(f"Unhandled exception: {error}", exc_info=True)
        return _error(500, "Internal Server Error", "An unexpected error occurred")
