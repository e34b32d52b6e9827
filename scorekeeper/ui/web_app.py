"""
Web application module for the league scorekeeper.

This module contains the Flask server that exposes the scoring commands and
queries as JSON endpoints for the scorer's browser.
"""
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request

from ..services import (
    CheckInPlayer, CommandDispatcher, DecrementStat, FinishDefaultGame,
    FinishGame, GameSessionService, IncrementStat, InvalidPlayerError,
    InvalidStatError, InvalidTeamError, InvalidTransitionError,
    NoActivePlayerError, RecordPoint, SelectPlayer, ServiceFactory,
    SetPlayerOfGame, StartScoring, BackToScoring, BackToSelection,
    TakeTimeout, UndoLastPoint,
)
from ..services.game_commands import Command
from ..utils import APP_TITLE, get_logger, set_game_id

logger = get_logger(__name__)


class BadRequest(ValueError):
    """Request body is missing a field or has a field of the wrong type."""


class NoGameLoaded(InvalidTransitionError):
    """A session endpoint was called before a game was loaded."""


class ScorekeeperAppState:
    """
    State holder for the web application.

    One scoring session at a time; loading a game replaces the previous one.
    """

    def __init__(self, service_factory: ServiceFactory):
        self.service_factory = service_factory
        self.service: Optional[GameSessionService] = None
        self.dispatcher: Optional[CommandDispatcher] = None

    def load(self, game_id: str) -> GameSessionService:
        self.service = self.service_factory.create_session_service(game_id)
        self.dispatcher = CommandDispatcher(self.service)
        return self.service

    def require_service(self) -> GameSessionService:
        if self.service is None:
            raise NoGameLoaded("No game loaded")
        return self.service

    def dispatch(self, command: Command) -> Any:
        self.require_service()
        result = self.dispatcher.dispatch(command)

        settings = self.service_factory.settings
        if settings.AUTOSAVE:
            self.service_factory.get_persistence_service().auto_save(
                self.service.session, settings.AUTOSAVE_DIR, keep=settings.AUTOSAVE_KEEP
            )
        return result


def _error_response(exc: Exception) -> Tuple[Any, int]:
    if isinstance(exc, (InvalidPlayerError, InvalidTeamError)):
        status = 404
    elif isinstance(exc, (NoActivePlayerError, InvalidStatError, InvalidTransitionError, BadRequest)):
        status = 400
    else:
        logger.exception("Unhandled error in request %s %s", request.method, request.path)
        status = 500
    return jsonify({"success": False, "error": str(exc)}), status


def _body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    return data


def _required(data: Dict[str, Any], key: str) -> Any:
    value = data.get(key)
    if value is None or value == "":
        raise BadRequest(f"Field {key!r} is required")
    return value


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise BadRequest(f"Field {key!r} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequest(f"Field {key!r} must be an integer") from None


def create_app(service_factory: Optional[ServiceFactory] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        service_factory: Factory used to open sessions; built from settings if omitted

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app_state = ScorekeeperAppState(service_factory or ServiceFactory())
    app.extensions["scorekeeper"] = app_state

    def _stat_payload(player_id: Optional[str]) -> Optional[dict]:
        if not player_id:
            return None
        stat = app_state.require_service().ledger.stat_for(player_id)
        return stat.to_dict() if stat else None

    def _mutation_response(player_id: Optional[str], **extra) -> Any:
        service = app_state.require_service()
        player_id = player_id or service.session.active_player_id
        return jsonify({
            "success": True,
            "stat": _stat_payload(player_id),
            "state": service.snapshot(),
            **extra,
        })

    @app.before_request
    def bind_game_id():
        if app_state.service is not None:
            set_game_id(app_state.service.session.game_id)

    @app.route("/", methods=["GET"])
    def index():
        return jsonify({"success": True, "app": APP_TITLE})

    # ==================== Session ==================== #

    @app.route("/api/game/load", methods=["POST"])
    def load_game():
        """Open a game from the league service."""
        try:
            game_id = str(_required(_body(), "game_id"))
            service = app_state.load(game_id)
            return jsonify({"success": True, "state": service.snapshot()})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/state", methods=["GET"])
    def get_state():
        """Session snapshot with both rosters."""
        try:
            service = app_state.require_service()
            session = service.session
            return jsonify({
                "success": True,
                "state": service.snapshot(),
                "roster": {
                    team_id: [p.to_dict() for p in session.roster_for(team_id)]
                    for team_id in session.team_ids
                },
            })
        except Exception as e:
            return _error_response(e)

    @app.route("/api/session/start", methods=["POST"])
    def start_scoring():
        try:
            app_state.dispatch(StartScoring())
            return jsonify({"success": True, "state": app_state.service.snapshot()})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/session/back-to-selection", methods=["POST"])
    def back_to_selection():
        try:
            app_state.dispatch(BackToSelection())
            return jsonify({"success": True, "state": app_state.service.snapshot()})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/session/finish", methods=["POST"])
    def finish_game():
        try:
            app_state.dispatch(FinishGame())
            return jsonify({"success": True, "state": app_state.service.snapshot()})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/session/finish-default", methods=["POST"])
    def finish_default_game():
        """Record a walkover for the given team."""
        try:
            winner = str(_required(_body(), "winner_team_id"))
            app_state.dispatch(FinishDefaultGame(winner))
            return jsonify({"success": True, "state": app_state.service.snapshot()})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/session/back-to-scoring", methods=["POST"])
    def back_to_scoring():
        try:
            app_state.dispatch(BackToScoring())
            return jsonify({"success": True, "state": app_state.service.snapshot()})
        except Exception as e:
            return _error_response(e)

    # ==================== Players ==================== #

    @app.route("/api/players/active", methods=["GET"])
    def get_active_player():
        try:
            service = app_state.require_service()
            player_id = service.session.active_player_id
            player = service.session.roster.get(player_id) if player_id else None
            return jsonify({
                "success": True,
                "player": player.to_dict() if player else None,
                "stat": _stat_payload(player_id),
            })
        except Exception as e:
            return _error_response(e)

    @app.route("/api/players/active", methods=["POST"])
    def set_active_player():
        """Select the player receiving stat input."""
        try:
            player_id = str(_required(_body(), "player_id"))
            player = app_state.dispatch(SelectPlayer(player_id))
            return jsonify({
                "success": True,
                "player": player.to_dict(),
                "is_home": player.team_id == app_state.service.session.home_team_id,
            })
        except Exception as e:
            return _error_response(e)

    @app.route("/api/players/check-in", methods=["POST"])
    def check_in_player():
        try:
            data = _body()
            number = data.get("jersey_number")
            command = CheckInPlayer(
                player_id=str(_required(data, "player_id")),
                team_id=str(_required(data, "team_id")),
                name=str(data.get("name") or ""),
                jersey_number=_as_int(number, "jersey_number") if number is not None else None,
            )
            stat = app_state.dispatch(command)
            return jsonify({"success": True, "stat": stat.to_dict()})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/player-of-game", methods=["POST"])
    def set_player_of_game():
        try:
            player_id = str(_required(_body(), "player_id"))
            app_state.dispatch(SetPlayerOfGame(player_id))
            return jsonify({"success": True, "state": app_state.service.snapshot()})
        except Exception as e:
            return _error_response(e)

    # ==================== Scoring ==================== #

    @app.route("/api/points", methods=["POST"])
    def record_point():
        """Record a 1, 2 or 3 point event."""
        try:
            data = _body()
            value = _as_int(_required(data, "value"), "value")
            player_id = data.get("player_id")
            app_state.dispatch(RecordPoint(value, player_id))
            return _mutation_response(player_id)
        except Exception as e:
            return _error_response(e)

    @app.route("/api/points/undo", methods=["POST"])
    def undo_last_point():
        try:
            player_id = _body().get("player_id")
            future = app_state.dispatch(UndoLastPoint(player_id))
            return _mutation_response(player_id, undone=future is not None)
        except Exception as e:
            return _error_response(e)

    @app.route("/api/stats/<stat>/increment", methods=["POST"])
    def increment_stat(stat: str):
        try:
            player_id = _body().get("player_id")
            app_state.dispatch(IncrementStat(stat, player_id))
            return _mutation_response(player_id)
        except Exception as e:
            return _error_response(e)

    @app.route("/api/stats/<stat>/decrement", methods=["POST"])
    def decrement_stat(stat: str):
        try:
            player_id = _body().get("player_id")
            future = app_state.dispatch(DecrementStat(stat, player_id))
            return _mutation_response(player_id, changed=future is not None)
        except Exception as e:
            return _error_response(e)

    @app.route("/api/timeouts", methods=["POST"])
    def take_timeout():
        try:
            data = _body()
            taken = app_state.dispatch(TakeTimeout(
                team_id=str(_required(data, "team_id")),
                half=str(_required(data, "half")),
            ))
            return jsonify({
                "success": True,
                "taken": taken,
                "timeouts": app_state.service.timeouts.get_timeout_summary(),
            })
        except Exception as e:
            return _error_response(e)

    # ==================== Queries ==================== #

    @app.route("/api/teams/stats", methods=["GET"])
    def get_team_stats():
        try:
            totals = app_state.require_service().team_stats()
            return jsonify({
                "success": True,
                "teams": {team_id: t.to_dict() for team_id, t in totals.items()},
            })
        except Exception as e:
            return _error_response(e)

    @app.route("/api/summary", methods=["GET"])
    def get_summary():
        """Box score for the Summary view."""
        try:
            summary = app_state.require_service().summary()
            return jsonify({"success": True, "summary": summary.to_dict()})
        except Exception as e:
            return _error_response(e)

    @app.route("/api/notifications", methods=["GET"])
    def get_notifications():
        """Drain pending sync-failure notices."""
        try:
            notices = app_state.service_factory.get_adapter().drain_notices()
            return jsonify({
                "success": True,
                "notifications": [n.to_dict() for n in notices],
            })
        except Exception as e:
            return _error_response(e)

    @app.route("/api/command-history", methods=["GET"])
    def get_command_history():
        try:
            history = app_state.dispatcher.get_command_history() if app_state.dispatcher else []
            return jsonify({"success": True, "history": history})
        except Exception as e:
            return _error_response(e)

    return app


def run_web_app(host: str = "127.0.0.1", port: int = 8123,
                service_factory: Optional[ServiceFactory] = None) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
        service_factory: Factory used to open sessions
    """
    app = create_app(service_factory)
    logger.info("Starting %s on http://%s:%d", APP_TITLE, host, port)
    try:
        app.run(host=host, port=port, debug=False)
    finally:
        app.extensions["scorekeeper"].service_factory.shutdown()
