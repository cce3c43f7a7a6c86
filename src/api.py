"""
HTTP API Module.

Flask application exposing the aggregation service as the JSON endpoints
the dashboard calls:

  GET /api/aggregate?username=        -> prStats, mergeMetrics, contributedRepos, activityByDay
  GET /api/stats?username=            -> PR stats
  GET /api/merge-metrics?username=    -> merge metrics
  GET /api/contributed-repos?username=
  GET /api/activity?username=&weeks=  -> weekly timeline and trend
  GET /api/open-prs?username=         -> {"pullRequests": [...]}
  GET /api/repos?username=
  GET /api/repos/<owner>/<name>/stats
  GET /healthz
"""

import re
from typing import Any, Optional

from flask import Flask, jsonify, request
from pydantic import BaseModel

from config import logger
from analyzers.aggregation import AggregationError, AggregationService

# GitHub allows alphanumerics and hyphens, 39 characters at most
USERNAME_RE = re.compile(r"^[A-Za-z0-9-]{1,39}$")
REPO_PART_RE = re.compile(r"^[A-Za-z0-9._-]{1,100}$")


class InvalidRequestError(ValueError):
    """The request parameters were missing or malformed."""


def _to_json(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [_to_json(item) for item in value]
    return value


def create_app(
    service: AggregationService, default_username: Optional[str] = None
) -> Flask:
    """
    Build the Flask application.

    Args:
        service (AggregationService): Service answering the queries
        default_username (Optional[str]): User used when a request names none

    Returns:
        Flask: Configured application
    """
    app = Flask(__name__)

    def username_param() -> str:
        username = (request.args.get("username") or default_username or "").strip()
        if not username:
            raise InvalidRequestError("Missing 'username'.")
        if not USERNAME_RE.match(username):
            raise InvalidRequestError("Invalid GitHub username format.")
        return username

    @app.errorhandler(InvalidRequestError)
    def handle_invalid_request(e: InvalidRequestError):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(AggregationError)
    def handle_aggregation_error(e: AggregationError):
        logger.error({"message": "Request failed", "path": request.path, "error": str(e)})
        return jsonify({"error": str(e)}), 502

    @app.route("/api/aggregate", methods=["GET"])
    async def aggregate():
        return jsonify(_to_json(await service.get_aggregate_summary(username_param())))

    @app.route("/api/stats", methods=["GET"])
    async def pr_stats():
        return jsonify(_to_json(await service.get_aggregate_pr_stats(username_param())))

    @app.route("/api/merge-metrics", methods=["GET"])
    async def merge_metrics():
        return jsonify(
            _to_json(await service.get_aggregate_merge_metrics(username_param()))
        )

    @app.route("/api/contributed-repos", methods=["GET"])
    async def contributed_repos():
        return jsonify(_to_json(await service.get_contributed_repos(username_param())))

    @app.route("/api/activity", methods=["GET"])
    async def activity():
        username = username_param()
        weeks = request.args.get("weeks", type=int)
        if weeks is not None and not 1 <= weeks <= 104:
            raise InvalidRequestError("'weeks' must be between 1 and 104.")
        return jsonify(_to_json(await service.get_activity(username, weeks)))

    @app.route("/api/open-prs", methods=["GET"])
    async def open_prs():
        prs = await service.get_open_prs(username_param())
        return jsonify({"pullRequests": _to_json(prs)})

    @app.route("/api/repos", methods=["GET"])
    async def repositories():
        return jsonify(_to_json(await service.get_repositories(username_param())))

    @app.route("/api/repos/<owner>/<name>/stats", methods=["GET"])
    async def repository_stats(owner: str, name: str):
        if not (REPO_PART_RE.match(owner) and REPO_PART_RE.match(name)):
            raise InvalidRequestError("Invalid repository name.")
        full_name = f"{owner}/{name}"
        stats = await service.get_repo_pr_stats(full_name)
        merge = await service.get_repo_merge_metrics(full_name)
        return jsonify(
            {"repository": full_name, "prStats": _to_json(stats), "mergeMetrics": _to_json(merge)}
        )

    @app.route("/healthz", methods=["GET"])
    def healthz():
        return jsonify({"ok": True})

    return app
