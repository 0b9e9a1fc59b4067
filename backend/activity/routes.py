from flask import jsonify, request

from activity.summary import dashboard
from profiles.routes import orchestrator


def get_progress():
    records = orchestrator().store.list_progress(request.user_id)
    return jsonify({"progress": [p.to_dict() for p in records]})


def get_platform_progress(platform):
    progress = orchestrator().store.get_progress(request.user_id, platform)
    if progress is None:
        return jsonify({"error": f"No progress recorded for {platform}"}), 404
    return jsonify({"progress": progress.to_dict()})


def add_problem():
    data = request.get_json(silent=True) or {}
    platform = data.get("platform")
    problem = data.get("problem")
    if not platform or not isinstance(problem, dict):
        return jsonify({"error": "Missing 'platform' or 'problem'"}), 400
    progress = orchestrator().record_problem(request.user_id, platform, problem)
    return jsonify({"progress": progress.to_dict()}), 201


def resync_progress():
    records = orchestrator().resync_progress(request.user_id)
    return jsonify({"progress": [p.to_dict() for p in records]})


def get_dashboard():
    orch = orchestrator()
    return jsonify(dashboard(orch.store, request.user_id, now=orch.clock()))


def refresh_dashboard():
    orch = orchestrator()
    report = orch.refresh(request.user_id)
    body = dashboard(orch.store, request.user_id, now=orch.clock())
    body["sync"] = report.to_dict()
    return jsonify(body)
