from flask import current_app, jsonify, request

from database.store import RecordStore
from profiles.sync import SyncOrchestrator


def orchestrator() -> SyncOrchestrator:
    return SyncOrchestrator(RecordStore(), fetcher=current_app.config.get("PROFILE_FETCHER"))


def get_handles():
    handles = orchestrator().store.list_handles(request.user_id)
    return jsonify({"handles": [h.to_dict() for h in handles]})


def put_handles():
    data = request.get_json(silent=True) or {}
    entries = data.get("handles")
    if not isinstance(entries, list):
        return jsonify({"error": "Missing 'handles' list in request body"}), 400
    handles = orchestrator().set_handles(request.user_id, entries)
    return jsonify({"handles": [h.to_dict() for h in handles]})


def add_handle():
    data = request.get_json(silent=True) or {}
    platform = data.get("platform")
    handle = data.get("handle")
    if not platform or not handle:
        return jsonify({"error": "Missing 'platform' or 'handle'"}), 400
    entry = orchestrator().add_handle(request.user_id, platform, handle,
                                      verify=bool(data.get("verify", False)))
    return jsonify({"handle": entry.to_dict()}), 201


def remove_handle(platform):
    orchestrator().remove_handle(request.user_id, platform)
    return jsonify({"success": True})


def sync_all():
    report = orchestrator().sync_all(request.user_id)
    return jsonify(report.to_dict())


def sync_platform(platform):
    profile = orchestrator().sync_one(request.user_id, platform)
    return jsonify({"profile": profile.to_dict()})


def get_profiles():
    profiles = orchestrator().store.list_profiles(request.user_id)
    return jsonify({"profiles": [p.to_dict() for p in profiles]})


def get_profile(platform):
    profile = orchestrator().store.get_profile(request.user_id, platform)
    if profile is None:
        return jsonify({"error": f"No synced profile for {platform}"}), 404
    return jsonify({"profile": profile.to_dict()})
