import uuid
from functools import wraps

from flask import jsonify, request
from werkzeug.security import check_password_hash, generate_password_hash

from database.db import get_db


def _bearer_token():
    auth = request.headers.get("Authorization")
    if not auth or not auth.startswith("Bearer "):
        return None
    return auth.split(" ", 1)[1]


def session_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        session_id = _bearer_token()
        if not session_id:
            return jsonify({"error": "Token is missing"}), 403
        db = get_db()
        row = db.execute(
            "SELECT user_id FROM sessions WHERE session_id = ?",
            (session_id,)
        ).fetchone()
        db.close()
        if not row:
            return jsonify({"error": "Invalid or expired session"}), 401
        request.user_id = row["user_id"]
        return f(*args, **kwargs)
    return decorated_function


def api_register():
    data = request.get_json(silent=True) or {}
    username = (data.get("username") or "").strip()
    password_raw = data.get("password")
    if not username or not password_raw:
        return jsonify({"error": "Missing username or password"}), 400

    db = get_db()
    if db.execute("SELECT 1 FROM users WHERE username = ?", (username,)).fetchone():
        db.close()
        return jsonify({"error": "Username taken"}), 409
    db.execute(
        "INSERT INTO users (username, password) VALUES (?, ?)",
        (username, generate_password_hash(password_raw))
    )
    db.commit()
    db.close()
    return jsonify({"message": "User registered successfully"}), 201


def api_login():
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password") or ""

    db = get_db()
    user = db.execute("SELECT id, password FROM users WHERE username = ?", (username,)).fetchone()
    if not user or not user["password"] or not check_password_hash(user["password"], password):
        db.close()
        return jsonify({"success": False, "error": "Invalid credentials"}), 401

    session_id = str(uuid.uuid4())
    db.execute(
        "INSERT INTO sessions (session_id, user_id) VALUES (?, ?)",
        (session_id, user["id"])
    )
    db.commit()
    db.close()
    return jsonify({"success": True, "token": session_id})


def whoami():
    db = get_db()
    user = db.execute("SELECT username FROM users WHERE id = ?", (request.user_id,)).fetchone()
    db.close()
    if user:
        return jsonify({"username": user["username"]})
    return jsonify({"error": "User not found"}), 404


def api_logout():
    db = get_db()
    db.execute("DELETE FROM sessions WHERE session_id = ?", (_bearer_token(),))
    db.commit()
    db.close()
    return jsonify({"success": True, "message": "Logged out successfully."})
